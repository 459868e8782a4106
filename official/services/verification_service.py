import logging
import secrets
from typing import Tuple

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from official.models import User
from official.services.sms_service import SmsClient, SmsError, UnsupportedRegionError, verification_message
from official.services.user_service import get_user_by_phone
from official.utils.phone import (
    UNSUPPORTED_COUNTRY_MESSAGE,
    is_phone_number_from_allowed_country,
    normalize_phone_number,
)

logger = logging.getLogger(__name__)

def generate_verification_code() -> str:
    """Uniform 4-digit code in 1000-9999."""
    return str(1000 + secrets.randbelow(9000))

async def issue_verification_code(db: AsyncSession, sms: SmsClient, phone: str) -> Tuple[User, str, bool]:
    """
    Issue a fresh code for a phone number and text it.

    The identity is created (unverified) when missing. The code is committed
    before the SMS goes out, so if delivery fails the stored code stays
    valid even though nobody received it.

    Args:
        db: Database session
        sms: SMS client used for delivery
        phone: Raw or normalized phone number

    Returns:
        Tuple of (user, code, is_existing_user)

    Raises:
        UnsupportedRegionError: phone is outside the allow-list; nothing is written
        SmsError: delivery failed after the code was stored
    """
    normalized = normalize_phone_number(phone)
    if not is_phone_number_from_allowed_country(normalized):
        raise UnsupportedRegionError(normalized)

    user = await get_user_by_phone(db, normalized)
    is_existing_user = user is not None
    if user is None:
        user = User(phone=normalized, verified=False)
        db.add(user)

    code = generate_verification_code()
    user.verification_code = code
    await db.commit()
    logger.info(f"Issued verification code for {normalized} (existing user: {is_existing_user})")

    await sms.send(normalized, verification_message(code))
    return user, code, is_existing_user

def check_verification_code(user: User, code: str) -> bool:
    if not user.verification_code or code is None:
        return False
    return secrets.compare_digest(user.verification_code, str(code))

def mark_verified(user: User) -> None:
    user.verification_code = None
    user.verified = True

def sms_error_to_http(error: SmsError) -> HTTPException:
    """Translate an SMS failure into the HTTP error a client should see."""
    if isinstance(error, UnsupportedRegionError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=UNSUPPORTED_COUNTRY_MESSAGE)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Failed to send verification code. Please try again.",
    )

import logging

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from official.schemas.users import SignupRequest, SignupResponse, UserResponse, VerifyRequest, VerifyResponse
from official.services.security import create_access_token
from official.services.sms_service import SmsClient, SmsError
from official.services.user_service import get_user_by_phone
from official.services.verification_service import (
    check_verification_code,
    issue_verification_code,
    mark_verified,
    sms_error_to_http,
)
from official.utils.phone import normalize_phone_number

logger = logging.getLogger(__name__)

async def signup(request: SignupRequest, db: AsyncSession, sms: SmsClient) -> SignupResponse:
    """
    Start signup or login for a phone number by texting it a code.

    Verified users get a login code; everyone else gets a signup code and,
    if new, an unverified identity.

    Raises:
        HTTPException: 400 for a missing or unsupported phone, 500 when the SMS fails
    """
    if not request.phone or not request.phone.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Phone number is required")

    normalized = normalize_phone_number(request.phone)
    existing = await get_user_by_phone(db, normalized)
    is_login = existing is not None and existing.verified

    try:
        _, _, is_existing_user = await issue_verification_code(db, sms, normalized)
    except SmsError as e:
        logger.error(f"SMS sending failed for {normalized}: {e}")
        raise sms_error_to_http(e)

    message = "Login verification code sent successfully" if is_login else "Verification code sent successfully"
    return SignupResponse(message=message, phone=normalized, is_existing_user=is_existing_user)

async def verify(request: VerifyRequest, db: AsyncSession) -> VerifyResponse:
    """
    Exchange a phone number and code for a session token.

    Raises:
        HTTPException: 400 for a missing field or wrong code, 404 for an unknown phone
    """
    if not request.phone or not request.code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Phone number and verification code are required"
        )

    normalized = normalize_phone_number(request.phone)
    user = await get_user_by_phone(db, normalized)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if not check_verification_code(user, request.code):
        logger.warning(f"Invalid verification code presented for {normalized}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid verification code")

    mark_verified(user)
    await db.commit()
    logger.info(f"User {user.id} verified")

    token = create_access_token(user.id, user.phone)
    return VerifyResponse(
        message="Verification successful",
        token=token,
        user=UserResponse.model_validate(user),
    )

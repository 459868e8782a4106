import logging
from typing import Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from official.models import User
from official.schemas.users import UpdateProfileRequest
from official.utils.phone import normalize_phone_number

logger = logging.getLogger(__name__)

async def get_user_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    """
    Retrieve a user by their unique identifier.

    Args:
        db: AsyncSession - Database session for executing queries
        user_id: str - Unique identifier of the user

    Returns:
        Optional[User]: User object if found, None otherwise
    """
    query = select(User).where(User.id == user_id)
    result = await db.execute(query)
    return result.scalar_one_or_none()

async def get_user_by_phone(db: AsyncSession, phone: str) -> Optional[User]:
    """
    Retrieve a user by their phone number.

    Args:
        db: AsyncSession - Database session for executing queries
        phone: str - Phone number of the user, normalized before lookup

    Returns:
        Optional[User]: User object if found, None otherwise
    """
    query = select(User).where(User.phone == normalize_phone_number(phone))
    result = await db.execute(query)
    return result.scalar_one_or_none()

async def get_or_create_user(db: AsyncSession, phone: str) -> Tuple[User, bool]:
    """
    Look a user up by phone, creating an unverified one when missing.

    The new row is flushed but not committed; it belongs to the caller's
    transaction.

    Returns:
        Tuple of (user, created)
    """
    normalized = normalize_phone_number(phone)
    user = await get_user_by_phone(db, normalized)
    if user is not None:
        return user, False

    user = User(phone=normalized, verified=False)
    db.add(user)
    await db.flush()
    logger.info(f"Created unverified user for {normalized}")
    return user, True

async def get_current_user_info(current_user: dict, db: AsyncSession) -> User:
    """
    Load the caller with their relationships and sent invites.

    Raises:
        HTTPException: 404 if the user is missing or has not verified their phone
    """
    stmt = (
        select(User)
        .options(
            selectinload(User.relationships),
            selectinload(User.sent_invites),
        )
        .where(User.id == current_user["uid"])
    )
    result = await db.execute(stmt)
    user = result.scalar_one_or_none()

    if user is None or not user.verified:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found or is not verified"
        )
    return user

async def update_profile(request: UpdateProfileRequest, db: AsyncSession, current_user: dict) -> User:
    user = await get_current_user_info(current_user, db)

    if request.name is not None:
        name = request.name.strip()
        user.name = name or None

    await db.commit()
    logger.info(f"Updated profile for user {user.id}")
    return user

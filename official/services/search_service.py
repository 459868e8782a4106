import logging
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from official.models import Relationship, User
from official.schemas.relationships import RelationshipStatus
from official.schemas.search import SearchResult
from official.utils.phone import is_plausible_phone_number, normalize_phone_number

logger = logging.getLogger(__name__)

RELATIONSHIP_STATUS_LABELS = {
    RelationshipStatus.DATING: "Dating",
    RelationshipStatus.ENGAGED: "Engaged",
    RelationshipStatus.MARRIED: "Married",
    RelationshipStatus.SEPARATED: "Separated",
    RelationshipStatus.WIDOWED: "Widowed",
    RelationshipStatus.SITUATIONSHIP: "Situationship",
    RelationshipStatus.FRIENDS_WITH_BENEFITS: "Friends with Benefits",
    RelationshipStatus.ON_A_BREAK: "On a Break",
    RelationshipStatus.OPEN_RELATIONSHIP: "Open Relationship",
    RelationshipStatus.POLYAMOROUS: "Polyamorous",
}

async def get_relationship_status_label(db: AsyncSession, user: User | None) -> str:
    """
    Display label for a user's current relationship.

    "Unknown" for missing or unverified users, "Single" without an active
    relationship, otherwise the label of the most recent active one.
    """
    if user is None or not user.verified:
        return "Unknown"

    stmt = (
        select(Relationship)
        .where(
            Relationship.end_date.is_(None),
            Relationship.users.any(User.id == user.id),
        )
        .order_by(Relationship.created_at.desc())
    )
    result = await db.execute(stmt)
    active = result.scalars().first()
    if active is None:
        return "Single"
    return RELATIONSHIP_STATUS_LABELS[RelationshipStatus(active.status)]

async def search_user_by_phone(phone: str, db: AsyncSession) -> SearchResult:
    """
    Search for a user by phone number. A result is always returned, even
    when nobody has registered the number.

    Raises:
        HTTPException: 400 if the phone number is missing or too short
    """
    if not phone or not phone.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Phone number is required")

    normalized = normalize_phone_number(phone)
    if not is_plausible_phone_number(normalized):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid phone number format")

    result = await db.execute(select(User).where(User.phone == normalized))
    user = result.scalar_one_or_none()

    return SearchResult(
        phone=normalized,
        exists=bool(user and user.verified),
        relationship_status=await get_relationship_status_label(db, user),
        name=user.name if user else None,
    )

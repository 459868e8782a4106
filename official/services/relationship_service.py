import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from official.models import Relationship, User, utcnow
from official.schemas.relationships import EditRelationshipRequest, RelationshipStatus
from official.services.user_service import get_or_create_user
from official.utils.phone import normalize_phone_number

logger = logging.getLogger(__name__)

def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # sqlite hands back naive datetimes
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)

async def find_active_relationship(db: AsyncSession, phone_a: str, phone_b: str) -> Optional[Relationship]:
    """Return the relationship with no end date connecting both phones, if any."""
    stmt = (
        select(Relationship)
        .where(
            Relationship.end_date.is_(None),
            Relationship.users.any(User.phone == normalize_phone_number(phone_a)),
            Relationship.users.any(User.phone == normalize_phone_number(phone_b)),
        )
        .order_by(Relationship.created_at.desc())
    )
    result = await db.execute(stmt)
    return result.scalars().first()

async def form_relationship(db: AsyncSession, phone_a: str, phone_b: str) -> Tuple[Relationship, bool]:
    """
    Connect two phones with an active relationship, reusing an existing one.

    Runs inside the caller's transaction and never commits, so the invite
    transition that triggered it and the relationship row land together.
    Missing identities are created unverified.

    Args:
        db: Database session
        phone_a: First participant
        phone_b: Second participant

    Returns:
        Tuple of (relationship, created)
    """
    phone_a = normalize_phone_number(phone_a)
    phone_b = normalize_phone_number(phone_b)
    if phone_a == phone_b:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A relationship needs two different people")

    existing = await find_active_relationship(db, phone_a, phone_b)
    if existing is not None:
        logger.info(f"Relationship already exists between {phone_a} and {phone_b}")
        return existing, False

    user_a, _ = await get_or_create_user(db, phone_a)
    user_b, _ = await get_or_create_user(db, phone_b)

    relationship = Relationship(
        status=RelationshipStatus.DATING,
        start_date=utcnow(),
        end_date=None,
        users=[user_a, user_b],
    )
    db.add(relationship)
    await db.flush()
    logger.info(f"Created new relationship {relationship.id} between {phone_a} and {phone_b}")
    return relationship, True

async def get_user_relationships(db: AsyncSession, current_user: dict) -> List[Relationship]:
    stmt = (
        select(Relationship)
        .where(Relationship.users.any(User.id == current_user["uid"]))
        .order_by(Relationship.created_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())

async def edit_relationship(request: EditRelationshipRequest, db: AsyncSession, current_user: dict) -> Relationship:
    """
    Update the mutable fields of a relationship the caller belongs to.

    Raises:
        HTTPException: 404 if the relationship is unknown, 403 if the caller
            is not a participant, 400 if nothing is updated, the dates are inverted
            or reopening would give the pair a second active relationship
    """
    result = await db.execute(select(Relationship).where(Relationship.id == request.relationship_id))
    relationship = result.scalar_one_or_none()
    if relationship is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Relationship not found")

    if current_user["uid"] not in {user.id for user in relationship.users}:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You don't have permission to edit this relationship")

    updates = request.model_dump(exclude_unset=True, exclude={"relationship_id"})
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    if "start_date" in updates and updates["start_date"] is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start date cannot be removed")
    if "status" in updates and updates["status"] is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Status cannot be removed")

    start_date = _as_utc(updates.get("start_date", relationship.start_date))
    end_date = _as_utc(updates.get("end_date", relationship.end_date))
    if end_date is not None and start_date is not None and end_date < start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date cannot be before start date")

    # Reopening an ended relationship must not give the pair a second active one
    if "end_date" in updates and updates["end_date"] is None and relationship.end_date is not None:
        phone_a, phone_b = [user.phone for user in relationship.users]
        active = await find_active_relationship(db, phone_a, phone_b)
        if active is not None and active.id != relationship.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An active relationship already exists between these users"
            )

    for field, value in updates.items():
        setattr(relationship, field, value)

    await db.commit()
    logger.info(f"User {current_user['uid']} updated relationship {relationship.id}: {sorted(updates)}")
    return relationship

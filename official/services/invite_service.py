import logging
import uuid
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import and_, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from official.config import settings
from official.models import Invite, Relationship, User, utcnow
from official.schemas.invites import (
    InviteDetail,
    InviteListResponse,
    InviteResponse,
    InviteStatus,
    InviteStatusResponse,
    PublicRespondRequest,
    RelationshipType,
    RespondInviteRequest,
    SendInviteRequest,
    SendInviteResponse,
    SendVerificationRequest,
    SendVerificationResponse,
    VerifyAndAcceptRequest,
)
from official.schemas.relationships import RelationshipResponse
from official.schemas.users import (
    PublicRespondResponse,
    RespondInviteResponse,
    UserResponse,
    VerifyAndAcceptResponse,
)
from official.services.relationship_service import form_relationship
from official.services.security import create_access_token
from official.services.sms_service import SmsClient, SmsError, invite_message
from official.services.user_service import get_or_create_user, get_user_by_phone
from official.services.verification_service import (
    check_verification_code,
    issue_verification_code,
    mark_verified,
    sms_error_to_http,
)
from official.utils.phone import mask_phone_number, normalize_phone_number

logger = logging.getLogger(__name__)

RESPONSE_DECISIONS = (InviteStatus.ACCEPTED, InviteStatus.DECLINED)

ACCEPTED_MESSAGE = "Relationship confirmed successfully! You are now officially connected."
DECLINED_MESSAGE = "Invite declined successfully."

def parse_relationship_type(value: Optional[str]) -> RelationshipType:
    """Case-insensitive relationship type, stored upper-case."""
    try:
        return RelationshipType((value or "").strip().upper())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid relationship type")

def parse_decision(value: Optional[str]) -> InviteStatus:
    decision = (value or "").strip().upper()
    if decision not in (s.value for s in RESPONSE_DECISIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid response. Must be ACCEPTED or DECLINED"
        )
    return InviteStatus(decision)

def ensure_pending(invite: Invite) -> None:
    """Reject any action on an invite that has left PENDING, naming its status."""
    if invite.status != InviteStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "This invite is no longer active",
                "status": invite.status.value,
            },
        )

def _insert_for(db: AsyncSession):
    # ON CONFLICT lives in the dialect-specific insert constructs
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert

async def get_invite(db: AsyncSession, invite_id: str, for_update: bool = False) -> Invite:
    """
    Fetch an invite by id.

    Args:
        db: Database session
        invite_id: Invite identifier
        for_update: Lock the row for the rest of the transaction

    Raises:
        HTTPException: 404 if the invite does not exist
    """
    stmt = select(Invite).where(Invite.id == invite_id).execution_options(populate_existing=True)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    invite = result.scalar_one_or_none()
    if invite is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite not found")
    return invite

async def transition_invite(db: AsyncSession, invite: Invite, new_status: InviteStatus) -> Invite:
    """
    Move a PENDING invite to a terminal status.

    The UPDATE is guarded on status = PENDING, so when two requests race on
    the same invite only the first one changes the row and the second gets
    the "no longer active" error.
    """
    if new_status == InviteStatus.PENDING:
        raise ValueError("Invites can only transition out of PENDING")
    ensure_pending(invite)

    stmt = (
        update(Invite)
        .where(Invite.id == invite.id, Invite.status == InviteStatus.PENDING)
        .values(status=new_status, updated_at=utcnow())
    )
    result = await db.execute(stmt)
    if result.rowcount != 1:
        await db.rollback()
        current = await get_invite(db, invite.id)
        ensure_pending(current)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Invite was modified concurrently")

    await db.refresh(invite)
    logger.info(f"Invite {invite.id} moved to {new_status.value}")
    return invite

async def _find_pending_between(db: AsyncSession, phone_a: str, phone_b: str) -> Optional[Invite]:
    stmt = select(Invite).where(
        or_(
            and_(Invite.sender_phone == phone_a, Invite.recipient_phone == phone_b),
            and_(Invite.sender_phone == phone_b, Invite.recipient_phone == phone_a),
        ),
        Invite.status == InviteStatus.PENDING,
    )
    result = await db.execute(stmt)
    return result.scalars().first()

async def _upsert_invite(
    db: AsyncSession,
    sender_phone: str,
    recipient_phone: str,
    relationship_type: RelationshipType,
    message: Optional[str],
) -> Optional[str]:
    """
    Insert the (sender, recipient) invite or reopen a terminal one. A reopened
    invite is dated as new so it lists with the invites sent after it.

    Returns the invite id, or None when the existing row is still PENDING.
    """
    now = utcnow()
    insert = _insert_for(db)
    stmt = insert(Invite).values(
        id=str(uuid.uuid4()),
        sender_phone=sender_phone,
        recipient_phone=recipient_phone,
        relationship_type=relationship_type,
        status=InviteStatus.PENDING,
        message=message,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["sender_phone", "recipient_phone"],
        set_={
            "status": InviteStatus.PENDING,
            "relationship_type": relationship_type,
            "message": message,
            "created_at": now,
            "updated_at": now,
        },
        where=Invite.status != InviteStatus.PENDING,
    ).returning(Invite.id)

    result = await db.execute(stmt)
    return result.scalar_one_or_none()

async def _notify_recipient(sms: SmsClient, invite: Invite, sender: Optional[User]) -> None:
    """Best-effort invite SMS; failures are logged and never undo the invite."""
    sender_label = (sender.name if sender and sender.name else None) or invite.sender_phone
    link = f"{settings.invite_link_base_url.rstrip('/')}/{invite.id}"
    try:
        await sms.send(invite.recipient_phone, invite_message(sender_label, invite.relationship_type.value, link))
    except SmsError as e:
        logger.warning(f"Failed to send invite SMS for invite {invite.id}: {e}")

async def send_invite(request: SendInviteRequest, db: AsyncSession, sms: SmsClient, current_user: dict) -> SendInviteResponse:
    """
    Create an invite from the caller to a recipient phone number.

    Args:
        request: Recipient phone, relationship type and optional message
        db: Database session
        sms: SMS client for the recipient notification
        current_user: Authenticated caller

    Returns:
        SendInviteResponse with the PENDING invite

    Raises:
        HTTPException: 400 for an invalid type, a self-invite or a pair that
            already has a PENDING invite in either direction
    """
    sender_phone = normalize_phone_number(current_user["phone"])
    if not request.recipient_phone or not request.recipient_phone.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Recipient phone number and relationship type are required"
        )
    relationship_type = parse_relationship_type(request.relationship_type)
    recipient_phone = normalize_phone_number(request.recipient_phone)

    if sender_phone == recipient_phone:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot send invite to yourself")

    sender = await get_user_by_phone(db, sender_phone)
    if sender is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    pending_error = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="You already have a pending invite with this phone number"
    )
    if await _find_pending_between(db, sender_phone, recipient_phone):
        raise pending_error

    try:
        invite_id = await _upsert_invite(db, sender_phone, recipient_phone, relationship_type, request.message)
    except IntegrityError:
        # Lost a race against a concurrent insert for the same pair
        await db.rollback()
        raise pending_error
    if invite_id is None:
        await db.rollback()
        raise pending_error

    await db.commit()
    invite = await get_invite(db, invite_id)
    logger.info(f"Invite {invite.id} sent from {sender_phone} to {recipient_phone} ({relationship_type.value})")

    await _notify_recipient(sms, invite, sender)

    return SendInviteResponse(message="Invite sent successfully", invite=InviteResponse.model_validate(invite))

async def get_invites(db: AsyncSession, current_user: dict) -> InviteListResponse:
    phone = normalize_phone_number(current_user["phone"])

    sent = await db.execute(
        select(Invite).where(Invite.sender_phone == phone).order_by(Invite.created_at.desc())
    )
    received = await db.execute(
        select(Invite).where(Invite.recipient_phone == phone).order_by(Invite.created_at.desc())
    )

    return InviteListResponse(
        sent_invites=[InviteResponse.model_validate(i) for i in sent.scalars().all()],
        received_invites=[InviteResponse.model_validate(i) for i in received.scalars().all()],
    )

async def get_invite_by_id(invite_id: str, db: AsyncSession) -> InviteDetail:
    invite = await get_invite(db, invite_id)
    ensure_pending(invite)

    return InviteDetail(
        id=invite.id,
        sender_phone=invite.sender_phone,
        sender_name=invite.sender.name if invite.sender else None,
        recipient_phone=invite.recipient_phone,
        relationship_type=invite.relationship_type,
        status=invite.status,
        message=invite.message,
        created_at=invite.created_at,
    )

async def get_public_invite_by_id(invite_id: str, db: AsyncSession) -> InviteDetail:
    """Invite view for the website: the sender's name is shown, phone numbers are masked."""
    detail = await get_invite_by_id(invite_id, db)
    detail.sender_phone = mask_phone_number(detail.sender_phone)
    detail.recipient_phone = mask_phone_number(detail.recipient_phone)
    return detail

async def _accept_or_decline(db: AsyncSession, invite: Invite, decision: InviteStatus) -> Optional[Relationship]:
    await transition_invite(db, invite, decision)
    if decision != InviteStatus.ACCEPTED:
        return None
    relationship, _ = await form_relationship(db, invite.sender_phone, invite.recipient_phone)
    return relationship

async def respond_to_invite(request: RespondInviteRequest, db: AsyncSession, current_user: dict) -> RespondInviteResponse:
    """
    Accept or decline an invite as its recipient.

    The status change and, on acceptance, the relationship are committed
    together.

    Raises:
        HTTPException: 404 unknown invite, 403 caller is not the recipient,
            400 invalid decision or invite no longer PENDING
    """
    if not request.invite_id or not request.response:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invite ID and response are required")
    decision = parse_decision(request.response)
    phone = normalize_phone_number(current_user["phone"])

    invite = await get_invite(db, request.invite_id, for_update=True)
    if invite.recipient_phone != phone:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to respond to this invite")

    relationship = await _accept_or_decline(db, invite, decision)
    await db.commit()

    return RespondInviteResponse(
        message=ACCEPTED_MESSAGE if decision == InviteStatus.ACCEPTED else DECLINED_MESSAGE,
        invite=InviteResponse.model_validate(invite),
        relationship=RelationshipResponse.model_validate(relationship) if relationship else None,
    )

async def cancel_invite(invite_id: str, db: AsyncSession, current_user: dict) -> Invite:
    """
    Withdraw a PENDING invite as its sender.

    Raises:
        HTTPException: 404 unknown invite, 403 caller is not the sender, 400 not PENDING
    """
    phone = normalize_phone_number(current_user["phone"])

    invite = await get_invite(db, invite_id, for_update=True)
    if invite.sender_phone != phone:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to cancel this invite")

    await transition_invite(db, invite, InviteStatus.CANCELLED)
    await db.commit()
    return invite

async def respond_to_public_invite(invite_id: str, request: PublicRespondRequest, db: AsyncSession) -> PublicRespondResponse:
    """
    Accept or decline an invite from the website, without a session.

    The recipient identity is created unverified if it does not exist yet.
    """
    decision = parse_decision(request.response)

    invite = await get_invite(db, invite_id, for_update=True)
    ensure_pending(invite)

    recipient, _ = await get_or_create_user(db, invite.recipient_phone)
    relationship = await _accept_or_decline(db, invite, decision)
    await db.commit()

    return PublicRespondResponse(
        message=ACCEPTED_MESSAGE if decision == InviteStatus.ACCEPTED else DECLINED_MESSAGE,
        invite=InviteStatusResponse(id=invite.id, status=invite.status),
        user=UserResponse.model_validate(recipient),
        relationship=RelationshipResponse.model_validate(relationship) if relationship else None,
    )

def _ensure_recipient(invite: Invite, phone: str) -> None:
    if phone == invite.sender_phone:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot accept your own invite")
    if phone != invite.recipient_phone:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This phone number does not match the invite recipient"
        )

async def send_invite_verification_code(
    request: SendVerificationRequest, db: AsyncSession, sms: SmsClient
) -> SendVerificationResponse:
    """
    Text a verification code to an invite's recipient so they can accept it
    without an app session.

    Raises:
        HTTPException: 404 unknown invite, 400 not PENDING, phone mismatch,
            self-accept or unsupported region, 500 delivery failure
    """
    if not request.invite_id or not request.phone:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invite ID and phone number are required")
    phone = normalize_phone_number(request.phone)

    invite = await get_invite(db, request.invite_id)
    ensure_pending(invite)
    _ensure_recipient(invite, phone)

    try:
        await issue_verification_code(db, sms, phone)
    except SmsError as e:
        logger.error(f"Invite verification SMS failed for invite {invite.id}: {e}")
        raise sms_error_to_http(e)

    return SendVerificationResponse(message="Verification code sent successfully", phone=phone)

async def verify_code_and_accept_invite(request: VerifyAndAcceptRequest, db: AsyncSession) -> VerifyAndAcceptResponse:
    """
    Accept an invite by proving ownership of the recipient phone.

    Verifying the identity, accepting the invite and forming the relationship
    are committed in one transaction. The response carries a session token
    for the now verified user.

    Raises:
        HTTPException: 404 unknown invite, 400 not PENDING, phone mismatch or invalid code
    """
    if not request.invite_id or not request.phone or not request.code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invite ID, phone number and verification code are required"
        )
    phone = normalize_phone_number(request.phone)

    invite = await get_invite(db, request.invite_id, for_update=True)
    ensure_pending(invite)
    _ensure_recipient(invite, phone)

    user = await get_user_by_phone(db, phone)
    if user is None or not check_verification_code(user, request.code):
        logger.warning(f"Invalid verification code for invite {invite.id}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid verification code")

    mark_verified(user)
    relationship = await _accept_or_decline(db, invite, InviteStatus.ACCEPTED)
    await db.commit()
    logger.info(f"Invite {invite.id} accepted through phone verification by {user.id}")

    return VerifyAndAcceptResponse(
        message=ACCEPTED_MESSAGE,
        token=create_access_token(user.id, user.phone),
        user=UserResponse.model_validate(user),
        invite=InviteResponse.model_validate(invite),
        relationship=RelationshipResponse.model_validate(relationship),
    )

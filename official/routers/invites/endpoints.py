import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from official.init_db import get_db
from official.common import get_current_user
from official.schemas.invites import (
    CancelInviteResponse,
    InviteDetailResponse,
    InviteListResponse,
    InviteResponse,
    PublicRespondRequest,
    RespondInviteRequest,
    SendInviteRequest,
    SendInviteResponse,
    SendVerificationRequest,
    SendVerificationResponse,
    VerifyAndAcceptRequest,
)
from official.schemas.users import PublicRespondResponse, RespondInviteResponse, VerifyAndAcceptResponse
from official.services.invite_service import (
    cancel_invite,
    get_invite_by_id,
    get_invites,
    get_public_invite_by_id,
    respond_to_invite,
    respond_to_public_invite,
    send_invite,
    send_invite_verification_code,
    verify_code_and_accept_invite,
)
from official.services.sms_service import SmsClient, get_sms_client

# Configure logging for the module
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invites", tags=["invites"])

# Public routes for the website invite confirmation page, no session required

@router.get("/public/{invite_id}", response_model=InviteDetailResponse)
async def get_public_invite_api(invite_id: str, db: AsyncSession = Depends(get_db)):
    """
    Get an invite for the public confirmation page with masked phone numbers.

    Raises:
        HTTPException: 404 unknown invite, 400 no longer active
    """
    try:
        return InviteDetailResponse(invite=await get_public_invite_by_id(invite_id, db))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Get public invite by ID error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/public/send-verification", response_model=SendVerificationResponse)
async def send_invite_verification_api(
    request: SendVerificationRequest,
    db: AsyncSession = Depends(get_db),
    sms: SmsClient = Depends(get_sms_client)
):
    """
    Text a verification code to the invite recipient.

    Raises:
        HTTPException: 400 unsupported region, phone mismatch or self-accept
    """
    try:
        return await send_invite_verification_code(request, db, sms)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Send invite verification error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/public/verify-and-accept", response_model=VerifyAndAcceptResponse)
async def verify_and_accept_api(request: VerifyAndAcceptRequest, db: AsyncSession = Depends(get_db)):
    """
    Accept an invite with a verification code instead of a session.

    Raises:
        HTTPException: 400 invalid code or phone mismatch, 404 unknown invite
    """
    try:
        return await verify_code_and_accept_invite(request, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Verify and accept invite error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/public/{invite_id}/respond", response_model=PublicRespondResponse)
async def respond_to_public_invite_api(
    invite_id: str,
    request: PublicRespondRequest,
    db: AsyncSession = Depends(get_db)
):
    try:
        return await respond_to_public_invite(invite_id, request, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Respond to public invite error")
        raise HTTPException(status_code=500, detail="Internal server error")

# Authenticated routes

@router.post("/send", response_model=SendInviteResponse)
async def send_invite_api(
    request: SendInviteRequest,
    db: AsyncSession = Depends(get_db),
    sms: SmsClient = Depends(get_sms_client),
    current_user: dict = Depends(get_current_user)
):
    """
    Invite another phone number into a relationship.

    Returns:
        SendInviteResponse with the PENDING invite

    Raises:
        HTTPException: 400 invalid type, self-invite or already pending
    """
    try:
        return await send_invite(request, db, sms, current_user)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Send invite error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("", response_model=InviteListResponse)
async def get_invites_api(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    try:
        return await get_invites(db, current_user)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Get invites error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/respond", response_model=RespondInviteResponse)
async def respond_to_invite_api(
    request: RespondInviteRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Accept or decline an invite addressed to the caller.

    Raises:
        HTTPException: 403 not the recipient, 400 no longer pending
    """
    try:
        return await respond_to_invite(request, db, current_user)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Respond to invite error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/{invite_id}", response_model=InviteDetailResponse)
async def get_invite_api(
    invite_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    try:
        return InviteDetailResponse(invite=await get_invite_by_id(invite_id, db))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Get invite by ID error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.delete("/{invite_id}", response_model=CancelInviteResponse)
async def cancel_invite_api(
    invite_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Cancel a PENDING invite the caller sent.

    Raises:
        HTTPException: 403 not the sender, 400 no longer pending
    """
    try:
        invite = await cancel_invite(invite_id, db, current_user)
        return CancelInviteResponse(message="Invite cancelled successfully", invite=InviteResponse.model_validate(invite))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Cancel invite error")
        raise HTTPException(status_code=500, detail="Internal server error")

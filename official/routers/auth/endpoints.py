import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from official.init_db import get_db
from official.common import get_current_user
from official.schemas.users import (
    MeResponse,
    MeUserResponse,
    SignupRequest,
    SignupResponse,
    UpdateProfileRequest,
    VerifyRequest,
    VerifyResponse,
)
from official.services.auth_service import signup, verify
from official.services.sms_service import SmsClient, get_sms_client
from official.services.user_service import get_current_user_info, update_profile

# Configure logging for the module
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/signup", response_model=SignupResponse)
async def signup_api(
    request: SignupRequest,
    db: AsyncSession = Depends(get_db),
    sms: SmsClient = Depends(get_sms_client)
):
    """
    Send a signup or login verification code to a phone number.

    Returns:
        SignupResponse with the normalized phone and whether the user existed

    Raises:
        HTTPException: 400 for a bad or unsupported phone, 500 if the SMS fails
    """
    try:
        return await signup(request, db, sms)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Signup error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/verify", response_model=VerifyResponse)
async def verify_api(request: VerifyRequest, db: AsyncSession = Depends(get_db)):
    """
    Check a verification code and issue a session token.

    Raises:
        HTTPException: 400 invalid code, 404 unknown phone
    """
    try:
        return await verify(request, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Verification error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/me", response_model=MeResponse)
async def get_current_user_info_api(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the caller's profile with relationships and sent invites.

    Raises:
        HTTPException: 401 without a valid token, 404 if unverified
    """
    try:
        user = await get_current_user_info(current_user, db)
        return MeResponse(user=MeUserResponse.model_validate(user))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Get current user error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.patch("/me", response_model=MeResponse)
async def update_profile_api(
    request: UpdateProfileRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        user = await update_profile(request, db, current_user)
        return MeResponse(user=MeUserResponse.model_validate(user))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Update profile error")
        raise HTTPException(status_code=500, detail="Internal server error")

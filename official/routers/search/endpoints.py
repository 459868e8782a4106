import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from official.init_db import get_db
from official.common import get_current_user
from official.schemas.search import SearchUserRequest, SearchUserResponse
from official.services.search_service import search_user_by_phone

# Configure logging for the module
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

@router.post("/user", response_model=SearchUserResponse, dependencies=[Depends(get_current_user)])
async def search_user_api(request: SearchUserRequest, db: AsyncSession = Depends(get_db)):
    """
    Look up whether a phone number belongs to a verified user and their relationship status.
    """
    try:
        return SearchUserResponse(result=await search_user_by_phone(request.phone, db))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Search user error")
        raise HTTPException(status_code=500, detail="Internal server error")

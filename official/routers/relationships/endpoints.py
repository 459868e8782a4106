import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from official.init_db import get_db
from official.common import get_current_user
from official.schemas.relationships import (
    EditRelationshipRequest,
    EditRelationshipResponse,
    RelationshipListResponse,
    RelationshipResponse,
)
from official.services.relationship_service import edit_relationship, get_user_relationships

# Configure logging for the module
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/relationships", tags=["relationships"])

@router.put("/edit", response_model=EditRelationshipResponse)
async def edit_relationship_api(
    request: EditRelationshipRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Update status or dates of a relationship the caller belongs to.

    Raises:
        HTTPException: 404 unknown relationship, 403 not a participant
    """
    try:
        relationship = await edit_relationship(request, db, current_user)
        return EditRelationshipResponse(
            message="Relationship updated successfully",
            relationship=RelationshipResponse.model_validate(relationship),
        )
    except HTTPException:
        raise
    except Exception:
        logger.exception("Edit relationship error")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("", response_model=RelationshipListResponse)
async def get_user_relationships_api(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    try:
        relationships = await get_user_relationships(db, current_user)
        return RelationshipListResponse(
            relationships=[RelationshipResponse.model_validate(r) for r in relationships]
        )
    except HTTPException:
        raise
    except Exception:
        logger.exception("Get user relationships error")
        raise HTTPException(status_code=500, detail="Internal server error")

from typing import List, Optional
from datetime import datetime
from enum import Enum as PyEnum
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel
from .common import ORMModel

class RelationshipStatus(str, PyEnum):
    DATING = "DATING"
    ENGAGED = "ENGAGED"
    MARRIED = "MARRIED"
    SEPARATED = "SEPARATED"
    WIDOWED = "WIDOWED"
    SITUATIONSHIP = "SITUATIONSHIP"
    FRIENDS_WITH_BENEFITS = "FRIENDS_WITH_BENEFITS"
    ON_A_BREAK = "ON_A_BREAK"
    OPEN_RELATIONSHIP = "OPEN_RELATIONSHIP"
    POLYAMOROUS = "POLYAMOROUS"

class RelationshipUser(ORMModel):
    id: str
    phone: str
    name: Optional[str] = None

class RelationshipResponse(ORMModel):
    id: str
    status: RelationshipStatus
    start_date: datetime
    end_date: Optional[datetime] = None
    users: List[RelationshipUser] = []

class EditRelationshipRequest(ORMModel):
    # Only the mutable fields are accepted; anything else is a 400
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    relationship_id: str
    status: Optional[RelationshipStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class EditRelationshipResponse(ORMModel):
    message: str
    relationship: RelationshipResponse

class RelationshipListResponse(ORMModel):
    relationships: List[RelationshipResponse]

from typing import List, Optional
from datetime import datetime
from enum import Enum as PyEnum
from .common import ORMModel

class InviteStatus(str, PyEnum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"

class RelationshipType(str, PyEnum):
    DATING = "DATING"
    MARRIED = "MARRIED"
    SITUATIONSHIP = "SITUATIONSHIP"

class SendInviteRequest(ORMModel):
    recipient_phone: str
    relationship_type: str
    message: Optional[str] = None

class InviteResponse(ORMModel):
    id: str
    sender_phone: str
    recipient_phone: str
    relationship_type: RelationshipType
    status: InviteStatus
    message: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

class SendInviteResponse(ORMModel):
    message: str
    invite: InviteResponse

class InviteListResponse(ORMModel):
    sent_invites: List[InviteResponse]
    received_invites: List[InviteResponse]

class InviteDetail(ORMModel):
    id: str
    sender_phone: str
    sender_name: Optional[str] = None
    recipient_phone: str
    relationship_type: RelationshipType
    status: InviteStatus
    message: Optional[str] = None
    created_at: datetime

class InviteDetailResponse(ORMModel):
    invite: InviteDetail

class CancelInviteResponse(ORMModel):
    message: str
    invite: InviteResponse

class RespondInviteRequest(ORMModel):
    invite_id: str
    response: str

class PublicRespondRequest(ORMModel):
    response: str

class InviteStatusResponse(ORMModel):
    id: str
    status: InviteStatus

class SendVerificationRequest(ORMModel):
    invite_id: str
    phone: str

class SendVerificationResponse(ORMModel):
    message: str
    phone: str

class VerifyAndAcceptRequest(ORMModel):
    invite_id: str
    phone: str
    code: str

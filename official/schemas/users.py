from typing import List, Optional
from datetime import datetime
from .common import ORMModel
from .invites import InviteResponse, InviteStatusResponse
from .relationships import RelationshipResponse

class SignupRequest(ORMModel):
    phone: str

class SignupResponse(ORMModel):
    message: str
    phone: str
    is_existing_user: bool

class VerifyRequest(ORMModel):
    phone: str
    code: str

class UserResponse(ORMModel):
    id: str
    phone: str
    name: Optional[str] = None
    verified: bool

class VerifyResponse(ORMModel):
    message: str
    token: str
    user: UserResponse

class MeUserResponse(UserResponse):
    created_at: datetime
    updated_at: Optional[datetime] = None
    relationships: List[RelationshipResponse] = []
    sent_invites: List[InviteResponse] = []

class MeResponse(ORMModel):
    user: MeUserResponse

class UpdateProfileRequest(ORMModel):
    name: Optional[str] = None

class PublicRespondResponse(ORMModel):
    message: str
    invite: InviteStatusResponse
    user: UserResponse
    relationship: Optional[RelationshipResponse] = None

class RespondInviteResponse(ORMModel):
    message: str
    invite: InviteResponse
    relationship: Optional[RelationshipResponse] = None

class VerifyAndAcceptResponse(ORMModel):
    message: str
    token: str
    user: UserResponse
    invite: InviteResponse
    relationship: RelationshipResponse

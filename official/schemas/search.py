from typing import Optional
from .common import ORMModel

class SearchUserRequest(ORMModel):
    phone: str

class SearchResult(ORMModel):
    phone: str
    exists: bool
    relationship_status: str
    name: Optional[str] = None

class SearchUserResponse(ORMModel):
    success: bool = True
    result: SearchResult

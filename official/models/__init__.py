from datetime import datetime, timezone

def utcnow():
    return datetime.now(timezone.utc)

from .user import User
from .invite import Invite
from .relationship import Relationship, relationship_users

__all__ = ["User", "Invite", "Relationship", "relationship_users", "utcnow"]

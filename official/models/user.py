import uuid
from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from official.database import Base
from . import utcnow
from .relationship import relationship_users

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    phone = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    verified = Column(Boolean, default=False, nullable=False)
    # Present only while a code challenge is outstanding
    verification_code = Column(String(4), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    relationships = relationship(
        "Relationship",
        secondary=relationship_users,
        back_populates="users",
        order_by="Relationship.created_at.desc()",
    )
    sent_invites = relationship(
        "Invite",
        back_populates="sender",
        foreign_keys="Invite.sender_phone",
        order_by="Invite.created_at.desc()",
    )

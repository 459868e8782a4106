import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from official.database import Base
from official.schemas.invites import InviteStatus, RelationshipType
from . import utcnow

class Invite(Base):
    __tablename__ = "invites"
    __table_args__ = (
        UniqueConstraint("sender_phone", "recipient_phone", name="uq_invites_sender_recipient"),
    )

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    sender_phone = Column(String, ForeignKey("users.phone"), index=True, nullable=False)
    # Recipients need not be registered yet, so this is a plain phone column
    recipient_phone = Column(String, index=True, nullable=False)
    relationship_type = Column(Enum(RelationshipType), default=RelationshipType.DATING, nullable=False)
    status = Column(Enum(InviteStatus), default=InviteStatus.PENDING, nullable=False)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    sender = relationship("User", back_populates="sent_invites", foreign_keys=[sender_phone], lazy="selectin")

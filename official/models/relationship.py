import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum, Table
from sqlalchemy.orm import relationship

from official.database import Base
from official.schemas.relationships import RelationshipStatus
from . import utcnow

relationship_users = Table(
    "relationship_users",
    Base.metadata,
    Column("relationship_id", String, ForeignKey("relationships.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

class Relationship(Base):
    __tablename__ = "relationships"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    status = Column(Enum(RelationshipStatus), default=RelationshipStatus.DATING, nullable=False)
    start_date = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    # NULL while the relationship is active
    end_date = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    users = relationship("User", secondary=relationship_users, back_populates="relationships", lazy="selectin")

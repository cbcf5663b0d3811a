"""StatusChange ORM model — append-only ledger of booking and invitation transitions."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Enum as SAEnum
from speakerhub.database import Base
from speakerhub.timeutils import utcnow


class EntityType(str, enum.Enum):
    booking = "booking"
    invitation = "invitation"


class StatusChange(Base):
    __tablename__ = "status_changes"
    __table_args__ = (
        Index("ix_status_changes_entity", "entity_type", "entity_id"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    entity_type = Column(SAEnum(EntityType), nullable=False)
    entity_id = Column(String(36), nullable=False)
    previous_status = Column(String(20), nullable=True)
    new_status = Column(String(20), nullable=False)
    changed_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)  # NULL for system sweeps
    reason = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

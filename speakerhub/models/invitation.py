"""Invitation ORM model — an organizer's offer to a specific speaker."""
import uuid
import enum
from datetime import datetime
from typing import Optional
from sqlalchemy import Column, String, Text, Numeric, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from speakerhub.database import Base
from speakerhub.timeutils import as_utc, utcnow


class InvitationStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"
    expired = "expired"


class Invitation(Base):
    __tablename__ = "invitations"
    __table_args__ = (
        UniqueConstraint("event_id", "speaker_id", name="uq_invitations_event_speaker"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    organizer_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    speaker_id = Column(String(36), ForeignKey("speakers.id"), nullable=False)
    message = Column(Text, nullable=True)
    proposed_rate = Column(Numeric(10, 2), nullable=True)
    status = Column(SAEnum(InvitationStatus), nullable=False, default=InvitationStatus.pending)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event = relationship("Event")
    organizer = relationship("Profile")
    speaker = relationship("Speaker")

    def expired_at(self, now: Optional[datetime] = None) -> bool:
        """True once a pending invitation is past its expiry, swept or not."""
        if self.status == InvitationStatus.expired:
            return True
        if self.status != InvitationStatus.pending:
            return False
        return as_utc(self.expires_at) <= (now or utcnow())

    @property
    def is_expired(self) -> bool:
        return self.expired_at()

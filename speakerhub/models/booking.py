"""Booking (application) ORM model — the core workflow entity."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Text, Integer, Numeric, DateTime, ForeignKey,
    UniqueConstraint, CheckConstraint, Index, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from speakerhub.database import Base


class BookingStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    paid = "paid"
    completed = "completed"
    cancelled = "cancelled"


class BookingPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


TERMINAL_STATUSES = frozenset({BookingStatus.rejected, BookingStatus.completed, BookingStatus.cancelled})
LIVE_STATUSES = frozenset(BookingStatus) - TERMINAL_STATUSES

# Allowed edges of the booking state machine
TRANSITIONS = {
    BookingStatus.pending: {BookingStatus.accepted, BookingStatus.rejected, BookingStatus.cancelled},
    BookingStatus.accepted: {BookingStatus.paid, BookingStatus.cancelled},
    BookingStatus.paid: {BookingStatus.completed, BookingStatus.cancelled},
    BookingStatus.rejected: set(),
    BookingStatus.completed: set(),
    BookingStatus.cancelled: set(),
}


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        UniqueConstraint("event_id", "speaker_id", name="uq_bookings_event_speaker"),
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_bookings_rating_range"),
        Index("ix_bookings_organizer_status", "organizer_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    speaker_id = Column(String(36), ForeignKey("speakers.id"), nullable=False)
    organizer_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    invitation_id = Column(String(36), ForeignKey("invitations.id"), nullable=True)
    status = Column(SAEnum(BookingStatus), nullable=False, default=BookingStatus.pending)
    agreed_rate = Column(Numeric(10, 2), nullable=True)
    message = Column(Text, nullable=True)
    status_reason = Column(String(500), nullable=True)
    priority = Column(SAEnum(BookingPriority), nullable=False, default=BookingPriority.medium)
    reviewer_notes = Column(Text, nullable=True)

    payment_amount = Column(Numeric(12, 2), nullable=True)
    payment_reference = Column(String(64), nullable=True)
    payment_date = Column(DateTime(timezone=True), nullable=True)

    rating = Column(Integer, nullable=True)
    rating_comment = Column(Text, nullable=True)
    rated_at = Column(DateTime(timezone=True), nullable=True)

    responded_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event = relationship("Event", back_populates="bookings")
    speaker = relationship("Speaker")
    organizer = relationship("Profile")
    invitation = relationship("Invitation")

    @property
    def rated(self) -> bool:
        return self.rated_at is not None

    @property
    def is_live(self) -> bool:
        return self.status not in TERMINAL_STATUSES

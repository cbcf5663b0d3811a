"""Notification ORM model — per-recipient workflow notices."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, JSON, ForeignKey, Enum as SAEnum
from speakerhub.database import Base
from speakerhub.timeutils import utcnow


class NotificationType(str, enum.Enum):
    submitted = "submitted"
    reviewed = "reviewed"
    accepted = "accepted"
    rejected = "rejected"
    paid = "paid"
    completed = "completed"
    rated = "rated"
    cancelled = "cancelled"
    reminder = "reminder"
    deadline = "deadline"
    invited = "invited"
    invitation_accepted = "invitation_accepted"
    invitation_declined = "invitation_declined"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    recipient_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    notification_type = Column(SAEnum(NotificationType), nullable=False)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True)
    invitation_id = Column(String(36), ForeignKey("invitations.id"), nullable=True)
    message = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    extra = Column("metadata", JSON, nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    read_at = Column(DateTime(timezone=True), nullable=True)

"""Event ORM model — an organizer's request for a speaker."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, Numeric, JSON, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from speakerhub.database import Base


class EventStatus(str, enum.Enum):
    open = "open"
    in_progress = "in_progress"
    completed = "completed"
    finished = "finished"
    cancelled = "cancelled"


class EventFormat(str, enum.Enum):
    in_person = "in_person"
    virtual = "virtual"
    hybrid = "hybrid"


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organizer_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    event_type = Column(String(50), nullable=False, default="conference")
    format = Column(SAEnum(EventFormat), nullable=False, default=EventFormat.in_person)
    location = Column(String(500), nullable=True)
    date_time = Column(DateTime(timezone=True), nullable=False, index=True)
    timezone = Column(String(50), nullable=False, default="UTC")  # IANA tz for display
    duration_hours = Column(Numeric(5, 2), nullable=False)
    budget_min = Column(Numeric(10, 2), nullable=True)
    budget_max = Column(Numeric(10, 2), nullable=True)
    required_topics = Column(JSON, nullable=True, default=list)
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.open)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organizer = relationship("Profile")
    bookings = relationship("Booking", back_populates="event")

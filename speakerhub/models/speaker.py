"""Speaker ORM model — role extension of a Profile plus derived statistics."""
import uuid
import enum
from sqlalchemy import Column, String, Integer, Boolean, Numeric, DateTime, JSON, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from speakerhub.database import Base


class ExperienceLevel(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    expert = "expert"


class Speaker(Base):
    __tablename__ = "speakers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    profile_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, unique=True)
    experience_level = Column(SAEnum(ExperienceLevel), nullable=False, default=ExperienceLevel.beginner)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    available = Column(Boolean, nullable=False, default=True)
    verified = Column(Boolean, nullable=False, default=False)
    occupation = Column(String(200), nullable=True)
    company = Column(String(200), nullable=True)
    topics = Column(JSON, nullable=True, default=list)
    portfolio_url = Column(String(500), nullable=True)

    # Written only by the statistics aggregator
    total_talks = Column(Integer, nullable=False, default=0)
    total_ratings = Column(Integer, nullable=False, default=0)
    average_rating = Column(Numeric(4, 2), nullable=False, default=0)
    total_earnings = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", back_populates="speaker")

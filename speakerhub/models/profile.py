"""Profile ORM model — a person acting as speaker, organizer, or both."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from speakerhub.database import Base


class UserType(str, enum.Enum):
    speaker = "speaker"
    organizer = "organizer"
    both = "both"


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False, unique=True)  # auth provider identity
    full_name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False)
    bio = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    website = Column(String(500), nullable=True)
    user_type = Column(SAEnum(UserType), nullable=False, default=UserType.speaker)
    timezone = Column(String(50), nullable=False, default="UTC")  # IANA tz
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    speaker = relationship("Speaker", back_populates="profile", uselist=False)

"""Pydantic schemas for Profiles and Speakers."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, field_validator

from speakerhub.timeutils import is_valid_timezone


def _check_timezone(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_valid_timezone(value):
        raise ValueError(f"Unknown timezone: {value}")
    return value


class SpeakerDetails(BaseModel):
    experience_level: str = "beginner"
    hourly_rate: Optional[Decimal] = None
    available: bool = True
    occupation: Optional[str] = None
    company: Optional[str] = None
    topics: list[str] = []
    portfolio_url: Optional[str] = None


class ProfileCreate(BaseModel):
    user_id: str
    full_name: str
    email: str
    bio: Optional[str] = None
    location: Optional[str] = None
    avatar_url: Optional[str] = None
    website: Optional[str] = None
    user_type: str = "speaker"  # speaker, organizer, both
    timezone: str = "UTC"
    speaker: Optional[SpeakerDetails] = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value):
        return _check_timezone(value)


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    avatar_url: Optional[str] = None
    website: Optional[str] = None
    timezone: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value):
        return _check_timezone(value)


class SpeakerUpdate(BaseModel):
    """Owner-editable speaker fields. Aggregates are system-derived and not accepted here."""

    experience_level: Optional[str] = None
    hourly_rate: Optional[Decimal] = None
    available: Optional[bool] = None
    occupation: Optional[str] = None
    company: Optional[str] = None
    topics: Optional[list[str]] = None
    portfolio_url: Optional[str] = None


class SpeakerOut(BaseModel):
    id: str
    profile_id: str
    experience_level: str
    hourly_rate: Optional[Decimal] = None
    available: bool
    verified: bool
    occupation: Optional[str] = None
    company: Optional[str] = None
    topics: Optional[list[str]] = None
    portfolio_url: Optional[str] = None
    total_talks: int
    total_ratings: int
    average_rating: Decimal
    total_earnings: Decimal

    model_config = {"from_attributes": True}


class ProfileOut(BaseModel):
    id: str
    user_id: str
    full_name: str
    email: str
    bio: Optional[str] = None
    location: Optional[str] = None
    avatar_url: Optional[str] = None
    website: Optional[str] = None
    user_type: str
    timezone: str
    created_at: datetime
    speaker: Optional[SpeakerOut] = None

    model_config = {"from_attributes": True}


class SpeakerSearchResult(BaseModel):
    id: str
    experience_level: str
    hourly_rate: Optional[Decimal] = None
    average_rating: Decimal
    available: bool
    full_name: str
    email: str
    bio: Optional[str] = None
    location: Optional[str] = None
    avatar_url: Optional[str] = None


# Rebuild ProfileOut now that SpeakerOut is defined
ProfileOut.model_rebuild()

"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from speakerhub.timeutils import is_valid_timezone


class EventCreate(BaseModel):
    organizer_id: str
    title: str
    description: str = ""
    event_type: str = "conference"
    format: str = "in_person"  # in_person, virtual, hybrid
    location: Optional[str] = None
    date_time: datetime
    timezone: str = "UTC"
    duration_hours: Decimal = Field(gt=0)
    budget_min: Optional[Decimal] = None
    budget_max: Optional[Decimal] = None
    required_topics: list[str] = []

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value):
        if not is_valid_timezone(value):
            raise ValueError(f"Unknown timezone: {value}")
        return value


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    event_type: Optional[str] = None
    format: Optional[str] = None
    location: Optional[str] = None
    date_time: Optional[datetime] = None
    timezone: Optional[str] = None
    duration_hours: Optional[Decimal] = Field(default=None, gt=0)
    budget_min: Optional[Decimal] = None
    budget_max: Optional[Decimal] = None
    required_topics: Optional[list[str]] = None
    status: Optional[str] = None  # open, in_progress, completed

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value):
        if value is not None and not is_valid_timezone(value):
            raise ValueError(f"Unknown timezone: {value}")
        return value


class EventCancelRequest(BaseModel):
    actor_profile_id: str
    reason: Optional[str] = None


class EventOut(BaseModel):
    id: str
    organizer_id: str
    title: str
    description: str
    event_type: str
    format: str
    location: Optional[str] = None
    date_time: datetime
    timezone: str
    duration_hours: Decimal
    budget_min: Optional[Decimal] = None
    budget_max: Optional[Decimal] = None
    required_topics: Optional[list[str]] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class InvitationStats(BaseModel):
    total: int
    pending: int
    accepted: int
    declined: int
    expired: int

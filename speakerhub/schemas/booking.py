"""Pydantic schemas for Bookings (applications)."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class BookingApply(BaseModel):
    event_id: str
    actor_profile_id: str
    message: Optional[str] = None
    proposed_rate: Optional[Decimal] = Field(default=None, ge=0)


class BookingDecision(BaseModel):
    """Body for organizer accept/reject and for cancel."""

    actor_profile_id: str
    reason: Optional[str] = None
    reviewer_notes: Optional[str] = None


class BookingPayment(BaseModel):
    actor_profile_id: str
    payment_reference: Optional[str] = None


class BookingCompletion(BaseModel):
    actor_profile_id: str


class BookingRating(BaseModel):
    actor_profile_id: str
    rating: int
    comment: Optional[str] = None


class BookingPriorityUpdate(BaseModel):
    actor_profile_id: str
    priority: str  # low, medium, high


class BookingOut(BaseModel):
    id: str
    event_id: str
    speaker_id: str
    organizer_id: str
    invitation_id: Optional[str] = None
    status: str
    agreed_rate: Optional[Decimal] = None
    message: Optional[str] = None
    status_reason: Optional[str] = None
    priority: str
    reviewer_notes: Optional[str] = None
    payment_amount: Optional[Decimal] = None
    payment_reference: Optional[str] = None
    payment_date: Optional[datetime] = None
    rating: Optional[int] = None
    rating_comment: Optional[str] = None
    rated: bool
    rated_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ApplicationView(BaseModel):
    """Denormalized booking row joined with event, speaker, and organizer display fields."""

    id: str
    event_id: str
    speaker_id: str
    organizer_id: str
    status: str
    priority: str
    agreed_rate: Optional[Decimal] = None
    message: Optional[str] = None
    rating: Optional[int] = None
    created_at: datetime
    event_title: str
    event_date_time: datetime
    event_local_time: datetime
    event_format: str
    event_type: str
    speaker_name: str
    speaker_avatar: Optional[str] = None
    speaker_experience: str
    speaker_average_rating: Decimal
    organizer_name: str


class StatusChangeOut(BaseModel):
    id: str
    entity_type: str
    entity_id: str
    previous_status: Optional[str] = None
    new_status: str
    changed_by: Optional[str] = None
    reason: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ApplicationStats(BaseModel):
    total: int
    pending: int
    accepted: int
    rejected: int
    completed: int
    response_rate: float
    avg_response_time_hours: float

"""Pydantic schemas for Invitations."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class InvitationCreate(BaseModel):
    event_id: str
    actor_profile_id: str
    speaker_id: str
    message: Optional[str] = None
    proposed_rate: Optional[Decimal] = Field(default=None, ge=0)
    expires_in_days: Optional[int] = None  # defaults to DEFAULT_INVITATION_EXPIRY_DAYS


class InvitationResponse(BaseModel):
    actor_profile_id: str
    reason: Optional[str] = None


class InvitationOut(BaseModel):
    id: str
    event_id: str
    organizer_id: str
    speaker_id: str
    message: Optional[str] = None
    proposed_rate: Optional[Decimal] = None
    status: str
    is_expired: bool
    expires_at: datetime
    responded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class InvitationAccepted(BaseModel):
    invitation: InvitationOut
    booking_id: str


class InvitationView(BaseModel):
    """Invitation joined with event and counterpart display fields."""

    id: str
    event_id: str
    organizer_id: str
    speaker_id: str
    message: Optional[str] = None
    proposed_rate: Optional[Decimal] = None
    status: str
    is_expired: bool
    expires_at: datetime
    created_at: datetime
    event_title: str
    event_description: str
    event_date: datetime
    event_local_time: datetime
    event_location: Optional[str] = None
    event_type: str
    event_format: str
    speaker_name: Optional[str] = None
    speaker_email: Optional[str] = None
    speaker_experience: Optional[str] = None
    speaker_hourly_rate: Optional[Decimal] = None
    organizer_name: Optional[str] = None
    organizer_email: Optional[str] = None


class ExistingInvitation(BaseModel):
    exists: bool
    invitation_id: Optional[str] = None
    status: Optional[str] = None


# Rebuild InvitationAccepted now that InvitationOut is defined
InvitationAccepted.model_rebuild()

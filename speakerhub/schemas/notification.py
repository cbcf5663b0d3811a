"""Pydantic schemas for Notifications."""
from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel


class NotificationOut(BaseModel):
    id: str
    recipient_id: str
    notification_type: str
    booking_id: Optional[str] = None
    invitation_id: Optional[str] = None
    message: Optional[str] = None
    extra: Optional[dict[str, Any]] = None
    sent_at: datetime
    read_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class NotificationRead(BaseModel):
    actor_profile_id: str

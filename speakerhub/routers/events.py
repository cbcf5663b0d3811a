"""Event API routes — delegates to event_service for ownership and status rules."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from speakerhub.database import get_db
from speakerhub.models.event import EventStatus
from speakerhub.routers.common import unwrap
from speakerhub.schemas.event import EventCreate, EventUpdate, EventOut, EventCancelRequest, InvitationStats
from speakerhub.services import event_service, stats_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, db: Session = Depends(get_db)):
    """Create an open event for the given organizer."""
    return unwrap(event_service.create_event(db, **payload.model_dump()))


@router.get("/", response_model=list[EventOut])
def list_events(
    organizer_id: Optional[str] = Query(None),
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    upcoming: bool = Query(False),
    include_cancelled: bool = Query(False),
    db: Session = Depends(get_db),
):
    """List events ordered by start time."""
    return event_service.list_events(
        db,
        organizer_id=organizer_id,
        status=status_filter.value if status_filter else None,
        upcoming=upcoming,
        include_cancelled=include_cancelled,
    )


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    event = event_service.get_event(db, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    actor_profile_id: str = Query(..., description="ID of the profile performing the update"),
    db: Session = Depends(get_db),
):
    """Update an event (organizer only)."""
    return unwrap(event_service.update_event(
        db,
        event_id=event_id,
        actor_profile_id=actor_profile_id,
        updates=payload.model_dump(exclude_unset=True),
    ))


@router.post("/{event_id}/cancel", response_model=EventOut)
def cancel_event(event_id: str, payload: EventCancelRequest, db: Session = Depends(get_db)):
    """Cancel an event and withdraw its live bookings and pending invitations."""
    result = unwrap(event_service.cancel_event(
        db,
        event_id=event_id,
        actor_profile_id=payload.actor_profile_id,
        reason=payload.reason,
    ))
    return result["event"]


@router.get("/{event_id}/invitation-stats", response_model=InvitationStats)
def invitation_stats(event_id: str, db: Session = Depends(get_db)):
    if not event_service.get_event(db, event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    return stats_service.get_invitation_stats(db, event_id)

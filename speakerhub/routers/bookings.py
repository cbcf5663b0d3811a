"""Booking (application) API routes — thin wrappers over booking_service transitions."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from speakerhub.database import get_db
from speakerhub.models.booking import Booking, BookingStatus, BookingPriority
from speakerhub.models.status_change import EntityType
from speakerhub.routers.common import unwrap
from speakerhub.schemas.booking import (
    ApplicationView,
    BookingApply,
    BookingCompletion,
    BookingDecision,
    BookingOut,
    BookingPayment,
    BookingPriorityUpdate,
    BookingRating,
    StatusChangeOut,
)
from speakerhub.services import booking_service, history_service, views_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def apply_to_event(payload: BookingApply, db: Session = Depends(get_db)):
    """A speaker applies to an open event."""
    return unwrap(booking_service.apply_to_event(
        db,
        event_id=payload.event_id,
        actor_profile_id=payload.actor_profile_id,
        message=payload.message,
        proposed_rate=payload.proposed_rate,
    ))


@router.get("/", response_model=list[ApplicationView])
def list_applications(
    event_id: Optional[str] = Query(None),
    speaker_id: Optional[str] = Query(None),
    organizer_id: Optional[str] = Query(None),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    priority: Optional[BookingPriority] = Query(None),
    db: Session = Depends(get_db),
):
    """Applications joined with event, speaker, and organizer details."""
    return views_service.list_applications(
        db,
        event_id=event_id,
        speaker_id=speaker_id,
        organizer_id=organizer_id,
        status=status_filter.value if status_filter else None,
        priority=priority.value if priority else None,
    )


@router.get("/needing-attention", response_model=list[ApplicationView])
def applications_needing_attention(organizer_id: str = Query(...), db: Session = Depends(get_db)):
    """Pending applications the organizer has left unanswered too long."""
    return views_service.applications_needing_attention(db, organizer_id)


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, db: Session = Depends(get_db)):
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


@router.post("/{booking_id}/accept", response_model=BookingOut)
def accept_booking(booking_id: str, payload: BookingDecision, db: Session = Depends(get_db)):
    return unwrap(booking_service.accept_booking(
        db, booking_id, payload.actor_profile_id, reason=payload.reason, reviewer_notes=payload.reviewer_notes,
    ))


@router.post("/{booking_id}/reject", response_model=BookingOut)
def reject_booking(booking_id: str, payload: BookingDecision, db: Session = Depends(get_db)):
    return unwrap(booking_service.reject_booking(
        db, booking_id, payload.actor_profile_id, reason=payload.reason, reviewer_notes=payload.reviewer_notes,
    ))


@router.post("/{booking_id}/pay", response_model=BookingOut)
def pay_booking(booking_id: str, payload: BookingPayment, db: Session = Depends(get_db)):
    """Record payment for an accepted booking (organizer only)."""
    return unwrap(booking_service.pay_booking(
        db, booking_id, payload.actor_profile_id, payment_reference=payload.payment_reference,
    ))


@router.post("/{booking_id}/complete", response_model=BookingOut)
def complete_booking(booking_id: str, payload: BookingCompletion, db: Session = Depends(get_db)):
    """Mark a paid booking completed once the event has run."""
    return unwrap(booking_service.complete_booking(db, booking_id, payload.actor_profile_id))


@router.post("/{booking_id}/rate", response_model=BookingOut)
def rate_booking(booking_id: str, payload: BookingRating, db: Session = Depends(get_db)):
    return unwrap(booking_service.rate_booking(
        db, booking_id, payload.actor_profile_id, payload.rating, comment=payload.comment,
    ))


@router.post("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(booking_id: str, payload: BookingDecision, db: Session = Depends(get_db)):
    return unwrap(booking_service.cancel_booking(db, booking_id, payload.actor_profile_id, reason=payload.reason))


@router.patch("/{booking_id}/priority", response_model=BookingOut)
def set_priority(booking_id: str, payload: BookingPriorityUpdate, db: Session = Depends(get_db)):
    return unwrap(booking_service.set_priority(db, booking_id, payload.actor_profile_id, payload.priority))


@router.get("/{booking_id}/history", response_model=list[StatusChangeOut])
def booking_history(booking_id: str, db: Session = Depends(get_db)):
    """Status ledger for a booking, newest first."""
    return history_service.list_history(db, EntityType.booking, booking_id)

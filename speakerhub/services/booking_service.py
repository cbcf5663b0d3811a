"""Booking workflow — the application status state machine.

Responsibilities:
- Edge validation against models.booking.TRANSITIONS
- Party checks: organizer-only vs. either-party operations, explicit actor id
- Time preconditions: completion only after the event start + grace buffer
- Side effects in the same transaction: status ledger, notifications,
  speaker statistics, event completion check
"""
import logging
import random
import string
import time
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from speakerhub.config import settings
from speakerhub.errors import (
    DuplicateError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    PreconditionError,
)
from speakerhub.models.booking import Booking, BookingStatus, BookingPriority, TRANSITIONS
from speakerhub.models.event import Event, EventStatus
from speakerhub.models.notification import NotificationType
from speakerhub.models.speaker import Speaker
from speakerhub.models.status_change import EntityType
from speakerhub.services.history_service import record_status_change
from speakerhub.services.notification_service import notify
from speakerhub.services.stats_service import apply_speaker_statistics, payment_amount_for
from speakerhub.services.transitions import transition
from speakerhub.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

STALE_BOOKING_REASON = "Event date passed before payment"


def _load_booking(db: Session, booking_id: str) -> Booking:
    booking = (
        db.query(Booking)
        .options(joinedload(Booking.event), joinedload(Booking.speaker))
        .filter(Booking.id == booking_id)
        .first()
    )
    if not booking:
        raise NotFoundError("Booking")
    return booking


def _speaker_profile_id(booking: Booking) -> str:
    return booking.speaker.profile_id


def _require_organizer(booking: Booking, actor_profile_id: str) -> None:
    if booking.organizer_id != actor_profile_id:
        raise ForbiddenError("Only the event organizer may perform this action")


def _require_party(booking: Booking, actor_profile_id: str) -> None:
    if actor_profile_id not in (booking.organizer_id, _speaker_profile_id(booking)):
        raise ForbiddenError("Only the organizer or the booked speaker may perform this action")


def _move(
    db: Session,
    booking: Booking,
    new_status: BookingStatus,
    actor_profile_id: Optional[str],
    reason: Optional[str] = None,
) -> None:
    """Apply one state-machine edge and append it to the ledger.

    The row is claimed with a conditional UPDATE on the status read, so a
    concurrent transition that already moved the booking makes this one fail.
    """
    previous = booking.status
    if new_status not in TRANSITIONS[previous]:
        raise PreconditionError(f"Cannot move booking from {previous.value} to {new_status.value}")

    now = utcnow()
    claimed = db.execute(
        update(Booking)
        .where(Booking.id == booking.id, Booking.status == previous)
        .values(status=new_status, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount != 1:
        raise PreconditionError(f"Booking is no longer {previous.value}")

    booking.status = new_status
    booking.updated_at = now
    record_status_change(db, EntityType.booking, booking.id, previous, new_status, actor_profile_id, reason)


def _payment_reference() -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=9))
    return f"PAY-{int(time.time() * 1000)}-{suffix}"


@transition
def apply_to_event(
    db: Session,
    event_id: str,
    actor_profile_id: str,
    message: Optional[str] = None,
    proposed_rate=None,
) -> Booking:
    """A speaker applies to speak at an open event → pending booking."""
    speaker = db.query(Speaker).filter(Speaker.profile_id == actor_profile_id).first()
    if not speaker:
        raise ForbiddenError("Only speakers may apply to events")

    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError("Event")
    if event.status != EventStatus.open:
        raise PreconditionError(f"Event is {event.status.value}, not open for applications")
    if event.organizer_id == actor_profile_id:
        raise PreconditionError("Organizers cannot apply to their own events")

    existing = (
        db.query(Booking)
        .filter(Booking.event_id == event_id, Booking.speaker_id == speaker.id)
        .first()
    )
    if existing:
        raise DuplicateError(f"You have already applied to this event (status: {existing.status.value})")

    booking = Booking(
        event_id=event_id,
        speaker_id=speaker.id,
        organizer_id=event.organizer_id,
        status=BookingStatus.pending,
        agreed_rate=proposed_rate,
        message=message,
    )
    db.add(booking)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise DuplicateError("You have already applied to this event")

    record_status_change(db, EntityType.booking, booking.id, None, BookingStatus.pending, actor_profile_id)
    notify(
        db,
        recipient_id=event.organizer_id,
        notification_type=NotificationType.submitted,
        booking_id=booking.id,
        message=f"New application for '{event.title}'",
    )
    db.commit()
    db.refresh(booking)
    logger.info("Speaker %s applied to event %s (booking %s)", speaker.id, event_id, booking.id)
    return booking


def _respond(
    db: Session,
    booking_id: str,
    actor_profile_id: str,
    new_status: BookingStatus,
    reason: Optional[str],
    reviewer_notes: Optional[str],
) -> Booking:
    booking = _load_booking(db, booking_id)
    _require_organizer(booking, actor_profile_id)
    _move(db, booking, new_status, actor_profile_id, reason)

    booking.responded_at = utcnow()
    booking.status_reason = reason
    if reviewer_notes is not None:
        booking.reviewer_notes = reviewer_notes

    notify(
        db,
        recipient_id=_speaker_profile_id(booking),
        notification_type=NotificationType(new_status.value),
        booking_id=booking.id,
        message=f"Your application for '{booking.event.title}' was {new_status.value}",
    )
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s %s by organizer %s", booking_id, new_status.value, actor_profile_id)
    return booking


@transition
def accept_booking(
    db: Session,
    booking_id: str,
    actor_profile_id: str,
    reason: Optional[str] = None,
    reviewer_notes: Optional[str] = None,
) -> Booking:
    """Organizer accepts a pending application."""
    return _respond(db, booking_id, actor_profile_id, BookingStatus.accepted, reason, reviewer_notes)


@transition
def reject_booking(
    db: Session,
    booking_id: str,
    actor_profile_id: str,
    reason: Optional[str] = None,
    reviewer_notes: Optional[str] = None,
) -> Booking:
    """Organizer rejects a pending application."""
    return _respond(db, booking_id, actor_profile_id, BookingStatus.rejected, reason, reviewer_notes)


@transition
def pay_booking(
    db: Session,
    booking_id: str,
    actor_profile_id: str,
    payment_reference: Optional[str] = None,
) -> Booking:
    """Organizer settles an accepted booking; amount is rate × event duration."""
    booking = _load_booking(db, booking_id)
    _require_organizer(booking, actor_profile_id)
    _move(db, booking, BookingStatus.paid, actor_profile_id)

    booking.payment_amount = payment_amount_for(booking)
    booking.payment_reference = payment_reference or _payment_reference()
    booking.payment_date = utcnow()

    notify(
        db,
        recipient_id=_speaker_profile_id(booking),
        notification_type=NotificationType.paid,
        booking_id=booking.id,
        message=f"Payment received for '{booking.event.title}'",
        extra={"amount": str(booking.payment_amount), "reference": booking.payment_reference},
    )
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s paid: %s (%s)", booking_id, booking.payment_amount, booking.payment_reference)
    return booking


def completion_opens_at(event: Event) -> datetime:
    return as_utc(event.date_time) + timedelta(hours=settings.COMPLETION_GRACE_HOURS)


def check_event_completion(db: Session, event_id: str) -> bool:
    """Mark the event finished once every paid booking has been completed.

    Returns True if the event status changed. Caller owns the commit.
    """
    statuses = [
        status
        for (status,) in db.query(Booking.status)
        .filter(
            Booking.event_id == event_id,
            Booking.status.in_([BookingStatus.paid, BookingStatus.completed]),
        )
        .all()
    ]
    if not statuses or BookingStatus.paid in statuses:
        return False

    event = db.query(Event).filter(Event.id == event_id).one()
    if event.status in (EventStatus.finished, EventStatus.cancelled):
        return False
    event.status = EventStatus.finished
    event.updated_at = utcnow()
    logger.info("Event %s finished: %d booking(s) completed", event_id, len(statuses))
    return True


@transition
def complete_booking(
    db: Session,
    booking_id: str,
    actor_profile_id: str,
    now: Optional[datetime] = None,
) -> Booking:
    """Either party marks a paid booking completed once the event has elapsed."""
    now = now or utcnow()
    booking = _load_booking(db, booking_id)
    _require_party(booking, actor_profile_id)

    if booking.status != BookingStatus.paid:
        raise PreconditionError("Booking must be paid before it can be completed")
    opens_at = completion_opens_at(booking.event)
    if now < opens_at:
        raise PreconditionError(
            f"Event has not yet concluded; completion opens at {opens_at.isoformat()}"
        )

    _move(db, booking, BookingStatus.completed, actor_profile_id)
    booking.completed_at = now
    db.flush()

    apply_speaker_statistics(db, booking.speaker)
    check_event_completion(db, booking.event_id)

    counterpart = booking.organizer_id if actor_profile_id != booking.organizer_id else _speaker_profile_id(booking)
    notify(
        db,
        recipient_id=counterpart,
        notification_type=NotificationType.completed,
        booking_id=booking.id,
        message=f"'{booking.event.title}' was marked completed",
    )
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s completed by %s", booking_id, actor_profile_id)
    return booking


@transition
def rate_booking(
    db: Session,
    booking_id: str,
    actor_profile_id: str,
    rating: int,
    comment: Optional[str] = None,
) -> Booking:
    """Organizer rates the speaker of a completed booking, exactly once."""
    booking = _load_booking(db, booking_id)
    _require_organizer(booking, actor_profile_id)

    if booking.status != BookingStatus.completed:
        raise PreconditionError("Booking must be completed before rating")
    if booking.rated:
        raise PreconditionError("Booking has already been rated")
    if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
        raise InvalidInputError("Rating must be an integer from 1 to 5")

    rated_at = utcnow()
    claimed = db.execute(
        update(Booking)
        .where(
            Booking.id == booking_id,
            Booking.status == BookingStatus.completed,
            Booking.rated_at.is_(None),
        )
        .values(rating=rating, rating_comment=comment, rated_at=rated_at)
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount != 1:
        raise PreconditionError("Booking has already been rated")

    booking.rating = rating
    booking.rating_comment = comment
    booking.rated_at = rated_at
    db.flush()

    apply_speaker_statistics(db, booking.speaker)
    notify(
        db,
        recipient_id=_speaker_profile_id(booking),
        notification_type=NotificationType.rated,
        booking_id=booking.id,
        message=f"You received a {rating}-star rating for '{booking.event.title}'",
        extra={"rating": rating},
    )
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s rated %d by organizer %s", booking_id, rating, actor_profile_id)
    return booking


@transition
def cancel_booking(
    db: Session,
    booking_id: str,
    actor_profile_id: str,
    reason: Optional[str] = None,
) -> Booking:
    """Either party withdraws a live booking."""
    booking = _load_booking(db, booking_id)
    _require_party(booking, actor_profile_id)
    _move(db, booking, BookingStatus.cancelled, actor_profile_id, reason)
    booking.status_reason = reason

    counterpart = booking.organizer_id if actor_profile_id != booking.organizer_id else _speaker_profile_id(booking)
    notify(
        db,
        recipient_id=counterpart,
        notification_type=NotificationType.cancelled,
        booking_id=booking.id,
        message=f"Booking for '{booking.event.title}' was cancelled",
    )
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s cancelled by %s (reason: %s)", booking_id, actor_profile_id, reason)
    return booking


@transition
def set_priority(db: Session, booking_id: str, actor_profile_id: str, priority: str) -> Booking:
    booking = _load_booking(db, booking_id)
    _require_organizer(booking, actor_profile_id)
    try:
        booking.priority = BookingPriority(priority)
    except ValueError:
        raise InvalidInputError(f"Invalid priority: {priority}")

    db.commit()
    db.refresh(booking)
    logger.info("Booking %s priority set to %s", booking_id, priority)
    return booking


@transition
def cancel_stale_bookings(db: Session, now: Optional[datetime] = None) -> dict:
    """Cancel pending/accepted bookings whose event start has passed without payment.

    Idempotent: a second run finds nothing left to cancel.
    """
    now = now or utcnow()
    stale = (
        db.query(Booking)
        .join(Event, Booking.event_id == Event.id)
        .options(joinedload(Booking.event), joinedload(Booking.speaker))
        .filter(
            Booking.status.in_([BookingStatus.pending, BookingStatus.accepted]),
            Event.date_time <= now,
        )
        .all()
    )
    for booking in stale:
        _move(db, booking, BookingStatus.cancelled, None, STALE_BOOKING_REASON)
        booking.status_reason = STALE_BOOKING_REASON
        notify(
            db,
            recipient_id=_speaker_profile_id(booking),
            notification_type=NotificationType.cancelled,
            booking_id=booking.id,
            message=f"Booking for '{booking.event.title}' was cancelled: {STALE_BOOKING_REASON.lower()}",
        )

    booking_ids = [b.id for b in stale]
    db.commit()
    logger.info("Stale booking sweep cancelled %d booking(s)", len(booking_ids))
    return {"cancelled": len(booking_ids), "booking_ids": booking_ids}

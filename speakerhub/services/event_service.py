"""Event service — organizer-owned event records.

Responsibilities:
- Authorization hook: only the organizer may update or cancel
- Status edits limited to open / in_progress / completed; ``finished`` is
  reached only through booking completion
- Cancellation cascade: live bookings are cancelled and pending invitations
  expired in the same transaction, each with a ledger entry
"""
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from speakerhub.errors import ForbiddenError, InvalidInputError, NotFoundError, PreconditionError
from speakerhub.models.booking import Booking, BookingStatus, LIVE_STATUSES
from speakerhub.models.event import Event, EventFormat, EventStatus
from speakerhub.models.invitation import Invitation, InvitationStatus
from speakerhub.models.notification import NotificationType
from speakerhub.models.profile import Profile
from speakerhub.models.speaker import Speaker
from speakerhub.models.status_change import EntityType
from speakerhub.services.history_service import record_status_change
from speakerhub.services.notification_service import notify
from speakerhub.services.transitions import transition
from speakerhub.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (EventStatus.open, EventStatus.in_progress, EventStatus.completed)
CLOSED_STATUSES = (EventStatus.finished, EventStatus.cancelled)
UPDATABLE_FIELDS = (
    "title", "description", "event_type", "format", "location", "date_time", "timezone",
    "duration_hours", "budget_min", "budget_max", "required_topics", "status",
)
REQUIRED_FIELDS = ("title", "description", "event_type", "format", "date_time", "timezone", "duration_hours", "status")


def _check_authorization(event: Event, actor_profile_id: str) -> None:
    if event.organizer_id != actor_profile_id:
        raise ForbiddenError("Only the organizer may modify this event")


def _check_budget(budget_min, budget_max) -> None:
    if budget_min is not None and budget_max is not None and budget_min > budget_max:
        raise InvalidInputError("budget_min cannot exceed budget_max")


def _event_format(value: str) -> EventFormat:
    try:
        return EventFormat(value)
    except ValueError:
        raise InvalidInputError(f"Invalid event format: {value}")


def get_event(db: Session, event_id: str) -> Optional[Event]:
    return db.query(Event).filter(Event.id == event_id).first()


def list_events(
    db: Session,
    organizer_id: Optional[str] = None,
    status: Optional[str] = None,
    upcoming: bool = False,
    include_cancelled: bool = False,
) -> list[Event]:
    query = db.query(Event)
    if organizer_id:
        query = query.filter(Event.organizer_id == organizer_id)
    if status:
        query = query.filter(Event.status == EventStatus(status))
    elif not include_cancelled:
        query = query.filter(Event.status != EventStatus.cancelled)
    if upcoming:
        query = query.filter(Event.date_time > utcnow())
    return query.order_by(Event.date_time).all()


@transition
def create_event(
    db: Session,
    organizer_id: str,
    title: str,
    date_time: datetime,
    duration_hours,
    description: str = "",
    event_type: str = "conference",
    format: str = "in_person",
    location: Optional[str] = None,
    timezone: str = "UTC",
    budget_min=None,
    budget_max=None,
    required_topics: Optional[list[str]] = None,
) -> Event:
    """Create an open event owned by ``organizer_id``."""
    organizer = db.query(Profile).filter(Profile.id == organizer_id).first()
    if not organizer:
        raise NotFoundError("Organizer profile")
    _check_budget(budget_min, budget_max)

    event = Event(
        organizer_id=organizer_id,
        title=title,
        description=description,
        event_type=event_type,
        format=_event_format(format),
        location=location,
        date_time=as_utc(date_time),
        timezone=timezone,
        duration_hours=duration_hours,
        budget_min=budget_min,
        budget_max=budget_max,
        required_topics=sorted(set(required_topics or [])),
        status=EventStatus.open,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by organizer %s", title, event.id, organizer_id)
    return event


@transition
def update_event(db: Session, event_id: str, actor_profile_id: str, updates: dict[str, Any]) -> Event:
    """Organizer edits descriptive fields or moves status among the editable ones."""
    event = get_event(db, event_id)
    if not event:
        raise NotFoundError("Event")
    _check_authorization(event, actor_profile_id)
    if event.status in CLOSED_STATUSES:
        raise PreconditionError(f"Event is {event.status.value} and can no longer be edited")

    for field, value in updates.items():
        if field not in UPDATABLE_FIELDS:
            continue
        if value is None and field in REQUIRED_FIELDS:
            raise InvalidInputError(f"{field} cannot be cleared")
        if field == "status":
            try:
                value = EventStatus(value)
            except ValueError:
                raise InvalidInputError(f"Invalid event status: {value}")
            if value not in EDITABLE_STATUSES:
                raise PreconditionError(f"Event status cannot be set to {value.value} directly")
        elif field == "format":
            value = _event_format(value)
        elif field == "date_time":
            value = as_utc(value)
        elif field == "required_topics":
            value = sorted(set(value or []))
        setattr(event, field, value)

    _check_budget(event.budget_min, event.budget_max)
    event.updated_at = utcnow()
    db.commit()
    db.refresh(event)
    logger.info("Updated event %s (%s)", event_id, ", ".join(sorted(updates)))
    return event


@transition
def cancel_event(db: Session, event_id: str, actor_profile_id: str, reason: Optional[str] = None) -> dict:
    """Cancel an event, withdrawing every live booking and pending invitation."""
    event = get_event(db, event_id)
    if not event:
        raise NotFoundError("Event")
    _check_authorization(event, actor_profile_id)
    if event.status in CLOSED_STATUSES:
        raise PreconditionError(f"Event is already {event.status.value}")

    now = utcnow()
    event.status = EventStatus.cancelled
    event.updated_at = now
    cascade_reason = reason or "Event cancelled"

    bookings = (
        db.query(Booking)
        .filter(Booking.event_id == event_id, Booking.status.in_(list(LIVE_STATUSES)))
        .all()
    )
    for booking in bookings:
        previous = booking.status
        booking.status = BookingStatus.cancelled
        booking.status_reason = cascade_reason
        booking.updated_at = now
        record_status_change(
            db, EntityType.booking, booking.id, previous, BookingStatus.cancelled, actor_profile_id, cascade_reason,
        )

    invitations = (
        db.query(Invitation)
        .filter(Invitation.event_id == event_id, Invitation.status == InvitationStatus.pending)
        .all()
    )
    for invitation in invitations:
        invitation.status = InvitationStatus.expired
        invitation.updated_at = now
        record_status_change(
            db, EntityType.invitation, invitation.id,
            InvitationStatus.pending, InvitationStatus.expired, actor_profile_id, cascade_reason,
        )

    speaker_ids = {b.speaker_id for b in bookings} | {i.speaker_id for i in invitations}
    if speaker_ids:
        for (profile_id,) in db.query(Speaker.profile_id).filter(Speaker.id.in_(sorted(speaker_ids))).all():
            notify(
                db,
                recipient_id=profile_id,
                notification_type=NotificationType.cancelled,
                message=f"'{event.title}' has been cancelled",
                extra={"event_id": event.id, "reason": cascade_reason},
            )

    db.commit()
    db.refresh(event)
    logger.info(
        "Cancelled event %s: %d booking(s), %d invitation(s) withdrawn (reason: %s)",
        event_id, len(bookings), len(invitations), reason,
    )
    return {
        "event": event,
        "cancelled_bookings": len(bookings),
        "expired_invitations": len(invitations),
    }

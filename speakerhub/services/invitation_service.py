"""Invitation workflow — organizer offers, speaker responses, expiry sweep.

Accepting an invitation runs as one transaction: a conditional update moves
the invitation out of ``pending`` (so only one concurrent accept can win),
then an INSERT .. ON CONFLICT upsert keyed on the booking's
(event_id, speaker_id) unique constraint creates or refreshes the booking.
Any failure rolls both back together, so the invitation is never left
accepted without its booking.
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
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
from speakerhub.models.booking import Booking, BookingStatus
from speakerhub.models.event import Event, EventStatus
from speakerhub.models.invitation import Invitation, InvitationStatus
from speakerhub.models.notification import NotificationType
from speakerhub.models.speaker import Speaker
from speakerhub.models.status_change import EntityType
from speakerhub.services.history_service import record_status_change
from speakerhub.services.notification_service import notify
from speakerhub.services.transitions import transition
from speakerhub.timeutils import utcnow

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# An invitation may only refresh a booking that has not progressed past acceptance
_UPSERTABLE_BOOKING_STATUSES = (BookingStatus.pending, BookingStatus.accepted)


def get_invitation(db: Session, invitation_id: str) -> Optional[Invitation]:
    return (
        db.query(Invitation)
        .options(joinedload(Invitation.event), joinedload(Invitation.speaker))
        .filter(Invitation.id == invitation_id)
        .first()
    )


def _load_invitation(db: Session, invitation_id: str) -> Invitation:
    invitation = get_invitation(db, invitation_id)
    if not invitation:
        raise NotFoundError("Invitation")
    return invitation


def _require_invited_speaker(invitation: Invitation, actor_profile_id: str) -> None:
    if invitation.speaker.profile_id != actor_profile_id:
        raise ForbiddenError("Only the invited speaker may respond to this invitation")


def _require_respondable(invitation: Invitation, now: datetime) -> None:
    if invitation.status != InvitationStatus.pending:
        raise PreconditionError(f"Invitation is already {invitation.status.value}")
    if invitation.expired_at(now):
        raise PreconditionError("Invitation has expired")


def check_existing_invitation(db: Session, event_id: str, speaker_id: str) -> Optional[Invitation]:
    return (
        db.query(Invitation)
        .filter(Invitation.event_id == event_id, Invitation.speaker_id == speaker_id)
        .first()
    )


@transition
def create_invitation(
    db: Session,
    event_id: str,
    actor_profile_id: str,
    speaker_id: str,
    message: Optional[str] = None,
    proposed_rate=None,
    expires_in_days: Optional[int] = None,
) -> Invitation:
    """Organizer invites a specific speaker to one of their open events."""
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError("Event")
    if event.organizer_id != actor_profile_id:
        raise ForbiddenError("Only the event organizer may invite speakers")
    if event.status != EventStatus.open:
        raise PreconditionError(f"Event is {event.status.value}, not open for invitations")

    speaker = db.query(Speaker).filter(Speaker.id == speaker_id).first()
    if not speaker:
        raise NotFoundError("Speaker")
    if speaker.profile_id == actor_profile_id:
        raise PreconditionError("Organizers cannot invite themselves")

    if expires_in_days is None:
        expires_in_days = settings.DEFAULT_INVITATION_EXPIRY_DAYS
    if expires_in_days < 1:
        raise InvalidInputError("expires_in_days must be at least 1")

    if check_existing_invitation(db, event_id, speaker_id):
        raise DuplicateError("This speaker has already been invited to this event")

    invitation = Invitation(
        event_id=event_id,
        organizer_id=actor_profile_id,
        speaker_id=speaker_id,
        message=message,
        proposed_rate=proposed_rate,
        status=InvitationStatus.pending,
        expires_at=utcnow() + timedelta(days=expires_in_days),
    )
    db.add(invitation)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise DuplicateError("This speaker has already been invited to this event")

    record_status_change(db, EntityType.invitation, invitation.id, None, InvitationStatus.pending, actor_profile_id)
    notify(
        db,
        recipient_id=speaker.profile_id,
        notification_type=NotificationType.invited,
        invitation_id=invitation.id,
        message=f"You have been invited to speak at '{event.title}'",
        extra={"expires_in_days": expires_in_days},
    )
    db.commit()
    db.refresh(invitation)
    logger.info("Invitation %s created: event %s → speaker %s", invitation.id, event_id, speaker_id)
    return invitation


def _upsert_booking(db: Session, invitation: Invitation, now: datetime) -> str:
    """Insert the accepted booking or refresh the pair's live booking; return its id."""
    dialect = db.get_bind().dialect.name
    if dialect not in _UPSERT_INSERTS:
        raise NotImplementedError(f"Booking upsert is not supported on {dialect}")

    table = Booking.__table__
    stmt = _UPSERT_INSERTS[dialect](table).values(
        id=str(uuid.uuid4()),
        event_id=invitation.event_id,
        speaker_id=invitation.speaker_id,
        organizer_id=invitation.organizer_id,
        invitation_id=invitation.id,
        status=BookingStatus.accepted,
        agreed_rate=invitation.proposed_rate,
        message=invitation.message,
        responded_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.event_id, table.c.speaker_id],
        set_={
            "status": BookingStatus.accepted,
            "organizer_id": stmt.excluded.organizer_id,
            "invitation_id": stmt.excluded.invitation_id,
            "agreed_rate": stmt.excluded.agreed_rate,
            "message": stmt.excluded.message,
            "responded_at": now,
            "updated_at": now,
        },
        where=table.c.status.in_(_UPSERTABLE_BOOKING_STATUSES),
    ).returning(table.c.id)

    row = db.execute(stmt).first()
    if row is None:
        raise DuplicateError("A booking for this event and speaker has already progressed past acceptance")
    return row[0]


@transition
def accept_invitation(
    db: Session,
    invitation_id: str,
    actor_profile_id: str,
    now: Optional[datetime] = None,
) -> tuple[Invitation, str]:
    """Invited speaker accepts → invitation accepted and exactly one booking for the pair."""
    now = now or utcnow()
    invitation = _load_invitation(db, invitation_id)
    _require_invited_speaker(invitation, actor_profile_id)
    _require_respondable(invitation, now)

    claimed = db.execute(
        update(Invitation)
        .where(
            Invitation.id == invitation_id,
            Invitation.status == InvitationStatus.pending,
            Invitation.expires_at > now,
        )
        .values(status=InvitationStatus.accepted, responded_at=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount != 1:
        raise PreconditionError("Invitation is no longer pending")

    previous_booking = (
        db.query(Booking.status)
        .filter(Booking.event_id == invitation.event_id, Booking.speaker_id == invitation.speaker_id)
        .first()
    )
    booking_id = _upsert_booking(db, invitation, now)

    record_status_change(
        db, EntityType.invitation, invitation.id,
        InvitationStatus.pending, InvitationStatus.accepted, actor_profile_id,
    )
    record_status_change(
        db, EntityType.booking, booking_id,
        previous_booking[0] if previous_booking else None, BookingStatus.accepted, actor_profile_id,
        reason="Invitation accepted",
    )
    notify(
        db,
        recipient_id=invitation.organizer_id,
        notification_type=NotificationType.invitation_accepted,
        invitation_id=invitation.id,
        booking_id=booking_id,
        message=f"Your invitation to '{invitation.event.title}' was accepted",
    )
    db.commit()
    db.refresh(invitation)
    logger.info("Invitation %s accepted; booking %s", invitation_id, booking_id)
    return invitation, booking_id


@transition
def decline_invitation(
    db: Session,
    invitation_id: str,
    actor_profile_id: str,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Invitation:
    """Invited speaker declines; no booking is touched."""
    now = now or utcnow()
    invitation = _load_invitation(db, invitation_id)
    _require_invited_speaker(invitation, actor_profile_id)
    _require_respondable(invitation, now)

    invitation.status = InvitationStatus.declined
    invitation.responded_at = now
    invitation.updated_at = now
    record_status_change(
        db, EntityType.invitation, invitation.id,
        InvitationStatus.pending, InvitationStatus.declined, actor_profile_id, reason,
    )
    notify(
        db,
        recipient_id=invitation.organizer_id,
        notification_type=NotificationType.invitation_declined,
        invitation_id=invitation.id,
        message=f"Your invitation to '{invitation.event.title}' was declined",
    )
    db.commit()
    db.refresh(invitation)
    logger.info("Invitation %s declined by %s", invitation_id, actor_profile_id)
    return invitation


@transition
def expire_old_invitations(db: Session, now: Optional[datetime] = None) -> dict:
    """Move every pending invitation past its expiry to ``expired``. Idempotent."""
    now = now or utcnow()
    overdue = (
        db.query(Invitation)
        .filter(Invitation.status == InvitationStatus.pending, Invitation.expires_at <= now)
        .all()
    )
    for invitation in overdue:
        invitation.status = InvitationStatus.expired
        invitation.updated_at = now
        record_status_change(
            db, EntityType.invitation, invitation.id,
            InvitationStatus.pending, InvitationStatus.expired, None, "Invitation expired",
        )

    invitation_ids = [i.id for i in overdue]
    db.commit()
    logger.info("Expired %d pending invitation(s)", len(invitation_ids))
    return {"expired": len(invitation_ids), "invitation_ids": invitation_ids}

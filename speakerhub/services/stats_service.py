"""Statistics aggregator — derived speaker metrics and aggregate queries.

Speaker aggregates (total_talks, total_ratings, average_rating,
total_earnings) are always recomputed from the speaker's bookings, never
incremented in place, so the single-speaker recompute and the bulk sweep
agree and both are idempotent.
"""
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session, joinedload

from speakerhub.errors import NotFoundError
from speakerhub.models.booking import Booking, BookingStatus
from speakerhub.models.invitation import Invitation, InvitationStatus
from speakerhub.models.profile import Profile
from speakerhub.models.speaker import Speaker
from speakerhub.services.transitions import transition
from speakerhub.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
STAT_FIELDS = ("total_talks", "total_ratings", "average_rating", "total_earnings")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)


def payment_amount_for(booking: Booking) -> Decimal:
    """Speaker hourly rate × event duration, falling back to the agreed rate."""
    rate = booking.speaker.hourly_rate if booking.speaker is not None else None
    if rate is None:
        rate = booking.agreed_rate
    return _money(Decimal(str(rate or 0)) * Decimal(str(booking.event.duration_hours)))


def average_rating(ratings: list[int]) -> Decimal:
    """Mean of ratings rounded half-up to 2 decimals; 0.00 when there are none."""
    if not ratings:
        return Decimal("0.00")
    return (Decimal(sum(ratings)) / Decimal(len(ratings))).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_speaker_statistics(db: Session, speaker_id: str) -> dict[str, Any]:
    """Derive a speaker's aggregates from the authoritative booking rows."""
    completed = (
        db.query(Booking)
        .options(joinedload(Booking.event), joinedload(Booking.speaker))
        .filter(Booking.speaker_id == speaker_id, Booking.status == BookingStatus.completed)
        .all()
    )
    ratings = [
        rating
        for (rating,) in db.query(Booking.rating)
        .filter(Booking.speaker_id == speaker_id, Booking.rating.isnot(None))
        .all()
    ]
    earnings = sum(
        (_money(b.payment_amount) if b.payment_amount is not None else payment_amount_for(b) for b in completed),
        Decimal("0.00"),
    )
    return {
        "total_talks": len(completed),
        "total_ratings": len(ratings),
        "average_rating": average_rating(ratings),
        "total_earnings": _money(earnings),
    }


def _stored(speaker: Speaker, field: str):
    value = getattr(speaker, field)
    if field in ("average_rating", "total_earnings"):
        return _money(value)
    return value or 0


def apply_speaker_statistics(db: Session, speaker: Speaker) -> Optional[dict[str, dict]]:
    """Write recomputed aggregates onto ``speaker`` if any differ.

    Returns the ``{field: {"old": .., "new": ..}}`` diff, or None when the
    stored values are already current. Caller owns the commit.
    """
    computed = compute_speaker_statistics(db, speaker.id)
    changes = {}
    for field in STAT_FIELDS:
        old = _stored(speaker, field)
        if old != computed[field]:
            changes[field] = {"old": old, "new": computed[field]}
            setattr(speaker, field, computed[field])
    return changes or None


@transition
def sync_speaker_statistics(db: Session, speaker_id: str) -> dict[str, Any]:
    """Recompute and persist one speaker's aggregates."""
    speaker = db.query(Speaker).filter(Speaker.id == speaker_id).first()
    if not speaker:
        raise NotFoundError("Speaker")

    changes = apply_speaker_statistics(db, speaker)
    if changes:
        db.commit()
        logger.info("Speaker %s statistics synced: %s", speaker_id, sorted(changes))
    return {
        "speaker_id": speaker_id,
        "changes": changes,
        "statistics": {field: _stored(speaker, field) for field in STAT_FIELDS},
    }


@transition
def sync_all_speaker_statistics(db: Session) -> dict[str, Any]:
    """Reconcile every speaker's aggregates with their bookings.

    Each speaker commits (or rolls back) independently; a failure is recorded
    in ``results`` and the sweep moves on.
    """
    speaker_ids = [sid for (sid,) in db.query(Speaker.id).order_by(Speaker.created_at, Speaker.id).all()]
    results = []
    updated = 0

    for speaker_id in speaker_ids:
        try:
            speaker = db.query(Speaker).filter(Speaker.id == speaker_id).one()
            changes = apply_speaker_statistics(db, speaker)
            if changes:
                db.commit()
                updated += 1
            results.append({"speaker_id": speaker_id, "success": True, "changes": changes})
        except Exception:
            db.rollback()
            logger.exception("Statistics sync failed for speaker %s", speaker_id)
            results.append({
                "speaker_id": speaker_id,
                "success": False,
                "error": "Statistics could not be recomputed for this speaker",
            })

    logger.info("Statistics sweep finished: updated %d of %d speakers", updated, len(speaker_ids))
    return {"success": True, "total": len(speaker_ids), "updated": updated, "results": results}


def get_application_stats(db: Session, profile_id: str) -> Optional[dict[str, Any]]:
    """Booking counts and response metrics for a profile, as organizer or speaker."""
    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        return None

    speaker = db.query(Speaker).filter(Speaker.profile_id == profile_id).first()
    scope = Booking.organizer_id == profile_id
    if speaker:
        scope = or_(scope, Booking.speaker_id == speaker.id)

    def _count(status: BookingStatus):
        return func.coalesce(func.sum(case((Booking.status == status, 1), else_=0)), 0)

    total, pending, accepted, rejected, completed = (
        db.query(
            func.count(Booking.id),
            _count(BookingStatus.pending),
            _count(BookingStatus.accepted),
            _count(BookingStatus.rejected),
            _count(BookingStatus.completed),
        )
        .filter(scope)
        .one()
    )

    responses = (
        db.query(Booking.created_at, Booking.responded_at)
        .filter(scope, Booking.responded_at.isnot(None))
        .all()
    )
    hours = [
        (as_utc(responded) - as_utc(created)).total_seconds() / 3600
        for created, responded in responses
        if created is not None
    ]

    return {
        "total": total,
        "pending": pending,
        "accepted": accepted,
        "rejected": rejected,
        "completed": completed,
        "response_rate": round(len(responses) / total * 100, 2) if total else 0.0,
        "avg_response_time_hours": round(sum(hours) / len(hours), 2) if hours else 0.0,
    }


def get_invitation_stats(db: Session, event_id: str, now: Optional[datetime] = None) -> dict[str, int]:
    """Invitation counts for an event. Unswept pending invitations past expiry count as expired."""
    now = now or utcnow()
    is_expired = or_(
        Invitation.status == InvitationStatus.expired,
        and_(Invitation.status == InvitationStatus.pending, Invitation.expires_at <= now),
    )
    is_pending = and_(Invitation.status == InvitationStatus.pending, Invitation.expires_at > now)

    def _sum(condition):
        return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

    total, pending, accepted, declined, expired = (
        db.query(
            func.count(Invitation.id),
            _sum(is_pending),
            _sum(Invitation.status == InvitationStatus.accepted),
            _sum(Invitation.status == InvitationStatus.declined),
            _sum(is_expired),
        )
        .filter(Invitation.event_id == event_id)
        .one()
    )
    return {
        "total": total,
        "pending": pending,
        "accepted": accepted,
        "declined": declined,
        "expired": expired,
    }

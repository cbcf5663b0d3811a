"""Read views — denormalized projections for listings and dashboards.

Each row joins a booking or invitation with its event, the speaker's
profile and the organizer's profile. Event times are returned both as
stored (UTC) and rendered in the event's own timezone.
"""
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, aliased

from speakerhub.config import settings
from speakerhub.models.booking import Booking, BookingStatus, BookingPriority
from speakerhub.models.event import Event
from speakerhub.models.invitation import Invitation
from speakerhub.models.profile import Profile
from speakerhub.models.speaker import Speaker, ExperienceLevel
from speakerhub.timeutils import as_utc, to_local, utcnow

SpeakerProfile = aliased(Profile, name="speaker_profile")
OrganizerProfile = aliased(Profile, name="organizer_profile")


def _application_rows(db: Session):
    return (
        db.query(Booking, Event, Speaker, SpeakerProfile, OrganizerProfile)
        .join(Event, Booking.event_id == Event.id)
        .join(Speaker, Booking.speaker_id == Speaker.id)
        .join(SpeakerProfile, Speaker.profile_id == SpeakerProfile.id)
        .join(OrganizerProfile, Booking.organizer_id == OrganizerProfile.id)
    )


def _application_view(row) -> dict[str, Any]:
    booking, event, speaker, speaker_profile, organizer_profile = row
    return {
        "id": booking.id,
        "event_id": booking.event_id,
        "speaker_id": booking.speaker_id,
        "organizer_id": booking.organizer_id,
        "status": booking.status.value,
        "priority": booking.priority.value,
        "agreed_rate": booking.agreed_rate,
        "message": booking.message,
        "rating": booking.rating,
        "created_at": as_utc(booking.created_at),
        "event_title": event.title,
        "event_date_time": as_utc(event.date_time),
        "event_local_time": to_local(event.date_time, event.timezone),
        "event_format": event.format.value,
        "event_type": event.event_type,
        "speaker_name": speaker_profile.full_name,
        "speaker_avatar": speaker_profile.avatar_url,
        "speaker_experience": speaker.experience_level.value,
        "speaker_average_rating": speaker.average_rating,
        "organizer_name": organizer_profile.full_name,
    }


def list_applications(
    db: Session,
    event_id: Optional[str] = None,
    speaker_id: Optional[str] = None,
    organizer_id: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Applications matching every given filter, newest first."""
    query = _application_rows(db)
    if event_id:
        query = query.filter(Booking.event_id == event_id)
    if speaker_id:
        query = query.filter(Booking.speaker_id == speaker_id)
    if organizer_id:
        query = query.filter(Booking.organizer_id == organizer_id)
    if status:
        query = query.filter(Booking.status == BookingStatus(status))
    if priority:
        query = query.filter(Booking.priority == BookingPriority(priority))
    return [_application_view(row) for row in query.order_by(Booking.created_at.desc()).all()]


def applications_needing_attention(
    db: Session, organizer_id: str, now: Optional[datetime] = None
) -> list[dict[str, Any]]:
    """An organizer's pending applications left unanswered too long, oldest first."""
    cutoff = (now or utcnow()) - timedelta(hours=settings.STALE_APPLICATION_HOURS)
    rows = (
        _application_rows(db)
        .filter(
            Booking.organizer_id == organizer_id,
            Booking.status == BookingStatus.pending,
            Booking.created_at < cutoff,
        )
        .order_by(Booking.created_at.asc())
        .all()
    )
    return [_application_view(row) for row in rows]


def _invitation_view(row) -> dict[str, Any]:
    invitation, event, speaker, speaker_profile, organizer_profile = row
    return {
        "id": invitation.id,
        "event_id": invitation.event_id,
        "organizer_id": invitation.organizer_id,
        "speaker_id": invitation.speaker_id,
        "message": invitation.message,
        "proposed_rate": invitation.proposed_rate,
        "status": invitation.status.value,
        "is_expired": invitation.is_expired,
        "expires_at": as_utc(invitation.expires_at),
        "created_at": as_utc(invitation.created_at),
        "event_title": event.title,
        "event_description": event.description,
        "event_date": as_utc(event.date_time),
        "event_local_time": to_local(event.date_time, event.timezone),
        "event_location": event.location,
        "event_type": event.event_type,
        "event_format": event.format.value,
        "speaker_name": speaker_profile.full_name,
        "speaker_email": speaker_profile.email,
        "speaker_experience": speaker.experience_level.value,
        "speaker_hourly_rate": speaker.hourly_rate,
        "organizer_name": organizer_profile.full_name,
        "organizer_email": organizer_profile.email,
    }


def _invitation_rows(db: Session):
    return (
        db.query(Invitation, Event, Speaker, SpeakerProfile, OrganizerProfile)
        .join(Event, Invitation.event_id == Event.id)
        .join(Speaker, Invitation.speaker_id == Speaker.id)
        .join(SpeakerProfile, Speaker.profile_id == SpeakerProfile.id)
        .join(OrganizerProfile, Invitation.organizer_id == OrganizerProfile.id)
    )


def organizer_invitations(db: Session, organizer_id: str) -> list[dict[str, Any]]:
    rows = (
        _invitation_rows(db)
        .filter(Invitation.organizer_id == organizer_id)
        .order_by(Invitation.created_at.desc())
        .all()
    )
    return [_invitation_view(row) for row in rows]


def speaker_invitations(db: Session, speaker_id: str) -> list[dict[str, Any]]:
    rows = (
        _invitation_rows(db)
        .filter(Invitation.speaker_id == speaker_id)
        .order_by(Invitation.created_at.desc())
        .all()
    )
    return [_invitation_view(row) for row in rows]


def search_speakers(
    db: Session,
    term: Optional[str] = None,
    experience_level: Optional[str] = None,
    limit: int = 10,
) -> list[dict[str, Any]]:
    """Available speakers matching a name/bio substring, best rated first."""
    query = (
        db.query(Speaker, Profile)
        .join(Profile, Speaker.profile_id == Profile.id)
        .filter(Speaker.available.is_(True))
    )
    if experience_level:
        query = query.filter(Speaker.experience_level == ExperienceLevel(experience_level))
    if term:
        pattern = f"%{term}%"
        query = query.filter(or_(Profile.full_name.ilike(pattern), Profile.bio.ilike(pattern)))

    rows = query.order_by(Speaker.average_rating.desc(), Profile.full_name).limit(limit).all()
    return [
        {
            "id": speaker.id,
            "experience_level": speaker.experience_level.value,
            "hourly_rate": speaker.hourly_rate,
            "average_rating": speaker.average_rating,
            "available": speaker.available,
            "full_name": profile.full_name,
            "email": profile.email,
            "bio": profile.bio,
            "location": profile.location,
            "avatar_url": profile.avatar_url,
        }
        for speaker, profile in rows
    ]

"""Profile API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from speakerhub.database import get_db
from speakerhub.models.profile import Profile, UserType
from speakerhub.models.speaker import Speaker, ExperienceLevel
from speakerhub.schemas.booking import ApplicationStats
from speakerhub.schemas.profile import ProfileCreate, ProfileUpdate, ProfileOut
from speakerhub.services import stats_service
from speakerhub.routers.common import parse_enum

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_profile_or_404(db: Session, profile_id: str) -> Profile:
    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.post("/", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
def create_profile(payload: ProfileCreate, db: Session = Depends(get_db)):
    """Create a profile; speakers (and ``both``) also get a speaker record."""
    user_type = parse_enum(UserType, payload.user_type, "user_type")
    profile = Profile(**payload.model_dump(exclude={"speaker", "user_type"}), user_type=user_type)
    details = None
    if user_type in (UserType.speaker, UserType.both):
        details = payload.speaker.model_dump() if payload.speaker else {}
        details["experience_level"] = parse_enum(
            ExperienceLevel, details.get("experience_level", "beginner"), "experience_level"
        )

    db.add(profile)
    try:
        db.flush()
        if details is not None:
            db.add(Speaker(profile_id=profile.id, **details))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="A profile already exists for this user_id")
    db.refresh(profile)
    logger.info("Created profile %s (%s, %s)", profile.id, profile.full_name, user_type.value)
    return profile


@router.get("/{profile_id}", response_model=ProfileOut)
def get_profile(profile_id: str, db: Session = Depends(get_db)):
    """Fetch a profile with its speaker record, if any."""
    return _get_profile_or_404(db, profile_id)


@router.patch("/{profile_id}", response_model=ProfileOut)
def update_profile(
    profile_id: str,
    payload: ProfileUpdate,
    actor_profile_id: str = Query(..., description="ID of the profile performing the update"),
    db: Session = Depends(get_db),
):
    """Owner edits their own profile (partial update)."""
    profile = _get_profile_or_404(db, profile_id)
    if profile.id != actor_profile_id:
        raise HTTPException(status_code=403, detail="Only the owner may edit this profile")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    logger.info("Updated profile %s", profile_id)
    return profile


@router.get("/{profile_id}/application-stats", response_model=ApplicationStats)
def application_stats(profile_id: str, db: Session = Depends(get_db)):
    """Booking counts and response metrics across the profile's roles."""
    stats = stats_service.get_application_stats(db, profile_id)
    if stats is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return stats

"""Speaker API routes — search, detail, and owner edits."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from speakerhub.database import get_db
from speakerhub.models.speaker import Speaker, ExperienceLevel
from speakerhub.routers.common import parse_enum
from speakerhub.schemas.profile import SpeakerOut, SpeakerUpdate, SpeakerSearchResult
from speakerhub.schemas.invitation import InvitationView
from speakerhub.services import views_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_speaker_or_404(db: Session, speaker_id: str) -> Speaker:
    speaker = db.query(Speaker).filter(Speaker.id == speaker_id).first()
    if not speaker:
        raise HTTPException(status_code=404, detail="Speaker not found")
    return speaker


@router.get("/search", response_model=list[SpeakerSearchResult])
def search_speakers(
    q: Optional[str] = Query(None, description="Substring of the speaker's name or bio"),
    experience_level: Optional[ExperienceLevel] = Query(None),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    """Available speakers, best rated first."""
    return views_service.search_speakers(
        db,
        term=q,
        experience_level=experience_level.value if experience_level else None,
        limit=limit,
    )


@router.get("/{speaker_id}", response_model=SpeakerOut)
def get_speaker(speaker_id: str, db: Session = Depends(get_db)):
    return _get_speaker_or_404(db, speaker_id)


@router.patch("/{speaker_id}", response_model=SpeakerOut)
def update_speaker(
    speaker_id: str,
    payload: SpeakerUpdate,
    actor_profile_id: str = Query(..., description="ID of the profile performing the update"),
    db: Session = Depends(get_db),
):
    """Owner edits descriptive speaker fields. Statistics are not editable here."""
    speaker = _get_speaker_or_404(db, speaker_id)
    if speaker.profile_id != actor_profile_id:
        raise HTTPException(status_code=403, detail="Only the owner may edit this speaker profile")

    updates = payload.model_dump(exclude_unset=True)
    if "experience_level" in updates:
        updates["experience_level"] = parse_enum(ExperienceLevel, updates["experience_level"], "experience_level")
    for field, value in updates.items():
        setattr(speaker, field, value)
    db.commit()
    db.refresh(speaker)
    logger.info("Updated speaker %s (%s)", speaker_id, ", ".join(sorted(updates)))
    return speaker


@router.get("/{speaker_id}/invitations", response_model=list[InvitationView])
def list_speaker_invitations(speaker_id: str, db: Session = Depends(get_db)):
    """Invitations received by a speaker, newest first."""
    _get_speaker_or_404(db, speaker_id)
    return views_service.speaker_invitations(db, speaker_id)

"""Invitation API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from speakerhub.database import get_db
from speakerhub.models.status_change import EntityType
from speakerhub.routers.common import unwrap
from speakerhub.schemas.booking import StatusChangeOut
from speakerhub.schemas.invitation import (
    ExistingInvitation,
    InvitationAccepted,
    InvitationCreate,
    InvitationOut,
    InvitationResponse,
    InvitationView,
)
from speakerhub.services import history_service, invitation_service, views_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=InvitationOut, status_code=status.HTTP_201_CREATED)
def create_invitation(payload: InvitationCreate, db: Session = Depends(get_db)):
    """Organizer invites a speaker to one of their open events."""
    return unwrap(invitation_service.create_invitation(db, **payload.model_dump()))


@router.get("/", response_model=list[InvitationView])
def list_organizer_invitations(organizer_id: str = Query(...), db: Session = Depends(get_db)):
    """Invitations sent by an organizer, newest first."""
    return views_service.organizer_invitations(db, organizer_id)


@router.get("/existing", response_model=ExistingInvitation)
def check_existing_invitation(
    event_id: str = Query(...),
    speaker_id: str = Query(...),
    db: Session = Depends(get_db),
):
    """Whether the speaker has already been invited to the event."""
    invitation = invitation_service.check_existing_invitation(db, event_id, speaker_id)
    if not invitation:
        return {"exists": False}
    return {"exists": True, "invitation_id": invitation.id, "status": invitation.status.value}


@router.get("/{invitation_id}", response_model=InvitationOut)
def get_invitation(invitation_id: str, db: Session = Depends(get_db)):
    invitation = invitation_service.get_invitation(db, invitation_id)
    if not invitation:
        raise HTTPException(status_code=404, detail="Invitation not found")
    return invitation


@router.post("/{invitation_id}/accept", response_model=InvitationAccepted)
def accept_invitation(invitation_id: str, payload: InvitationResponse, db: Session = Depends(get_db)):
    """Invited speaker accepts; returns the invitation and the resulting booking id."""
    invitation, booking_id = unwrap(
        invitation_service.accept_invitation(db, invitation_id, payload.actor_profile_id)
    )
    return {"invitation": invitation, "booking_id": booking_id}


@router.post("/{invitation_id}/decline", response_model=InvitationOut)
def decline_invitation(invitation_id: str, payload: InvitationResponse, db: Session = Depends(get_db)):
    return unwrap(invitation_service.decline_invitation(
        db, invitation_id, payload.actor_profile_id, reason=payload.reason,
    ))


@router.get("/{invitation_id}/history", response_model=list[StatusChangeOut])
def invitation_history(invitation_id: str, db: Session = Depends(get_db)):
    return history_service.list_history(db, EntityType.invitation, invitation_id)

"""Administrative sweeps — statistics reconciliation and time-based cleanups.

These are meant to be triggered by a scheduler; every sweep is idempotent.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from speakerhub.database import get_db
from speakerhub.routers.common import unwrap
from speakerhub.services import booking_service, invitation_service, stats_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/speaker-stats/sync")
def sync_all_speaker_statistics(db: Session = Depends(get_db)):
    """Recompute every speaker's aggregates; per-speaker failures are reported, not raised."""
    summary = unwrap(stats_service.sync_all_speaker_statistics(db))
    logger.info("Admin statistics sweep: %d/%d updated", summary["updated"], summary["total"])
    return summary


@router.post("/speaker-stats/{speaker_id}/sync")
def sync_speaker_statistics(speaker_id: str, db: Session = Depends(get_db)):
    return unwrap(stats_service.sync_speaker_statistics(db, speaker_id))


@router.post("/invitations/expire")
def expire_old_invitations(db: Session = Depends(get_db)):
    """Move pending invitations past their expiry to ``expired``."""
    return unwrap(invitation_service.expire_old_invitations(db))


@router.post("/bookings/cancel-stale")
def cancel_stale_bookings(db: Session = Depends(get_db)):
    """Cancel unpaid bookings whose event has already started."""
    return unwrap(booking_service.cancel_stale_bookings(db))

"""Notification API routes."""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from speakerhub.database import get_db
from speakerhub.routers.common import unwrap
from speakerhub.schemas.notification import NotificationOut, NotificationRead
from speakerhub.services import notification_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[NotificationOut])
def list_notifications(
    recipient_id: str = Query(...),
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
):
    """Notifications for a recipient, newest first."""
    return notification_service.list_notifications(db, recipient_id, unread_only=unread_only)


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: str, payload: NotificationRead, db: Session = Depends(get_db)):
    return unwrap(notification_service.mark_read(db, notification_id, payload.actor_profile_id))

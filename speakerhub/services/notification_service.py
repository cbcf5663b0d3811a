"""Notification service — append, list, and mark-read."""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from speakerhub.errors import ForbiddenError, NotFoundError
from speakerhub.models.notification import Notification, NotificationType
from speakerhub.services.transitions import transition
from speakerhub.timeutils import utcnow

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    recipient_id: str,
    notification_type: NotificationType,
    message: Optional[str] = None,
    booking_id: Optional[str] = None,
    invitation_id: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> Notification:
    """Queue a notification in the current transaction. Caller owns the commit."""
    notification = Notification(
        recipient_id=recipient_id,
        notification_type=notification_type,
        booking_id=booking_id,
        invitation_id=invitation_id,
        message=message,
        extra=extra,
    )
    db.add(notification)
    return notification


def list_notifications(db: Session, recipient_id: str, unread_only: bool = False) -> list[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == recipient_id)
    if unread_only:
        query = query.filter(Notification.read_at.is_(None))
    return query.order_by(Notification.sent_at.desc()).all()


@transition
def mark_read(db: Session, notification_id: str, actor_profile_id: str) -> Notification:
    """Stamp read_at once; only the recipient may mark a notification read."""
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise NotFoundError("Notification")
    if notification.recipient_id != actor_profile_id:
        raise ForbiddenError("Only the recipient may mark this notification as read")

    if notification.read_at is None:
        notification.read_at = utcnow()
        db.commit()
        db.refresh(notification)
        logger.info("Notification %s marked read by %s", notification_id, actor_profile_id)
    return notification

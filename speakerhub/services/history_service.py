"""Status history ledger — one row per booking or invitation transition."""
from typing import Optional

from sqlalchemy.orm import Session

from speakerhub.models.status_change import StatusChange, EntityType


def _value(status) -> Optional[str]:
    if status is None:
        return None
    return getattr(status, "value", status)


def record_status_change(
    db: Session,
    entity_type: EntityType,
    entity_id: str,
    previous_status,
    new_status,
    changed_by: Optional[str],
    reason: Optional[str] = None,
) -> StatusChange:
    """Append a ledger entry. Caller owns the commit."""
    entry = StatusChange(
        entity_type=entity_type,
        entity_id=entity_id,
        previous_status=_value(previous_status),
        new_status=_value(new_status),
        changed_by=changed_by,
        reason=reason,
    )
    db.add(entry)
    return entry


def list_history(db: Session, entity_type: EntityType, entity_id: str) -> list[StatusChange]:
    """Return ledger entries for one entity, newest first."""
    return (
        db.query(StatusChange)
        .filter(StatusChange.entity_type == entity_type, StatusChange.entity_id == entity_id)
        .order_by(StatusChange.created_at.desc())
        .all()
    )

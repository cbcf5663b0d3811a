"""UTC normalization and local-time rendering helpers."""
from datetime import datetime
from typing import Optional

import pytz


def utcnow() -> datetime:
    return datetime.now(pytz.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return an aware UTC datetime.

    SQLite hands back naive datetimes for timezone-aware columns; everything
    we store is UTC, so a naive value is localized rather than converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def to_local(value: Optional[datetime], tz_name: str) -> Optional[datetime]:
    """Render a stored UTC datetime in an IANA timezone."""
    if value is None:
        return None
    return as_utc(value).astimezone(pytz.timezone(tz_name))


def is_valid_timezone(tz_name: str) -> bool:
    return tz_name in pytz.all_timezones_set

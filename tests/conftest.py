"""Pytest fixtures — file-backed SQLite database, fresh schema per test."""
import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_speakerhub.db")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from speakerhub.database import Base, get_db
from speakerhub.main import app

# Import all models so they register with Base.metadata
from speakerhub.models.profile import Profile            # noqa: F401
from speakerhub.models.speaker import Speaker            # noqa: F401
from speakerhub.models.event import Event                # noqa: F401
from speakerhub.models.invitation import Invitation      # noqa: F401
from speakerhub.models.booking import Booking            # noqa: F401
from speakerhub.models.status_change import StatusChange  # noqa: F401
from speakerhub.models.notification import Notification  # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False, "timeout": 15})

    # WAL lets concurrent sessions read while one writes
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session bound to the test engine."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database dependency overridden to use the test engine."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: create records via the API, return the response JSON dict
# ---------------------------------------------------------------------------
_counter = {"n": 0}


def _unique(prefix: str) -> str:
    _counter["n"] += 1
    return f"{prefix}-{_counter['n']}"


def create_test_profile(
    client: TestClient,
    name: str = "Test User",
    user_type: str = "speaker",
    speaker: dict = None,
    tz: str = "UTC",
) -> dict:
    """Helper — POST /api/profiles and return response JSON."""
    payload = {
        "user_id": _unique("auth"),
        "full_name": name,
        "email": f"{_unique('user')}@example.com",
        "user_type": user_type,
        "timezone": tz,
    }
    if speaker is not None:
        payload["speaker"] = speaker
    resp = client.post("/api/profiles/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_speaker(client: TestClient, name: str = "Sam Speaker", hourly_rate: float = 100.0, **details) -> dict:
    """Helper — speaker profile; returns the profile JSON (speaker record under ``speaker``)."""
    return create_test_profile(client, name=name, user_type="speaker", speaker={"hourly_rate": hourly_rate, **details})


def create_test_organizer(client: TestClient, name: str = "Olivia Organizer") -> dict:
    return create_test_profile(client, name=name, user_type="organizer")


def create_test_event(
    client: TestClient,
    organizer_id: str,
    title: str = "PyCon Keynote",
    start_offset_hours: float = 24 * 14,
    duration_hours: float = 2,
    **fields,
) -> dict:
    """Helper — POST /api/events; start is relative to now (negative = already started)."""
    start = datetime.now(timezone.utc) + timedelta(hours=start_offset_hours)
    payload = {
        "organizer_id": organizer_id,
        "title": title,
        "date_time": start.isoformat(),
        "duration_hours": duration_hours,
        **fields,
    }
    resp = client.post("/api/events/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def apply_to_event(client: TestClient, speaker_profile: dict, event: dict, **fields) -> dict:
    """Helper — speaker applies to an event; returns the booking JSON."""
    resp = client.post("/api/bookings/", json={
        "event_id": event["id"],
        "actor_profile_id": speaker_profile["id"],
        **fields,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def invite_speaker(client: TestClient, organizer: dict, speaker_profile: dict, event: dict, **fields) -> dict:
    """Helper — organizer invites a speaker; returns the invitation JSON."""
    resp = client.post("/api/invitations/", json={
        "event_id": event["id"],
        "actor_profile_id": organizer["id"],
        "speaker_id": speaker_profile["speaker"]["id"],
        **fields,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()

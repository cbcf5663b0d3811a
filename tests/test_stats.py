"""Tests for the statistics aggregator and aggregate queries."""
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from speakerhub.errors import ErrorCode
from speakerhub.models.booking import Booking
from speakerhub.models.speaker import Speaker
from speakerhub.services import stats_service
from speakerhub.services.stats_service import average_rating
from tests.conftest import apply_to_event, create_test_event, create_test_organizer, create_test_speaker


def _act(client, booking_id: str, action: str, actor_id: str, **body):
    resp = client.post(f"/api/bookings/{booking_id}/{action}", json={"actor_profile_id": actor_id, **body})
    assert resp.status_code == 200, resp.text
    return resp.json()


def _completed_booking(client, organizer, speaker, rating=None, title="Talk"):
    event = create_test_event(client, organizer["id"], title=title, start_offset_hours=-3, duration_hours=1)
    booking = apply_to_event(client, speaker, event)
    _act(client, booking["id"], "accept", organizer["id"])
    _act(client, booking["id"], "pay", organizer["id"])
    _act(client, booking["id"], "complete", organizer["id"])
    if rating is not None:
        _act(client, booking["id"], "rate", organizer["id"], rating=rating)
    return booking


def _speaker(client, profile):
    return client.get(f"/api/speakers/{profile['speaker']['id']}").json()


class TestAverageRating:

    def test_mean_rounded_to_two_places(self):
        assert average_rating([5, 4, 3]) == Decimal("4.00")
        assert average_rating([5, 4, 4]) == Decimal("4.33")
        assert average_rating([5, 5, 4]) == Decimal("4.67")

    def test_no_ratings(self):
        assert average_rating([]) == Decimal("0.00")


class TestIncrementalRecompute:

    def test_completion_and_rating_update_speaker(self, client):
        organizer = create_test_organizer(client)
        speaker = create_test_speaker(client, hourly_rate=150)
        for i, rating in enumerate((5, 4, 3)):
            _completed_booking(client, organizer, speaker, rating=rating, title=f"Talk {i}")

        stats = _speaker(client, speaker)
        assert stats["total_talks"] == 3
        assert stats["total_ratings"] == 3
        assert Decimal(str(stats["average_rating"])) == Decimal("4.00")
        assert Decimal(str(stats["total_earnings"])) == Decimal("450.00")

    def test_completed_but_unrated_counts_talk_only(self, client):
        organizer = create_test_organizer(client)
        speaker = create_test_speaker(client)
        _completed_booking(client, organizer, speaker)
        stats = _speaker(client, speaker)
        assert stats["total_talks"] == 1
        assert stats["total_ratings"] == 0
        assert float(stats["average_rating"]) == 0.0


class TestSweep:

    def test_sweep_repairs_drift_and_is_idempotent(self, client, db):
        organizer = create_test_organizer(client)
        speaker = create_test_speaker(client, hourly_rate=100)
        _completed_booking(client, organizer, speaker, rating=5)

        record = db.query(Speaker).filter(Speaker.id == speaker["speaker"]["id"]).one()
        record.total_talks = 42
        record.average_rating = Decimal("1.50")
        db.commit()

        first = client.post("/api/admin/speaker-stats/sync").json()
        assert first["success"] is True
        assert first["updated"] == 1
        entry = next(r for r in first["results"] if r["speaker_id"] == speaker["speaker"]["id"])
        assert set(entry["changes"]) == {"total_talks", "average_rating"}

        second = client.post("/api/admin/speaker-stats/sync").json()
        assert second["updated"] == 0
        assert all(r["changes"] is None for r in second["results"])

        stats = _speaker(client, speaker)
        assert stats["total_talks"] == 1
        assert float(stats["average_rating"]) == 5.0

    def test_per_speaker_failure_is_isolated(self, client, db, monkeypatch):
        organizer = create_test_organizer(client)
        good = create_test_speaker(client, name="Good")
        bad = create_test_speaker(client, name="Bad")
        _completed_booking(client, organizer, good, rating=4)
        _completed_booking(client, organizer, bad, rating=2, title="Other talk")

        for profile in (good, bad):
            record = db.query(Speaker).filter(Speaker.id == profile["speaker"]["id"]).one()
            record.total_talks = 0
        db.commit()

        original = stats_service.compute_speaker_statistics
        bad_id = bad["speaker"]["id"]

        def _flaky(session, speaker_id):
            if speaker_id == bad_id:
                raise RuntimeError("simulated failure")
            return original(session, speaker_id)

        monkeypatch.setattr(stats_service, "compute_speaker_statistics", _flaky)
        summary = stats_service.sync_all_speaker_statistics(db).data

        assert summary["success"] is True
        assert summary["total"] == 2
        assert summary["updated"] == 1
        by_id = {r["speaker_id"]: r for r in summary["results"]}
        assert by_id[good["speaker"]["id"]]["success"] is True
        assert by_id[bad_id]["success"] is False
        assert "simulated" not in by_id[bad_id]["error"]

        db.expire_all()
        assert db.query(Speaker).filter(Speaker.id == good["speaker"]["id"]).one().total_talks == 1
        assert db.query(Speaker).filter(Speaker.id == bad_id).one().total_talks == 0

    def test_sweep_reports_unavailable_store(self, db, monkeypatch):
        def _boom(*args, **kwargs):
            raise OperationalError("SELECT speakers.id", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "query", _boom)
        result = stats_service.sync_all_speaker_statistics(db)

        assert not result.ok
        assert result.code == ErrorCode.BACKEND_UNAVAILABLE
        assert "locked" not in result.reason

    def test_single_speaker_sync(self, client, db):
        organizer = create_test_organizer(client)
        speaker = create_test_speaker(client)
        _completed_booking(client, organizer, speaker, rating=3)

        resp = client.post(f"/api/admin/speaker-stats/{speaker['speaker']['id']}/sync")
        assert resp.status_code == 200
        assert resp.json()["changes"] is None
        assert resp.json()["statistics"]["total_talks"] == 1

        assert client.post("/api/admin/speaker-stats/missing/sync").status_code == 404


class TestApplicationStats:

    def test_counts_and_response_metrics(self, client, db):
        organizer = create_test_organizer(client)
        event = create_test_event(client, organizer["id"])
        speakers = [create_test_speaker(client, name=f"S{i}") for i in range(4)]
        bookings = [apply_to_event(client, s, event) for s in speakers]

        _act(client, bookings[0]["id"], "accept", organizer["id"])
        _act(client, bookings[1]["id"], "reject", organizer["id"])

        # Pin the response times so the average is deterministic
        for booking_id, hours in ((bookings[0]["id"], 2), (bookings[1]["id"], 4)):
            record = db.query(Booking).filter(Booking.id == booking_id).one()
            record.responded_at = record.created_at + timedelta(hours=hours)
        db.commit()

        stats = client.get(f"/api/profiles/{organizer['id']}/application-stats").json()
        assert stats["total"] == 4
        assert stats["pending"] == 2
        assert stats["accepted"] == 1
        assert stats["rejected"] == 1
        assert stats["completed"] == 0
        assert stats["response_rate"] == 50.0
        assert stats["avg_response_time_hours"] == 3.0

        speaker_stats = client.get(f"/api/profiles/{speakers[0]['id']}/application-stats").json()
        assert speaker_stats["total"] == 1
        assert speaker_stats["accepted"] == 1

    def test_profile_without_bookings(self, client):
        organizer = create_test_organizer(client)
        stats = client.get(f"/api/profiles/{organizer['id']}/application-stats").json()
        assert stats == {
            "total": 0, "pending": 0, "accepted": 0, "rejected": 0, "completed": 0,
            "response_rate": 0.0, "avg_response_time_hours": 0.0,
        }

    def test_unknown_profile(self, client):
        assert client.get("/api/profiles/ghost/application-stats").status_code == 404

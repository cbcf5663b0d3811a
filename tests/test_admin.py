"""Tests for administrative sweeps and transition error handling."""
from sqlalchemy.exc import OperationalError

from speakerhub.errors import ErrorCode
from speakerhub.services import booking_service
from tests.conftest import apply_to_event, create_test_event, create_test_organizer, create_test_speaker


class TestStaleBookingSweep:

    def test_cancels_unpaid_bookings_of_started_events(self, client):
        organizer = create_test_organizer(client)
        pending_speaker = create_test_speaker(client, name="Pending")
        accepted_speaker = create_test_speaker(client, name="Accepted")
        paid_speaker = create_test_speaker(client, name="Paid")
        future_speaker = create_test_speaker(client, name="Future")

        past = create_test_event(client, organizer["id"], start_offset_hours=-1)
        future = create_test_event(client, organizer["id"])

        pending = apply_to_event(client, pending_speaker, past)
        accepted = apply_to_event(client, accepted_speaker, past)
        paid = apply_to_event(client, paid_speaker, past)
        upcoming = apply_to_event(client, future_speaker, future)
        for booking in (accepted, paid):
            client.post(f"/api/bookings/{booking['id']}/accept", json={"actor_profile_id": organizer["id"]})
        client.post(f"/api/bookings/{paid['id']}/pay", json={"actor_profile_id": organizer["id"]})

        resp = client.post("/api/admin/bookings/cancel-stale")
        assert resp.status_code == 200
        assert resp.json()["cancelled"] == 2
        assert set(resp.json()["booking_ids"]) == {pending["id"], accepted["id"]}

        def _status(b):
            return client.get(f"/api/bookings/{b['id']}").json()

        assert _status(pending)["status"] == "cancelled"
        assert _status(pending)["status_reason"] == "Event date passed before payment"
        assert _status(accepted)["status"] == "cancelled"
        assert _status(paid)["status"] == "paid"
        assert _status(upcoming)["status"] == "pending"

        assert client.post("/api/admin/bookings/cancel-stale").json()["cancelled"] == 0


class TestBackendFailure:

    def test_database_error_becomes_backend_unavailable(self, client, db, monkeypatch):
        organizer = create_test_organizer(client)
        speaker = create_test_speaker(client)
        event = create_test_event(client, organizer["id"])
        booking = apply_to_event(client, speaker, event)

        def _boom(*args, **kwargs):
            raise OperationalError("UPDATE bookings", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db, "commit", _boom)
        result = booking_service.accept_booking(db, booking["id"], organizer["id"])

        assert not result.ok
        assert result.code == ErrorCode.BACKEND_UNAVAILABLE
        assert "disk" not in result.reason
        monkeypatch.undo()
        assert client.get(f"/api/bookings/{booking['id']}").json()["status"] == "pending"

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}

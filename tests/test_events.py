"""Tests for Event CRUD, ownership, status rules, and the cancellation cascade."""
from speakerhub.models.status_change import EntityType, StatusChange
from tests.conftest import (
    apply_to_event,
    create_test_event,
    create_test_organizer,
    create_test_speaker,
    invite_speaker,
)


class TestEventCreate:

    def test_create_event(self, client):
        organizer = create_test_organizer(client)
        event = create_test_event(
            client, organizer["id"], title="PyData Keynote",
            timezone="Europe/Paris", required_topics=["ml", "python", "ml"],
        )
        assert event["title"] == "PyData Keynote"
        assert event["status"] == "open"
        assert event["timezone"] == "Europe/Paris"
        assert event["required_topics"] == ["ml", "python"]

    def test_unknown_organizer(self, client):
        resp = client.post("/api/events/", json={
            "organizer_id": "ghost", "title": "X", "date_time": "2030-01-01T10:00:00Z", "duration_hours": 1,
        })
        assert resp.status_code == 404

    def test_non_positive_duration_rejected(self, client):
        organizer = create_test_organizer(client)
        resp = client.post("/api/events/", json={
            "organizer_id": organizer["id"], "title": "X", "date_time": "2030-01-01T10:00:00Z", "duration_hours": 0,
        })
        assert resp.status_code == 422

    def test_budget_range_validated(self, client):
        organizer = create_test_organizer(client)
        resp = client.post("/api/events/", json={
            "organizer_id": organizer["id"], "title": "X", "date_time": "2030-01-01T10:00:00Z",
            "duration_hours": 1, "budget_min": 500, "budget_max": 100,
        })
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "INVALID_INPUT"

    def test_offset_datetime_stored_as_utc(self, client):
        organizer = create_test_organizer(client)
        resp = client.post("/api/events/", json={
            "organizer_id": organizer["id"], "title": "X",
            "date_time": "2030-01-01T10:00:00+02:00", "duration_hours": 1,
        })
        assert resp.status_code == 201
        assert resp.json()["date_time"].startswith("2030-01-01T08:00:00")


class TestEventUpdate:

    def test_organizer_updates_event(self, client):
        organizer = create_test_organizer(client)
        event = create_test_event(client, organizer["id"])
        resp = client.patch(
            f"/api/events/{event['id']}",
            params={"actor_profile_id": organizer["id"]},
            json={"title": "Renamed", "status": "in_progress"},
        )
        assert resp.status_code == 200
        assert resp.json()["title"] == "Renamed"
        assert resp.json()["status"] == "in_progress"

    def test_non_organizer_forbidden(self, client):
        organizer = create_test_organizer(client)
        other = create_test_organizer(client, name="Other")
        event = create_test_event(client, organizer["id"])
        resp = client.patch(
            f"/api/events/{event['id']}",
            params={"actor_profile_id": other["id"]},
            json={"title": "Hijacked"},
        )
        assert resp.status_code == 403
        assert resp.json()["detail"]["code"] == "FORBIDDEN"

    def test_finished_cannot_be_set_directly(self, client):
        organizer = create_test_organizer(client)
        event = create_test_event(client, organizer["id"])
        resp = client.patch(
            f"/api/events/{event['id']}",
            params={"actor_profile_id": organizer["id"]},
            json={"status": "finished"},
        )
        assert resp.status_code == 400
        assert client.get(f"/api/events/{event['id']}").json()["status"] == "open"

    def test_cancelled_event_cannot_be_edited(self, client):
        organizer = create_test_organizer(client)
        event = create_test_event(client, organizer["id"])
        client.post(f"/api/events/{event['id']}/cancel", json={"actor_profile_id": organizer["id"]})
        resp = client.patch(
            f"/api/events/{event['id']}",
            params={"actor_profile_id": organizer["id"]},
            json={"title": "Too late"},
        )
        assert resp.status_code == 400


class TestEventCancel:

    def test_cancel_cascades_to_bookings_and_invitations(self, client, db):
        organizer = create_test_organizer(client)
        applicant = create_test_speaker(client, name="Applicant")
        invitee = create_test_speaker(client, name="Invitee")
        event = create_test_event(client, organizer["id"])
        booking = apply_to_event(client, applicant, event)
        invitation = invite_speaker(client, organizer, invitee, event)

        resp = client.post(
            f"/api/events/{event['id']}/cancel",
            json={"actor_profile_id": organizer["id"], "reason": "Venue closed"},
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"

        booking = client.get(f"/api/bookings/{booking['id']}").json()
        assert booking["status"] == "cancelled"
        assert booking["status_reason"] == "Venue closed"
        assert client.get(f"/api/invitations/{invitation['id']}").json()["status"] == "expired"

        ledger = db.query(StatusChange).filter(StatusChange.new_status.in_(["cancelled", "expired"])).all()
        assert {entry.entity_type for entry in ledger} == {EntityType.booking, EntityType.invitation}

    def test_cancel_twice_refused(self, client):
        organizer = create_test_organizer(client)
        event = create_test_event(client, organizer["id"])
        client.post(f"/api/events/{event['id']}/cancel", json={"actor_profile_id": organizer["id"]})
        resp = client.post(f"/api/events/{event['id']}/cancel", json={"actor_profile_id": organizer["id"]})
        assert resp.status_code == 400

    def test_non_organizer_cannot_cancel(self, client):
        organizer = create_test_organizer(client)
        other = create_test_organizer(client, name="Other")
        event = create_test_event(client, organizer["id"])
        resp = client.post(f"/api/events/{event['id']}/cancel", json={"actor_profile_id": other["id"]})
        assert resp.status_code == 403


class TestEventList:

    def test_list_filters(self, client):
        organizer = create_test_organizer(client)
        other = create_test_organizer(client, name="Other")
        kept = create_test_event(client, organizer["id"], title="Upcoming")
        create_test_event(client, organizer["id"], title="Past", start_offset_hours=-48)
        create_test_event(client, other["id"], title="Someone else's")
        cancelled = create_test_event(client, organizer["id"], title="Cancelled")
        client.post(f"/api/events/{cancelled['id']}/cancel", json={"actor_profile_id": organizer["id"]})

        resp = client.get("/api/events/", params={"organizer_id": organizer["id"], "upcoming": True})
        assert [e["id"] for e in resp.json()] == [kept["id"]]

        resp = client.get("/api/events/", params={"organizer_id": organizer["id"], "status": "cancelled"})
        assert [e["id"] for e in resp.json()] == [cancelled["id"]]

    def test_list_excludes_cancelled_by_default(self, client):
        organizer = create_test_organizer(client)
        event = create_test_event(client, organizer["id"])
        client.post(f"/api/events/{event['id']}/cancel", json={"actor_profile_id": organizer["id"]})
        assert client.get("/api/events/").json() == []
        assert len(client.get("/api/events/", params={"include_cancelled": True}).json()) == 1

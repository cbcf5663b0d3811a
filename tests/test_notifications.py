"""Tests for notification listing and read state."""
from tests.conftest import apply_to_event, create_test_event, create_test_organizer, create_test_speaker


def _setup(client):
    organizer = create_test_organizer(client)
    speaker = create_test_speaker(client)
    event = create_test_event(client, organizer["id"], title="Data Summit")
    apply_to_event(client, speaker, event)
    notes = client.get("/api/notifications/", params={"recipient_id": organizer["id"]}).json()
    return organizer, speaker, notes


class TestNotifications:

    def test_submission_notification_content(self, client):
        _, _, notes = _setup(client)
        assert len(notes) == 1
        assert notes[0]["notification_type"] == "submitted"
        assert "Data Summit" in notes[0]["message"]
        assert notes[0]["read_at"] is None

    def test_mark_read_once(self, client):
        organizer, _, notes = _setup(client)
        note_id = notes[0]["id"]
        first = client.post(f"/api/notifications/{note_id}/read", json={"actor_profile_id": organizer["id"]})
        assert first.status_code == 200
        read_at = first.json()["read_at"]
        assert read_at is not None

        second = client.post(f"/api/notifications/{note_id}/read", json={"actor_profile_id": organizer["id"]})
        assert second.json()["read_at"] == read_at

        unread = client.get("/api/notifications/", params={"recipient_id": organizer["id"], "unread_only": True})
        assert unread.json() == []

    def test_only_recipient_marks_read(self, client):
        _, speaker, notes = _setup(client)
        resp = client.post(f"/api/notifications/{notes[0]['id']}/read", json={"actor_profile_id": speaker["id"]})
        assert resp.status_code == 403

    def test_unknown_notification(self, client):
        organizer = create_test_organizer(client)
        resp = client.post("/api/notifications/missing/read", json={"actor_profile_id": organizer["id"]})
        assert resp.status_code == 404

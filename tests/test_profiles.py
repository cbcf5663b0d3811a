"""Tests for profiles, speaker records, and speaker search."""
from tests.conftest import create_test_profile, create_test_speaker, create_test_organizer


class TestProfileCreate:

    def test_speaker_profile_gets_speaker_record(self, client):
        profile = create_test_speaker(client, name="Ada Lovelace", hourly_rate=150, experience_level="expert")
        speaker = profile["speaker"]
        assert profile["user_type"] == "speaker"
        assert speaker["profile_id"] == profile["id"]
        assert speaker["experience_level"] == "expert"
        assert float(speaker["hourly_rate"]) == 150.0
        assert speaker["total_talks"] == 0
        assert float(speaker["average_rating"]) == 0.0

    def test_organizer_has_no_speaker_record(self, client):
        profile = create_test_organizer(client)
        assert profile["speaker"] is None

    def test_both_roles_get_speaker_record(self, client):
        profile = create_test_profile(client, user_type="both")
        assert profile["speaker"] is not None

    def test_duplicate_user_id_conflict(self, client):
        payload = {"user_id": "auth-dup", "full_name": "A", "email": "a@example.com", "user_type": "organizer"}
        assert client.post("/api/profiles/", json=payload).status_code == 201
        resp = client.post("/api/profiles/", json=payload)
        assert resp.status_code == 409

    def test_invalid_timezone_rejected(self, client):
        resp = client.post("/api/profiles/", json={
            "user_id": "auth-tz", "full_name": "A", "email": "a@example.com", "timezone": "Mars/Olympus",
        })
        assert resp.status_code == 422

    def test_invalid_user_type_rejected(self, client):
        resp = client.post("/api/profiles/", json={
            "user_id": "auth-ut", "full_name": "A", "email": "a@example.com", "user_type": "admin",
        })
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "INVALID_INPUT"

    def test_get_profile_not_found(self, client):
        assert client.get("/api/profiles/nonexistent").status_code == 404


class TestProfileUpdate:

    def test_owner_updates_profile(self, client):
        profile = create_test_organizer(client)
        resp = client.patch(
            f"/api/profiles/{profile['id']}",
            params={"actor_profile_id": profile["id"]},
            json={"bio": "Runs meetups", "timezone": "Europe/Berlin"},
        )
        assert resp.status_code == 200
        assert resp.json()["bio"] == "Runs meetups"
        assert resp.json()["timezone"] == "Europe/Berlin"

    def test_other_profile_cannot_update(self, client):
        profile = create_test_organizer(client)
        other = create_test_organizer(client, name="Mallory")
        resp = client.patch(
            f"/api/profiles/{profile['id']}",
            params={"actor_profile_id": other["id"]},
            json={"bio": "hijacked"},
        )
        assert resp.status_code == 403


class TestSpeakerUpdate:

    def test_owner_updates_descriptive_fields(self, client):
        profile = create_test_speaker(client)
        speaker_id = profile["speaker"]["id"]
        resp = client.patch(
            f"/api/speakers/{speaker_id}",
            params={"actor_profile_id": profile["id"]},
            json={"hourly_rate": 200, "topics": ["python", "databases"], "experience_level": "intermediate"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert float(data["hourly_rate"]) == 200.0
        assert data["topics"] == ["python", "databases"]
        assert data["experience_level"] == "intermediate"

    def test_statistics_not_editable(self, client):
        """Aggregate fields are ignored on owner edits."""
        profile = create_test_speaker(client)
        speaker_id = profile["speaker"]["id"]
        resp = client.patch(
            f"/api/speakers/{speaker_id}",
            params={"actor_profile_id": profile["id"]},
            json={"average_rating": 5, "total_talks": 99, "company": "Acme"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["company"] == "Acme"
        assert data["total_talks"] == 0
        assert float(data["average_rating"]) == 0.0

    def test_non_owner_cannot_edit_speaker(self, client):
        profile = create_test_speaker(client)
        other = create_test_organizer(client)
        resp = client.patch(
            f"/api/speakers/{profile['speaker']['id']}",
            params={"actor_profile_id": other["id"]},
            json={"hourly_rate": 1},
        )
        assert resp.status_code == 403


class TestSpeakerSearch:

    def test_search_by_name_and_level(self, client):
        create_test_speaker(client, name="Grace Hopper", experience_level="expert")
        create_test_speaker(client, name="Grace Kelly", experience_level="beginner")
        create_test_speaker(client, name="Alan Turing", experience_level="expert")

        resp = client.get("/api/speakers/search", params={"q": "grace"})
        assert resp.status_code == 200
        assert {r["full_name"] for r in resp.json()} == {"Grace Hopper", "Grace Kelly"}

        resp = client.get("/api/speakers/search", params={"q": "grace", "experience_level": "expert"})
        assert [r["full_name"] for r in resp.json()] == ["Grace Hopper"]

    def test_search_excludes_unavailable(self, client):
        profile = create_test_speaker(client, name="Busy Bee")
        client.patch(
            f"/api/speakers/{profile['speaker']['id']}",
            params={"actor_profile_id": profile["id"]},
            json={"available": False},
        )
        resp = client.get("/api/speakers/search", params={"q": "Busy"})
        assert resp.json() == []

    def test_search_default_limit(self, client):
        for i in range(12):
            create_test_speaker(client, name=f"Speaker {i:02d}")
        resp = client.get("/api/speakers/search")
        assert len(resp.json()) == 10

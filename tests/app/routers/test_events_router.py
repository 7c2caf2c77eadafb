"""Tests for the events router."""

from app.services.identity_service import IdentityService


def test_append_event(client, subject_id, anonymous_id):
    r = client.post(
        "/events",
        json={
            "type": "listen_click",
            "subject_id": subject_id,
            "anonymous_id": anonymous_id,
            "attributes": {"platform": "spotify"},
        },
    )
    assert r.status_code == 201
    assert "event_id" in r.json()


def test_append_event_unknown_type(client, subject_id, anonymous_id):
    r = client.post(
        "/events",
        json={"type": "page_scroll", "subject_id": subject_id, "anonymous_id": anonymous_id},
    )
    assert r.status_code == 422
    assert r.json()["field"] == "type"


def test_append_event_missing_attribute(client, subject_id, anonymous_id):
    r = client.post(
        "/events",
        json={"type": "listen_click", "subject_id": subject_id, "anonymous_id": anonymous_id},
    )
    assert r.status_code == 422
    assert r.json()["field"] == "attributes.platform"


def test_append_event_is_processed(client, db, subject_id, anonymous_id):
    r = client.post(
        "/events",
        json={
            "type": "listen_click",
            "subject_id": subject_id,
            "anonymous_id": anonymous_id,
            "attributes": {"platform": "Apple Music"},
        },
    )
    assert r.status_code == 201
    identity = IdentityService(db).get_identity(anonymous_id)
    assert identity.preferred_listen_platform == "apple_music"


def test_list_events(client, append_event, subject_id, anonymous_id):
    append_event("profile_view", subject_id, anonymous_id)
    append_event("tip_click", subject_id, anonymous_id)
    r = client.get("/events", params={"anonymous_id": anonymous_id, "type": ["tip_click"]})
    assert r.status_code == 200
    items = r.json()["items"]
    assert [i["type"] for i in items] == ["tip_click"]


def test_event_counts(client, append_event, subject_id, anonymous_id):
    append_event("profile_view", subject_id, anonymous_id)
    append_event("profile_view", subject_id, anonymous_id)
    r = client.get("/analytics/events", params={"subject_id": subject_id, "bucket": "hour"})
    assert r.status_code == 200
    data = r.json()
    assert data["bucket"] == "hour"
    assert sum(i["count"] for i in data["items"] if i["type"] == "profile_view") == 2


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

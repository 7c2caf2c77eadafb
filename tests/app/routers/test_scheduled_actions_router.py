"""Tests for the scheduled actions router."""

from uuid import uuid4


def test_listen_click_creates_pending_action(client, subject_id, anonymous_id):
    r = client.post(
        "/events",
        json={
            "type": "listen_click",
            "subject_id": subject_id,
            "anonymous_id": anonymous_id,
            "identified_id": "fan@example.com",
            "attributes": {"platform": "spotify"},
        },
    )
    assert r.status_code == 201

    r = client.get("/scheduled-actions", params={"status": "pending"})
    assert r.status_code == 200
    items = r.json()["items"]
    assert len(items) == 1
    assert items[0]["recipient_id"] == "fan@example.com"
    assert items[0]["action_type"] == "listen_followup"

    r = client.get(f"/scheduled-actions/{items[0]['id']}")
    assert r.status_code == 200
    assert r.json()["trigger_event_id"] == items[0]["trigger_event_id"]


def test_suppressed_recipient_gets_suppressed_action(client, subject_id, anonymous_id):
    client.post(
        "/suppressions/suppress",
        json={"recipient_id": "fan@example.com"},
        headers={"X-Actor-Id": "ops@example.com"},
    )
    client.post(
        "/events",
        json={
            "type": "listen_click",
            "subject_id": subject_id,
            "anonymous_id": anonymous_id,
            "identified_id": "fan@example.com",
            "attributes": {"platform": "spotify"},
        },
    )
    items = client.get("/scheduled-actions", params={"recipient_id": "Fan@Example.com"}).json()["items"]
    assert [i["status"] for i in items] == ["suppressed"]


def test_get_scheduled_action_not_found(client):
    r = client.get(f"/scheduled-actions/{uuid4()}")
    assert r.status_code == 404


def test_invalid_status_filter(client):
    r = client.get("/scheduled-actions", params={"status": "queued"})
    assert r.status_code == 422

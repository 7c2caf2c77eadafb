"""Tests for EventLogService."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from app.core.errors import ValidationError
from app.schemas.event import EventCreate, EventFilter
from app.services.event_log_service import EventLogService, validate_event
from app.utils.time import ensure_utc


def test_append_returns_event_id(db, subject_id, anonymous_id):
    svc = EventLogService(db)
    event_id = svc.append(
        EventCreate(type="profile_view", subject_id=subject_id, anonymous_id=anonymous_id)
    )
    event = svc.get_event(event_id)
    assert event is not None
    assert event.type == "profile_view"
    assert event.subject_id == subject_id
    assert event.attributes == {}


def test_append_unknown_type_rejected(db, subject_id, anonymous_id):
    svc = EventLogService(db)
    with pytest.raises(ValidationError) as exc:
        svc.append(
            EventCreate(type="page_scroll", subject_id=subject_id, anonymous_id=anonymous_id)
        )
    assert exc.value.field == "type"
    assert svc.query() == []


def test_append_missing_required_attribute_rejected(db, subject_id, anonymous_id):
    svc = EventLogService(db)
    with pytest.raises(ValidationError) as exc:
        svc.append(
            EventCreate(type="listen_click", subject_id=subject_id, anonymous_id=anonymous_id)
        )
    assert exc.value.field == "attributes.platform"


@pytest.mark.parametrize(
    "type,attributes,field",
    [
        ("link_click", {}, "attributes.target"),
        ("cta_click", {"action": "  "}, "attributes.action"),
        ("subscribe", {"channel": "email"}, "attributes.contact"),
        ("subscribe", {"channel": "fax", "contact": "x@example.com"}, "attributes.channel"),
        ("unsubscribe", {}, "attributes.recipient_id"),
        ("preference_change", {"platform": "napster"}, "attributes.platform"),
        ("social_click", {"platform": 3}, "attributes.platform"),
    ],
)
def test_validate_event_field_errors(type, attributes, field):
    data = EventCreate(
        type=type, subject_id="artist-1", anonymous_id="anon-1", attributes=attributes
    )
    with pytest.raises(ValidationError) as exc:
        validate_event(data)
    assert exc.value.field == field


def test_validate_event_normalises_platform_alias():
    data = EventCreate(
        type="listen_click",
        subject_id="artist-1",
        anonymous_id="anon-1",
        attributes={"platform": "Apple Music"},
    )
    _, attributes = validate_event(data)
    assert attributes["platform"] == "apple_music"


def test_social_click_platform_not_restricted_to_listen_platforms():
    data = EventCreate(
        type="social_click",
        subject_id="artist-1",
        anonymous_id="anon-1",
        attributes={"platform": "instagram"},
    )
    event_type, attributes = validate_event(data)
    assert event_type == "social_click"
    assert attributes["platform"] == "instagram"


def test_query_orders_by_occurred_at_then_sequence(db, append_event, subject_id, anonymous_id):
    base = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
    late = append_event("profile_view", subject_id, anonymous_id, occurred_at=base + timedelta(minutes=5))
    first = append_event("tip_click", subject_id, anonymous_id, occurred_at=base)
    second = append_event("profile_view", subject_id, anonymous_id, occurred_at=base)

    events = EventLogService(db).query(EventFilter(anonymous_id=anonymous_id))
    assert [e.id for e in events] == [first.id, second.id, late.id]


def test_query_filters(db, append_event, subject_id, anonymous_id):
    other_subject = f"artist-{uuid4()}"
    base = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
    append_event("profile_view", subject_id, anonymous_id, occurred_at=base)
    click = append_event(
        "listen_click", subject_id, anonymous_id, {"platform": "tidal"}, occurred_at=base + timedelta(hours=1)
    )
    append_event("profile_view", other_subject, anonymous_id, occurred_at=base + timedelta(hours=2))

    svc = EventLogService(db)
    by_type = svc.query(EventFilter(types=["listen_click"]))
    assert [e.id for e in by_type] == [click.id]

    by_subject = svc.query(EventFilter(subject_id=subject_id))
    assert len(by_subject) == 2

    in_range = svc.query(
        EventFilter(start=base + timedelta(minutes=30), end=base + timedelta(hours=2))
    )
    assert [e.id for e in in_range] == [click.id]


def test_occurred_at_defaults_to_now(db, append_event, subject_id, anonymous_id):
    event = append_event("profile_view", subject_id, anonymous_id)
    assert ensure_utc(event.occurred_at) <= datetime.now(timezone.utc)


def test_count_by_bucket(db, append_event, subject_id, anonymous_id):
    base = datetime(2026, 5, 1, 12, 10, tzinfo=timezone.utc)
    append_event("profile_view", subject_id, anonymous_id, occurred_at=base)
    append_event("profile_view", subject_id, anonymous_id, occurred_at=base + timedelta(minutes=20))
    append_event("profile_view", subject_id, anonymous_id, occurred_at=base + timedelta(hours=1))
    append_event("tip_click", subject_id, anonymous_id, occurred_at=base)

    svc = EventLogService(db)
    hourly = svc.count_by_bucket(subject_id=subject_id, bucket="hour")
    views = [b for b in hourly if b.type == "profile_view"]
    assert [(ensure_utc(b.bucket_start).hour, b.count) for b in views] == [(12, 2), (13, 1)]

    daily = svc.count_by_bucket(subject_id=subject_id, bucket="day")
    assert {(b.type, b.count) for b in daily} == {("profile_view", 3), ("tip_click", 1)}

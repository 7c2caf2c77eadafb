"""
Append-only event log.

Events are validated against the closed taxonomy before insert and are never
updated or deleted. Consumers derive all cross-entity effects from the log.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any, List, Literal, Optional
from uuid import UUID

from sqlalchemy.orm import Query, Session

from app.constants.events import (
    LISTEN_PLATFORM_EVENTS,
    REQUIRED_ATTRIBUTES,
    SUBSCRIBE_CHANNELS,
    EventType,
)
from app.constants.platforms import parse_listen_platform
from app.core.errors import ValidationError
from app.models.event import Event
from app.schemas.event import EventCountBucket, EventCreate, EventFilter
from app.utils.metrics import EVENTS_APPENDED_TOTAL, EVENTS_REJECTED_TOTAL
from app.utils.time import ensure_utc, utcnow

Bucket = Literal["hour", "day"]


def validate_event(data: EventCreate) -> tuple[EventType, dict[str, Any]]:
    """
    Check type and required attributes. Returns the parsed type and the
    attributes with listen platforms normalised. Raises ValidationError naming
    the offending field.
    """
    try:
        event_type = EventType(data.type)
    except ValueError:
        raise ValidationError(f"Unknown event type: {data.type}", field="type")

    attributes = dict(data.attributes or {})
    for name, expected in REQUIRED_ATTRIBUTES[event_type].items():
        value = attributes.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(
                f"Missing required attribute '{name}' for {event_type.value}",
                field=f"attributes.{name}",
            )
        if not isinstance(value, expected):
            raise ValidationError(
                f"Attribute '{name}' must be of type {expected.__name__}",
                field=f"attributes.{name}",
            )

    if event_type in LISTEN_PLATFORM_EVENTS:
        platform = parse_listen_platform(attributes["platform"])
        if platform is None:
            raise ValidationError(
                f"Unknown listen platform: {attributes['platform']}",
                field="attributes.platform",
            )
        attributes["platform"] = platform.value

    if event_type == EventType.SUBSCRIBE:
        channel = attributes["channel"].strip().lower()
        if channel not in SUBSCRIBE_CHANNELS:
            raise ValidationError(
                f"Unsupported subscribe channel: {attributes['channel']}",
                field="attributes.channel",
            )
        attributes["channel"] = channel

    return event_type, attributes


class EventLogService:
    """Append and read behavioural events. No update/delete (immutable)."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def append(self, data: EventCreate) -> UUID:
        """Validate and durably append one event. Returns the generated event_id."""
        try:
            event_type, attributes = validate_event(data)
        except ValidationError as e:
            EVENTS_REJECTED_TOTAL.labels(field=e.field or "unknown").inc()
            raise

        event = Event(
            type=event_type.value,
            subject_id=data.subject_id,
            anonymous_id=data.anonymous_id,
            identified_id=data.identified_id,
            occurred_at=ensure_utc(data.occurred_at) or utcnow(),
            attributes=attributes,
        )
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        EVENTS_APPENDED_TOTAL.labels(type=event_type.value).inc()
        return event.id

    def get_event(self, event_id: UUID) -> Optional[Event]:
        """Fetch a single event by event_id."""
        return self.db.query(Event).filter(Event.id == event_id).first()

    def query_events(self, filters: Optional[EventFilter] = None) -> Query[Event]:
        """Filtered query ordered by (occurred_at, sequence), for pagination."""
        q = self.db.query(Event)
        filters = filters or EventFilter()
        if filters.types:
            q = q.filter(Event.type.in_(filters.types))
        if filters.subject_id is not None:
            q = q.filter(Event.subject_id == filters.subject_id)
        if filters.anonymous_id is not None:
            q = q.filter(Event.anonymous_id == filters.anonymous_id)
        if filters.identified_id is not None:
            q = q.filter(Event.identified_id == filters.identified_id)
        if filters.start is not None:
            q = q.filter(Event.occurred_at >= ensure_utc(filters.start))
        if filters.end is not None:
            q = q.filter(Event.occurred_at < ensure_utc(filters.end))
        return q.order_by(Event.occurred_at.asc(), Event.sequence.asc())

    def query(
        self,
        filters: Optional[EventFilter] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Event]:
        """Fetch events matching the filter, in log order."""
        return self.query_events(filters).offset(skip).limit(limit).all()

    def count_by_bucket(
        self,
        subject_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        bucket: Bucket = "day",
    ) -> List[EventCountBucket]:
        """Counts of events grouped by (subject, type, time bucket)."""
        q = self.db.query(Event.subject_id, Event.type, Event.occurred_at)
        if subject_id is not None:
            q = q.filter(Event.subject_id == subject_id)
        if start is not None:
            q = q.filter(Event.occurred_at >= ensure_utc(start))
        if end is not None:
            q = q.filter(Event.occurred_at < ensure_utc(end))

        counts: Counter[tuple[str, str, datetime]] = Counter()
        for row_subject, row_type, occurred_at in q.yield_per(1000):
            counts[(row_subject, row_type, _truncate(occurred_at, bucket))] += 1

        return [
            EventCountBucket(
                subject_id=key[0], type=key[1], bucket_start=key[2], count=count
            )
            for key, count in sorted(counts.items(), key=lambda kv: (kv[0][2], kv[0][0], kv[0][1]))
        ]


def _truncate(value: datetime, bucket: Bucket) -> datetime:
    value = ensure_utc(value)
    if bucket == "hour":
        return value.replace(minute=0, second=0, microsecond=0)
    return value.replace(hour=0, minute=0, second=0, microsecond=0)

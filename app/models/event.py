"""
Event model: append-only record of typed behavioural events.

Rows are never updated or deleted by the application. Ordering is
occurred_at, then sequence (insertion order).
"""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Index, Integer, String, Uuid

from app.db import Base, JSONType
from app.utils.time import utcnow


class Event(Base):
    """Single immutable behavioural event."""

    __tablename__ = "events"

    __table_args__ = (
        Index("ix_events_subject_occurred", "subject_id", "occurred_at"),
        Index("ix_events_anonymous_occurred", "anonymous_id", "occurred_at"),
    )

    sequence = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4)
    type = Column(String(64), nullable=False, index=True)
    subject_id = Column(String(255), nullable=False)
    anonymous_id = Column(String(255), nullable=False)
    identified_id = Column(String(320), nullable=True)
    occurred_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    recorded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    attributes = Column(JSONType, nullable=False, default=dict)

"""Scheduled follow-up action created from a trigger event."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Index, Integer, String, Text, UniqueConstraint, Uuid

from app.constants.automation import ActionStatus
from app.db import Base, JSONType
from app.models.mixins import TimestampMixin


class ScheduledAction(Base, TimestampMixin):
    """
    Durable delayed send. (trigger_event_id, action_type) is the dedup key;
    claimed_until is the execution lease held by one worker at a time.
    """

    __tablename__ = "scheduled_actions"

    __table_args__ = (
        UniqueConstraint(
            "trigger_event_id",
            "action_type",
            name="uq_scheduled_actions_trigger_action",
        ),
        Index("ix_scheduled_actions_status_not_before", "status", "not_before"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    trigger_event_id = Column(Uuid(as_uuid=True), nullable=False)
    action_type = Column(String(64), nullable=False)
    recipient_id = Column(String(320), nullable=False, index=True)
    anonymous_id = Column(String(255), nullable=False)
    subject_id = Column(String(255), nullable=False)
    payload = Column(JSONType, nullable=False, default=dict)
    not_before = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(16), nullable=False, default=ActionStatus.PENDING.value)
    attempt_count = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    claimed_until = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

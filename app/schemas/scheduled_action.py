"""Pydantic schemas for scheduled actions (operator views)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ScheduledActionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    trigger_event_id: UUID
    action_type: str
    recipient_id: str
    anonymous_id: str
    subject_id: str
    payload: dict[str, Any]
    not_before: datetime
    status: str
    attempt_count: int
    last_error: Optional[str]
    completed_at: Optional[datetime]
    created_at: datetime

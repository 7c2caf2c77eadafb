"""Pydantic schemas for the event log."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EventCreate(BaseModel):
    """
    Inbound event. `type` is kept as a plain string so the event log can
    reject unknown types with a field-level ValidationError.
    """

    type: str = Field(..., min_length=1, max_length=64)
    subject_id: str = Field(..., min_length=1, max_length=255)
    anonymous_id: str = Field(..., min_length=1, max_length=255)
    identified_id: Optional[str] = Field(None, max_length=320)
    occurred_at: Optional[datetime] = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class EventRead(BaseModel):
    """Response schema for a stored event."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sequence: int
    type: str
    subject_id: str
    anonymous_id: str
    identified_id: Optional[str]
    occurred_at: datetime
    attributes: dict[str, Any]


class EventAppended(BaseModel):
    """Response for a successful append."""

    event_id: UUID


class EventFilter(BaseModel):
    """Query filter; all fields optional and combined with AND."""

    types: Optional[list[str]] = None
    subject_id: Optional[str] = None
    anonymous_id: Optional[str] = None
    identified_id: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class EventCountBucket(BaseModel):
    """Aggregate count of one event type for a subject in one time bucket."""

    subject_id: str
    type: str
    bucket_start: datetime
    count: int


class EventCountsResponse(BaseModel):
    bucket: Literal["hour", "day"]
    items: list[EventCountBucket]

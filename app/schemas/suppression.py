"""Pydantic schemas for the suppression admin API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.constants.suppression import SuppressionReason


class SuppressRequest(BaseModel):
    recipient_id: str = Field(..., min_length=1, max_length=320)
    reason: SuppressionReason = SuppressionReason.MANUAL


class UnsuppressRequest(BaseModel):
    recipient_id: str = Field(..., min_length=1, max_length=320)
    override: bool = False


class SuppressionEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    recipient_id: str
    scope: str
    reason: str
    created_at: datetime
    created_by: Optional[str]
    expires_at: Optional[datetime]
    revoked_at: Optional[datetime]
    revoked_by: Optional[str]
    source_event_id: Optional[str]
    details: Optional[dict[str, Any]]


class SuppressionStatus(BaseModel):
    recipient_id: str
    suppressed: bool
    entries: list[SuppressionEntryRead] = Field(default_factory=list)

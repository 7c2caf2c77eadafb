"""Pydantic schemas for visitor identities."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class IdentityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    anonymous_id: str
    identified_id: Optional[str]
    identifier_kind: Optional[str]
    identified_at: Optional[datetime]
    contact_id: Optional[str] = None
    preferred_listen_platform: Optional[str]

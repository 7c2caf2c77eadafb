"""
Suppression ledger entries.

Entries are only ever inserted or tombstoned (revoked_at). A recipient is
suppressed while at least one entry is neither revoked nor expired.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Index, String, Uuid

from app.constants.suppression import GLOBAL_SCOPE
from app.db import Base, JSONType
from app.utils.time import utcnow


class SuppressionEntry(Base):
    """Global, cross-channel block on automated sends to one recipient."""

    __tablename__ = "suppression_entries"

    __table_args__ = (
        Index("ix_suppression_entries_recipient_revoked", "recipient_id", "revoked_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    recipient_id = Column(String(320), nullable=False)
    scope = Column(String(16), nullable=False, default=GLOBAL_SCOPE)
    reason = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_by = Column(String(255), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    revoked_by = Column(String(255), nullable=True)
    source_event_id = Column(String(255), nullable=True)
    details = Column(JSONType, nullable=True, default=dict)

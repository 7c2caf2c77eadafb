"""Shared column mixins."""

from __future__ import annotations

from sqlalchemy import Column, DateTime

from app.utils.time import utcnow


class TimestampMixin:
    """created_at / updated_at maintained on the client side."""

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

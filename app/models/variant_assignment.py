"""Sticky experiment variant per (experiment_key, anonymous_id)."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, String, UniqueConstraint, Uuid

from app.db import Base
from app.utils.time import utcnow


class VariantAssignment(Base):
    """Immutable once written."""

    __tablename__ = "variant_assignments"

    __table_args__ = (
        UniqueConstraint(
            "experiment_key",
            "anonymous_id",
            name="uq_variant_assignments_experiment_anonymous",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    experiment_key = Column(String(255), nullable=False)
    anonymous_id = Column(String(255), nullable=False)
    variant_id = Column(String(128), nullable=False)
    assigned_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

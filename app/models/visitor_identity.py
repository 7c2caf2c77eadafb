"""Visitor identity: anonymous id, attached identifier and sticky listen preference."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, String, Uuid

from app.db import Base
from app.models.mixins import TimestampMixin


class VisitorIdentity(Base, TimestampMixin):
    """One row per anonymous visitor. Owned by the identity resolver."""

    __tablename__ = "visitor_identities"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    anonymous_id = Column(String(255), unique=True, nullable=False, index=True)
    identified_id = Column(String(320), nullable=True, index=True)
    identifier_kind = Column(String(16), nullable=True)
    identified_at = Column(DateTime(timezone=True), nullable=True)
    # Latest email/phone, kept even when an account identifier outranks it
    contact_id = Column(String(320), nullable=True, index=True)
    contact_at = Column(DateTime(timezone=True), nullable=True)
    preferred_listen_platform = Column(String(32), nullable=True)
    preferred_platform_set_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def is_identified(self) -> bool:
        return self.identified_id is not None

    @property
    def contact_keys(self) -> list[str]:
        """Every recipient id suppression must be checked against."""
        keys = [self.identified_id, self.contact_id]
        return list(dict.fromkeys(k for k in keys if k))

    @property
    def has_preference(self) -> bool:
        return self.preferred_listen_platform is not None

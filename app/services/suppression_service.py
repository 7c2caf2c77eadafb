"""
Suppression registry: global, cross-channel ledger of recipients that must
never receive automated sends.

The ledger is append-only. Status is derived from the active entries, and
removal tombstones entries instead of deleting them. is_suppressed() always
reads the store so a committed suppress() is visible to the next pre-send
check.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from app.constants.suppression import (
    AUTOMATIC_REASONS,
    GLOBAL_SCOPE,
    SuppressionReason,
)
from app.core.errors import SuppressionOverrideRequired
from app.models.suppression import SuppressionEntry
from app.schemas.suppression import SuppressionEntryRead, SuppressionStatus
from app.utils.recipients import normalize_recipient_id
from app.utils.time import ensure_utc, utcnow


class SuppressionService:
    """Append, tombstone and check suppression entries."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.logger = logging.getLogger(__name__)

    def _active_query(
        self, recipient_id: str, now: Optional[datetime] = None
    ) -> Query[SuppressionEntry]:
        now = now or utcnow()
        return self.db.query(SuppressionEntry).filter(
            SuppressionEntry.recipient_id == recipient_id,
            SuppressionEntry.revoked_at.is_(None),
            or_(
                SuppressionEntry.expires_at.is_(None),
                SuppressionEntry.expires_at > now,
            ),
        )

    def get_active_entries(self, recipient_id: str) -> List[SuppressionEntry]:
        recipient_id = normalize_recipient_id(recipient_id)
        return (
            self._active_query(recipient_id)
            .order_by(SuppressionEntry.created_at.asc())
            .all()
        )

    def get_entries(
        self, recipient_id: str, include_revoked: bool = True
    ) -> List[SuppressionEntry]:
        """Audit trail for one recipient, oldest first."""
        recipient_id = normalize_recipient_id(recipient_id)
        if not include_revoked:
            return self.get_active_entries(recipient_id)
        return (
            self.db.query(SuppressionEntry)
            .filter(SuppressionEntry.recipient_id == recipient_id)
            .order_by(SuppressionEntry.created_at.asc())
            .all()
        )

    def is_suppressed(self, recipient_id: str, at: Optional[datetime] = None) -> bool:
        """True iff at least one non-revoked, non-expired entry exists."""
        recipient_id = normalize_recipient_id(recipient_id)
        return (
            self.db.query(
                self._active_query(recipient_id, ensure_utc(at)).exists()
            ).scalar()
            is True
        )

    def suppress(
        self,
        recipient_id: str,
        reason: SuppressionReason,
        actor: Optional[str] = None,
        *,
        expires_at: Optional[datetime] = None,
        source_event_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> SuppressionEntry:
        """
        Add a suppression entry. An active entry with the same reason is
        returned unchanged; a different reason appends a new entry.
        """
        recipient_id = normalize_recipient_id(recipient_id)
        reason = SuppressionReason(reason)
        existing = (
            self._active_query(recipient_id)
            .filter(SuppressionEntry.reason == reason.value)
            .order_by(SuppressionEntry.created_at.asc())
            .first()
        )
        if existing is not None and (
            existing.expires_at is None
            or (
                expires_at is not None
                and ensure_utc(existing.expires_at) >= ensure_utc(expires_at)
            )
        ):
            return existing

        entry = SuppressionEntry(
            recipient_id=recipient_id,
            scope=GLOBAL_SCOPE,
            reason=reason.value,
            created_by=actor,
            expires_at=ensure_utc(expires_at),
            source_event_id=source_event_id,
            details=details or {},
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        self.logger.info(
            "Suppressed recipient=%s reason=%s actor=%s",
            recipient_id,
            reason.value,
            actor,
        )
        return entry

    def unsuppress(
        self, recipient_id: str, actor: str, override: bool = False
    ) -> List[SuppressionEntry]:
        """
        Tombstone the recipient's active entries. Automatic entries
        (unsubscribe, bounce, complaint) are only removed with override;
        without it nothing changes and SuppressionOverrideRequired is raised.
        Returns the revoked entries.
        """
        recipient_id = normalize_recipient_id(recipient_id)
        active = self.get_active_entries(recipient_id)
        automatic = sorted(
            {e.reason for e in active if SuppressionReason(e.reason) in AUTOMATIC_REASONS}
        )
        if automatic and not override:
            raise SuppressionOverrideRequired(recipient_id, automatic)

        now = utcnow()
        for entry in active:
            entry.revoked_at = now
            entry.revoked_by = actor
        self.db.commit()
        self.logger.info(
            "Unsuppressed recipient=%s actor=%s override=%s revoked=%d",
            recipient_id,
            actor,
            override,
            len(active),
        )
        return active

    def get_status(
        self, recipient_id: str, include_revoked: bool = True
    ) -> SuppressionStatus:
        """Suppression status plus audit trail, for the admin API."""
        recipient_id = normalize_recipient_id(recipient_id)
        return SuppressionStatus(
            recipient_id=recipient_id,
            suppressed=self.is_suppressed(recipient_id),
            entries=[
                SuppressionEntryRead.model_validate(e)
                for e in self.get_entries(recipient_id, include_revoked=include_revoked)
            ],
        )

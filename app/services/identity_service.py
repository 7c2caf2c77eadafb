"""
Identity resolver: anonymous visitor records, identifier merge and the sticky
listen-platform preference.

Mutations for one anonymous_id are serialised with an in-process keyed lock
and a row lock in the store.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.constants.identity import (
    CONTACT_KINDS,
    IDENTIFIER_SPECIFICITY,
    IdentifierKind,
)
from app.constants.platforms import ListenPlatform
from app.models.visitor_identity import VisitorIdentity
from app.utils.keyed_lock import KeyedLock
from app.utils.recipients import normalize_recipient_id
from app.utils.time import ensure_utc, utcnow

_identity_locks = KeyedLock()


class IdentityService:
    """Owns VisitorIdentity rows. resolve() always returns an identity."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.logger = logging.getLogger(__name__)

    def get_identity(self, anonymous_id: str) -> Optional[VisitorIdentity]:
        return (
            self.db.query(VisitorIdentity)
            .filter(VisitorIdentity.anonymous_id == anonymous_id)
            .first()
        )

    def resolve(self, anonymous_id: str) -> VisitorIdentity:
        """Return the identity for anonymous_id, creating an anonymous-only one if absent."""
        identity = self.get_identity(anonymous_id)
        if identity is not None:
            return identity
        identity = VisitorIdentity(anonymous_id=anonymous_id)
        self.db.add(identity)
        try:
            self.db.commit()
        except IntegrityError:
            # Concurrent first event for the same visitor; the other writer won.
            self.db.rollback()
            existing = self.get_identity(anonymous_id)
            if existing is None:
                raise
            return existing
        self.db.refresh(identity)
        return identity

    def attach_identifier(
        self,
        anonymous_id: str,
        identified_id: str,
        kind: IdentifierKind = IdentifierKind.EMAIL,
        attached_at: Optional[datetime] = None,
    ) -> VisitorIdentity:
        """
        Attach a durable identifier. Idempotent; last attach wins by timestamp,
        and a newer attach of a less specific kind never replaces a more
        specific identifier. Email and phone attaches are also recorded as the
        visitor's contact address, whichever identifier wins.
        """
        identified_id = normalize_recipient_id(identified_id)
        attached_at = ensure_utc(attached_at) or utcnow()
        self.resolve(anonymous_id)

        with _identity_locks.hold(anonymous_id):
            identity = self._lock_row(anonymous_id)
            changed = self._record_contact(identity, identified_id, kind, attached_at)

            if identity.identified_id == identified_id:
                if identity.identifier_kind is None or _more_specific(
                    kind, identity.identifier_kind
                ):
                    identity.identifier_kind = kind.value
                    changed = True
                return self._save(identity, changed)

            if identity.identified_id is not None:
                current_at = ensure_utc(identity.identified_at)
                if current_at is not None and attached_at < current_at:
                    self.logger.info(
                        "Ignoring stale identifier for anonymous_id=%s (attached_at=%s < %s)",
                        anonymous_id,
                        attached_at,
                        current_at,
                    )
                    return self._save(identity, changed)
                if identity.identifier_kind and _more_specific(
                    identity.identifier_kind, kind
                ):
                    self.logger.info(
                        "Keeping %s identifier for anonymous_id=%s over less specific %s",
                        identity.identifier_kind,
                        anonymous_id,
                        kind.value,
                    )
                    return self._save(identity, changed)

            identity.identified_id = identified_id
            identity.identifier_kind = kind.value
            identity.identified_at = attached_at
            return self._save(identity, True)

    def _record_contact(
        self,
        identity: VisitorIdentity,
        identified_id: str,
        kind: IdentifierKind,
        attached_at: datetime,
    ) -> bool:
        if kind not in CONTACT_KINDS or identity.contact_id == identified_id:
            return False
        current_at = ensure_utc(identity.contact_at)
        if current_at is not None and attached_at < current_at:
            return False
        identity.contact_id = identified_id
        identity.contact_at = attached_at
        return True

    def _save(self, identity: VisitorIdentity, changed: bool) -> VisitorIdentity:
        if not changed:
            self.db.rollback()
            return identity
        self.db.commit()
        self.db.refresh(identity)
        return identity

    def set_preferred_platform(
        self, identity: VisitorIdentity, platform: ListenPlatform
    ) -> VisitorIdentity:
        """
        Set the preferred listen platform only if none is set yet. Executed as
        a single conditional UPDATE so concurrent first clicks cannot both win.
        """
        with _identity_locks.hold(identity.anonymous_id):
            result = self.db.execute(
                update(VisitorIdentity)
                .where(
                    VisitorIdentity.anonymous_id == identity.anonymous_id,
                    VisitorIdentity.preferred_listen_platform.is_(None),
                )
                .values(
                    preferred_listen_platform=ListenPlatform(platform).value,
                    preferred_platform_set_at=utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            if result.rowcount:
                self.logger.debug(
                    "Preferred platform for %s set to %s",
                    identity.anonymous_id,
                    platform,
                )
            self.db.refresh(identity)
            return identity

    def replace_preferred_platform(
        self, anonymous_id: str, platform: ListenPlatform
    ) -> VisitorIdentity:
        """Explicit user action: overwrite the preferred platform unconditionally."""
        self.resolve(anonymous_id)
        with _identity_locks.hold(anonymous_id):
            identity = self._lock_row(anonymous_id)
            identity.preferred_listen_platform = ListenPlatform(platform).value
            identity.preferred_platform_set_at = utcnow()
            self.db.commit()
            self.db.refresh(identity)
            return identity

    def _lock_row(self, anonymous_id: str) -> VisitorIdentity:
        """Re-read the identity with a row lock (no-op on SQLite)."""
        return (
            self.db.query(VisitorIdentity)
            .filter(VisitorIdentity.anonymous_id == anonymous_id)
            .populate_existing()
            .with_for_update()
            .one()
        )


def _more_specific(a: str, b: str) -> bool:
    return IDENTIFIER_SPECIFICITY[IdentifierKind(a)] > IDENTIFIER_SPECIFICITY[
        IdentifierKind(b)
    ]

"""Tests for SuppressionService."""

from datetime import timedelta

import pytest

from app.constants.suppression import SuppressionReason
from app.core.errors import SuppressionOverrideRequired
from app.services.suppression_service import SuppressionService
from app.utils.time import utcnow


def test_not_suppressed_by_default(db, recipient_id):
    assert SuppressionService(db).is_suppressed(recipient_id) is False


def test_suppress_and_check(db, setup_manual_suppression, recipient_id):
    svc = SuppressionService(db)
    assert svc.is_suppressed(recipient_id) is True
    assert setup_manual_suppression.created_by == "ops@example.com"
    assert setup_manual_suppression.scope == "global"


def test_suppress_normalises_recipient(db):
    svc = SuppressionService(db)
    svc.suppress("Fan@Example.COM", SuppressionReason.MANUAL)
    assert svc.is_suppressed("fan@example.com") is True
    svc.suppress("+1 (555) 010-2000", SuppressionReason.MANUAL)
    assert svc.is_suppressed("+15550102000") is True


def test_suppress_same_reason_is_idempotent(db, setup_manual_suppression, recipient_id):
    svc = SuppressionService(db)
    again = svc.suppress(recipient_id, SuppressionReason.MANUAL)
    assert again.id == setup_manual_suppression.id
    assert len(svc.get_entries(recipient_id)) == 1


def test_suppress_different_reason_appends(db, setup_manual_suppression, recipient_id):
    svc = SuppressionService(db)
    svc.suppress(recipient_id, SuppressionReason.BOUNCE)
    reasons = {e.reason for e in svc.get_active_entries(recipient_id)}
    assert reasons == {"manual", "bounce"}


def test_expired_entry_does_not_suppress(db, recipient_id):
    svc = SuppressionService(db)
    svc.suppress(
        recipient_id,
        SuppressionReason.BOUNCE,
        expires_at=utcnow() + timedelta(days=1),
    )
    assert svc.is_suppressed(recipient_id) is True
    assert svc.is_suppressed(recipient_id, at=utcnow() + timedelta(days=2)) is False


def test_unsuppress_manual(db, setup_manual_suppression, recipient_id):
    svc = SuppressionService(db)
    revoked = svc.unsuppress(recipient_id, actor="ops@example.com")
    assert [e.id for e in revoked] == [setup_manual_suppression.id]
    assert svc.is_suppressed(recipient_id) is False

    # Tombstoned, not deleted
    entries = svc.get_entries(recipient_id)
    assert len(entries) == 1
    assert entries[0].revoked_at is not None
    assert entries[0].revoked_by == "ops@example.com"


def test_unsuppress_unsubscribe_requires_override(
    db, setup_unsubscribe_suppression, recipient_id
):
    svc = SuppressionService(db)
    with pytest.raises(SuppressionOverrideRequired) as exc:
        svc.unsuppress(recipient_id, actor="ops@example.com")
    assert exc.value.reasons == ["unsubscribe"]
    assert svc.is_suppressed(recipient_id) is True


def test_unsuppress_refusal_keeps_manual_entries(db, recipient_id):
    svc = SuppressionService(db)
    svc.suppress(recipient_id, SuppressionReason.MANUAL)
    svc.suppress(recipient_id, SuppressionReason.COMPLAINT)
    with pytest.raises(SuppressionOverrideRequired):
        svc.unsuppress(recipient_id, actor="ops@example.com")
    assert len(svc.get_active_entries(recipient_id)) == 2


def test_unsuppress_with_override(db, setup_unsubscribe_suppression, recipient_id):
    svc = SuppressionService(db)
    svc.unsuppress(recipient_id, actor="ops@example.com", override=True)
    assert svc.is_suppressed(recipient_id) is False


def test_resuppress_after_unsuppress(db, setup_manual_suppression, recipient_id):
    svc = SuppressionService(db)
    svc.unsuppress(recipient_id, actor="ops@example.com")
    entry = svc.suppress(recipient_id, SuppressionReason.MANUAL)
    assert entry.id != setup_manual_suppression.id
    assert svc.is_suppressed(recipient_id) is True


def test_get_status(db, setup_manual_suppression, recipient_id):
    svc = SuppressionService(db)
    svc.unsuppress(recipient_id, actor="ops@example.com")
    status = svc.get_status(recipient_id.upper())
    assert status.recipient_id == recipient_id
    assert status.suppressed is False
    assert [e.id for e in status.entries] == [setup_manual_suppression.id]
    assert svc.get_status(recipient_id, include_revoked=False).entries == []

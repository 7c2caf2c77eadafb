"""Tests for IdentityService."""

from datetime import timedelta

from app.constants.identity import IdentifierKind
from app.constants.platforms import ListenPlatform
from app.services.identity_service import IdentityService
from app.utils.time import utcnow


def test_resolve_creates_anonymous_identity(db, anonymous_id):
    svc = IdentityService(db)
    identity = svc.resolve(anonymous_id)
    assert identity.anonymous_id == anonymous_id
    assert identity.is_identified is False
    assert identity.has_preference is False


def test_resolve_is_idempotent(db, anonymous_id):
    svc = IdentityService(db)
    first = svc.resolve(anonymous_id)
    second = svc.resolve(anonymous_id)
    assert first.id == second.id


def test_attach_identifier(db, anonymous_id):
    svc = IdentityService(db)
    identity = svc.attach_identifier(anonymous_id, "Fan@Example.com")
    assert identity.identified_id == "fan@example.com"
    assert identity.identifier_kind == IdentifierKind.EMAIL
    assert identity.is_identified


def test_attach_identifier_idempotent(db, anonymous_id):
    svc = IdentityService(db)
    first = svc.attach_identifier(anonymous_id, "fan@example.com")
    at = first.identified_at
    second = svc.attach_identifier(anonymous_id, "fan@example.com")
    assert second.identified_id == "fan@example.com"
    assert second.identified_at == at


def test_last_attach_wins(db, anonymous_id):
    svc = IdentityService(db)
    now = utcnow()
    svc.attach_identifier(anonymous_id, "old@example.com", attached_at=now - timedelta(minutes=5))
    identity = svc.attach_identifier(anonymous_id, "new@example.com", attached_at=now)
    assert identity.identified_id == "new@example.com"


def test_stale_attach_ignored(db, anonymous_id):
    svc = IdentityService(db)
    now = utcnow()
    svc.attach_identifier(anonymous_id, "new@example.com", attached_at=now)
    identity = svc.attach_identifier(
        anonymous_id, "old@example.com", attached_at=now - timedelta(minutes=5)
    )
    assert identity.identified_id == "new@example.com"


def test_account_identifier_not_replaced_by_email(db, anonymous_id):
    svc = IdentityService(db)
    now = utcnow()
    svc.attach_identifier(
        anonymous_id, "acct_42", kind=IdentifierKind.ACCOUNT, attached_at=now
    )
    identity = svc.attach_identifier(
        anonymous_id,
        "fan@example.com",
        kind=IdentifierKind.EMAIL,
        attached_at=now + timedelta(minutes=1),
    )
    assert identity.identified_id == "acct_42"
    assert identity.identifier_kind == IdentifierKind.ACCOUNT


def test_preferred_platform_is_sticky(db, setup_anonymous_identity):
    svc = IdentityService(db)
    identity = svc.set_preferred_platform(setup_anonymous_identity, ListenPlatform.SPOTIFY)
    assert identity.preferred_listen_platform == ListenPlatform.SPOTIFY

    identity = svc.set_preferred_platform(identity, ListenPlatform.APPLE_MUSIC)
    assert identity.preferred_listen_platform == ListenPlatform.SPOTIFY


def test_replace_preferred_platform_overrides(db, setup_anonymous_identity):
    svc = IdentityService(db)
    svc.set_preferred_platform(setup_anonymous_identity, ListenPlatform.SPOTIFY)
    identity = svc.replace_preferred_platform(
        setup_anonymous_identity.anonymous_id, ListenPlatform.TIDAL
    )
    assert identity.preferred_listen_platform == ListenPlatform.TIDAL


def test_get_identity_unknown(db):
    assert IdentityService(db).get_identity("never-seen") is None


def test_contact_kept_when_account_outranks_it(db, anonymous_id):
    svc = IdentityService(db)
    now = utcnow()
    svc.attach_identifier(
        anonymous_id, "acct_42", kind=IdentifierKind.ACCOUNT, attached_at=now
    )
    identity = svc.attach_identifier(
        anonymous_id, "Fan@Example.com", attached_at=now + timedelta(minutes=1)
    )
    assert identity.identified_id == "acct_42"
    assert identity.contact_id == "fan@example.com"
    assert identity.contact_keys == ["acct_42", "fan@example.com"]


def test_account_does_not_clear_contact(db, anonymous_id):
    svc = IdentityService(db)
    now = utcnow()
    svc.attach_identifier(anonymous_id, "+1 555 010 2000", kind=IdentifierKind.PHONE, attached_at=now)
    identity = svc.attach_identifier(
        anonymous_id,
        "acct_42",
        kind=IdentifierKind.ACCOUNT,
        attached_at=now + timedelta(minutes=1),
    )
    assert identity.identified_id == "acct_42"
    assert identity.contact_id == "+15550102000"


def test_stale_contact_ignored(db, anonymous_id):
    svc = IdentityService(db)
    now = utcnow()
    svc.attach_identifier(anonymous_id, "new@example.com", attached_at=now)
    identity = svc.attach_identifier(
        anonymous_id, "old@example.com", attached_at=now - timedelta(minutes=5)
    )
    assert identity.contact_id == "new@example.com"
    assert identity.contact_keys == ["new@example.com"]

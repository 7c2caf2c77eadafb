"""Tests for the CTA decision engine."""

import pytest

from app.constants.platforms import ListenPlatform
from app.core.decision_engine import ANONYMOUS, IDENTIFIED, decide, identity_state
from app.models.visitor_identity import VisitorIdentity
from app.schemas.decision import CtaAction, CtaKind, SubjectCapabilities

ALL_PLATFORMS = SubjectCapabilities(
    supports_subscribe=True, listen_platforms=set(ListenPlatform)
)
SUBSCRIBE = CtaAction(kind=CtaKind.SUBSCRIBE)
LISTEN = CtaAction(kind=CtaKind.LISTEN)


def visitor(identified_id=None, platform=None):
    return VisitorIdentity(
        anonymous_id="anon-1",
        identified_id=identified_id,
        preferred_listen_platform=platform,
    )


def test_identity_state():
    assert identity_state(None) == ANONYMOUS
    assert identity_state(visitor()) == ANONYMOUS
    assert identity_state(visitor("fan@example.com")) == IDENTIFIED


def test_anonymous_no_preference():
    decision = decide(visitor(), ALL_PLATFORMS)
    assert decision.primary == SUBSCRIBE
    assert decision.secondary == LISTEN


def test_anonymous_with_preference_keeps_subscribe_primary():
    decision = decide(visitor(platform="spotify"), ALL_PLATFORMS)
    assert decision.primary == SUBSCRIBE
    assert decision.secondary == CtaAction(kind=CtaKind.LISTEN, platform=ListenPlatform.SPOTIFY)


def test_unknown_visitor_treated_as_anonymous():
    decision = decide(None, ALL_PLATFORMS)
    assert decision.primary == SUBSCRIBE


def test_identified_no_preference():
    decision = decide(visitor("fan@example.com"), ALL_PLATFORMS)
    assert decision.primary == LISTEN
    assert decision.primary.is_routed is False
    assert decision.secondary is None


def test_identified_with_preference_routes():
    decision = decide(visitor("fan@example.com", "apple_music"), ALL_PLATFORMS)
    assert decision.primary == CtaAction(kind=CtaKind.LISTEN, platform=ListenPlatform.APPLE_MUSIC)
    assert decision.primary.is_routed


def test_preferred_platform_unsupported_falls_back_to_generic_listen():
    capabilities = SubjectCapabilities(listen_platforms={ListenPlatform.SPOTIFY})
    decision = decide(visitor("fan@example.com", "tidal"), capabilities)
    assert decision.primary == LISTEN


def test_anonymous_without_subscribe_falls_back_to_listen():
    capabilities = SubjectCapabilities(
        supports_subscribe=False, listen_platforms={ListenPlatform.SPOTIFY}
    )
    decision = decide(visitor(platform="spotify"), capabilities)
    assert decision.primary == CtaAction(kind=CtaKind.LISTEN, platform=ListenPlatform.SPOTIFY)
    assert decision.secondary is None


def test_identified_without_listen_falls_back_to_subscribe():
    capabilities = SubjectCapabilities(supports_subscribe=True, listen_platforms=set())
    decision = decide(visitor("fan@example.com", "spotify"), capabilities)
    assert decision.primary == SUBSCRIBE


def test_anonymous_without_listen_has_no_secondary():
    capabilities = SubjectCapabilities(supports_subscribe=True, listen_platforms=set())
    decision = decide(visitor(), capabilities)
    assert decision.primary == SUBSCRIBE
    assert decision.secondary is None


@pytest.mark.parametrize("identified_id", [None, "fan@example.com"])
def test_nothing_supported(identified_id):
    capabilities = SubjectCapabilities(supports_subscribe=False, listen_platforms=set())
    decision = decide(visitor(identified_id, "spotify"), capabilities)
    assert decision.primary is None
    assert decision.no_action_available

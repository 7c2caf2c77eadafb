"""
CTA decision state machine over {anonymous, identified} x {no_preference, has_preference}.

    anonymous,  any preference   -> primary Subscribe, secondary Listen
    identified, no preference    -> primary Listen (generic)
    identified, has preference   -> primary Listen (routed to preferred platform)

Unsupported primaries fall back through Listen-routed, Listen-generic,
Subscribe. Pure: no I/O, no side effects.
"""

from __future__ import annotations

from typing import List, Optional

from app.constants.platforms import ListenPlatform, parse_listen_platform
from app.models.visitor_identity import VisitorIdentity
from app.schemas.decision import CtaAction, CtaKind, Decision, SubjectCapabilities

ANONYMOUS = "anonymous"
IDENTIFIED = "identified"


def identity_state(identity: Optional[VisitorIdentity]) -> str:
    if identity is None or not identity.is_identified:
        return ANONYMOUS
    return IDENTIFIED


def _preferred_platform(identity: Optional[VisitorIdentity]) -> Optional[ListenPlatform]:
    if identity is None:
        return None
    return parse_listen_platform(identity.preferred_listen_platform)


def _listen(
    preferred: Optional[ListenPlatform], capabilities: SubjectCapabilities
) -> Optional[CtaAction]:
    """Routed Listen if the subject has the preferred platform, else generic, else None."""
    if not capabilities.supports_listen:
        return None
    if preferred is not None and preferred in capabilities.listen_platforms:
        return CtaAction(kind=CtaKind.LISTEN, platform=preferred)
    return CtaAction(kind=CtaKind.LISTEN)


def _fallback_order(
    preferred: Optional[ListenPlatform], capabilities: SubjectCapabilities
) -> List[CtaAction]:
    """Supported candidates in priority order: Listen-routed, Listen-generic, Subscribe."""
    ordered: List[CtaAction] = []
    if capabilities.supports_listen:
        if preferred is not None and preferred in capabilities.listen_platforms:
            ordered.append(CtaAction(kind=CtaKind.LISTEN, platform=preferred))
        ordered.append(CtaAction(kind=CtaKind.LISTEN))
    if capabilities.supports_subscribe:
        ordered.append(CtaAction(kind=CtaKind.SUBSCRIBE))
    return ordered


def decide(
    identity: Optional[VisitorIdentity], capabilities: SubjectCapabilities
) -> Decision:
    """Compute the primary/secondary CTA for one profile view."""
    preferred = _preferred_platform(identity)

    if identity_state(identity) == ANONYMOUS:
        if capabilities.supports_subscribe:
            return Decision(
                primary=CtaAction(kind=CtaKind.SUBSCRIBE),
                secondary=_listen(preferred, capabilities),
            )
    else:
        primary = _listen(preferred, capabilities)
        if primary is not None:
            return Decision(primary=primary)

    fallback = _fallback_order(preferred, capabilities)
    if not fallback:
        return Decision()
    return Decision(primary=fallback[0])

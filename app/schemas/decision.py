"""CTA decision contracts."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from app.constants.platforms import ListenPlatform


class CtaKind(StrEnum):
    SUBSCRIBE = "subscribe"
    LISTEN = "listen"


class CtaAction(BaseModel):
    """One call-to-action. Listen carries a platform only when routed."""

    kind: CtaKind
    platform: Optional[ListenPlatform] = None

    @property
    def is_routed(self) -> bool:
        return self.kind == CtaKind.LISTEN and self.platform is not None


class SubjectCapabilities(BaseModel):
    """Which actions a subject (artist profile) supports."""

    supports_subscribe: bool = True
    listen_platforms: set[ListenPlatform] = Field(default_factory=set)

    @property
    def supports_listen(self) -> bool:
        return bool(self.listen_platforms)


class Decision(BaseModel):
    """
    Primary/secondary CTA. primary is None (no_action_available) when the
    subject supports none of the candidate actions.
    """

    primary: Optional[CtaAction] = None
    secondary: Optional[CtaAction] = None

    @property
    def no_action_available(self) -> bool:
        return self.primary is None


class DecisionResponse(BaseModel):
    """Decision query response for rendering."""

    subject_id: str
    anonymous_id: str
    identity_state: str
    primary: Optional[CtaAction]
    secondary: Optional[CtaAction]
    no_action_available: bool
    copy_variant: Optional[str] = None

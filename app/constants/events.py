"""Closed event taxonomy and per-type attribute requirements."""

from __future__ import annotations

from enum import StrEnum


class EventType(StrEnum):
    """Behavioural events accepted by the event log."""

    PROFILE_VIEW = "profile_view"
    LISTEN_CLICK = "listen_click"
    SOCIAL_CLICK = "social_click"
    TIP_CLICK = "tip_click"
    LINK_CLICK = "link_click"
    CTA_CLICK = "cta_click"
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    PREFERENCE_CHANGE = "preference_change"


# attribute name -> expected python type
REQUIRED_ATTRIBUTES: dict[EventType, dict[str, type]] = {
    EventType.PROFILE_VIEW: {},
    EventType.LISTEN_CLICK: {"platform": str},
    EventType.SOCIAL_CLICK: {"platform": str},
    EventType.TIP_CLICK: {},
    EventType.LINK_CLICK: {"target": str},
    EventType.CTA_CLICK: {"action": str},
    EventType.SUBSCRIBE: {"channel": str, "contact": str},
    EventType.UNSUBSCRIBE: {"recipient_id": str},
    EventType.PREFERENCE_CHANGE: {"platform": str},
}

# Event types whose "platform" attribute must be a known listen platform
LISTEN_PLATFORM_EVENTS = frozenset(
    {EventType.LISTEN_CLICK, EventType.PREFERENCE_CHANGE}
)

SUBSCRIBE_CHANNELS = frozenset({"email", "sms"})

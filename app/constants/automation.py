"""Scheduled action types, statuses and trigger mapping."""

from enum import StrEnum

from app.constants.events import EventType


class ActionStatus(StrEnum):
    """Scheduled action lifecycle. PENDING is the only non-terminal state."""

    PENDING = "pending"
    SUPPRESSED = "suppressed"
    SENT = "sent"
    FAILED = "failed"


class ActionType(StrEnum):
    """Automated follow-up kinds."""

    LISTEN_FOLLOWUP = "listen_followup"


# Trigger event type -> follow-up actions it schedules
TRIGGER_ACTIONS: dict[EventType, tuple[ActionType, ...]] = {
    EventType.LISTEN_CLICK: (ActionType.LISTEN_FOLLOWUP,),
}

"""
Command that applies the cross-entity effects of one appended event.

Runs in the event consumer (Celery) with at-least-once delivery, so every
step is idempotent: identity resolution creates at most once, preferences are
set-if-null, identifier merges are last-attach-wins, scheduled actions are
deduplicated on (trigger_event_id, action_type), and suppression of an
already suppressed recipient with the same reason is a no-op.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.adapters.base import BaseDeliveryAdapter
from app.constants.automation import TRIGGER_ACTIONS
from app.constants.events import EventType
from app.constants.identity import SUBSCRIBE_CHANNEL_KINDS, IdentifierKind
from app.constants.platforms import ListenPlatform
from app.constants.suppression import SuppressionReason
from app.models.event import Event
from app.models.scheduled_action import ScheduledAction
from app.models.visitor_identity import VisitorIdentity
from app.services.automation_scheduler import ActionEnqueuer, AutomationScheduler
from app.services.event_log_service import EventLogService
from app.services.identity_service import IdentityService
from app.services.suppression_service import SuppressionService
from app.utils.recipients import normalize_recipient_id


class ProcessEventCommand:
    """Update identity, preference, suppression and automation state from one event."""

    def __init__(
        self,
        db: Session,
        delivery_adapter: Optional[BaseDeliveryAdapter] = None,
        enqueue: Optional[ActionEnqueuer] = None,
        scheduler: Optional[AutomationScheduler] = None,
    ) -> None:
        self.db = db
        self.event_log = EventLogService(db)
        self.identity_service = IdentityService(db)
        self.suppression_service = SuppressionService(db)
        self.scheduler = scheduler or AutomationScheduler(
            db,
            suppression_service=self.suppression_service,
            delivery_adapter=delivery_adapter,
            enqueue=enqueue,
        )
        self.logger = logging.getLogger(__name__)

    def execute(self, event_id: UUID) -> List[ScheduledAction]:
        """
        Apply the effects of the event.

        Args:
            event_id: The event_id returned by the event log append.

        Returns:
            List[ScheduledAction]: Actions created (or found, on redelivery)
            for this event or for deferred triggers it unlocked.
        """
        event = self.event_log.get_event(event_id)
        if event is None:
            self.logger.warning("Event %s not found; nothing to process", event_id)
            return []

        event_type = EventType(event.type)
        identity = self.identity_service.resolve(event.anonymous_id)
        actions: List[ScheduledAction] = []

        newly_identified = self._attach_identifiers(event, event_type, identity)
        if newly_identified is not None:
            identity = newly_identified
            actions.extend(self.scheduler.schedule_deferred_triggers(identity))

        if event_type == EventType.LISTEN_CLICK:
            identity = self.identity_service.set_preferred_platform(
                identity, ListenPlatform(event.attributes["platform"])
            )
        elif event_type == EventType.PREFERENCE_CHANGE:
            identity = self.identity_service.replace_preferred_platform(
                event.anonymous_id, ListenPlatform(event.attributes["platform"])
            )
        elif event_type == EventType.UNSUBSCRIBE:
            self.suppression_service.suppress(
                event.attributes["recipient_id"],
                SuppressionReason.UNSUBSCRIBE,
                actor=None,
                source_event_id=str(event.id),
            )

        if event_type in TRIGGER_ACTIONS:
            for action in self.scheduler.on_trigger(event, identity):
                if all(a.id != action.id for a in actions):
                    actions.append(action)

        return actions

    def _attach_identifiers(
        self, event: Event, event_type: EventType, identity: VisitorIdentity
    ) -> Optional[VisitorIdentity]:
        """
        Attach identifiers carried by the event. Returns the updated identity
        when the visitor's identifier changed, else None.
        """
        before = identity.identified_id
        updated: Optional[VisitorIdentity] = None

        if event.identified_id:
            updated = self.identity_service.attach_identifier(
                event.anonymous_id,
                event.identified_id,
                kind=_kind_for(event.identified_id),
                attached_at=event.occurred_at,
            )
        if event_type == EventType.SUBSCRIBE:
            updated = self.identity_service.attach_identifier(
                event.anonymous_id,
                event.attributes["contact"],
                kind=SUBSCRIBE_CHANNEL_KINDS[event.attributes["channel"]],
                attached_at=event.occurred_at,
            )

        if updated is not None and updated.identified_id != before:
            return updated
        return None


def _kind_for(identified_id: str) -> IdentifierKind:
    normalized = normalize_recipient_id(identified_id)
    if "@" in normalized:
        return IdentifierKind.EMAIL
    if normalized.lstrip("+").isdigit():
        return IdentifierKind.PHONE
    return IdentifierKind.ACCOUNT

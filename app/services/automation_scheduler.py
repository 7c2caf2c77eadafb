"""
Automation scheduler: turns trigger events into delayed, suppression-checked,
idempotent sends.

Lifecycle per action: pending -> {sent | suppressed | failed}.

- Creation is deduplicated on (trigger_event_id, action_type) by a unique
  constraint, so duplicate deliveries of the same trigger converge on one row.
- Suppression is checked when the action is created and again right before
  delivery. A failed check counts as suppressed (fail closed).
- Execution is guarded by a lease (claimed_until) taken with a conditional
  UPDATE, so at most one worker runs an action at a time.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.adapters.base import BaseDeliveryAdapter, DeliveryResult
from app.config import Settings, get_settings
from app.constants.automation import TRIGGER_ACTIONS, ActionStatus, ActionType
from app.constants.events import EventType
from app.constants.identity import IdentifierKind
from app.core.errors import DeliveryFailure
from app.models.event import Event
from app.models.scheduled_action import ScheduledAction
from app.models.visitor_identity import VisitorIdentity
from app.services.suppression_service import SuppressionService
from app.utils.metrics import (
    DELIVERY_ATTEMPTS_TOTAL,
    DELIVERY_LATENCY_SECONDS,
    SCHEDULED_ACTIONS_TOTAL,
    SUPPRESSION_CHECKS_TOTAL,
)
from app.utils.time import ensure_utc, utcnow

# (action_id, eta) -> None; hands the action to the time-ordered work queue
ActionEnqueuer = Callable[[UUID, datetime], None]

SUPPRESSION_UNKNOWN_ERROR = "suppression status unknown; failed closed"

# Account identifiers are resolved to a contact address by the provider
CHANNEL_BY_KIND = {
    IdentifierKind.EMAIL.value: "email",
    IdentifierKind.PHONE.value: "sms",
    IdentifierKind.ACCOUNT.value: "account",
}


class AutomationScheduler:
    """Creates and executes scheduled follow-up actions."""

    def __init__(
        self,
        db: Session,
        suppression_service: Optional[SuppressionService] = None,
        delivery_adapter: Optional[BaseDeliveryAdapter] = None,
        enqueue: Optional[ActionEnqueuer] = None,
        settings: Optional[Settings] = None,
        now_fn: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.suppression = suppression_service or SuppressionService(db)
        self.delivery_adapter = delivery_adapter
        self.enqueue = enqueue
        self.settings = settings or get_settings()
        self.now_fn = now_fn
        self.logger = logging.getLogger(__name__)

    @property
    def delay(self) -> timedelta:
        return timedelta(minutes=self.settings.automation_delay_minutes)

    def now(self) -> datetime:
        return ensure_utc(self.now_fn())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_action(self, action_id: UUID) -> Optional[ScheduledAction]:
        return (
            self.db.query(ScheduledAction)
            .filter(ScheduledAction.id == action_id)
            .populate_existing()
            .first()
        )

    def get_by_key(
        self, trigger_event_id: UUID, action_type: ActionType | str
    ) -> Optional[ScheduledAction]:
        return (
            self.db.query(ScheduledAction)
            .filter(
                ScheduledAction.trigger_event_id == trigger_event_id,
                ScheduledAction.action_type == str(action_type),
            )
            .first()
        )

    def list_actions_query(
        self,
        status: Optional[ActionStatus] = None,
        recipient_id: Optional[str] = None,
    ) -> Query[ScheduledAction]:
        q = self.db.query(ScheduledAction)
        if status is not None:
            q = q.filter(ScheduledAction.status == ActionStatus(status).value)
        if recipient_id is not None:
            q = q.filter(ScheduledAction.recipient_id == recipient_id)
        return q.order_by(ScheduledAction.not_before.asc())

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def on_trigger(
        self, event: Event, identity: VisitorIdentity
    ) -> List[ScheduledAction]:
        """
        Schedule the follow-ups for a trigger event. Unidentified visitors get
        no action (no-op); their triggers are picked up by
        schedule_deferred_triggers if they identify before not_before.
        """
        action_types = TRIGGER_ACTIONS.get(EventType(event.type), ())
        if not action_types:
            return []
        if not identity.is_identified:
            self.logger.info(
                "No action for trigger %s: visitor %s has no contact identifier",
                event.id,
                identity.anonymous_id,
            )
            return []
        not_before = ensure_utc(event.occurred_at) + self.delay
        channel = CHANNEL_BY_KIND.get(identity.identifier_kind or "", "email")
        return [
            self._create_action(
                event,
                identity.identified_id,
                action_type,
                not_before,
                channel,
                contact_keys=identity.contact_keys,
            )
            for action_type in action_types
        ]

    def schedule_deferred_triggers(
        self, identity: VisitorIdentity
    ) -> List[ScheduledAction]:
        """
        After a visitor becomes identified, schedule their earlier triggers
        whose send time has not passed yet, keeping the original not_before.
        """
        if not identity.is_identified:
            return []
        trigger_types = [t.value for t in TRIGGER_ACTIONS]
        window_start = self.now() - self.delay
        events = (
            self.db.query(Event)
            .filter(
                Event.anonymous_id == identity.anonymous_id,
                Event.type.in_(trigger_types),
                Event.occurred_at > window_start,
            )
            .order_by(Event.occurred_at.asc(), Event.sequence.asc())
            .all()
        )
        actions: List[ScheduledAction] = []
        for event in events:
            actions.extend(self.on_trigger(event, identity))
        return actions

    def _create_action(
        self,
        event: Event,
        recipient_id: str,
        action_type: ActionType,
        not_before: datetime,
        channel: str,
        contact_keys: Sequence[str] = (),
    ) -> ScheduledAction:
        existing = self.get_by_key(event.id, action_type)
        if existing is not None:
            self.logger.debug(
                "Duplicate trigger %s for %s ignored", event.id, action_type.value
            )
            return existing

        suppressed, error = self._check_suppressed(
            [recipient_id, *contact_keys], stage="schedule"
        )
        now = self.now()
        action = ScheduledAction(
            trigger_event_id=event.id,
            action_type=action_type.value,
            recipient_id=recipient_id,
            anonymous_id=event.anonymous_id,
            subject_id=event.subject_id,
            payload=self._build_payload(event, channel, contact_keys),
            not_before=not_before,
            status=(ActionStatus.SUPPRESSED if suppressed else ActionStatus.PENDING).value,
            attempt_count=0,
            last_error=error,
            completed_at=now if suppressed else None,
        )
        self.db.add(action)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent delivery of the same trigger created it first.
            self.db.rollback()
            existing = self.get_by_key(event.id, action_type)
            if existing is None:
                raise
            return existing
        self.db.refresh(action)

        SCHEDULED_ACTIONS_TOTAL.labels(
            action_type=action.action_type, status=action.status
        ).inc()
        if suppressed:
            self.logger.info(
                "Action %s for %s created suppressed (recipient suppressed at schedule time)",
                action.id,
                recipient_id,
            )
        else:
            self.logger.info(
                "Scheduled %s %s for %s at %s",
                action.action_type,
                action.id,
                recipient_id,
                not_before.isoformat(),
            )
            self._enqueue(action)
        return action

    def _build_payload(
        self, event: Event, channel: str, contact_keys: Sequence[str]
    ) -> dict[str, Any]:
        attributes = event.attributes or {}
        return {
            "channel": channel,
            "contact_keys": list(contact_keys),
            "subject_id": event.subject_id,
            "platform": attributes.get("platform"),
            "trigger_event_id": str(event.id),
        }

    def _enqueue(self, action: ScheduledAction) -> None:
        if self.enqueue is None:
            return
        try:
            self.enqueue(action.id, ensure_utc(action.not_before))
        except Exception as e:
            # The beat sweep still picks the action up once it is due.
            self.logger.warning("Failed to enqueue action %s: %s", action.id, e)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, action_id: UUID) -> Optional[ScheduledAction]:
        """
        Run one due action: claim it, re-check suppression, deliver, and record
        the outcome. Returns the action (unchanged when it is not due, already
        terminal, or claimed by another worker), or None if it does not exist.
        """
        now = self.now()
        if not self._claim(action_id, now):
            action = self.get_action(action_id)
            if action is not None:
                self.logger.debug(
                    "Action %s not executed (status=%s, not_before=%s)",
                    action_id,
                    action.status,
                    action.not_before,
                )
            return action

        action = self.get_action(action_id)
        suppressed, error = self._check_suppressed(
            [action.recipient_id, *(action.payload or {}).get("contact_keys", [])],
            stage="send",
            anonymous_id=action.anonymous_id,
        )
        if suppressed:
            return self._finish(action, ActionStatus.SUPPRESSED, error=error)

        result = self._deliver(action)
        if result.success:
            return self._finish(action, ActionStatus.SENT)
        return self._record_failure(action, result.error or "delivery failed")

    def run_due(self, limit: Optional[int] = None) -> List[ScheduledAction]:
        """Execute due pending actions in not_before order."""
        limit = limit or self.settings.automation_sweep_batch_size
        now = self.now()
        due_ids = [
            row.id
            for row in self.db.query(ScheduledAction.id)
            .filter(
                ScheduledAction.status == ActionStatus.PENDING.value,
                ScheduledAction.not_before <= now,
                or_(
                    ScheduledAction.claimed_until.is_(None),
                    ScheduledAction.claimed_until < now,
                ),
            )
            .order_by(ScheduledAction.not_before.asc())
            .limit(limit)
            .all()
        ]
        processed: List[ScheduledAction] = []
        for action_id in due_ids:
            action = self.execute(action_id)
            if action is not None:
                processed.append(action)
        return processed

    def _claim(self, action_id: UUID, now: datetime) -> bool:
        lease = timedelta(seconds=self.settings.automation_claim_lease_seconds)
        result = self.db.execute(
            update(ScheduledAction)
            .where(
                ScheduledAction.id == action_id,
                ScheduledAction.status == ActionStatus.PENDING.value,
                ScheduledAction.not_before <= now,
                or_(
                    ScheduledAction.claimed_until.is_(None),
                    ScheduledAction.claimed_until < now,
                ),
            )
            .values(claimed_until=now + lease)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    def _check_suppressed(
        self,
        recipient_ids: Sequence[str],
        stage: str,
        anonymous_id: Optional[str] = None,
    ) -> Tuple[bool, Optional[str]]:
        """
        (suppressed, error). Suppressed if any of the recipient ids, or any
        contact currently recorded for anonymous_id, is suppressed. Any store
        failure is treated as suppressed.
        """
        recipient_ids = list(recipient_ids)
        try:
            if anonymous_id is not None:
                identity = (
                    self.db.query(VisitorIdentity)
                    .filter(VisitorIdentity.anonymous_id == anonymous_id)
                    .populate_existing()
                    .first()
                )
                if identity is not None:
                    recipient_ids.extend(identity.contact_keys)
            suppressed = any(
                self.suppression.is_suppressed(recipient_id)
                for recipient_id in dict.fromkeys(recipient_ids)
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.error(
                "Suppression check failed for %s at %s; failing closed: %s",
                ", ".join(recipient_ids),
                stage,
                e,
            )
            SUPPRESSION_CHECKS_TOTAL.labels(stage=stage, result="unknown").inc()
            return True, SUPPRESSION_UNKNOWN_ERROR
        SUPPRESSION_CHECKS_TOTAL.labels(
            stage=stage, result="suppressed" if suppressed else "clear"
        ).inc()
        return suppressed, None

    def _deliver(self, action: ScheduledAction) -> DeliveryResult:
        if self.delivery_adapter is None:
            return DeliveryResult(success=False, error="delivery adapter not configured")
        started = time.monotonic()
        try:
            result = self.delivery_adapter.send(
                action.recipient_id, action.action_type, dict(action.payload or {})
            )
        except DeliveryFailure as e:
            result = DeliveryResult(success=False, error=str(e))
        except Exception as e:
            # Counted as a failed attempt so retries stay bounded
            self.logger.exception(
                "Delivery adapter error for action %s", action.id
            )
            result = DeliveryResult(
                success=False, error=f"{type(e).__name__}: {e}"
            )
        finally:
            DELIVERY_LATENCY_SECONDS.labels(action_type=action.action_type).observe(
                time.monotonic() - started
            )
        DELIVERY_ATTEMPTS_TOTAL.labels(
            action_type=action.action_type,
            outcome="success" if result.success else "failure",
        ).inc()
        return result

    def _finish(
        self,
        action: ScheduledAction,
        status: ActionStatus,
        error: Optional[str] = None,
    ) -> ScheduledAction:
        action.status = status.value
        action.completed_at = self.now()
        action.claimed_until = None
        if status == ActionStatus.SENT:
            action.attempt_count = (action.attempt_count or 0) + 1
        if error is not None:
            action.last_error = error
        self.db.commit()
        self.db.refresh(action)
        SCHEDULED_ACTIONS_TOTAL.labels(
            action_type=action.action_type, status=action.status
        ).inc()
        self.logger.info(
            "Action %s for %s -> %s", action.id, action.recipient_id, action.status
        )
        return action

    def _record_failure(self, action: ScheduledAction, error: str) -> ScheduledAction:
        action.attempt_count = (action.attempt_count or 0) + 1
        action.last_error = error
        if action.attempt_count >= self.settings.automation_max_attempts:
            self.logger.error(
                "Action %s for %s failed after %d attempts: %s",
                action.id,
                action.recipient_id,
                action.attempt_count,
                error,
            )
            return self._finish(action, ActionStatus.FAILED)

        backoff = timedelta(
            seconds=self.settings.automation_backoff_base_seconds
            * 2 ** (action.attempt_count - 1)
        )
        action.not_before = self.now() + backoff
        action.claimed_until = None
        self.db.commit()
        self.db.refresh(action)
        self.logger.warning(
            "Action %s attempt %d failed (%s); retrying at %s",
            action.id,
            action.attempt_count,
            error,
            action.not_before,
        )
        self._enqueue(action)
        return action

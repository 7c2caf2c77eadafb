from uuid import UUID

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from app.adapters.delivery import get_delivery_adapter
from app.commands.events.ingest_event_command import EventDispatcher
from app.commands.events.process_event_command import ProcessEventCommand
from app.config import get_settings
from app.db import get_db
from app.models.scheduled_action import ScheduledAction
from app.services.automation_scheduler import AutomationScheduler


def get_event_dispatcher(db: Session = Depends(get_db)) -> EventDispatcher:
    """
    FastAPI dependency choosing how appended events reach the consumer:
    Celery by default, or in the request when PROCESS_EVENTS_INLINE is set.
    """
    from app.tasks.automation_task import enqueue_scheduled_action
    from app.tasks.process_event_task import dispatch_event

    if not get_settings().process_events_inline:
        return dispatch_event

    def process_inline(event_id: UUID) -> None:
        ProcessEventCommand(
            db,
            delivery_adapter=get_delivery_adapter(),
            enqueue=enqueue_scheduled_action,
        ).execute(event_id)

    return process_inline


def get_scheduled_action_by_id(
    action_id: UUID,
    db: Session = Depends(get_db),
) -> ScheduledAction:
    """FastAPI dependency to get a scheduled action by ID."""
    action = AutomationScheduler(db).get_action(action_id)
    if action is None:
        raise HTTPException(status_code=404, detail="Scheduled action not found")
    return action

"""Celery task consuming appended events."""

from __future__ import annotations

from typing import List
from uuid import UUID

from app.adapters.delivery import get_delivery_adapter
from app.commands.events.process_event_command import ProcessEventCommand
from app.core.errors import TransientStoreError
from app.db import db_manager
from app.infra.celery_app import celery_app
from app.infra.logging_config import get_logger
from app.tasks.automation_task import enqueue_scheduled_action

logger = get_logger("events")


@celery_app.task(
    name="app.tasks.process_event_task.process_event_task",
    autoretry_for=(TransientStoreError,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 8},
)
def process_event_task(event_id_str: str) -> List[str]:
    """
    Apply identity, preference, suppression and automation effects of one
    event. Safe to redeliver. Returns the ids of the actions it scheduled.
    """
    try:
        event_id = UUID(event_id_str)
    except ValueError:
        logger.warning("Invalid event_id for processing: %s", event_id_str)
        return []

    with db_manager.db_session() as db:
        command = ProcessEventCommand(
            db,
            delivery_adapter=get_delivery_adapter(),
            enqueue=enqueue_scheduled_action,
        )
        actions = command.execute(event_id)
        return [str(a.id) for a in actions]


def dispatch_event(event_id: UUID) -> None:
    process_event_task.delay(str(event_id))

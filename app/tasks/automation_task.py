"""Celery tasks executing scheduled follow-up actions."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from app.adapters.delivery import get_delivery_adapter
from app.core.errors import TransientStoreError
from app.db import db_manager
from app.infra.celery_app import celery_app
from app.infra.logging_config import get_logger
from app.services.automation_scheduler import AutomationScheduler

logger = get_logger("automation")


def enqueue_scheduled_action(action_id: UUID, eta: datetime) -> None:
    """Hand an action to the broker, to run no earlier than eta."""
    execute_scheduled_action_task.apply_async(args=[str(action_id)], eta=eta)


@celery_app.task(
    name="app.tasks.automation_task.execute_scheduled_action_task",
    autoretry_for=(TransientStoreError,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 5},
)
def execute_scheduled_action_task(action_id_str: str) -> Optional[str]:
    """
    Execute one scheduled action if it is due. Early, duplicate or late
    deliveries of the message are harmless: the claim only succeeds for a
    pending, due, unclaimed action.
    """
    try:
        action_id = UUID(action_id_str)
    except ValueError:
        logger.warning("Invalid action_id for execution: %s", action_id_str)
        return None

    with db_manager.db_session() as db:
        scheduler = AutomationScheduler(
            db,
            delivery_adapter=get_delivery_adapter(),
            enqueue=enqueue_scheduled_action,
        )
        action = scheduler.execute(action_id)
        return action.status if action is not None else None


@celery_app.task(name="app.tasks.automation_task.run_due_actions_task")
def run_due_actions_task(limit: Optional[int] = None) -> int:
    """Sweep due pending actions whose eta message never arrived."""
    with db_manager.db_session() as db:
        scheduler = AutomationScheduler(
            db,
            delivery_adapter=get_delivery_adapter(),
            enqueue=enqueue_scheduled_action,
        )
        processed = scheduler.run_due(limit=limit)

    if processed:
        logger.info("Swept %d due scheduled actions", len(processed))
    return len(processed)

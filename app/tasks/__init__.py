# Import celery app first
from app.infra.celery_app import celery_app

# Initialize logging configuration for Celery workers
from app.infra.logging_config import LoggingConfig
from app.tasks.automation_task import (
    execute_scheduled_action_task,
    run_due_actions_task,
)
from app.tasks.process_event_task import process_event_task

LoggingConfig()  # Initialize logging

__all__ = [
    "celery_app",
    "execute_scheduled_action_task",
    "process_event_task",
    "run_due_actions_task",
]

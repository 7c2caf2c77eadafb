from celery import Celery

from app.config import get_settings

settings = get_settings()

celery_app = Celery(
    "fanflow",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "app.tasks.process_event_task",
        "app.tasks.automation_task",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
)

# Durable catch-up for due actions whose eta message was lost (restarts, broker flush).
celery_app.conf.beat_schedule = {
    "run-due-scheduled-actions": {
        "task": "app.tasks.automation_task.run_due_actions_task",
        "schedule": settings.automation_sweep_interval_seconds,
    },
}

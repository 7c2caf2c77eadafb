"""
Command to append an inbound event and hand it to the event consumer.

The append is the durability boundary: nothing downstream happens until the
event is stored. Hand-off to the consumer is at-least-once (Celery).
"""

from __future__ import annotations

import logging
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.schemas.event import EventAppended, EventCreate
from app.services.event_log_service import EventLogService

# event_id -> None; schedules consumption of an appended event
EventDispatcher = Callable[[UUID], None]


class IngestEventCommand:
    """Validate, append and dispatch one event."""

    def __init__(self, db: Session, dispatcher: Optional[EventDispatcher] = None) -> None:
        self.db = db
        self.event_log = EventLogService(db)
        self.dispatcher = dispatcher
        self.logger = logging.getLogger(__name__)

    def execute(self, data: EventCreate) -> EventAppended:
        """
        Append the event and dispatch it.

        Args:
            data: Inbound event payload.

        Returns:
            EventAppended: the generated event_id.

        Raises:
            ValidationError: unknown type or missing/invalid attribute.
        """
        event_id = self.event_log.append(data)
        if self.dispatcher is not None:
            try:
                self.dispatcher(event_id)
            except Exception as e:
                # Already appended; a client retry would duplicate the event.
                self.logger.error("Failed to dispatch event %s: %s", event_id, e)
        return EventAppended(event_id=event_id)

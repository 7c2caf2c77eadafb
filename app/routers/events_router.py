"""Events API: ingest behavioural events and read the log."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.commands.events.ingest_event_command import EventDispatcher, IngestEventCommand
from app.db import get_db
from app.routers.utils.dependencies import get_event_dispatcher
from app.schemas.event import EventAppended, EventCreate, EventFilter, EventRead
from app.services.event_log_service import EventLogService

router = APIRouter(
    prefix="/events",
    tags=["events"],
    responses={404: {"description": "Not found"}},
)


@router.post("", response_model=EventAppended, status_code=201)
def append_event(
    data: EventCreate,
    db: Session = Depends(get_db),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
) -> EventAppended:
    """Append one event. Unknown types and missing attributes are rejected with 422."""
    return IngestEventCommand(db, dispatcher).execute(data)


@router.get("", response_model=Page[EventRead])
def list_events(
    type: Optional[List[str]] = Query(None),
    subject_id: Optional[str] = None,
    anonymous_id: Optional[str] = None,
    identified_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    params: Params = Depends(),
    db: Session = Depends(get_db),
) -> Page[EventRead]:
    """List events in log order, filtered by type, visitor, subject and time range."""
    filters = EventFilter(
        types=type,
        subject_id=subject_id,
        anonymous_id=anonymous_id,
        identified_id=identified_id,
        start=start,
        end=end,
    )
    return paginate(EventLogService(db).query_events(filters), params=params)

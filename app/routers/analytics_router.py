"""Analytics API: aggregate event counts per subject."""

from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas.event import EventCountsResponse
from app.services.event_log_service import EventLogService

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/events", response_model=EventCountsResponse)
def event_counts(
    subject_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    bucket: Literal["hour", "day"] = "day",
    db: Session = Depends(get_db),
) -> EventCountsResponse:
    """Counts of events by subject, type and hour or day bucket."""
    items = EventLogService(db).count_by_bucket(
        subject_id=subject_id, start=start, end=end, bucket=bucket
    )
    return EventCountsResponse(bucket=bucket, items=items)

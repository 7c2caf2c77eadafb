"""Scheduled actions API: operator view of automation state."""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.auth.actor import get_current_actor
from app.constants.automation import ActionStatus
from app.db import get_db
from app.models.scheduled_action import ScheduledAction
from app.routers.utils.dependencies import get_scheduled_action_by_id
from app.schemas.scheduled_action import ScheduledActionRead
from app.services.automation_scheduler import AutomationScheduler
from app.utils.recipients import normalize_recipient_id

router = APIRouter(
    prefix="/scheduled-actions",
    tags=["scheduled-actions"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=Page[ScheduledActionRead])
def list_scheduled_actions(
    status: Optional[ActionStatus] = None,
    recipient_id: Optional[str] = None,
    params: Params = Depends(),
    _actor: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Page[ScheduledActionRead]:
    """List scheduled actions by send time."""
    if recipient_id is not None:
        recipient_id = normalize_recipient_id(recipient_id)
    query = AutomationScheduler(db).list_actions_query(
        status=status, recipient_id=recipient_id
    )
    return paginate(query, params=params)


@router.get("/{action_id}", response_model=ScheduledActionRead)
def get_scheduled_action(
    action: ScheduledAction = Depends(get_scheduled_action_by_id),
    _actor: str = Depends(get_current_actor),
) -> ScheduledActionRead:
    """Get a scheduled action by ID."""
    return action

"""Suppression admin API: suppress, unsuppress and inspect recipients."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.actor import get_current_actor
from app.db import get_db
from app.schemas.suppression import (
    SuppressionEntryRead,
    SuppressionStatus,
    SuppressRequest,
    UnsuppressRequest,
)
from app.services.suppression_service import SuppressionService

router = APIRouter(
    prefix="/suppressions",
    tags=["suppressions"],
    responses={404: {"description": "Not found"}},
)


@router.post("/suppress", response_model=SuppressionEntryRead, status_code=201)
def suppress_recipient(
    data: SuppressRequest,
    actor: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> SuppressionEntryRead:
    """Add a suppression entry. Repeating an active reason returns the existing entry."""
    return SuppressionService(db).suppress(data.recipient_id, data.reason, actor=actor)


@router.post("/unsuppress", response_model=list[SuppressionEntryRead])
def unsuppress_recipient(
    data: UnsuppressRequest,
    actor: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> list[SuppressionEntryRead]:
    """
    Revoke the recipient's active entries. Returns 409 when unsubscribe,
    bounce or complaint entries exist and override is not set.
    """
    return SuppressionService(db).unsuppress(
        data.recipient_id, actor=actor, override=data.override
    )


@router.get("/{recipient_id}", response_model=SuppressionStatus)
def get_suppression_status(
    recipient_id: str,
    include_revoked: bool = True,
    _actor: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> SuppressionStatus:
    """Current status and audit trail for one recipient."""
    return SuppressionService(db).get_status(
        recipient_id, include_revoked=include_revoked
    )

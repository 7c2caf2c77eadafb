"""Identities API: operator view of a visitor's resolved identity."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.auth.actor import get_current_actor
from app.db import get_db
from app.schemas.identity import IdentityRead
from app.services.identity_service import IdentityService

router = APIRouter(
    prefix="/identities",
    tags=["identities"],
    responses={404: {"description": "Not found"}},
)


@router.get("/{anonymous_id}", response_model=IdentityRead)
def get_identity(
    anonymous_id: str,
    _actor: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> IdentityRead:
    """Identifier and preferred platform for one anonymous visitor."""
    identity = IdentityService(db).get_identity(anonymous_id)
    if identity is None:
        raise HTTPException(status_code=404, detail="Identity not found")
    return identity

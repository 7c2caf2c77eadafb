"""Decision API: which CTA to render for a profile view."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.adapters.subject_catalog import BaseSubjectCatalog, get_subject_catalog
from app.commands.decisions.decide_cta_command import DecideCtaCommand
from app.db import get_db
from app.schemas.decision import DecisionResponse

router = APIRouter(prefix="/decisions", tags=["decisions"])


@router.get("/{subject_id}", response_model=DecisionResponse)
def get_decision(
    subject_id: str,
    anonymous_id: str = Query(..., min_length=1, max_length=255),
    db: Session = Depends(get_db),
    catalog: BaseSubjectCatalog = Depends(get_subject_catalog),
) -> DecisionResponse:
    """Primary and secondary CTA for this visitor on this subject's profile."""
    return DecideCtaCommand(db, catalog).execute(subject_id, anonymous_id)

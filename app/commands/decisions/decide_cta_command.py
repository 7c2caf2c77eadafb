"""Command answering the decision query for one profile view."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.adapters.subject_catalog import BaseSubjectCatalog
from app.config import Settings, get_settings
from app.core.decision_engine import decide, identity_state
from app.models.visitor_identity import VisitorIdentity
from app.schemas.decision import DecisionResponse
from app.services.identity_service import IdentityService
from app.services.variant_assignment_service import VariantAssignmentService


class DecideCtaCommand:
    """
    Resolve the visitor, look up subject capabilities, run the decision
    engine and attach the sticky CTA copy variant. Store failures degrade to
    the anonymous decision without a variant.
    """

    def __init__(
        self,
        db: Session,
        catalog: BaseSubjectCatalog,
        settings: Optional[Settings] = None,
    ) -> None:
        self.db = db
        self.catalog = catalog
        self.settings = settings or get_settings()
        self.identity_service = IdentityService(db)
        self.variant_service = VariantAssignmentService(db)
        self.logger = logging.getLogger(__name__)

    def execute(self, subject_id: str, anonymous_id: str) -> DecisionResponse:
        identity = self._resolve(anonymous_id)
        capabilities = self.catalog.get_capabilities(subject_id)
        decision = decide(identity, capabilities)
        return DecisionResponse(
            subject_id=subject_id,
            anonymous_id=anonymous_id,
            identity_state=identity_state(identity),
            primary=decision.primary,
            secondary=decision.secondary,
            no_action_available=decision.no_action_available,
            copy_variant=self._copy_variant(subject_id, anonymous_id),
        )

    def _resolve(self, anonymous_id: str) -> Optional[VisitorIdentity]:
        try:
            return self.identity_service.resolve(anonymous_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.warning("Identity lookup failed for %s: %s", anonymous_id, e)
            return None

    def _copy_variant(self, subject_id: str, anonymous_id: str) -> Optional[str]:
        variants = self.settings.cta_copy_variant_list
        if not variants:
            return None
        experiment_key = f"{self.settings.cta_experiment_prefix}:{subject_id}"
        try:
            return self.variant_service.assign(anonymous_id, experiment_key, variants)
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.warning(
                "Variant assignment failed for %s in %s: %s",
                anonymous_id,
                experiment_key,
                e,
            )
            return None

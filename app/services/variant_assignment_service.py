"""Deterministic, sticky experiment bucketing."""

from __future__ import annotations

import hashlib
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.models.variant_assignment import VariantAssignment


def bucket_variant(
    anonymous_id: str, experiment_key: str, candidate_variants: Sequence[str]
) -> str:
    """Hash (anonymous_id, experiment_key) onto the sorted candidate set."""
    candidates = sorted(set(candidate_variants))
    digest = hashlib.sha256(f"{anonymous_id}:{experiment_key}".encode("utf-8")).digest()
    return candidates[int.from_bytes(digest[:8], "big") % len(candidates)]


class VariantAssignmentService:
    """First exposure stores the bucket; later calls return it unchanged."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_assignment(
        self, anonymous_id: str, experiment_key: str
    ) -> Optional[VariantAssignment]:
        return (
            self.db.query(VariantAssignment)
            .filter(
                VariantAssignment.experiment_key == experiment_key,
                VariantAssignment.anonymous_id == anonymous_id,
            )
            .first()
        )

    def assign(
        self,
        anonymous_id: str,
        experiment_key: str,
        candidate_variants: Sequence[str],
    ) -> str:
        existing = self.get_assignment(anonymous_id, experiment_key)
        if existing is not None:
            return existing.variant_id
        if not candidate_variants:
            raise ValidationError(
                "At least one candidate variant is required",
                field="candidate_variants",
            )

        assignment = VariantAssignment(
            experiment_key=experiment_key,
            anonymous_id=anonymous_id,
            variant_id=bucket_variant(anonymous_id, experiment_key, candidate_variants),
        )
        self.db.add(assignment)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.get_assignment(anonymous_id, experiment_key)
            if existing is None:
                raise
            return existing.variant_id
        return assignment.variant_id

"""Fixtures for the suppression ledger."""

import pytest

from app.constants.suppression import SuppressionReason
from app.services.suppression_service import SuppressionService


@pytest.fixture
def recipient_id(faker):
    return faker.email().lower()


@pytest.fixture
def setup_manual_suppression(db, recipient_id):
    return SuppressionService(db).suppress(
        recipient_id, SuppressionReason.MANUAL, actor="ops@example.com"
    )


@pytest.fixture
def setup_unsubscribe_suppression(db, recipient_id):
    return SuppressionService(db).suppress(recipient_id, SuppressionReason.UNSUBSCRIBE)

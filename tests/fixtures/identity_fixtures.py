"""Fixtures for visitor identities."""

import pytest

from app.constants.identity import IdentifierKind
from app.services.identity_service import IdentityService


@pytest.fixture
def setup_anonymous_identity(db, anonymous_id):
    return IdentityService(db).resolve(anonymous_id)


@pytest.fixture
def setup_identified_identity(db, anonymous_id, faker):
    svc = IdentityService(db)
    svc.resolve(anonymous_id)
    return svc.attach_identifier(anonymous_id, faker.email(), kind=IdentifierKind.EMAIL)

import os

os.environ["ENV"] = "test"
os.environ.setdefault("AUTOMATION_DELAY_MINUTES", "7")
os.environ.setdefault("CTA_COPY_VARIANTS", "control,fan_first")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.db import Base, db_manager, get_db
from app.main import create_app
from app.routers.utils.dependencies import get_event_dispatcher

pytest_plugins = [
    "tests.fixtures.event_fixtures",
    "tests.fixtures.identity_fixtures",
    "tests.fixtures.suppression_fixtures",
    "tests.fixtures.automation_fixtures",
]


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    db_manager.bind(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db, fake_delivery):
    """Client with db override and events processed inline."""
    from app.commands.events.process_event_command import ProcessEventCommand

    app = create_app(testing=True)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_event_dispatcher():
        def process_inline(event_id):
            ProcessEventCommand(db, delivery_adapter=fake_delivery).execute(event_id)

        return process_inline

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_dispatcher] = override_get_event_dispatcher
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

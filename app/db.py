"""Database engine, session factory and FastAPI dependency."""

from __future__ import annotations

import contextlib
from typing import Iterator, Optional

from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.core.errors import TransientStoreError

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class DatabaseManager:
    """Owns the engine and session factory. Engine is created lazily."""

    def __init__(self, database_url: Optional[str] = None) -> None:
        self._database_url = database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine, autoflush=False, expire_on_commit=False
            )
        return self._session_factory

    def _create_engine(self) -> Engine:
        settings = get_settings()
        url = self._database_url or settings.database_url
        if url.startswith("sqlite"):
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(
            url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
            connect_args={"application_name": settings.app_name},
        )

    def bind(self, engine: Engine) -> None:
        """Use an externally created engine (tests)."""
        self._engine = engine
        self._session_factory = None

    @contextlib.contextmanager
    def db_session(self) -> Iterator[Session]:
        """
        Session scope for workers. Rolls back on error and translates
        connection-level failures into TransientStoreError so callers can retry.
        """
        db = self.session_factory()
        try:
            yield db
        except OperationalError as e:
            db.rollback()
            raise TransientStoreError(str(e)) from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


db_manager = DatabaseManager()


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session."""
    with db_manager.db_session() as db:
        yield db

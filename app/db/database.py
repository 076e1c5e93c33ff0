"""
==============================================================================
Database Connection Module
==============================================================================

Engine and sessions for the user, product, media and catalog tables.

    DatabaseManager (one per process)
        └── engine, built on first use from DATABASE_URL
              └── sessionmaker ──▶ get_db (one session per request)

A publish batch runs on the request's session, so every catalog write of
one batch goes through the same connection.

SQLite:
-------
- check_same_thread is off; FastAPI may resolve dependencies on a worker
  thread.
- In-memory URLs share one connection (StaticPool), otherwise each session
  would see an empty database.
- Foreign keys are switched on for every new connection.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings


# Module logger
logger = logging.getLogger(__name__)

# Declarative base shared by every ORM model
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Process-wide owner of the engine and session factory.

    Nothing connects until the engine is first used, so settings can still
    be changed after import.

    Example:
        >>> session = DatabaseManager().get_session()
        >>> session.query(CatalogEntry).count()
        0
        >>> session.close()
    """

    _instance: Optional[DatabaseManager] = None

    def __new__(cls) -> DatabaseManager:
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._engine = None
            instance._sessions = None
            cls._instance = instance
        return cls._instance

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = self._build_engine(get_settings().database_url)
        return self._engine

    @staticmethod
    def _build_engine(url: str) -> Engine:
        settings = get_settings()
        options: Dict[str, Any] = {"echo": settings.debug}

        if url.startswith("sqlite"):
            options["connect_args"] = {"check_same_thread": False}
            if settings.get_database_path() is None:
                options["poolclass"] = StaticPool

            engine = create_engine(url, **options)
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        else:
            options.update(pool_size=5, max_overflow=10, pool_recycle=1800, pool_pre_ping=True)
            engine = create_engine(url, **options)

        logger.info(f"Database engine created: {url}")
        return engine

    def get_session(self) -> Session:
        """New session; the caller closes it."""
        if self._sessions is None:
            self._sessions = sessionmaker(
                bind=self.engine,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._sessions()

    def create_tables(self) -> None:
        """Create missing tables. Existing tables are left untouched."""
        from app.db import models  # noqa: F401  (registers the models on Base)

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created/verified")

    def verify_connection(self) -> bool:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Database connection failed: {e}")
            return False
        return True

    def dispose(self) -> None:
        """Close pooled connections at shutdown."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database connection pool disposed")


def get_db() -> Generator[Session, None, None]:
    """
    Request-scoped session dependency.

    Tests replace this dependency with a session on an in-memory database.
    """
    session = DatabaseManager().get_session()
    try:
        yield session
    finally:
        session.close()

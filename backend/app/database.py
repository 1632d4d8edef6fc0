"""
Database connection and session management module.

Uses SQLAlchemy for ORM operations. Supports PostgreSQL (production/Docker)
and SQLite (local development and tests).

The connection is owned by a StudentStore object which is opened once
at application startup and disposed on shutdown. Request handlers never
touch the engine directly; they ask the store for a session.
"""

from typing import Optional
from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session

from app.errors import StoreUnavailable
from app.logging_config import get_logger, log_with_context

logger = get_logger("db")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def _engine_kwargs(database_url: str) -> dict:
    # SQLite does not support pool_size, max_overflow, or pool_pre_ping
    engine_kwargs = {"echo": False}

    if database_url.startswith("postgresql"):
        engine_kwargs.update({
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
        })
    elif database_url.startswith("sqlite"):
        # SQLite needs check_same_thread=False for FastAPI (multi-threaded)
        engine_kwargs["connect_args"] = {"check_same_thread": False}

    return engine_kwargs


def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class StudentStore:
    """
    Handle on the persistent store.

    Created from a single connection string. A store that failed to open
    (missing or unusable URL, unreachable server) stays usable as an
    object: every call to session() raises StoreUnavailable, so the
    application keeps serving and only store-backed routes fail.
    """

    def __init__(self, database_url: Optional[str]):
        self.database_url = database_url
        self.engine = None
        self._session_factory = None

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    def open(self) -> bool:
        """
        Create the engine, verify connectivity and create missing tables.

        Returns True when the store is ready. Failures are logged, not raised.
        """
        if self.engine is not None:
            return True

        if not self.database_url:
            log_with_context(logger, "ERROR",
                "DB connection error: DATABASE_URL is not set")
            return False

        engine = None
        try:
            engine = create_engine(self.database_url, **_engine_kwargs(self.database_url))
            if self.database_url.startswith("sqlite"):
                # WAL mode and foreign keys for SQLite (better concurrency)
                event.listen(engine, "connect", _set_sqlite_pragma)
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as e:
            if engine is not None:
                engine.dispose()
            log_with_context(logger, "ERROR",
                "DB connection error: {}".format(str(e)),
                extra_data={"error_type": type(e).__name__},
                exc_info=True)
            return False

        self.engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        log_with_context(logger, "INFO", "Database connection established",
                         extra_data={"dialect": engine.dialect.name})
        return True

    def close(self):
        """Dispose of the connection pool. Safe to call on an unopened store."""
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self._session_factory = None
        log_with_context(logger, "INFO", "Database connection closed")

    def session(self) -> Session:
        """Return a new session; the caller is responsible for closing it."""
        if self._session_factory is None:
            raise StoreUnavailable("Database connection is not established")
        return self._session_factory()

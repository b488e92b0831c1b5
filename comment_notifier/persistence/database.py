"""Database connection and session management for the delivery log."""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from comment_notifier.logging import get_logger

from .exceptions import DatabaseConnectionError

_engine: Engine | None = None
_session_factory: sessionmaker | None = None

logger = get_logger(__name__, component="database")


def init_database(database_url: str) -> None:
    """Initialize the database connection and create the schema if needed.

    Call once at startup, before any mail listener writes delivery records.

    Args:
        database_url: Database connection URL (e.g. "sqlite:///./data/comment_notifier.db")

    Raises:
        DatabaseConnectionError: If database initialization fails
    """
    global _engine, _session_factory

    try:
        if not database_url or not isinstance(database_url, str):
            raise DatabaseConnectionError("Database URL must be a non-empty string")

        logger.info(
            "Initializing database",
            extra={
                "event": "database.initializing",
                "database_url": _redact_url(database_url),
            },
        )

        in_memory = database_url.startswith("sqlite") and database_url.endswith(":memory:")

        if database_url.startswith("sqlite:///") and not in_memory:
            db_file = Path(database_url.replace("sqlite:///", ""))
            if not db_file.parent.exists():
                logger.info(f"Creating database directory: {db_file.parent}")
                db_file.parent.mkdir(parents=True, exist_ok=True)

        engine_kwargs = {"echo": False, "pool_pre_ping": True, "future": True}
        if database_url.startswith("sqlite"):
            # Delivery jobs write from scheduler threads
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if in_memory:
                # One shared connection, otherwise every thread sees its own empty database
                engine_kwargs["poolclass"] = StaticPool

        _engine = create_engine(database_url, **engine_kwargs)

        if database_url.startswith("sqlite"):
            _configure_sqlite(_engine, in_memory)

        _validate_connection(_engine)

        _session_factory = sessionmaker(
            bind=_engine,
            autocommit=False,
            autoflush=True,
            expire_on_commit=False,
            future=True,
        )

        from .schema import create_schema

        create_schema(_engine)

        logger.info(
            "Database initialized successfully",
            extra={
                "event": "database.initialised",
                "database_url": _redact_url(database_url),
            },
        )

    except DatabaseConnectionError:
        raise
    except Exception as e:
        error_msg = f"Failed to initialize database: {e}"
        logger.error(error_msg, exc_info=True)
        raise DatabaseConnectionError(error_msg) from e


def _configure_sqlite(engine: Engine, in_memory: bool) -> None:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def _validate_connection(engine: Engine) -> None:
    """Run a trivial query to prove the connection works.

    Raises:
        DatabaseConnectionError: If connection test fails
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.debug("Database connection validated successfully")
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to validate database connection: {e}") from e


def _redact_url(url: str) -> str:
    """Hide the password of a database URL before logging it."""
    if url.startswith("sqlite"):
        return url

    if "@" in url and ":" in url:
        parts = url.split("@")
        if len(parts) == 2:
            prefix = parts[0].rsplit(":", 1)[0]
            return f"{prefix}:***@{parts[1]}"

    return url


def is_initialized() -> bool:
    return _session_factory is not None


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Provide a session that commits on success and rolls back on error.

    Raises:
        DatabaseConnectionError: If database not initialized

    Example:
        >>> with get_session() as session:
        ...     repo = MailStatusRepository(session)
        ...     repo.get("batch-1:0")
    """
    if _session_factory is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_session()"
        )

    session = _session_factory()
    try:
        yield session
        session.commit()
        logger.debug(
            "Database session committed",
            extra={"event": "database.session.committed"},
        )
    except Exception as e:
        session.rollback()
        logger.warning(
            f"Database session rolled back due to exception: {e}",
            extra={
                "event": "database.session.rolled_back",
                "error_type": type(e).__name__,
            },
        )
        raise
    finally:
        session.close()


def get_engine() -> Engine:
    """Return the database engine.

    Raises:
        DatabaseConnectionError: If database not initialized
    """
    if _engine is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_engine()"
        )

    return _engine


def close_database() -> None:
    """Dispose of database connections (call during shutdown)."""
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing database connections")
        _engine.dispose()
        _engine = None
        _session_factory = None

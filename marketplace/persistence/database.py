"""Database engine and session lifecycle.

Call init_database() once at startup, then open units of work with
get_session(). The module keeps one engine and one session factory.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.logging import get_logger

from .exceptions import DatabaseConnectionError

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None

logger = get_logger(__name__, component="database")

_SQLITE_PREFIX = "sqlite:///"


def init_database(database_url: str) -> None:
    """Create the engine, verify connectivity and create missing tables.

    Args:
        database_url: SQLAlchemy URL, e.g. "sqlite:///./data/marketplace.db"

    Raises:
        DatabaseConnectionError: If the URL is empty or the database is unreachable
    """
    global _engine, _session_factory

    if not database_url or not isinstance(database_url, str):
        raise DatabaseConnectionError("Database URL must be a non-empty string")

    logger.info(
        "Initializing database",
        extra={"event": "database.initializing", "database_url": redact_url(database_url)},
    )

    try:
        is_sqlite = database_url.startswith("sqlite")
        in_memory = database_url.endswith(":memory:")

        if database_url.startswith(_SQLITE_PREFIX) and not in_memory:
            db_file = Path(database_url[len(_SQLITE_PREFIX):])
            if not db_file.parent.exists():
                logger.info(f"Creating database directory: {db_file.parent}")
                db_file.parent.mkdir(parents=True, exist_ok=True)

        engine_kwargs = {"pool_pre_ping": True}
        if is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if in_memory:
                # every session must see the same in-memory database
                engine_kwargs["poolclass"] = StaticPool

        engine = create_engine(database_url, **engine_kwargs)

        if is_sqlite:
            _enable_sqlite_foreign_keys(engine)

        _validate_connection(engine)

        from .schema import create_schema

        create_schema(engine)

        _engine = engine
        _session_factory = sessionmaker(
            bind=engine,
            autoflush=True,
            expire_on_commit=False,
        )

        logger.info(
            "Database initialized successfully",
            extra={"event": "database.initialised", "database_url": redact_url(database_url)},
        )

    except DatabaseConnectionError:
        raise
    except Exception as e:
        error_msg = f"Failed to initialize database: {e}"
        logger.error(error_msg, exc_info=True)
        raise DatabaseConnectionError(error_msg) from e


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _validate_connection(engine: Engine) -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.debug("Database connection validated successfully")
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to validate database connection: {e}") from e


def redact_url(url: str) -> str:
    """Hide the password of a database URL for logging.

    Example:
        >>> redact_url("postgresql://app:secret@db:5432/marketplace")
        'postgresql://app:***@db:5432/marketplace'
    """
    if url.startswith("sqlite") or "@" not in url:
        return url

    credentials, _, host = url.rpartition("@")
    scheme, sep, userinfo = credentials.partition("://")
    if not sep or ":" not in userinfo:
        return url

    username = userinfo.split(":", 1)[0]
    return f"{scheme}://{username}:***@{host}"


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error.

    Raises:
        DatabaseConnectionError: If init_database() has not been called

    Example:
        >>> with get_session() as session:
        ...     user = UserRepository(session).get_active_by_email("ana@example.com")
    """
    if _session_factory is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_session()"
        )

    session = _session_factory()
    try:
        yield session
        session.commit()
        logger.debug("Database session committed", extra={"event": "database.session.committed"})
    except Exception as e:
        session.rollback()
        logger.warning(
            f"Database session rolled back due to exception: {e}",
            extra={"event": "database.session.rolled_back", "error_type": type(e).__name__},
        )
        raise
    finally:
        session.close()


def get_engine() -> Engine:
    """Return the initialized engine.

    Raises:
        DatabaseConnectionError: If init_database() has not been called
    """
    if _engine is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_engine()"
        )
    return _engine


def close_database() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing database connections", extra={"event": "database.closing"})
        _engine.dispose()
        _engine = None
        _session_factory = None

"""SQLAlchemy database setup for Time Tracking."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, cast

from sqlalchemy import DateTime, Engine, create_engine, event
from sqlalchemy.dialects import sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.types import TypeDecorator

from timetrack.exc import StorageError
from timetrack.utils import to_utc

if TYPE_CHECKING:
    import sqlite3
    from collections.abc import Iterator
    from datetime import datetime

    from sqlalchemy.engine import Dialect
    from sqlalchemy.types import TypeEngine

logger = logging.getLogger(__name__)

#: The application directory name.
APP_DIR_NAME: Final[str] = "Time Tracking"
#: The default database name.
DEFAULT_DB_NAME: Final[str] = "time-tracking.db"
#: How timestamps are written to SQLite: UTC, whole seconds.
SQLITE_DATETIME_FORMAT: Final[str] = (
    "%(year)04d-%(month)02d-%(day)02d %(hour)02d:%(minute)02d:%(second)02d"
)
#: How timestamps are read back from SQLite.
SQLITE_DATETIME_REGEXP: Final[str] = r"(\d+)-(\d+)-(\d+) (\d+):(\d+):(\d+)"


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""


class UTCDateTime(TypeDecorator):
    """
    A timestamp column that always holds UTC at whole-second precision.

    Values are converted to UTC and truncated to seconds on the way in, and
    come back out as timezone-aware UTC datetimes.  On SQLite the text form
    is ``YYYY-MM-DD HH:MM:SS``, so string ordering matches time ordering.
    """

    impl = DateTime
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        if dialect.name == "sqlite":
            return dialect.type_descriptor(
                sqlite.DATETIME(
                    storage_format=SQLITE_DATETIME_FORMAT,
                    regexp=SQLITE_DATETIME_REGEXP,
                )
            )
        return dialect.type_descriptor(DateTime())

    def process_bind_param(
        self, value: datetime | None, dialect: Dialect
    ) -> datetime | None:
        if value is None:
            return None
        # Stored naive; the column itself is the UTC contract
        return to_utc(value).replace(tzinfo=None)

    def process_result_value(
        self, value: datetime | None, dialect: Dialect
    ) -> datetime | None:
        if value is None:
            return None
        return to_utc(value)


def get_db_path() -> Path:
    """
    Get the path to the time tracking database.

    - On Windows, the database is created in the user's
        ``AppData/Local/Time Tracking`` directory.
    - On macOS, the database is created in the user's
        ``~/Library/Application Support/Time Tracking`` directory.
    - On Linux, the database is created in the user's
        ``~/.local/share/Time Tracking`` directory.
    - If the platform is not supported, raise a ValueError.

    The same location is used on every start, which is what lets a running
    timer survive a restart.

    Returns:
        Path to the database file

    """
    if sys.platform not in ["win32", "darwin", "linux"]:
        msg = f"Unsupported platform: {sys.platform}"
        raise ValueError(msg)
    if sys.platform == "win32":
        db_dir = Path.home() / "AppData" / "Local" / APP_DIR_NAME
    elif sys.platform == "darwin":
        db_dir = Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    else:
        db_dir = Path.home() / ".local" / "share" / APP_DIR_NAME
    db_dir.mkdir(parents=True, exist_ok=True)
    return db_dir / DEFAULT_DB_NAME


def create_engine_with_path(db_path: Path | None = None) -> Engine:
    """
    Create SQLAlchemy engine with proper SQLite settings.

    Args:
        db_path: Optional path to database file. If None, uses default path.

    Returns:
        SQLAlchemy engine

    """
    if db_path is None:
        db_path = get_db_path()

    # Create the file if it doesn't exist
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db_path.touch(exist_ok=True)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    # Foreign keys must be on for entries to detach from deleted projects
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(
        dbapi_conn: sqlite3.Connection | Any, _connection_record: Any
    ) -> None:
        """Set SQLite pragmas on connection."""
        cursor = cast("sqlite3.Cursor", dbapi_conn.cursor())
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def init_db(engine: Engine) -> None:
    """
    Create the ``projects`` and ``time_entries`` tables if they are missing.

    Safe to call on every startup.

    Args:
        engine: SQLAlchemy engine

    """
    # Importing the models registers their tables on Base.metadata
    import timetrack.models  # noqa: F401, PLC0415

    Base.metadata.create_all(engine)


#: Session factory; bound to an engine by :func:`open_database`.
SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)


def open_database(db_path: Path | None = None) -> Session:
    """
    Open (creating if necessary) the database and return a session on it.

    Args:
        db_path: Optional path to database file. If None, uses default path.

    Raises:
        StorageError: the database could not be opened or initialized

    Returns:
        SQLAlchemy session

    """
    try:
        engine = create_engine_with_path(db_path)
        init_db(engine)
    except (SQLAlchemyError, OSError) as e:
        raise StorageError(e) from e
    SessionLocal.configure(bind=engine)
    logger.info(f"Opened database {engine.url.database}")
    return SessionLocal()


@contextmanager
def storage_errors(session: Session) -> Iterator[Session]:
    """
    Translate SQLAlchemy failures into :class:`~timetrack.exc.StorageError`.

    The session is rolled back before the error is raised so it stays usable
    for the next operation.

    Args:
        session: SQLAlchemy session

    Raises:
        StorageError: any database error raised inside the block

    Yields:
        The same session

    """
    try:
        yield session
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(e) from e

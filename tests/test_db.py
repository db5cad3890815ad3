"""Unit tests for database setup."""

import sys
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError

from timetrack.db import (
    APP_DIR_NAME,
    DEFAULT_DB_NAME,
    Base,
    create_engine_with_path,
    get_db_path,
    init_db,
    open_database,
    storage_errors,
)
from timetrack.exc import StorageError
from timetrack.models.time_entry import TimeEntry


class TestBase:
    """Test cases for Base declarative base."""

    def test_base_has_metadata(self):
        """Test Base has metadata attribute."""
        assert hasattr(Base, "metadata")
        assert Base.metadata is not None


class TestGetDbPath:
    """Test cases for get_db_path()."""

    @pytest.fixture(autouse=True)
    def fake_home(self, monkeypatch, tmp_path):
        """Point the home directory at a temporary directory."""
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        return tmp_path

    def test_returns_path_on_darwin(self, monkeypatch, fake_home):
        """Test returns correct path on macOS."""
        monkeypatch.setattr(sys, "platform", "darwin")
        db_path = get_db_path()
        assert db_path == (
            fake_home / "Library" / "Application Support" / APP_DIR_NAME / DEFAULT_DB_NAME
        )

    def test_returns_path_on_windows(self, monkeypatch, fake_home):
        """Test returns correct path on Windows."""
        monkeypatch.setattr(sys, "platform", "win32")
        db_path = get_db_path()
        assert db_path == fake_home / "AppData" / "Local" / APP_DIR_NAME / DEFAULT_DB_NAME

    def test_returns_path_on_linux(self, monkeypatch, fake_home):
        """Test returns correct path on Linux."""
        monkeypatch.setattr(sys, "platform", "linux")
        db_path = get_db_path()
        assert db_path == fake_home / ".local" / "share" / APP_DIR_NAME / DEFAULT_DB_NAME

    def test_creates_directory(self, monkeypatch):
        """Test creates the parent directory."""
        monkeypatch.setattr(sys, "platform", "linux")
        assert get_db_path().parent.is_dir()

    def test_raises_on_unsupported_platform(self, monkeypatch):
        """Test raises ValueError on unsupported platform."""
        monkeypatch.setattr(sys, "platform", "sunos5")
        with pytest.raises(ValueError, match="Unsupported platform"):
            get_db_path()


class TestCreateEngineWithPath:
    """Test cases for create_engine_with_path()."""

    def test_creates_file_and_parents(self, tmp_path):
        """Test creates the database file and missing directories."""
        db_path = tmp_path / "nested" / "dir" / "test.db"
        engine = create_engine_with_path(db_path)
        try:
            assert db_path.exists()
            assert str(db_path) in str(engine.url)
        finally:
            engine.dispose()

    def test_enables_foreign_keys(self, tmp_path):
        """Test every connection has foreign keys switched on."""
        engine = create_engine_with_path(tmp_path / "test.db")
        try:
            with engine.connect() as conn:
                assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        finally:
            engine.dispose()


class TestInitDb:
    """Test cases for init_db()."""

    def test_creates_tables(self, engine):
        """Test creates both tables."""
        tables = inspect(engine).get_table_names()
        assert "projects" in tables
        assert "time_entries" in tables

    def test_is_idempotent(self, engine, db_session):
        """Test running it again keeps existing data."""
        TimeEntry.create(db_session, None, "kept", datetime(2024, 1, 15, tzinfo=UTC))
        init_db(engine)
        assert len(TimeEntry.for_date(db_session, datetime(2024, 1, 15).date())) == 1


class TestOpenDatabase:
    """Test cases for open_database()."""

    def test_returns_usable_session(self, tmp_path):
        """Test the session can read the new schema."""
        session = open_database(tmp_path / "test.db")
        try:
            assert TimeEntry.get_running(session) is None
        finally:
            session.close()

    def test_unopenable_path_raises_storage_error(self, tmp_path):
        """Test a path below a regular file cannot be opened."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        with pytest.raises(StorageError):
            open_database(blocker / "test.db")


class TestUTCDateTime:
    """Test cases for the UTC timestamp column type."""

    def test_stored_as_text_utc_seconds(self, db_session):
        """Test timestamps are stored as ``YYYY-MM-DD HH:MM:SS`` in UTC."""
        plus_one = timezone(timedelta(hours=1))
        entry = TimeEntry.create(
            db_session, None, "", datetime(2024, 1, 15, 10, 30, 15, tzinfo=plus_one)
        )
        raw = db_session.execute(
            text("SELECT start_time FROM time_entries WHERE id = :id"),
            {"id": entry.id},
        ).scalar()
        assert raw == "2024-01-15 09:30:15"

    def test_reads_back_aware_utc(self, db_session):
        """Test values come back timezone-aware and truncated."""
        entry = TimeEntry.create(
            db_session, None, "", datetime(2024, 1, 15, 9, 0, 0, 654321, tzinfo=UTC)
        )
        db_session.expire_all()
        loaded = TimeEntry.get(db_session, entry.id)
        assert loaded.start_time == datetime(2024, 1, 15, 9, 0, 0, tzinfo=UTC)
        assert loaded.start_time.tzinfo is not None

    def test_null_stays_null(self, db_session):
        """Test a missing end time reads back as None."""
        entry = TimeEntry.create(db_session, None, "", datetime(2024, 1, 15, tzinfo=UTC))
        db_session.expire_all()
        assert TimeEntry.get(db_session, entry.id).end_time is None


class TestStorageErrors:
    """Test cases for storage_errors()."""

    def test_translates_sqlalchemy_errors(self, db_session):
        """Test SQLAlchemy errors become StorageError."""
        original = OperationalError("SELECT 1", {}, Exception("database is locked"))
        with pytest.raises(StorageError) as exc_info:
            with storage_errors(db_session):
                raise original
        assert exc_info.value.error is original

    def test_leaves_other_errors_alone(self, db_session):
        """Test non-database errors pass through."""
        with pytest.raises(KeyError):
            with storage_errors(db_session):
                raise KeyError("x")

    def test_session_usable_after_error(self, db_session):
        """Test the session is rolled back and can be used again."""
        with pytest.raises(StorageError):
            with storage_errors(db_session):
                db_session.execute(text("SELECT * FROM no_such_table"))
        assert TimeEntry.get_running(db_session) is None

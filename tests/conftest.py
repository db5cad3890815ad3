"""Shared pytest fixtures and test helpers for Time Tracking tests."""

import os
from datetime import UTC, datetime, timedelta

# Qt must not need a display in tests
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QCoreApplication, QSettings
from PySide6.QtWidgets import QApplication
from sqlalchemy.orm import sessionmaker

from timetrack.db import create_engine_with_path, init_db
from timetrack.models.project import Project
from timetrack.models.time_entry import TimeEntry
from timetrack.services.timer import TimerService


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="session")
def qapp(tmp_path_factory):
    """Create QApplication instance for testing PySide6 widgets."""
    # Keep QSettings out of the real user's configuration
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)
    QSettings.setPath(
        QSettings.Format.IniFormat,
        QSettings.Scope.UserScope,
        str(tmp_path_factory.mktemp("settings")),
    )
    QCoreApplication.setOrganizationName("Time Tracking Tests")
    QCoreApplication.setApplicationName("Time Tracking Tests")
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def clean_settings(qapp):
    """Start and end with empty QSettings."""
    QSettings().clear()
    yield
    QSettings().clear()


@pytest.fixture
def db_path(tmp_path):
    """Path for a fresh database file."""
    return tmp_path / "time-tracking.db"


@pytest.fixture
def engine(db_path):
    """Engine on a fresh database, with the schema created."""
    engine = create_engine_with_path(db_path)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Create a temporary database and session for testing."""
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = SessionLocal()

    yield session

    session.close()


@pytest.fixture
def clock():
    """A controllable UTC clock starting at 2024-01-15 09:00:00."""
    return FakeClock(datetime(2024, 1, 15, 9, 0, 0, tzinfo=UTC))


@pytest.fixture
def timer(db_session, clock):
    """A timer service on the test database and clock."""
    return TimerService(db_session, clock=clock)


# Test helper functions (not fixtures, but available for import)


def create_test_project(session, name="Work", color="#3498db"):
    """
    Helper to create a project with defaults.

    Args:
        session: SQLAlchemy session
        name: Project name
        color: Project color

    Returns:
        Created Project instance
    """
    return Project.create(session, name, color)


def create_test_entry(
    session,
    start_time,
    duration=None,
    project_id=None,
    description="",
):
    """
    Helper to create an entry, stopped after ``duration`` seconds if given.

    Args:
        session: SQLAlchemy session
        start_time: Start time
        duration: Seconds until the entry stops; None leaves it running
        project_id: Project ID
        description: Entry description

    Returns:
        Created TimeEntry instance
    """
    entry = TimeEntry.create(session, project_id, description, start_time)
    if duration is not None:
        TimeEntry.stop(session, entry.id, start_time + timedelta(seconds=duration))
    return entry

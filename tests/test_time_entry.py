"""Unit tests for TimeEntry model."""

from datetime import UTC, date, datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from timetrack.exc import StorageError
from timetrack.models.time_entry import TimeEntry

from tests.conftest import create_test_entry, create_test_project

T0 = datetime(2024, 1, 15, 9, 0, 0, tzinfo=UTC)


class TestTimeEntryCreate:
    """Test cases for TimeEntry.create()."""

    def test_creates_running_entry(self, db_session):
        """Test a new entry has no end time."""
        entry = TimeEntry.create(db_session, None, "Writing", T0)

        assert entry.id is not None
        assert entry.description == "Writing"
        assert entry.project_id is None
        assert entry.start_time == T0
        assert entry.end_time is None
        assert entry.is_running

    def test_with_project(self, db_session):
        """Test an entry can reference a project."""
        project = create_test_project(db_session)
        entry = TimeEntry.create(db_session, project.id, "", T0)
        assert entry.project_id == project.id

    def test_empty_description(self, db_session):
        """Test an empty description is allowed."""
        assert TimeEntry.create(db_session, None, "", T0).description == ""

    def test_start_time_truncated_to_seconds(self, db_session):
        """Test the start time keeps whole seconds only."""
        entry = TimeEntry.create(db_session, None, "", T0.replace(microsecond=750000))
        assert entry.start_time == T0

    def test_storage_failure(self, db_session):
        """Test a failed write raises StorageError and leaves nothing behind."""
        with (
            patch(
                "sqlalchemy.orm.Session.commit",
                side_effect=OperationalError("COMMIT", {}, Exception("disk full")),
            ),
            pytest.raises(StorageError),
        ):
            TimeEntry.create(db_session, None, "", T0)
        assert TimeEntry.get_running(db_session) is None


class TestTimeEntryStop:
    """Test cases for TimeEntry.stop()."""

    def test_sets_end_time(self, db_session):
        """Test stop() records the end time."""
        entry = TimeEntry.create(db_session, None, "", T0)
        TimeEntry.stop(db_session, entry.id, T0 + timedelta(minutes=30))

        db_session.expire_all()
        stopped = TimeEntry.get(db_session, entry.id)
        assert stopped.end_time == T0 + timedelta(minutes=30)
        assert not stopped.is_running

    def test_nonexistent_is_noop(self, db_session):
        """Test stopping an unknown entry changes nothing."""
        entry = TimeEntry.create(db_session, None, "", T0)
        TimeEntry.stop(db_session, 99999, T0 + timedelta(minutes=1))
        assert TimeEntry.get_running(db_session).id == entry.id


class TestTimeEntryDelete:
    """Test cases for TimeEntry.delete()."""

    def test_removes_entry(self, db_session):
        """Test delete() removes the entry."""
        entry = create_test_entry(db_session, T0, duration=60)
        TimeEntry.delete(db_session, entry.id)
        assert TimeEntry.get(db_session, entry.id) is None

    def test_nonexistent_is_noop(self, db_session):
        """Test deleting an unknown entry changes nothing."""
        create_test_entry(db_session, T0, duration=60)
        TimeEntry.delete(db_session, 99999)
        assert len(TimeEntry.for_date(db_session, T0.date())) == 1


class TestTimeEntryGetRunning:
    """Test cases for TimeEntry.get_running()."""

    def test_none_when_all_stopped(self, db_session):
        """Test returns None when no entry is open."""
        create_test_entry(db_session, T0, duration=60)
        assert TimeEntry.get_running(db_session) is None

    def test_returns_open_entry(self, db_session):
        """Test returns the open entry."""
        create_test_entry(db_session, T0, duration=60)
        running = create_test_entry(db_session, T0 + timedelta(hours=1))
        assert TimeEntry.get_running(db_session).id == running.id

    def test_latest_start_wins(self, db_session):
        """Test with several open entries the latest start wins, not the newest row."""
        later = create_test_entry(db_session, T0 + timedelta(hours=2), description="later")
        create_test_entry(db_session, T0, description="earlier")
        assert TimeEntry.get_running(db_session).id == later.id

    def test_same_start_highest_id_wins(self, db_session):
        """Test equal start times fall back to the highest ID."""
        create_test_entry(db_session, T0)
        second = create_test_entry(db_session, T0)
        assert TimeEntry.get_running(db_session).id == second.id

    def test_reads_committed_state_from_new_session(self, engine, db_session):
        """Test a fresh session sees the open entry."""
        entry = create_test_entry(db_session, T0, description="survives")
        with Session(engine) as other:
            running = TimeEntry.get_running(other)
            assert running.id == entry.id
            assert running.description == "survives"
            assert running.start_time == T0


class TestTimeEntryQueries:
    """Test cases for the date and range queries."""

    def test_for_date_uses_utc_day(self, db_session):
        """Test for_date() buckets by the stored UTC date."""
        late = create_test_entry(
            db_session, datetime(2024, 1, 15, 23, 59, 59, tzinfo=UTC), duration=1
        )
        create_test_entry(
            db_session, datetime(2024, 1, 16, 0, 0, 0, tzinfo=UTC), duration=1
        )
        assert [e.id for e in TimeEntry.for_date(db_session, date(2024, 1, 15))] == [
            late.id
        ]

    def test_for_date_newest_first(self, db_session):
        """Test entries come back newest first."""
        first = create_test_entry(db_session, T0, duration=60)
        second = create_test_entry(db_session, T0 + timedelta(hours=1), duration=60)
        result = TimeEntry.for_date(db_session, T0.date())
        assert [e.id for e in result] == [second.id, first.id]

    def test_for_date_empty(self, db_session):
        """Test a day with no entries gives an empty list."""
        assert TimeEntry.for_date(db_session, date(2024, 1, 15)) == []

    def test_for_range_inclusive(self, db_session):
        """Test for_range() includes both end days."""
        monday = create_test_entry(db_session, datetime(2024, 1, 15, tzinfo=UTC))
        sunday = create_test_entry(
            db_session, datetime(2024, 1, 21, 23, 0, 0, tzinfo=UTC)
        )
        create_test_entry(db_session, datetime(2024, 1, 22, tzinfo=UTC))
        create_test_entry(db_session, datetime(2024, 1, 14, 23, 59, 59, tzinfo=UTC))

        result = TimeEntry.for_range(db_session, date(2024, 1, 15), date(2024, 1, 21))
        assert [e.id for e in result] == [sunday.id, monday.id]

    def test_for_range_includes_running(self, db_session):
        """Test open entries are part of a range."""
        running = create_test_entry(db_session, T0)
        result = TimeEntry.for_range(db_session, T0.date(), T0.date())
        assert [e.id for e in result] == [running.id]

    def test_between_half_open(self, db_session):
        """Test between() includes the start bound and excludes the end bound."""
        at_start = create_test_entry(db_session, T0)
        create_test_entry(db_session, T0 + timedelta(hours=1))
        result = TimeEntry.between(db_session, T0, T0 + timedelta(hours=1))
        assert [e.id for e in result] == [at_start.id]

    def test_between_accepts_other_zones(self, db_session):
        """Test bounds in another zone are compared as UTC instants."""
        entry = create_test_entry(db_session, T0)
        plus_nine = timezone(timedelta(hours=9))
        start = datetime(2024, 1, 15, 18, 0, 0, tzinfo=plus_nine)
        result = TimeEntry.between(db_session, start, start + timedelta(minutes=1))
        assert [e.id for e in result] == [entry.id]


class TestTimeEntryDuration:
    """Test cases for TimeEntry.duration()."""

    def test_stopped(self, db_session):
        """Test a stopped entry's duration is end minus start."""
        entry = create_test_entry(db_session, T0, duration=3600)
        assert entry.duration() == 3600

    def test_running_uses_now(self, db_session):
        """Test a running entry is measured to ``now``."""
        entry = create_test_entry(db_session, T0)
        assert entry.duration(T0 + timedelta(seconds=90)) == 90

    def test_never_negative(self):
        """Test an end before the start measures zero."""
        entry = TimeEntry(
            project_id=None,
            description="",
            start_time=T0,
            end_time=T0 - timedelta(minutes=5),
        )
        assert entry.duration() == 0

    def test_now_before_start(self):
        """Test a running entry whose start is in the future measures zero."""
        entry = TimeEntry(project_id=None, description="", start_time=T0)
        assert entry.duration(T0 - timedelta(seconds=10)) == 0

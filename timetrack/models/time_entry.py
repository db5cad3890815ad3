"""Time entry model."""

from __future__ import annotations

import builtins
from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import ForeignKey, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from timetrack.db import Base, UTCDateTime, storage_errors
from timetrack.models.project import Project
from timetrack.utils import to_utc, utcnow


class TimeEntry(Base):
    """
    Represents a single tracked interval of work.

    An entry with no ``end_time`` is *running*.  Normal use keeps at most one
    running entry, but the table does not enforce that; see
    :meth:`get_running` for how duplicates are resolved.
    """

    __tablename__ = "time_entries"

    #: The entry ID.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    #: The project ID, or None for "No Project".
    project_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )
    #: Free-text description; may be empty.
    description: Mapped[str] = mapped_column(String, nullable=False, default="")
    #: When the entry started (UTC).  Never changes after creation.
    start_time: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, index=True
    )
    #: When the entry stopped (UTC), or None while it is running.
    end_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    #: The date and time the row was created (UTC).
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )

    # Relationships
    project: Mapped[Project | None] = relationship(
        "Project", back_populates="entries"
    )

    def __repr__(self) -> str:
        return (
            f"<TimeEntry id={self.id} project_id={self.project_id} "
            f"start={self.start_time} end={self.end_time}>"
        )

    @property
    def is_running(self) -> bool:
        """True if the entry has not been stopped."""
        return self.end_time is None

    def duration(self, now: datetime | None = None) -> int:
        """
        Length of the entry in whole seconds.

        A running entry is measured up to ``now``.  The result is never
        negative, even when ``end_time`` is before ``start_time``.

        Keyword Args:
            now: The current time; defaults to :func:`~timetrack.utils.utcnow`

        Returns:
            Duration in seconds

        """
        end = self.end_time or now or utcnow()
        seconds = int((to_utc(end) - to_utc(self.start_time)).total_seconds())
        return max(seconds, 0)

    @classmethod
    def create(
        cls,
        session: Session,
        project_id: int | None,
        description: str,
        start_time: datetime,
    ) -> TimeEntry:
        """
        Create a new, running time entry.

        Args:
            session: SQLAlchemy session
            project_id: Project ID, or None
            description: Entry description
            start_time: When the entry starts

        Raises:
            StorageError: the entry could not be written

        Returns:
            The new :class:`~timetrack.models.time_entry.TimeEntry`

        """
        entry = cls(
            project_id=project_id,
            description=description,
            start_time=to_utc(start_time),
        )
        with storage_errors(session):
            session.add(entry)
            session.commit()
        return entry

    @classmethod
    def get(cls, session: Session, entry_id: int) -> TimeEntry | None:
        """
        Get a time entry by ID.
        """
        with storage_errors(session):
            return session.get(cls, entry_id)

    @classmethod
    def stop(cls, session: Session, entry_id: int, end_time: datetime) -> None:
        """
        Set ``end_time`` on an entry.  Stopping an entry that does not exist is
        a no-op.

        Args:
            session: SQLAlchemy session
            entry_id: Entry ID
            end_time: When the entry stopped

        Raises:
            StorageError: the update could not be written

        """
        with storage_errors(session):
            entry = session.get(cls, entry_id)
            if entry is None:
                return
            entry.end_time = to_utc(end_time)
            session.commit()

    @classmethod
    def delete(cls, session: Session, entry_id: int) -> None:
        """
        Delete an entry.  Deleting an entry that does not exist is a no-op.

        Raises:
            StorageError: the delete could not be written

        """
        with storage_errors(session):
            entry = session.get(cls, entry_id)
            if entry is None:
                return
            session.delete(entry)
            session.commit()

    @classmethod
    def get_running(cls, session: Session) -> TimeEntry | None:
        """
        Get the running entry.

        If more than one entry is open, the one with the latest
        ``start_time`` wins (highest ID on a tie).  The others stay open until
        they are stopped or deleted one by one.

        Args:
            session: SQLAlchemy session

        Returns:
            The running entry, or None

        """
        stmt = (
            select(cls)
            .where(cls.end_time.is_(None))
            .order_by(cls.start_time.desc(), cls.id.desc())
            .limit(1)
        )
        with storage_errors(session):
            return session.scalar(stmt)

    @classmethod
    def between(
        cls, session: Session, start: datetime, end: datetime
    ) -> builtins.list[TimeEntry]:
        """
        Get entries with ``start <= start_time < end``, newest first.

        Args:
            session: SQLAlchemy session
            start: Inclusive lower bound
            end: Exclusive upper bound

        Returns:
            List of entries

        """
        stmt = (
            select(cls)
            .where(cls.start_time >= to_utc(start), cls.start_time < to_utc(end))
            .order_by(cls.start_time.desc(), cls.id.desc())
        )
        with storage_errors(session):
            return builtins.list(session.scalars(stmt).all())

    @classmethod
    def for_range(
        cls, session: Session, start_day: date, end_day: date
    ) -> builtins.list[TimeEntry]:
        """
        Get entries whose stored (UTC) start date is between ``start_day`` and
        ``end_day``, inclusive, newest first.

        Args:
            session: SQLAlchemy session
            start_day: First day
            end_day: Last day

        Returns:
            List of entries

        """
        start = datetime.combine(start_day, time.min, tzinfo=UTC)
        end = datetime.combine(end_day + timedelta(days=1), time.min, tzinfo=UTC)
        return cls.between(session, start, end)

    @classmethod
    def for_date(cls, session: Session, day: date) -> builtins.list[TimeEntry]:
        """
        Get entries whose stored (UTC) start date is ``day``, newest first.
        """
        return cls.for_range(session, day, day)

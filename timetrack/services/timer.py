"""The running timer and its persistence-backed session state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from timetrack.exc import InvalidState, StorageError
from timetrack.models.time_entry import TimeEntry
from timetrack.utils import ZERO_DISPLAY, format_duration, to_utc, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimerStatus:
    """What secondary displays (the tray, the timer label) need to show."""

    #: Whether an entry is running.
    is_running: bool
    #: Elapsed time of the running entry as ``HH:MM:SS``.
    elapsed_display: str = ZERO_DISPLAY
    #: Description of the running entry.
    description: str = ""
    #: Project ID of the running entry.
    project_id: int | None = None


class TimerService:
    """
    Owns "the running entry" for this process and keeps it consistent with
    the database.

    All mutating methods are meant to be called from one thread, the GUI
    thread; other threads go through
    :class:`~timetrack.services.actions.ActionDispatcher`.  After every
    change, and on every :meth:`tick`, observers get a fresh
    :class:`TimerStatus`.

    Args:
        session: SQLAlchemy session

    Keyword Args:
        clock: Returns the current time; tests substitute their own

    """

    def __init__(
        self, session: Session, clock: Callable[[], datetime] = utcnow
    ) -> None:
        #: The SQLAlchemy session.
        self.session = session
        #: The clock.
        self.clock = clock
        #: The currently open entry, or None.
        self.running_entry: TimeEntry | None = None
        #: Status observers.
        self._observers: list[Callable[[TimerStatus], None]] = []

    @property
    def is_running(self) -> bool:
        """True if an entry is running."""
        return self.running_entry is not None

    def add_observer(self, callback: Callable[[TimerStatus], None]) -> None:
        """
        Register a callback that receives a :class:`TimerStatus` after every
        state change and every tick.
        """
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[TimerStatus], None]) -> None:
        """Unregister a status callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def now(self) -> datetime:
        """The current time, UTC, whole seconds."""
        return to_utc(self.clock())

    def elapsed(self, start_time: datetime) -> timedelta:
        """
        Time since ``start_time``, never negative.

        Args:
            start_time: When the entry started

        Returns:
            Elapsed time; zero if ``start_time`` is in the future

        """
        return max(self.now() - to_utc(start_time), timedelta(0))

    def elapsed_display(self) -> str:
        """The running entry's elapsed time as ``HH:MM:SS``."""
        if self.running_entry is None:
            return ZERO_DISPLAY
        elapsed = self.elapsed(self.running_entry.start_time)
        return format_duration(elapsed.total_seconds())

    def status(self) -> TimerStatus:
        """Build the current :class:`TimerStatus`."""
        if self.running_entry is None:
            return TimerStatus(is_running=False)
        return TimerStatus(
            is_running=True,
            elapsed_display=self.elapsed_display(),
            description=self.running_entry.description,
            project_id=self.running_entry.project_id,
        )

    def notify(self) -> TimerStatus:
        """Push the current status to all observers and return it."""
        status = self.status()
        for callback in list(self._observers):
            callback(status)
        return status

    def start(self, description: str = "", project_id: int | None = None) -> TimeEntry:
        """
        Start a new entry now.

        Keyword Args:
            description: Entry description
            project_id: Project ID, or None

        Raises:
            InvalidState: an entry is already running
            StorageError: the entry could not be written; nothing changed

        Returns:
            The new running entry

        """
        if self.running_entry is not None:
            logger.warning(
                f"Refusing to start: entry {self.running_entry.id} is running"
            )
            raise InvalidState("start", "a timer is already running")  # noqa: EM101
        entry = TimeEntry.create(self.session, project_id, description, self.now())
        self.running_entry = entry
        logger.info(f"Started entry {entry.id} ({description!r})")
        self.notify()
        return entry

    def stop(self) -> TimeEntry | None:
        """
        Stop the running entry now.

        The end time is never earlier than the start time, even if the clock
        went backwards.

        Raises:
            StorageError: the stop could not be written; the entry is still
                running and the stop can be retried

        Returns:
            The stopped entry, or None if nothing was running

        """
        entry = self.running_entry
        if entry is None:
            return None
        end_time = max(self.now(), to_utc(entry.start_time))
        TimeEntry.stop(self.session, entry.id, end_time)
        self.running_entry = None
        logger.info(f"Stopped entry {entry.id}")
        self.notify()
        return entry

    def toggle(
        self, description: str = "", project_id: int | None = None
    ) -> TimeEntry | None:
        """
        Stop the running entry, or start one if nothing is running.

        Keyword Args:
            description: Description for a newly started entry
            project_id: Project ID for a newly started entry

        Returns:
            The entry that was started or stopped

        """
        if self.is_running:
            return self.stop()
        return self.start(description, project_id)

    def continue_entry(self, source: TimeEntry) -> TimeEntry:
        """
        Start a new entry with the same description and project as
        ``source``, stopping the running entry first.

        If the running entry cannot be stopped, nothing is started.

        Args:
            source: The entry to continue

        Raises:
            StorageError: either the stop or the start failed

        Returns:
            The new running entry

        """
        if self.is_running:
            self.stop()
        return self.start(source.description, source.project_id)

    def delete(self, entry_id: int) -> bool:
        """
        Delete an entry, unless it is the running one.

        Args:
            entry_id: Entry ID

        Returns:
            True if the entry list should be refreshed

        """
        if self.running_entry is not None and self.running_entry.id == entry_id:
            logger.warning(f"Refusing to delete running entry {entry_id}")
            return False
        try:
            TimeEntry.delete(self.session, entry_id)
        except StorageError:
            logger.exception(f"Failed to delete entry {entry_id}")
            return False
        logger.info(f"Deleted entry {entry_id}")
        return True

    def restore_running_entry_on_startup(self) -> TimeEntry | None:
        """
        Adopt the entry left running by a previous process, if any.

        Observers are notified so the view can restore its description and
        project fields.

        Raises:
            StorageError: the database could not be read

        Returns:
            The restored entry, or None

        """
        entry = TimeEntry.get_running(self.session)
        self.running_entry = entry
        if entry is not None:
            logger.info(f"Restored running entry {entry.id} from {entry.start_time}")
        self.notify()
        return entry

    def tick(self) -> TimerStatus:
        """
        Refresh the elapsed-time display.  Called once a second.

        Returns:
            The status pushed to observers

        """
        return self.notify()

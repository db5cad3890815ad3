"""
User actions and the single entry point that runs them.

Clicks, key presses and tray menu items all become an :data:`Action` and go
through :meth:`ActionDispatcher.post`.  The dispatcher lives on the GUI
thread; posts from any other thread (the tray's, for instance) are queued
onto it by Qt, so the timer and the database session are only ever touched
from one thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, Signal, Slot

from timetrack.exc import DoesNotExist, InvalidState, StorageError
from timetrack.models.time_entry import TimeEntry

if TYPE_CHECKING:
    from collections.abc import Callable

    from timetrack.services.timer import TimerService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Start:
    """Start a new entry."""

    #: Entry description.
    description: str = ""
    #: Project ID, or None.
    project_id: int | None = None


@dataclass(frozen=True)
class Stop:
    """Stop the running entry."""


@dataclass(frozen=True)
class Toggle:
    """Stop if running; otherwise start with the current selection."""


@dataclass(frozen=True)
class Continue:
    """Start a new entry like an existing one."""

    #: The entry to copy.
    entry_id: int


@dataclass(frozen=True)
class Delete:
    """Delete an entry."""

    #: The entry to delete.
    entry_id: int


@dataclass(frozen=True)
class ShowWindow:
    """Bring the main window back."""


@dataclass(frozen=True)
class Quit:
    """Quit the application."""


Action = Start | Stop | Toggle | Continue | Delete | ShowWindow | Quit


def no_selection() -> tuple[str, int | None]:
    """Selection used when no view provides one."""
    return "", None


class ActionDispatcher(QObject):
    """
    Run :data:`Action` objects against a :class:`TimerService`.

    Args:
        timer: The timer service

    Keyword Args:
        selection: Returns the description and project ID a :class:`Toggle`
            should start with; usually the main window's inputs
        parent: Parent QObject

    """

    #: Carries posted actions to :meth:`handle` on the dispatcher's thread.
    action_posted = Signal(object)
    #: Emitted after an action changed the entry log.
    entries_changed = Signal()
    #: Emitted with a message when an action failed.
    error_occurred = Signal(str)
    #: Emitted when the main window should be shown.
    show_window_requested = Signal()
    #: Emitted when the application should quit.
    quit_requested = Signal()

    def __init__(
        self,
        timer: TimerService,
        selection: Callable[[], tuple[str, int | None]] = no_selection,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        #: The timer service.
        self.timer = timer
        #: The selection provider.
        self.selection = selection
        # Auto connection: direct on this thread, queued from any other
        self.action_posted.connect(self.handle)

    def post(self, action: Action) -> None:
        """
        Submit an action.  Safe to call from any thread.

        Args:
            action: The action to run

        """
        self.action_posted.emit(action)

    @Slot(object)
    def handle(self, action: Action) -> bool:  # noqa: PLR0911
        """
        Run an action.

        Args:
            action: The action to run

        Returns:
            True if the action changed the timer or the entry log

        """
        logger.debug(f"Handling {action!r}")
        try:
            if isinstance(action, Start):
                self.timer.start(action.description, action.project_id)
            elif isinstance(action, Stop):
                if self.timer.stop() is None:
                    return False
            elif isinstance(action, Toggle):
                description, project_id = self.selection()
                self.timer.toggle(description, project_id)
            elif isinstance(action, Continue):
                source = TimeEntry.get(self.timer.session, action.entry_id)
                if source is None:
                    raise DoesNotExist("TimeEntry", action.entry_id)  # noqa: TRY301
                self.timer.continue_entry(source)
            elif isinstance(action, Delete):
                if not self.timer.delete(action.entry_id):
                    return False
            elif isinstance(action, ShowWindow):
                self.show_window_requested.emit()
                return False
            elif isinstance(action, Quit):
                self.quit_requested.emit()
                return False
            else:
                msg = f"Unknown action: {action!r}"
                raise TypeError(msg)
        except (InvalidState, DoesNotExist) as e:
            logger.warning(str(e))
            return False
        except StorageError as e:
            logger.exception(f"{type(action).__name__} failed")
            self.error_occurred.emit(str(e))
            return False
        self.entries_changed.emit()
        return True

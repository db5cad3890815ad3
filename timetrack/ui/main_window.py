"""Main application window."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Final, cast

from PySide6.QtCore import QSettings, Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLayout,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from timetrack.exc import StorageError
from timetrack.models.project import Project
from timetrack.models.time_entry import TimeEntry
from timetrack.services.actions import Continue, Delete, Stop, Toggle
from timetrack.services.aggregation import (
    NO_PROJECT_COLOR,
    NO_PROJECT_NAME,
    breakdown_by_project,
    current_week_range,
    group_by_calendar_day,
    local_day_bounds,
    total_duration,
)
from timetrack.ui.dialogs import ProjectsDialog, ShortcutsDialog
from timetrack.ui.utils import color_bar, color_icon
from timetrack.utils import ZERO_DISPLAY, format_duration, local_timezone, to_local

if TYPE_CHECKING:
    from PySide6.QtGui import QCloseEvent
    from sqlalchemy.orm import Session

    from timetrack.services.actions import ActionDispatcher
    from timetrack.services.timer import TimerService, TimerStatus

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    Main application window: the timer controls and the Today/Week views.

    The window only reads from the database directly for its views; every
    change to the timer or the entry log is posted to the
    :class:`~timetrack.services.actions.ActionDispatcher`.

    Args:
        session: SQLAlchemy session
        timer: Timer service
        dispatcher: Action dispatcher

    """

    #: Main window size
    MAIN_WINDOW_SIZE: Final[tuple[int, int]] = (420, 640)
    #: Today view
    TODAY_VIEW: Final[str] = "today"
    #: Week view
    WEEK_VIEW: Final[str] = "week"
    #: Widest project bar in the week breakdown
    MAX_BAR_WIDTH: Final[int] = 150
    #: Narrowest project bar in the week breakdown
    MIN_BAR_WIDTH: Final[int] = 10

    def __init__(
        self, session: Session, timer: TimerService, dispatcher: ActionDispatcher
    ) -> None:
        super().__init__()
        #: SQLAlchemy session
        self.session = session
        #: Timer service
        self.timer = timer
        #: Action dispatcher
        self.dispatcher = dispatcher
        #: Projects shown in the project selector
        self.projects: list[Project] = []
        #: Whether closing the window hides it to the tray
        self.hide_to_tray = False
        #: Running state at the last status update; None before the first one
        self._was_running: bool | None = None
        settings = QSettings()
        #: Which view is showing
        self.view_mode = cast(
            "str", settings.value("view/mode", self.TODAY_VIEW, type=str)
        )
        if self.view_mode not in (self.TODAY_VIEW, self.WEEK_VIEW):
            self.view_mode = self.TODAY_VIEW

        self.build()

        self.dispatcher.selection = self.current_selection
        self.dispatcher.entries_changed.connect(self.refresh_view)
        self.dispatcher.error_occurred.connect(self.show_error)
        self.dispatcher.show_window_requested.connect(self.show_from_tray)
        self.timer.add_observer(self.update_status)
        # Seed the last-known running state
        self.update_status(self.timer.status())

    def build(self) -> None:
        """
        Build the main window.

        - Setup the main window.
        - Setup global shortcuts.
        - Load projects and the current view.

        """
        self._setup_main_window()
        self._setup_global_shortcuts()
        self.refresh_projects()
        self.refresh_view()

    def _setup_main_window(self) -> None:
        """
        Set up the main window widgets.
        """
        self.setWindowTitle("Time Tracking")
        self.resize(*self.MAIN_WINDOW_SIZE)
        geometry = QSettings().value("window/geometry")
        if geometry is not None:
            self.restoreGeometry(geometry)

        central_widget = QWidget()
        layout = QVBoxLayout(central_widget)

        # Toolbar row: projects and help
        toolbar = QHBoxLayout()
        toolbar.addStretch()
        self.projects_button = QPushButton("Projects…")
        self.projects_button.clicked.connect(self.show_projects_dialog)
        toolbar.addWidget(self.projects_button)
        self.help_button = QPushButton("?")
        self.help_button.setToolTip("Keyboard shortcuts (F1)")
        self.help_button.clicked.connect(self.show_shortcuts_dialog)
        toolbar.addWidget(self.help_button)
        layout.addLayout(toolbar)

        self.description_edit = QLineEdit()
        self.description_edit.setPlaceholderText("What are you working on?")
        self.description_edit.returnPressed.connect(
            lambda: self.dispatcher.post(Toggle())
        )
        layout.addWidget(self.description_edit)

        self.project_combo = QComboBox()
        layout.addWidget(self.project_combo)

        self.timer_label = QLabel(ZERO_DISPLAY)
        self.timer_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.timer_label.setStyleSheet("font-size: 36pt; font-family: monospace;")
        layout.addWidget(self.timer_label)

        self.start_stop_button = QPushButton("Start")
        self.start_stop_button.clicked.connect(lambda: self.dispatcher.post(Toggle()))
        layout.addWidget(self.start_stop_button)

        # Today/Week toggle
        toggle_row = QHBoxLayout()
        self.today_button = QPushButton("Today")
        self.week_button = QPushButton("Week")
        self.view_group = QButtonGroup(self)
        self.view_group.setExclusive(True)
        for button in (self.today_button, self.week_button):
            button.setCheckable(True)
            self.view_group.addButton(button)
            toggle_row.addWidget(button)
        self.today_button.setChecked(self.view_mode == self.TODAY_VIEW)
        self.week_button.setChecked(self.view_mode == self.WEEK_VIEW)
        self.today_button.clicked.connect(lambda: self.set_view_mode(self.TODAY_VIEW))
        self.week_button.clicked.connect(lambda: self.set_view_mode(self.WEEK_VIEW))
        layout.addLayout(toggle_row)

        self.summary_label = QLabel()
        self.summary_label.setStyleSheet("font-weight: bold;")
        layout.addWidget(self.summary_label)

        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(True)
        scroll_area.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        content_widget = QWidget()
        self.entries_layout = QVBoxLayout(content_widget)
        self.entries_layout.setAlignment(Qt.AlignmentFlag.AlignTop)
        scroll_area.setWidget(content_widget)
        layout.addWidget(scroll_area, stretch=1)

        self.setCentralWidget(central_widget)
        self.show_message("Ready")

    def _setup_global_shortcuts(self) -> None:
        """
        Set up global keyboard shortcuts.

        The following shortcuts are set up:
        - Ctrl+S or Space: start/stop the timer
        - Ctrl+N: focus the description field
        - Ctrl+P: open the project selector
        - Escape: stop the timer if running
        - F1: show keyboard shortcuts
        """
        toggle_shortcut = QShortcut(QKeySequence("Ctrl+S"), self)
        toggle_shortcut.activated.connect(lambda: self.dispatcher.post(Toggle()))
        space_shortcut = QShortcut(QKeySequence(Qt.Key.Key_Space), self)
        space_shortcut.activated.connect(self._space_pressed)
        focus_shortcut = QShortcut(QKeySequence("Ctrl+N"), self)
        focus_shortcut.activated.connect(self.description_edit.setFocus)
        project_shortcut = QShortcut(QKeySequence("Ctrl+P"), self)
        project_shortcut.activated.connect(self.project_combo.showPopup)
        stop_shortcut = QShortcut(QKeySequence(Qt.Key.Key_Escape), self)
        stop_shortcut.activated.connect(lambda: self.dispatcher.post(Stop()))
        help_shortcut = QShortcut(QKeySequence(Qt.Key.Key_F1), self)
        help_shortcut.activated.connect(self.show_shortcuts_dialog)

    def _space_pressed(self) -> None:
        """Space toggles the timer unless the user is typing a description."""
        if self.description_edit.hasFocus():
            return
        self.dispatcher.post(Toggle())

    # ===============================
    # Timer state
    # ===============================

    def current_selection(self) -> tuple[str, int | None]:
        """
        The description and project a newly started entry should get.
        """
        return self.description_edit.text().strip(), self.project_combo.currentData()

    def set_selected_project(self, project_id: int | None) -> None:
        """
        Select ``project_id`` in the project selector, or "No Project" if it
        is None or unknown.
        """
        index = 0 if project_id is None else self.project_combo.findData(project_id)
        self.project_combo.setCurrentIndex(max(index, 0))

    def update_status(self, status: TimerStatus) -> None:
        """
        Re-render the timer controls.  Registered as a timer observer.

        The inputs are only rewritten when the timer starts or stops, so a
        tick never clobbers what the user is typing.

        Args:
            status: Current timer status

        """
        self.timer_label.setText(status.elapsed_display)
        if status.is_running == self._was_running:
            return
        self._was_running = status.is_running
        if status.is_running:
            self.description_edit.setText(status.description)
            self.set_selected_project(status.project_id)
            self.start_stop_button.setText("Stop")
        else:
            self.description_edit.clear()
            self.project_combo.setCurrentIndex(0)
            self.start_stop_button.setText("Start")
        # Inputs are locked while a timer runs
        self.description_edit.setEnabled(not status.is_running)
        self.project_combo.setEnabled(not status.is_running)

    # ===============================
    # Projects
    # ===============================

    def refresh_projects(self) -> None:
        """
        Reload projects into the project selector, keeping the selection.
        """
        try:
            self.projects = Project.list(self.session)
        except StorageError:
            logger.exception("Failed to load projects")
            self.show_error("Could not load projects")
            return
        selected = self.project_combo.currentData()
        self.project_combo.blockSignals(True)  # noqa: FBT003
        self.project_combo.clear()
        self.project_combo.addItem(NO_PROJECT_NAME, None)
        for project in self.projects:
            self.project_combo.addItem(
                color_icon(project.color), project.name, project.id
            )
        self.project_combo.blockSignals(False)  # noqa: FBT003
        self.set_selected_project(selected)

    def lookup_project(self, project_id: int) -> Project | None:
        """Current name and color of a project, for aggregation."""
        return Project.get(self.session, project_id)

    def show_projects_dialog(self) -> None:
        """Open the project management dialog."""
        ProjectsDialog(self).execute()

    def show_shortcuts_dialog(self) -> None:
        """Open the keyboard shortcuts dialog."""
        ShortcutsDialog(self).execute()

    # ===============================
    # Entry views
    # ===============================

    def set_view_mode(self, view_mode: str) -> None:
        """
        Switch between the Today and Week views.

        Args:
            view_mode: :attr:`TODAY_VIEW` or :attr:`WEEK_VIEW`

        """
        self.view_mode = view_mode
        QSettings().setValue("view/mode", view_mode)
        self.refresh_view()

    def refresh_view(self) -> None:
        """
        Rebuild the entries list for the current view.
        """
        self._clear_layout(self.entries_layout)
        try:
            if self.view_mode == self.WEEK_VIEW:
                self._build_week_view()
            else:
                self._build_today_view()
        except StorageError:
            logger.exception("Failed to load entries")
            self.summary_label.setText("")
            self.entries_layout.addWidget(QLabel("Could not load entries"))

    def _clear_layout(self, layout: QLayout) -> None:
        """Remove and delete everything in ``layout``."""
        while layout.count():
            item = layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
            elif item.layout() is not None:
                self._clear_layout(item.layout())
                item.layout().deleteLater()

    def _today(self) -> datetime:
        return datetime.now(local_timezone())

    def _build_today_view(self) -> None:
        """
        Today's entries, newest first, with Continue and Delete buttons.
        """
        today = self._today().date()
        start, end = local_day_bounds(today, today)
        entries = TimeEntry.between(self.session, start, end)
        now = self.timer.now()
        self.summary_label.setText(
            f"Today: {format_duration(total_duration(entries, now))}"
        )
        if not entries:
            self.entries_layout.addWidget(QLabel("No entries today"))
            return
        for entry in entries:
            self.entries_layout.addWidget(self._entry_row(entry, now, actions=True))

    def _build_week_view(self) -> None:
        """
        This week's total, the per-project breakdown and the entries grouped
        by day.
        """
        monday, sunday = current_week_range(self._today().date())
        start, end = local_day_bounds(monday, sunday)
        entries = TimeEntry.between(self.session, start, end)
        now = self.timer.now()
        self.summary_label.setText(
            f"{monday:%b %d} - {sunday:%b %d, %Y}    "
            f"Total: {format_duration(total_duration(entries, now))}"
        )
        if not entries:
            self.entries_layout.addWidget(QLabel("No entries this week"))
            return

        groups = breakdown_by_project(entries, self.lookup_project, now)
        longest = max(group.duration for group in groups) or 1
        for group in groups:
            row = QHBoxLayout()
            name_label = QLabel(group.name)
            name_label.setFixedWidth(120)
            row.addWidget(name_label)
            width = max(
                int(group.duration / longest * self.MAX_BAR_WIDTH), self.MIN_BAR_WIDTH
            )
            row.addWidget(color_bar(group.color, width))
            row.addStretch()
            row.addWidget(QLabel(format_duration(group.duration)))
            self.entries_layout.addLayout(row)

        days = group_by_calendar_day(entries)
        for day in sorted(days, reverse=True):
            day_entries = days[day]
            header = QLabel(
                f"{day:%A, %b %d}    {format_duration(total_duration(day_entries, now))}"
            )
            header.setStyleSheet("font-weight: bold; margin-top: 8px;")
            self.entries_layout.addWidget(header)
            for entry in day_entries:
                self.entries_layout.addWidget(
                    self._entry_row(entry, now, actions=False)
                )

    def _entry_row(self, entry: TimeEntry, now: datetime, *, actions: bool) -> QFrame:
        """
        One entry: project color, description, time range, duration and,
        optionally, Continue and Delete buttons.
        """
        row = QFrame()
        layout = QHBoxLayout(row)
        layout.setContentsMargins(4, 2, 4, 2)

        project = (
            self.lookup_project(entry.project_id)
            if entry.project_id is not None
            else None
        )
        layout.addWidget(
            color_bar(project.color if project else NO_PROJECT_COLOR, 4, 24)
        )

        text = entry.description or "(no description)"
        if project is not None:
            text = f"{text}  ·  {project.name}"
        layout.addWidget(QLabel(text), stretch=1)

        start = to_local(entry.start_time)
        end = "now" if entry.end_time is None else f"{to_local(entry.end_time):%H:%M}"
        layout.addWidget(QLabel(f"{start:%H:%M} - {end}"))
        layout.addWidget(QLabel(format_duration(entry.duration(now))))

        if actions:
            continue_button = QPushButton("Continue")
            continue_button.clicked.connect(
                lambda _checked=False, entry_id=entry.id: self.dispatcher.post(
                    Continue(entry_id)
                )
            )
            layout.addWidget(continue_button)
            delete_button = QPushButton("Delete")
            # The running entry can't be deleted
            delete_button.setEnabled(not entry.is_running)
            delete_button.clicked.connect(
                lambda _checked=False, entry_id=entry.id: self.dispatcher.post(
                    Delete(entry_id)
                )
            )
            layout.addWidget(delete_button)
        return row

    # ===============================
    # Window
    # ===============================

    def show_message(self, message: str, duration: int = 2000) -> None:
        """
        Show a message in the status bar.

        Args:
            message: Message to show

        Keyword Args:
            duration: How long to show it, in milliseconds

        """
        self.statusBar().showMessage(message, duration)

    def show_error(self, message: str) -> None:
        """Show an error in the status bar."""
        self.show_message(f"Error: {message}", duration=5000)

    def show_from_tray(self) -> None:
        """Show, raise and focus the window."""
        self.show()
        self.raise_()
        self.activateWindow()

    def save_settings(self) -> None:
        """Persist window geometry and view mode."""
        settings = QSettings()
        settings.setValue("window/geometry", self.saveGeometry())
        settings.setValue("view/mode", self.view_mode)

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        """
        Hide to the tray instead of closing, if there is a tray.
        """
        self.save_settings()
        if self.hide_to_tray:
            self.hide()
            event.ignore()
            return
        event.accept()

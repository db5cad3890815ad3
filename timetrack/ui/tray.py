"""System tray icon."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtGui import QAction, QIcon
from PySide6.QtWidgets import QApplication, QMenu, QStyle, QSystemTrayIcon

from timetrack.services.actions import Quit, ShowWindow, Toggle

if TYPE_CHECKING:
    from PySide6.QtCore import QObject

    from timetrack.services.actions import ActionDispatcher
    from timetrack.services.timer import TimerStatus


def tooltip_text(status: TimerStatus) -> str:
    """
    Tray tooltip for a timer status.

    Args:
        status: Current timer status

    Returns:
        ``"Timer stopped"``, ``"Running: HH:MM:SS"`` or
        ``"<description>: HH:MM:SS"``

    """
    if not status.is_running:
        return "Timer stopped"
    if not status.description:
        return f"Running: {status.elapsed_display}"
    return f"{status.description}: {status.elapsed_display}"


def status_text(status: TimerStatus) -> str:
    """
    Label for the disabled status line at the top of the tray menu.
    """
    if not status.description:
        return f"Timer: {status.elapsed_display}"
    return f"{status.description}: {status.elapsed_display}"


class TrayIcon:
    """
    Tray icon mirroring the timer, with Start/Stop, Show Window and Quit.

    The tray never touches the timer directly: every menu item posts an
    action to the :class:`~timetrack.services.actions.ActionDispatcher`.

    Args:
        dispatcher: Action dispatcher

    Keyword Args:
        parent: Parent QObject for the tray icon

    """

    def __init__(
        self, dispatcher: ActionDispatcher, parent: QObject | None = None
    ) -> None:
        #: The action dispatcher.
        self.dispatcher = dispatcher
        #: The tray icon.
        self.tray = QSystemTrayIcon(parent)
        #: The context menu.
        self.menu = QMenu()
        #: Whether the icon currently shows a running timer.
        self._running = False
        self.build()

    def _icon(self, theme_name: str, fallback: QStyle.StandardPixmap) -> QIcon:
        """Theme icon, or a standard style icon where the theme has none."""
        style = QApplication.style()
        return QIcon.fromTheme(theme_name, style.standardIcon(fallback))

    def build(self) -> None:
        """
        Build the tray menu:

        - Status line (only while running)
        - Start Timer / Stop Timer
        - Show Window
        - Quit
        """
        self.status_action = QAction("", self.menu)
        self.status_action.setEnabled(False)
        self.status_action.setVisible(False)
        self.menu.addAction(self.status_action)
        self.status_separator = self.menu.addSeparator()
        self.status_separator.setVisible(False)

        self.toggle_action = QAction("Start Timer", self.menu)
        self.toggle_action.triggered.connect(lambda: self.dispatcher.post(Toggle()))
        self.menu.addAction(self.toggle_action)
        self.menu.addSeparator()

        self.show_action = QAction("Show Window", self.menu)
        self.show_action.triggered.connect(lambda: self.dispatcher.post(ShowWindow()))
        self.menu.addAction(self.show_action)
        self.menu.addSeparator()

        self.quit_action = QAction("Quit", self.menu)
        self.quit_action.triggered.connect(lambda: self.dispatcher.post(Quit()))
        self.menu.addAction(self.quit_action)

        self.tray.setContextMenu(self.menu)
        self.tray.activated.connect(self._on_activated)
        self.tray.setIcon(
            self._icon("appointment-soon", QStyle.StandardPixmap.SP_MediaPlay)
        )
        self.tray.setToolTip("Timer stopped")

    def _on_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        """A left click on the icon brings the window back."""
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self.dispatcher.post(ShowWindow())

    def update(self, status: TimerStatus) -> None:
        """
        Re-render from a timer status.  Registered as a timer observer.

        Args:
            status: Current timer status

        """
        if status.is_running:
            self.status_action.setText(status_text(status))
        if status.is_running != self._running:
            self._running = status.is_running
            self.status_action.setVisible(status.is_running)
            self.status_separator.setVisible(status.is_running)
            if status.is_running:
                self.toggle_action.setText("Stop Timer")
                self.tray.setIcon(
                    self._icon("media-record", QStyle.StandardPixmap.SP_MediaStop)
                )
            else:
                self.toggle_action.setText("Start Timer")
                self.tray.setIcon(
                    self._icon("appointment-soon", QStyle.StandardPixmap.SP_MediaPlay)
                )
        self.tray.setToolTip(tooltip_text(status))

    def show(self) -> bool:
        """
        Show the tray icon if the desktop has a tray.

        Returns:
            True if the icon is visible

        """
        if not QSystemTrayIcon.isSystemTrayAvailable():
            return False
        self.tray.setVisible(True)
        return True

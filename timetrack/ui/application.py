"""Application bootstrap: database, timer, dispatcher, window and tray."""

import logging
import sys
from pathlib import Path
from typing import Final, cast

from PySide6.QtCore import QCoreApplication, QSettings, QTimer
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication, QMessageBox

from timetrack import __version__
from timetrack.db import open_database
from timetrack.exc import StorageError
from timetrack.services.actions import ActionDispatcher
from timetrack.services.timer import TimerService

from .main_window import MainWindow
from .tray import TrayIcon

logger = logging.getLogger(__name__)

#: The name shown in menus, the tray and window titles.
APP_NAME: Final[str] = "Time Tracking"
#: How often the elapsed time is refreshed, in milliseconds.
TICK_INTERVAL_MS: Final[int] = 1000


class Application:
    """
    The running application.

    Opening the database is the one failure the application cannot live
    with: if it fails, a critical dialog is shown and the process exits.

    Keyword Args:
        db_path: Database file; defaults to the ``database/path`` setting,
            then to the per-user data directory

    """

    def __init__(self, db_path: Path | None = None) -> None:
        QCoreApplication.setOrganizationName(APP_NAME)
        QCoreApplication.setApplicationName(APP_NAME)

        app = QApplication.instance()
        if app is None:
            app = QApplication(sys.argv)
        #: The Qt application.
        self.app = cast("QApplication", app)
        self.app.setApplicationName(APP_NAME)
        self.app.setApplicationVersion(__version__)
        QGuiApplication.setApplicationDisplayName(APP_NAME)

        if db_path is None:
            configured = cast(
                "str | None", QSettings().value("database/path", None, type=str)
            )
            db_path = Path(configured) if configured else None
        try:
            #: SQLAlchemy session
            self.session = open_database(db_path)
        except StorageError as e:
            logger.critical(f"Cannot open database: {e}")
            QMessageBox.critical(None, APP_NAME, f"Cannot open the database:\n\n{e}")
            sys.exit(1)

        #: The timer service.
        self.timer = TimerService(self.session)
        #: The action dispatcher; lives on the GUI thread.
        self.dispatcher = ActionDispatcher(self.timer, parent=self.app)
        #: The main window.
        self.window = MainWindow(self.session, self.timer, self.dispatcher)
        #: The tray icon.
        self.tray = TrayIcon(self.dispatcher, parent=self.app)
        self.timer.add_observer(self.tray.update)

        if self.tray.show():
            self.window.hide_to_tray = True
            self.app.setQuitOnLastWindowClosed(False)
        self.dispatcher.quit_requested.connect(self.quit)
        self.app.aboutToQuit.connect(self.shutdown)

        try:
            self.timer.restore_running_entry_on_startup()
        except StorageError as e:
            logger.critical(f"Cannot read the running entry: {e}")
            QMessageBox.critical(None, APP_NAME, f"Cannot read the database:\n\n{e}")
            sys.exit(1)
        # Restoring may have changed today's list
        self.window.refresh_view()

        #: The one-second tick.
        self.tick_timer = QTimer(self.window)
        self.tick_timer.timeout.connect(self.timer.tick)
        self.tick_timer.start(TICK_INTERVAL_MS)

    def quit(self) -> None:
        """Quit, even if the window is hidden in the tray."""
        self.window.hide_to_tray = False
        self.app.quit()

    def shutdown(self) -> None:
        """Save settings and release the database."""
        self.tick_timer.stop()
        self.window.save_settings()
        self.session.close()
        logger.info("Shut down")

    def run(self) -> int:
        """
        Show the window and run the event loop.

        Returns:
            The exit code

        """
        self.window.show()
        return self.app.exec()

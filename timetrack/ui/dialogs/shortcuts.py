from typing import TYPE_CHECKING, Final

from PySide6.QtWidgets import QDialog, QDialogButtonBox, QLabel, QVBoxLayout

if TYPE_CHECKING:
    from timetrack.ui.main_window import MainWindow


class ShortcutsDialog:
    """
    Keyboard shortcuts help.  Opened with F1 or the "?" button.
    """

    #: Dialog width
    DIALOG_WIDTH: Final[int] = 320
    #: The shortcuts, as (keys, what they do)
    SHORTCUTS: Final[tuple[tuple[str, str], ...]] = (
        ("Ctrl+S or Space", "Start/Stop timer"),
        ("Ctrl+N", "Focus description field"),
        ("Ctrl+P", "Open project selector"),
        ("Escape", "Stop timer if running"),
        ("F1", "Show this help"),
    )

    def __init__(self, main_window: "MainWindow") -> None:
        self.main_window = main_window

    def build(self) -> None:
        """
        Build the shortcuts dialog.
        """
        self.dialog = QDialog(self.main_window)
        self.dialog.setWindowTitle("Keyboard Shortcuts")
        self.dialog.setMinimumWidth(self.DIALOG_WIDTH)
        self.layout = QVBoxLayout(self.dialog)
        rows = "".join(
            f"<tr><td><b>{keys}</b></td><td>&nbsp;&nbsp;{action}</td></tr>"
            for keys, action in self.SHORTCUTS
        )
        self.layout.addWidget(QLabel(f"<table>{rows}</table>"))
        button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        button_box.rejected.connect(self.dialog.reject)
        self.layout.addWidget(button_box)

    def execute(self) -> None:
        """
        Execute the shortcuts dialog.
        """
        self.build()
        self.dialog.exec()

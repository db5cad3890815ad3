from typing import TYPE_CHECKING, Final

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
)

from timetrack.exc import StorageError
from timetrack.models.project import Project
from timetrack.services.projects import PROJECT_COLORS, create_project, delete_project
from timetrack.ui.utils import color_icon

if TYPE_CHECKING:
    from timetrack.ui.main_window import MainWindow


class ProjectsDialog:
    """
    Project management dialog.  This gets opened when the user clicks the
    "Projects…" button.

    Lists the existing projects, lets the user add a project with a name and
    one of the preset colors, and delete the selected project.  Entries of a
    deleted project are kept and show as "No Project".  When the dialog
    closes, the main window reloads its project selector and view.

    Args:
        main_window: Main window instance

    """

    #: Dialog width
    DIALOG_WIDTH: Final[int] = 380
    #: Dialog height
    DIALOG_HEIGHT: Final[int] = 420

    def __init__(self, main_window: "MainWindow") -> None:
        """
        Initialize projects dialog.
        """
        self.main_window = main_window
        self.session = main_window.session

    def build(self) -> None:
        """
        Build the projects dialog.
        """
        self.dialog = QDialog(self.main_window)
        self.dialog.setWindowTitle("Projects")
        self.dialog.setMinimumSize(self.DIALOG_WIDTH, self.DIALOG_HEIGHT)
        self.layout = QVBoxLayout(self.dialog)

        self.projects_list = QListWidget(self.dialog)
        self.layout.addWidget(self.projects_list)

        self.delete_button = QPushButton("Delete Project")
        self.delete_button.clicked.connect(self.delete_selected)
        self.layout.addWidget(self.delete_button)

        self.layout.addWidget(QLabel("New project:"))
        add_row = QHBoxLayout()
        self.name_edit = QLineEdit(self.dialog)
        self.name_edit.setPlaceholderText("Project name")
        self.name_edit.returnPressed.connect(self.add_project)
        add_row.addWidget(self.name_edit, stretch=1)
        self.color_combo = QComboBox(self.dialog)
        for color in PROJECT_COLORS:
            self.color_combo.addItem(color_icon(color), "", color)
        add_row.addWidget(self.color_combo)
        self.add_button = QPushButton("Add")
        self.add_button.clicked.connect(self.add_project)
        add_row.addWidget(self.add_button)
        self.layout.addLayout(add_row)

        button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        button_box.rejected.connect(self.dialog.reject)
        self.layout.addWidget(button_box)
        self.dialog.finished.connect(self._on_finished)

        self.load_projects()

    def load_projects(self) -> None:
        """
        Reload the project list from the database.
        """
        self.projects_list.clear()
        try:
            projects = Project.list(self.session)
        except StorageError:
            # Keep the dialog usable; the list just stays empty
            self.main_window.show_error("Could not load projects")
            return
        for project in projects:
            item = QListWidgetItem(color_icon(project.color), project.name)
            item.setData(Qt.ItemDataRole.UserRole, project.id)
            self.projects_list.addItem(item)
        self.delete_button.setEnabled(bool(projects))

    def add_project(self) -> Project | None:
        """
        Create a project from the name field and the selected color.

        Returns:
            The new project, or None if the name was blank or the write failed

        """
        name = self.name_edit.text().strip()
        if not name:
            return None
        project = create_project(self.session, name, self.color_combo.currentData())
        if project is None:
            self.main_window.show_error(f'Could not create project "{name}"')
            return None
        self.name_edit.clear()
        # Next project gets the next preset color
        self.color_combo.setCurrentIndex(
            (self.color_combo.currentIndex() + 1) % self.color_combo.count()
        )
        self.load_projects()
        return project

    def delete_selected(self) -> bool:
        """
        Delete the selected project.

        Returns:
            True if a project was deleted

        """
        item = self.projects_list.currentItem()
        if item is None:
            return False
        project_id = item.data(Qt.ItemDataRole.UserRole)
        if not delete_project(self.session, project_id):
            self.main_window.show_error("Could not delete project")
            return False
        self.load_projects()
        return True

    def _on_finished(self, _result: int) -> None:
        """Refresh the main window with the edited projects."""
        self.main_window.refresh_projects()
        self.main_window.refresh_view()

    def execute(self) -> None:
        """
        Execute the projects dialog.
        """
        self.build()
        self.dialog.exec()

from .projects import ProjectsDialog
from .shortcuts import ShortcutsDialog

__all__ = [
    "ProjectsDialog",
    "ShortcutsDialog",
]

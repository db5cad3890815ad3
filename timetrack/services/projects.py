"""Project management with the log-and-continue failure policy."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from timetrack.exc import StorageError
from timetrack.models.project import Project

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

#: Preset colors offered when creating a project.
PROJECT_COLORS: Final[tuple[str, ...]] = (
    "#3498db",  # Blue
    "#e74c3c",  # Red
    "#2ecc71",  # Green
    "#f39c12",  # Orange
    "#9b59b6",  # Purple
    "#1abc9c",  # Teal
    "#e91e63",  # Pink
    "#607d8b",  # Blue Grey
)


def create_project(session: Session, name: str, color: str) -> Project | None:
    """
    Create a project, logging instead of raising on failure.

    Args:
        session: SQLAlchemy session
        name: Project name
        color: Display color

    Returns:
        The new project, or None if it could not be created

    """
    try:
        return Project.create(session, name, color)
    except ValueError as e:
        logger.warning(f"Not creating project: {e}")
    except StorageError:
        logger.exception(f"Failed to create project {name!r}")
    return None


def delete_project(session: Session, project_id: int) -> bool:
    """
    Delete a project, logging instead of raising on failure.

    Args:
        session: SQLAlchemy session
        project_id: Project ID

    Returns:
        True if the delete went through (or there was nothing to delete)

    """
    try:
        Project.delete(session, project_id)
    except StorageError:
        logger.exception(f"Failed to delete project {project_id}")
        return False
    return True

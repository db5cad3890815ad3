"""Project model."""

from __future__ import annotations

import builtins
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from timetrack.db import Base, UTCDateTime, storage_errors
from timetrack.utils import utcnow

if TYPE_CHECKING:
    from timetrack.models.time_entry import TimeEntry

logger = logging.getLogger(__name__)


class Project(Base):
    """
    Represents a project: a named, colored tag for time entries.

    Deleting a project never deletes its entries.  The foreign key on
    ``time_entries.project_id`` is ``ON DELETE SET NULL``, so the database
    detaches them.
    """

    __tablename__ = "projects"

    #: The project ID.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    #: The project name.
    name: Mapped[str] = mapped_column(String, nullable=False)
    #: The display color, as a hex string like ``#3498db``.
    color: Mapped[str] = mapped_column(String, nullable=False)
    #: The date and time the project was created (UTC).
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )

    # Relationships
    entries: Mapped[builtins.list[TimeEntry]] = relationship(
        "TimeEntry", back_populates="project", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Project id={self.id} name={self.name!r} color={self.color!r}>"

    @classmethod
    def create(cls, session: Session, name: str, color: str) -> Project:
        """
        Create a new project.

        Args:
            session: SQLAlchemy session
            name: Project name
            color: Display color

        Raises:
            ValueError: ``name`` is blank
            StorageError: the project could not be written

        Returns:
            The new :class:`~timetrack.models.project.Project` object

        """
        name = name.strip()
        if not name:
            msg = "Project name must not be empty"
            raise ValueError(msg)
        project = cls(name=name, color=color)
        with storage_errors(session):
            session.add(project)
            session.commit()
        logger.info(f"Created project {project.id} ({project.name})")
        return project

    @classmethod
    def get(cls, session: Session, project_id: int) -> Project | None:
        """
        Get a project by ID.

        Args:
            session: SQLAlchemy session
            project_id: Project ID

        Returns:
            The project, or None if not found

        """
        with storage_errors(session):
            return session.get(cls, project_id)

    @classmethod
    def list(cls, session: Session) -> builtins.list[Project]:
        """
        Get all projects, sorted by name.

        Args:
            session: SQLAlchemy session

        Returns:
            List of projects; empty if there are none

        """
        with storage_errors(session):
            return builtins.list(
                session.scalars(select(cls).order_by(cls.name, cls.id)).all()
            )

    @classmethod
    def delete(cls, session: Session, project_id: int) -> None:
        """
        Delete a project by ID.  Deleting a project that does not exist is a
        no-op.

        Entries that referenced the project survive with no project.

        Args:
            session: SQLAlchemy session
            project_id: Project ID

        Raises:
            StorageError: the delete could not be written

        """
        with storage_errors(session):
            project = session.get(cls, project_id)
            if project is None:
                return
            session.delete(project)
            session.commit()
        # Loaded entries still carry the old project_id; reload on next access
        session.expire_all()
        logger.info(f"Deleted project {project_id}")

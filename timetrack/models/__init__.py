"""Data models for Time Tracking."""

from timetrack.models.project import Project
from timetrack.models.time_entry import TimeEntry

__all__ = ["Project", "TimeEntry"]

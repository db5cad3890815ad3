"""
Totals and breakdowns over time entries.

Everything here is a pure function of its arguments: entries are passed in,
nothing is read from or written to the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING, Final

from timetrack.utils import local_timezone, to_local, to_utc, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import tzinfo

    from timetrack.models.project import Project
    from timetrack.models.time_entry import TimeEntry

#: Label for entries with no project.
NO_PROJECT_NAME: Final[str] = "No Project"
#: Color for entries with no project.
NO_PROJECT_COLOR: Final[str] = "#888888"


@dataclass(frozen=True)
class ProjectBreakdown:
    """Total time for one project."""

    #: The project ID, or None for "No Project".
    project_id: int | None
    #: The project name at aggregation time.
    name: str
    #: The project color at aggregation time.
    color: str
    #: Total duration in seconds.
    duration: int


def entry_duration(entry: TimeEntry, now: datetime | None = None) -> int:
    """
    Duration of one entry in seconds, measured to ``now`` if it is running.
    Never negative.
    """
    return entry.duration(now)


def total_duration(entries: Iterable[TimeEntry], now: datetime | None = None) -> int:
    """
    Sum the durations of ``entries``.

    Args:
        entries: Entries to total

    Keyword Args:
        now: End point for running entries; defaults to the current time

    Returns:
        Total duration in seconds

    """
    now = now or utcnow()
    return sum(entry_duration(entry, now) for entry in entries)


def breakdown_by_project(
    entries: Iterable[TimeEntry],
    project_lookup: Callable[[int], Project | None],
    now: datetime | None = None,
) -> list[ProjectBreakdown]:
    """
    Total time per project, largest first.

    Names and colors come from ``project_lookup`` now, not from when the
    entries were made, so renaming a project relabels its history.  Entries
    with no project, or whose project can no longer be found, are labelled
    :data:`NO_PROJECT_NAME`.  Groups with equal totals keep the order in
    which they were first seen.

    Args:
        entries: Entries to aggregate
        project_lookup: Resolves a project ID to a project, or None

    Keyword Args:
        now: End point for running entries; defaults to the current time

    Returns:
        One :class:`ProjectBreakdown` per project

    """
    now = now or utcnow()
    totals: dict[int | None, int] = {}
    for entry in entries:
        totals[entry.project_id] = totals.get(entry.project_id, 0) + entry_duration(
            entry, now
        )

    groups: list[ProjectBreakdown] = []
    for project_id, duration in totals.items():
        project = project_lookup(project_id) if project_id is not None else None
        if project is None:
            name, color = NO_PROJECT_NAME, NO_PROJECT_COLOR
        else:
            name, color = project.name, project.color
        groups.append(ProjectBreakdown(project_id, name, color, duration))
    # sorted() is stable, so ties stay in discovery order
    return sorted(groups, key=lambda group: group.duration, reverse=True)


def group_by_calendar_day(
    entries: Iterable[TimeEntry], tz: tzinfo | None = None
) -> dict[date, list[TimeEntry]]:
    """
    Partition entries by the local calendar date they started on.

    Args:
        entries: Entries to group

    Keyword Args:
        tz: Timezone that defines the calendar; defaults to the system zone

    Returns:
        Mapping of date to entries, in the order the entries were given

    """
    tz = tz or local_timezone()
    days: dict[date, list[TimeEntry]] = {}
    for entry in entries:
        day = to_local(entry.start_time, tz).date()
        days.setdefault(day, []).append(entry)
    return days


def current_week_range(today: date) -> tuple[date, date]:
    """
    The Monday-to-Sunday week containing ``today``.

    Args:
        today: Any date

    Returns:
        ``(monday, sunday)``, both inclusive

    """
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def local_day_bounds(
    start_day: date, end_day: date, tz: tzinfo | None = None
) -> tuple[datetime, datetime]:
    """
    UTC instants covering the local days ``start_day`` through ``end_day``.

    Args:
        start_day: First local day
        end_day: Last local day, inclusive

    Keyword Args:
        tz: Timezone that defines the calendar; defaults to the system zone

    Returns:
        ``(start, end)`` where ``end`` is exclusive

    """
    tz = tz or local_timezone()
    start = datetime.combine(start_day, time.min, tzinfo=tz)
    end = datetime.combine(end_day + timedelta(days=1), time.min, tzinfo=tz)
    return to_utc(start), to_utc(end)

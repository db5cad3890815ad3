"""Services package initialization."""

from timetrack.services.actions import (
    Action,
    ActionDispatcher,
    Continue,
    Delete,
    Quit,
    ShowWindow,
    Start,
    Stop,
    Toggle,
)
from timetrack.services.aggregation import (
    ProjectBreakdown,
    breakdown_by_project,
    current_week_range,
    group_by_calendar_day,
    total_duration,
)
from timetrack.services.timer import TimerService, TimerStatus

__all__ = [
    "Action",
    "ActionDispatcher",
    "Continue",
    "Delete",
    "ProjectBreakdown",
    "Quit",
    "ShowWindow",
    "Start",
    "Stop",
    "TimerService",
    "TimerStatus",
    "Toggle",
    "breakdown_by_project",
    "current_week_range",
    "group_by_calendar_day",
    "total_duration",
]

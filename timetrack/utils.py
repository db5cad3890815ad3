"""Utility functions for Time Tracking."""

from datetime import UTC, datetime, tzinfo
from typing import Final

#: What the timer shows when nothing is running.
ZERO_DISPLAY: Final[str] = "00:00:00"


def to_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime to timezone-aware UTC at whole-second precision.

    Args:
        dt: Datetime object to convert.  Naive values are assumed to already
            be UTC (that is how the database stores them).

    Returns:
        Aware UTC datetime with microseconds dropped

    """
    # If datetime is naive, assume it's already UTC
    dt = dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)
    return dt.replace(microsecond=0)


def utcnow() -> datetime:
    """
    Return the current time as aware UTC, truncated to whole seconds.
    """
    return to_utc(datetime.now(UTC))


def local_timezone() -> tzinfo:
    """
    Return the system's local timezone.
    """
    local = datetime.now().astimezone().tzinfo
    # astimezone() on a naive datetime always attaches a tzinfo
    assert local is not None  # noqa: S101
    return local


def to_local(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """
    Convert a stored UTC datetime to local time for display.

    Args:
        dt: UTC datetime (aware or naive)

    Keyword Args:
        tz: Target timezone; defaults to the system local zone

    Returns:
        Aware datetime in ``tz``

    """
    return to_utc(dt).astimezone(tz or local_timezone())


def format_duration(total_seconds: int | float) -> str:
    """
    Format a duration in seconds as ``HH:MM:SS``.

    Negative durations are shown as zero.  Hours are not wrapped at 24, so a
    week's total can read ``41:30:00``.

    Args:
        total_seconds: Duration in seconds

    Returns:
        Formatted duration string

    """
    total = max(int(total_seconds), 0)
    hours = total // 3600
    minutes = (total % 3600) // 60
    seconds = total % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

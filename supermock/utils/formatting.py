"""
Review Display Formatting.

Date, duration and status helpers shared by the review endpoints.
Empty values render as ``"-"`` everywhere.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from supermock.models.enums import ReviewStatusCategory

__all__ = [
    "format_duration",
    "format_duration_detailed",
    "format_review_date",
    "review_status_category",
]

_MONTHS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_STATUS_CATEGORIES: dict[str, ReviewStatusCategory] = {
    "completed": ReviewStatusCategory.SUCCESS,
    "in_progress": ReviewStatusCategory.ACTIVE,
    "in-progress": ReviewStatusCategory.ACTIVE,
    "pending": ReviewStatusCategory.PENDING,
}


def format_review_date(value: Union[str, datetime, None]) -> str:
    """Format a timestamp as ``"Jan 16, 2025, 02:30 PM"``.

    Accepts ISO-8601 strings (a trailing ``Z`` is understood) or
    ``datetime`` objects; the wall-clock time of the value is used as-is.
    Unparseable strings render as ``"-"``.
    """
    if not value:
        return "-"
    if isinstance(value, datetime):
        moment = value
    else:
        try:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return "-"

    hour_12 = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{_MONTHS[moment.month - 1]} {moment.day}, {moment.year}, "
        f"{hour_12:02d}:{moment.minute:02d} {meridiem}"
    )


def format_duration(seconds: Optional[int]) -> str:
    """``750`` -> ``"12 mins"``."""
    if not seconds:
        return "-"
    return f"{int(seconds) // 60} mins"


def format_duration_detailed(seconds: Optional[int]) -> str:
    """``750`` -> ``"12m 30s"``."""
    if not seconds:
        return "-"
    total = int(seconds)
    return f"{total // 60}m {total % 60}s"


def review_status_category(status: Optional[str]) -> ReviewStatusCategory:
    """Map a free-form attempt/module status onto a badge category."""
    if not status:
        return ReviewStatusCategory.NEUTRAL
    return _STATUS_CATEGORIES.get(status.lower(), ReviewStatusCategory.NEUTRAL)

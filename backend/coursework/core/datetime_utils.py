"""
Utility functions for handling timezone-aware timestamps.
All timestamps use ISO 8601 format with timezone offset: 2026-01-31T10:43:03-05:00
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Union

DateLike = Union[str, datetime]

# Days after the due date before automatic cleanup; None keeps files forever.
CLEANUP_DAYS: Dict[str, Optional[int]] = {
    "30_DAYS": 30,
    "60_DAYS": 60,
    "90_DAYS": 90,
    "SEMESTER_END": 180,
    "NEVER": None,
}


def get_now_with_timezone() -> datetime:
    """
    Get current time with timezone information.
    Returns timezone-aware datetime in local timezone.
    """
    return datetime.now(timezone.utc).astimezone()


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_iso_datetime(dt: Optional[datetime]) -> Optional[str]:
    """
    Convert datetime to ISO 8601 string with timezone offset.
    Example: 2026-01-31T10:43:03-05:00
    """
    if dt is None:
        return None

    return ensure_aware(dt).astimezone().isoformat()


def from_iso_datetime(dt_str: Optional[str]) -> Optional[datetime]:
    """
    Parse ISO 8601 string to a timezone-aware datetime.
    Accepts a trailing 'Z' and date-only strings (midnight UTC).
    """
    if dt_str is None:
        return None

    value = dt_str.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(value))


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return ensure_aware(value)
    return from_iso_datetime(value)


def minutes_between(start: DateLike, end: DateLike) -> int:
    """Whole minutes from start to end (negative when end is earlier)."""
    delta = _as_datetime(end) - _as_datetime(start)
    return int(delta.total_seconds() // 60)


def is_past(value: DateLike, now: Optional[datetime] = None) -> bool:
    """True when value lies before now."""
    now = ensure_aware(now) if now else get_now_with_timezone()
    return _as_datetime(value) < now


def due_date_status(due_date: DateLike, now: Optional[datetime] = None) -> Dict[str, object]:
    """
    Describe how far away a due date is.

    Returns is_overdue, is_due_soon (within 24 hours) and signed
    days/hours/minutes remaining (negative when overdue).
    """
    now = ensure_aware(now) if now else get_now_with_timezone()
    diff = _as_datetime(due_date) - now
    seconds = diff.total_seconds()
    is_overdue = seconds < 0
    abs_seconds = abs(seconds)

    minutes = int(abs_seconds // 60)
    hours = int(abs_seconds // 3600)
    days = int(abs_seconds // 86400)
    sign = -1 if is_overdue else 1

    return {
        "is_overdue": is_overdue,
        "is_due_soon": not is_overdue and hours < 24,
        "days_remaining": sign * days,
        "hours_remaining": sign * hours,
        "minutes_remaining": sign * minutes,
    }


def format_relative_time(value: DateLike, now: Optional[datetime] = None) -> str:
    """Format as 'Just now', '5m ago', 'in 3h', '2d ago', or a short date past a week."""
    now = ensure_aware(now) if now else get_now_with_timezone()
    target = _as_datetime(value)
    seconds = (target - now).total_seconds()
    is_past_value = seconds < 0
    minutes = int(abs(seconds) // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago" if is_past_value else f"in {minutes}m"
    if hours < 24:
        return f"{hours}h ago" if is_past_value else f"in {hours}h"
    if days < 7:
        return f"{days}d ago" if is_past_value else f"in {days}d"
    return target.strftime("%b %d, %H:%M")


def calculate_cleanup_date(due_date: DateLike, frequency: str) -> Optional[str]:
    """
    Compute when submissions or instructions become eligible for cleanup.

    Args:
        due_date: Assignment due date.
        frequency: A CleanupFrequency value such as '90_DAYS'.

    Returns:
        ISO 8601 timestamp, or None when the frequency is NEVER.
    """
    days = CLEANUP_DAYS.get(getattr(frequency, "value", frequency))
    if days is None:
        return None
    return (_as_datetime(due_date) + timedelta(days=days)).isoformat()

"""
Tests for timestamp helpers
"""

from datetime import datetime, timedelta, timezone

from coursework.core.datetime_utils import (
    calculate_cleanup_date,
    due_date_status,
    ensure_aware,
    format_relative_time,
    from_iso_datetime,
    is_past,
    minutes_between,
    to_iso_datetime,
)
from coursework.schemas import CleanupFrequency

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestParsing:
    """ISO 8601 conversion."""

    def test_trailing_z(self):
        assert from_iso_datetime("2025-01-10T08:30:00Z") == datetime(2025, 1, 10, 8, 30, tzinfo=timezone.utc)

    def test_naive_treated_as_utc(self):
        assert ensure_aware(datetime(2025, 1, 1)).tzinfo == timezone.utc
        assert from_iso_datetime("2025-01-10T08:30:00").tzinfo is not None

    def test_none(self):
        assert from_iso_datetime(None) is None
        assert to_iso_datetime(None) is None

    def test_round_trip_keeps_instant(self):
        value = datetime(2025, 1, 10, 8, 30, tzinfo=timezone.utc)
        assert from_iso_datetime(to_iso_datetime(value)) == value


class TestDueDates:
    """Due date arithmetic."""

    def test_minutes_between(self):
        assert minutes_between(NOW, NOW + timedelta(hours=2)) == 120
        assert minutes_between("2025-03-01T12:00:00Z", "2025-03-01T11:30:00Z") == -30

    def test_is_past(self):
        assert is_past(NOW - timedelta(seconds=1), NOW)
        assert not is_past(NOW + timedelta(seconds=1), NOW)

    def test_due_soon(self):
        status = due_date_status(NOW + timedelta(hours=5), NOW)
        assert status["is_due_soon"] and not status["is_overdue"]
        assert status["hours_remaining"] == 5

    def test_overdue(self):
        status = due_date_status(NOW - timedelta(days=2), NOW)
        assert status["is_overdue"]
        assert status["days_remaining"] == -2

    def test_relative_time(self):
        assert format_relative_time(NOW, NOW) == "Just now"
        assert format_relative_time(NOW - timedelta(minutes=5), NOW) == "5m ago"
        assert format_relative_time(NOW + timedelta(hours=3), NOW) == "in 3h"
        assert format_relative_time(NOW - timedelta(days=2), NOW) == "2d ago"


class TestCleanup:
    """Cleanup date calculation."""

    def test_days(self):
        result = calculate_cleanup_date(NOW, CleanupFrequency.DAYS_30)
        assert from_iso_datetime(result) == NOW + timedelta(days=30)

    def test_semester_end(self):
        result = calculate_cleanup_date(NOW, "SEMESTER_END")
        assert from_iso_datetime(result) == NOW + timedelta(days=180)

    def test_never(self):
        assert calculate_cleanup_date(NOW, CleanupFrequency.NEVER) is None

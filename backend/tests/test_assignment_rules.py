"""
Tests for assignment domain rules and display helpers
"""

from datetime import datetime, timedelta, timezone

import pytest

from coursework.schemas import AssignmentStatus, GradingStatus, StudentSubmissionStatus, Submission
from coursework.services.assignment_rules import (
    STATUS_DISPLAY,
    calculate_assignment_statistics,
    calculate_late_penalty,
    calculate_percentage,
    can_submit,
    determine_student_status,
    format_file_size,
    format_score,
    performance_level,
    status_display,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def submission(**overrides):
    data = {"id": "s", "assignment_id": "a-1", "student_id": "st-1"}
    data.update(overrides)
    return Submission(**data)


class TestCanSubmit:
    """Submission eligibility."""

    def published(self, make_assignment, **overrides):
        data = {"is_visible": True, "due_date": NOW + timedelta(days=1)}
        data.update(overrides)
        return make_assignment(status=AssignmentStatus.PUBLISHED, **data)

    def test_open_assignment(self, make_assignment):
        assert can_submit(self.published(make_assignment), now=NOW) == (True, None)

    def test_draft(self, make_assignment):
        allowed, reason = can_submit(make_assignment(), now=NOW)
        assert not allowed
        assert reason == "Assignment is not published"

    def test_hidden(self, make_assignment):
        allowed, reason = can_submit(self.published(make_assignment, is_visible=False), now=NOW)
        assert reason == "Assignment is not visible"

    def test_past_close_date(self, make_assignment):
        assignment = self.published(
            make_assignment, due_date=NOW - timedelta(days=2), close_date=NOW - timedelta(days=1)
        )
        assert can_submit(assignment, now=NOW) == (False, "Submission period has closed")

    def test_late_not_allowed(self, make_assignment):
        assignment = self.published(make_assignment, due_date=NOW - timedelta(hours=1))
        allowed, _ = can_submit(assignment, now=NOW)
        assert not allowed

    def test_late_allowed(self, make_assignment):
        assignment = self.published(
            make_assignment, due_date=NOW - timedelta(hours=1), allow_late_submission=True
        )
        assert can_submit(assignment, now=NOW) == (True, "Late submission allowed with penalty")

    def test_max_submissions_reached(self, make_assignment):
        existing = submission(is_final=True, attempt_number=1)
        assert can_submit(self.published(make_assignment), existing, now=NOW) == (
            False,
            "Maximum submissions reached",
        )


class TestStudentStatus:
    """determine_student_status."""

    @pytest.mark.parametrize(
        "data,expected",
        [
            (None, StudentSubmissionStatus.NOT_STARTED),
            ({"grading_status": GradingStatus.MANUAL_GRADED}, StudentSubmissionStatus.GRADED),
            ({"grading_status": GradingStatus.AUTO_GRADED, "is_late": True}, StudentSubmissionStatus.GRADED),
            ({"is_late": True, "is_final": True}, StudentSubmissionStatus.LATE),
            ({"is_final": True}, StudentSubmissionStatus.SUBMITTED),
            ({"is_final": False}, StudentSubmissionStatus.DRAFT_SAVED),
        ],
    )
    def test_status(self, data, expected):
        value = submission(**data) if data is not None else None
        assert determine_student_status(value) == expected


class TestScoring:
    """Scores, penalties and formatting."""

    def test_late_penalty(self):
        assert calculate_late_penalty(80, 10, 30) == (8.0, 72.0)

    def test_no_penalty_when_on_time(self):
        assert calculate_late_penalty(80, 10, 0) == (0.0, 80)
        assert calculate_late_penalty(80, 0, 30) == (0.0, 80)

    def test_penalty_never_negative(self):
        assert calculate_late_penalty(5, 100, 10) == (5.0, 0.0)

    def test_percentage(self):
        assert calculate_percentage(45, 50) == 90.0
        assert calculate_percentage(1, 3) == 33.33
        assert calculate_percentage(10, 0) == 0.0

    @pytest.mark.parametrize(
        "percentage,label",
        [(95, "Excellent"), (90, "Excellent"), (85, "Good"), (72, "Satisfactory"), (60, "Passing"), (59.9, "Needs Improvement")],
    )
    def test_performance_level(self, percentage, label):
        assert performance_level(percentage) == label

    def test_format_score(self):
        assert format_score(45, 50) == "45/50 (90%)"
        assert format_score(45, 50, show_percentage=False) == "45/50"
        assert format_score(None, 50) == "Not graded"

    @pytest.mark.parametrize(
        "size,text",
        [(512, "512 B"), (2048, "2.0 KB"), (5 * 1024 * 1024, "5.0 MB"), (3 * 1024 ** 3, "3.00 GB")],
    )
    def test_format_file_size(self, size, text):
        assert format_file_size(size) == text


class TestStatistics:
    """calculate_assignment_statistics."""

    def test_statistics(self):
        submissions = [
            submission(id="1", is_final=True, grading_status=GradingStatus.MANUAL_GRADED, score=80),
            submission(id="2", is_final=True, is_late=True, grading_status=GradingStatus.MANUAL_GRADED, score=60),
            submission(id="3", is_final=True),
            submission(id="4", is_final=False),
        ]
        stats = calculate_assignment_statistics(5, submissions)

        assert stats.submitted_count == 3
        assert stats.not_submitted_count == 2
        assert stats.draft_count == 1
        assert stats.late_count == 1
        assert stats.graded_count == 2
        assert stats.not_graded_count == 1
        assert stats.average_score == 70
        assert stats.highest_score == 80
        assert stats.lowest_score == 60
        assert stats.submission_rate == 60.0
        assert stats.on_time_rate == 66.67

    def test_empty(self):
        stats = calculate_assignment_statistics(0, [])
        assert stats.average_score is None
        assert stats.submission_rate == 0


class TestStatusDisplay:
    """Display metadata covers every status."""

    def test_every_status_has_display(self):
        assert set(STATUS_DISPLAY) == set(AssignmentStatus)

    def test_values(self):
        assert status_display(AssignmentStatus.CLOSED) == {
            "label": "Closed",
            "variant": "destructive",
            "description": "No more submissions accepted",
        }
        assert status_display("DRAFT")["label"] == "Draft"

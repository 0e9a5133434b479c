"""
Assignment domain rules: submission eligibility, scoring and display metadata.
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from coursework.core.datetime_utils import get_now_with_timezone, is_past
from coursework.schemas.assignment import (
    Assignment,
    AssignmentStatistics,
    AssignmentStatus,
    GradingStatus,
    StudentSubmissionStatus,
    Submission,
)

KB = 1024
MB = 1024 * KB
GB = 1024 * MB

# Lower bounds (percent) for each performance level, highest first
SCORE_THRESHOLDS = [
    (90, "Excellent"),
    (80, "Good"),
    (70, "Satisfactory"),
    (60, "Passing"),
]

STATUS_DISPLAY: Dict[AssignmentStatus, Dict[str, str]] = {
    AssignmentStatus.DRAFT: {
        "label": "Draft",
        "variant": "secondary",
        "description": "Not visible to students",
    },
    AssignmentStatus.PUBLISHED: {
        "label": "Published",
        "variant": "success",
        "description": "Visible to students",
    },
    AssignmentStatus.CLOSED: {
        "label": "Closed",
        "variant": "destructive",
        "description": "No more submissions accepted",
    },
}

_missing = set(AssignmentStatus) - set(STATUS_DISPLAY)
if _missing:
    raise RuntimeError(f"STATUS_DISPLAY has no entry for: {sorted(s.value for s in _missing)}")

GRADED_STATUSES = (GradingStatus.MANUAL_GRADED, GradingStatus.AUTO_GRADED)


def status_display(status: AssignmentStatus) -> Dict[str, str]:
    """Label, badge variant and description for an assignment status."""
    return STATUS_DISPLAY[AssignmentStatus(status)]


def can_submit(
    assignment: Assignment,
    existing: Optional[Submission] = None,
    now: Optional[datetime] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Decide whether a student may hand in work now.

    Returns:
        (allowed, reason). A reason accompanies an allowed late submission.
    """
    now = now or get_now_with_timezone()

    if assignment.status != AssignmentStatus.PUBLISHED:
        return False, "Assignment is not published"
    if not assignment.is_visible:
        return False, "Assignment is not visible"
    if assignment.close_date and is_past(assignment.close_date, now):
        return False, "Submission period has closed"

    overdue = is_past(assignment.due_date, now)
    if overdue and not assignment.allow_late_submission:
        return False, "Due date has passed and late submissions are not allowed"

    if existing and existing.is_final and existing.attempt_number >= assignment.max_submissions:
        return False, "Maximum submissions reached"

    if overdue:
        return True, "Late submission allowed with penalty"
    return True, None


def determine_student_status(submission: Optional[Submission]) -> StudentSubmissionStatus:
    """Derive a student's status from their latest submission."""
    if submission is None:
        return StudentSubmissionStatus.NOT_STARTED
    if submission.grading_status in GRADED_STATUSES:
        return StudentSubmissionStatus.GRADED
    if submission.is_late:
        return StudentSubmissionStatus.LATE
    if submission.is_final:
        return StudentSubmissionStatus.SUBMITTED
    return StudentSubmissionStatus.DRAFT_SAVED


def calculate_late_penalty(
    score: float, penalty_percentage: float, late_minutes: int
) -> Tuple[float, float]:
    """
    Apply a late penalty to a raw score.

    Returns:
        (penalty_amount, adjusted_score); the adjusted score never drops below 0.
    """
    if penalty_percentage <= 0 or late_minutes <= 0:
        return 0.0, score
    penalty = round(score * penalty_percentage / 100, 2)
    return penalty, max(0.0, round(score - penalty, 2))


def calculate_percentage(score: float, max_score: float) -> float:
    if max_score <= 0:
        return 0.0
    return round(score / max_score * 100, 2)


def performance_level(percentage: float) -> str:
    for threshold, label in SCORE_THRESHOLDS:
        if percentage >= threshold:
            return label
    return "Needs Improvement"


def format_score(score: Optional[float], max_score: float, show_percentage: bool = True) -> str:
    """Format as '45/50 (90.0%)', or 'Not graded' when there is no score."""
    if score is None:
        return "Not graded"
    formatted = f"{score:g}/{max_score:g}"
    if show_percentage:
        return f"{formatted} ({calculate_percentage(score, max_score):g}%)"
    return formatted


def format_file_size(size: int) -> str:
    if size < KB:
        return f"{size} B"
    if size < MB:
        return f"{size / KB:.1f} KB"
    if size < GB:
        return f"{size / MB:.1f} MB"
    return f"{size / GB:.2f} GB"


def calculate_assignment_statistics(
    total_students: int, submissions: List[Submission]
) -> AssignmentStatistics:
    """Aggregate numbers for one assignment's submissions."""
    final = [s for s in submissions if s.is_final]
    drafts = [s for s in submissions if not s.is_final]
    late = [s for s in final if s.is_late]
    graded = [s for s in final if s.grading_status in GRADED_STATUSES]
    scores = [s.score for s in graded if s.score is not None]

    submitted = len(final)
    on_time = submitted - len(late)

    return AssignmentStatistics(
        total_students=total_students,
        submitted_count=submitted,
        not_submitted_count=total_students - submitted,
        draft_count=len(drafts),
        late_count=len(late),
        graded_count=len(graded),
        not_graded_count=submitted - len(graded),
        average_score=round(sum(scores) / len(scores), 2) if scores else None,
        highest_score=max(scores) if scores else None,
        lowest_score=min(scores) if scores else None,
        submission_rate=round(submitted / total_students * 100, 2) if total_students > 0 else 0,
        on_time_rate=round(on_time / submitted * 100, 2) if submitted > 0 else 0,
    )

"""
Pydantic schemas for assignments, rubrics and submissions.

Per-field bounds live here; cross-field rules (date ordering, rubric totals)
are checked in coursework.services.validation.
"""

import re
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from coursework.core.config import MB
from coursework.core.datetime_utils import ensure_aware

EXTENSION_PATTERN = re.compile(r"^[a-z0-9]+$")


class AssignmentStatus(str, Enum):
    """Assignment lifecycle status. Transitions only move forward."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CLOSED = "CLOSED"


class SubmissionType(str, Enum):
    """How students hand in work."""

    FILE = "FILE"
    TEXT = "TEXT"


class CleanupFrequency(str, Enum):
    """Retention period after the due date before automatic cleanup."""

    DAYS_30 = "30_DAYS"
    DAYS_60 = "60_DAYS"
    DAYS_90 = "90_DAYS"
    SEMESTER_END = "SEMESTER_END"
    NEVER = "NEVER"


class GradingStatus(str, Enum):
    """Grading state of a submission."""

    NOT_GRADED = "NOT_GRADED"
    AUTO_GRADED = "AUTO_GRADED"
    MANUAL_GRADED = "MANUAL_GRADED"


class StudentSubmissionStatus(str, Enum):
    """Per-student status derived from their latest submission."""

    NOT_STARTED = "NOT_STARTED"
    DRAFT_SAVED = "DRAFT_SAVED"
    SUBMITTED = "SUBMITTED"
    LATE = "LATE"
    GRADED = "GRADED"


def _normalize_extensions(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    normalized = []
    for ext in value:
        ext = ext.strip().lstrip(".").lower()
        if not ext:
            raise ValueError("Extension cannot be empty")
        if len(ext) > 10:
            raise ValueError("Extension too long")
        if not EXTENSION_PATTERN.match(ext):
            raise ValueError("Extension must be alphanumeric")
        normalized.append(ext)
    return normalized


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_aware(value) if value is not None else None


class RubricLevel(BaseModel):
    """One achievement level within a rubric criterion."""

    level: str = Field(..., min_length=1, max_length=50)
    points: float = Field(..., ge=0)
    description: str = Field(default="", max_length=500)


class RubricItem(BaseModel):
    """One grading criterion."""

    id: str = Field(..., min_length=1)
    criteria: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    max_points: float = Field(..., gt=0)
    levels: Optional[List[RubricLevel]] = Field(None, max_length=10)


class Assignment(BaseModel):
    """Assignment record as returned by the backend collaborator."""

    id: str
    class_id: Optional[str] = None
    teacher_id: Optional[str] = None
    branch_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    status: AssignmentStatus = AssignmentStatus.DRAFT
    submission_type: SubmissionType = SubmissionType.FILE
    max_file_size: int = 10 * MB
    allowed_extensions: Optional[List[str]] = None
    max_submissions: int = 1
    allow_late_submission: bool = False
    late_penalty_percentage: float = 0
    max_score: int = 100
    grading_rubric: Optional[List[RubricItem]] = None
    show_rubric_to_students: bool = False
    publish_at: Optional[datetime] = None
    due_date: datetime
    close_date: Optional[datetime] = None
    clean_submissions_after: CleanupFrequency = CleanupFrequency.DAYS_90
    clean_instructions_after: CleanupFrequency = CleanupFrequency.DAYS_30
    attachment_ids: List[str] = Field(default_factory=list)
    is_visible: bool = False
    total_submissions: int = 0
    average_score: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        from_attributes = True

    aware_dates = field_validator("publish_at", "due_date", "close_date")(_aware)


class AssignmentCreate(BaseModel):
    """Fields a teacher supplies when creating an assignment."""

    class_id: Optional[str] = None
    teacher_id: Optional[str] = None
    branch_id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    instructions: Optional[str] = Field(None, max_length=10000)
    submission_type: SubmissionType = SubmissionType.FILE
    max_file_size: int = Field(default=10 * MB, gt=0, le=100 * MB)
    allowed_extensions: Optional[List[str]] = Field(None, max_length=20)
    max_submissions: int = Field(default=1, ge=1, le=10)
    allow_late_submission: bool = False
    late_penalty_percentage: float = Field(default=0, ge=0, le=100)
    max_score: int = Field(..., ge=1, le=10000)
    grading_rubric: Optional[List[RubricItem]] = Field(None, max_length=20)
    show_rubric_to_students: bool = False
    publish_at: Optional[datetime] = None
    due_date: datetime
    close_date: Optional[datetime] = None
    clean_submissions_after: CleanupFrequency = CleanupFrequency.DAYS_90
    clean_instructions_after: CleanupFrequency = CleanupFrequency.DAYS_30

    class Config:
        str_strip_whitespace = True

    aware_dates = field_validator("publish_at", "due_date", "close_date")(_aware)
    normalize_extensions = field_validator("allowed_extensions")(_normalize_extensions)


class AssignmentUpdate(BaseModel):
    """Partial update of a DRAFT assignment. Only set fields are sent."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    instructions: Optional[str] = Field(None, max_length=10000)
    max_file_size: Optional[int] = Field(None, gt=0, le=100 * MB)
    allowed_extensions: Optional[List[str]] = Field(None, max_length=20)
    allow_late_submission: Optional[bool] = None
    late_penalty_percentage: Optional[float] = Field(None, ge=0, le=100)
    max_score: Optional[int] = Field(None, ge=1, le=10000)
    grading_rubric: Optional[List[RubricItem]] = Field(None, max_length=20)
    show_rubric_to_students: Optional[bool] = None
    publish_at: Optional[datetime] = None
    due_date: Optional[datetime] = None
    close_date: Optional[datetime] = None
    clean_submissions_after: Optional[CleanupFrequency] = None
    clean_instructions_after: Optional[CleanupFrequency] = None

    class Config:
        str_strip_whitespace = True

    aware_dates = field_validator("publish_at", "due_date", "close_date")(_aware)
    normalize_extensions = field_validator("allowed_extensions")(_normalize_extensions)


class Submission(BaseModel):
    """One student's attempt at an assignment."""

    id: str
    assignment_id: str
    student_id: str
    class_id: Optional[str] = None
    submission_text: Optional[str] = None
    submission_file_id: Optional[str] = None
    submitted_at: Optional[datetime] = None
    attempt_number: int = 1
    is_final: bool = False
    is_late: bool = False
    late_minutes: Optional[int] = None
    score: Optional[float] = None
    max_score: Optional[float] = None
    penalty_applied: float = 0
    grading_status: GradingStatus = GradingStatus.NOT_GRADED
    graded_by: Optional[str] = None
    graded_at: Optional[str] = None
    feedback: Optional[str] = None
    private_notes: Optional[str] = None

    class Config:
        from_attributes = True


class SubmitAssignmentRequest(BaseModel):
    """Student hand-in (draft or final)."""

    assignment_id: str
    student_id: str
    class_id: Optional[str] = None
    submission_text: Optional[str] = Field(None, max_length=50000)
    submission_file_id: Optional[str] = None
    is_final: bool = True


class GradeSubmissionRequest(BaseModel):
    """Teacher's grade for one submission."""

    submission_id: str
    grader_id: str
    score: float = Field(..., ge=0)
    feedback: Optional[str] = Field(None, max_length=5000)
    private_notes: Optional[str] = Field(None, max_length=2000)


class AssignmentStatistics(BaseModel):
    """Aggregate submission numbers for one assignment."""

    total_students: int
    submitted_count: int
    not_submitted_count: int
    draft_count: int
    late_count: int
    graded_count: int
    not_graded_count: int
    average_score: Optional[float] = None
    highest_score: Optional[float] = None
    lowest_score: Optional[float] = None
    submission_rate: float = 0
    on_time_rate: float = 0

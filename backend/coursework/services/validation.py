"""
Field-level validation applied before any backend call.

Per-field bounds come from the pydantic schemas; this module adds the
cross-field rules and turns every failure into field-scoped messages.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import pydantic
from pydantic import BaseModel

from coursework.core.errors import ValidationError
from coursework.core.logging import get_logger
from coursework.schemas.assignment import (
    Assignment,
    AssignmentCreate,
    AssignmentUpdate,
    RubricItem,
    SubmitAssignmentRequest,
)

logger = get_logger()

M = TypeVar("M", bound=BaseModel)

RUBRIC_TOLERANCE = 0.01
MAX_FEEDBACK_LENGTH = 5000
MAX_PRIVATE_NOTES_LENGTH = 2000

PUBLISH_AFTER_DUE = "Publish date must be before or equal to due date"
DUE_AFTER_CLOSE = "Due date must be before or equal to close date"
RUBRIC_TOTAL_MISMATCH = "Rubric total points must equal max score"

# (field, pydantic error type) -> message shown next to the field
FRIENDLY_FIELD_MESSAGES = {
    ("title", "missing"): "Title is required",
    ("title", "string_too_short"): "Title is required",
    ("title", "string_too_long"): "Title must be 200 characters or less",
    ("description", "string_too_long"): "Description must be 2000 characters or less",
    ("instructions", "string_too_long"): "Instructions must be 10000 characters or less",
    ("due_date", "missing"): "Due date is required",
    ("max_score", "missing"): "Max score is required",
    ("max_score", "greater_than_equal"): "Max score must be at least 1",
    ("max_score", "less_than_equal"): "Max score cannot exceed 10000",
    ("late_penalty_percentage", "greater_than_equal"): "Late penalty cannot be negative",
    ("late_penalty_percentage", "less_than_equal"): "Late penalty cannot exceed 100%",
    ("max_submissions", "greater_than_equal"): "At least 1 submission must be allowed",
    ("max_submissions", "less_than_equal"): "Maximum 10 submissions allowed",
    ("max_file_size", "greater_than"): "File size must be positive",
    ("max_file_size", "less_than_equal"): "File size cannot exceed 100MB",
    ("allowed_extensions", "too_long"): "Maximum 20 file extensions allowed",
    ("grading_rubric", "too_long"): "Maximum 20 rubric items allowed",
}


def _field_errors_from_pydantic(exc: pydantic.ValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        field = ".".join(loc) if loc else "__root__"
        top = loc[0] if loc else field
        message = FRIENDLY_FIELD_MESSAGES.get((top, err["type"]))
        if message is None:
            message = err["msg"]
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
        errors.append({"field": field, "message": message})
    return errors


def _parse(model: Type[M], data: Union[M, Dict[str, Any]]) -> M:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        field_errors = _field_errors_from_pydantic(e)
        logger.debug("Rejected %s: %s", model.__name__, field_errors)
        raise ValidationError(field_errors) from e


def rubric_total(rubric: List[RubricItem]) -> float:
    """Sum of max points across rubric items."""
    return sum(item.max_points for item in rubric)


def check_dates(
    publish_at: Optional[datetime],
    due_date: Optional[datetime],
    close_date: Optional[datetime],
) -> List[Dict[str, str]]:
    """Return field errors for publish_at <= due_date <= close_date."""
    errors = []
    if publish_at and due_date and publish_at > due_date:
        errors.append({"field": "publish_at", "message": PUBLISH_AFTER_DUE})
    if due_date and close_date and due_date > close_date:
        errors.append({"field": "close_date", "message": DUE_AFTER_CLOSE})
    return errors


def check_rubric(rubric: Optional[List[RubricItem]], max_score: Optional[float]) -> List[Dict[str, str]]:
    """Return a field error when the rubric does not add up to max_score."""
    if not rubric or max_score is None:
        return []
    if abs(rubric_total(rubric) - max_score) > RUBRIC_TOLERANCE:
        return [{"field": "grading_rubric", "message": RUBRIC_TOTAL_MISMATCH}]
    return []


def validate_create(data: Union[AssignmentCreate, Dict[str, Any]]) -> AssignmentCreate:
    """
    Validate the fields of a new assignment.

    Raises:
        ValidationError: With one entry per offending field.
    """
    fields = _parse(AssignmentCreate, data)
    errors = check_dates(fields.publish_at, fields.due_date, fields.close_date)
    errors += check_rubric(fields.grading_rubric, fields.max_score)
    if errors:
        raise ValidationError(errors)
    return fields


def validate_update(
    assignment: Assignment, patch: Union[AssignmentUpdate, Dict[str, Any]]
) -> AssignmentUpdate:
    """
    Validate a partial update against the current record.

    Fields absent from the patch keep the record's values for the
    cross-field checks.
    """
    update = _parse(AssignmentUpdate, patch)
    supplied = update.model_fields_set

    def merged(name: str):
        return getattr(update, name) if name in supplied else getattr(assignment, name)

    errors = []
    if supplied & {"publish_at", "due_date", "close_date"}:
        if "due_date" in supplied and update.due_date is None:
            errors.append({"field": "due_date", "message": "Due date is required"})
        errors += check_dates(merged("publish_at"), merged("due_date"), merged("close_date"))
    if supplied & {"grading_rubric", "max_score"}:
        errors += check_rubric(merged("grading_rubric"), merged("max_score"))
    if errors:
        raise ValidationError(errors)
    return update


def validate_grade(
    score: float,
    max_score: float,
    feedback: Optional[str] = None,
    private_notes: Optional[str] = None,
) -> None:
    """Check a grade before it is sent."""
    errors = []
    if score < 0:
        errors.append({"field": "score", "message": "Score cannot be negative"})
    elif score > max_score:
        errors.append({"field": "score", "message": f"Score cannot exceed {max_score:g}"})
    if feedback and len(feedback) > MAX_FEEDBACK_LENGTH:
        errors.append(
            {"field": "feedback", "message": f"Feedback must be {MAX_FEEDBACK_LENGTH} characters or less"}
        )
    if private_notes and len(private_notes) > MAX_PRIVATE_NOTES_LENGTH:
        errors.append(
            {
                "field": "private_notes",
                "message": f"Private notes must be {MAX_PRIVATE_NOTES_LENGTH} characters or less",
            }
        )
    if errors:
        raise ValidationError(errors)


def validate_submission(
    data: Union[SubmitAssignmentRequest, Dict[str, Any]]
) -> SubmitAssignmentRequest:
    """A final submission carries either text or a file, never both."""
    request = _parse(SubmitAssignmentRequest, data)
    has_text = bool(request.submission_text and request.submission_text.strip())
    has_file = bool(request.submission_file_id)
    if request.is_final:
        if not has_text and not has_file:
            raise ValidationError(
                [{"field": "submission_text", "message": "Either text or a file is required"}]
            )
        if has_text and has_file:
            raise ValidationError(
                [{"field": "submission_file_id", "message": "Submit either text or a file, not both"}]
            )
    return request

"""
Tagged success/failure results and user-facing notifications.
"""

from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from coursework.core.errors import CourseworkError, ValidationError
from coursework.schemas.files import UploadReport

T = TypeVar("T")


class FieldError(BaseModel):
    """A validation message attached to one form field."""

    field: str
    message: str


class OperationResult(BaseModel, Generic[T]):
    """Outcome of one lifecycle operation."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    validation_errors: List[FieldError] = Field(default_factory=list)

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: CourseworkError, message: Optional[str] = None) -> "OperationResult[T]":
        """Build a failure from a caught error; message overrides the error text."""
        field_errors = []
        if isinstance(error, ValidationError):
            field_errors = [FieldError(**e) for e in error.field_errors]
        return cls(
            success=False,
            error=message or error.message,
            error_kind=error.kind,
            validation_errors=field_errors,
        )


class NotificationLevel(str, Enum):
    """Severity of a user-facing notification."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """One dismissible message per logical operation."""

    level: NotificationLevel
    message: str


class CreateOutcome(BaseModel):
    """Result of creating an assignment together with its staged attachments."""

    result: OperationResult
    report: Optional[UploadReport] = None
    notification: Optional[Notification] = None

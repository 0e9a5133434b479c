"""
Error taxonomy for assignment lifecycle and attachment operations.

Every error the library raises derives from CourseworkError and carries a
``kind`` string that OperationResult reports back to the caller.
"""

from typing import Dict, List, Optional


class CourseworkError(Exception):
    """Base class for all coursework errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CourseworkError):
    """Field-level validation failure, raised before any network call."""

    kind = "validation"

    def __init__(self, field_errors: List[Dict[str, str]]):
        self.field_errors = field_errors
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in field_errors)
        super().__init__(summary or "Validation failed")

    def for_field(self, field: str) -> List[str]:
        """Messages attached to one field."""
        return [e["message"] for e in self.field_errors if e["field"] == field]


class IllegalTransition(CourseworkError):
    """Requested lifecycle action is not legal for the current status."""

    kind = "illegal_transition"

    def __init__(self, action: str, status: str, message: Optional[str] = None):
        self.action = action
        self.status = status
        super().__init__(message or f"Cannot {action} an assignment in {status} status")


class CapacityExceeded(CourseworkError):
    """Staging one more file would exceed the attachment cap."""

    kind = "capacity_exceeded"

    def __init__(self, file_name: str, limit: int):
        self.file_name = file_name
        self.limit = limit
        super().__init__(
            f"Cannot attach {file_name}: maximum of {limit} files per assignment"
        )


class FileRejected(CourseworkError):
    """File failed extension or size validation."""

    kind = "file_rejected"

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"{file_name}: {reason}")


class BackendError(CourseworkError):
    """A call to the backend or file-storage collaborator failed."""

    kind = "backend"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NotFound(BackendError):
    """Referenced record does not exist."""

    kind = "not_found"

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class OperationInProgress(CourseworkError):
    """The same operation is already in flight."""

    kind = "in_progress"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"A {operation} request is already in progress")


class CommitInProgress(CourseworkError):
    """Staged files cannot change while they are being uploaded."""

    kind = "commit_in_progress"

    def __init__(self):
        super().__init__("Files are being uploaded; staged files cannot be changed")


class ConfirmationRequired(CourseworkError):
    """Deleting a persisted file needs an explicit confirmation."""

    kind = "confirmation_required"

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"Deleting file {file_id} requires confirmation")

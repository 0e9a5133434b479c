"""
Schemas package initialization.
"""

from coursework.schemas.assignment import (
    AssignmentStatus,
    SubmissionType,
    CleanupFrequency,
    GradingStatus,
    StudentSubmissionStatus,
    RubricLevel,
    RubricItem,
    Assignment,
    AssignmentCreate,
    AssignmentUpdate,
    Submission,
    SubmitAssignmentRequest,
    GradeSubmissionRequest,
    AssignmentStatistics,
)
from coursework.schemas.files import (
    FileContext,
    StagedFile,
    PersistedFile,
    StagingArea,
    UploadOutcome,
    FailedUpload,
    UploadReport,
    UploadFileRequest,
    SignedUrlRequest,
    SignedUrlResponse,
)
from coursework.schemas.results import (
    FieldError,
    OperationResult,
    NotificationLevel,
    Notification,
    CreateOutcome,
)

__all__ = [
    "AssignmentStatus",
    "SubmissionType",
    "CleanupFrequency",
    "GradingStatus",
    "StudentSubmissionStatus",
    "RubricLevel",
    "RubricItem",
    "Assignment",
    "AssignmentCreate",
    "AssignmentUpdate",
    "Submission",
    "SubmitAssignmentRequest",
    "GradeSubmissionRequest",
    "AssignmentStatistics",
    "FileContext",
    "StagedFile",
    "PersistedFile",
    "StagingArea",
    "UploadOutcome",
    "FailedUpload",
    "UploadReport",
    "UploadFileRequest",
    "SignedUrlRequest",
    "SignedUrlResponse",
    "FieldError",
    "OperationResult",
    "NotificationLevel",
    "Notification",
    "CreateOutcome",
]

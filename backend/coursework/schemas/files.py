"""
Pydantic schemas for staged and persisted attachment files.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class FileContext(str, Enum):
    """What a stored file belongs to."""

    ASSIGNMENT_INSTRUCTION = "assignment_instruction"
    ASSIGNMENT_ATTACHMENT = "assignment_attachment"
    SUBMISSION = "submission"


class StagedFile(BaseModel):
    """A file held in memory until its owning assignment exists."""

    key: str  # transient, client-generated; replaced by the stored file id after upload
    file_name: str
    file_size: int
    mime_type: Optional[str] = None
    content: str  # base64 encoded bytes

    class Config:
        frozen = True


class PersistedFile(BaseModel):
    """File record stored by the file-storage collaborator."""

    id: str
    file_name: str
    file_path: str
    file_size: int
    mime_type: Optional[str] = None
    context_type: FileContext = FileContext.ASSIGNMENT_INSTRUCTION
    context_id: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: Optional[str] = None

    class Config:
        frozen = True


class StagingArea(BaseModel):
    """
    Snapshot of one assignment's attachments.

    Coordinator operations never mutate a snapshot; they return a new one.
    """

    staged: Tuple[StagedFile, ...] = ()
    persisted: Tuple[PersistedFile, ...] = ()

    class Config:
        frozen = True

    @property
    def total(self) -> int:
        return len(self.staged) + len(self.persisted)

    def keys(self) -> List[str]:
        return [f.key for f in self.staged]


class UploadOutcome(str, Enum):
    """Aggregate result of one sequential upload batch."""

    NO_FILES = "no_files"
    ALL_SUCCEEDED = "all_succeeded"
    PARTIAL_SUCCESS = "partial_success"
    ALL_FAILED = "all_failed"


class FailedUpload(BaseModel):
    """A staged file whose upload call failed."""

    file_name: str
    error: str
    key: Optional[str] = None


class UploadReport(BaseModel):
    """Per-file outcomes of a commit, classified into one UploadOutcome."""

    outcome: UploadOutcome
    succeeded: List[PersistedFile] = Field(default_factory=list)
    failed: List[FailedUpload] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def is_partial_failure(self) -> bool:
        return self.outcome == UploadOutcome.PARTIAL_SUCCESS

    @classmethod
    def from_results(
        cls, succeeded: List[PersistedFile], failed: List[FailedUpload]
    ) -> "UploadReport":
        """Classify a finished batch."""
        if not succeeded and not failed:
            outcome = UploadOutcome.NO_FILES
        elif not failed:
            outcome = UploadOutcome.ALL_SUCCEEDED
        elif not succeeded:
            outcome = UploadOutcome.ALL_FAILED
        else:
            outcome = UploadOutcome.PARTIAL_SUCCESS
        return cls(outcome=outcome, succeeded=succeeded, failed=failed)


class UploadFileRequest(BaseModel):
    """JSON body for storing one file; content is base64 encoded."""

    file_name: str = Field(..., min_length=1, max_length=255)
    content: str
    mime_type: Optional[str] = None
    context_type: FileContext = FileContext.ASSIGNMENT_INSTRUCTION
    context_id: str
    uploaded_by: Optional[str] = None


class SignedUrlRequest(BaseModel):
    file_path: str
    ttl_seconds: Optional[int] = Field(None, gt=0, le=7 * 24 * 3600)


class SignedUrlResponse(BaseModel):
    url: str
    expires_in: int

"""
Common interface for the assignment backend and file-storage collaborator.

The lifecycle controller and upload coordinator talk to the backend through
this interface only. Implementations hide transport details (HTTP, in-memory).
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from coursework.schemas.assignment import (
    Assignment,
    AssignmentCreate,
    AssignmentUpdate,
    GradeSubmissionRequest,
    Submission,
    SubmitAssignmentRequest,
)
from coursework.schemas.files import FileContext, PersistedFile


@runtime_checkable
class AssignmentBackend(Protocol):
    """
    Single source of truth for assignments, files and submissions.

    Every method raises coursework.core.errors.BackendError (NotFound for
    missing records) with the backend's raw message on failure.
    """

    async def list_assignments(self, filters: Optional[Dict[str, Any]] = None) -> List[Assignment]:
        """List assignments, optionally filtered by class_id, teacher_id, branch_id or status."""
        ...

    async def get_assignment(self, assignment_id: str) -> Assignment:
        ...

    async def create_assignment(self, fields: AssignmentCreate) -> Assignment:
        """Create a DRAFT assignment and return it with its new id."""
        ...

    async def update_assignment(self, assignment_id: str, patch: AssignmentUpdate) -> Assignment:
        """Apply the fields set on patch."""
        ...

    async def publish_assignment(self, assignment_id: str) -> Assignment:
        ...

    async def close_assignment(self, assignment_id: str) -> Assignment:
        ...

    async def delete_assignment(self, assignment_id: str) -> None:
        ...

    async def upload_file(
        self,
        content: bytes,
        file_name: str,
        owner_assignment_id: str,
        purpose: FileContext = FileContext.ASSIGNMENT_INSTRUCTION,
        mime_type: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> PersistedFile:
        """Store one file and record it against its owning assignment."""
        ...

    async def list_files(self, assignment_id: str) -> List[PersistedFile]:
        ...

    async def get_signed_url(self, file_path: str, ttl_seconds: int) -> str:
        """Time-limited preview/download link for a stored file."""
        ...

    async def delete_file_by_id(self, file_id: str) -> None:
        ...

    async def submit_assignment(self, request: SubmitAssignmentRequest) -> Submission:
        ...

    async def grade_submission(self, request: GradeSubmissionRequest) -> Submission:
        """Record a grade; a late penalty is applied by the backend."""
        ...

    async def list_submissions(self, assignment_id: str) -> List[Submission]:
        ...

"""
In-memory assignment backend.

Enforces the same transition rules and date constraints as the hosted
backend and stores file bytes in a dict. Backs the reference API and tests.
"""

import uuid
from typing import Any, Dict, List, Optional, Tuple

from coursework.core.config import get_config
from coursework.core.datetime_utils import get_now_with_timezone, minutes_between, to_iso_datetime
from coursework.core.errors import BackendError, NotFound
from coursework.core.logging import get_logger
from coursework.core.security import UrlSigner
from coursework.schemas.assignment import (
    Assignment,
    AssignmentCreate,
    AssignmentStatus,
    AssignmentUpdate,
    GradeSubmissionRequest,
    GradingStatus,
    Submission,
    SubmitAssignmentRequest,
)
from coursework.schemas.files import FileContext, PersistedFile
from coursework.services.assignment_rules import calculate_late_penalty, can_submit
from coursework.services.validation import check_dates
from coursework.utils.helpers import build_storage_path

logger = get_logger()

DOWNLOAD_PATH = "/api/v1/files/download"
FILTER_FIELDS = ("class_id", "teacher_id", "branch_id", "status")


def _now() -> str:
    return to_iso_datetime(get_now_with_timezone())


def _matches(assignment: Assignment, filters: Dict[str, Any]) -> bool:
    for key, expected in filters.items():
        actual = getattr(assignment, key)
        if getattr(actual, "value", actual) != getattr(expected, "value", expected):
            return False
    return True


def _check_constraints(assignment: Assignment) -> None:
    if check_dates(assignment.publish_at, assignment.due_date, assignment.close_date):
        raise BackendError(
            'new row for relation "assignments" violates check constraint "valid_dates"',
            status_code=400,
        )


class InMemoryAssignmentBackend:
    """Assignment backend holding every record in process memory."""

    def __init__(self, signer: Optional[UrlSigner] = None, download_path: str = DOWNLOAD_PATH):
        self._assignments: Dict[str, Assignment] = {}
        self._files: Dict[str, PersistedFile] = {}
        self._blobs: Dict[str, bytes] = {}
        self._submissions: Dict[str, Submission] = {}
        self._signer = signer
        self.download_path = download_path

    @property
    def signer(self) -> UrlSigner:
        if self._signer is None:
            self._signer = UrlSigner()
        return self._signer

    def _get(self, assignment_id: str) -> Assignment:
        assignment = self._assignments.get(assignment_id)
        if assignment is None:
            raise NotFound("Assignment not found")
        return assignment

    def _save(self, assignment: Assignment, **changes: Any) -> Assignment:
        updated = assignment.model_copy(update={**changes, "updated_at": _now()})
        self._assignments[updated.id] = updated
        return updated

    # Assignments

    async def list_assignments(self, filters: Optional[Dict[str, Any]] = None) -> List[Assignment]:
        filters = {k: v for k, v in (filters or {}).items() if k in FILTER_FIELDS and v is not None}
        items = [a for a in self._assignments.values() if _matches(a, filters)]
        return sorted(items, key=lambda a: a.due_date, reverse=True)

    async def get_assignment(self, assignment_id: str) -> Assignment:
        return self._get(assignment_id)

    async def create_assignment(self, fields: AssignmentCreate) -> Assignment:
        now = _now()
        assignment = Assignment(
            id=str(uuid.uuid4()),
            status=AssignmentStatus.DRAFT,
            is_visible=False,
            created_at=now,
            updated_at=now,
            **fields.model_dump(),
        )
        _check_constraints(assignment)
        self._assignments[assignment.id] = assignment
        logger.info("Created assignment %s (%s)", assignment.id, assignment.title)
        return assignment

    async def update_assignment(self, assignment_id: str, patch: AssignmentUpdate) -> Assignment:
        assignment = self._get(assignment_id)
        if assignment.status != AssignmentStatus.DRAFT:
            raise BackendError("Only draft assignments can be edited", status_code=409)

        data = assignment.model_dump()
        data.update(patch.model_dump(exclude_unset=True))
        data["updated_at"] = _now()
        updated = Assignment.model_validate(data)
        _check_constraints(updated)
        self._assignments[assignment_id] = updated
        return updated

    async def publish_assignment(self, assignment_id: str) -> Assignment:
        assignment = self._get(assignment_id)
        if assignment.status != AssignmentStatus.DRAFT:
            raise BackendError("Only draft assignments can be published", status_code=409)
        logger.info("Published assignment %s", assignment_id)
        return self._save(assignment, status=AssignmentStatus.PUBLISHED, is_visible=True)

    async def close_assignment(self, assignment_id: str) -> Assignment:
        assignment = self._get(assignment_id)
        if assignment.status != AssignmentStatus.PUBLISHED:
            raise BackendError("Only published assignments can be closed", status_code=409)
        logger.info("Closed assignment %s", assignment_id)
        return self._save(
            assignment, status=AssignmentStatus.CLOSED, close_date=get_now_with_timezone()
        )

    async def delete_assignment(self, assignment_id: str) -> None:
        assignment = self._get(assignment_id)
        if assignment.status != AssignmentStatus.DRAFT:
            raise BackendError("Only draft assignments can be deleted", status_code=409)
        if assignment.total_submissions > 0:
            raise BackendError("Cannot delete assignment with submissions", status_code=409)

        for file in [f for f in self._files.values() if f.context_id == assignment_id]:
            self._drop_file(file)
        del self._assignments[assignment_id]
        logger.info("Deleted assignment %s", assignment_id)

    # Files

    async def upload_file(
        self,
        content: bytes,
        file_name: str,
        owner_assignment_id: str,
        purpose: FileContext = FileContext.ASSIGNMENT_INSTRUCTION,
        mime_type: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> PersistedFile:
        assignment = self._get(owner_assignment_id)
        file = PersistedFile(
            id=str(uuid.uuid4()),
            file_name=file_name,
            file_path=build_storage_path(FileContext(purpose).value, owner_assignment_id, file_name),
            file_size=len(content),
            mime_type=mime_type,
            context_type=purpose,
            context_id=owner_assignment_id,
            uploaded_by=uploaded_by,
            created_at=_now(),
        )
        self._files[file.id] = file
        self._blobs[file.file_path] = content
        if purpose != FileContext.SUBMISSION:
            self._assignments[assignment.id] = assignment.model_copy(
                update={"attachment_ids": assignment.attachment_ids + [file.id]}
            )
        logger.debug("Stored %s (%d bytes) at %s", file_name, file.file_size, file.file_path)
        return file

    async def list_files(self, assignment_id: str) -> List[PersistedFile]:
        files = [
            f
            for f in self._files.values()
            if f.context_id == assignment_id and f.context_type != FileContext.SUBMISSION
        ]
        return sorted(files, key=lambda f: f.created_at or "")

    async def get_signed_url(self, file_path: str, ttl_seconds: int) -> str:
        if file_path not in self._blobs:
            raise NotFound("File not found")
        token = self.signer.sign(file_path, ttl_seconds or get_config().uploads.signed_url_ttl)
        return f"{self.download_path}?token={token}"

    async def delete_file_by_id(self, file_id: str) -> None:
        file = self._files.get(file_id)
        if file is None:
            raise NotFound("File not found")
        self._drop_file(file)

    def _drop_file(self, file: PersistedFile) -> None:
        self._files.pop(file.id, None)
        self._blobs.pop(file.file_path, None)
        owner = self._assignments.get(file.context_id or "")
        if owner and file.id in owner.attachment_ids:
            self._assignments[owner.id] = owner.model_copy(
                update={"attachment_ids": [i for i in owner.attachment_ids if i != file.id]}
            )

    def read_file(self, file_path: str) -> Tuple[PersistedFile, bytes]:
        """Return the record and bytes stored at file_path."""
        content = self._blobs.get(file_path)
        if content is None:
            raise NotFound("File not found")
        file = next(f for f in self._files.values() if f.file_path == file_path)
        return file, content

    # Submissions

    async def submit_assignment(self, request: SubmitAssignmentRequest) -> Submission:
        assignment = self._get(request.assignment_id)
        previous = [
            s
            for s in self._submissions.values()
            if s.assignment_id == assignment.id and s.student_id == request.student_id and s.is_final
        ]
        latest = max(previous, key=lambda s: s.attempt_number, default=None)

        now = get_now_with_timezone()
        allowed, reason = can_submit(assignment, latest, now)
        if not allowed:
            raise BackendError(reason, status_code=409)

        late_minutes = minutes_between(assignment.due_date, now)
        is_late = late_minutes > 0
        submission = Submission(
            id=str(uuid.uuid4()),
            assignment_id=assignment.id,
            student_id=request.student_id,
            class_id=request.class_id or assignment.class_id,
            submission_text=request.submission_text,
            submission_file_id=request.submission_file_id,
            submitted_at=now,
            attempt_number=len(previous) + 1,
            is_final=request.is_final,
            is_late=is_late,
            late_minutes=late_minutes if is_late else None,
            max_score=assignment.max_score,
        )
        self._submissions[submission.id] = submission
        if request.is_final:
            self._save(assignment, total_submissions=assignment.total_submissions + 1)
        return submission

    async def grade_submission(self, request: GradeSubmissionRequest) -> Submission:
        submission = self._submissions.get(request.submission_id)
        if submission is None:
            raise NotFound("Submission not found")
        assignment = self._get(submission.assignment_id)
        if request.score > assignment.max_score:
            raise BackendError(
                f"Score cannot exceed maximum of {assignment.max_score}", status_code=422
            )

        score, penalty = request.score, 0.0
        if submission.is_late and submission.late_minutes:
            penalty, score = calculate_late_penalty(
                request.score, assignment.late_penalty_percentage, submission.late_minutes
            )

        graded = submission.model_copy(
            update={
                "score": score,
                "penalty_applied": penalty,
                "grading_status": GradingStatus.MANUAL_GRADED,
                "graded_by": request.grader_id,
                "graded_at": _now(),
                "feedback": request.feedback,
                "private_notes": request.private_notes,
            }
        )
        self._submissions[graded.id] = graded
        self._update_average_score(assignment)
        return graded

    def _update_average_score(self, assignment: Assignment) -> None:
        scores = [
            s.score
            for s in self._submissions.values()
            if s.assignment_id == assignment.id and s.score is not None
        ]
        average = round(sum(scores) / len(scores), 2) if scores else None
        self._save(assignment, average_score=average)

    async def list_submissions(self, assignment_id: str) -> List[Submission]:
        self._get(assignment_id)
        items = [s for s in self._submissions.values() if s.assignment_id == assignment_id]
        return sorted(items, key=lambda s: (s.student_id, s.attempt_number))

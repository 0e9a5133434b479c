"""
Assignment lifecycle controller.

Owns the DRAFT -> PUBLISHED -> CLOSED state machine on the client side:
decides which actions are legal, keeps one request per operation in flight,
forwards legal requests to the backend and refetches the assignment list
after every successful mutation. The backend stays the single source of
truth; the local list is never patched in place.
"""

import asyncio
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional, Tuple, Union

from coursework.core.errors import (
    BackendError,
    CourseworkError,
    IllegalTransition,
    OperationInProgress,
)
from coursework.core.logging import get_logger
from coursework.schemas.assignment import (
    Assignment,
    AssignmentCreate,
    AssignmentStatus,
    AssignmentUpdate,
    GradeSubmissionRequest,
    Submission,
)
from coursework.schemas.results import OperationResult
from coursework.services.backend import AssignmentBackend
from coursework.services.error_messages import friendly_error_message
from coursework.services.validation import validate_create, validate_grade, validate_update

logger = get_logger()

OPERATIONS = ("create", "edit", "publish", "close", "delete", "grade")


def can_edit(assignment: Assignment) -> bool:
    return assignment.status == AssignmentStatus.DRAFT


def can_publish(assignment: Assignment) -> bool:
    return assignment.status == AssignmentStatus.DRAFT


def can_close(assignment: Assignment) -> bool:
    return assignment.status == AssignmentStatus.PUBLISHED


def can_delete(assignment: Assignment) -> bool:
    return assignment.status == AssignmentStatus.DRAFT


class AssignmentLifecycleController:
    """Client-side owner of the assignment state machine for one list view."""

    def __init__(self, backend: AssignmentBackend, filters: Optional[Dict[str, Any]] = None):
        """
        Args:
            backend: Assignment backend collaborator.
            filters: Filters applied whenever the list is refetched
                (class_id, teacher_id, branch_id, status).
        """
        self.backend = backend
        self.filters = dict(filters or {})
        self.assignments: Tuple[Assignment, ...] = ()
        self._in_progress: Dict[str, Optional[asyncio.Task]] = {}

    can_edit = staticmethod(can_edit)
    can_publish = staticmethod(can_publish)
    can_close = staticmethod(can_close)
    can_delete = staticmethod(can_delete)

    def in_progress(self, operation: str) -> bool:
        """True while a request for operation is awaiting the backend."""
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")
        return operation in self._in_progress

    @contextmanager
    def single_flight(self, operation: str) -> Iterator[None]:
        """
        Hold the flag for operation until the block exits.

        The task that holds a flag may re-enter it, so a workflow can keep
        "create" held across the create call and the uploads that follow.

        Raises:
            OperationInProgress: When another task holds the flag.
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")
        current = asyncio.current_task()
        if operation in self._in_progress:
            if self._in_progress[operation] is not current:
                raise OperationInProgress(operation)
            yield
            return

        self._in_progress[operation] = current
        try:
            yield
        finally:
            self._in_progress.pop(operation, None)

    def find(self, assignment_id: str) -> Optional[Assignment]:
        """Look an assignment up in the current snapshot."""
        return next((a for a in self.assignments if a.id == assignment_id), None)

    async def refresh(self) -> Tuple[Assignment, ...]:
        """Refetch the list from the backend and replace the snapshot."""
        items = await self.backend.list_assignments(self.filters)
        self.assignments = tuple(items)
        logger.debug("Refreshed assignment list: %d items", len(self.assignments))
        return self.assignments

    async def _run(self, operation: str, action: Callable[[], Awaitable[Any]]) -> OperationResult:
        """
        Run one mutating operation under its single-flight flag.

        Errors never escape: they come back as a failed OperationResult, with
        backend messages mapped to friendly text.
        """
        try:
            with self.single_flight(operation):
                return await self._perform(operation, action)
        except OperationInProgress as e:
            logger.debug("Ignoring duplicate %s request", operation)
            return OperationResult.fail(e)

    async def _perform(self, operation: str, action: Callable[[], Awaitable[Any]]) -> OperationResult:
        try:
            data = await action()
        except BackendError as e:
            logger.error("%s failed: %s", operation, e.message)
            return OperationResult.fail(e, friendly_error_message(e.message))
        except CourseworkError as e:
            logger.info("%s rejected: %s", operation, e.message)
            return OperationResult.fail(e)

        try:
            await self.refresh()
        except BackendError as e:
            logger.warning("Refresh after %s failed: %s", operation, e.message)
        return OperationResult.ok(data)

    async def request_create(
        self, fields: Union[AssignmentCreate, Dict[str, Any]]
    ) -> OperationResult[Assignment]:
        """Validate and create a new DRAFT assignment."""

        async def action():
            created = await self.backend.create_assignment(validate_create(fields))
            logger.info("Assignment created: %s", created.id)
            return created

        return await self._run("create", action)

    async def request_edit(
        self, assignment: Assignment, patch: Union[AssignmentUpdate, Dict[str, Any]]
    ) -> OperationResult[Assignment]:
        """Apply a patch to a DRAFT assignment."""

        async def action():
            if not can_edit(assignment):
                raise IllegalTransition("edit", assignment.status.value)
            return await self.backend.update_assignment(
                assignment.id, validate_update(assignment, patch)
            )

        return await self._run("edit", action)

    async def request_publish(self, assignment: Assignment) -> OperationResult[Assignment]:
        async def action():
            if not can_publish(assignment):
                raise IllegalTransition("publish", assignment.status.value)
            return await self.backend.publish_assignment(assignment.id)

        return await self._run("publish", action)

    async def request_close(self, assignment: Assignment) -> OperationResult[Assignment]:
        async def action():
            if not can_close(assignment):
                raise IllegalTransition("close", assignment.status.value)
            return await self.backend.close_assignment(assignment.id)

        return await self._run("close", action)

    async def request_delete(self, assignment_id: str) -> OperationResult[None]:
        """Delete a DRAFT assignment; unknown ids are looked up on the backend."""

        async def action():
            assignment = self.find(assignment_id)
            if assignment is None:
                assignment = await self.backend.get_assignment(assignment_id)
            if not can_delete(assignment):
                raise IllegalTransition("delete", assignment.status.value)
            await self.backend.delete_assignment(assignment_id)
            logger.info("Assignment deleted: %s", assignment_id)

        return await self._run("delete", action)

    async def request_grade(
        self,
        submission: Submission,
        assignment: Assignment,
        score: float,
        grader_id: str,
        feedback: Optional[str] = None,
        private_notes: Optional[str] = None,
    ) -> OperationResult[Submission]:
        """Grade one submission against its assignment's max score."""

        async def action():
            validate_grade(score, assignment.max_score, feedback, private_notes)
            request = GradeSubmissionRequest(
                submission_id=submission.id,
                grader_id=grader_id,
                score=score,
                feedback=feedback,
                private_notes=private_notes,
            )
            return await self.backend.grade_submission(request)

        return await self._run("grade", action)

"""
Assignment API routes.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from coursework.core.errors import BackendError
from coursework.core.logging import get_logger
from coursework.schemas import (
    Assignment,
    AssignmentCreate,
    AssignmentStatistics,
    AssignmentStatus,
    AssignmentUpdate,
    PersistedFile,
    Submission,
)
from coursework.services.assignment_rules import calculate_assignment_statistics
from coursework.services.backend import InMemoryAssignmentBackend
from coursework.api.deps import get_store, raise_http_error

logger = get_logger()

router = APIRouter(prefix="/assignments", tags=["Assignments"])


@router.get("", response_model=List[Assignment])
async def list_assignments(
    class_id: Optional[str] = Query(None),
    teacher_id: Optional[str] = Query(None),
    branch_id: Optional[str] = Query(None),
    status: Optional[AssignmentStatus] = Query(None),
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    """
    List assignments, newest due date first.
    """
    filters = {
        "class_id": class_id,
        "teacher_id": teacher_id,
        "branch_id": branch_id,
        "status": status,
    }
    return await store.list_assignments(filters)


@router.post("", response_model=Assignment, status_code=201)
async def create_assignment(
    fields: AssignmentCreate,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    """
    Create a DRAFT assignment.
    """
    try:
        return await store.create_assignment(fields)
    except BackendError as e:
        raise_http_error(e)


@router.get("/{assignment_id}", response_model=Assignment)
async def get_assignment(
    assignment_id: str,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    try:
        return await store.get_assignment(assignment_id)
    except BackendError as e:
        raise_http_error(e)


@router.patch("/{assignment_id}", response_model=Assignment)
async def update_assignment(
    assignment_id: str,
    patch: AssignmentUpdate,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    """
    Update fields of a DRAFT assignment. Only fields present in the body change.
    """
    try:
        return await store.update_assignment(assignment_id, patch)
    except BackendError as e:
        raise_http_error(e)


@router.post("/{assignment_id}/publish", response_model=Assignment)
async def publish_assignment(
    assignment_id: str,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    try:
        return await store.publish_assignment(assignment_id)
    except BackendError as e:
        raise_http_error(e)


@router.post("/{assignment_id}/close", response_model=Assignment)
async def close_assignment(
    assignment_id: str,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    try:
        return await store.close_assignment(assignment_id)
    except BackendError as e:
        raise_http_error(e)


@router.delete("/{assignment_id}")
async def delete_assignment(
    assignment_id: str,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    """
    Delete a DRAFT assignment and its attachments.
    """
    try:
        await store.delete_assignment(assignment_id)
    except BackendError as e:
        raise_http_error(e)

    logger.info(f"Deleted assignment via API: {assignment_id}")
    return {"message": "Assignment deleted"}


@router.get("/{assignment_id}/files", response_model=List[PersistedFile])
async def list_assignment_files(
    assignment_id: str,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    return await store.list_files(assignment_id)


@router.get("/{assignment_id}/submissions", response_model=List[Submission])
async def list_assignment_submissions(
    assignment_id: str,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    try:
        return await store.list_submissions(assignment_id)
    except BackendError as e:
        raise_http_error(e)


@router.get("/{assignment_id}/statistics", response_model=AssignmentStatistics)
async def get_assignment_statistics(
    assignment_id: str,
    total_students: int = Query(0, ge=0),
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    """
    Submission statistics for one assignment.
    """
    try:
        submissions = await store.list_submissions(assignment_id)
    except BackendError as e:
        raise_http_error(e)
    return calculate_assignment_statistics(total_students, submissions)

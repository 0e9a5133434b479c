"""
Submission API routes.
"""

from fastapi import APIRouter, Depends, HTTPException

from coursework.core.errors import BackendError, ValidationError
from coursework.schemas import GradeSubmissionRequest, Submission, SubmitAssignmentRequest
from coursework.services.backend import InMemoryAssignmentBackend
from coursework.services.validation import validate_submission
from coursework.api.deps import get_store, raise_http_error

router = APIRouter(prefix="/submissions", tags=["Submissions"])


@router.post("", response_model=Submission, status_code=201)
async def submit_assignment(
    request: SubmitAssignmentRequest,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    """
    Hand in a draft or final submission.
    """
    try:
        validate_submission(request)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)

    try:
        return await store.submit_assignment(request)
    except BackendError as e:
        raise_http_error(e)


@router.post("/{submission_id}/grade", response_model=Submission)
async def grade_submission(
    submission_id: str,
    request: GradeSubmissionRequest,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    """
    Grade a submission; late penalties are applied here.
    """
    try:
        return await store.grade_submission(
            request.model_copy(update={"submission_id": submission_id})
        )
    except BackendError as e:
        raise_http_error(e)

"""
Create an assignment and upload its staged attachments in one user action.
"""

from typing import Any, Dict, Optional, Union

from coursework.core.errors import BackendError, CommitInProgress, OperationInProgress
from coursework.core.logging import get_logger
from coursework.schemas.assignment import AssignmentCreate
from coursework.schemas.files import FailedUpload, StagingArea, UploadOutcome, UploadReport
from coursework.schemas.results import CreateOutcome, Notification, NotificationLevel, OperationResult
from coursework.services.lifecycle import AssignmentLifecycleController
from coursework.services.upload_coordinator import ProgressCallback, StagedUploadCoordinator

logger = get_logger()

CREATED_MESSAGE = "Assignment created successfully"
ALL_UPLOADS_FAILED_MESSAGE = (
    "Assignment created, but file upload failed. "
    "Please edit the assignment to upload files again."
)

# Failures the form shows itself: field errors, or a submit already running
SILENT_FAILURES = ("validation", "in_progress")


def upload_notification(report: UploadReport) -> Notification:
    """The single notification shown after a create whose uploads ran."""
    if report.outcome in (UploadOutcome.NO_FILES, UploadOutcome.ALL_SUCCEEDED):
        return Notification(level=NotificationLevel.SUCCESS, message=CREATED_MESSAGE)
    if report.outcome == UploadOutcome.ALL_FAILED:
        return Notification(level=NotificationLevel.WARNING, message=ALL_UPLOADS_FAILED_MESSAGE)
    return Notification(
        level=NotificationLevel.WARNING,
        message=(
            f"Assignment created. {report.succeeded_count} of {report.total} files uploaded, "
            f"{report.failed_count} failed."
        ),
    )


async def create_with_attachments(
    controller: AssignmentLifecycleController,
    coordinator: StagedUploadCoordinator,
    fields: Union[AssignmentCreate, Dict[str, Any]],
    area: StagingArea,
    uploaded_by: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> CreateOutcome:
    """
    Create the assignment, then commit the staged files against its new id.

    The "create" flag stays held until the uploads finish, so a second submit
    during the upload phase is refused without a network call. Upload failures
    never roll the create back. At most one notification is produced; field
    validation failures and ignored duplicates produce none, the field errors
    travel in result.validation_errors.
    """
    try:
        with controller.single_flight("create"):
            if coordinator.committing:
                error = CommitInProgress()
                return CreateOutcome(
                    result=OperationResult.fail(error),
                    notification=Notification(level=NotificationLevel.ERROR, message=error.message),
                )

            result = await controller.request_create(fields)
            if not result.success:
                return CreateOutcome(result=result, notification=_failure_notification(result))

            assignment = result.data
            report = await _commit(coordinator, area, assignment.id, uploaded_by, on_progress)

            if report.succeeded:
                try:
                    await controller.refresh()
                except BackendError as e:
                    logger.warning("Refresh after uploads failed: %s", e.message)
    except OperationInProgress as e:
        logger.debug("Ignoring duplicate create request")
        return CreateOutcome(result=OperationResult.fail(e))

    return CreateOutcome(result=result, report=report, notification=upload_notification(report))


def _failure_notification(result: OperationResult) -> Optional[Notification]:
    if result.error_kind in SILENT_FAILURES:
        return None
    return Notification(level=NotificationLevel.ERROR, message=result.error)


async def _commit(
    coordinator: StagedUploadCoordinator,
    area: StagingArea,
    assignment_id: str,
    uploaded_by: Optional[str],
    on_progress: Optional[ProgressCallback],
) -> UploadReport:
    try:
        return await coordinator.commit(area, assignment_id, uploaded_by, on_progress)
    except CommitInProgress as e:
        # Another commit started while the create was in flight
        logger.error("Uploads for %s skipped: %s", assignment_id, e.message)
        failed = [FailedUpload(key=f.key, file_name=f.file_name, error=e.message) for f in area.staged]
        return UploadReport.from_results([], failed)

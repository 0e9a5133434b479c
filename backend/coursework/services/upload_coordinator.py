"""
Staged file upload coordinator.

Files picked while an assignment is being created have nowhere to go yet:
the assignment id does not exist. They are validated and held in an
immutable StagingArea, then committed one at a time once the id is known.
In edit mode the same area also tracks the files already stored.
"""

import base64
import uuid
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from coursework.core.config import UploadsConfig, get_config
from coursework.core.errors import (
    BackendError,
    CapacityExceeded,
    CommitInProgress,
    ConfirmationRequired,
    FileRejected,
    NotFound,
)
from coursework.core.logging import get_logger
from coursework.schemas.files import (
    FailedUpload,
    FileContext,
    PersistedFile,
    StagedFile,
    StagingArea,
    UploadReport,
)
from coursework.services.assignment_rules import format_file_size
from coursework.services.backend import AssignmentBackend
from coursework.services.error_messages import friendly_error_message
from coursework.utils.helpers import get_file_extension

logger = get_logger()

ProgressCallback = Callable[[int, int], None]


class StagedUploadCoordinator:
    """Validates, stages and commits assignment attachments."""

    def __init__(self, backend: AssignmentBackend, config: Optional[UploadsConfig] = None):
        self.backend = backend
        self.config = config or get_config().uploads
        self._committing = False

    @property
    def committing(self) -> bool:
        return self._committing

    @property
    def max_attachments(self) -> int:
        return self.config.max_attachments

    def validate(
        self,
        file_name: str,
        file_size: int,
        mime_type: Optional[str] = None,
        allowed_extensions: Optional[List[str]] = None,
        max_size: Optional[int] = None,
    ) -> None:
        """
        Check a file against the extension allow-list and size limit.

        An empty allow-list accepts any extension. A MIME type outside the
        configured list is only logged.

        Raises:
            FileRejected: Naming the file and the violated constraint.
        """
        if allowed_extensions is None:
            allowed_extensions = self.config.allowed_extensions
        extensions = [e.lower().lstrip(".") for e in allowed_extensions]
        extension = get_file_extension(file_name)
        if extensions and extension not in extensions:
            raise FileRejected(
                file_name,
                f"File type .{extension or '?'} is not allowed. "
                f"Allowed types: {', '.join(extensions)}",
            )

        limit = min(max_size or self.config.default_max_file_size, self.config.max_allowed_file_size)
        if file_size <= 0:
            raise FileRejected(file_name, "File size must be positive")
        if file_size > limit:
            raise FileRejected(file_name, f"File size exceeds limit of {format_file_size(limit)}")

        if mime_type and mime_type not in self.config.allowed_mime_types:
            logger.warning("Unexpected MIME type %s for %s", mime_type, file_name)

    def stage(
        self,
        area: StagingArea,
        file_name: str,
        content: bytes,
        mime_type: Optional[str] = None,
        allowed_extensions: Optional[List[str]] = None,
        max_size: Optional[int] = None,
    ) -> StagingArea:
        """
        Validate a file and return a new area with it appended.

        Raises:
            CapacityExceeded: When staged plus persisted files would exceed the cap.
            FileRejected: On validation failure.
            CommitInProgress: While a commit is running.
        """
        if self._committing:
            raise CommitInProgress()
        if area.total >= self.max_attachments:
            raise CapacityExceeded(file_name, self.max_attachments)
        self.validate(file_name, len(content), mime_type, allowed_extensions, max_size)

        staged = StagedFile(
            key=uuid.uuid4().hex,
            file_name=file_name,
            file_size=len(content),
            mime_type=mime_type,
            content=base64.b64encode(content).decode("ascii"),
        )
        logger.debug("Staged %s (%s)", file_name, format_file_size(staged.file_size))
        return StagingArea(staged=area.staged + (staged,), persisted=area.persisted)

    def remove(self, area: StagingArea, key: str) -> StagingArea:
        """Return a new area without the staged file named by key."""
        if self._committing:
            raise CommitInProgress()
        if key not in area.keys():
            return area
        return StagingArea(
            staged=tuple(f for f in area.staged if f.key != key),
            persisted=area.persisted,
        )

    async def commit(
        self,
        area: StagingArea,
        assignment_id: str,
        uploaded_by: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        purpose: FileContext = FileContext.ASSIGNMENT_INSTRUCTION,
    ) -> UploadReport:
        """
        Upload every staged file against assignment_id, one after another.

        A failed upload does not stop the batch. There is no automatic retry;
        failed files stay staged in after_commit() for the user to retry.
        """
        if self._committing:
            raise CommitInProgress()

        succeeded: List[PersistedFile] = []
        failed: List[FailedUpload] = []
        total = len(area.staged)

        self._committing = True
        try:
            for index, staged in enumerate(area.staged):
                try:
                    persisted = await self.backend.upload_file(
                        base64.b64decode(staged.content),
                        staged.file_name,
                        assignment_id,
                        purpose=purpose,
                        mime_type=staged.mime_type,
                        uploaded_by=uploaded_by,
                    )
                    succeeded.append(persisted)
                    logger.info("Uploaded %s for assignment %s", staged.file_name, assignment_id)
                except Exception as e:
                    message = getattr(e, "message", None) or str(e)
                    logger.error("Failed to upload %s: %s", staged.file_name, message)
                    failed.append(
                        FailedUpload(key=staged.key, file_name=staged.file_name, error=message)
                    )
                if on_progress:
                    on_progress(index + 1, total)
        finally:
            self._committing = False

        report = UploadReport.from_results(succeeded, failed)
        logger.info(
            "Upload batch for %s: %s (%d succeeded, %d failed)",
            assignment_id, report.outcome.value, report.succeeded_count, report.failed_count,
        )
        return report

    def after_commit(self, area: StagingArea, report: UploadReport) -> StagingArea:
        """Area after a commit: successes become persisted, failures stay staged."""
        failed_keys = {f.key for f in report.failed}
        return StagingArea(
            staged=tuple(f for f in area.staged if f.key in failed_keys),
            persisted=area.persisted + tuple(report.succeeded),
        )

    async def load_persisted(self, area: StagingArea, assignment_id: str) -> StagingArea:
        """Fetch the files already stored for an assignment (edit mode)."""
        with _friendly_errors("Loading files"):
            return await self._load_persisted(area, assignment_id)

    async def _load_persisted(self, area: StagingArea, assignment_id: str) -> StagingArea:
        files = await self.backend.list_files(assignment_id)
        return StagingArea(staged=area.staged, persisted=tuple(files))

    async def delete_persisted(
        self, area: StagingArea, file_id: str, confirmed: bool = False
    ) -> StagingArea:
        """
        Delete a stored file immediately, then refetch the stored list.

        Raises:
            ConfirmationRequired: Unless confirmed is True.
            NotFound: When file_id is not among the area's persisted files.
            BackendError: When the backend call fails, with a friendly message.
        """
        if not confirmed:
            raise ConfirmationRequired(file_id)
        file = next((f for f in area.persisted if f.id == file_id), None)
        if file is None:
            raise NotFound("File not found")

        with _friendly_errors("Deleting file"):
            await self.backend.delete_file_by_id(file_id)
            logger.info("Deleted file %s (%s)", file_id, file.file_name)
            if file.context_id is None:
                return StagingArea(
                    staged=area.staged,
                    persisted=tuple(f for f in area.persisted if f.id != file_id),
                )
            return await self._load_persisted(area, file.context_id)

    async def signed_url(self, file: PersistedFile, ttl_seconds: Optional[int] = None) -> str:
        """Preview/download link for a stored file."""
        with _friendly_errors("Signing URL"):
            return await self.backend.get_signed_url(
                file.file_path, ttl_seconds or self.config.signed_url_ttl
            )


@contextmanager
def _friendly_errors(action: str) -> Iterator[None]:
    """Re-raise backend failures with the message shown to the user."""
    try:
        yield
    except BackendError as e:
        logger.error("%s failed: %s", action, e.message)
        message = friendly_error_message(e.message)
        if isinstance(e, NotFound):
            raise NotFound(message) from e
        raise BackendError(message, e.status_code) from e

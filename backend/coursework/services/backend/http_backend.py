"""
HTTP assignment backend built on httpx.

Talks to the REST API served by coursework.api (or any server exposing the
same routes). Failures surface as BackendError carrying the server's raw
message so callers can classify it.
"""

import asyncio
import base64
from typing import Any, Dict, List, Optional

import httpx

from coursework.core.config import BackendConfig, get_config
from coursework.core.errors import BackendError, NotFound
from coursework.core.logging import get_logger
from coursework.schemas.assignment import (
    Assignment,
    AssignmentCreate,
    AssignmentUpdate,
    GradeSubmissionRequest,
    Submission,
    SubmitAssignmentRequest,
)
from coursework.schemas.files import FileContext, PersistedFile

logger = get_logger()


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = None
    if isinstance(detail, list):
        # FastAPI request validation errors
        detail = "; ".join(str(d.get("msg", d)) for d in detail)
    return str(detail or response.text or f"HTTP {response.status_code}")


class HttpAssignmentBackend:
    """Assignment backend reached over HTTP."""

    def __init__(
        self,
        config: Optional[BackendConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the HTTP backend.

        Args:
            config: Backend section of the app config; defaults to get_config().backend.
            transport: Optional httpx transport (e.g. httpx.ASGITransport in tests).
        """
        self.config = config or get_config().backend
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, method: str, path: str, *, idempotent: bool = False, **kwargs: Any
    ) -> httpx.Response:
        """
        Send one request, retrying idempotent calls on transport and 5xx errors.

        Non-idempotent calls (create, upload, transitions) are sent exactly once.
        """
        client = await self._get_client()
        attempts = max(1, self.config.retry_attempts) if idempotent else 1

        for attempt in range(attempts):
            last_try = attempt == attempts - 1
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TimeoutException as e:
                if last_try:
                    raise BackendError(f"Request timeout: {method} {path}") from e
                logger.warning("Timeout on %s %s (attempt %d)", method, path, attempt + 1)
            except httpx.TransportError as e:
                if last_try:
                    raise BackendError(f"Network error: {e}") from e
                logger.warning("Network error on %s %s (attempt %d): %s", method, path, attempt + 1, e)
            else:
                if response.status_code < 400:
                    return response
                detail = _error_detail(response)
                if response.status_code == 404:
                    raise NotFound(detail)
                if response.status_code < 500 or last_try:
                    raise BackendError(detail, status_code=response.status_code)
                logger.warning(
                    "Server error on %s %s (attempt %d): %s %s",
                    method, path, attempt + 1, response.status_code, detail,
                )

            await asyncio.sleep(self.config.retry_backoff * (2 ** attempt))

        raise BackendError(f"Request failed: {method} {path}")

    # Assignments

    async def list_assignments(self, filters: Optional[Dict[str, Any]] = None) -> List[Assignment]:
        params = {
            k: getattr(v, "value", v) for k, v in (filters or {}).items() if v is not None
        }
        response = await self._request("GET", "/assignments", params=params, idempotent=True)
        return [Assignment.model_validate(item) for item in response.json()]

    async def get_assignment(self, assignment_id: str) -> Assignment:
        response = await self._request("GET", f"/assignments/{assignment_id}", idempotent=True)
        return Assignment.model_validate(response.json())

    async def create_assignment(self, fields: AssignmentCreate) -> Assignment:
        response = await self._request(
            "POST", "/assignments", json=fields.model_dump(mode="json")
        )
        return Assignment.model_validate(response.json())

    async def update_assignment(self, assignment_id: str, patch: AssignmentUpdate) -> Assignment:
        response = await self._request(
            "PATCH",
            f"/assignments/{assignment_id}",
            json=patch.model_dump(mode="json", exclude_unset=True),
        )
        return Assignment.model_validate(response.json())

    async def publish_assignment(self, assignment_id: str) -> Assignment:
        response = await self._request("POST", f"/assignments/{assignment_id}/publish")
        return Assignment.model_validate(response.json())

    async def close_assignment(self, assignment_id: str) -> Assignment:
        response = await self._request("POST", f"/assignments/{assignment_id}/close")
        return Assignment.model_validate(response.json())

    async def delete_assignment(self, assignment_id: str) -> None:
        await self._request("DELETE", f"/assignments/{assignment_id}", idempotent=True)

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
        payload = {
            "file_name": file_name,
            "content": base64.b64encode(content).decode("ascii"),
            "mime_type": mime_type,
            "context_type": FileContext(purpose).value,
            "context_id": owner_assignment_id,
            "uploaded_by": uploaded_by,
        }
        response = await self._request("POST", "/files", json=payload)
        return PersistedFile.model_validate(response.json())

    async def list_files(self, assignment_id: str) -> List[PersistedFile]:
        response = await self._request(
            "GET", f"/assignments/{assignment_id}/files", idempotent=True
        )
        return [PersistedFile.model_validate(item) for item in response.json()]

    async def get_signed_url(self, file_path: str, ttl_seconds: int) -> str:
        response = await self._request(
            "POST",
            "/files/signed-url",
            json={"file_path": file_path, "ttl_seconds": ttl_seconds},
            idempotent=True,
        )
        return response.json()["url"]

    async def delete_file_by_id(self, file_id: str) -> None:
        await self._request("DELETE", f"/files/{file_id}", idempotent=True)

    # Submissions

    async def submit_assignment(self, request: SubmitAssignmentRequest) -> Submission:
        response = await self._request("POST", "/submissions", json=request.model_dump(mode="json"))
        return Submission.model_validate(response.json())

    async def grade_submission(self, request: GradeSubmissionRequest) -> Submission:
        response = await self._request(
            "POST",
            f"/submissions/{request.submission_id}/grade",
            json=request.model_dump(mode="json"),
        )
        return Submission.model_validate(response.json())

    async def list_submissions(self, assignment_id: str) -> List[Submission]:
        response = await self._request(
            "GET", f"/assignments/{assignment_id}/submissions", idempotent=True
        )
        return [Submission.model_validate(item) for item in response.json()]

"""
File storage API routes.
"""

import base64
import binascii

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from coursework.core.config import get_config
from coursework.core.errors import BackendError
from coursework.core.logging import get_logger
from coursework.schemas import (
    PersistedFile,
    SignedUrlRequest,
    SignedUrlResponse,
    UploadFileRequest,
)
from coursework.services.backend import InMemoryAssignmentBackend
from coursework.api.deps import get_store, raise_http_error

logger = get_logger()

router = APIRouter(prefix="/files", tags=["Files"])


@router.post("", response_model=PersistedFile, status_code=201)
async def upload_file(
    request: UploadFileRequest,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    """
    Store one base64 encoded file against its owning assignment.
    """
    try:
        content = base64.b64decode(request.content, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Invalid file content encoding")

    limit = get_config().uploads.max_allowed_file_size
    if not content:
        raise HTTPException(status_code=400, detail="File is empty")
    if len(content) > limit:
        raise HTTPException(status_code=413, detail="File exceeds maximum allowed size")

    try:
        return await store.upload_file(
            content,
            request.file_name,
            request.context_id,
            purpose=request.context_type,
            mime_type=request.mime_type,
            uploaded_by=request.uploaded_by,
        )
    except BackendError as e:
        raise_http_error(e)


@router.post("/signed-url", response_model=SignedUrlResponse)
async def create_signed_url(
    request: SignedUrlRequest,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    """
    Issue a time-limited download link for a stored file.
    """
    ttl = request.ttl_seconds or get_config().uploads.signed_url_ttl
    try:
        url = await store.get_signed_url(request.file_path, ttl)
    except BackendError as e:
        raise_http_error(e)
    return SignedUrlResponse(url=url, expires_in=ttl)


@router.get("/download")
async def download_file(
    token: str = Query(...),
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    """
    Serve the file a signed token grants access to.
    """
    try:
        file_path = store.signer.verify(token)
    except ValueError as e:
        raise HTTPException(status_code=403, detail=str(e))

    try:
        file, content = store.read_file(file_path)
    except BackendError as e:
        raise_http_error(e)

    return Response(
        content=content,
        media_type=file.mime_type or "application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{file.file_name}"'},
    )


@router.delete("/{file_id}")
async def delete_file(
    file_id: str,
    store: InMemoryAssignmentBackend = Depends(get_store),
):
    try:
        await store.delete_file_by_id(file_id)
    except BackendError as e:
        raise_http_error(e)

    logger.info(f"Deleted file via API: {file_id}")
    return {"message": "File deleted"}

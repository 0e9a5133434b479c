"""
Shared dependencies for the reference API routes.
"""

from typing import NoReturn, Optional

from fastapi import HTTPException

from coursework.core.errors import BackendError
from coursework.services.backend import InMemoryAssignmentBackend

# Process-wide store behind the reference API
_store: Optional[InMemoryAssignmentBackend] = None


def get_store() -> InMemoryAssignmentBackend:
    """Get the in-memory backend serving API requests."""
    global _store
    if _store is None:
        _store = InMemoryAssignmentBackend()
    return _store


def reset_store() -> None:
    """Drop every stored record (tests and local resets)."""
    global _store
    _store = None


def raise_http_error(error: BackendError) -> NoReturn:
    """Translate a backend error into the HTTP error FastAPI returns."""
    raise HTTPException(status_code=error.status_code or 400, detail=error.message) from error

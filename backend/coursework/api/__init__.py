"""
API routes package initialization.
"""

from fastapi import APIRouter

from coursework.api.assignments import router as assignments_router
from coursework.api.files import router as files_router
from coursework.api.submissions import router as submissions_router

# Create main API router with v1 versioning
api_router = APIRouter(prefix="/api/v1")

# Include all sub-routers
api_router.include_router(assignments_router)
api_router.include_router(files_router)
api_router.include_router(submissions_router)

__all__ = ["api_router"]

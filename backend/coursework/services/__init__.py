"""
Services package initialization.
"""

from coursework.services.backend import AssignmentBackend, get_backend
from coursework.services.error_messages import friendly_error_message
from coursework.services.lifecycle import (
    AssignmentLifecycleController,
    can_edit,
    can_publish,
    can_close,
    can_delete,
)
from coursework.services.upload_coordinator import StagedUploadCoordinator
from coursework.services.workflow import create_with_attachments

__all__ = [
    "AssignmentBackend",
    "get_backend",
    "friendly_error_message",
    "AssignmentLifecycleController",
    "can_edit",
    "can_publish",
    "can_close",
    "can_delete",
    "StagedUploadCoordinator",
    "create_with_attachments",
]

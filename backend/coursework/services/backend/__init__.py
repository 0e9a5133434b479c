"""
Assignment backend implementations. The lifecycle controller and upload
coordinator use the AssignmentBackend interface via get_backend(config).
"""

from .interface import AssignmentBackend
from .http_backend import HttpAssignmentBackend
from .memory_backend import InMemoryAssignmentBackend
from .factory import get_backend, list_backends

__all__ = [
    "AssignmentBackend",
    "HttpAssignmentBackend",
    "InMemoryAssignmentBackend",
    "get_backend",
    "list_backends",
]

"""
Backend factory for creating assignment backend instances.
"""

from typing import Optional

from coursework.core.config import AppConfig, get_config

from .http_backend import HttpAssignmentBackend
from .interface import AssignmentBackend
from .memory_backend import InMemoryAssignmentBackend

BACKEND_MAP = {
    "http": HttpAssignmentBackend,
    "memory": InMemoryAssignmentBackend,
}


def get_backend(config: Optional[AppConfig] = None) -> AssignmentBackend:
    """
    Create the backend named by backend.kind in config.

    Raises:
        ValueError: If the kind is unknown.
    """
    config = config or get_config()
    kind = config.backend.kind.lower()
    if kind == "http":
        return HttpAssignmentBackend(config.backend)
    if kind == "memory":
        return InMemoryAssignmentBackend()
    raise ValueError(
        f"Unknown backend kind: {config.backend.kind}. "
        f"Available backends: {', '.join(BACKEND_MAP.keys())}"
    )


def list_backends() -> list[str]:
    """List all available backend kinds."""
    return list(BACKEND_MAP.keys())

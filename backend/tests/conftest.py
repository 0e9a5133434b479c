"""
Test configuration and fixtures
"""

import inspect
import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Keep test runs away from a developer's config.yaml and logs/
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="coursework_logs_"))
os.environ["COURSEWORK_CONFIG"] = os.path.join(os.path.dirname(__file__), "missing-config.yaml")

from cryptography.fernet import Fernet  # noqa: E402

from coursework.core.config import UploadsConfig  # noqa: E402
from coursework.core.errors import BackendError  # noqa: E402
from coursework.core.security import UrlSigner  # noqa: E402
from coursework.schemas import Assignment, AssignmentStatus  # noqa: E402
from coursework.services.backend import InMemoryAssignmentBackend  # noqa: E402
from coursework.services.lifecycle import AssignmentLifecycleController  # noqa: E402
from coursework.services.upload_coordinator import StagedUploadCoordinator  # noqa: E402


class RecordingBackend:
    """
    Wraps a backend and records every call made through it.

    failing_uploads holds zero-based positions of upload_file calls that
    fail; errors maps a method name to the error it raises. gate, when set,
    holds calls until the event fires: every call, or only those named in
    gated.
    """

    def __init__(self, inner):
        self.inner = inner
        self.calls = []
        self.failing_uploads = set()
        self.errors = {}
        self.gate = None
        self.gated = None
        self._uploads_seen = 0

    def count(self, name: str) -> int:
        return self.calls.count(name)

    def __getattr__(self, name):
        attr = getattr(self.inner, name)
        if not inspect.iscoroutinefunction(attr):
            return attr

        async def call(*args, **kwargs):
            self.calls.append(name)
            if self.gate is not None and (self.gated is None or name in self.gated):
                await self.gate.wait()
            if name in self.errors:
                raise self.errors[name]
            if name == "upload_file":
                position = self._uploads_seen
                self._uploads_seen += 1
                if position in self.failing_uploads:
                    raise BackendError("Storage error: upload rejected", status_code=500)
            return await attr(*args, **kwargs)

        return call


@pytest.fixture(scope="session")
def signer():
    """URL signer with a random key (skips the slow key derivation)."""
    return UrlSigner(Fernet.generate_key())


@pytest.fixture
def store(signer):
    """Fresh in-memory backend."""
    return InMemoryAssignmentBackend(signer=signer)


@pytest.fixture
def backend(store):
    """In-memory backend wrapped so tests can count calls."""
    return RecordingBackend(store)


@pytest.fixture
def uploads_config():
    return UploadsConfig()


@pytest.fixture
def controller(backend):
    return AssignmentLifecycleController(backend)


@pytest.fixture
def coordinator(backend, uploads_config):
    return StagedUploadCoordinator(backend, uploads_config)


@pytest.fixture
def future_due():
    return datetime.now(timezone.utc) + timedelta(days=7)


@pytest.fixture
def assignment_fields(future_due):
    """Minimal valid create payload."""
    return {
        "title": "Essay: My Summer",
        "description": "Write 300 words about your summer.",
        "class_id": "class-1",
        "teacher_id": "teacher-1",
        "branch_id": "branch-1",
        "max_score": 100,
        "due_date": future_due.isoformat(),
    }


@pytest.fixture
def make_assignment(future_due):
    """Factory for Assignment records in any status (no backend involved)."""

    def _make(status=AssignmentStatus.DRAFT, **overrides):
        data = {
            "id": "a-1",
            "title": "Worksheet 1",
            "status": status,
            "max_score": 100,
            "due_date": future_due,
        }
        data.update(overrides)
        return Assignment(**data)

    return _make


@pytest.fixture
def app(store):
    """Reference API app serving the test's in-memory store."""
    from main import app as fastapi_app
    from coursework.api.deps import get_store

    fastapi_app.dependency_overrides[get_store] = lambda: store
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """FastAPI test client."""
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client

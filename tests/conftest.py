"""Pytest fixtures: test client wired to a per-test temporary storage."""
import os
import tempfile

import pytest
from fastapi.testclient import TestClient

# Must be set before the app is imported (settings are read at import time)
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="mockapi-test-"))
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "10000")

from app.core.storage import UploadStorage, get_storage
from app.main import app


@pytest.fixture
def storage(tmp_path) -> UploadStorage:
    return UploadStorage(tmp_path, content_dir=tmp_path / "uploads")


@pytest.fixture(scope="function")
def client(storage):
    """TestClient whose get_storage dependency points at the tmp_path storage."""
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

"""Shared pytest fixtures for all tests."""

import os
import tempfile

# config.py creates its directories on import; keep them out of the repo.
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="relay-test-"))

import pytest
from fastapi.testclient import TestClient

from api.upload.services import upload_service
from context import RelayContext
from main import create_app


@pytest.fixture
def context(tmp_path):
    """
    Create an isolated relay context.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        RelayContext storing files under a temporary directory
    """
    ctx = RelayContext(files_dir=tmp_path / "files", auto_delete_seconds=60)
    yield ctx
    ctx.close()


@pytest.fixture
def client(context):
    """Create FastAPI test client sharing one event loop across requests."""
    with TestClient(create_app(context)) as test_client:
        yield test_client


@pytest.fixture
def make_upload(context):
    """Return a coroutine that uploads chunks in index order and returns the id."""

    async def _upload(chunks, downloads="1", filename="file.bin"):
        size = sum(len(c) for c in chunks)
        created = await upload_service.create_upload(context, str(size), filename, downloads)
        for index, data in enumerate(chunks):
            await upload_service.submit_chunk(context, created.id, index, data)
        return created.id

    return _upload

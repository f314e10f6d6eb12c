import pytest
import httpx
from fastapi import Request
from fastapi.testclient import TestClient
from main import app
from app.api.dependencies import get_storage_backend
from app.client.api import UploadsClient
from app.core.config import settings
from app.services.storage import LocalStorageBackend

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"0" * 64

@pytest.fixture
def png_bytes():
    return PNG_BYTES

@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"

@pytest.fixture
def local_storage(upload_dir):
    """Route every request to a local backend rooted in a temp directory."""
    def override(request: Request):
        return LocalStorageBackend(
            upload_dir,
            base_url=str(request.base_url),
            url_path=settings.UPLOADS_URL_PATH,
        )

    app.dependency_overrides[get_storage_backend] = override
    yield upload_dir
    app.dependency_overrides.clear()

@pytest.fixture
def test_client(local_storage):
    """Create a test client for the FastAPI app."""
    return TestClient(app)

@pytest.fixture
def override_storage():
    """Install a specific backend instance for the duration of a test."""
    def install(backend):
        app.dependency_overrides[get_storage_backend] = lambda: backend
    yield install
    app.dependency_overrides.clear()

@pytest.fixture
def make_uploads_client():
    """
    Build an UploadsClient that talks to the app in-process.
    Must be called inside a running event loop.
    """
    def factory():
        http_client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://testserver",
        )
        return UploadsClient(base_url="http://testserver", http_client=http_client)
    return factory

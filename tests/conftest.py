"""
Shared pytest fixtures for fileupload tests.

Provides:
- Storage fixtures (temp storage root, defaults, service)
- Upload source factories
- API client fixtures backed by a temp storage directory
"""

import base64
import hashlib
import io
import sys
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fileupload.app_factory import create_app
from fileupload.config import FileUploadSettings
from fileupload.storage import StorageDefaults, StorageService, UploadRequestParams


# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def data_uri(data: bytes, subtype: str = "png") -> str:
    return f"data:image/{subtype};base64,{base64.b64encode(data).decode('ascii')}"


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Storage directory for one test (not created up front)."""
    return tmp_path / "uploads"


@pytest.fixture
def defaults(storage_root: Path) -> StorageDefaults:
    return StorageDefaults(storage_directory=str(storage_root), uri_access_prefix="/static")


@pytest.fixture
def storage(defaults: StorageDefaults) -> StorageService:
    """StorageService writing under the temp storage root, small chunks."""
    return StorageService(defaults, chunk_size=4)


@pytest.fixture
def params() -> UploadRequestParams:
    return UploadRequestParams(sub_directory="2024/01/01")


@pytest.fixture
def make_upload() -> Callable[..., UploadFile]:
    """
    Factory for in-memory multipart uploads.

    Usage:
        upload = make_upload(b"bytes", "name.png")
    """
    def _make(data: bytes, filename: str = "upload.bin") -> UploadFile:
        return UploadFile(file=io.BytesIO(data), filename=filename)

    return _make


def stored_files(root: Path) -> list[Path]:
    """All regular files under root, temp files included."""
    if not root.exists():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file())


# ============================================================================
# API Client Fixtures
# ============================================================================

@pytest.fixture
def settings(storage_root: Path) -> FileUploadSettings:
    return FileUploadSettings(
        environment="testing",
        storage_directory=storage_root,
        uri_access_prefix="/resource/static",
    )


@pytest.fixture
def client(settings: FileUploadSettings) -> Generator[TestClient, None, None]:
    """TestClient for an app storing into the temp storage root."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client

"""
Pytest Configuration and Test Fixtures for the Spaces File API

This module provides:
- Storage and application settings for an isolated test environment
- An in-memory S3 client that behaves like boto3 for the calls the service
  makes (put/get/head/list/delete) and raises real botocore ClientErrors
- StorageClient and FileService instances wired to that in-memory store
- FastAPI TestClient and httpx AsyncClient with dependency overrides
"""

import hashlib
import io

from collections.abc import AsyncGenerator, Generator
from datetime import UTC, datetime
from typing import Any

import pytest

from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from spaces_api.api.v1.spaces import get_file_service
from spaces_api.config import Settings, StorageSettings, get_settings
from spaces_api.core.storage import StorageClient
from spaces_api.main import app
from spaces_api.services.file_service import FileService


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "api: mark test as HTTP endpoint test")


# ==============================================================================
# In-memory S3 client
# ==============================================================================


def client_error(code: str, message: str, operation: str, status: int = 400) -> ClientError:
    """Build a botocore ClientError shaped like the ones S3 returns."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": message},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class InMemoryS3Client:
    """
    Minimal stand-in for a boto3 S3 client backed by a dict.

    Every call is recorded in ``calls`` as ``(operation, params)`` so tests
    can assert which store requests were made.
    """

    def __init__(self) -> None:
        self.objects: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.failures: dict[str, ClientError] = {}

    def fail(self, operation: str, error: ClientError) -> None:
        """Make the next and all later calls of ``operation`` raise ``error``."""
        self.failures[operation] = error

    def _record(self, operation: str, params: dict[str, Any]) -> None:
        self.calls.append((operation, params))
        if operation in self.failures:
            raise self.failures[operation]

    def add_object(self, key: str, data: bytes, content_type: str = "text/plain") -> None:
        self.objects[key] = {
            "data": data,
            "content_type": content_type,
            "etag": f'"{hashlib.md5(data).hexdigest()}"',
            "last_modified": datetime.now(UTC),
        }

    def put_object(self, **params: Any) -> dict[str, Any]:
        self._record("put_object", params)
        body = params["Body"]
        data = body.read() if hasattr(body, "read") else bytes(body)
        self.add_object(params["Key"], data, params.get("ContentType", "binary/octet-stream"))
        return {"ETag": self.objects[params["Key"]]["etag"]}

    def get_object(self, **params: Any) -> dict[str, Any]:
        self._record("get_object", params)
        obj = self.objects.get(params["Key"])
        if obj is None:
            raise client_error("NoSuchKey", "The specified key does not exist.", "GetObject", 404)
        return {
            "Body": StreamingBody(io.BytesIO(obj["data"]), len(obj["data"])),
            "ContentLength": len(obj["data"]),
            "ContentType": obj["content_type"],
            "ETag": obj["etag"],
            "LastModified": obj["last_modified"],
        }

    def head_object(self, **params: Any) -> dict[str, Any]:
        self._record("head_object", params)
        obj = self.objects.get(params["Key"])
        if obj is None:
            raise client_error("404", "Not Found", "HeadObject", 404)
        return {
            "ContentLength": len(obj["data"]),
            "ContentType": obj["content_type"],
            "ETag": obj["etag"],
            "LastModified": obj["last_modified"],
        }

    def list_objects_v2(self, **params: Any) -> dict[str, Any]:
        self._record("list_objects_v2", params)
        prefix = params.get("Prefix", "")
        keys = sorted(key for key in self.objects if key.startswith(prefix))
        response: dict[str, Any] = {"IsTruncated": False, "KeyCount": len(keys)}
        if keys:
            response["Contents"] = [
                {
                    "Key": key,
                    "Size": len(self.objects[key]["data"]),
                    "ETag": self.objects[key]["etag"],
                    "LastModified": self.objects[key]["last_modified"],
                }
                for key in keys
            ]
        return response

    def delete_object(self, **params: Any) -> dict[str, Any]:
        self._record("delete_object", params)
        self.objects.pop(params["Key"], None)
        return {}

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def storage_settings() -> StorageSettings:
    """Storage settings for a test Space in nyc3."""
    return StorageSettings(
        _env_file=None,
        access_key="test-access-key",
        secret_key="test-secret-key",
        region="nyc3",
        bucket_name="test-bucket",
        endpoint_url_template="https://{region}.digitaloceanspaces.com",
    )


@pytest.fixture
def app_settings() -> Settings:
    """Application settings with a 1 MB upload limit."""
    return Settings(_env_file=None, app_env="testing", max_upload_size_mb=1)


# ==============================================================================
# Storage / Service Fixtures
# ==============================================================================


@pytest.fixture
def fake_s3() -> InMemoryS3Client:
    return InMemoryS3Client()


@pytest.fixture
def storage_client(storage_settings: StorageSettings, fake_s3: InMemoryS3Client) -> StorageClient:
    return StorageClient(storage_settings, s3_client=fake_s3)


@pytest.fixture
def file_service(storage_client: StorageClient, storage_settings: StorageSettings) -> FileService:
    return FileService(storage_client, storage_settings)


# ==============================================================================
# Client Fixtures
# ==============================================================================


@pytest.fixture
def test_client(file_service: FileService, app_settings: Settings) -> Generator[TestClient, None, None]:
    """
    TestClient with the file service and settings dependencies overridden.

    The lifespan is not entered, so no SPACES_* environment is needed.
    """
    app.dependency_overrides[get_file_service] = lambda: file_service
    app.dependency_overrides[get_settings] = lambda: app_settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def async_test_client(
    file_service: FileService, app_settings: Settings
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over ASGI transport, for streaming responses."""
    app.dependency_overrides[get_file_service] = lambda: file_service
    app.dependency_overrides[get_settings] = lambda: app_settings
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def pdf_content() -> bytes:
    """Small PDF-looking payload."""
    return b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"

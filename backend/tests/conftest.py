from __future__ import annotations

import sys
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from image_relay.core.config import get_settings  # noqa: E402
from image_relay.main import create_app  # noqa: E402
from image_relay.services.storage import StorageError, get_storage  # noqa: E402


TEST_API_KEY = "test-api-key"
TEST_BUCKET = "test-bucket"
TEST_BUCKET_URL = "https://cdn.example.test"
TEST_SUB_PATH = "uploaded_images"


class FakeStorage:
    """Records puts in order; raises StorageError on the put numbered `fail_on` (1-based)."""

    def __init__(self, fail_on: int | None = None) -> None:
        self.bucket = TEST_BUCKET
        self.fail_on = fail_on
        self.calls = 0
        self.objects: list[tuple[str, bytes, str | None]] = []

    def put_object(self, key: str, body: bytes, content_type: str | None = None) -> None:
        self.calls += 1
        if self.fail_on is not None and self.calls == self.fail_on:
            raise StorageError(f"PutObject s3://{self.bucket}/{key} failed: AccessDenied")
        self.objects.append((key, body, content_type))


@pytest.fixture(autouse=True)
def relay_env(monkeypatch, tmp_path) -> Iterator[None]:
    # Keep a developer's .env out of the test run.
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("API_KEY", TEST_API_KEY)
    monkeypatch.setenv("AWS_S3_BUCKET", TEST_BUCKET)
    monkeypatch.setenv("BUCKET_URL", TEST_BUCKET_URL)
    monkeypatch.setenv("BUCKET_SUB_PATH", TEST_SUB_PATH)
    monkeypatch.setenv("CORS_ORIGINS", "*")
    get_settings.cache_clear()
    get_storage.cache_clear()

    yield

    get_settings.cache_clear()
    get_storage.cache_clear()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def app(storage: FakeStorage) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_storage] = lambda: storage
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://relay.test") as c:
        yield c

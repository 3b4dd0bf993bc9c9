from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from starlette.datastructures import UploadFile

from image_relay.services.storage import ObjectStorage


logger = logging.getLogger(__name__)

KEY_TIMESTAMP_FORMAT = "%d-%m-%Y_%H:%M:%S"


class MalformedUploadError(ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class UploadField:
    category: str
    file_name: str
    upload: UploadFile

    @property
    def content_type(self) -> str | None:
        return self.upload.content_type

    async def read(self) -> bytes:
        return await self.upload.read()


def utcnow() -> datetime:
    return datetime.now(UTC)


def build_object_key(*, sub_path: str, category: str, file_name: str, now: datetime) -> str:
    """
    <sub_path>/images/<category>/<DD-MM-YYYY_HH:MM:SS>_<category>_<file_name>

    The category directory is left out when the category is blank.
    """
    request_path = f"{category.rstrip('/')}/" if category.strip() else ""
    timestamp = now.strftime(KEY_TIMESTAMP_FORMAT)
    return f"{sub_path}/images/{request_path}{timestamp}_{category}_{file_name}"


def object_url(base_url: str, key: str) -> str:
    return f"{base_url}/{key}"


def result_key(file_name: str, category: str) -> str:
    return f"{file_name}_{category}"


def collect_upload_fields(items: Iterable[tuple[str, Any]]) -> list[UploadField]:
    """
    Turn parsed multipart items into upload fields, in arrival order.

    Only part headers are checked here; payloads stay spooled until their put,
    so a malformed request never reaches the object store.
    """
    fields: list[UploadField] = []
    for name, value in items:
        if not isinstance(value, UploadFile):
            raise MalformedUploadError(f"Field '{name}' is not a file")
        if not value.filename:
            raise MalformedUploadError(f"Field '{name}' is missing a file name")
        fields.append(UploadField(category=name, file_name=value.filename, upload=value))
    return fields


async def relay_uploads(
    fields: Iterable[UploadField],
    *,
    storage: ObjectStorage,
    sub_path: str,
    base_url: str,
    clock: Callable[[], datetime] | None = None,
) -> dict[str, str]:
    """
    Read and put every field, one at a time, and map "<file>_<category>" to its URL.

    Fail-fast: the first StorageError propagates unchanged. Objects stored before
    the failure stay in the bucket and later fields are never sent.
    """
    now = clock or utcnow
    urls: dict[str, str] = {}
    for field in fields:
        key = build_object_key(
            sub_path=sub_path,
            category=field.category,
            file_name=field.file_name,
            now=now(),
        )
        data = await field.read()
        await asyncio.to_thread(storage.put_object, key, data, field.content_type)

        url = object_url(base_url, key)
        logger.info("Uploaded file URL: %s", url)
        urls[result_key(field.file_name, field.category)] = url
    return urls

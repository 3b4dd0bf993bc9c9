from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from image_relay.core.config import Settings, get_settings


logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


def create_s3_client(settings: Settings) -> Any:
    # Credentials come from the default provider chain (env, shared config, instance role).
    return boto3.client(
        "s3",
        region_name=settings.aws_region,
        endpoint_url=settings.aws_s3_endpoint_url,
    )


class ObjectStorage:
    """Write-only view of a single bucket."""

    def __init__(self, bucket: str, client: Any) -> None:
        self.bucket = bucket
        self._client = client

    def put_object(self, key: str, body: bytes, content_type: str | None = None) -> None:
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Body": body}
        if content_type:
            params["ContentType"] = content_type
        try:
            self._client.put_object(**params)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"PutObject s3://{self.bucket}/{key} failed: {e}") from e
        logger.debug("Stored s3://%s/%s (%s bytes)", self.bucket, key, len(body))


@lru_cache
def get_storage() -> ObjectStorage:
    settings = get_settings()
    return ObjectStorage(settings.aws_s3_bucket, create_s3_client(settings))

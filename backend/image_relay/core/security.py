from __future__ import annotations

import secrets

from fastapi import Header

from image_relay.core.config import get_settings


API_KEY_HEADER = "x-api-key"


class ApiKeyError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def require_api_key(api_key: str | None = Header(None, alias=API_KEY_HEADER)) -> str:
    settings = get_settings()
    # An empty header is present but wrong, not missing.
    if api_key is None:
        raise ApiKeyError("API key is missing")

    # Header values arrive latin-1 decoded; compare_digest only accepts ASCII str.
    if not api_key.isascii():
        raise ApiKeyError("Invalid API key format")

    if not secrets.compare_digest(api_key.encode("ascii"), settings.api_key.encode("utf-8")):
        raise ApiKeyError("Unauthorized")
    return api_key

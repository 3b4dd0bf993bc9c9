from __future__ import annotations

from pydantic import BaseModel, Field, RootModel


class UploadOut(RootModel[dict[str, str]]):
    """Public URL per uploaded file, keyed by "<file_name>_<category>"."""


class ErrorOut(BaseModel):
    error: str = Field(..., description="Why the request was rejected")


class StorageErrorOut(BaseModel):
    err: str = Field(..., description="Generic upload failure message")

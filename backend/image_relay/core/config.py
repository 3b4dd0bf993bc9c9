from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_BUCKET = "my-bucket-name"
DEFAULT_SUB_PATH = "uploaded_images"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # No fallback: the service refuses to start without a shared secret.
    api_key: str = Field(..., alias="API_KEY")

    # --- Object storage ---
    aws_s3_bucket: str = Field(DEFAULT_BUCKET, alias="AWS_S3_BUCKET")
    # Public URL of the bucket; defaults to the bucket name.
    bucket_url: str | None = Field(None, alias="BUCKET_URL")
    bucket_sub_path: str = Field(DEFAULT_SUB_PATH, alias="BUCKET_SUB_PATH")
    aws_region: str | None = Field(None, alias="AWS_REGION")
    aws_s3_endpoint_url: str | None = Field(None, alias="AWS_S3_ENDPOINT_URL")

    # --- HTTP ---
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")
    cors_origins: str = Field("*", alias="CORS_ORIGINS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("api_key", mode="before")
    @classmethod
    def _require_api_key(cls, v: object) -> object:
        if isinstance(v, str):
            if not v.strip():
                raise ValueError("API_KEY must not be empty")
            if v != v.strip():
                raise ValueError("API_KEY must not have leading or trailing whitespace")
        return v

    @field_validator("bucket_url", "aws_region", "aws_s3_endpoint_url", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        if isinstance(v, str):
            value = v.strip().rstrip("/")
            return value or None
        return v

    @field_validator("bucket_sub_path", mode="before")
    @classmethod
    def _normalize_sub_path(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().strip("/") or DEFAULT_SUB_PATH
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    @property
    def public_base_url(self) -> str:
        return self.bucket_url or self.aws_s3_bucket

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()

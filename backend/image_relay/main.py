from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from image_relay.api.router import api_router
from image_relay.core.config import get_settings
from image_relay.core.logging_config import configure_logging
from image_relay.core.security import ApiKeyError
from image_relay.services.storage import StorageError
from image_relay.services.uploads import MalformedUploadError


logger = logging.getLogger(__name__)

WELCOME_TEXT = "welcome to Image upload api"
UPLOAD_FAILED_TEXT = "an error occurred during image upload"


async def api_key_error_handler(_request: Request, exc: ApiKeyError) -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": exc.message})


async def malformed_upload_handler(_request: Request, exc: MalformedUploadError) -> JSONResponse:
    logger.info("Rejected malformed upload: %s", exc.message)
    return JSONResponse(status_code=400, content={"error": exc.message})


async def storage_error_handler(_request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Error occurred during image upload: %s", exc)
    return JSONResponse(status_code=500, content={"err": UPLOAD_FAILED_TEXT})


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Image upload relay", version="1.0")

    origins = settings.cors_origin_list
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            # Browsers reject credentialed responses for a wildcard origin.
            allow_credentials="*" not in origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        return WELCOME_TEXT

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    app.add_exception_handler(ApiKeyError, api_key_error_handler)
    app.add_exception_handler(MalformedUploadError, malformed_upload_handler)
    app.add_exception_handler(StorageError, storage_error_handler)

    app.include_router(api_router)
    logger.info(
        "Relaying uploads to bucket %s under %s/",
        settings.aws_s3_bucket,
        settings.bucket_sub_path,
    )
    return app

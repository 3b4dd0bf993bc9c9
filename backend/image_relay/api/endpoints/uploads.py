from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from image_relay.core.config import get_settings
from image_relay.core.security import require_api_key
from image_relay.schemas.uploads import ErrorOut, StorageErrorOut, UploadOut
from image_relay.services.storage import ObjectStorage, get_storage
from image_relay.services.uploads import MalformedUploadError, collect_upload_fields, relay_uploads


router = APIRouter()

# The body is parsed by hand, so the multipart shape is declared for OpenAPI here.
UPLOAD_REQUEST_BODY = {
    "required": True,
    "content": {
        "multipart/form-data": {
            "schema": {
                "type": "object",
                "description": "Any number of file parts; each field name is used as the category.",
                "additionalProperties": {"type": "string", "format": "binary"},
            }
        }
    },
}


@router.post(
    "/upload",
    response_model=UploadOut,
    dependencies=[Depends(require_api_key)],
    openapi_extra={"requestBody": UPLOAD_REQUEST_BODY},
    responses={
        400: {"model": ErrorOut},
        401: {"model": ErrorOut},
        500: {"model": StorageErrorOut},
    },
)
async def upload_images(request: Request, storage: ObjectStorage = Depends(get_storage)) -> dict[str, str]:
    settings = get_settings()

    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        raise MalformedUploadError("Expected a multipart/form-data request body")

    try:
        form = await request.form()
    except MultiPartException as e:
        raise MalformedUploadError(e.message) from e
    except StarletteHTTPException as e:
        # Starlette re-raises parser errors as HTTP 400 when running inside an app.
        raise MalformedUploadError(str(e.detail)) from e

    try:
        fields = collect_upload_fields(form.multi_items())
        return await relay_uploads(
            fields,
            storage=storage,
            sub_path=settings.bucket_sub_path,
            base_url=settings.public_base_url,
        )
    finally:
        await form.close()

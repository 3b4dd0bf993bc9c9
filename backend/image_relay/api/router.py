from __future__ import annotations

from fastapi import APIRouter

from image_relay.api.endpoints import uploads


api_router = APIRouter()

api_router.include_router(uploads.router, tags=["uploads"])

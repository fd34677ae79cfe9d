"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from arforge.api import generate, health, models, upload

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(generate.router)
api_router.include_router(upload.router)
api_router.include_router(models.router)

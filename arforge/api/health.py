"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from arforge import __version__
from arforge.engine.registry import get_registry
from arforge.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        extractors_registered=get_registry().count,
    )

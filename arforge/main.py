"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from arforge import __version__
from arforge.config import settings
from arforge.errors import AssetPipelineError, PackagingError

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.arforge_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


async def pipeline_error_handler(request: Request, exc: AssetPipelineError) -> JSONResponse:
    status = 500 if isinstance(exc, PackagingError) else 400
    logger.warning("%s %s → %d: %s", request.method, request.url.path, status, exc)
    return JSONResponse(status_code=status, content={"error": exc.message, "stage": exc.stage})


def create_app() -> FastAPI:
    app = FastAPI(
        title="ARForge",
        description="Text, logo and photo inputs to shareable AR-ready GLB models",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AssetPipelineError, pipeline_error_handler)

    # Import extractor modules so @extractor decorators fire
    import arforge.engine.extractors  # noqa: F401

    from arforge.api.router import api_router
    from arforge.api.viewer import router as viewer_router

    app.include_router(api_router)
    app.include_router(viewer_router)

    return app


app = create_app()

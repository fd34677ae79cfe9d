"""POST /api/generate-{text,logo,photo} — run the pipeline and publish the GLB."""

from __future__ import annotations

import asyncio
import functools
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from arforge.config import Settings
from arforge.dependencies import get_base_url, get_pipeline, get_settings, get_store
from arforge.engine.context import GenerationInput, PhotoInput, SvgInput, TextInput
from arforge.engine.packager import GLB_CONTENT_TYPE
from arforge.engine.pipeline import Pipeline
from arforge.errors import UnsupportedInput
from arforge.models.requests import GenerateTextRequest
from arforge.models.responses import ShareResponse
from arforge.storage.blob_store import LocalBlobStore, model_key, new_asset_id
from arforge.storage.share import blob_url, qr_data_url, view_url

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_upload(file: UploadFile | None, cfg: Settings, missing: str) -> bytes:
    """Bytes of an uploaded form file; UnsupportedInput when absent, empty or too large."""
    if file is None:
        raise UnsupportedInput(missing, stage="input")
    data = await file.read()
    if not data:
        raise UnsupportedInput(missing, stage="input")
    if len(data) > cfg.max_upload_bytes:
        raise UnsupportedInput(
            f"File is {len(data)} bytes; the limit is {cfg.max_upload_bytes}", stage="input"
        )
    return data


def publish(
    data: bytes,
    store: LocalBlobStore,
    base: str,
    cfg: Settings,
    ext: str = ".glb",
    content_type: str = GLB_CONTENT_TYPE,
) -> ShareResponse:
    """Store a model under a fresh id and build its share links."""
    asset_id = new_asset_id()
    key = model_key(asset_id, ext)
    store.put(key, data, content_type)
    viewer = view_url(base, asset_id)
    return ShareResponse(
        qr_code=qr_data_url(viewer, size=cfg.qr_size, margin=cfg.qr_margin),
        view_url=viewer,
        id=asset_id,
        blob_url=blob_url(base, key),
    )


async def _generate(
    request: GenerationInput,
    pipeline: Pipeline,
    store: LocalBlobStore,
    base: str,
    cfg: Settings,
) -> ShareResponse:
    # CPU-bound; keep the event loop free
    loop = asyncio.get_running_loop()
    packaged = await loop.run_in_executor(None, pipeline.generate, request)
    response = await loop.run_in_executor(
        None,
        functools.partial(
            publish, packaged.data, store, base, cfg, content_type=packaged.content_type
        ),
    )
    logger.info(
        "Generated %s asset %s (%d bytes)", request.kind.value, response.id, packaged.byte_length
    )
    return response


@router.post("/generate-text", response_model=ShareResponse)
async def generate_text(
    req: GenerateTextRequest,
    pipeline: Pipeline = Depends(get_pipeline),
    store: LocalBlobStore = Depends(get_store),
    base: str = Depends(get_base_url),
    cfg: Settings = Depends(get_settings),
) -> ShareResponse:
    request = TextInput(text=req.text, color=req.color, depth=req.depth, gloss=req.gloss)
    return await _generate(request, pipeline, store, base, cfg)


@router.post("/generate-logo", response_model=ShareResponse)
async def generate_logo(
    svg: UploadFile | None = File(None),
    depth: int = Form(3, ge=1, le=10),
    color: str = Form("#4285f4"),
    use_original_colors: str = Form("false", alias="useOriginalColors"),
    pipeline: Pipeline = Depends(get_pipeline),
    store: LocalBlobStore = Depends(get_store),
    base: str = Depends(get_base_url),
    cfg: Settings = Depends(get_settings),
) -> ShareResponse:
    data = await read_upload(svg, cfg, "No SVG uploaded")
    try:
        svg_text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise UnsupportedInput("SVG file is not UTF-8 text", stage="input") from e

    request = SvgInput(
        svg_text=svg_text,
        color=color,
        depth=depth,
        use_original_colors=use_original_colors == "true",
    )
    return await _generate(request, pipeline, store, base, cfg)


@router.post("/generate-photo", response_model=ShareResponse)
async def generate_photo(
    image: UploadFile | None = File(None),
    pipeline: Pipeline = Depends(get_pipeline),
    store: LocalBlobStore = Depends(get_store),
    base: str = Depends(get_base_url),
    cfg: Settings = Depends(get_settings),
) -> ShareResponse:
    data = await read_upload(image, cfg, "No image uploaded")
    request = PhotoInput(data=data, mime_type=image.content_type or "")
    return await _generate(request, pipeline, store, base, cfg)

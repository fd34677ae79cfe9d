"""POST /api/upload — store an existing glTF model verbatim and share it."""

from __future__ import annotations

import asyncio
import functools
from pathlib import PurePath

from fastapi import APIRouter, Depends, File, UploadFile

from arforge.api.generate import publish, read_upload
from arforge.config import Settings
from arforge.dependencies import get_base_url, get_settings, get_store
from arforge.errors import UnsupportedInput
from arforge.models.responses import ShareResponse
from arforge.storage.blob_store import CONTENT_TYPES, LocalBlobStore

router = APIRouter()


@router.post("/upload", response_model=ShareResponse)
async def upload(
    model: UploadFile | None = File(None),
    store: LocalBlobStore = Depends(get_store),
    base: str = Depends(get_base_url),
    cfg: Settings = Depends(get_settings),
) -> ShareResponse:
    data = await read_upload(model, cfg, "No file uploaded")
    ext = PurePath(model.filename or "").suffix.lower()
    if ext not in CONTENT_TYPES:
        raise UnsupportedInput(
            f"Unsupported model file {model.filename!r}; expected .glb or .gltf", stage="input"
        )
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None,
        functools.partial(
            publish, data, store, base, cfg, ext=ext, content_type=CONTENT_TYPES[ext]
        ),
    )

"""Stored model lookup and blob serving."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from arforge.dependencies import get_base_url, get_store
from arforge.models.responses import CheckModelResponse
from arforge.storage.blob_store import LocalBlobStore, content_type_for
from arforge.storage.share import blob_url

router = APIRouter()


@router.get("/check-model", response_model=CheckModelResponse, response_model_exclude_none=True)
async def check_model(
    id: str = Query(""),
    store: LocalBlobStore = Depends(get_store),
    base: str = Depends(get_base_url),
) -> CheckModelResponse:
    key = await asyncio.get_running_loop().run_in_executor(None, store.find_model, id)
    if key is None:
        return CheckModelResponse(exists=False)
    return CheckModelResponse(exists=True, src=blob_url(base, key))


@router.get("/blobs/{key:path}")
async def get_blob(key: str, store: LocalBlobStore = Depends(get_store)) -> Response:
    try:
        data = await asyncio.get_running_loop().run_in_executor(None, store.get, key)
    except (FileNotFoundError, ValueError):
        raise HTTPException(status_code=404, detail="Blob not found") from None
    return Response(content=data, media_type=content_type_for(key))

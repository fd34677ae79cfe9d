"""GET /view/{id} — AR viewer page for a stored model."""

from __future__ import annotations

import asyncio
from html import escape

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from arforge.dependencies import get_base_url, get_store
from arforge.storage.blob_store import LocalBlobStore
from arforge.storage.share import blob_url

router = APIRouter()

MODEL_VIEWER_SRC = "https://ajax.googleapis.com/ajax/libs/model-viewer/3.5.0/model-viewer.min.js"

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>AR model {asset_id}</title>
  <script type="module" src="{script}"></script>
  <style>
    html, body {{ margin: 0; height: 100%; background: #f5f5f5; }}
    model-viewer {{ width: 100%; height: 100%; }}
  </style>
</head>
<body>
  <model-viewer src="{src}" alt="AR model" ar ar-modes="webxr scene-viewer quick-look"
                camera-controls auto-rotate shadow-intensity="1"></model-viewer>
</body>
</html>
"""


def render_viewer(src: str, asset_id: str) -> str:
    return _PAGE.format(src=escape(src), asset_id=escape(asset_id), script=MODEL_VIEWER_SRC)


@router.get("/view/{asset_id}", response_class=HTMLResponse)
async def view(
    asset_id: str,
    store: LocalBlobStore = Depends(get_store),
    base: str = Depends(get_base_url),
) -> HTMLResponse:
    key = await asyncio.get_running_loop().run_in_executor(None, store.find_model, asset_id)
    if key is None:
        return HTMLResponse("Model not found", status_code=404)
    return HTMLResponse(render_viewer(blob_url(base, key), asset_id))

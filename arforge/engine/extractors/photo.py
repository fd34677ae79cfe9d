"""Photo extractor — a flat textured quad carrying the uploaded image."""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image, UnidentifiedImageError

from arforge.engine.config import PipelineConfig
from arforge.engine.context import GeometryUnit, InputKind, PhotoInput, TextureImage
from arforge.engine.registry import extractor
from arforge.errors import UnsupportedInput

logger = logging.getLogger(__name__)

# Declared MIME → (Pillow format, canonical MIME)
SUPPORTED_IMAGE_TYPES = {
    "image/png": ("PNG", "image/png"),
    "image/jpeg": ("JPEG", "image/jpeg"),
    "image/jpg": ("JPEG", "image/jpeg"),
}

# Corner order: bottom-left, bottom-right, top-right, top-left (document space, Y down)
_CORNERS = np.array([[-0.5, 0.5], [0.5, 0.5], [0.5, -0.5], [-0.5, -0.5]], dtype=np.float64)
# V runs top to bottom in the texture
_UVS = np.array([[0.0, 1.0], [1.0, 1.0], [1.0, 0.0], [0.0, 0.0]], dtype=np.float64)
_INDICES = np.array([0, 2, 1, 0, 3, 2], dtype=np.uint32)


def read_image(data: bytes, mime_type: str) -> TextureImage:
    """Verify image bytes against the declared MIME type."""
    entry = SUPPORTED_IMAGE_TYPES.get((mime_type or "").split(";")[0].strip().lower())
    if entry is None:
        raise UnsupportedInput(f"Unsupported image type: {mime_type or 'unknown'}")
    expected_format, canonical = entry
    if not data:
        raise UnsupportedInput("Image file is empty")

    try:
        with Image.open(io.BytesIO(data)) as img:
            actual_format = img.format
            width, height = img.size
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise UnsupportedInput(f"Could not read image: {e}") from e

    if actual_format != expected_format:
        raise UnsupportedInput(f"Declared {canonical} but the data is {actual_format}")
    return TextureImage(data=data, mime_type=canonical, width=width, height=height)


@extractor(kind=InputKind.PHOTO, description="Textured unit quad")
def extract_photo(request: PhotoInput, config: PipelineConfig) -> list[GeometryUnit]:
    texture = read_image(request.data, request.mime_type)
    if texture.width != texture.height:
        logger.info(
            "Photo is %dx%d; the quad stays square", texture.width, texture.height
        )

    size = config.photo_quad_size
    positions = np.column_stack([_CORNERS * size, np.zeros(4)])
    normals = np.tile([0.0, 0.0, 1.0], (4, 1))
    return [
        GeometryUnit(
            positions=positions,
            normals=normals,
            uvs=_UVS.copy(),
            indices=_INDICES.copy(),
            texture=texture,
            source_id="photo",
        )
    ]

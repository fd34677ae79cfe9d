"""Binary packager — validate buffer layout, then serialize to a self-contained GLB."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pygltflib

from arforge.engine.assembler import SceneAsset
from arforge.errors import PackagingError

logger = logging.getLogger(__name__)

GLB_CONTENT_TYPE = "model/gltf-binary"

_COMPONENT_SIZES = {
    pygltflib.BYTE: 1,
    pygltflib.UNSIGNED_BYTE: 1,
    pygltflib.SHORT: 2,
    pygltflib.UNSIGNED_SHORT: 2,
    pygltflib.UNSIGNED_INT: 4,
    pygltflib.FLOAT: 4,
}
_TYPE_WIDTHS = {
    pygltflib.SCALAR: 1,
    pygltflib.VEC2: 2,
    pygltflib.VEC3: 3,
    pygltflib.VEC4: 4,
    pygltflib.MAT2: 4,
    pygltflib.MAT3: 9,
    pygltflib.MAT4: 16,
}


@dataclass(frozen=True)
class PackagedAsset:
    data: bytes
    content_type: str = GLB_CONTENT_TYPE

    @property
    def byte_length(self) -> int:
        return len(self.data)


def validate_layout(asset: SceneAsset) -> None:
    """Raise PackagingError when a view or accessor range falls outside its storage."""
    buffer_length = len(asset.buffer)
    views = asset.gltf.bufferViews

    spans: list[tuple[int, int, int]] = []
    for i, view in enumerate(views):
        start = view.byteOffset or 0
        end = start + view.byteLength
        if view.buffer != 0 or start < 0 or end > buffer_length:
            raise PackagingError(
                f"bufferView {i} [{start}, {end}) lies outside buffer of {buffer_length} bytes"
            )
        spans.append((start, end, i))

    spans.sort()
    for (_, prev_end, prev_i), (start, _, i) in zip(spans, spans[1:]):
        if start < prev_end:
            raise PackagingError(f"bufferViews {prev_i} and {i} overlap")

    for i, accessor in enumerate(asset.gltf.accessors):
        if accessor.bufferView is None or not 0 <= accessor.bufferView < len(views):
            raise PackagingError(f"accessor {i} references missing bufferView {accessor.bufferView}")
        component = _COMPONENT_SIZES.get(accessor.componentType)
        width = _TYPE_WIDTHS.get(accessor.type)
        if component is None or width is None:
            raise PackagingError(
                f"accessor {i} has unknown layout {accessor.type}/{accessor.componentType}"
            )
        view = views[accessor.bufferView]
        element = component * width
        stride = view.byteStride or element
        needed = (accessor.byteOffset or 0) + (
            stride * (accessor.count - 1) + element if accessor.count else 0
        )
        if needed > view.byteLength:
            raise PackagingError(
                f"accessor {i} needs {needed} bytes but bufferView {accessor.bufferView} "
                f"holds {view.byteLength}"
            )


def package(asset: SceneAsset) -> PackagedAsset:
    validate_layout(asset)
    try:
        data = b"".join(asset.gltf.save_to_bytes())
    except (TypeError, ValueError) as e:
        raise PackagingError(f"GLB serialization failed: {e}") from e
    logger.info("Packaged GLB: %d bytes", len(data))
    return PackagedAsset(data=data)

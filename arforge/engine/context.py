"""Pipeline data model — inputs, geometry units, render groups and the request context.

Geometry flows through the stages as plain numpy arrays:
extractors → GeometryUnit list → normalizer → grouping → RenderGroup list → assembler.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Union

import numpy as np
from numpy.typing import NDArray

RGB = tuple[float, float, float]
BBox3 = tuple[float, float, float, float, float, float]


class InputKind(str, enum.Enum):
    TEXT = "text"
    SVG = "svg"
    PHOTO = "photo"


class GroupingMode(str, enum.Enum):
    PER_COLOR = "per_color"
    MERGED = "merged"


@dataclass(frozen=True)
class TextInput:
    text: str
    color: str = "#4285f4"
    depth: int = 3
    gloss: int = 4

    kind = InputKind.TEXT


@dataclass(frozen=True)
class SvgInput:
    svg_text: str
    color: str = "#4285f4"
    depth: int = 3
    use_original_colors: bool = False

    kind = InputKind.SVG


@dataclass(frozen=True)
class PhotoInput:
    data: bytes
    mime_type: str

    kind = InputKind.PHOTO


GenerationInput = Union[TextInput, SvgInput, PhotoInput]


@dataclass(frozen=True)
class TextureImage:
    """Encoded image embedded in the asset as a base color texture."""

    data: bytes
    mime_type: str
    width: int = 0
    height: int = 0


def bbox3(positions: NDArray[np.float64]) -> BBox3:
    """Compute (xmin, ymin, zmin, xmax, ymax, zmax)."""
    if len(positions) == 0:
        return (0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    lo = positions.min(axis=0)
    hi = positions.max(axis=0)
    return (float(lo[0]), float(lo[1]), float(lo[2]), float(hi[0]), float(hi[1]), float(hi[2]))


@dataclass
class GeometryUnit:
    """One extracted shape: vertex data, optional topology, one color."""

    # Nx3 vertex positions
    positions: NDArray[np.float64]
    # Nx3 vertex normals, paired 1:1 with positions
    normals: NDArray[np.float64]
    color: RGB = (1.0, 1.0, 1.0)
    # Nx2 texture coordinates
    uvs: NDArray[np.float64] | None = None
    # Triangle list indices; None = positions are a triangle soup
    indices: NDArray[np.uint32] | None = None
    texture: TextureImage | None = None
    # Extraction-time bounding box; kept as-is through normalization
    bbox: BBox3 | None = None
    source_id: str = ""

    def __post_init__(self) -> None:
        self.positions = np.asarray(self.positions, dtype=np.float64).reshape(-1, 3)
        self.normals = np.asarray(self.normals, dtype=np.float64).reshape(-1, 3)
        n = len(self.positions)
        if len(self.normals) != n:
            raise ValueError(f"normals ({len(self.normals)}) do not match positions ({n})")
        if self.uvs is not None:
            self.uvs = np.asarray(self.uvs, dtype=np.float64).reshape(-1, 2)
            if len(self.uvs) != n:
                raise ValueError(f"uvs ({len(self.uvs)}) do not match positions ({n})")
        if self.indices is not None:
            self.indices = np.asarray(self.indices, dtype=np.uint32).reshape(-1)
            if len(self.indices) % 3:
                raise ValueError("index count is not a multiple of 3")
            if len(self.indices) and int(self.indices.max()) >= n:
                raise ValueError("index out of range")
        elif n % 3:
            raise ValueError("non-indexed geometry must hold whole triangles")
        if self.bbox is None:
            self.bbox = bbox3(self.positions)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def is_indexed(self) -> bool:
        return self.indices is not None

    def triangle_soup(self) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64] | None]:
        """Positions, normals and uvs with the index buffer expanded."""
        if self.indices is None:
            return self.positions, self.normals, self.uvs
        idx = self.indices.astype(np.intp)
        uvs = self.uvs[idx] if self.uvs is not None else None
        return self.positions[idx], self.normals[idx], uvs


@dataclass
class RenderGroup:
    """Geometry sharing one material, concatenated in encounter order."""

    key: str
    color: RGB
    positions: NDArray[np.float64]
    normals: NDArray[np.float64]
    uvs: NDArray[np.float64] | None = None
    indices: NDArray[np.uint32] | None = None
    texture: TextureImage | None = None
    unit_count: int = 0

    @property
    def vertex_count(self) -> int:
        return len(self.positions)


@dataclass
class PipelineContext:
    """State for one generation request, created fresh and discarded afterwards."""

    request: GenerationInput
    # Stage outputs
    units: list[GeometryUnit] = field(default_factory=list)
    normalized: list[GeometryUnit] = field(default_factory=list)
    groups: list[RenderGroup] = field(default_factory=list)
    asset: Any = None
    packaged: Any = None
    # Normalization parameters
    center: tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: float = 1.0
    # Pipeline metadata
    completed_stages: list[str] = field(default_factory=list)
    timings_ms: dict[str, float] = field(default_factory=dict)

    @property
    def kind(self) -> InputKind:
        return self.request.kind

"""Text extractor — glyph outlines from a fixed font, bevel-extruded into one solid.

Glyphs come from matplotlib's TextPath at font size 1, so one em is one unit.
Outlines are flipped into document space (Y down) like every other extractor.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path

import matplotlib
import numpy as np
from matplotlib.font_manager import FontProperties, get_font
from matplotlib.path import Path as MplPath
from matplotlib.textpath import TextPath
from numpy.typing import NDArray

from arforge.engine.config import PipelineConfig
from arforge.engine.context import GeometryUnit, InputKind, TextInput
from arforge.engine.extrude import Outline, extrude_outline
from arforge.engine.registry import extractor
from arforge.errors import EmptyGeometry, UnsupportedInput
from arforge.svg.colors import require_color
from arforge.utils.geometry import clean_ring, cubic_points, quadratic_points, rings_to_polygons

logger = logging.getLogger(__name__)

_BUNDLED_FONT = Path(matplotlib.get_data_path()) / "fonts" / "ttf" / "DejaVuSans-Bold.ttf"


@functools.lru_cache(maxsize=4)
def load_font(font_file: str = "") -> FontProperties:
    """Load a glyph outline font once per process."""
    path = Path(font_file) if font_file else _BUNDLED_FONT
    if not path.is_file():
        raise UnsupportedInput(f"Font file not found: {path}")
    try:
        get_font(str(path))
    except (RuntimeError, OSError, ValueError) as e:
        raise UnsupportedInput(f"Could not load font {path.name}: {e}") from e
    logger.info("Loaded glyph font %s", path.name)
    return FontProperties(fname=str(path))


def path_rings(path: MplPath, curve_segments: int) -> list[NDArray[np.float64]]:
    """Flatten a matplotlib path into closed rings; curves get curve_segments points each."""
    vertices = np.asarray(path.vertices, dtype=np.float64)
    codes = path.codes
    if codes is None:
        codes = np.full(len(vertices), MplPath.LINETO)
        if len(codes):
            codes[0] = MplPath.MOVETO

    rings: list[NDArray[np.float64]] = []
    current: list[NDArray[np.float64]] = []

    def flush() -> None:
        if current:
            ring = clean_ring(np.vstack(current))
            if len(ring) >= 3:
                rings.append(ring)
        current.clear()

    i = 0
    while i < len(codes):
        code = codes[i]
        if code == MplPath.MOVETO:
            flush()
            current.append(vertices[i][None, :])
            i += 1
        elif code == MplPath.LINETO:
            current.append(vertices[i][None, :])
            i += 1
        elif code == MplPath.CURVE3 and current:
            start = current[-1][-1]
            current.append(quadratic_points(start, vertices[i], vertices[i + 1], curve_segments))
            i += 2
        elif code == MplPath.CURVE4 and current:
            start = current[-1][-1]
            current.append(
                cubic_points(start, vertices[i], vertices[i + 1], vertices[i + 2], curve_segments)
            )
            i += 3
        elif code == MplPath.CLOSEPOLY:
            flush()
            i += 1
        else:
            i += 1
    flush()
    return rings


def text_rings(
    text: str,
    font: FontProperties,
    size: float,
    line_spacing: float,
    curve_segments: int,
) -> list[NDArray[np.float64]]:
    """Glyph contours for every line of text, in document space (Y down)."""
    rings: list[NDArray[np.float64]] = []
    for line_no, line in enumerate(text.splitlines()):
        if not line.strip():
            continue
        baseline = -line_no * line_spacing * size
        path = TextPath((0.0, baseline), line, size=size, prop=font)
        rings.extend(path_rings(path, curve_segments))
    for ring in rings:
        ring[:, 1] *= -1.0
    return rings


@extractor(kind=InputKind.TEXT, description="Bevel-extruded glyph outlines")
def extract_text(request: TextInput, config: PipelineConfig) -> list[GeometryUnit]:
    if not request.text or not request.text.strip():
        raise EmptyGeometry("No text provided")
    try:
        color = require_color(request.color)
    except ValueError as e:
        raise UnsupportedInput(str(e)) from e

    font = load_font(config.font_file)
    rings = text_rings(
        request.text,
        font,
        config.font_size,
        config.line_spacing,
        config.curve_segments,
    )
    polygons = rings_to_polygons(rings, fill_rule="nonzero")
    if not polygons:
        raise EmptyGeometry(f"No drawable glyphs in text {request.text!r}")

    depth = request.depth * config.depth_unit
    positions, normals = [], []
    for poly in polygons:
        pos, nrm = extrude_outline(
            Outline.from_polygon(poly), depth, config.text_bevel, config.miter_limit
        )
        positions.append(pos)
        normals.append(nrm)

    unit = GeometryUnit(
        positions=np.concatenate(positions, axis=0),
        normals=np.concatenate(normals, axis=0),
        color=color,
        source_id="text",
    )
    logger.info(
        "Text %r: %d contours, %d shapes, %d vertices",
        request.text,
        len(rings),
        len(polygons),
        unit.vertex_count,
    )
    return [unit]

"""Geometry normalizer — recenter and rescale all units as one body, then flip Y.

Extractors work in document space (Y down); the asset convention is Y up.
Mirroring one axis flips handedness, so triangle winding is reversed as well.
"""

from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np
from numpy.typing import NDArray

from arforge.engine.context import GeometryUnit
from arforge.errors import DegenerateGeometry, EmptyGeometry

logger = logging.getLogger(__name__)

_FLIP_Y = np.array([1.0, -1.0, 1.0])


def union_bounds(units: list[GeometryUnit]) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """(min corner, max corner) over every vertex of every unit."""
    stacked = np.concatenate([u.positions for u in units if u.vertex_count], axis=0)
    return stacked.min(axis=0), stacked.max(axis=0)


def _swap_winding(n: int) -> NDArray[np.intp]:
    """Permutation that swaps the 2nd and 3rd vertex of every triangle."""
    return np.arange(n).reshape(-1, 3)[:, [0, 2, 1]].reshape(-1)


def normalize(
    units: list[GeometryUnit],
    target_size: float = 2.0,
) -> tuple[list[GeometryUnit], tuple[float, float, float], float]:
    """Return (normalized units, center, scale).

    scale = target_size / max(extent_x, extent_y); Z does not take part.
    """
    if not units or not any(u.vertex_count for u in units):
        raise EmptyGeometry("Nothing to normalize")

    lo, hi = union_bounds(units)
    center = (lo + hi) / 2.0
    extent = hi - lo
    max_extent = float(max(extent[0], extent[1]))
    if not np.all(np.isfinite(extent)) or max_extent <= 0.0:
        raise DegenerateGeometry(
            f"Geometry has zero XY extent ({extent[0]:g} x {extent[1]:g}); cannot scale"
        )
    scale = target_size / max_extent

    out: list[GeometryUnit] = []
    for unit in units:
        positions = (unit.positions - center) * scale * _FLIP_Y
        normals = unit.normals * _FLIP_Y
        uvs = unit.uvs
        indices = unit.indices
        if indices is not None:
            indices = indices[_swap_winding(len(indices))]
        else:
            order = _swap_winding(unit.vertex_count)
            positions = positions[order]
            normals = normals[order]
            if uvs is not None:
                uvs = uvs[order]
        out.append(
            replace(
                unit,
                positions=positions,
                normals=normals,
                uvs=None if uvs is None else uvs.copy(),
                indices=None if indices is None else indices.copy(),
                bbox=unit.bbox,
            )
        )

    logger.info(
        "Normalized %d units: extent %.4g x %.4g x %.4g, scale %.4g",
        len(units),
        extent[0],
        extent[1],
        extent[2],
        scale,
    )
    return out, (float(center[0]), float(center[1]), float(center[2])), scale

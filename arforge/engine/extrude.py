"""Bevelled extrusion of flat outlines into closed triangle soups.

An outline is extruded along +Z from ``-bevel.thickness`` to
``depth + bevel.thickness``. The side wall is a stack of contour layers: the
front bevel grows the contour outward by ``bevel.size * sin(a)`` while Z moves by
``bevel.thickness * cos(a)`` (a from 0 to 90 degrees), a straight section spans
``[0, depth]``, and the back bevel mirrors the front. The caps reuse the
un-offset outline, triangulated with a constrained Delaunay triangulation.

Output triangles are wound so the geometric normal (b - a) x (c - a) points out
of the solid; vertex normals are the flat face normals.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
import shapely
from numpy.typing import NDArray
from shapely.geometry import Polygon
from shapely.geometry.polygon import orient

from arforge.engine.config import BevelProfile
from arforge.utils.geometry import signed_area


@dataclass
class Outline:
    """A shape to extrude: CCW exterior ring, CW hole rings, optional cap polygon.

    Outlines without a polygon produce walls only.
    """

    exterior: NDArray[np.float64]
    holes: list[NDArray[np.float64]] = field(default_factory=list)
    polygon: Polygon | None = None

    @classmethod
    def from_polygon(cls, polygon: Polygon) -> Outline:
        polygon = orient(polygon, sign=1.0)
        exterior = np.asarray(polygon.exterior.coords, dtype=np.float64)[:-1, :2]
        holes = [np.asarray(r.coords, dtype=np.float64)[:-1, :2] for r in polygon.interiors]
        return cls(exterior=exterior, holes=holes, polygon=polygon)

    @property
    def rings(self) -> list[NDArray[np.float64]]:
        return [self.exterior, *self.holes]


def contour_layers(depth: float, bevel: BevelProfile) -> list[tuple[float, float]]:
    """(z, outward offset) for each contour layer, front cap to back cap."""
    if not bevel.enabled:
        return [(0.0, 0.0), (depth, 0.0)]

    n = bevel.segments
    front = []
    for b in range(n + 1):
        a = (b / n) * math.pi / 2
        front.append((-bevel.thickness * math.cos(a), bevel.size * math.sin(a)))
    back = []
    for b in range(n, -1, -1):
        a = (b / n) * math.pi / 2
        back.append((depth + bevel.thickness * math.cos(a), bevel.size * math.sin(a)))
    return front + back


def miter_offsets(ring: NDArray[np.float64], limit: float = 2.0) -> NDArray[np.float64]:
    """Per-vertex outward offset vectors for a CCW ring (CW for holes).

    Each vector moves its vertex so both adjacent edges shift by one unit;
    its length is clamped to ``limit``.
    """
    n = len(ring)
    if n < 2:
        return np.zeros((n, 2))
    edges = np.roll(ring, -1, axis=0) - ring
    lengths = np.linalg.norm(edges, axis=1)
    safe = np.where(lengths > 1e-12, lengths, 1.0)
    edge_normals = np.stack([edges[:, 1], -edges[:, 0]], axis=1) / safe[:, None]
    edge_normals[lengths <= 1e-12] = 0.0

    prev_normals = np.roll(edge_normals, 1, axis=0)
    summed = prev_normals + edge_normals
    denom = 1.0 + np.sum(prev_normals * edge_normals, axis=1)
    offsets = np.where(
        (denom > 1e-6)[:, None],
        summed / np.where(denom > 1e-6, denom, 1.0)[:, None],
        edge_normals,
    )

    norms = np.linalg.norm(offsets, axis=1)
    too_long = norms > limit
    offsets[too_long] *= (limit / norms[too_long])[:, None]
    return offsets


def _wall_triangles(
    ring: NDArray[np.float64],
    layers: list[tuple[float, float]],
    limit: float,
) -> NDArray[np.float64]:
    offsets = miter_offsets(ring, limit)
    tris = []
    for (z0, off0), (z1, off1) in zip(layers[:-1], layers[1:]):
        lo = np.column_stack([ring + off0 * offsets, np.full(len(ring), z0)])
        hi = np.column_stack([ring + off1 * offsets, np.full(len(ring), z1)])
        lo_next = np.roll(lo, -1, axis=0)
        hi_next = np.roll(hi, -1, axis=0)
        tris.append(np.stack([lo, lo_next, hi_next], axis=1))
        tris.append(np.stack([lo, hi_next, hi], axis=1))
    return np.concatenate(tris, axis=0)


def _cap_triangles(polygon: Polygon, z: float, facing_up: bool) -> NDArray[np.float64]:
    triangles = shapely.constrained_delaunay_triangles(polygon)
    out = []
    for tri in getattr(triangles, "geoms", []):
        pts = np.asarray(tri.exterior.coords, dtype=np.float64)[:3, :2]
        ccw = signed_area(pts) > 0
        if ccw != facing_up:
            pts = pts[[0, 2, 1]]
        out.append(np.column_stack([pts, np.full(3, z)]))
    if not out:
        return np.empty((0, 3, 3))
    return np.stack(out, axis=0)


def face_normals(triangles: NDArray[np.float64]) -> NDArray[np.float64]:
    """Unit normal per triangle; degenerate triangles get +Z."""
    cross = np.cross(triangles[:, 1] - triangles[:, 0], triangles[:, 2] - triangles[:, 0])
    lengths = np.linalg.norm(cross, axis=1)
    normals = np.zeros_like(cross)
    ok = lengths > 1e-20
    normals[ok] = cross[ok] / lengths[ok, None]
    normals[~ok] = (0.0, 0.0, 1.0)
    return normals


def extrude_outline(
    outline: Outline,
    depth: float,
    bevel: BevelProfile,
    miter_limit: float = 2.0,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Extrude one outline into (positions, normals), both (3T, 3)."""
    layers = contour_layers(depth, bevel)
    parts = [_wall_triangles(ring, layers, miter_limit) for ring in outline.rings if len(ring)]

    if outline.polygon is not None:
        z_front, z_back = layers[0][0], layers[-1][0]
        parts.append(_cap_triangles(outline.polygon, z_front, facing_up=False))
        parts.append(_cap_triangles(outline.polygon, z_back, facing_up=True))

    triangles = np.concatenate(parts, axis=0) if parts else np.empty((0, 3, 3))
    normals = np.repeat(face_normals(triangles), 3, axis=0)
    return triangles.reshape(-1, 3), normals

"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import LineString, MultiPolygon, Polygon
from shapely.geometry.polygon import orient
from shapely.ops import polygonize, unary_union
from shapely.validation import make_valid

# Rings whose |signed area| falls below this are treated as zero-area outlines.
AREA_EPS = 1e-12


def signed_area(points: NDArray[np.float64]) -> float:
    """Shoelace formula for signed area of an implicitly closed ring. Positive = CCW."""
    if len(points) < 3:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    return float(0.5 * np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def bbox(points: NDArray[np.float64]) -> tuple[float, float, float, float]:
    """Compute (xmin, ymin, xmax, ymax) bounding box."""
    if len(points) == 0:
        return (0.0, 0.0, 0.0, 0.0)
    return (
        float(np.min(points[:, 0])),
        float(np.min(points[:, 1])),
        float(np.max(points[:, 0])),
        float(np.max(points[:, 1])),
    )


def quadratic_points(p0, p1, p2, n: int) -> NDArray[np.float64]:
    """Sample n points on a quadratic Bezier, excluding p0, ending at p2."""
    t = np.linspace(0.0, 1.0, n + 1)[1:, None]
    p0, p1, p2 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2))
    return (1 - t) ** 2 * p0 + 2 * (1 - t) * t * p1 + t**2 * p2


def cubic_points(p0, p1, p2, p3, n: int) -> NDArray[np.float64]:
    """Sample n points on a cubic Bezier, excluding p0, ending at p3."""
    t = np.linspace(0.0, 1.0, n + 1)[1:, None]
    p0, p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3))
    mt = 1 - t
    return mt**3 * p0 + 3 * mt**2 * t * p1 + 3 * mt * t**2 * p2 + t**3 * p3


def clean_ring(points: NDArray[np.float64], tol: float = 1e-9) -> NDArray[np.float64]:
    """Drop consecutive duplicates and the explicit closing point of a ring.

    A ring collapsing to a single point is returned with that one point.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) == 0:
        return pts
    keep = np.ones(len(pts), dtype=bool)
    keep[1:] = np.any(np.abs(np.diff(pts, axis=0)) > tol, axis=1)
    pts = pts[keep]
    while len(pts) > 1 and np.all(np.abs(pts[-1] - pts[0]) <= tol):
        pts = pts[:-1]
    return pts


def _as_polygons(geom) -> list[Polygon]:
    """Flatten any shapely geometry into its non-empty polygon parts."""
    if geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom]
    if isinstance(geom, MultiPolygon):
        return [g for g in geom.geoms if not g.is_empty]
    if hasattr(geom, "geoms"):
        out: list[Polygon] = []
        for g in geom.geoms:
            out.extend(_as_polygons(g))
        return out
    return []


def ring_polygon(ring: NDArray[np.float64]) -> Polygon | None:
    """Valid polygon covering a ring, or None when the ring encloses no area."""
    if len(ring) < 3 or abs(signed_area(ring)) <= AREA_EPS:
        return None
    poly = Polygon(ring)
    if not poly.is_valid:
        parts = _as_polygons(make_valid(poly))
        if not parts:
            return None
        poly = parts[0] if len(parts) == 1 else MultiPolygon(parts)
    if poly.is_empty or poly.area <= AREA_EPS:
        return None
    return poly


def rings_to_polygons(
    rings: list[NDArray[np.float64]],
    fill_rule: str = "nonzero",
) -> list[Polygon]:
    """Assemble closed rings into filled polygons with holes.

    evenodd: XOR of all rings. nonzero: the rings are noded into faces, and a
    face is filled when the signed directions of the rings covering it do not
    sum to zero. Overlapping rings are handled, not just nested ones.
    Only polygons with positive area are returned, oriented CCW exterior / CW holes.
    """
    polys: list[tuple[Polygon, int]] = []
    outlines: list[LineString] = []
    for ring in rings:
        poly = ring_polygon(ring)
        if poly is not None:
            polys.append((poly, 1 if signed_area(ring) > 0 else -1))
            outlines.append(LineString(np.vstack([ring, ring[:1]])))
    if not polys:
        return []

    if fill_rule == "evenodd":
        filled = polys[0][0]
        for poly, _ in polys[1:]:
            filled = filled.symmetric_difference(poly)
    else:
        filled_faces = []
        for face in polygonize(unary_union(outlines)):
            point = face.representative_point()
            winding = sum(direction for poly, direction in polys if poly.contains(point))
            if winding != 0:
                filled_faces.append(face)
        filled = unary_union(filled_faces) if filled_faces else Polygon()

    return [orient(p, sign=1.0) for p in _as_polygons(filled) if p.area > AREA_EPS]

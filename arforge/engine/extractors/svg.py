"""SVG extractor — each filled shape of a logo becomes one extruded unit."""

from __future__ import annotations

import logging

from arforge.engine.config import PipelineConfig
from arforge.engine.context import GeometryUnit, InputKind, SvgInput
from arforge.engine.extrude import Outline, extrude_outline
from arforge.engine.registry import extractor
from arforge.errors import DegenerateGeometry, EmptyGeometry, UnsupportedInput
from arforge.svg.colors import parse_color, require_color
from arforge.svg.parser import parse_svg
from arforge.utils.geometry import rings_to_polygons

logger = logging.getLogger(__name__)


@extractor(kind=InputKind.SVG, description="Bevel-extruded SVG shapes, one unit per shape")
def extract_svg(request: SvgInput, config: PipelineConfig) -> list[GeometryUnit]:
    try:
        fallback = require_color(request.color)
    except ValueError as e:
        raise UnsupportedInput(str(e)) from e

    parsed = parse_svg(request.svg_text, curve_segments=config.curve_segments)
    if not parsed.elements:
        raise EmptyGeometry("Could not parse SVG paths")

    depth = request.depth * config.depth_unit
    units: list[GeometryUnit] = []
    for elem in parsed.elements:
        polygons = rings_to_polygons(elem.rings, fill_rule=elem.fill_rule)
        if not polygons:
            logger.debug("%s <%s> encloses no area", elem.id, elem.tag)
            continue
        color = parse_color(elem.fill) or fallback
        for n, poly in enumerate(polygons):
            positions, normals = extrude_outline(
                Outline.from_polygon(poly), depth, config.logo_bevel, config.miter_limit
            )
            units.append(
                GeometryUnit(
                    positions=positions,
                    normals=normals,
                    color=color,
                    source_id=f"{elem.id}.{n}",
                )
            )

    if not units:
        raise DegenerateGeometry(
            f"None of the {len(parsed.elements)} SVG shapes encloses any area"
        )

    logger.info(
        "SVG: %d elements → %d shapes, %d vertices",
        len(parsed.elements),
        len(units),
        sum(u.vertex_count for u in units),
    )
    return units

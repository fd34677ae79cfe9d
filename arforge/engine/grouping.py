"""Color grouping — partition normalized units into render groups.

Groups keep first-occurrence order and their members keep encounter order.
"""

from __future__ import annotations

import logging

import numpy as np

from arforge.engine.context import RGB, GeometryUnit, GroupingMode, RenderGroup
from arforge.svg.colors import color_key

logger = logging.getLogger(__name__)


def merge_units(key: str, color: RGB, members: list[GeometryUnit]) -> RenderGroup:
    """Concatenate member geometry into one group.

    Indices survive only when every member is indexed; otherwise indexed
    members are expanded to triangle soups. UVs survive only when every
    member has them.
    """
    all_indexed = all(m.is_indexed for m in members)
    keep_uvs = all(m.uvs is not None for m in members)

    positions, normals, uvs, indices = [], [], [], []
    offset = 0
    for m in members:
        if all_indexed:
            pos, nrm, uv = m.positions, m.normals, m.uvs
            indices.append(m.indices.astype(np.uint32) + np.uint32(offset))
        else:
            pos, nrm, uv = m.triangle_soup()
        positions.append(pos)
        normals.append(nrm)
        if keep_uvs:
            uvs.append(uv)
        offset += len(pos)

    texture = next((m.texture for m in members if m.texture is not None), None)
    return RenderGroup(
        key=key,
        color=color,
        positions=np.concatenate(positions, axis=0),
        normals=np.concatenate(normals, axis=0),
        uvs=np.concatenate(uvs, axis=0) if keep_uvs else None,
        indices=np.concatenate(indices) if all_indexed else None,
        texture=texture,
        unit_count=len(members),
    )


def group_units(
    units: list[GeometryUnit],
    mode: GroupingMode,
    fallback_color: RGB,
) -> list[RenderGroup]:
    if not units:
        return []

    if mode == GroupingMode.MERGED:
        groups = [merge_units(color_key(fallback_color), fallback_color, units)]
    else:
        buckets: dict[str, list[GeometryUnit]] = {}
        for unit in units:
            buckets.setdefault(color_key(unit.color), []).append(unit)
        groups = [merge_units(key, members[0].color, members) for key, members in buckets.items()]

    logger.info(
        "Grouped %d units into %d groups (%s): %s",
        len(units),
        len(groups),
        mode.value,
        ", ".join(f"#{g.key}×{g.unit_count}" for g in groups),
    )
    return groups

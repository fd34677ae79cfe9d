"""Tests for color grouping."""

from __future__ import annotations

import numpy as np

from arforge.engine.context import GeometryUnit, GroupingMode, TextureImage
from arforge.engine.grouping import group_units

RED = (1.0, 0.0, 0.0)
BLUE = (0.0, 0.0, 1.0)
GRAY = (0.5, 0.5, 0.5)


def _soup(color, n_tris=1, x=0.0) -> GeometryUnit:
    positions = np.tile([[x, 0, 0], [x + 1, 0, 0], [x, 1, 0]], (n_tris, 1)).astype(np.float64)
    return GeometryUnit(positions=positions, normals=np.tile([0.0, 0.0, 1.0], (3 * n_tris, 1)), color=color)


def _indexed_quad(color, texture=None) -> GeometryUnit:
    return GeometryUnit(
        positions=[[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
        normals=np.tile([0.0, 0.0, 1.0], (4, 1)),
        uvs=[[0, 1], [1, 1], [1, 0], [0, 0]],
        indices=[0, 1, 2, 0, 2, 3],
        color=color,
        texture=texture,
    )


def test_per_color_groups_in_first_occurrence_order():
    units = [_soup(RED), _soup(RED, x=2), _soup(BLUE, x=4)]
    groups = group_units(units, GroupingMode.PER_COLOR, GRAY)
    assert [g.key for g in groups] == ["ff0000", "0000ff"]
    assert [g.unit_count for g in groups] == [2, 1]
    assert groups[0].color == RED
    # Members concatenated in encounter order
    assert groups[0].positions[0, 0] == 0.0
    assert groups[0].positions[3, 0] == 2.0


def test_merged_single_group_with_fallback_color():
    units = [_soup(RED), _soup(RED), _soup(BLUE)]
    groups = group_units(units, GroupingMode.MERGED, GRAY)
    assert len(groups) == 1
    assert groups[0].color == GRAY
    assert groups[0].key == "808080"
    assert groups[0].unit_count == 3


def test_groups_partition_all_vertices():
    units = [_soup(RED, 2), _soup(BLUE, 3), _soup(RED, 1)]
    total = sum(u.vertex_count for u in units)
    for mode in GroupingMode:
        groups = group_units(units, mode, GRAY)
        assert sum(g.vertex_count for g in groups) == total
        assert all(len(g.normals) == g.vertex_count for g in groups)


def test_indexed_members_offset():
    groups = group_units([_indexed_quad(RED), _indexed_quad(RED)], GroupingMode.MERGED, RED)
    group = groups[0]
    assert group.vertex_count == 8
    assert list(group.indices) == [0, 1, 2, 0, 2, 3, 4, 5, 6, 4, 6, 7]
    assert group.uvs.shape == (8, 2)


def test_mixed_indexed_and_soup_expands_indices():
    groups = group_units([_indexed_quad(RED), _soup(RED)], GroupingMode.MERGED, RED)
    group = groups[0]
    assert group.indices is None
    assert group.vertex_count == 6 + 3
    # The soup has no UVs, so the group drops them
    assert group.uvs is None


def test_texture_carried_from_first_member():
    texture = TextureImage(data=b"png", mime_type="image/png")
    groups = group_units([_indexed_quad((1.0, 1.0, 1.0), texture)], GroupingMode.MERGED, (1.0, 1.0, 1.0))
    assert groups[0].texture is texture


def test_no_units_no_groups():
    assert group_units([], GroupingMode.PER_COLOR, GRAY) == []

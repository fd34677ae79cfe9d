"""Tests for color parsing."""

from __future__ import annotations

import pytest

from arforge.svg.colors import color_key, parse_color, parse_hex, require_color


def test_parse_hex():
    assert parse_hex("#4285f4") == (66, 133, 244)
    assert parse_hex("#fff") == (255, 255, 255)
    assert parse_hex("4285f4") is None
    assert parse_hex("#12345") is None
    assert parse_hex("#zzzzzz") is None


def test_parse_color_formats():
    assert parse_color("#ff0000") == (1.0, 0.0, 0.0)
    assert parse_color("rgb(0, 255, 0)") == (0.0, 1.0, 0.0)
    assert parse_color("rgba(0,0,255,0.5)") == (0.0, 0.0, 1.0)
    assert parse_color("Red") == (1.0, 0.0, 0.0)


@pytest.mark.parametrize("value", [None, "none", "currentColor", "transparent", "url(#grad)"])
def test_parse_color_non_colors(value):
    assert parse_color(value) is None


def test_require_color_rejects_garbage():
    with pytest.raises(ValueError):
        require_color("not-a-color")


def test_color_key():
    assert color_key((1.0, 0.0, 0.0)) == "ff0000"
    assert color_key(parse_color("#4285f4")) == "4285f4"
    # out-of-range channels clamp
    assert color_key((1.5, -0.2, 0.5)) == "ff0080"

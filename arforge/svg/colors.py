"""Color parsing — hex, rgb() and CSS named colors to unit-range RGB."""

from __future__ import annotations

import re

from matplotlib.colors import CSS4_COLORS

RGB = tuple[float, float, float]

_RGB_FUNC_RE = re.compile(
    r"rgba?\(\s*([\d.]+%?)\s*[, ]\s*([\d.]+%?)\s*[, ]\s*([\d.]+%?)\s*(?:[,/]\s*[\d.]+%?\s*)?\)",
    re.IGNORECASE,
)

# Paint values that mean "no concrete color here"
_NO_COLOR = {"none", "transparent", "currentcolor", "inherit", ""}


def parse_hex(color: str) -> tuple[int, int, int] | None:
    """Parse a hex color string (#rgb or #rrggbb) to (r, g, b)."""
    if not color:
        return None
    color = color.strip().lower()
    if not color.startswith("#"):
        return None
    color = color[1:]
    if len(color) == 3:
        color = color[0] * 2 + color[1] * 2 + color[2] * 2
    if len(color) != 6:
        return None
    try:
        return (int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16))
    except ValueError:
        return None


def _channel(token: str) -> float:
    if token.endswith("%"):
        return max(0.0, min(1.0, float(token[:-1]) / 100.0))
    return max(0.0, min(1.0, float(token) / 255.0))


def parse_color(value: str | None) -> RGB | None:
    """Paint value → (r, g, b) in [0, 1], or None for none/currentColor/url(...)."""
    if value is None:
        return None
    value = value.strip()
    lowered = value.lower()
    if lowered in _NO_COLOR or lowered.startswith("url("):
        return None

    rgb = parse_hex(lowered)
    if rgb is not None:
        return (rgb[0] / 255.0, rgb[1] / 255.0, rgb[2] / 255.0)

    m = _RGB_FUNC_RE.fullmatch(lowered)
    if m:
        return (_channel(m.group(1)), _channel(m.group(2)), _channel(m.group(3)))

    named = CSS4_COLORS.get(lowered)
    if named is not None:
        return parse_color(named)
    return None


def require_color(value: str) -> RGB:
    """Parse a user-supplied color, raising ValueError when it is not a concrete color."""
    rgb = parse_color(value)
    if rgb is None:
        raise ValueError(f"Not a color: {value!r}")
    return rgb


def color_key(rgb: RGB) -> str:
    """Quantize a unit-range color to a 6-digit lowercase hex key."""
    channels = [int(round(max(0.0, min(1.0, c)) * 255)) for c in rgb]
    return "{:02x}{:02x}{:02x}".format(*channels)

"""Shared test fixtures."""

from __future__ import annotations

import io

import pytest
from PIL import Image


# Sample SVGs

SQUARE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <rect x="10" y="10" width="80" height="80" fill="#ff0000"/>
</svg>'''

# Two reds and one blue: per-color grouping yields 2 groups
RED_RED_BLUE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 300 100">
  <rect x="0" y="0" width="80" height="80" fill="#ff0000"/>
  <circle cx="140" cy="40" r="40" fill="red"/>
  <path d="M200 0 L280 0 L280 80 L200 80 Z" fill="#0000ff"/>
</svg>'''

TWO_COLOR_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 200 100">
  <rect x="0" y="0" width="90" height="100" fill="#e53935"/>
  <rect x="110" y="0" width="90" height="100" fill="#1e88e5"/>
</svg>'''

# Ring with a hole, nonzero winding (inner sub-path drawn the other way)
DONUT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <path d="M0 0 L100 0 L100 100 L0 100 Z M25 25 L25 75 L75 75 L75 25 Z" fill="#333333"/>
</svg>'''

# Same hole, but both sub-paths clockwise: only evenodd punches it out
EVENODD_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <path d="M0 0 L100 0 L100 100 L0 100 Z M25 25 L75 25 L75 75 L25 75 Z"
        fill="#333333" fill-rule="evenodd"/>
</svg>'''

GROUP_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <g fill="#00ff00" transform="translate(10, 20)">
    <rect x="0" y="0" width="10" height="10"/>
    <rect x="20" y="0" width="10" height="10" style="fill: #0000ff"/>
  </g>
</svg>'''

CURVE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">
  <path d="M12 2 C17.5 2 22 6.5 22 12 S17.5 22 12 22 Q2 22 2 12 Z"/>
</svg>'''

# Shapes that enclose no area
ZERO_AREA_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10">
  <path d="M5 5 L5 5 L5 5 Z" fill="#ff0000"/>
  <line x1="1" y1="1" x2="9" y2="9" stroke="black"/>
</svg>'''

# Partially overlapping sub-paths drawn the same way: nonzero fills the union
OVERLAP_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 14 14">
  <path d="M0 0 L10 0 L10 10 L0 10 Z M4 4 L14 4 L14 14 L4 14 Z" fill="#333333"/>
</svg>'''

# Same overlap, second sub-path reversed: the shared square cancels out
OVERLAP_REVERSED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 14 14">
  <path d="M0 0 L10 0 L10 10 L0 10 Z M4 4 L4 14 L14 14 L14 4 Z" fill="#333333"/>
</svg>'''

EMPTY_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10">
  <defs><rect x="0" y="0" width="5" height="5"/></defs>
  <text x="1" y="5">label</text>
</svg>'''


def image_bytes(fmt: str = "PNG", size: tuple[int, int] = (8, 8)) -> bytes:
    img = Image.new("RGB", size, (200, 40, 40))
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


PNG_BYTES = image_bytes("PNG")
JPEG_BYTES = image_bytes("JPEG")


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def jpeg_bytes() -> bytes:
    return JPEG_BYTES

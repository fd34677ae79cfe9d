"""SVG parser — facade over svgpathtools + ElementTree.

Converts raw SVG text → ParsedSvg: one SvgElementData per drawable element, each
holding its flattened sub-path rings in document coordinates (transforms applied)
and its resolved fill paint and fill rule.
"""

from __future__ import annotations

import logging
import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray
from svgpathtools import Line, Path, parse_path

from arforge.errors import UnsupportedInput
from arforge.utils.geometry import bbox, clean_ring

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_TRANSFORM_RE = re.compile(r"(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)")
_UNIT_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")

# Subtrees that never render directly
_SKIP_TAGS = {
    "defs", "clipPath", "mask", "symbol", "marker", "pattern", "filter",
    "linearGradient", "radialGradient", "style", "script",
    "title", "desc", "metadata",
}
_SHAPE_TAGS = {"path", "rect", "circle", "ellipse", "polygon", "polyline", "line"}
# Presentation attributes inherited from <g>/<svg> ancestors
_INHERITED = ("fill", "fill-rule")


@dataclass
class SvgElementData:
    """One drawable element with its flattened rings."""

    id: str
    tag: str
    # Flattened sub-path rings, Nx2 each, implicitly closed
    rings: list[NDArray[np.float64]] = field(default_factory=list)
    # Resolved fill paint string, None if unset anywhere in the ancestry
    fill: str | None = None
    fill_rule: str = "nonzero"
    attributes: dict[str, str] = field(default_factory=dict)
    z_order: int = 0

    @property
    def bbox(self) -> tuple[float, float, float, float]:
        if not self.rings:
            return (0.0, 0.0, 0.0, 0.0)
        return bbox(np.concatenate(self.rings, axis=0))


@dataclass
class ParsedSvg:
    canvas_width: float = 0.0
    canvas_height: float = 0.0
    elements: list[SvgElementData] = field(default_factory=list)
    skipped: int = 0


def parse_svg(svg_text: str, curve_segments: int = 12) -> ParsedSvg:
    """Parse raw SVG text into drawable elements.

    Raises UnsupportedInput for malformed XML or a non-<svg> root element.
    """
    try:
        root = ET.fromstring(svg_text.strip())
    except ET.ParseError as e:
        raise UnsupportedInput(f"Could not parse SVG: {e}") from e
    if _local(root.tag) != "svg":
        raise UnsupportedInput(f"Root element is <{_local(root.tag)}>, expected <svg>")

    parsed = ParsedSvg()
    _read_canvas(root, parsed)

    inherited = {"fill": None, "fill-rule": "nonzero"}
    _walk(root, np.eye(3), inherited, parsed, curve_segments)

    logger.info(
        "Parsed SVG: %d elements (%d skipped), canvas %.0f×%.0f",
        len(parsed.elements),
        parsed.skipped,
        parsed.canvas_width,
        parsed.canvas_height,
    )
    return parsed


def _local(tag: str) -> str:
    """Strip the XML namespace from a tag name."""
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _length(value: str | None, default: float = 0.0) -> float:
    if not value:
        return default
    m = _UNIT_RE.match(value)
    return float(m.group(1)) if m else default


def _read_canvas(root: ET.Element, parsed: ParsedSvg) -> None:
    viewbox = root.get("viewBox")
    if viewbox:
        parts = _NUMBER_RE.findall(viewbox)
        if len(parts) >= 4:
            parsed.canvas_width = float(parts[2])
            parsed.canvas_height = float(parts[3])
            return
    parsed.canvas_width = _length(root.get("width"))
    parsed.canvas_height = _length(root.get("height"))


def _style_attrs(elem: ET.Element) -> dict[str, str]:
    """Element attributes with `style` declarations taking precedence."""
    attrs = {_local(k): v for k, v in elem.attrib.items()}
    style = attrs.pop("style", "")
    for decl in style.split(";"):
        if ":" in decl:
            key, value = decl.split(":", 1)
            attrs[key.strip()] = value.strip()
    return attrs


def parse_transform(value: str | None) -> NDArray[np.float64]:
    """SVG transform list → 3x3 affine matrix."""
    m = np.eye(3)
    if not value:
        return m
    for name, args in _TRANSFORM_RE.findall(value):
        nums = [float(v) for v in _NUMBER_RE.findall(args)]
        t = np.eye(3)
        if name == "matrix" and len(nums) == 6:
            a, b, c, d, e, f = nums
            t = np.array([[a, c, e], [b, d, f], [0, 0, 1]], dtype=np.float64)
        elif name == "translate" and nums:
            t[0, 2] = nums[0]
            t[1, 2] = nums[1] if len(nums) > 1 else 0.0
        elif name == "scale" and nums:
            t[0, 0] = nums[0]
            t[1, 1] = nums[1] if len(nums) > 1 else nums[0]
        elif name == "rotate" and nums:
            rad = math.radians(nums[0])
            cos, sin = math.cos(rad), math.sin(rad)
            t = np.array([[cos, -sin, 0], [sin, cos, 0], [0, 0, 1]], dtype=np.float64)
            if len(nums) >= 3:
                cx, cy = nums[1], nums[2]
                pre = np.array([[1, 0, cx], [0, 1, cy], [0, 0, 1]], dtype=np.float64)
                post = np.array([[1, 0, -cx], [0, 1, -cy], [0, 0, 1]], dtype=np.float64)
                t = pre @ t @ post
        elif name == "skewX" and nums:
            t[0, 1] = math.tan(math.radians(nums[0]))
        elif name == "skewY" and nums:
            t[1, 0] = math.tan(math.radians(nums[0]))
        m = m @ t
    return m


def _apply(matrix: NDArray[np.float64], points: NDArray[np.float64]) -> NDArray[np.float64]:
    if len(points) == 0:
        return points
    homogeneous = np.column_stack([points, np.ones(len(points))])
    return (homogeneous @ matrix.T)[:, :2]


def _walk(
    elem: ET.Element,
    matrix: NDArray[np.float64],
    inherited: dict[str, str | None],
    parsed: ParsedSvg,
    curve_segments: int,
) -> None:
    attrs = _style_attrs(elem)
    if attrs.get("display") == "none":
        return

    matrix = matrix @ parse_transform(attrs.get("transform"))
    state = dict(inherited)
    for key in _INHERITED:
        if key in attrs and attrs[key] != "inherit":
            state[key] = attrs[key]

    for child in elem:
        tag = _local(child.tag)
        if tag in _SKIP_TAGS:
            continue
        if tag in _SHAPE_TAGS:
            _add_shape(child, tag, matrix, state, parsed, curve_segments)
        elif tag in ("g", "svg", "a", "switch"):
            _walk(child, matrix, state, parsed, curve_segments)
        elif tag:
            logger.warning("Skipping unsupported SVG element <%s>", tag)
            parsed.skipped += 1


def _add_shape(
    elem: ET.Element,
    tag: str,
    matrix: NDArray[np.float64],
    inherited: dict[str, str | None],
    parsed: ParsedSvg,
    curve_segments: int,
) -> None:
    attrs = _style_attrs(elem)
    if attrs.get("display") == "none":
        return

    try:
        rings = _shape_rings(tag, attrs, curve_segments)
    except (ValueError, IndexError) as e:
        logger.warning("Failed to read <%s>: %s", tag, e)
        parsed.skipped += 1
        return

    local = matrix @ parse_transform(attrs.get("transform"))
    rings = [clean_ring(_apply(local, r)) for r in rings if len(r)]
    rings = [r for r in rings if len(r)]
    if not rings:
        parsed.skipped += 1
        return

    fill = attrs.get("fill", inherited.get("fill"))
    if fill == "inherit":
        fill = inherited.get("fill")
    fill_rule = attrs.get("fill-rule", inherited.get("fill-rule")) or "nonzero"

    parsed.elements.append(
        SvgElementData(
            id=f"E{len(parsed.elements) + 1}",
            tag=tag,
            rings=rings,
            fill=fill,
            fill_rule=fill_rule,
            attributes=attrs,
            z_order=len(parsed.elements),
        )
    )


def _shape_rings(tag: str, attrs: dict[str, str], curve_segments: int) -> list[NDArray[np.float64]]:
    """Flattened rings for one basic shape or path, in the element's own coordinates."""
    if tag == "path":
        d = attrs.get("d", "")
        if not d.strip():
            return []
        path = parse_path(d)
        if len(path) == 0:
            return []
        return [_sample_subpath(sp, curve_segments) for sp in path.continuous_subpaths()]

    if tag == "rect":
        x, y = _length(attrs.get("x")), _length(attrs.get("y"))
        w, h = _length(attrs.get("width")), _length(attrs.get("height"))
        if w <= 0 or h <= 0:
            return []
        return [np.array([[x, y], [x + w, y], [x + w, y + h], [x, y + h]], dtype=np.float64)]

    if tag in ("circle", "ellipse"):
        cx, cy = _length(attrs.get("cx")), _length(attrs.get("cy"))
        if tag == "circle":
            rx = ry = _length(attrs.get("r"))
        else:
            rx, ry = _length(attrs.get("rx")), _length(attrs.get("ry"))
        if rx <= 0 or ry <= 0:
            return []
        angles = np.linspace(0, 2 * np.pi, 4 * curve_segments, endpoint=False)
        return [np.column_stack([cx + rx * np.cos(angles), cy + ry * np.sin(angles)])]

    if tag in ("polygon", "polyline"):
        nums = [float(v) for v in _NUMBER_RE.findall(attrs.get("points", ""))]
        if len(nums) < 4:
            return []
        return [np.array(nums[: len(nums) // 2 * 2], dtype=np.float64).reshape(-1, 2)]

    if tag == "line":
        return [
            np.array(
                [
                    [_length(attrs.get("x1")), _length(attrs.get("y1"))],
                    [_length(attrs.get("x2")), _length(attrs.get("y2"))],
                ],
                dtype=np.float64,
            )
        ]

    return []


def _sample_subpath(path: Path, curve_segments: int) -> NDArray[np.float64]:
    """Flatten a continuous sub-path: line ends as-is, curves in equal parameter steps."""
    points = [path[0].start]
    ts = np.linspace(0.0, 1.0, curve_segments + 1)[1:]
    for seg in path:
        if isinstance(seg, Line):
            points.append(seg.end)
        else:
            points.extend(seg.point(float(t)) for t in ts)
    return np.array([[p.real, p.imag] for p in points], dtype=np.float64)

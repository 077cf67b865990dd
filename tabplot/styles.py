from __future__ import annotations

import math
import re

from tabplot.model import LineStyle, PointStyle


RGBA = tuple[int, int, int, int]

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")

DASH_ARRAYS: dict[LineStyle, tuple[float, ...]] = {
    LineStyle.SOLID: (),
    LineStyle.DASHED: (5.0, 5.0),
    LineStyle.DOTTED: (2.0, 2.0),
}

# Symbol areas in px^2, as d3.symbol sizes them.
MARKER_AREAS: dict[PointStyle, float] = {
    PointStyle.CIRCLE: 60.0,
    PointStyle.SQUARE: 60.0,
    PointStyle.TRIANGLE: 80.0,
    PointStyle.NONE: 0.0,
}

_SQRT3 = math.sqrt(3.0)


def is_hex_color(value: object) -> bool:
    return isinstance(value, str) and bool(_HEX_COLOR.match(value))


def hex_to_rgba(color: str, *, opacity: float = 1.0) -> RGBA:
    if not is_hex_color(color):
        raise ValueError(f"color must be a hex color (#RRGGBB or #RRGGBBAA): {color!r}")
    r = int(color[1:3], 16)
    g = int(color[3:5], 16)
    b = int(color[5:7], 16)
    a = int(color[7:9], 16) if len(color) == 9 else 255
    a = int(max(0.0, min(1.0, opacity)) * a)
    return (r, g, b, a)


def dash_array(style: LineStyle) -> tuple[float, ...]:
    return DASH_ARRAYS[LineStyle(style)]


def dash_attribute(style: LineStyle) -> str | None:
    dashes = dash_array(style)
    if not dashes:
        return None
    return ",".join(f"{d:g}" for d in dashes)


def circle_radius(area: float) -> float:
    return math.sqrt(area / math.pi)


def marker_outline(style: PointStyle, cx: float, cy: float, area: float | None = None) -> list[tuple[float, float]]:
    """Polygon vertices for square and triangle markers centered on (cx, cy)."""
    style = PointStyle(style)
    size = MARKER_AREAS[style] if area is None else float(area)
    if style is PointStyle.SQUARE:
        half = math.sqrt(size) / 2.0
        return [
            (cx - half, cy - half),
            (cx + half, cy - half),
            (cx + half, cy + half),
            (cx - half, cy + half),
        ]
    if style is PointStyle.TRIANGLE:
        y = -math.sqrt(size / (_SQRT3 * 3.0))
        return [
            (cx, cy + y * 2.0),
            (cx - _SQRT3 * y, cy - y),
            (cx + _SQRT3 * y, cy - y),
        ]
    if style is PointStyle.CIRCLE:
        raise ValueError("circle markers have no polygon outline; use circle_radius")
    return []

from __future__ import annotations

import math
from typing import Sequence


Point = tuple[float, float]
# (c1x, c1y, c2x, c2y, x, y) cubic segment ending at (x, y).
CubicSegment = tuple[float, float, float, float, float, float]


def _sign(value: float) -> float:
    return -1.0 if value < 0 else 1.0


def _slope(dy: float, h: float) -> float:
    if h != 0:
        return dy / h
    if dy == 0:
        return math.nan
    return math.copysign(math.inf, dy)


def _interior_tangent(x0: float, y0: float, x1: float, y1: float, x2: float, y2: float) -> float:
    # Steffen (1990): bounded tangents keep each cubic within its segment's y-range.
    h0 = x1 - x0
    h1 = x2 - x1
    s0 = _slope(y1 - y0, h0)
    s1 = _slope(y2 - y1, h1)
    if h0 + h1 == 0:
        return 0.0
    p = (s0 * h1 + s1 * h0) / (h0 + h1)
    candidates = (abs(s0), abs(s1), 0.5 * abs(p))
    if any(math.isnan(c) for c in candidates):
        return 0.0
    out = (_sign(s0) + _sign(s1)) * min(candidates)
    if math.isnan(out) or math.isinf(out):
        return 0.0
    return out


def _end_tangent(x0: float, y0: float, x1: float, y1: float, t: float) -> float:
    h = x1 - x0
    if h == 0:
        return t
    return (3.0 * (y1 - y0) / h - t) / 2.0


def monotone_tangents(points: Sequence[Point]) -> list[float]:
    n = len(points)
    if n < 3:
        return [0.0] * n
    tangents = [0.0] * n
    for i in range(1, n - 1):
        (xa, ya), (xb, yb), (xc, yc) = points[i - 1], points[i], points[i + 1]
        tangents[i] = _interior_tangent(xa, ya, xb, yb, xc, yc)
    tangents[0] = _end_tangent(points[0][0], points[0][1], points[1][0], points[1][1], tangents[1])
    tangents[-1] = _end_tangent(points[-2][0], points[-2][1], points[-1][0], points[-1][1], tangents[-2])
    return tangents


def monotone_x_segments(points: Sequence[Point]) -> list[CubicSegment]:
    """Cubic Bezier segments of a monotone-in-x interpolant through ``points``.

    Points must be ordered by x. Two points give a straight segment; one point
    gives no segments.
    """
    n = len(points)
    if n < 2:
        return []
    if n == 2:
        (x0, y0), (x1, y1) = points
        dx = (x1 - x0) / 3.0
        dy = (y1 - y0) / 3.0
        return [(x0 + dx, y0 + dy, x1 - dx, y1 - dy, x1, y1)]
    tangents = monotone_tangents(points)
    out: list[CubicSegment] = []
    for i in range(n - 1):
        x0, y0 = points[i]
        x1, y1 = points[i + 1]
        dx = (x1 - x0) / 3.0
        out.append((x0 + dx, y0 + dx * tangents[i], x1 - dx, y1 - dx * tangents[i + 1], x1, y1))
    return out


def format_coord(value: float) -> str:
    out = f"{value:.3f}".rstrip("0").rstrip(".")
    if out in ("-0", ""):
        return "0"
    return out


def svg_path_data(points: Sequence[Point]) -> str:
    if not points:
        return ""
    x0, y0 = points[0]
    parts = [f"M{format_coord(x0)},{format_coord(y0)}"]
    for c1x, c1y, c2x, c2y, x, y in monotone_x_segments(points):
        parts.append(
            "C"
            + ",".join(format_coord(v) for v in (c1x, c1y, c2x, c2y, x, y))
        )
    return "".join(parts)


def flatten_segments(start: Point, segments: Sequence[CubicSegment], *, steps: int = 12) -> list[Point]:
    out: list[Point] = [start]
    px, py = start
    for c1x, c1y, c2x, c2y, x, y in segments:
        for k in range(1, steps + 1):
            t = k / steps
            mt = 1.0 - t
            a = mt * mt * mt
            b = 3.0 * mt * mt * t
            c = 3.0 * mt * t * t
            d = t * t * t
            out.append((a * px + b * c1x + c * c2x + d * x, a * py + b * c1y + c * c2y + d * y))
        px, py = x, y
    return out

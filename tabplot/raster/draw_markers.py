from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from tabplot.model import PointStyle
from tabplot.raster.canvas import RGBA, draw_hline
from tabplot.styles import circle_radius, marker_outline


def draw_marker(dst: np.ndarray, shape: PointStyle, cx: float, cy: float, area: float, color: RGBA) -> None:
    shape = PointStyle(shape)
    if shape is PointStyle.NONE:
        return
    if shape is PointStyle.CIRCLE:
        fill_circle(dst, cx, cy, circle_radius(area), color)
        return
    fill_polygon(dst, marker_outline(shape, cx, cy, area), color)


def fill_circle(dst: np.ndarray, cx: float, cy: float, radius: float, color: RGBA) -> None:
    if radius <= 0:
        return
    top = max(0, int(math.floor(cy - radius)))
    bottom = min(dst.shape[0] - 1, int(math.ceil(cy + radius)))
    for yy in range(top, bottom + 1):
        dy = yy + 0.5 - cy
        if abs(dy) > radius:
            continue
        half = math.sqrt(radius * radius - dy * dy)
        x0 = int(math.ceil(cx - half - 0.5))
        x1 = int(math.floor(cx + half - 0.5))
        if x1 >= x0:
            draw_hline(dst, x0, x1, yy, color)


def fill_polygon(dst: np.ndarray, vertices: Sequence[tuple[float, float]], color: RGBA) -> None:
    if len(vertices) < 3:
        return
    ys = [v[1] for v in vertices]
    top = max(0, int(math.floor(min(ys))))
    bottom = min(dst.shape[0] - 1, int(math.ceil(max(ys))))
    n = len(vertices)
    for yy in range(top, bottom + 1):
        scan = yy + 0.5
        crossings: list[float] = []
        for i in range(n):
            xa, ya = vertices[i]
            xb, yb = vertices[(i + 1) % n]
            if (ya <= scan < yb) or (yb <= scan < ya):
                crossings.append(xa + (scan - ya) * (xb - xa) / (yb - ya))
        crossings.sort()
        for left, right in zip(crossings[0::2], crossings[1::2]):
            x0 = int(math.ceil(left - 0.5))
            x1 = int(math.floor(right - 0.5))
            if x1 >= x0:
                draw_hline(dst, x0, x1, yy, color)

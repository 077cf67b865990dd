from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from tabplot.raster.canvas import RGBA, draw_pixel


Point = tuple[float, float]


def draw_polyline(
    dst: np.ndarray,
    points: Sequence[Point],
    color: RGBA,
    *,
    width: int = 1,
    dash: Sequence[float] = (),
) -> None:
    if len(points) < 2:
        return
    margin = float(max(2, width))
    bounds = (-margin, -margin, dst.shape[1] - 1 + margin, dst.shape[0] - 1 + margin)
    for offset, piece in _clip_pieces(points, bounds):
        # Pieces resume the dash pattern where the unclipped line would be.
        runs = dash_runs(piece, dash, offset=offset) if dash else [piece]
        for run in runs:
            for (xa, ya), (xb, yb) in zip(run[:-1], run[1:]):
                _draw_line_segment(dst, int(round(xa)), int(round(ya)), int(round(xb)), int(round(yb)), color=color, width=width)


def clip_polyline(points: Sequence[Point], bounds: tuple[float, float, float, float]) -> list[list[Point]]:
    return [piece for _, piece in _clip_pieces(points, bounds)]


def _clip_pieces(points: Sequence[Point], bounds: tuple[float, float, float, float]) -> list[tuple[float, list[Point]]]:
    """Visible pieces of ``points`` inside ``bounds``, each with its arc-length start offset."""
    pieces: list[tuple[float, list[Point]]] = []
    current: list[Point] = []
    start_offset = 0.0
    travelled = 0.0
    for (xa, ya), (xb, yb) in zip(points[:-1], points[1:]):
        seg_len = math.hypot(xb - xa, yb - ya)
        clipped = _clip_segment(xa, ya, xb, yb, bounds)
        if clipped is None:
            if len(current) > 1:
                pieces.append((start_offset, current))
            current = []
            travelled += seg_len
            continue
        start, end = clipped
        if current and current[-1] == start:
            current.append(end)
        else:
            if len(current) > 1:
                pieces.append((start_offset, current))
            current = [start, end]
            start_offset = travelled + math.hypot(start[0] - xa, start[1] - ya)
        if end != (xb, yb):
            pieces.append((start_offset, current))
            current = []
        travelled += seg_len
    if len(current) > 1:
        pieces.append((start_offset, current))
    return pieces


def _clip_segment(
    x0: float, y0: float, x1: float, y1: float, bounds: tuple[float, float, float, float]
) -> tuple[Point, Point] | None:
    # Liang-Barsky against an axis-aligned box.
    xmin, ymin, xmax, ymax = bounds
    dx = x1 - x0
    dy = y1 - y0
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x0 - xmin), (dx, xmax - x0), (-dy, y0 - ymin), (dy, ymax - y0)):
        if p == 0:
            if q < 0:
                return None
            continue
        r = q / p
        if p < 0:
            if r > t1:
                return None
            t0 = max(t0, r)
        else:
            if r < t0:
                return None
            t1 = min(t1, r)
    start = (x0, y0) if t0 == 0.0 else (x0 + t0 * dx, y0 + t0 * dy)
    end = (x1, y1) if t1 == 1.0 else (x0 + t1 * dx, y0 + t1 * dy)
    return start, end


def dash_runs(points: Sequence[Point], dash: Sequence[float], *, offset: float = 0.0) -> list[list[Point]]:
    """Split a polyline into its visible pieces under an SVG-style dash array.

    ``offset`` is the arc length already travelled before ``points[0]``.
    """
    pattern = [float(d) for d in dash if d > 0]
    if len(pattern) % 2 == 1:
        pattern = pattern * 2
    if not pattern:
        return [list(points)]

    if len(points) < 2:
        return []

    idx = 0
    phase = offset % sum(pattern) if math.isfinite(offset) and offset > 0 else 0.0
    while phase >= pattern[idx]:
        phase -= pattern[idx]
        idx = (idx + 1) % len(pattern)
    remaining = pattern[idx] - phase
    visible = idx % 2 == 0
    runs: list[list[Point]] = []
    current: list[Point] = [points[0]] if visible else []
    for (xa, ya), (xb, yb) in zip(points[:-1], points[1:]):
        seg_len = math.hypot(xb - xa, yb - ya)
        pos = 0.0
        while seg_len - pos > remaining:
            pos += remaining
            t = pos / seg_len
            cut = (xa + (xb - xa) * t, ya + (yb - ya) * t)
            if visible:
                current.append(cut)
                runs.append(current)
                current = []
            else:
                current = [cut]
            visible = not visible
            idx = (idx + 1) % len(pattern)
            remaining = pattern[idx]
        remaining -= seg_len - pos
        if visible:
            current.append((xb, yb))
    if visible and len(current) > 1:
        runs.append(current)
    return runs


def _draw_line_segment(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA, width: int) -> None:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        _draw_square_brush(dst, x0, y0, color=color, width=width)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def _draw_square_brush(dst: np.ndarray, x: int, y: int, color: RGBA, width: int) -> None:
    radius = max(0, width // 2)
    for yy in range(y - radius, y + radius + 1):
        for xx in range(x - radius, x + radius + 1):
            draw_pixel(dst, xx, yy, color)

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from tabplot.model import ChartData, DataPoint, Series
from tabplot.render import ChartLayout


DEFAULT_THRESHOLD_FRACTION = 0.05


@dataclass(frozen=True)
class ProximityHit:
    series: Series
    point: DataPoint
    distance: float
    index: int


@dataclass(frozen=True)
class TooltipEntry:
    series_id: str
    label: str
    color: str
    x: float
    y: float
    distance: float


def nearest_index(series: Series, x_value: float) -> int:
    """Index of the point whose x is closest to ``x_value``, in O(log n).

    Among points at equal distance the last one in stored order wins.
    """
    xs = series.x
    right = int(np.searchsorted(xs, x_value, side="right"))
    if right == 0:
        return int(np.searchsorted(xs, xs[0], side="right")) - 1
    left = right - 1
    if right >= xs.size:
        return left
    if abs(float(xs[right]) - x_value) <= abs(float(xs[left]) - x_value):
        return int(np.searchsorted(xs, xs[right], side="right")) - 1
    return left


def nearest_index_linear(series: Series, x_value: float) -> int:
    """Plain O(n) scan; slower reference for :func:`nearest_index`."""
    best = 0
    best_distance = abs(float(series.x[0]) - x_value)
    for i, xv in enumerate(series.x.tolist()):
        distance = abs(xv - x_value)
        if distance <= best_distance:
            best = i
            best_distance = distance
    return best


def query_nearest(
    pointer_x: float,
    chart_data: ChartData,
    x_domain_width: float,
    threshold_fraction: float = DEFAULT_THRESHOLD_FRACTION,
) -> list[ProximityHit]:
    pointer_x = float(pointer_x)
    if not np.isfinite(pointer_x):
        return []
    threshold = threshold_fraction * x_domain_width
    hits: list[ProximityHit] = []
    for spec in chart_data:
        idx = nearest_index(spec, pointer_x)
        point = spec.point(idx)
        distance = abs(point.x - pointer_x)
        if distance < threshold:
            hits.append(ProximityHit(series=spec, point=point, distance=distance, index=idx))
    # sorted() is stable, so equal distances keep chart order.
    return sorted(hits, key=lambda hit: hit.distance)


def lookup_pointer(
    pixel_x: float,
    layout: ChartLayout,
    chart_data: ChartData,
    threshold_fraction: float = DEFAULT_THRESHOLD_FRACTION,
) -> list[TooltipEntry]:
    domain_x = layout.pixel_to_domain_x(pixel_x)
    hits = query_nearest(domain_x, chart_data, layout.x_scale.width, threshold_fraction)
    return [
        TooltipEntry(
            series_id=hit.series.id,
            label=hit.series.label,
            color=hit.series.style.color,
            x=hit.point.x,
            y=hit.point.y,
            distance=hit.distance,
        )
        for hit in hits
    ]


def pointer_leave() -> list[TooltipEntry]:
    return []


def format_tooltip(entries: list[TooltipEntry]) -> list[str]:
    if not entries:
        return []
    lines = [f"X: {entries[0].x:.2f}"]
    lines.extend(f"{entry.label}: {entry.y:.2f}" for entry in entries)
    return lines

from __future__ import annotations

import unittest

import numpy as np

from tabplot.model import ChartData, ChartOptions, ColumnStyle, Series
from tabplot.proximity import (
    TooltipEntry,
    format_tooltip,
    lookup_pointer,
    nearest_index,
    nearest_index_linear,
    pointer_leave,
    query_nearest,
)
from tabplot.render import render
from tabplot.scene import Scene


def _series(sid: str, xs, ys) -> Series:
    return Series(sid, "f", "f.csv", "x", sid, xs, ys, ColumnStyle())


def _scenario() -> ChartData:
    return ChartData(
        (
            _series("S1", [0.0, 1.0, 2.0], [0.0, 1.0, 4.0]),
            _series("S2", [0.0, 2.0], [0.0, 2.0]),
        )
    )


class ProximityQueryTests(unittest.TestCase):
    def test_only_series_within_threshold_are_reported(self) -> None:
        hits = query_nearest(1.0, _scenario(), x_domain_width=2.0)
        self.assertEqual(len(hits), 1)
        self.assertEqual(hits[0].series.id, "S1")
        self.assertEqual((hits[0].point.x, hits[0].point.y), (1.0, 1.0))
        self.assertEqual(hits[0].distance, 0.0)

    def test_results_sorted_by_distance(self) -> None:
        chart = ChartData((_series("far", [0.0, 1.08], [1.0, 1.0]), _series("near", [0.0, 1.01], [2.0, 2.0])))
        hits = query_nearest(1.0, chart, x_domain_width=10.0)
        self.assertEqual([hit.series.id for hit in hits], ["near", "far"])

    def test_threshold_is_strict(self) -> None:
        chart = ChartData((_series("a", [0.0, 1.5], [0.0, 1.0]),))
        self.assertEqual(query_nearest(1.0, chart, x_domain_width=2.0, threshold_fraction=0.25), [])
        self.assertEqual(len(query_nearest(1.0, chart, x_domain_width=2.0, threshold_fraction=0.375)), 1)

    def test_equidistant_points_prefer_later_point(self) -> None:
        spec = _series("a", [0.0, 2.0], [5.0, 7.0])
        self.assertEqual(nearest_index(spec, 1.0), 1)
        self.assertEqual(nearest_index_linear(spec, 1.0), 1)

    def test_binary_search_matches_linear_scan(self) -> None:
        rng = np.random.default_rng(7)
        xs = np.sort(rng.integers(-20, 20, size=60).astype(np.float64))
        spec = _series("a", xs, np.zeros_like(xs))
        for query in np.linspace(-25.0, 25.0, 201):
            self.assertEqual(nearest_index(spec, float(query)), nearest_index_linear(spec, float(query)), query)

    def test_non_finite_pointer_returns_nothing(self) -> None:
        self.assertEqual(query_nearest(float("nan"), _scenario(), x_domain_width=2.0), [])

    def test_empty_chart_returns_nothing(self) -> None:
        self.assertEqual(query_nearest(1.0, ChartData(), x_domain_width=2.0), [])
        layout = render(Scene(width=800, height=500), ChartData(), ChartOptions())
        self.assertEqual(lookup_pointer(layout.to_surface_x(50.0), layout, ChartData()), [])

    def test_lookup_pointer_on_extreme_domain(self) -> None:
        chart = ChartData((_series("wide", [-1e308, 0.0, 1e308], [1.0, 2.0, 3.0]),))
        layout = render(Scene(width=800, height=500), chart, ChartOptions())
        entries = lookup_pointer(layout.to_surface_x(0.0), layout, chart)
        self.assertEqual([(entry.series_id, entry.x, entry.y) for entry in entries], [("wide", 0.0, 2.0)])

    def test_lookup_pointer_maps_pixels_to_domain(self) -> None:
        chart = _scenario()
        scene = Scene(width=800, height=500)
        layout = render(scene, chart, ChartOptions())
        entries = lookup_pointer(layout.to_surface_x(1.0), layout, chart)
        self.assertEqual([entry.series_id for entry in entries], ["S1"])
        self.assertEqual(format_tooltip(entries), ["X: 1.00", "S1: 1.00"])

    def test_pointer_leave_clears_tooltip(self) -> None:
        self.assertEqual(pointer_leave(), [])
        self.assertEqual(format_tooltip([]), [])

    def test_tooltip_lists_each_entry(self) -> None:
        entries = [
            TooltipEntry("a", "temp", "#000000", 2.0, 21.456, 0.0),
            TooltipEntry("b", "hum", "#ffffff", 2.1, 40.0, 0.1),
        ]
        self.assertEqual(format_tooltip(entries), ["X: 2.00", "temp: 21.46", "hum: 40.00"])


if __name__ == "__main__":
    unittest.main()

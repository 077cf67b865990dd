from __future__ import annotations

import unittest

import numpy as np

from tabplot.datasets import (
    PALETTE,
    build_datasets,
    build_file_series,
    coerce_number,
    default_column_styles,
    default_selection,
    extract_xy,
    rename_column,
)
from tabplot.errors import PlotDataError
from tabplot.model import ChartData, ColumnSelection, ColumnStyle, LineStyle, Series, SourceFile


def _file(rows, *, file_id="f1", columns=None, x="t", ys=("v",)) -> SourceFile:
    cols = tuple(columns) if columns is not None else tuple(rows[0].keys())
    return SourceFile(
        id=file_id,
        name=f"{file_id}.csv",
        columns=cols,
        rows=tuple(rows),
        selection=ColumnSelection(x_column=x, y_columns=tuple(ys)),
        column_styles=default_column_styles(cols),
    )


class DatasetBuilderTests(unittest.TestCase):
    def test_non_numeric_rows_are_dropped(self) -> None:
        rows = [
            {"t": "1", "v": "10"},
            {"t": "2", "v": "abc"},
            {"t": "3", "v": "30"},
            {"t": "4", "v": ""},
            {"t": "5", "v": "50"},
        ]
        chart = build_datasets([_file(rows)])
        self.assertEqual(len(chart), 1)
        spec = chart.series[0]
        self.assertEqual(spec.x.tolist(), [1.0, 3.0, 5.0])
        self.assertEqual(spec.y.tolist(), [10.0, 30.0, 50.0])
        self.assertEqual(spec.id, "f1-v")
        self.assertEqual(spec.label, "v")

    def test_points_sorted_by_x_with_stable_ties(self) -> None:
        rows = [
            {"t": "3", "v": "1"},
            {"t": "1", "v": "2"},
            {"t": "3", "v": "3"},
            {"t": "2", "v": "4"},
        ]
        x, y = extract_xy(rows, "t", "v")
        self.assertEqual(x.tolist(), [1.0, 2.0, 3.0, 3.0])
        self.assertEqual(y.tolist(), [2.0, 4.0, 1.0, 3.0])

    def test_column_without_numeric_values_yields_no_series(self) -> None:
        rows = [{"t": "1", "v": "a", "w": "2"}, {"t": "2", "v": "b", "w": "3"}]
        chart = build_datasets([_file(rows, ys=("v", "w"))])
        self.assertEqual([spec.y_column for spec in chart], ["w"])

    def test_incomplete_selection_yields_nothing(self) -> None:
        rows = [{"t": "1", "v": "2"}]
        self.assertEqual(build_file_series(_file(rows, ys=())), [])
        self.assertEqual(build_file_series(_file(rows, x="")), [])

    def test_series_order_follows_files_then_columns(self) -> None:
        a = _file([{"t": "1", "p": "1", "q": "2"}], file_id="a", ys=("q", "p"))
        b = _file([{"t": "1", "r": "5"}], file_id="b", ys=("r",))
        chart = build_datasets([a, b])
        self.assertEqual([spec.id for spec in chart], ["a-q", "a-p", "b-r"])

    def test_repeated_y_column_gets_unique_id(self) -> None:
        rows = [{"t": "1", "v": "2"}]
        chart = build_datasets([_file(rows, ys=("v", "v", "v"))])
        self.assertEqual([spec.id for spec in chart], ["f1-v", "f1-v#2", "f1-v#3"])

    def test_series_ids_unique_across_files(self) -> None:
        a = _file([{"t": "1", "b-c": "2"}], file_id="a", ys=("b-c",))
        ab = _file([{"t": "1", "c": "3"}], file_id="a-b", ys=("c",))
        chart = build_datasets([a, ab])
        self.assertEqual([spec.id for spec in chart], ["a-b-c", "a-b-c#2"])
        self.assertEqual([spec.file_id for spec in chart], ["a", "a-b"])

    def test_files_sharing_an_id_get_suffixed_series(self) -> None:
        rows = [{"t": "1", "v": "2"}]
        chart = build_datasets([_file(rows, file_id="f"), _file(rows, file_id="f")])
        self.assertEqual([spec.id for spec in chart], ["f-v", "f-v#2"])

    def test_missing_style_uses_deterministic_palette(self) -> None:
        rows = [{"t": "1", "v": "2", "w": "3"}]
        f = _file(rows, ys=("v", "w"))
        f = SourceFile(id=f.id, name=f.name, columns=f.columns, rows=f.rows, selection=f.selection)
        first = build_datasets([f])
        second = build_datasets([f])
        self.assertEqual([s.style.color for s in first], [PALETTE[0], PALETTE[1]])
        self.assertEqual([s.style.color for s in first], [s.style.color for s in second])

    def test_explicit_styles_override_file_styles(self) -> None:
        rows = [{"t": "1", "v": "2"}]
        custom = ColumnStyle(color="#000000", line_style=LineStyle.DASHED)
        chart = build_datasets([_file(rows)], {"f1": {"v": custom}})
        self.assertEqual(chart.series[0].style, custom)

    def test_coerce_number_rejects_non_finite_and_partial_text(self) -> None:
        self.assertEqual(coerce_number(" 2.5 "), 2.5)
        self.assertEqual(coerce_number("1e3"), 1000.0)
        for raw in ("", "  ", "12abc", "nan", "inf", "-Infinity", None, True):
            self.assertIsNone(coerce_number(raw), raw)

    def test_coerce_number_accepts_only_ascii_decimal_literals(self) -> None:
        self.assertEqual(coerce_number("-.5"), -0.5)
        self.assertEqual(coerce_number("+3."), 3.0)
        self.assertEqual(coerce_number("2E-2"), 0.02)
        for raw in ("1_000", "\u0661\u0662", "\uff11", "0x10", "1e", "1e400", "1.2.3"):
            self.assertIsNone(coerce_number(raw), raw)

    def test_default_selection_uses_first_two_columns(self) -> None:
        self.assertEqual(default_selection(["a", "b", "c"]), ColumnSelection("a", ("b",)))
        self.assertEqual(default_selection(["a"]), ColumnSelection("a", ()))
        self.assertEqual(default_selection([]), ColumnSelection("", ()))


class RenameColumnTests(unittest.TestCase):
    def test_rename_updates_every_reference(self) -> None:
        rows = [{"t": "1", "v": "2"}, {"t": "2", "v": "x"}, {"t": "3", "v": "4"}]
        f = _file(rows)
        before = build_datasets([f])
        renamed = rename_column(f, "v", "value")
        after = build_datasets([renamed])
        self.assertEqual(renamed.columns, ("t", "value"))
        self.assertEqual(renamed.selection.y_columns, ("value",))
        self.assertIn("value", renamed.column_styles)
        self.assertNotIn("v", renamed.column_styles)
        self.assertEqual(len(after.series[0]), len(before.series[0]))
        self.assertEqual(after.series[0].label, "value")

    def test_rename_x_column(self) -> None:
        f = _file([{"t": "1", "v": "2"}])
        renamed = rename_column(f, "t", "time")
        self.assertEqual(renamed.selection.x_column, "time")
        self.assertEqual(renamed.rows[0], {"time": "1", "v": "2"})

    def test_rename_noop_and_errors(self) -> None:
        f = _file([{"t": "1", "v": "2"}])
        self.assertIs(rename_column(f, "v", "v"), f)
        self.assertIs(rename_column(f, "missing", "x"), f)
        with self.assertRaisesRegex(ValueError, "non-empty"):
            rename_column(f, "v", "")
        with self.assertRaisesRegex(ValueError, "already exists"):
            rename_column(f, "v", "t")


class ModelValidationTests(unittest.TestCase):
    def test_series_rejects_empty_unsorted_or_non_finite(self) -> None:
        style = ColumnStyle()
        with self.assertRaises(PlotDataError):
            Series("s", "f", "f.csv", "x", "y", np.asarray([]), np.asarray([]), style)
        with self.assertRaises(PlotDataError):
            Series("s", "f", "f.csv", "x", "y", np.asarray([2.0, 1.0]), np.asarray([1.0, 1.0]), style)
        with self.assertRaises(PlotDataError):
            Series("s", "f", "f.csv", "x", "y", np.asarray([1.0, 2.0]), np.asarray([1.0, np.nan]), style)

    def test_series_arrays_are_read_only(self) -> None:
        spec = Series("s", "f", "f.csv", "x", "y", [1.0, 2.0], [3.0, 4.0], ColumnStyle())
        with self.assertRaises(ValueError):
            spec.x[0] = 5.0

    def test_chart_data_rejects_duplicate_ids(self) -> None:
        spec = Series("s", "f", "f.csv", "x", "y", [1.0], [1.0], ColumnStyle())
        with self.assertRaises(PlotDataError):
            ChartData((spec, spec))


if __name__ == "__main__":
    unittest.main()

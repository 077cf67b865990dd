from __future__ import annotations

from pathlib import Path
import tempfile
import unittest
import xml.etree.ElementTree as ET

from tabplot.model import ChartData, ChartOptions, ColumnStyle, LineStyle, PointStyle, Series
from tabplot.render import render
from tabplot.scene import Scene
from tabplot.svg import scene_to_svg, strip_namespace, write_svg


def _chart() -> ChartData:
    return ChartData(
        (
            Series("f-a", "f", "f.csv", "t", "a", [0.0, 1.0, 2.0], [1.0, 3.0, 2.0], ColumnStyle(color="#2563EB")),
            Series(
                "f-b",
                "f",
                "f.csv",
                "t",
                "b",
                [0.0, 2.0],
                [0.0, 5.0],
                ColumnStyle(color="#DC2626", line_style=LineStyle.DOTTED, point_style=PointStyle.SQUARE),
            ),
            Series(
                "f-c",
                "f",
                "f.csv",
                "t",
                "c",
                [0.5, 1.5],
                [2.0, 2.0],
                ColumnStyle(color="#10B981", show_line=False, point_style=PointStyle.TRIANGLE),
            ),
        )
    )


def _parse(scene: Scene) -> ET.Element:
    return ET.fromstring(scene_to_svg(scene))


def _find_all(root: ET.Element, tag: str, cls: str | None = None) -> list[ET.Element]:
    return [
        node
        for node in root.iter()
        if strip_namespace(node.tag) == tag and (cls is None or node.get("class") == cls)
    ]


class SvgExportTests(unittest.TestCase):
    def test_svg_has_one_path_per_drawn_line(self) -> None:
        scene = Scene(width=800, height=500)
        render(scene, _chart(), ChartOptions())
        root = _parse(scene)
        self.assertEqual(strip_namespace(root.tag), "svg")
        self.assertEqual(root.get("width"), "800")
        paths = _find_all(root, "path", "series-line")
        self.assertEqual([p.get("data-series") for p in paths], ["f-a", "f-b"])
        self.assertTrue(all(p.get("fill") == "none" for p in paths))
        self.assertEqual(paths[1].get("stroke-dasharray"), "2,2")
        self.assertIsNone(paths[0].get("stroke-dasharray"))

    def test_markers_map_to_circle_and_polygon(self) -> None:
        scene = Scene(width=800, height=500)
        render(scene, _chart(), ChartOptions())
        root = _parse(scene)
        circles = _find_all(root, "circle", "series-point")
        polygons = _find_all(root, "polygon", "series-point")
        self.assertEqual(len(circles), 3)
        self.assertEqual(len(polygons), 4)
        triangles = [p for p in polygons if p.get("data-series") == "f-c"]
        self.assertEqual(len(triangles[0].get("points").split()), 3)

    def test_series_groups_reference_clip_path(self) -> None:
        scene = Scene(width=800, height=500)
        render(scene, _chart(), ChartOptions())
        root = _parse(scene)
        clip_ids = {node.get("id") for node in _find_all(root, "clipPath")}
        self.assertEqual(clip_ids, {"clip-series", "clip-markers"})
        groups = {g.get("class"): g for g in _find_all(root, "g")}
        self.assertEqual(groups["series"].get("clip-path"), "url(#clip-series)")
        self.assertIsNone(groups["axes"].get("clip-path"))

    def test_text_escaping_and_rotation(self) -> None:
        scene = Scene(width=800, height=500)
        options = ChartOptions(title="Load <A & B>")
        render(scene, _chart(), options)
        root = _parse(scene)
        (title,) = _find_all(root, "text", "title")
        self.assertEqual(title.text, "Load <A & B>")
        self.assertEqual(title.get("font-weight"), "bold")
        y_title = [t for t in _find_all(root, "text", "axis-title") if t.text == "Y Axis"][0]
        self.assertTrue(y_title.get("transform").startswith("rotate(-90"))

    def test_write_svg_creates_file(self) -> None:
        scene = Scene(width=320, height=240)
        render(scene, _chart(), ChartOptions())
        with tempfile.TemporaryDirectory() as tmp:
            out = write_svg(scene, Path(tmp) / "nested" / "chart.svg")
            text = out.read_text(encoding="utf-8")
        self.assertTrue(text.startswith("<?xml"))
        self.assertIn("<svg", text)


if __name__ == "__main__":
    unittest.main()

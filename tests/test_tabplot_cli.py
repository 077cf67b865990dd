from __future__ import annotations

import contextlib
import io
from pathlib import Path
import tempfile
import unittest
import xml.etree.ElementTree as ET

from tabplot.cli import build_session, draw_chart, main, read_csv
from tabplot.config import load_state


CSV_TEXT = "time,temp,hum\n0,20,40\n1,21,x\n2,23,44\n3,22,45\n"


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.csv_path = self.tmp / "sensors.csv"
        self.csv_path.write_text(CSV_TEXT, encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, argv: list[str]) -> str:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(argv)
        self.assertEqual(code, 0)
        return out.getvalue()

    def test_read_csv_keeps_strings(self) -> None:
        columns, rows = read_csv(self.csv_path)
        self.assertEqual(columns, ["time", "temp", "hum"])
        self.assertEqual(rows[1], {"time": "1", "temp": "21", "hum": "x"})

    def test_render_writes_svg_and_png(self) -> None:
        svg = self.tmp / "out" / "chart.svg"
        png = self.tmp / "out" / "chart.png"
        output = self._run(["render", str(self.csv_path), "--y", "temp", "--y", "hum", "--svg", str(svg), "--png", str(png)])
        self.assertIn("series=2", output)
        self.assertTrue(png.exists())
        root = ET.parse(svg).getroot()
        paths = [n for n in root.iter() if n.tag.endswith("path") and n.get("class") == "series-line"]
        self.assertEqual(len(paths), 2)

    def test_render_requires_an_output(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                main(["render", str(self.csv_path)])

    def test_config_file_sets_manual_axis(self) -> None:
        config = self.tmp / "chart.toml"
        config.write_text("[chart.x_axis]\nmin = 0\nmax = 2\nauto_scale = false\n", encoding="utf-8")
        session = build_session([self.csv_path], config=config)
        _, layout, _ = draw_chart(session, 800, 500)
        self.assertEqual((layout.x_scale.min, layout.x_scale.max), (0.0, 2.0))

    def test_probe_prints_tooltip(self) -> None:
        session = build_session([self.csv_path], y_columns=["temp"])
        _, layout, _ = draw_chart(session, 800, 500)
        pixel_x = layout.to_surface_x(2.0)
        output = self._run(["probe", str(self.csv_path), "--y", "temp", "--pixel-x", str(pixel_x)])
        self.assertEqual(output.splitlines(), ["X: 2.00", "temp: 23.00"])

    def test_state_file_is_written_and_reused(self) -> None:
        state = self.tmp / "state.json"
        svg = self.tmp / "chart.svg"
        self._run(["render", str(self.csv_path), "--y", "hum", "--state", str(state), "--svg", str(svg)])
        saved = load_state(state)
        self.assertEqual(saved.files[0].name, "sensors.csv")
        self.assertEqual(saved.files[0].selection.y_columns, ("hum",))


if __name__ == "__main__":
    unittest.main()

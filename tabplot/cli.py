from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import Sequence

from tabplot.config import load_options_toml, load_state, save_state
from tabplot.model import ChartData, ChartOptions
from tabplot.proximity import format_tooltip, lookup_pointer
from tabplot.raster import write_png
from tabplot.render import ChartLayout, render
from tabplot.scene import Scene
from tabplot.session import ChartSession
from tabplot.svg import write_svg


LOGGER = logging.getLogger(__name__)


def read_csv(path: Path) -> tuple[list[str], list[dict[str, str]]]:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        rows = [dict(row) for row in reader]
        columns = list(reader.fieldnames or [])
    LOGGER.debug("read %d rows (%d columns) from %s", len(rows), len(columns), path)
    return columns, rows


def build_session(
    csv_paths: Sequence[Path],
    *,
    x_column: str | None = None,
    y_columns: Sequence[str] = (),
    config: Path | None = None,
    state: Path | None = None,
) -> ChartSession:
    options = ChartOptions()
    saved_styles = {}
    if state is not None:
        saved = load_state(state)
        options = saved.options
        # Styles are matched by file name since ids are fresh per run.
        saved_styles = {meta.name: meta.column_styles for meta in saved.files}
    if config is not None:
        options = load_options_toml(config, base=options)

    def persist(current: ChartSession) -> None:
        save_state(state, current.files, current.options)

    session = ChartSession(options=options, on_change=persist if state is not None else None)
    for path in csv_paths:
        columns, rows = read_csv(path)
        added = session.add_file(path.name, columns, rows)
        for column, style in saved_styles.get(path.name, {}).items():
            if column in added.column_styles:
                session.update_color(added.id, column, style.color)
                session.update_line_style(added.id, column, style.line_style)
                session.update_point_style(added.id, column, style.point_style)
                session.update_visibility(added.id, column, show_line=style.show_line, show_points=style.show_points)
        if x_column is not None or y_columns:
            current = session.file(added.id).selection
            session.update_axis_selection(
                added.id,
                x_column if x_column is not None else current.x_column,
                list(y_columns) if y_columns else list(current.y_columns),
            )
    return session


def draw_chart(session: ChartSession, width: int, height: int) -> tuple[Scene, ChartLayout, ChartData]:
    chart = session.generate_chart() or ChartData()
    scene = Scene(width=width, height=height)
    layout = render(scene, chart, session.options)
    return scene, layout, chart


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="tabplot")
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("csv_files", nargs="+", type=Path)
    common.add_argument("--x", dest="x_column", default=None, help="X column. Default: first column of each file.")
    common.add_argument(
        "--y",
        dest="y_columns",
        action="append",
        default=[],
        help="Y column; repeat for several series. Default: second column of each file.",
    )
    common.add_argument("--config", type=Path, default=None, help="TOML file with chart options.")
    common.add_argument("--state", type=Path, default=None, help="JSON file to restore and persist chart state.")
    common.add_argument("--width", type=int, default=800)
    common.add_argument("--height", type=int, default=500)
    common.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING")

    render_cmd = sub.add_parser("render", parents=[common], help="Render CSV columns to SVG and/or PNG.")
    render_cmd.add_argument("--svg", type=Path, default=None)
    render_cmd.add_argument("--png", type=Path, default=None)

    probe = sub.add_parser("probe", parents=[common], help="Print tooltip lines for a pointer x position.")
    probe.add_argument("--pixel-x", type=float, required=True)

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    session = build_session(
        args.csv_files,
        x_column=args.x_column,
        y_columns=args.y_columns,
        config=args.config,
        state=args.state,
    )
    scene, layout, chart = draw_chart(session, args.width, args.height)

    if args.command == "render":
        if args.svg is None and args.png is None:
            parser.error("render needs at least one of --svg/--png")
        if args.svg is not None:
            print(f"wrote {write_svg(scene, args.svg)}")
        if args.png is not None:
            print(f"wrote {write_png(scene, args.png)}")
        print(f"series={len(chart)} x=[{layout.x_scale.min:g}, {layout.x_scale.max:g}] y=[{layout.y_scale.min:g}, {layout.y_scale.max:g}]")
        return 0

    if args.command == "probe":
        for line in format_tooltip(lookup_pointer(args.pixel_x, layout, chart)):
            print(line)
        return 0

    raise RuntimeError(f"unsupported command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())

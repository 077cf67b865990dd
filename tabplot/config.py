from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import math
from pathlib import Path
import tomllib
from typing import Any, Mapping, Sequence

from tabplot.model import AxisConfig, ChartOptions, ColumnSelection, ColumnStyle, LineStyle, PointStyle, SourceFile
from tabplot.styles import is_hex_color


LOGGER = logging.getLogger(__name__)

STATE_VERSION = 1

_AXIS_KEYS = ("title", "min", "max", "auto_scale")
_OPTION_KEYS = ("title", "show_legend", "show_grid", "x_axis", "y_axis")
_STYLE_KEYS = ("color", "line_style", "point_style", "show_line", "show_points")


@dataclass(frozen=True)
class FileMetadata:
    id: str
    name: str
    columns: tuple[str, ...] = ()
    selection: ColumnSelection = field(default_factory=ColumnSelection)
    column_styles: Mapping[str, ColumnStyle] = field(default_factory=dict)


@dataclass(frozen=True)
class SavedState:
    files: tuple[FileMetadata, ...] = ()
    options: ChartOptions = field(default_factory=ChartOptions)


def axis_to_dict(axis: AxisConfig) -> dict[str, Any]:
    return {"title": axis.title, "min": axis.min, "max": axis.max, "auto_scale": axis.auto_scale}


def options_to_dict(options: ChartOptions) -> dict[str, Any]:
    return {
        "title": options.title,
        "show_legend": options.show_legend,
        "show_grid": options.show_grid,
        "x_axis": axis_to_dict(options.x_axis),
        "y_axis": axis_to_dict(options.y_axis),
    }


def axis_from_mapping(raw: Mapping[str, Any], *, base: AxisConfig | None = None, name: str = "axis") -> AxisConfig:
    if not isinstance(raw, Mapping):
        raise ValueError(f"`{name}` must be a table/object")
    merged: dict[str, Any] = axis_to_dict(base or AxisConfig())
    for key, value in raw.items():
        if key not in _AXIS_KEYS:
            raise ValueError(f"Unknown axis option `{name}.{key}`")
        merged[key] = value
    if not isinstance(merged["title"], str):
        raise ValueError(f"`{name}.title` must be a string")
    if not isinstance(merged["auto_scale"], bool):
        raise ValueError(f"`{name}.auto_scale` must be a boolean")
    for bound in ("min", "max"):
        merged[bound] = _optional_float(merged[bound], f"{name}.{bound}")
    return AxisConfig(
        title=merged["title"],
        min=merged["min"],
        max=merged["max"],
        auto_scale=merged["auto_scale"],
    )


def options_from_mapping(raw: Mapping[str, Any] | None = None, *, base: ChartOptions | None = None) -> ChartOptions:
    """Validate and merge option overrides onto ``base`` (defaults when omitted)."""
    base = ChartOptions() if base is None else base
    if not raw:
        return base
    for key in raw:
        if key not in _OPTION_KEYS:
            raise ValueError(f"Unknown chart option: {key}")
    title = raw.get("title", base.title)
    if not isinstance(title, str):
        raise ValueError("Option `title` must be a string")
    flags: dict[str, bool] = {}
    for key in ("show_legend", "show_grid"):
        value = raw.get(key, getattr(base, key))
        if not isinstance(value, bool):
            raise ValueError(f"Option `{key}` must be a boolean")
        flags[key] = value
    x_axis = axis_from_mapping(raw["x_axis"], base=base.x_axis, name="x_axis") if "x_axis" in raw else base.x_axis
    y_axis = axis_from_mapping(raw["y_axis"], base=base.y_axis, name="y_axis") if "y_axis" in raw else base.y_axis
    return ChartOptions(title=title, x_axis=x_axis, y_axis=y_axis, **flags)


def style_to_dict(style: ColumnStyle) -> dict[str, Any]:
    return {
        "color": style.color,
        "line_style": style.line_style.value,
        "point_style": style.point_style.value,
        "show_line": style.show_line,
        "show_points": style.show_points,
    }


def style_from_mapping(raw: Mapping[str, Any], *, base: ColumnStyle | None = None) -> ColumnStyle:
    if not isinstance(raw, Mapping):
        raise ValueError("column style must be a table/object")
    merged = style_to_dict(base or ColumnStyle())
    for key, value in raw.items():
        if key not in _STYLE_KEYS:
            raise ValueError(f"Unknown column style field: {key}")
        merged[key] = value
    if not is_hex_color(merged["color"]):
        raise ValueError("Style `color` must be a hex color (#RRGGBB or #RRGGBBAA)")
    try:
        line_style = LineStyle(merged["line_style"])
        point_style = PointStyle(merged["point_style"])
    except ValueError as exc:
        raise ValueError(f"invalid column style: {exc}") from exc
    for key in ("show_line", "show_points"):
        if not isinstance(merged[key], bool):
            raise ValueError(f"Style `{key}` must be a boolean")
    return ColumnStyle(
        color=merged["color"],
        line_style=line_style,
        point_style=point_style,
        show_line=merged["show_line"],
        show_points=merged["show_points"],
    )


def file_metadata(file: SourceFile | FileMetadata) -> FileMetadata:
    return FileMetadata(
        id=file.id,
        name=file.name,
        columns=tuple(file.columns),
        selection=file.selection,
        column_styles=dict(file.column_styles),
    )


def _metadata_to_dict(meta: FileMetadata) -> dict[str, Any]:
    return {
        "id": meta.id,
        "name": meta.name,
        "columns": list(meta.columns),
        "selected": {"x_axis": meta.selection.x_column, "y_axes": list(meta.selection.y_columns)},
        "column_styles": {col: style_to_dict(style) for col, style in meta.column_styles.items()},
    }


def _metadata_from_mapping(raw: Mapping[str, Any]) -> FileMetadata:
    if not isinstance(raw, Mapping):
        raise ValueError("file entry must be an object")
    try:
        file_id = raw["id"]
        name = raw["name"]
    except KeyError as exc:
        raise ValueError(f"file entry missing required field: {exc.args[0]}") from exc
    if not isinstance(file_id, str) or not isinstance(name, str):
        raise ValueError("file `id` and `name` must be strings")
    columns = _string_list(raw.get("columns", []), "columns")
    selected = raw.get("selected", {}) or {}
    if not isinstance(selected, Mapping):
        raise ValueError("file `selected` must be an object")
    x_column = selected.get("x_axis", "")
    if not isinstance(x_column, str):
        raise ValueError("`selected.x_axis` must be a string")
    selection = ColumnSelection(x_column=x_column, y_columns=tuple(_string_list(selected.get("y_axes", []), "selected.y_axes")))
    styles_raw = raw.get("column_styles", {}) or {}
    if not isinstance(styles_raw, Mapping):
        raise ValueError("file `column_styles` must be an object")
    styles = {str(col): style_from_mapping(style) for col, style in styles_raw.items()}
    return FileMetadata(id=file_id, name=name, columns=tuple(columns), selection=selection, column_styles=styles)


def state_to_dict(files: Sequence[SourceFile | FileMetadata], options: ChartOptions) -> dict[str, Any]:
    # Row data is never persisted; only what is needed to restore selections and styles.
    return {
        "version": STATE_VERSION,
        "files": [_metadata_to_dict(file_metadata(f)) for f in files],
        "options": options_to_dict(options),
    }


def state_from_mapping(raw: Mapping[str, Any]) -> SavedState:
    if not isinstance(raw, Mapping):
        raise ValueError("state must be an object")
    files_raw = raw.get("files", [])
    if not isinstance(files_raw, list):
        raise ValueError("state `files` must be a list")
    files = tuple(_metadata_from_mapping(entry) for entry in files_raw)
    options = options_from_mapping(raw.get("options") or {})
    return SavedState(files=files, options=options)


def save_state(path: str | Path, files: Sequence[SourceFile | FileMetadata], options: ChartOptions) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    tmp = out.with_suffix(out.suffix + ".tmp")
    tmp.write_text(json.dumps(state_to_dict(files, options), indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(out)
    return out


def load_state(path: str | Path) -> SavedState:
    src = Path(path)
    if not src.exists():
        return SavedState()
    try:
        raw = json.loads(src.read_text(encoding="utf-8"))
        return state_from_mapping(raw)
    except (OSError, json.JSONDecodeError, ValueError) as exc:
        LOGGER.warning("ignoring unreadable chart state %s: %s", src, exc)
        return SavedState()


def load_options_toml(path: str | Path, *, base: ChartOptions | None = None) -> ChartOptions:
    src = Path(path)
    if not src.exists():
        raise FileNotFoundError(f"chart options file not found: {src}")
    with src.open("rb") as f:
        raw = tomllib.load(f)
    chart = raw.get("chart", raw)
    return options_from_mapping(chart, base=base)


def _optional_float(value: Any, name: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"`{name}` must be a number")
    out = float(value)
    if not math.isfinite(out):
        raise ValueError(f"`{name}` must be finite")
    return out


def _string_list(value: Any, name: str) -> list[str]:
    if not isinstance(value, list):
        raise ValueError(f"`{name}` must be a list")
    out: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"`{name}` entries must be strings")
        out.append(item)
    return out

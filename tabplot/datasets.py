from __future__ import annotations

from dataclasses import replace
import logging
import math
import re
from typing import Mapping, Sequence

import numpy as np

from tabplot.model import ChartData, ColumnSelection, ColumnStyle, RawRecord, Series, SourceFile


LOGGER = logging.getLogger(__name__)

PALETTE: tuple[str, ...] = (
    "#2563EB",
    "#0D9488",
    "#7C3AED",
    "#10B981",
    "#F59E0B",
    "#DC2626",
    "#6366F1",
    "#EC4899",
    "#8B5CF6",
    "#14B8A6",
    "#F97316",
    "#06B6D4",
)

StyleMap = Mapping[str, Mapping[str, ColumnStyle]]

# ASCII decimal literals only: no "1_000", "nan" or non-ASCII digits.
_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def palette_color(index: int) -> str:
    return PALETTE[int(index) % len(PALETTE)]


def fallback_style(index: int) -> ColumnStyle:
    return ColumnStyle(color=palette_color(index))


def default_selection(columns: Sequence[str]) -> ColumnSelection:
    cols = list(columns)
    x_column = cols[0] if cols else ""
    y_columns = (cols[1],) if len(cols) > 1 else ()
    return ColumnSelection(x_column=x_column, y_columns=y_columns)


def default_column_styles(columns: Sequence[str]) -> dict[str, ColumnStyle]:
    return {col: fallback_style(i) for i, col in enumerate(columns)}


def coerce_number(raw: object) -> float | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not _NUMBER.fullmatch(text):
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if not math.isfinite(value):
        return None
    return value


def extract_xy(rows: Sequence[RawRecord], x_column: str, y_column: str) -> tuple[np.ndarray, np.ndarray]:
    xs: list[float] = []
    ys: list[float] = []
    for row in rows:
        xv = coerce_number(row.get(x_column))
        if xv is None:
            continue
        yv = coerce_number(row.get(y_column))
        if yv is None:
            continue
        xs.append(xv)
        ys.append(yv)
    x_arr = np.asarray(xs, dtype=np.float64)
    y_arr = np.asarray(ys, dtype=np.float64)
    if x_arr.size > 1:
        order = np.argsort(x_arr, kind="stable")
        x_arr = x_arr[order]
        y_arr = y_arr[order]
    return x_arr, y_arr


def build_file_series(
    file: SourceFile,
    styles: Mapping[str, ColumnStyle] | None = None,
    *,
    palette_offset: int = 0,
    used_ids: set[str] | None = None,
) -> list[Series]:
    """Series for one file's selection.

    ``used_ids`` is shared across files by :func:`build_datasets` so ids stay unique
    chart-wide; it is updated in place.
    """
    selection = file.selection
    if not selection.is_complete:
        return []
    style_map = file.column_styles if styles is None else styles
    out: list[Series] = []
    if used_ids is None:
        used_ids = set()
    for ordinal, y_column in enumerate(selection.y_columns):
        x_arr, y_arr = extract_xy(file.rows, selection.x_column, y_column)
        dropped = len(file.rows) - int(x_arr.size)
        if dropped:
            LOGGER.debug("file %s column %s: dropped %d non-numeric rows", file.id, y_column, dropped)
        if x_arr.size == 0:
            continue
        series_id = f"{file.id}-{y_column}"
        if series_id in used_ids:
            suffix = 2
            while f"{series_id}#{suffix}" in used_ids:
                suffix += 1
            series_id = f"{series_id}#{suffix}"
        used_ids.add(series_id)
        style = style_map.get(y_column)
        if style is None:
            style = fallback_style(palette_offset + ordinal)
        out.append(
            Series(
                id=series_id,
                file_id=file.id,
                file_name=file.name,
                x_column=selection.x_column,
                y_column=y_column,
                x=x_arr,
                y=y_arr,
                style=style,
                label=y_column,
            )
        )
    return out


def build_datasets(files: Sequence[SourceFile], styles: StyleMap | None = None) -> ChartData:
    series: list[Series] = []
    palette_offset = 0
    used_ids: set[str] = set()
    for file in files:
        file_styles = None if styles is None else styles.get(file.id)
        built = build_file_series(file, file_styles, palette_offset=palette_offset, used_ids=used_ids)
        palette_offset += len(file.selection.y_columns)
        series.extend(built)
    return ChartData(series=tuple(series))


def rename_column(file: SourceFile, old: str, new: str) -> SourceFile:
    if old == new or old not in file.columns:
        return file
    if not new:
        raise ValueError("new column name must be non-empty")
    if new in file.columns:
        raise ValueError(f"column already exists: {new}")

    columns = tuple(new if col == old else col for col in file.columns)
    selection = ColumnSelection(
        x_column=new if file.selection.x_column == old else file.selection.x_column,
        y_columns=tuple(new if col == old else col for col in file.selection.y_columns),
    )
    column_styles = {(new if col == old else col): style for col, style in file.column_styles.items()}
    rows = tuple({(new if key == old else key): value for key, value in row.items()} for row in file.rows)
    return replace(file, columns=columns, selection=selection, column_styles=column_styles, rows=rows)

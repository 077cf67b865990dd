from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any, Callable, Iterable, Mapping, Sequence
import uuid

from tabplot.config import FileMetadata, SavedState
from tabplot.datasets import build_datasets, default_column_styles, default_selection, rename_column
from tabplot.model import (
    AxisName,
    ChartData,
    ChartOptions,
    ColumnSelection,
    ColumnStyle,
    LineStyle,
    PointStyle,
    RawRecord,
    SourceFile,
)


LOGGER = logging.getLogger(__name__)

ChangeListener = Callable[["ChartSession"], None]


class ChartSession:
    """Holds files, chart options and the last generated chart.

    Persistence stays outside: pass ``on_change`` to save after every change and
    :meth:`from_saved` to restore at start-up.
    """

    def __init__(
        self,
        files: Iterable[SourceFile] = (),
        options: ChartOptions | None = None,
        *,
        on_change: ChangeListener | None = None,
    ) -> None:
        self._files: tuple[SourceFile, ...] = tuple(files)
        self._options = ChartOptions() if options is None else options
        self._chart_data: ChartData | None = None
        self._on_change = on_change

    @classmethod
    def from_saved(cls, state: SavedState, *, on_change: ChangeListener | None = None) -> "ChartSession":
        # Saved state carries no rows; files come back empty until re-attached.
        files = [
            SourceFile(
                id=meta.id,
                name=meta.name,
                columns=meta.columns,
                rows=(),
                selection=meta.selection,
                column_styles=meta.column_styles,
            )
            for meta in state.files
        ]
        return cls(files, state.options, on_change=on_change)

    @property
    def files(self) -> tuple[SourceFile, ...]:
        return self._files

    @property
    def options(self) -> ChartOptions:
        return self._options

    @property
    def chart_data(self) -> ChartData | None:
        return self._chart_data

    def file(self, file_id: str) -> SourceFile:
        for f in self._files:
            if f.id == file_id:
                return f
        raise KeyError(f"unknown file id: {file_id}")

    def metadata(self) -> list[FileMetadata]:
        return [
            FileMetadata(id=f.id, name=f.name, columns=f.columns, selection=f.selection, column_styles=f.column_styles)
            for f in self._files
        ]

    def add_file(
        self,
        name: str,
        columns: Sequence[str],
        rows: Sequence[RawRecord],
        *,
        file_id: str | None = None,
    ) -> SourceFile:
        cols = tuple(columns) if columns else tuple(rows[0].keys()) if rows else ()
        new_file = SourceFile(
            id=file_id or str(uuid.uuid4()),
            name=name,
            columns=cols,
            rows=tuple(dict(row) for row in rows),
            selection=default_selection(cols),
            column_styles=default_column_styles(cols),
        )
        if any(f.id == new_file.id for f in self._files):
            raise ValueError(f"duplicate file id: {new_file.id}")
        self._files = self._files + (new_file,)
        LOGGER.info("added file %s (%s) with %d rows", new_file.name, new_file.id, len(new_file.rows))
        self._changed()
        return new_file

    def attach_rows(self, file_id: str, rows: Sequence[RawRecord]) -> None:
        self._replace_file(file_id, lambda f: replace(f, rows=tuple(dict(row) for row in rows)))

    def remove_file(self, file_id: str) -> None:
        remaining = tuple(f for f in self._files if f.id != file_id)
        if len(remaining) == len(self._files):
            return
        self._files = remaining
        self._changed()

    def update_axis_selection(self, file_id: str, x_column: str, y_columns: Sequence[str]) -> None:
        selection = ColumnSelection(x_column=x_column, y_columns=tuple(y_columns))
        self._replace_file(file_id, lambda f: replace(f, selection=selection))

    def update_line_style(self, file_id: str, column: str, style: LineStyle | str) -> None:
        self._update_style(file_id, column, line_style=LineStyle(style))

    def update_point_style(self, file_id: str, column: str, style: PointStyle | str) -> None:
        self._update_style(file_id, column, point_style=PointStyle(style))

    def update_color(self, file_id: str, column: str, color: str) -> None:
        self._update_style(file_id, column, color=color)

    def update_visibility(
        self,
        file_id: str,
        column: str,
        *,
        show_line: bool | None = None,
        show_points: bool | None = None,
    ) -> None:
        changes: dict[str, Any] = {}
        if show_line is not None:
            changes["show_line"] = bool(show_line)
        if show_points is not None:
            changes["show_points"] = bool(show_points)
        if changes:
            self._update_style(file_id, column, **changes)

    def update_axis_config(self, axis: AxisName, **changes: Any) -> None:
        current = self._options.axis(axis)
        updated = replace(current, **changes)
        if axis == "x":
            self._options = replace(self._options, x_axis=updated)
        else:
            self._options = replace(self._options, y_axis=updated)
        self._changed()

    def update_options(self, **changes: Any) -> None:
        self._options = replace(self._options, **changes)
        self._changed()

    def rename_column(self, file_id: str, old: str, new: str) -> None:
        self._replace_file(file_id, lambda f: rename_column(f, old, new))

    def generate_chart(self, styles: Mapping[str, Mapping[str, ColumnStyle]] | None = None) -> ChartData | None:
        chart = build_datasets(self._files, styles)
        self._chart_data = None if chart.is_empty else chart
        LOGGER.debug("generated chart with %d series", len(chart))
        return self._chart_data

    def reset_chart(self) -> None:
        self._chart_data = None

    def _update_style(self, file_id: str, column: str, **changes: Any) -> None:
        def apply(f: SourceFile) -> SourceFile:
            style = f.column_styles.get(column)
            if style is None:
                return f
            styles = dict(f.column_styles)
            styles[column] = style.with_changes(**changes)
            return replace(f, column_styles=styles)

        self._replace_file(file_id, apply)

    def _replace_file(self, file_id: str, update: Callable[[SourceFile], SourceFile]) -> None:
        changed = False
        out: list[SourceFile] = []
        for f in self._files:
            if f.id == file_id:
                updated = update(f)
                changed = changed or updated is not f
                out.append(updated)
            else:
                out.append(f)
        if not changed:
            return
        self._files = tuple(out)
        self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

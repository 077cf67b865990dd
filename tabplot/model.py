from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterator, Literal, Mapping

import numpy as np

from tabplot.errors import PlotDataError


RawRecord = Mapping[str, str]
AxisName = Literal["x", "y"]


class LineStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


class PointStyle(str, Enum):
    CIRCLE = "circle"
    SQUARE = "square"
    TRIANGLE = "triangle"
    NONE = "none"


@dataclass(frozen=True)
class ColumnStyle:
    color: str = "#2563EB"
    line_style: LineStyle = LineStyle.SOLID
    point_style: PointStyle = PointStyle.CIRCLE
    show_line: bool = True
    show_points: bool = True

    def __post_init__(self) -> None:
        # Accept plain strings from config files and normalize to the closed variants.
        object.__setattr__(self, "line_style", LineStyle(self.line_style))
        object.__setattr__(self, "point_style", PointStyle(self.point_style))

    @property
    def draws_markers(self) -> bool:
        return self.show_points and self.point_style is not PointStyle.NONE

    def with_changes(self, **changes: Any) -> "ColumnStyle":
        return replace(self, **changes)


@dataclass(frozen=True)
class ColumnSelection:
    x_column: str = ""
    y_columns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "y_columns", tuple(self.y_columns))

    @property
    def is_complete(self) -> bool:
        return bool(self.x_column) and len(self.y_columns) > 0


@dataclass(frozen=True)
class DataPoint:
    x: float
    y: float


@dataclass(frozen=True, eq=False)
class Series:
    id: str
    file_id: str
    file_name: str
    x_column: str
    y_column: str
    x: np.ndarray
    y: np.ndarray
    style: ColumnStyle
    label: str = ""

    def __post_init__(self) -> None:
        x = np.array(self.x, dtype=np.float64)
        y = np.array(self.y, dtype=np.float64)
        if x.ndim != 1 or x.shape != y.shape:
            raise PlotDataError(f"series {self.id!r}: x and y must be 1-D arrays of equal length")
        if x.size == 0:
            raise PlotDataError(f"series {self.id!r} has no points")
        if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
            raise PlotDataError(f"series {self.id!r} contains non-finite values")
        if x.size > 1 and np.any(np.diff(x) < 0):
            raise PlotDataError(f"series {self.id!r} must be sorted ascending by x")
        x.flags.writeable = False
        y.flags.writeable = False
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        if not self.label:
            object.__setattr__(self, "label", self.y_column)

    def __len__(self) -> int:
        return int(self.x.size)

    def point(self, index: int) -> DataPoint:
        return DataPoint(x=float(self.x[index]), y=float(self.y[index]))

    def points(self) -> Iterator[DataPoint]:
        for xv, yv in zip(self.x.tolist(), self.y.tolist()):
            yield DataPoint(x=xv, y=yv)


@dataclass(frozen=True)
class ChartData:
    series: tuple[Series, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "series", tuple(self.series))
        seen: set[str] = set()
        for spec in self.series:
            if spec.id in seen:
                raise PlotDataError(f"duplicate series id: {spec.id}")
            seen.add(spec.id)

    def __iter__(self) -> Iterator[Series]:
        return iter(self.series)

    def __len__(self) -> int:
        return len(self.series)

    @property
    def is_empty(self) -> bool:
        return not self.series

    def get(self, series_id: str) -> Series | None:
        for spec in self.series:
            if spec.id == series_id:
                return spec
        return None


@dataclass(frozen=True)
class SourceFile:
    id: str
    name: str
    columns: tuple[str, ...] = ()
    rows: tuple[RawRecord, ...] = ()
    selection: ColumnSelection = field(default_factory=ColumnSelection)
    column_styles: Mapping[str, ColumnStyle] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "rows", tuple(self.rows))
        object.__setattr__(self, "column_styles", dict(self.column_styles))


@dataclass(frozen=True)
class AxisConfig:
    title: str = ""
    min: float | None = None
    max: float | None = None
    auto_scale: bool = True

    @property
    def has_manual_bounds(self) -> bool:
        return (not self.auto_scale) and self.min is not None and self.max is not None


@dataclass(frozen=True)
class ChartOptions:
    title: str = "CSV Visualization"
    show_legend: bool = True
    show_grid: bool = True
    x_axis: AxisConfig = field(default_factory=lambda: AxisConfig(title="X Axis"))
    y_axis: AxisConfig = field(default_factory=lambda: AxisConfig(title="Y Axis"))

    def axis(self, name: AxisName) -> AxisConfig:
        if name == "x":
            return self.x_axis
        if name == "y":
            return self.y_axis
        raise ValueError("axis must be 'x' or 'y'")

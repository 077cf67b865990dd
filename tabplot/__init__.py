from tabplot.config import SavedState, load_options_toml, load_state, save_state
from tabplot.datasets import build_datasets, rename_column
from tabplot.errors import PlotDataError
from tabplot.model import (
    AxisConfig,
    ChartData,
    ChartOptions,
    ColumnSelection,
    ColumnStyle,
    DataPoint,
    LineStyle,
    PointStyle,
    Series,
    SourceFile,
)
from tabplot.proximity import format_tooltip, lookup_pointer, pointer_leave, query_nearest
from tabplot.render import ChartLayout, render
from tabplot.scales import AxisScale, resolve_axis
from tabplot.scene import Scene
from tabplot.session import ChartSession
from tabplot.svg import scene_to_svg, write_svg

__all__ = [
    "AxisConfig",
    "AxisScale",
    "ChartData",
    "ChartLayout",
    "ChartOptions",
    "ChartSession",
    "ColumnSelection",
    "ColumnStyle",
    "DataPoint",
    "LineStyle",
    "PlotDataError",
    "PointStyle",
    "SavedState",
    "Scene",
    "Series",
    "SourceFile",
    "build_datasets",
    "format_tooltip",
    "load_options_toml",
    "load_state",
    "lookup_pointer",
    "pointer_leave",
    "query_nearest",
    "rename_column",
    "render",
    "resolve_axis",
    "save_state",
    "scene_to_svg",
    "write_svg",
]

from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np

from tabplot.curves import flatten_segments, monotone_x_segments, svg_path_data
from tabplot.model import ChartData, ChartOptions, Series
from tabplot.scales import AxisScale, Numeric, format_ticks_for_axis, resolve_axis
from tabplot.scene import Layer, LineElement, MarkerElement, PathElement, RectElement, Scene, TextElement
from tabplot.styles import MARKER_AREAS, dash_array


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderTheme:
    axis_color: str = "#333333"
    text_color: str = "#333333"
    grid_color: str = "#e0e0e0"
    grid_opacity: float = 0.7
    line_width: float = 2.0
    tick_length: float = 6.0
    title_font_px: float = 16.0
    label_font_px: float = 14.0
    tick_font_px: float = 11.0
    legend_font_px: float = 12.0
    legend_swatch_px: float = 15.0
    legend_row_px: float = 25.0
    legend_text_gap_px: float = 9.0
    legend_offset_px: float = 10.0
    margin_top: int = 40
    margin_bottom: int = 60
    margin_left: int = 80
    margin_right: int = 80
    margin_right_compact: int = 20
    x_tick_spacing_px: int = 80
    y_tick_spacing_px: int = 50
    curve_steps: int = 12


DEFAULT_THEME = RenderTheme()


@dataclass(frozen=True)
class ChartLayout:
    width: int
    height: int
    plot_x0: float
    plot_y0: float
    plot_w: float
    plot_h: float
    x_scale: AxisScale
    y_scale: AxisScale
    x_ticks: tuple[float, ...] = ()
    y_ticks: tuple[float, ...] = ()

    @property
    def plot_rect(self) -> tuple[float, float, float, float]:
        return (self.plot_x0, self.plot_y0, self.plot_w, self.plot_h)

    def to_surface_x(self, x: Numeric) -> Numeric:
        return self.plot_x0 + self.x_scale.to_range(x)

    def to_surface_y(self, y: Numeric) -> Numeric:
        return self.plot_y0 + self.y_scale.to_range(y)

    def pixel_to_domain_x(self, pixel_x: float) -> float:
        return float(self.x_scale.to_domain(float(pixel_x) - self.plot_x0))

    def contains_pixel(self, pixel_x: float, pixel_y: float) -> bool:
        return (
            self.plot_x0 <= pixel_x <= self.plot_x0 + self.plot_w
            and self.plot_y0 <= pixel_y <= self.plot_y0 + self.plot_h
        )


def estimate_text_width(text: str, font_px: float) -> float:
    return len(text) * font_px * 0.6


def legend_width(chart_data: ChartData, theme: RenderTheme) -> float:
    longest = max((estimate_text_width(spec.label, theme.legend_font_px) for spec in chart_data), default=0.0)
    return theme.legend_swatch_px + theme.legend_text_gap_px + longest


def compute_layout(width: int, height: int, chart_data: ChartData, options: ChartOptions, theme: RenderTheme) -> ChartLayout:
    left = theme.margin_left
    bottom = theme.margin_bottom
    top = theme.margin_top
    if options.show_legend:
        right = int(max(theme.margin_right, np.ceil(theme.legend_offset_px + legend_width(chart_data, theme) + 10)))
    else:
        right = theme.margin_right_compact

    # Bound gutters for small surfaces so a drawable plot area survives.
    left = min(left, max(6, width // 3))
    right = min(right, max(4, width // 2))
    top = min(top, max(4, height // 3))
    bottom = min(bottom, max(6, height // 3))
    plot_w = width - left - right
    plot_h = height - top - bottom
    if plot_w <= 1 or plot_h <= 1:
        # No room for gutters: the plot takes the whole surface.
        LOGGER.warning("surface %dx%d too small for chart margins; drawing without gutters", width, height)
        left = right = top = bottom = 0
        plot_w = width
        plot_h = height

    x_scale = resolve_axis(chart_data, options.x_axis, "x", extent=float(plot_w))
    y_scale = resolve_axis(chart_data, options.y_axis, "y", extent=float(plot_h))
    x_ticks = x_scale.ticks(max(2, plot_w // theme.x_tick_spacing_px))
    y_ticks = y_scale.ticks(max(2, plot_h // theme.y_tick_spacing_px))
    return ChartLayout(
        width=width,
        height=height,
        plot_x0=float(left),
        plot_y0=float(top),
        plot_w=float(plot_w),
        plot_h=float(plot_h),
        x_scale=x_scale,
        y_scale=y_scale,
        x_ticks=tuple(float(v) for v in x_ticks.tolist()),
        y_ticks=tuple(float(v) for v in y_ticks.tolist()),
    )


def render(
    surface: Scene,
    chart_data: ChartData,
    options: ChartOptions,
    *,
    theme: RenderTheme | None = None,
) -> ChartLayout:
    theme = DEFAULT_THEME if theme is None else theme
    surface.clear()
    layout = compute_layout(surface.width, surface.height, chart_data, options, theme)

    if options.show_grid:
        _draw_grid(surface.add_layer("grid"), layout, theme)
    _draw_axes(surface.add_layer("axes"), layout, options, theme)
    _draw_series_lines(surface.add_layer("series", clip=layout.plot_rect), chart_data, layout, theme)
    _draw_markers(surface.add_layer("markers", clip=layout.plot_rect), chart_data, layout)
    if options.show_legend:
        _draw_legend(surface.add_layer("legend"), chart_data, layout, theme)
    if options.title:
        _draw_title(surface.add_layer("title"), options.title, layout, theme)

    LOGGER.debug(
        "rendered %d series on %dx%d surface (x=[%g, %g], y=[%g, %g])",
        len(chart_data),
        surface.width,
        surface.height,
        layout.x_scale.min,
        layout.x_scale.max,
        layout.y_scale.min,
        layout.y_scale.max,
    )
    return layout


def _draw_grid(layer: Layer, layout: ChartLayout, theme: RenderTheme) -> None:
    x0, y0, w, h = layout.plot_rect
    for xv in layout.x_ticks:
        gx = float(layout.to_surface_x(xv))
        layer.add(
            LineElement(gx, y0, gx, y0 + h, stroke=theme.grid_color, role="grid", opacity=theme.grid_opacity)
        )
    for yv in layout.y_ticks:
        gy = float(layout.to_surface_y(yv))
        layer.add(
            LineElement(x0, gy, x0 + w, gy, stroke=theme.grid_color, role="grid", opacity=theme.grid_opacity)
        )


def _draw_axes(layer: Layer, layout: ChartLayout, options: ChartOptions, theme: RenderTheme) -> None:
    x0, y0, w, h = layout.plot_rect
    base_y = y0 + h
    layer.add(LineElement(x0, base_y, x0 + w, base_y, stroke=theme.axis_color, role="axis"))
    layer.add(LineElement(x0, y0, x0, base_y, stroke=theme.axis_color, role="axis"))

    x_labels = format_ticks_for_axis(np.asarray(layout.x_ticks, dtype=np.float64))
    for xv, label in zip(layout.x_ticks, x_labels):
        gx = float(layout.to_surface_x(xv))
        layer.add(LineElement(gx, base_y, gx, base_y + theme.tick_length, stroke=theme.axis_color, role="tick"))
        layer.add(
            TextElement(
                gx,
                base_y + theme.tick_length + 3 + theme.tick_font_px,
                label,
                fill=theme.text_color,
                role="tick-label",
                font_size=theme.tick_font_px,
                anchor="middle",
            )
        )
    y_labels = format_ticks_for_axis(np.asarray(layout.y_ticks, dtype=np.float64))
    for yv, label in zip(layout.y_ticks, y_labels):
        gy = float(layout.to_surface_y(yv))
        layer.add(LineElement(x0 - theme.tick_length, gy, x0, gy, stroke=theme.axis_color, role="tick"))
        layer.add(
            TextElement(
                x0 - theme.tick_length - 3,
                gy + theme.tick_font_px * 0.35,
                label,
                fill=theme.text_color,
                role="tick-label",
                font_size=theme.tick_font_px,
                anchor="end",
            )
        )

    if options.x_axis.title:
        layer.add(
            TextElement(
                x0 + w / 2.0,
                float(layout.height) - 10.0,
                options.x_axis.title,
                fill=theme.text_color,
                role="axis-title",
                font_size=theme.label_font_px,
                anchor="middle",
            )
        )
    if options.y_axis.title:
        layer.add(
            TextElement(
                20.0,
                y0 + h / 2.0,
                options.y_axis.title,
                fill=theme.text_color,
                role="axis-title",
                font_size=theme.label_font_px,
                anchor="middle",
                rotate=-90.0,
            )
        )


def _surface_points(spec: Series, layout: ChartLayout) -> list[tuple[float, float]]:
    px = np.asarray(layout.to_surface_x(spec.x), dtype=np.float64)
    py = np.asarray(layout.to_surface_y(spec.y), dtype=np.float64)
    keep = np.isfinite(px) & np.isfinite(py)
    return list(zip(px[keep].tolist(), py[keep].tolist()))


def _draw_series_lines(layer: Layer, chart_data: ChartData, layout: ChartLayout, theme: RenderTheme) -> None:
    for spec in chart_data:
        if not spec.style.show_line:
            continue
        vertices = _surface_points(spec, layout)
        if not vertices:
            continue
        segments = monotone_x_segments(vertices)
        layer.add(
            PathElement(
                d=svg_path_data(vertices),
                vertices=tuple(vertices),
                polyline=tuple(flatten_segments(vertices[0], segments, steps=theme.curve_steps)),
                stroke=spec.style.color,
                role="series-line",
                stroke_width=theme.line_width,
                dash=dash_array(spec.style.line_style),
                series_id=spec.id,
            )
        )


def _draw_markers(layer: Layer, chart_data: ChartData, layout: ChartLayout) -> None:
    for spec in chart_data:
        if not spec.style.draws_markers:
            continue
        shape = spec.style.point_style
        area = MARKER_AREAS[shape]
        for cx, cy in _surface_points(spec, layout):
            layer.add(
                MarkerElement(
                    shape=shape,
                    cx=cx,
                    cy=cy,
                    area=area,
                    fill=spec.style.color,
                    role="series-point",
                    series_id=spec.id,
                )
            )


def _draw_legend(layer: Layer, chart_data: ChartData, layout: ChartLayout, theme: RenderTheme) -> None:
    left = layout.plot_x0 + layout.plot_w + theme.legend_offset_px
    top = layout.plot_y0
    for i, spec in enumerate(chart_data):
        row_y = top + i * theme.legend_row_px
        layer.add(
            RectElement(
                left,
                row_y,
                theme.legend_swatch_px,
                theme.legend_swatch_px,
                role="legend-swatch",
                fill=spec.style.color,
                series_id=spec.id,
            )
        )
        layer.add(
            TextElement(
                left + theme.legend_swatch_px + theme.legend_text_gap_px,
                row_y + theme.legend_swatch_px * 0.8,
                spec.label,
                fill=theme.text_color,
                role="legend-label",
                font_size=theme.legend_font_px,
                series_id=spec.id,
            )
        )


def _draw_title(layer: Layer, title: str, layout: ChartLayout, theme: RenderTheme) -> None:
    layer.add(
        TextElement(
            layout.width / 2.0,
            max(theme.title_font_px, layout.plot_y0 * 0.6),
            title,
            fill=theme.text_color,
            role="title",
            font_size=theme.title_font_px,
            anchor="middle",
            bold=True,
        )
    )

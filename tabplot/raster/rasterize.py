from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from tabplot.raster.canvas import copy_region, draw_hline, draw_vline, fill_rect, new_canvas
from tabplot.raster.draw_lines import draw_polyline
from tabplot.raster.draw_markers import draw_marker
from tabplot.raster.draw_text import draw_text, text_size
from tabplot.scene import Element, LineElement, MarkerElement, PathElement, RectElement, Scene, TextElement
from tabplot.styles import hex_to_rgba


def rasterize(scene: Scene) -> np.ndarray:
    base = new_canvas(scene.width, scene.height, color=hex_to_rgba(scene.background))
    for layer in scene.layers:
        if layer.clip is None:
            for element in layer.elements:
                _draw_element(base, element)
            continue
        work = base.copy()
        for element in layer.elements:
            _draw_element(work, element)
        copy_region(base, work, layer.clip)
    return base


def write_png(scene: Scene, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(rasterize(scene)).save(out, format="PNG")
    return out


def _draw_element(canvas: np.ndarray, element: Element) -> None:
    if isinstance(element, LineElement):
        color = hex_to_rgba(element.stroke, opacity=element.opacity)
        draw_polyline(
            canvas,
            [(element.x1, element.y1), (element.x2, element.y2)],
            color,
            width=max(1, int(round(element.stroke_width))),
            dash=element.dash,
        )
    elif isinstance(element, PathElement):
        color = hex_to_rgba(element.stroke, opacity=element.opacity)
        draw_polyline(
            canvas,
            element.polyline,
            color,
            width=max(1, int(round(element.stroke_width))),
            dash=element.dash,
        )
    elif isinstance(element, MarkerElement):
        draw_marker(canvas, element.shape, element.cx, element.cy, element.area, hex_to_rgba(element.fill))
    elif isinstance(element, RectElement):
        _draw_rect(canvas, element)
    elif isinstance(element, TextElement):
        _draw_text(canvas, element)
    else:
        raise TypeError(f"unsupported scene element: {type(element)!r}")


def _draw_rect(canvas: np.ndarray, rect: RectElement) -> None:
    x0 = int(round(rect.x))
    y0 = int(round(rect.y))
    x1 = int(round(rect.x + rect.width)) - 1
    y1 = int(round(rect.y + rect.height)) - 1
    if x1 < x0 or y1 < y0:
        return
    if rect.fill is not None:
        fill_rect(canvas, x0, y0, x1, y1, hex_to_rgba(rect.fill, opacity=rect.opacity))
    if rect.stroke is not None:
        color = hex_to_rgba(rect.stroke, opacity=rect.opacity)
        draw_hline(canvas, x0, x1, y0, color)
        draw_hline(canvas, x0, x1, y1, color)
        draw_vline(canvas, x0, y0, y1, color)
        draw_vline(canvas, x1, y0, y1, color)


def _draw_text(canvas: np.ndarray, text: TextElement) -> None:
    rotate = int(round(text.rotate / 90.0)) * 90
    w, h = text_size(text.text, font_size_px=text.font_size, rotate_deg=rotate)
    ascent = text.font_size * 0.8
    if rotate % 180 == 0:
        shift = {"start": 0.0, "middle": w / 2.0, "end": float(w)}[text.anchor]
        left = text.x - shift
        top = text.y - ascent
    else:
        # Quarter-turned text runs bottom-to-top; the anchor moves along y.
        shift = {"start": float(h), "middle": h / 2.0, "end": 0.0}[text.anchor]
        left = text.x - ascent
        top = text.y - shift
    draw_text(
        canvas,
        int(round(left)),
        int(round(top)),
        text.text,
        hex_to_rgba(text.fill),
        font_size_px=text.font_size,
        rotate_deg=rotate,
    )

from .canvas import copy_region, draw_hline, draw_pixel, draw_vline, fill_rect, new_canvas
from .draw_lines import clip_polyline, dash_runs, draw_polyline
from .draw_markers import draw_marker, fill_circle, fill_polygon
from .draw_text import draw_text, text_size
from .rasterize import rasterize, write_png

__all__ = [
    "clip_polyline",
    "copy_region",
    "dash_runs",
    "draw_hline",
    "draw_marker",
    "draw_pixel",
    "draw_polyline",
    "draw_text",
    "draw_vline",
    "fill_circle",
    "fill_polygon",
    "fill_rect",
    "new_canvas",
    "rasterize",
    "text_size",
    "write_png",
]

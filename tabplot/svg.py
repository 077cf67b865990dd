from __future__ import annotations

from pathlib import Path
import re
import xml.etree.ElementTree as ET

from tabplot.curves import format_coord
from tabplot.model import PointStyle
from tabplot.scene import Element, Layer, LineElement, MarkerElement, PathElement, RectElement, Scene, TextElement
from tabplot.styles import circle_radius, marker_outline


SVG_NS = "http://www.w3.org/2000/svg"
_ID_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def scene_to_svg(scene: Scene) -> str:
    return ET.tostring(_build_root(scene), encoding="unicode")


def write_svg(scene: Scene, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    markup = scene_to_svg(scene)
    out.write_text('<?xml version="1.0" encoding="UTF-8"?>\n' + markup + "\n", encoding="utf-8")
    return out


def strip_namespace(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _build_root(scene: Scene) -> ET.Element:
    root = ET.Element(
        "svg",
        {
            "xmlns": SVG_NS,
            "width": str(scene.width),
            "height": str(scene.height),
            "viewBox": f"0 0 {scene.width} {scene.height}",
        },
    )
    ET.SubElement(
        root,
        "rect",
        {"class": "background", "x": "0", "y": "0", "width": str(scene.width), "height": str(scene.height), "fill": scene.background},
    )
    clipped = [layer for layer in scene.layers if layer.clip is not None]
    if clipped:
        defs = ET.SubElement(root, "defs")
        for layer in clipped:
            x, y, w, h = layer.clip  # type: ignore[misc]
            clip = ET.SubElement(defs, "clipPath", {"id": _clip_id(layer)})
            ET.SubElement(clip, "rect", {"x": format_coord(x), "y": format_coord(y), "width": format_coord(w), "height": format_coord(h)})
    for layer in scene.layers:
        attrs = {"class": layer.name}
        if layer.clip is not None:
            attrs["clip-path"] = f"url(#{_clip_id(layer)})"
        group = ET.SubElement(root, "g", attrs)
        for element in layer.elements:
            _append_element(group, element)
    return root


def _clip_id(layer: Layer) -> str:
    return "clip-" + _ID_UNSAFE.sub("_", layer.name)


def _common_attrs(element: Element) -> dict[str, str]:
    attrs = {"class": element.role}
    if element.series_id is not None:
        attrs["data-series"] = element.series_id
    return attrs


def _stroke_attrs(stroke: str, width: float, opacity: float, dash: tuple[float, ...]) -> dict[str, str]:
    attrs = {"stroke": stroke, "stroke-width": format_coord(width)}
    if opacity < 1.0:
        attrs["stroke-opacity"] = format_coord(opacity)
    if dash:
        attrs["stroke-dasharray"] = ",".join(format_coord(d) for d in dash)
    return attrs


def _append_element(parent: ET.Element, element: Element) -> None:
    attrs = _common_attrs(element)
    if isinstance(element, LineElement):
        attrs.update(
            {
                "x1": format_coord(element.x1),
                "y1": format_coord(element.y1),
                "x2": format_coord(element.x2),
                "y2": format_coord(element.y2),
            }
        )
        attrs.update(_stroke_attrs(element.stroke, element.stroke_width, element.opacity, element.dash))
        ET.SubElement(parent, "line", attrs)
    elif isinstance(element, PathElement):
        attrs["d"] = element.d
        attrs["fill"] = "none"
        attrs.update(_stroke_attrs(element.stroke, element.stroke_width, element.opacity, element.dash))
        ET.SubElement(parent, "path", attrs)
    elif isinstance(element, MarkerElement):
        attrs["fill"] = element.fill
        if element.shape is PointStyle.CIRCLE:
            attrs.update(
                {
                    "cx": format_coord(element.cx),
                    "cy": format_coord(element.cy),
                    "r": format_coord(circle_radius(element.area)),
                }
            )
            ET.SubElement(parent, "circle", attrs)
        else:
            vertices = marker_outline(element.shape, element.cx, element.cy, element.area)
            attrs["points"] = " ".join(f"{format_coord(x)},{format_coord(y)}" for x, y in vertices)
            ET.SubElement(parent, "polygon", attrs)
    elif isinstance(element, RectElement):
        attrs.update(
            {
                "x": format_coord(element.x),
                "y": format_coord(element.y),
                "width": format_coord(element.width),
                "height": format_coord(element.height),
                "fill": element.fill or "none",
            }
        )
        if element.stroke is not None:
            attrs.update(_stroke_attrs(element.stroke, element.stroke_width, 1.0, ()))
        if element.opacity < 1.0:
            attrs["opacity"] = format_coord(element.opacity)
        ET.SubElement(parent, "rect", attrs)
    elif isinstance(element, TextElement):
        attrs.update(
            {
                "x": format_coord(element.x),
                "y": format_coord(element.y),
                "fill": element.fill,
                "font-size": format_coord(element.font_size),
                "text-anchor": element.anchor,
            }
        )
        if element.bold:
            attrs["font-weight"] = "bold"
        if element.rotate:
            attrs["transform"] = (
                f"rotate({format_coord(element.rotate)} {format_coord(element.x)} {format_coord(element.y)})"
            )
        node = ET.SubElement(parent, "text", attrs)
        node.text = element.text
    else:
        raise TypeError(f"unsupported scene element: {type(element)!r}")

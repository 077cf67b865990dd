from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Literal, Union

from tabplot.errors import PlotDataError
from tabplot.model import PointStyle


Point = tuple[float, float]
Rect = tuple[float, float, float, float]
TextAnchor = Literal["start", "middle", "end"]


@dataclass(frozen=True)
class LineElement:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    role: str
    stroke_width: float = 1.0
    opacity: float = 1.0
    dash: tuple[float, ...] = ()
    series_id: str | None = None


@dataclass(frozen=True)
class PathElement:
    d: str
    vertices: tuple[Point, ...]
    polyline: tuple[Point, ...]
    stroke: str
    role: str
    stroke_width: float = 1.0
    opacity: float = 1.0
    dash: tuple[float, ...] = ()
    series_id: str | None = None


@dataclass(frozen=True)
class MarkerElement:
    shape: PointStyle
    cx: float
    cy: float
    area: float
    fill: str
    role: str
    series_id: str | None = None


@dataclass(frozen=True)
class RectElement:
    x: float
    y: float
    width: float
    height: float
    role: str
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    series_id: str | None = None


@dataclass(frozen=True)
class TextElement:
    x: float
    y: float
    text: str
    fill: str
    role: str
    font_size: float = 12.0
    anchor: TextAnchor = "start"
    rotate: float = 0.0
    bold: bool = False
    series_id: str | None = None


Element = Union[LineElement, PathElement, MarkerElement, RectElement, TextElement]


@dataclass
class Layer:
    name: str
    clip: Rect | None = None
    elements: list[Element] = field(default_factory=list)

    def add(self, element: Element) -> Element:
        self.elements.append(element)
        return element


@dataclass
class Scene:
    """Vector drawing surface: ordered layers of primitives, back to front."""

    width: int
    height: int
    background: str = "#ffffff"
    layers: list[Layer] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise PlotDataError("scene width/height must be > 0")

    def clear(self) -> None:
        self.layers = []

    def add_layer(self, name: str, *, clip: Rect | None = None) -> Layer:
        if self.layer(name) is not None:
            raise PlotDataError(f"duplicate layer: {name}")
        layer = Layer(name=name, clip=clip)
        self.layers.append(layer)
        return layer

    def layer(self, name: str) -> Layer | None:
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    def elements(self, role: str | None = None) -> Iterator[Element]:
        for layer in self.layers:
            for element in layer.elements:
                if role is None or element.role == role:
                    yield element

    def count(self, role: str) -> int:
        return sum(1 for _ in self.elements(role))

    def is_blank(self) -> bool:
        return not any(layer.elements for layer in self.layers)

"""Drawable primitives for one frame of the graph view.

The host window only has to know how to paint circles, lines and text; what
to draw, where, and in which colour is decided here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from ..vault.graph import NoteGraph
from .viewport import Point, Rect, Viewport, graph_bounds

Color = tuple[int, int, int, int]


@dataclass(frozen=True)
class Palette:
    background: Color = (46, 52, 64, 255)
    text: Color = (229, 233, 240, 255)
    primary: Color = (216, 222, 233, 77)
    success: Color = (136, 192, 208, 255)


DEFAULT_PALETTE = Palette()

# Labels smaller than this are not drawn
MIN_LABEL_SIZE = 8.0


@dataclass(frozen=True)
class Circle:
    center: Point
    radius: float
    color: Color


@dataclass(frozen=True)
class Line:
    start: Point
    end: Point
    color: Color


@dataclass(frozen=True)
class Text:
    content: str
    position: Point
    size: float
    color: Color


Primitive = Union[Circle, Line, Text]


def lerp(a: Point, b: Point, t: float) -> Point:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def compose_frame(
    graph: NoteGraph,
    positions: Sequence[Sequence[float]],
    viewport: Viewport,
    surface: Rect,
    *,
    active: int | None = None,
    fraction: float = 0.0,
    point_radius: float = 3.0,
    palette: Palette = DEFAULT_PALETTE,
) -> list[Primitive]:
    """Build the primitives for the current frame.

    Edges come first so nodes paint over them. Edges touching the active
    node are highlighted and carry a marker at ``fraction`` of their length.
    The active node and its neighbours are highlighted.
    """
    bounds = graph_bounds(positions)
    screen = [viewport.to_screen(p, bounds, surface) for p in positions]
    zoom = viewport.zoom

    highlighted: set[int] = set()
    if active is not None:
        highlighted = graph.neighbors_undirected(active) | {active}

    primitives: list[Primitive] = []

    marker_radius = point_radius * (0.6 + 0.1 * zoom)
    for src, dst in graph.edges:
        touches_active = active is not None and active in (src, dst)
        color = palette.text if touches_active else palette.primary
        primitives.append(Line(screen[src], screen[dst], color))
        if touches_active:
            primitives.append(Circle(lerp(screen[src], screen[dst], fraction), marker_radius, palette.success))

    node_radius = point_radius * (0.9 + 0.1 * zoom)
    text_size = 1.5 * point_radius * zoom
    for idx, point in enumerate(screen):
        color = palette.text if idx in highlighted else palette.primary
        primitives.append(Circle(point, node_radius, color))
        if text_size > MIN_LABEL_SIZE:
            primitives.append(
                Text(
                    graph.names[idx],
                    (point[0] + point_radius + 1.0, point[1]),
                    text_size,
                    color,
                )
            )

    return primitives

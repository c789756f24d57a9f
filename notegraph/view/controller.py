"""Interaction state machine for the graph view.

Pointer events, ticks and document-change notifications arrive as one
ordered stream; each is handled to completion by ``InteractionController.handle``.
The controller is the single owner of layout, viewport and selection state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Literal, Union

from ..layout.engine import LayoutEngine, LayoutParams, initial_positions
from ..models import NoteGraphError
from ..vault.graph import DiagnosticReport, NoteGraph
from .scene import DEFAULT_PALETTE, Palette, Primitive, compose_frame
from .viewport import Point, Rect, Viewport

logger = logging.getLogger(__name__)

Button = Literal["left", "middle", "right"]


@dataclass(frozen=True)
class PointerPressed:
    position: Point
    button: Button = "left"


@dataclass(frozen=True)
class PointerReleased:
    position: Point
    button: Button = "left"


@dataclass(frozen=True)
class PointerMoved:
    position: Point


@dataclass(frozen=True)
class Scrolled:
    position: Point
    delta: float  # positive zooms in


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class DocumentsChanged:
    paths: tuple[Path, ...] = ()


Event = Union[PointerPressed, PointerReleased, PointerMoved, Scrolled, Tick, DocumentsChanged]


@dataclass(frozen=True)
class SelectionChanged:
    node: int | None
    name: str | None


class InteractionState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


SelectionListener = Callable[[SelectionChanged], None]
Rebuilder = Callable[[], tuple[NoteGraph, DiagnosticReport]]


@dataclass
class ViewSettings:
    point_radius: float = 3.0
    highlight_step: float = 1.0 / 120.0
    palette: Palette = field(default_factory=lambda: DEFAULT_PALETTE)


class InteractionController:
    """Drives the layout, viewport and selection from input events."""

    def __init__(
        self,
        graph: NoteGraph,
        surface: Rect,
        *,
        layout_params: LayoutParams | None = None,
        viewport: Viewport | None = None,
        settings: ViewSettings | None = None,
        rebuild: Rebuilder | None = None,
    ):
        self.layout_params = layout_params or LayoutParams()
        self.graph = graph
        self.engine = LayoutEngine(graph, self.layout_params)
        self.viewport = viewport or Viewport()
        self.settings = settings or ViewSettings()
        self.surface = surface
        self.rebuild = rebuild

        self.state = InteractionState.IDLE
        self.drag_anchor: Point | None = None
        self.active: int | None = None
        self.fraction = 0.0

        self._selection_listeners: list[SelectionListener] = []
        self._rebuild_listeners: list[Callable[[DiagnosticReport], None]] = []

    def on_selection(self, callback: SelectionListener) -> None:
        self._selection_listeners.append(callback)

    def on_rebuild(self, callback: Callable[[DiagnosticReport], None]) -> None:
        self._rebuild_listeners.append(callback)

    @property
    def active_name(self) -> str | None:
        return None if self.active is None else self.graph.names[self.active]

    def resize(self, surface: Rect) -> None:
        self.surface = surface

    def handle(self, event: Event) -> SelectionChanged | None:
        """Process one event; returns the selection change it caused, if any."""
        if isinstance(event, PointerPressed):
            return self._on_press(event)
        if isinstance(event, PointerReleased):
            if event.button == "left":
                self.state = InteractionState.IDLE
                self.drag_anchor = None
        elif isinstance(event, PointerMoved):
            self._on_move(event)
        elif isinstance(event, Scrolled):
            self.viewport.zoom_at(event.position, event.delta, self.surface)
        elif isinstance(event, Tick):
            self._on_tick()
        elif isinstance(event, DocumentsChanged):
            self._on_documents_changed(event)
        return None

    def _on_press(self, event: PointerPressed) -> SelectionChanged | None:
        if event.button != "left" or self.state != InteractionState.IDLE:
            return None

        picked = self.viewport.nearest_node(event.position, self.engine.get_positions(), self.surface)
        self.active = picked
        self.state = InteractionState.DRAGGING
        self.drag_anchor = event.position

        change = SelectionChanged(node=picked, name=self.active_name)
        for callback in self._selection_listeners:
            callback(change)
        return change

    def _on_move(self, event: PointerMoved) -> None:
        if self.state != InteractionState.DRAGGING or self.drag_anchor is None:
            return
        dx = event.position[0] - self.drag_anchor[0]
        dy = event.position[1] - self.drag_anchor[1]
        self.viewport.pan_by(dx, dy)
        self.drag_anchor = event.position

    def _on_tick(self) -> None:
        self.engine.step()
        self.fraction = (self.fraction + self.settings.highlight_step) % 1.0

    def _on_documents_changed(self, event: DocumentsChanged) -> None:
        if self.rebuild is None:
            return
        logger.info("Rebuilding graph after %d changed file(s)", len(event.paths))
        try:
            graph, report = self.rebuild()
        except NoteGraphError as e:
            logger.warning("Keeping previous graph, rebuild failed: %s", e)
            return
        self.replace_graph(graph)
        for callback in self._rebuild_listeners:
            callback(report)

    def replace_graph(self, graph: NoteGraph) -> None:
        """Swap in a rebuilt graph.

        Notes that survive keep their positions, the layout runs again from
        step zero, and the selection is kept only if its note still exists.
        """
        old_positions = dict(zip(self.graph.identifiers(), self.engine.get_positions()))
        active_id = None if self.active is None else self.graph.identifiers()[self.active]

        carried = {}
        for idx, ident in enumerate(graph.identifiers()):
            pos = old_positions.get(ident)
            if pos is not None:
                carried[idx] = list(pos)

        self.graph = graph
        self.engine = LayoutEngine(graph, self.layout_params, initial_positions(len(graph), self.layout_params, carried))
        self.active = graph.index.get(active_id) if active_id is not None else None

    def frame(self) -> list[Primitive]:
        """Primitives to draw for the current state."""
        return compose_frame(
            self.graph,
            self.engine.get_positions(),
            self.viewport,
            self.surface,
            active=self.active,
            fraction=self.fraction,
            point_radius=self.settings.point_radius,
            palette=self.settings.palette,
        )

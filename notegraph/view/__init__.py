"""Viewport, picking, interaction and drawing for the graph view."""

from .controller import (
    DocumentsChanged,
    InteractionController,
    InteractionState,
    PointerMoved,
    PointerPressed,
    PointerReleased,
    Scrolled,
    SelectionChanged,
    Tick,
    ViewSettings,
)
from .scene import Circle, Line, Palette, Text, compose_frame
from .viewport import Rect, Viewport, graph_bounds

__all__ = [
    "DocumentsChanged",
    "InteractionController",
    "InteractionState",
    "PointerMoved",
    "PointerPressed",
    "PointerReleased",
    "Scrolled",
    "SelectionChanged",
    "Tick",
    "ViewSettings",
    "Circle",
    "Line",
    "Palette",
    "Text",
    "compose_frame",
    "Rect",
    "Viewport",
    "graph_bounds",
]

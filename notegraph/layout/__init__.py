"""Force-directed layout."""

from .engine import LayoutEngine, LayoutError, LayoutParams, initial_positions

__all__ = ["LayoutEngine", "LayoutError", "LayoutParams", "initial_positions"]

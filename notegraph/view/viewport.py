"""Pan/zoom transform between layout space and screen space, and node picking."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

Point = tuple[float, float]


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)


def graph_bounds(positions: Sequence[Sequence[float]]) -> Rect:
    """Bounding box of node positions (x/y only).

    Zero-width or zero-height boxes are widened to 1 so scale factors stay
    finite; an empty graph yields (0, 0, 1, 1).
    """
    if not positions:
        return Rect(0.0, 0.0, 1.0, 1.0)

    xs = [p[0] for p in positions]
    ys = [p[1] for p in positions]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)
    width = max_x - min_x
    height = max_y - min_y
    return Rect(min_x, min_y, width if width > 0 else 1.0, height if height > 0 else 1.0)


@dataclass
class Viewport:
    """Zoom and pan state plus the transforms they define.

    ``pan_x``/``pan_y`` are screen-space offsets; ``zoom`` multiplies the
    fit-to-surface scale and is kept within [min_zoom, max_zoom].
    """

    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    padding: float = 20.0
    min_zoom: float = 0.1
    max_zoom: float = 3.0
    pick_threshold: float = 100.0
    scroll_divisor: float = 30.0

    def __post_init__(self) -> None:
        if not 0 < self.min_zoom <= self.max_zoom:
            raise ValueError("zoom bounds must satisfy 0 < min_zoom <= max_zoom")
        if self.scroll_divisor <= 0:
            raise ValueError("scroll_divisor must be positive")
        self.zoom = min(max(self.zoom, self.min_zoom), self.max_zoom)

    def scale_factors(self, bounds: Rect, surface: Rect) -> tuple[float, float]:
        width_factor = (surface.width - 2.0 * self.padding) / bounds.width * self.zoom
        height_factor = (surface.height - 2.0 * self.padding) / bounds.height * self.zoom
        return width_factor, height_factor

    def to_screen(self, point: Sequence[float], bounds: Rect, surface: Rect) -> Point:
        sx, sy = self.scale_factors(bounds, surface)
        return (
            surface.x + self.padding + self.pan_x + (point[0] - bounds.x) * sx,
            surface.y + self.padding + self.pan_y + (point[1] - bounds.y) * sy,
        )

    def to_layout(self, point: Sequence[float], bounds: Rect, surface: Rect) -> Point:
        sx, sy = self.scale_factors(bounds, surface)
        if sx == 0 or sy == 0:
            # Surface no larger than its padding; every screen point maps to the origin corner
            return (bounds.x, bounds.y)
        return (
            (point[0] - surface.x - self.padding - self.pan_x) / sx + bounds.x,
            (point[1] - surface.y - self.padding - self.pan_y) / sy + bounds.y,
        )

    def nearest_node(
        self,
        screen_point: Sequence[float],
        positions: Sequence[Sequence[float]],
        surface: Rect,
    ) -> int | None:
        """Index of the node closest to a screen point, if within pick_threshold.

        Distances are measured in layout space. Bounds are recomputed from
        ``positions`` on every call.
        """
        if not positions:
            return None

        bounds = graph_bounds(positions)
        target = self.to_layout(screen_point, bounds, surface)

        best: int | None = None
        best_distance = math.inf
        for idx, pos in enumerate(positions):
            distance = math.hypot(pos[0] - target[0], pos[1] - target[1])
            if distance < best_distance:
                best, best_distance = idx, distance

        if best_distance < self.pick_threshold:
            return best
        return None

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy

    def zoom_at(self, cursor: Sequence[float], scroll_y: float, surface: Rect) -> bool:
        """Apply a scroll step anchored at the cursor.

        The zoom factor changes by ``1 + scroll_y / scroll_divisor`` and is
        clamped. The pan correction is the cursor's offset from the surface
        centre scaled by the zoom delta over the square of the previous zoom.

        The anchoring is approximate. ``to_screen`` scales from the padded
        top-left corner of the surface, not from its centre, so the layout
        point under the cursor drifts by its offset from that (panned) corner times
        ``dz / old_zoom`` plus the pan correction.

        Returns False if the zoom did not change.
        """
        old_zoom = self.zoom
        new_zoom = old_zoom * (1.0 + scroll_y / self.scroll_divisor)
        new_zoom = min(max(new_zoom, self.min_zoom), self.max_zoom)
        if new_zoom == old_zoom:
            return False

        cx, cy = surface.center
        factor = (new_zoom - old_zoom) / (old_zoom * old_zoom)
        self.pan_x -= (cursor[0] - cx) * factor
        self.pan_y -= (cursor[1] - cy) * factor
        self.zoom = new_zoom
        return True

    def reset(self) -> None:
        self.zoom = min(max(1.0, self.min_zoom), self.max_zoom)
        self.pan_x = 0.0
        self.pan_y = 0.0

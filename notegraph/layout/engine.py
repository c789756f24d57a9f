"""Force-directed layout simulation.

Each node is pushed away from every other node and pulled toward the nodes it
shares an edge with. Velocities are damped every step so the layout settles.

All forces in one step are computed from a snapshot of the positions taken at
the start of the step, so the result does not depend on the order nodes are
visited in. Given the same graph, seed and sequence of ``dt`` values, two
engines produce identical positions.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass

from ..models import NoteGraphError
from ..vault.graph import NoteGraph

logger = logging.getLogger(__name__)

Vector = list[float]

# Redraws allowed per node before giving up on a free starting position
MAX_PLACEMENT_ATTEMPTS = 1000


class LayoutError(NoteGraphError):
    pass


@dataclass
class LayoutParams:
    """Simulation constants."""

    scale: float = 200.0  # ideal spacing; repulsion k^2/d, attraction d^2/k
    cooloff: float = 0.9  # velocity kept after each step
    dt: float = 0.055  # nominal step size
    max_steps: int = 1000  # steps after which the layout counts as settled
    start_size: float = 200.0  # initial positions are drawn from a cube of this edge length
    dimensions: int = 2
    seed: int = 0
    min_distance: float = 1e-3
    repulsion: bool = True
    attraction: bool = True

    def __post_init__(self) -> None:
        if self.dimensions not in (2, 3):
            raise ValueError("dimensions must be 2 or 3")
        if self.scale <= 0:
            raise ValueError("scale must be positive")
        if self.start_size <= 0:
            raise ValueError("start_size must be positive")
        if self.max_steps < 0:
            raise ValueError("max_steps must not be negative")
        if self.min_distance <= 0:
            raise ValueError("min_distance must be positive")


def _fallback_direction(i: int, j: int, dims: int) -> Vector:
    """Deterministic unit vector for a pair of coincident nodes."""
    lo, hi = min(i, j), max(i, j)
    angle = (lo * 7919 + hi * 104729) % 360 * math.pi / 180.0
    direction = [math.cos(angle), math.sin(angle)]
    if dims == 3:
        direction.append(0.0)
    return direction if i < j else [-c for c in direction]


def initial_positions(
    count: int,
    params: LayoutParams,
    existing: dict[int, Vector] | None = None,
) -> list[Vector]:
    """Draw bounded pseudo-random starting positions, no two coincident.

    ``existing`` pins positions for some indices (used when a rebuilt graph
    keeps notes that were already placed).

    Raises LayoutError when a free position cannot be found, which happens
    when start_size is too small to hold every node min_distance apart.
    """
    rng = random.Random(params.seed)
    half = params.start_size / 2.0
    existing = existing or {}
    placed: list[Vector] = []

    for idx in range(count):
        if idx in existing:
            placed.append(list(existing[idx]))
            continue
        for _ in range(MAX_PLACEMENT_ATTEMPTS):
            candidate = [rng.uniform(-half, half) for _ in range(params.dimensions)]
            if all(math.dist(candidate, other) >= params.min_distance for other in placed):
                break
        else:
            raise LayoutError(
                f"could not place {count} nodes at least {params.min_distance} apart "
                f"within start_size {params.start_size}"
            )
        placed.append(candidate)

    return placed


class LayoutEngine:
    """Owns node positions and velocities and advances them step by step."""

    def __init__(
        self,
        graph: NoteGraph,
        params: LayoutParams | None = None,
        positions: list[Vector] | None = None,
    ):
        self.graph = graph
        self.params = params or LayoutParams()
        if positions is None:
            positions = initial_positions(len(graph), self.params)
        if len(positions) != len(graph):
            raise ValueError(f"expected {len(graph)} positions, got {len(positions)}")
        self._positions: list[Vector] = [list(p) for p in positions]
        self._velocities: list[Vector] = [[0.0] * self.params.dimensions for _ in positions]
        self.step_count = 0

    @property
    def converged(self) -> bool:
        return self.step_count >= self.params.max_steps

    def reset_counter(self) -> None:
        """Allow the simulation to run for another max_steps."""
        self.step_count = 0

    def get_positions(self) -> list[tuple[float, ...]]:
        """Current positions, indexed like the graph's nodes."""
        return [tuple(p) for p in self._positions]

    def position(self, idx: int) -> tuple[float, ...]:
        return tuple(self._positions[idx])

    def step(self, dt: float | None = None) -> bool:
        """Advance the simulation by one tick.

        Returns False without changing anything once max_steps is reached.
        """
        if self.converged:
            return False

        dt = self.params.dt if dt is None else dt
        scale = self.params.scale
        dims = self.params.dimensions
        min_d = self.params.min_distance
        snapshot = [list(p) for p in self._positions]
        count = len(snapshot)

        for i in range(count):
            pos = snapshot[i]
            force = [0.0] * dims

            if self.params.repulsion:
                for j in range(count):
                    if j == i:
                        continue
                    delta, dist = self._delta(pos, snapshot[j], i, j, min_d)
                    magnitude = -(scale * scale) / dist
                    for k in range(dims):
                        force[k] += magnitude * delta[k]

            if self.params.attraction:
                for j in self.graph.neighbor_list(i):
                    delta, dist = self._delta(pos, snapshot[j], i, j, min_d)
                    magnitude = dist * dist / scale
                    for k in range(dims):
                        force[k] += magnitude * delta[k]

            vel = self._velocities[i]
            for k in range(dims):
                vel[k] = (vel[k] + force[k] * dt) * self.params.cooloff
                self._positions[i][k] = pos[k] + vel[k] * dt

        self.step_count += 1
        if self.converged:
            logger.debug("Layout settled after %d steps", self.step_count)
        return True

    def run(self, steps: int | None = None, dt: float | None = None) -> int:
        """Step repeatedly (up to ``steps`` or until settled); return steps taken."""
        taken = 0
        while steps is None or taken < steps:
            if not self.step(dt):
                break
            taken += 1
        return taken

    @staticmethod
    def _delta(a: Vector, b: Vector, i: int, j: int, min_d: float) -> tuple[Vector, float]:
        """Unit vector from a to b and the guarded distance between them."""
        diff = [bk - ak for ak, bk in zip(a, b)]
        dist = math.sqrt(sum(c * c for c in diff))
        if dist == 0.0:
            return _fallback_direction(i, j, len(a)), min_d
        unit = [c / dist for c in diff]
        return unit, max(dist, min_d)

"""Cell-collapse terrain synthesis (wave-function-collapse style).

Every interior cell starts with the candidate set {wall, empty, spike}; border
cells are pre-collapsed to walls. The synthesizer repeatedly observes the
uncollapsed cell with the fewest candidates, fixes it to a random candidate, and
propagates the adjacency rules outward until every cell is decided. A cell that
loses all of its candidates aborts the attempt, and synthesis restarts from a
fresh buffer; there is no partial backtracking.
"""

from __future__ import annotations

import heapq
import logging
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Set, Tuple

from generation_config import GenerationConfig
from generation_errors import ContradictionError
from map_constants import EMPTY, SPIKE, WALL
from map_geometry import CARDINAL_DIRECTIONS, Direction, TilePos
from map_grid import Grid
from map_models import SynthesizedTerrain

logger = logging.getLogger(__name__)

CompatibilityTable = Mapping[str, Mapping[Direction, FrozenSet[str]]]

TERRAIN_TILES: Tuple[str, ...] = (WALL, EMPTY, SPIKE)

# Which tiles may sit next to each tile. The rules are the same in every direction.
_ALLOWED_NEIGHBORS: Dict[str, FrozenSet[str]] = {
    WALL: frozenset((WALL, EMPTY)),
    EMPTY: frozenset((WALL, EMPTY, SPIKE)),
    SPIKE: frozenset((EMPTY, SPIKE)),
}

COMPATIBILITY: Dict[str, Dict[Direction, FrozenSet[str]]] = {
    tile: {direction: allowed for direction in CARDINAL_DIRECTIONS}
    for tile, allowed in _ALLOWED_NEIGHBORS.items()
}


def verify_compatibility_symmetry(
    table: CompatibilityTable,
) -> List[Tuple[str, Direction, str]]:
    """Return every (a, direction, b) where b may follow a but a may not precede b.

    An empty list means the table is symmetric: ``b in table[a][d]`` holds exactly
    when ``a in table[b][d.opposite()]``.
    """
    violations: List[Tuple[str, Direction, str]] = []
    tiles = sorted(table)
    for tile_a in tiles:
        for direction in CARDINAL_DIRECTIONS:
            for tile_b in tiles:
                forward = tile_b in table[tile_a][direction]
                backward = tile_a in table[tile_b][direction.opposite()]
                if forward != backward:
                    violations.append((tile_a, direction, tile_b))
    return violations


@dataclass
class Cell:
    """Synthesis-time cell: the tiles still possible here and whether it is decided."""

    domain: Set[str] = field(default_factory=lambda: set(TERRAIN_TILES))
    collapsed: bool = False
    value: Optional[str] = None

    @property
    def entropy(self) -> int:
        return 0 if self.collapsed else len(self.domain)

    def collapse(self, value: str) -> None:
        self.domain = {value}
        self.value = value
        self.collapsed = True


def _sorted_domain(domain: Set[str]) -> List[str]:
    # Set iteration order depends on string hashing; sort so a seed reproduces a map.
    return sorted(domain)


class CellCollapseSynthesizer:
    """Fills the interior with a locally consistent mix of walls, floor, and spikes."""

    def __init__(
        self,
        config: GenerationConfig,
        rng: random.Random,
        compatibility: CompatibilityTable = COMPATIBILITY,
    ) -> None:
        violations = verify_compatibility_symmetry(compatibility)
        if violations:
            tile_a, direction, tile_b = violations[0]
            raise ValueError(
                f"Compatibility table is asymmetric: {tile_b!r} may sit {direction.name} of "
                f"{tile_a!r} but not the other way round ({len(violations)} violations)"
            )
        self.config = config
        self.rng = rng
        self.compatibility = compatibility
        self.restarts = 0

    def synthesize(self) -> SynthesizedTerrain:
        self.restarts = 0
        while True:
            try:
                cells = self._collapse_all()
                break
            except ContradictionError as exc:
                self.restarts += 1
                logger.debug("contradiction at (%d, %d); restart %d", exc.x, exc.y, self.restarts)
                if self.restarts > self.config.max_synthesis_restarts:
                    raise

        grid = self._to_grid(cells)
        removed = thin_spike_clusters(
            grid,
            self.config.max_spike_cluster_size,
            self.config.spike_removal_probability,
            self.rng,
        )
        logger.debug("cell collapse finished after %d restarts; thinned %d spikes", self.restarts, removed)
        return SynthesizedTerrain(grid=grid)

    def _new_cells(self) -> List[List[Cell]]:
        width, height = self.config.width, self.config.height
        cells = [[Cell() for _ in range(width)] for _ in range(height)]
        for y in range(height):
            for x in range(width):
                if x in (0, width - 1) or y in (0, height - 1):
                    cells[y][x].collapse(WALL)
        return cells

    def _collapse_all(self) -> List[List[Cell]]:
        width, height = self.config.width, self.config.height
        cells = self._new_cells()

        # Push the border's rules inward before the first observation.
        for y in range(height):
            for x in range(width):
                if cells[y][x].collapsed:
                    self._propagate(cells, TilePos(x, y))

        heap: List[Tuple[int, float, int, int]] = []
        for y in range(1, height - 1):
            for x in range(1, width - 1):
                cell = cells[y][x]
                if not cell.collapsed:
                    heap.append((cell.entropy, self.rng.random(), y, x))
        heapq.heapify(heap)

        while heap:
            entropy, _, y, x = heapq.heappop(heap)
            cell = cells[y][x]
            # Entries go stale when a cell shrinks or collapses; the fresh entry wins.
            if cell.collapsed or cell.entropy != entropy:
                continue
            cell.collapse(self.rng.choice(_sorted_domain(cell.domain)))
            for pos in self._propagate(cells, TilePos(x, y)):
                changed = cells[pos.y][pos.x]
                if not changed.collapsed:
                    heapq.heappush(heap, (changed.entropy, self.rng.random(), pos.y, pos.x))

        for y in range(height):
            for x in range(width):
                cell = cells[y][x]
                if not cell.collapsed:
                    # Only a cell with no candidates can escape the heap undecided.
                    raise ContradictionError(x, y)
        return cells

    def _propagate(self, cells: List[List[Cell]], origin: TilePos) -> List[TilePos]:
        """Narrow neighbor domains breadth-first; return every position that shrank."""
        width, height = self.config.width, self.config.height
        changed: List[TilePos] = []
        queue = deque([origin])
        while queue:
            current = queue.popleft()
            source = cells[current.y][current.x]
            for direction in CARDINAL_DIRECTIONS:
                nx, ny = current.x + direction.dx, current.y + direction.dy
                if not (0 <= nx < width and 0 <= ny < height):
                    continue
                neighbor = cells[ny][nx]
                allowed: Set[str] = set()
                for value in source.domain:
                    allowed |= self.compatibility[value][direction]
                narrowed = neighbor.domain & allowed
                if narrowed == neighbor.domain:
                    continue
                if not narrowed:
                    raise ContradictionError(nx, ny)
                neighbor.domain = narrowed
                if len(narrowed) == 1 and not neighbor.collapsed:
                    neighbor.collapse(next(iter(narrowed)))
                pos = TilePos(nx, ny)
                changed.append(pos)
                queue.append(pos)
        return changed

    def _to_grid(self, cells: List[List[Cell]]) -> Grid:
        grid = Grid(self.config.width, self.config.height)
        for pos in grid.interior_positions():
            grid[pos] = cells[pos.y][pos.x].value
        return grid


def spike_clusters(grid: Grid) -> List[List[TilePos]]:
    """Group spikes into clusters joined by orthogonal or diagonal contact."""
    seen: Set[TilePos] = set()
    clusters: List[List[TilePos]] = []
    for pos in grid.interior_positions():
        if pos in seen or grid[pos] != SPIKE:
            continue
        cluster = [pos]
        seen.add(pos)
        queue = deque([pos])
        while queue:
            current = queue.popleft()
            for neighbor in grid.neighbors8(current.x, current.y):
                if neighbor not in seen and grid[neighbor] == SPIKE:
                    seen.add(neighbor)
                    cluster.append(neighbor)
                    queue.append(neighbor)
        clusters.append(cluster)
    return clusters


def thin_spike_clusters(
    grid: Grid,
    max_cluster_size: int,
    removal_probability: float,
    rng: random.Random,
) -> int:
    """Turn excess spikes of oversized clusters back into floor; return how many."""
    removed = 0
    for cluster in spike_clusters(grid):
        if len(cluster) <= max_cluster_size:
            continue
        members = list(cluster)
        rng.shuffle(members)
        for pos in members[max_cluster_size:]:
            if rng.random() < removal_probability:
                grid[pos] = EMPTY
                removed += 1
    return removed

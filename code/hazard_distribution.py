"""Position-derived spike placement, sparser near the goal than away from it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set

from generation_config import GenerationConfig
from map_constants import EMPTY, SAFE_ZONE, SPIKE
from map_geometry import Rect, TilePos
from map_grid import Grid
from map_models import Chamber

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HazardRegion:
    bounds: Rect
    critical: bool


def critical_pattern(pos: TilePos) -> bool:
    """Sparse lattice on the critical path; regular enough to read ahead."""
    return pos.x % 4 == 0 and pos.y % 4 == 0


def off_path_pattern(pos: TilePos) -> bool:
    """Denser scatter away from the goal."""
    return (pos.x * pos.y) % 4 == 1


class HazardDistributor:
    """Converts floor to spikes by a deterministic rule chosen per region.

    Regions are chamber floors when the terrain has chambers, otherwise square
    blocks of ``hazard_region_size``. Only plain floor is ever converted, and
    tiles within ``safe_zone_radius`` of the start or goal are left alone.
    """

    def __init__(self, config: GenerationConfig) -> None:
        self.config = config

    def regions(self, grid: Grid, chambers: Sequence[Chamber], goal: TilePos) -> List[HazardRegion]:
        if chambers:
            areas: Iterable[Rect] = (chamber.floor for chamber in chambers)
        else:
            areas = self._blocks(grid)
        return [
            HazardRegion(bounds=area, critical=area.center.euclidean(goal) <= self.config.critical_path_radius)
            for area in areas
        ]

    def _blocks(self, grid: Grid) -> Iterable[Rect]:
        size = self.config.hazard_region_size
        for y in range(1, grid.height - 1, size):
            for x in range(1, grid.width - 1, size):
                yield Rect(x, y, min(size, grid.width - 1 - x), min(size, grid.height - 1 - y))

    def protected_tiles(self, grid: Grid, *anchors: TilePos) -> Set[TilePos]:
        radius = self.config.safe_zone_radius
        protected: Set[TilePos] = set()
        for anchor in anchors:
            protected.update(grid.window(anchor.x, anchor.y, radius))
        return protected

    def distribute(
        self,
        grid: Grid,
        chambers: Sequence[Chamber],
        start: TilePos,
        goal: TilePos,
    ) -> int:
        protected = self.protected_tiles(grid, start, goal)
        placed = 0
        for region in self.regions(grid, chambers, goal):
            rule = critical_pattern if region.critical else off_path_pattern
            for pos in region.bounds.tiles():
                if not grid.is_interior(pos.x, pos.y) or pos in protected:
                    continue
                if grid[pos] == EMPTY and rule(pos):
                    grid[pos] = SPIKE
                    placed += 1
        logger.debug("distributed %d spikes", placed)
        return placed

    def mark_safe_zone(self, grid: Grid, start: TilePos) -> int:
        """Tint the floor around the start; purely cosmetic."""
        marked = 0
        for pos in grid.window(start.x, start.y, self.config.safe_zone_radius):
            if grid.is_interior(pos.x, pos.y) and grid[pos] == EMPTY:
                grid[pos] = SAFE_ZONE
                marked += 1
        return marked

"""Portal pair placement."""

from __future__ import annotations

import logging
import random
from typing import List, Sequence

from generation_config import GenerationConfig
from map_constants import EMPTY
from map_geometry import TilePos
from map_grid import Grid
from map_models import Chamber, PortalPair, portal_char

logger = logging.getLogger(__name__)


class PortalPlacer:
    """Places teleporter pairs with densely assigned ids starting at 0.

    Organic terrain (no chambers) scatters pairs: one end at random, the other as
    far away as possible. Chamber terrain links consecutive chambers instead; a
    single chamber gets no portals.
    """

    def __init__(self, config: GenerationConfig, rng: random.Random) -> None:
        self.config = config
        self.rng = rng

    def place(self, grid: Grid, chambers: Sequence[Chamber] = ()) -> List[PortalPair]:
        if chambers:
            if len(chambers) < 2:
                return []
            pairs = self.place_between_chambers(grid, chambers)
        else:
            pairs = self.place_scattered(grid)
        logger.debug("placed %d portal pairs", len(pairs))
        return pairs

    def candidate_positions(self, grid: Grid) -> List[TilePos]:
        """Floor tiles with enough floor 4-neighbors to stay off narrow corridors."""
        needed = self.config.portal_min_empty_neighbors
        return [
            pos
            for pos in grid.interior_positions()
            if grid[pos] == EMPTY
            and sum(1 for n in grid.neighbors4(pos.x, pos.y) if grid[n] == EMPTY) >= needed
        ]

    def place_scattered(self, grid: Grid) -> List[PortalPair]:
        valid = self.candidate_positions(grid)
        pair_count = min(self.config.max_portal_pairs, len(valid) // 2)
        pairs: List[PortalPair] = []
        for pid in range(pair_count):
            first = valid.pop(self.rng.randrange(len(valid)))
            best_index = -1
            best_distance = -1
            for index, pos in enumerate(valid):
                distance = first.manhattan(pos)
                if distance > best_distance:
                    best_distance = distance
                    best_index = index
            second = valid.pop(best_index)
            pairs.append(self._commit(grid, pid, first, second))
        return pairs

    def place_between_chambers(self, grid: Grid, chambers: Sequence[Chamber]) -> List[PortalPair]:
        pairs: List[PortalPair] = []
        for first_chamber, second_chamber in zip(chambers, chambers[1:]):
            if len(pairs) >= self.config.max_portal_pairs:
                break
            first_options = self.clear_cells(grid, first_chamber)
            second_options = self.clear_cells(grid, second_chamber)
            if not first_options or not second_options:
                continue
            first = self.rng.choice(first_options)
            second_options = [pos for pos in second_options if pos != first]
            if not second_options:
                continue
            second = self.rng.choice(second_options)
            pairs.append(self._commit(grid, len(pairs), first, second))
        return pairs

    @staticmethod
    def clear_cells(grid: Grid, chamber: Chamber) -> List[TilePos]:
        """Chamber floor tiles whose whole 3x3 neighborhood is plain floor."""
        found: List[TilePos] = []
        for pos in chamber.floor.tiles():
            if not grid.is_interior(pos.x, pos.y):
                continue
            if all(grid[n] == EMPTY for n in grid.window(pos.x, pos.y, 1)):
                found.append(pos)
        return found

    @staticmethod
    def _commit(grid: Grid, pid: int, first: TilePos, second: TilePos) -> PortalPair:
        char = portal_char(pid)
        grid[first] = char
        grid[second] = char
        return PortalPair(pid, first, second)

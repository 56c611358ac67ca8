"""Chamber layout terrain: a grid of walled rooms joined by one-tile doors.

Space outside the chambers stays open floor, so later passes can route through
it freely. Chambers are anchored at the top-left of their slot, so neighbors in
a slot row share their top floor rows and neighbors in a slot column share their
left floor columns. At least `chamber_padding` tiles separate facing walls, and
a door is a straight run through both walls and that gap.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Tuple

from component_manager import ComponentManager
from generation_config import GenerationConfig
from map_constants import EMPTY, WALL
from map_geometry import Rect
from map_grid import Grid, carve_l_corridor
from map_models import Chamber, SynthesizedTerrain

logger = logging.getLogger(__name__)


class ChamberLayoutSynthesizer:
    """Lays out rectangular chambers on a slot grid sized to the map."""

    def __init__(self, config: GenerationConfig, rng: random.Random) -> None:
        self.config = config
        self.rng = rng

    def slot_counts(self) -> Tuple[int, int]:
        """Return (columns, rows) of chamber slots that fit inside the border."""
        cfg = self.config
        pad = cfg.chamber_padding
        columns = (cfg.width - 2 + pad) // (cfg.min_chamber_width + pad)
        rows = (cfg.height - 2 + pad) // (cfg.min_chamber_height + pad)
        return min(columns, cfg.max_chamber_columns), min(rows, cfg.max_chamber_rows)

    def synthesize(self) -> SynthesizedTerrain:
        grid = Grid(self.config.width, self.config.height)
        components = ComponentManager()
        slots: Dict[Tuple[int, int], Chamber] = {}

        columns, rows = self.slot_counts()
        for row in range(rows):
            for column in range(columns):
                bounds = self._chamber_bounds(column, row, columns, rows)
                if bounds is None:
                    continue
                chamber = Chamber(index=components.register_chamber(), bounds=bounds)
                slots[(column, row)] = chamber

        if not slots:
            bounds = Rect(
                1,
                1,
                min(self.config.min_chamber_width, grid.width - 2),
                min(self.config.min_chamber_height, grid.height - 2),
            )
            slots[(0, 0)] = Chamber(index=components.register_chamber(), bounds=bounds)
            logger.debug("no chamber slots fit %dx%d; using a single chamber", grid.width, grid.height)

        chambers = sorted(slots.values(), key=lambda chamber: chamber.index)
        for chamber in chambers:
            self._draw_chamber(grid, chamber)

        for (column, row), chamber in sorted(slots.items(), key=lambda item: item[1].index):
            right = slots.get((column + 1, row))
            if right is not None:
                self._carve_door(grid, chamber, right, horizontal=True)
                components.connect(chamber.index, right.index)
            below = slots.get((column, row + 1))
            if below is not None:
                self._carve_door(grid, chamber, below, horizontal=False)
                components.connect(chamber.index, below.index)

        self._link_stragglers(grid, chambers, components)
        logger.debug("chamber layout placed %d chambers on %dx%d slots", len(chambers), columns, rows)
        return SynthesizedTerrain(grid=grid, chambers=chambers)

    def _chamber_bounds(self, column: int, row: int, columns: int, rows: int) -> Optional[Rect]:
        cfg = self.config
        pad = cfg.chamber_padding
        slot_width = (cfg.width - 2 + pad) // columns
        slot_height = (cfg.height - 2 + pad) // rows
        x = 1 + column * slot_width
        y = 1 + row * slot_height
        max_width = slot_width - pad
        max_height = slot_height - pad
        if max_width < cfg.min_chamber_width or max_height < cfg.min_chamber_height:
            return None
        width = self.rng.randint(cfg.min_chamber_width, max_width)
        height = self.rng.randint(cfg.min_chamber_height, max_height)
        bounds = Rect(x, y, width, height)
        if bounds.max_x > cfg.width - 1 or bounds.max_y > cfg.height - 1:
            return None
        return bounds

    @staticmethod
    def _draw_chamber(grid: Grid, chamber: Chamber) -> None:
        for pos in chamber.bounds.tiles():
            grid[pos] = WALL if chamber.bounds.is_on_edge(pos) else EMPTY

    def _carve_door(self, grid: Grid, first: Chamber, second: Chamber, horizontal: bool) -> None:
        """Open facing walls of two neighboring chambers on one shared row or column."""
        a, b = first.floor, second.floor
        if horizontal:
            shared = list(range(max(a.y, b.y), min(a.max_y, b.max_y)))
        else:
            shared = list(range(max(a.x, b.x), min(a.max_x, b.max_x)))
        if not shared:
            # Anchored slots share floor lines unless a chamber has no floor; route around.
            carve_l_corridor(grid, first.center, second.center, self.rng.random() < 0.5)
            return
        line = self.rng.choice(shared)
        if horizontal:
            start_x = first.bounds.max_x - 1
            end_x = second.bounds.x
            for x in range(start_x, end_x + 1):
                grid.set(x, line, EMPTY)
        else:
            start_y = first.bounds.max_y - 1
            end_y = second.bounds.y
            for y in range(start_y, end_y + 1):
                grid.set(line, y, EMPTY)

    def _link_stragglers(
        self,
        grid: Grid,
        chambers: List[Chamber],
        components: ComponentManager,
    ) -> None:
        """Join any chamber cut off by a skipped slot to the nearest earlier chamber."""
        for chamber in chambers[1:]:
            if components.connected(chamber.index, chambers[0].index):
                continue
            earlier = [other for other in chambers if other.index < chamber.index]
            target = min(earlier, key=lambda other: other.center.manhattan(chamber.center))
            carve_l_corridor(grid, chamber.center, target.center, self.rng.random() < 0.5)
            components.connect(chamber.index, target.index)

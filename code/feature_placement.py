"""Start and goal placement, with forced carving when the terrain fights back."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from generation_config import GenerationConfig
from generation_errors import PlacementError
from map_constants import EMPTY, GOAL, START, WALL
from map_geometry import TilePos
from map_grid import Grid
from reachability import walking_distances

logger = logging.getLogger(__name__)


def clearance(grid: Grid, pos: TilePos, radius: int) -> int:
    """Count open floor tiles in the square window of ``radius`` around ``pos``."""
    return grid.count_open_in_window(pos.x, pos.y, radius)


def _walks_through_floor(char: str) -> bool:
    return char == EMPTY or char == GOAL


@dataclass(frozen=True)
class StartGoalPlacement:
    start: TilePos
    goal: TilePos
    # Walking distance (non-wall tiles, no teleports) after any carving.
    walking_distance: int
    carved: bool


class StartGoalPlacer:
    """Chooses a roomy start and the walk-farthest roomy goal."""

    def __init__(self, config: GenerationConfig, rng: random.Random) -> None:
        self.config = config
        self.rng = rng

    def open_spaces(self, grid: Grid) -> List[TilePos]:
        """Interior floor tiles with enough open floor around them, in row-major order."""
        radius = self.config.clearance_radius
        return [
            pos
            for pos in grid.interior_positions()
            if grid[pos] == EMPTY and clearance(grid, pos, radius) >= self.config.min_open_clearance
        ]

    def place(self, grid: Grid) -> StartGoalPlacement:
        candidates = self.open_spaces(grid)
        if not candidates:
            raise PlacementError("No open tile with enough clearance for the start")

        radius = self.config.clearance_radius
        start: Optional[TilePos] = None
        best_clearance = -1
        for pos in candidates:
            score = clearance(grid, pos, radius)
            if score > best_clearance:
                best_clearance = score
                start = pos
        assert start is not None
        grid[start] = START

        goal_candidates = [
            pos
            for pos in candidates
            if pos != start and clearance(grid, pos, radius) >= self.config.min_goal_clearance
        ]
        if not goal_candidates:
            raise PlacementError("No open tile with enough clearance for the goal")

        goal = self._select_goal(grid, start, goal_candidates)
        grid[goal] = GOAL
        carved = self.ensure_walkable_route(grid, start, goal)
        distance = walking_distances(grid, start).get(goal)
        if distance is None:
            raise PlacementError(f"Goal {goal} still unreachable from {start} after carving")
        return StartGoalPlacement(start=start, goal=goal, walking_distance=distance, carved=carved)

    @staticmethod
    def _select_goal(grid: Grid, start: TilePos, candidates: List[TilePos]) -> TilePos:
        """Farthest candidate by walking distance over floor; Manhattan if none is reachable."""
        distances = walking_distances(grid, start, passable=_walks_through_floor)
        best: Optional[TilePos] = None
        best_distance = -1
        for pos in candidates:
            distance = distances.get(pos)
            if distance is not None and distance > best_distance:
                best_distance = distance
                best = pos
        if best is not None:
            return best

        for pos in candidates:
            distance = start.manhattan(pos)
            if distance > best_distance:
                best_distance = distance
                best = pos
        assert best is not None
        return best

    def needs_carving(self, grid: Grid, start: TilePos, goal: TilePos) -> bool:
        """True when the goal is unreachable or the walk is far longer than the offset."""
        distance = walking_distances(grid, start).get(goal)
        if distance is None:
            return True
        dx = abs(goal.x - start.x)
        dy = abs(goal.y - start.y)
        return distance > dx + self.config.detour_factor * dy

    def ensure_walkable_route(self, grid: Grid, start: TilePos, goal: TilePos) -> bool:
        """Carve a route from start to goal if needed; return whether anything was carved."""
        if not self.needs_carving(grid, start, goal):
            return False
        opened = self.carve_direct_path(grid, start, goal)
        opened += self.clear_nearby_obstructions(grid, start, goal)
        logger.debug("carved %d wall tiles between %s and %s", opened, start, goal)
        return True

    def carve_direct_path(self, grid: Grid, start: TilePos, goal: TilePos) -> int:
        """Walk toward the goal along the dominant axis, clearing walls around each step."""
        step_x = (goal.x > start.x) - (goal.x < start.x)
        step_y = (goal.y > start.y) - (goal.y < start.y)
        radius = self.config.carve_radius
        x, y = start.x, start.y
        opened = 0
        while (x, y) != (goal.x, goal.y):
            opened += self._clear_walls_around(grid, TilePos(x, y), radius, probability=1.0)
            if abs(goal.x - x) > abs(goal.y - y):
                x += step_x
            else:
                y += step_y
        return opened

    def clear_nearby_obstructions(self, grid: Grid, start: TilePos, goal: TilePos) -> int:
        """Open some walls near evenly spaced points on the start-goal segment."""
        steps = max(abs(goal.x - start.x), abs(goal.y - start.y))
        if steps == 0:
            return 0
        opened = 0
        for i in range(steps + 1):
            point = TilePos(
                start.x + int((goal.x - start.x) * i / steps),
                start.y + int((goal.y - start.y) * i / steps),
            )
            opened += self._clear_walls_around(
                grid,
                point,
                self.config.obstruction_clear_radius,
                probability=self.config.obstruction_clear_probability,
            )
        return opened

    def _clear_walls_around(self, grid: Grid, center: TilePos, radius: int, probability: float) -> int:
        opened = 0
        for pos in grid.window(center.x, center.y, radius):
            if not grid.is_interior(pos.x, pos.y) or grid[pos] != WALL:
                continue
            if probability >= 1.0 or self.rng.random() < probability:
                grid[pos] = EMPTY
                opened += 1
        return opened

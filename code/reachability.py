"""Reachability validation over the tile grid plus teleport edges."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from map_constants import GOAL, START
from map_geometry import TilePos
from map_grid import Grid
from map_models import is_walkable

logger = logging.getLogger(__name__)


class ValidationFailure(Enum):
    UNREACHABLE_GOAL = "unreachable_goal"
    UNPAIRED_PORTAL = "unpaired_portal"
    MISSING_START = "missing_start"
    MISSING_GOAL = "missing_goal"


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of a validation run; truthy only when the goal is reachable."""

    reachable: bool
    failure: Optional[ValidationFailure] = None
    visited: int = 0
    detail: str = ""

    def __bool__(self) -> bool:
        return self.reachable


def walking_distances(
    grid: Grid,
    start: TilePos,
    passable: Callable[[str], bool] = is_walkable,
) -> Dict[TilePos, int]:
    """Breadth-first step counts from ``start`` over 4-adjacent passable tiles.

    Teleporters are ignored; the start tile itself is always included.
    """
    distances: Dict[TilePos, int] = {start: 0}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        next_distance = distances[current] + 1
        for neighbor in grid.neighbors4(current.x, current.y):
            if neighbor in distances or not passable(grid[neighbor]):
                continue
            distances[neighbor] = next_distance
            queue.append(neighbor)
    return distances


class ReachabilityValidator:
    """Decides whether the goal can be reached from the start.

    Nodes are grid coordinates. A 4-adjacent step is allowed onto any non-wall
    tile, and standing on a portal also reaches its partner in one step. Before
    searching, every portal id must occur on exactly two tiles.
    """

    def validate(
        self,
        grid: Grid,
        start: Optional[TilePos] = None,
        goal: Optional[TilePos] = None,
    ) -> ValidationResult:
        unpaired = self.unpaired_portal_ids(grid)
        if unpaired:
            detail = ", ".join(f"{pid}x{count}" for pid, count in unpaired.items())
            logger.debug("portal ids without exactly two ends: %s", detail)
            return ValidationResult(False, ValidationFailure.UNPAIRED_PORTAL, detail=detail)

        if start is None:
            start = grid.find_unique(START)
            if start is None:
                return ValidationResult(False, ValidationFailure.MISSING_START)
        if goal is None:
            goal = grid.find_unique(GOAL)
            if goal is None:
                return ValidationResult(False, ValidationFailure.MISSING_GOAL)

        return self._search(grid, start, goal)

    @staticmethod
    def unpaired_portal_ids(grid: Grid) -> Dict[int, int]:
        """Portal ids whose tile count is not exactly two, mapped to that count."""
        return {
            pid: len(found)
            for pid, found in sorted(grid.portal_positions().items())
            if len(found) != 2
        }

    def _search(self, grid: Grid, start: TilePos, goal: TilePos) -> ValidationResult:
        teleports: Dict[TilePos, TilePos] = {}
        for pair in grid.portal_pairs():
            teleports[pair.a] = pair.b
            teleports[pair.b] = pair.a

        # Scratch visited map; the real grid is never written to.
        visited: List[List[bool]] = [[False] * grid.width for _ in range(grid.height)]
        visited[start.y][start.x] = True
        queue = deque([start])
        count = 0
        while queue:
            current = queue.popleft()
            count += 1
            if current == goal:
                return ValidationResult(True, visited=count)

            partner = teleports.get(current)
            if partner is not None and not visited[partner.y][partner.x]:
                visited[partner.y][partner.x] = True
                queue.append(partner)

            for neighbor in grid.neighbors4(current.x, current.y):
                if visited[neighbor.y][neighbor.x] or not is_walkable(grid[neighbor]):
                    continue
                visited[neighbor.y][neighbor.x] = True
                queue.append(neighbor)

        logger.debug("goal %s unreachable from %s after visiting %d tiles", goal, start, count)
        return ValidationResult(False, ValidationFailure.UNREACHABLE_GOAL, visited=count)

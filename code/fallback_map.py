"""Deterministic, always-solvable map used when the retry budget runs out."""

from __future__ import annotations

from typing import Tuple

from map_constants import GOAL, START, WALL
from map_geometry import TilePos
from map_grid import Grid

PILLAR_SPACING = 4
PILLAR_OFFSET = 2


def build_fallback_grid(width: int, height: int) -> Tuple[Grid, TilePos, TilePos]:
    """Open room with isolated pillars; start top-left, goal bottom-right.

    The first interior row and the last interior column stay clear, so the walk
    right then down always exists. Pillars are single tiles spaced apart, so they
    never cut the floor into pieces either.
    """
    grid = Grid(width, height)
    start = TilePos(1, 1)
    goal = TilePos(width - 2, height - 2)
    for pos in grid.interior_positions():
        if pos.x in (1, width - 2) or pos.y in (1, height - 2):
            continue
        if pos.x % PILLAR_SPACING == PILLAR_OFFSET and pos.y % PILLAR_SPACING == PILLAR_OFFSET:
            grid[pos] = WALL
    grid[start] = START
    grid[goal] = GOAL
    return grid, start, goal

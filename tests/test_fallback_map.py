import pytest

from fallback_map import build_fallback_grid
from map_constants import GOAL, START, WALL
from map_document import MapDocument
from map_geometry import TilePos
from reachability import ReachabilityValidator


@pytest.mark.parametrize("width,height", [(10, 8), (11, 9), (40, 25), (96, 80)])
def test_fallback_is_always_solvable(width, height):
    grid, start, goal = build_fallback_grid(width, height)

    assert (grid.width, grid.height) == (width, height)
    assert grid.border_is_intact()
    assert start == TilePos(1, 1)
    assert goal == TilePos(width - 2, height - 2)
    assert grid.count(START) == 1 and grid.count(GOAL) == 1
    assert ReachabilityValidator().validate(grid)


def test_fallback_pillars_are_isolated():
    grid, _, _ = build_fallback_grid(30, 20)

    pillars = [pos for pos in grid.interior_positions() if grid[pos] == WALL]

    assert pillars
    for pillar in pillars:
        assert all(grid[n] != WALL for n in grid.neighbors8(pillar.x, pillar.y))


def test_fallback_is_deterministic():
    first, _, _ = build_fallback_grid(25, 17)
    second, _, _ = build_fallback_grid(25, 17)

    assert first == second
    assert MapDocument.from_grid(first, "Fallback").rows == first.rows()

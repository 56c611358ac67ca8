import random

import pytest

from chamber_layout import ChamberLayoutSynthesizer
from map_constants import EMPTY
from map_geometry import Rect
from map_grid import Grid
from map_models import Chamber, portal_char
from portal_network import PortalPlacer


@pytest.fixture
def three_chambers():
    grid = Grid(34, 12)
    chambers = [
        Chamber(index=0, bounds=Rect(1, 1, 9, 9)),
        Chamber(index=1, bounds=Rect(12, 1, 9, 9)),
        Chamber(index=2, bounds=Rect(23, 1, 9, 9)),
    ]
    for chamber in chambers:
        ChamberLayoutSynthesizer._draw_chamber(grid, chamber)
    return grid, chambers


def test_scattered_pairs_use_dense_ids(make_config):
    grid = Grid(20, 12)
    placer = PortalPlacer(make_config(max_portal_pairs=4), random.Random(3))

    pairs = placer.place(grid)

    assert [pair.portal_id for pair in pairs] == [0, 1, 2, 3]
    on_grid = {pair.portal_id: {pair.a, pair.b} for pair in grid.portal_pairs()}
    assert on_grid == {pair.portal_id: {pair.a, pair.b} for pair in pairs}
    for pair in pairs:
        assert grid[pair.a] == grid[pair.b] == portal_char(pair.portal_id)


def test_scattered_second_end_is_farthest_candidate(make_config):
    grid = Grid(20, 12)
    placer = PortalPlacer(make_config(max_portal_pairs=1), random.Random(5))
    candidates = placer.candidate_positions(grid)

    (pair,) = placer.place(grid)

    farthest = max(pair.a.manhattan(pos) for pos in candidates if pos != pair.a)
    assert pair.a.manhattan(pair.b) == farthest


def test_no_pairs_when_too_few_candidates(make_config):
    grid = Grid.from_rows(["#####", "#+#+#", "#####"])
    placer = PortalPlacer(make_config(), random.Random(0))

    assert placer.place(grid) == []
    assert grid.portal_positions() == {}


def test_single_chamber_gets_no_portals(make_config, three_chambers):
    grid, chambers = three_chambers
    placer = PortalPlacer(make_config(), random.Random(0))

    assert placer.place(grid, chambers[:1]) == []


def test_consecutive_chambers_are_linked(make_config, three_chambers):
    grid, chambers = three_chambers
    placer = PortalPlacer(make_config(), random.Random(9))

    pairs = placer.place(grid, chambers)

    assert [pair.portal_id for pair in pairs] == [0, 1]
    for pair, (first, second) in zip(pairs, zip(chambers, chambers[1:])):
        assert first.floor.contains(pair.a)
        assert second.floor.contains(pair.b)


def test_chamber_portals_stand_on_clear_ground(make_config, three_chambers):
    grid, chambers = three_chambers
    placer = PortalPlacer(make_config(), random.Random(2))

    pairs = placer.place(grid, chambers)

    for pair in pairs:
        for end in (pair.a, pair.b):
            neighbors = [pos for pos in grid.window(end.x, end.y, 1) if pos != end]
            assert all(grid[pos] == EMPTY for pos in neighbors)


def test_max_portal_pairs_caps_chamber_links(make_config, three_chambers):
    grid, chambers = three_chambers
    placer = PortalPlacer(make_config(max_portal_pairs=1), random.Random(2))

    assert len(placer.place(grid, chambers)) == 1

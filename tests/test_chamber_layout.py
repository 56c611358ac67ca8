import random

import pytest

from chamber_layout import ChamberLayoutSynthesizer
from generation_config import TerrainStrategy
from map_constants import EMPTY, WALL
from map_generator import generate
from map_geometry import Rect


@pytest.fixture
def chamber_config(make_config):
    return make_config(width=40, height=30, strategy=TerrainStrategy.CHAMBER_LAYOUT)


def test_slot_counts_respect_limits(chamber_config):
    synthesizer = ChamberLayoutSynthesizer(chamber_config, random.Random(0))

    assert synthesizer.slot_counts() == (4, 3)


def test_chambers_fit_inside_border_without_overlapping(chamber_config):
    terrain = ChamberLayoutSynthesizer(chamber_config, random.Random(2)).synthesize()
    grid = terrain.grid
    chambers = terrain.chambers

    assert len(chambers) == 12
    assert [chamber.index for chamber in chambers] == list(range(12))
    assert grid.border_is_intact()
    interior = Rect(1, 1, grid.width - 2, grid.height - 2)
    for chamber in chambers:
        assert chamber.bounds.width >= 5 and chamber.bounds.height >= 5
        assert all(interior.contains(pos) for pos in chamber.bounds.tiles())
        assert all(grid[pos] == EMPTY for pos in chamber.floor.tiles())
    for index, chamber in enumerate(chambers):
        for other in chambers[index + 1:]:
            assert not chamber.bounds.overlaps(other.bounds)


def test_every_chamber_has_a_door(chamber_config):
    terrain = ChamberLayoutSynthesizer(chamber_config, random.Random(8)).synthesize()
    grid = terrain.grid

    for chamber in terrain.chambers:
        ring = [pos for pos in chamber.bounds.tiles() if chamber.bounds.is_on_edge(pos)]
        openings = [pos for pos in ring if grid[pos] != WALL]
        assert openings, f"chamber {chamber.index} is sealed"


def test_tiny_map_gets_a_single_chamber(make_config):
    config = make_config(width=10, height=8, strategy=TerrainStrategy.CHAMBER_LAYOUT)

    terrain = ChamberLayoutSynthesizer(config, random.Random(0)).synthesize()

    assert len(terrain.chambers) == 1
    assert terrain.grid.border_is_intact()


def test_same_seed_reproduces_chamber_boundaries(make_config):
    config = make_config(width=12, height=10, strategy=TerrainStrategy.CHAMBER_LAYOUT)

    first = ChamberLayoutSynthesizer(config, random.Random(42)).synthesize()
    second = ChamberLayoutSynthesizer(config, random.Random(42)).synthesize()

    assert first.chambers == second.chambers
    assert first.grid == second.grid


def test_small_chamber_map_header_reads_height_then_width():
    document = generate(12, 10, seed=42, strategy=TerrainStrategy.CHAMBER_LAYOUT)
    lines = document.to_text().splitlines()

    assert lines[1] == "10"
    assert lines[2] == "12"
    assert len(lines) == 3 + 10
    assert all(len(row) == 12 for row in lines[3:])
    assert generate(12, 10, seed=42, strategy=TerrainStrategy.CHAMBER_LAYOUT) == document


def test_neighbors_share_floor_rows_and_doors_cross_the_gap(make_config):
    config = make_config(width=40, height=30, strategy=TerrainStrategy.CHAMBER_LAYOUT, chamber_padding=2)
    terrain = ChamberLayoutSynthesizer(config, random.Random(5)).synthesize()
    grid = terrain.grid
    columns, rows = ChamberLayoutSynthesizer(config, random.Random(5)).slot_counts()

    assert len(terrain.chambers) == columns * rows
    for row in range(rows):
        for column in range(columns - 1):
            left = terrain.chambers[row * columns + column]
            right = terrain.chambers[row * columns + column + 1]
            assert left.bounds.y == right.bounds.y
            assert right.bounds.x - left.bounds.max_x >= config.chamber_padding
            shared = range(max(left.floor.y, right.floor.y), min(left.floor.max_y, right.floor.max_y))
            assert len(shared) > 0
            doors = [
                y for y in shared
                if all(grid.get(x, y) == EMPTY for x in range(left.bounds.max_x - 1, right.bounds.x + 1))
            ]
            assert doors, f"no straight door between chambers {left.index} and {right.index}"

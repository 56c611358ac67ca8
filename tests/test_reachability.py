import pytest

from map_geometry import TilePos
from map_grid import grid_from_lines
from map_graph import build_walk_graph, shortest_path_length
from reachability import ReachabilityValidator, ValidationFailure, walking_distances


@pytest.fixture
def validator() -> ReachabilityValidator:
    return ReachabilityValidator()


def test_straight_corridor_is_reachable(validator, corridor_grid):
    result = validator.validate(corridor_grid)

    assert result
    assert result.failure is None
    assert result.visited == 8


def test_lone_portal_id_is_unpaired(validator):
    grid = grid_from_lines(
        [
            "#########",
            "#x++3++:#",
            "#########",
        ]
    )

    result = validator.validate(grid)

    assert not result
    assert result.failure is ValidationFailure.UNPAIRED_PORTAL
    assert validator.unpaired_portal_ids(grid) == {3: 1}


def test_portal_id_used_three_times_is_unpaired(validator):
    grid = grid_from_lines(
        [
            "#########",
            "#x1+1+1:#",
            "#########",
        ]
    )

    result = validator.validate(grid)

    assert result.failure is ValidationFailure.UNPAIRED_PORTAL
    assert validator.unpaired_portal_ids(grid) == {1: 3}


def test_walls_block_the_goal(validator, split_room):
    result = validator.validate(split_room)

    assert not result
    assert result.failure is ValidationFailure.UNREACHABLE_GOAL


def test_teleport_bridges_separated_halves(validator):
    grid = grid_from_lines(
        [
            "###########",
            "#++++#++++#",
            "#+x+0#0+:+#",
            "#++++#++++#",
            "###########",
        ]
    )

    assert validator.validate(grid)
    # Walking alone never crosses the wall.
    assert TilePos(8, 2) not in walking_distances(grid, TilePos(2, 2))


def test_spikes_do_not_block(validator):
    grid = grid_from_lines(["#######", "#x***:#", "#######"])

    assert validator.validate(grid)


@pytest.mark.parametrize(
    "rows,failure",
    [
        (["#####", "#++:#", "#####"], ValidationFailure.MISSING_START),
        (["#####", "#x++#", "#####"], ValidationFailure.MISSING_GOAL),
        (["#####", "#x+x#", "#++:#", "#####"], ValidationFailure.MISSING_START),
    ],
)
def test_missing_markers_are_reported(validator, rows, failure):
    assert validator.validate(grid_from_lines(rows)).failure is failure


def test_validation_does_not_modify_the_grid(validator, split_room):
    before = split_room.copy()

    validator.validate(split_room)

    assert split_room == before


def test_explicit_endpoints_override_markers(validator, open_room):
    assert validator.validate(open_room, TilePos(1, 1), TilePos(10, 8))


@pytest.mark.parametrize(
    "rows",
    [
        ["#######", "#x+#+:#", "#######"],
        ["#######", "#x0#0:#", "#######"],
        ["#######", "#x+#+:#", "#+++++#", "#######"],
    ],
)
def test_validator_agrees_with_graph_search(validator, rows):
    grid = grid_from_lines(rows)
    start, goal = grid.find_unique("x"), grid.find_unique(":")
    graph = build_walk_graph(grid)

    assert bool(validator.validate(grid)) == (shortest_path_length(graph, start, goal) is not None)

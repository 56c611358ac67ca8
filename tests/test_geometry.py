import pytest

from map_geometry import CARDINAL_DIRECTIONS, Direction, Rect, TilePos


@pytest.mark.parametrize(
    "direction,expected",
    [
        (Direction.UP, Direction.DOWN),
        (Direction.RIGHT, Direction.LEFT),
        (Direction.DOWN, Direction.UP),
        (Direction.LEFT, Direction.RIGHT),
    ],
)
def test_direction_opposite(direction, expected):
    assert direction.opposite() is expected
    assert direction.opposite().opposite() is direction


def test_direction_from_tuple_rejects_diagonals():
    assert Direction.from_tuple((0, -1)) is Direction.UP

    with pytest.raises(ValueError):
        Direction.from_tuple((1, 1))


def test_cardinal_directions_sum_to_zero():
    assert sum(d.dx for d in CARDINAL_DIRECTIONS) == 0
    assert sum(d.dy for d in CARDINAL_DIRECTIONS) == 0
    assert len(CARDINAL_DIRECTIONS) == 4


def test_tile_pos_step_and_distances():
    origin = TilePos(2, 3)

    assert origin.step(Direction.UP) == TilePos(2, 2)
    assert origin.step(Direction.RIGHT) == TilePos(3, 3)
    assert origin.manhattan(TilePos(5, 7)) == 7
    assert origin.euclidean(TilePos(5, 7)) == pytest.approx(5.0)
    assert tuple(origin) == (2, 3)
    assert origin[0] == 2 and origin[1] == 3
    with pytest.raises(IndexError):
        origin[2]


def test_tile_pos_sorts_by_x_then_y():
    assert sorted([TilePos(1, 5), TilePos(0, 9), TilePos(1, 2)]) == [
        TilePos(0, 9),
        TilePos(1, 2),
        TilePos(1, 5),
    ]


@pytest.mark.parametrize(
    "rect_a,rect_b,expected",
    [
        (Rect(0, 0, 3, 3), Rect(2, 2, 3, 3), True),
        (Rect(0, 0, 2, 2), Rect(2, 2, 2, 2), False),
        (Rect(0, 0, 5, 5), Rect(5, 0, 3, 3), False),
    ],
)
def test_rect_overlaps(rect_a, rect_b, expected):
    assert rect_a.overlaps(rect_b) is expected
    assert rect_b.overlaps(rect_a) is expected


def test_rect_expand_grows_bounds_evenly():
    rect = Rect(2, 3, 4, 5)

    expanded = rect.expand(2)

    assert expanded == Rect(0, 1, 8, 9)
    # Original rect should remain unchanged.
    assert rect == Rect(2, 3, 4, 5)


def test_rect_edge_and_interior():
    rect = Rect(1, 1, 5, 4)

    assert rect.is_on_edge(TilePos(1, 2))
    assert rect.is_on_edge(TilePos(5, 4))
    assert not rect.is_on_edge(TilePos(3, 2))
    assert not rect.is_on_edge(TilePos(9, 9))
    assert rect.interior() == Rect(2, 2, 3, 2)
    assert len(list(rect.tiles())) == 20
    assert rect.center == TilePos(3, 3)


def test_rect_interior_of_thin_rect_is_empty():
    assert list(Rect(0, 0, 2, 7).interior().tiles()) == []
    assert Rect(0, 0, 2, 7).interior().width == 0

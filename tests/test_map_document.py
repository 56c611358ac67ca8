import pytest

from generation_config import TerrainStrategy
from map_document import MapDocument, MapFormatError
from map_geometry import TilePos
from map_grid import grid_from_lines

ROWS = [
    "########",
    "#x+*+0+#",
    "#+##+++#",
    "#0+S++:#",
    "########",
]


@pytest.fixture
def document() -> MapDocument:
    return MapDocument.from_grid(
        grid_from_lines(ROWS),
        "Standard 5x8 test map.",
        strategy=TerrainStrategy.CELL_COLLAPSE,
        seed=3,
        attempts=2,
    )


def test_from_grid_collects_markers(document):
    assert document.height == 5
    assert document.width == 8
    assert document.start == TilePos(1, 1)
    assert document.goal == TilePos(6, 3)
    assert [pair.to_tuple() for pair in document.portal_pairs] == [(0, (5, 1), (1, 3))]
    assert not document.fallback


def test_text_layout_is_description_height_width_rows(document):
    lines = document.to_text().splitlines()

    assert lines[:3] == ["Standard 5x8 test map.", "5", "8"]
    assert lines[3:] == ROWS
    assert document.to_text().endswith("\n")


def test_from_text_restores_tiles(document):
    parsed = MapDocument.from_text(document.to_text())

    assert parsed.rows == document.rows
    assert parsed.description == document.description
    assert parsed.start == document.start
    assert parsed.goal == document.goal
    assert parsed.portal_pairs == document.portal_pairs


def test_to_grid_returns_independent_copy(document):
    grid = document.to_grid()
    grid.set(2, 1, "*")

    assert document.rows[1] == ROWS[1]


@pytest.mark.parametrize(
    "text",
    [
        "desc\n5\n",
        "desc\nfive\n8\n" + "\n".join(ROWS),
        "desc\n5\n9\n" + "\n".join(ROWS),
        "desc\n6\n8\n" + "\n".join(ROWS),
        "desc\n5\n8\n" + "\n".join(ROWS) + "\n#x++++:#",
        "desc\n3\n5\n#####\n#x+?:\n#####",
        "desc\n3\n5\n#####\n#x+:#\n#####".replace("x", "+"),
        "desc\n3\n5\n#####\n#x3:#\n#####",
    ],
)
def test_malformed_text_is_rejected(text):
    with pytest.raises(MapFormatError):
        MapDocument.from_text(text)


def test_multiline_description_is_rejected():
    with pytest.raises(MapFormatError):
        MapDocument.from_grid(grid_from_lines(ROWS), "two\nlines")

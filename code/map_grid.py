"""Mutable tile buffer with a fixed wall border."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from map_constants import EMPTY, WALL
from map_geometry import CARDINAL_DIRECTIONS, EIGHT_NEIGHBOR_OFFSETS, Rect, TilePos
from map_models import PortalPair, TileKind, is_open_floor, portal_id, tile_kind


class Grid:
    """Rectangular buffer of tile characters, indexed as ``grid.get(x, y)``.

    The outermost ring is filled with walls on construction and can never be
    overwritten with anything else. Out-of-range access raises IndexError.
    """

    def __init__(self, width: int, height: int, fill: str = EMPTY) -> None:
        if width < 3 or height < 3:
            raise ValueError(f"Grid must be at least 3x3 to hold a border, got {width}x{height}")
        tile_kind(fill)
        self.width = width
        self.height = height
        self._rows: List[List[str]] = [[fill for _ in range(width)] for _ in range(height)]
        self._fill_borders()

    def _fill_borders(self) -> None:
        for x in range(self.width):
            self._rows[0][x] = WALL
            self._rows[self.height - 1][x] = WALL
        for y in range(self.height):
            self._rows[y][0] = WALL
            self._rows[y][self.width - 1] = WALL

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> Grid:
        """Build a grid from text rows; the rows must already carry a wall border."""
        if not rows:
            raise ValueError("Grid requires at least one row")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("All grid rows must have the same width")
        grid = cls(width, len(rows))
        for y, row in enumerate(rows):
            for x, char in enumerate(row):
                if grid.is_border(x, y):
                    if char != WALL:
                        raise ValueError(f"Border tile ({x}, {y}) must be a wall, got {char!r}")
                    continue
                grid.set(x, y, char)
        return grid

    # Access

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_border(self, x: int, y: int) -> bool:
        return x == 0 or y == 0 or x == self.width - 1 or y == self.height - 1

    def is_interior(self, x: int, y: int) -> bool:
        return 0 < x < self.width - 1 and 0 < y < self.height - 1

    def _check(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile ({x}, {y}) outside {self.width}x{self.height} grid")

    def get(self, x: int, y: int) -> str:
        self._check(x, y)
        return self._rows[y][x]

    def set(self, x: int, y: int, tile: str) -> None:
        self._check(x, y)
        if tile_kind(tile) is not TileKind.WALL and self.is_border(x, y):
            raise ValueError(f"Border tile ({x}, {y}) must stay a wall")
        self._rows[y][x] = tile

    def __getitem__(self, pos: TilePos) -> str:
        return self.get(pos.x, pos.y)

    def __setitem__(self, pos: TilePos, tile: str) -> None:
        self.set(pos.x, pos.y, tile)

    def fill_rect(self, bounds: Rect, tile: str) -> None:
        """Fill ``bounds`` clipped to the interior, leaving the border untouched."""
        for ty in range(max(1, bounds.y), min(self.height - 1, bounds.max_y)):
            for tx in range(max(1, bounds.x), min(self.width - 1, bounds.max_x)):
                self._rows[ty][tx] = tile

    # Adjacency

    def neighbors4(self, x: int, y: int) -> Iterator[TilePos]:
        for direction in CARDINAL_DIRECTIONS:
            nx, ny = x + direction.dx, y + direction.dy
            if self.in_bounds(nx, ny):
                yield TilePos(nx, ny)

    def neighbors8(self, x: int, y: int) -> Iterator[TilePos]:
        for dx, dy in EIGHT_NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield TilePos(nx, ny)

    def window(self, x: int, y: int, radius: int) -> Iterator[TilePos]:
        """Tiles in the clipped square of side ``2 * radius + 1`` centered on (x, y)."""
        for ty in range(max(0, y - radius), min(self.height, y + radius + 1)):
            for tx in range(max(0, x - radius), min(self.width, x + radius + 1)):
                yield TilePos(tx, ty)

    def count_open_in_window(self, x: int, y: int, radius: int) -> int:
        return sum(1 for pos in self.window(x, y, radius) if is_open_floor(self._rows[pos.y][pos.x]))

    # Queries

    def interior_positions(self) -> Iterator[TilePos]:
        for y in range(1, self.height - 1):
            for x in range(1, self.width - 1):
                yield TilePos(x, y)

    def positions_of(self, tile: str) -> List[TilePos]:
        return [
            TilePos(x, y)
            for y, row in enumerate(self._rows)
            for x, char in enumerate(row)
            if char == tile
        ]

    def find_unique(self, tile: str) -> Optional[TilePos]:
        """Return the single position holding ``tile``, or None if absent or repeated."""
        found = self.positions_of(tile)
        return found[0] if len(found) == 1 else None

    def count(self, tile: str) -> int:
        return sum(row.count(tile) for row in self._rows)

    def portal_positions(self) -> Dict[int, List[TilePos]]:
        """Map each portal id on the grid to every position that carries it."""
        positions: Dict[int, List[TilePos]] = defaultdict(list)
        for y, row in enumerate(self._rows):
            for x, char in enumerate(row):
                pid = portal_id(char)
                if pid is not None:
                    positions[pid].append(TilePos(x, y))
        return dict(positions)

    def portal_pairs(self) -> List[PortalPair]:
        """Pairs for ids that appear exactly twice, ordered by id."""
        return [
            PortalPair(pid, found[0], found[1])
            for pid, found in sorted(self.portal_positions().items())
            if len(found) == 2
        ]

    # Conversion

    def copy(self) -> Grid:
        clone = Grid.__new__(Grid)
        clone.width = self.width
        clone.height = self.height
        clone._rows = [list(row) for row in self._rows]
        return clone

    def rows(self) -> Tuple[str, ...]:
        return tuple("".join(row) for row in self._rows)

    def border_is_intact(self) -> bool:
        return all(
            self._rows[y][x] == WALL
            for y in range(self.height)
            for x in range(self.width)
            if self.is_border(x, y)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._rows == other._rows

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height})"

    def __str__(self) -> str:
        return "\n".join(self.rows())


def carve_l_corridor(grid: Grid, start: TilePos, end: TilePos, horizontal_first: bool) -> int:
    """Open walls along an L-shaped Manhattan path; return the number of tiles opened.

    Only interior walls are touched, so features already on the path survive.
    """
    if horizontal_first:
        corner = TilePos(end.x, start.y)
    else:
        corner = TilePos(start.x, end.y)
    opened = 0
    for a, b in ((start, corner), (corner, end)):
        step_x = (b.x > a.x) - (b.x < a.x)
        step_y = (b.y > a.y) - (b.y < a.y)
        x, y = a.x, a.y
        while True:
            if grid.is_interior(x, y) and grid.get(x, y) == WALL:
                grid.set(x, y, EMPTY)
                opened += 1
            if (x, y) == (b.x, b.y):
                break
            x += step_x
            y += step_y
    return opened


def grid_from_lines(lines: Iterable[str]) -> Grid:
    """Convenience for tests and the text codec: strips blank edges then builds a grid."""
    rows = [line for line in (raw.strip() for raw in lines) if line]
    return Grid.from_rows(rows)

"""Geometry helpers for tile coordinates, directions, and rectangles."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple


class Direction(Enum):
    """Cardinal directions with unit vectors on the tile grid (y grows downward)."""

    UP = (0, -1)
    RIGHT = (1, 0)
    DOWN = (0, 1)
    LEFT = (-1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value

    def opposite(self) -> Direction:
        return Direction.from_tuple((-self.dx, -self.dy))

    @classmethod
    def from_tuple(cls, value: Tuple[int, int]) -> Direction:
        try:
            return cls(value)
        except ValueError as exc:
            raise ValueError(f"Unsupported direction {value}") from exc


CARDINAL_DIRECTIONS = tuple(Direction)

# Diagonals are only used for cluster detection, never for movement.
EIGHT_NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)


@dataclass(frozen=True, order=True)
class TilePos:
    """Integer tile coordinate."""

    x: int
    y: int

    def __iter__(self):
        yield self.x
        yield self.y

    def __getitem__(self, index: int) -> int:
        if index == 0:
            return self.x
        if index == 1:
            return self.y
        raise IndexError("TilePos only supports two coordinates")

    def step(self, direction: Direction) -> TilePos:
        return TilePos(self.x + direction.dx, self.y + direction.dy)

    def offset(self, dx: int, dy: int) -> TilePos:
        return TilePos(self.x + dx, self.y + dy)

    def manhattan(self, other: TilePos) -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def euclidean(self, other: TilePos) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> Tuple[int, int]:
        return self.x, self.y

    @classmethod
    def from_tuple(cls, value: Tuple[int, int]) -> TilePos:
        return cls(*value)


@dataclass(frozen=True)
class Rect:
    """Immutable axis-aligned rectangle using integer tile coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def max_x(self) -> int:
        """Right edge (exclusive)."""
        return self.x + self.width

    @property
    def max_y(self) -> int:
        """Bottom edge (exclusive)."""
        return self.y + self.height

    @property
    def center(self) -> TilePos:
        return TilePos(self.x + self.width // 2, self.y + self.height // 2)

    def overlaps(self, other: Rect) -> bool:
        """Return True when the interior of this rect intersects another rect."""
        if self.max_x <= other.x or other.max_x <= self.x:
            return False
        if self.max_y <= other.y or other.max_y <= self.y:
            return False
        return True

    def expand(self, margin: int) -> Rect:
        """Return a rect grown outward by ``margin`` tiles on all sides."""
        if margin == 0:
            return self
        return Rect(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def contains(self, point: TilePos) -> bool:
        """Return True if the provided tile lies inside this rect."""
        return self.x <= point.x < self.max_x and self.y <= point.y < self.max_y

    def is_on_edge(self, point: TilePos) -> bool:
        """Return True if ``point`` lies on the outermost ring of this rect."""
        if not self.contains(point):
            return False
        return (
            point.x in (self.x, self.max_x - 1)
            or point.y in (self.y, self.max_y - 1)
        )

    def tiles(self) -> Iterator[TilePos]:
        """Iterate over every tile in row-major order."""
        for ty in range(self.y, self.max_y):
            for tx in range(self.x, self.max_x):
                yield TilePos(tx, ty)

    def interior(self) -> Rect:
        """Return the rect with its one-tile ring removed (may be empty)."""
        return Rect(self.x + 1, self.y + 1, max(0, self.width - 2), max(0, self.height - 2))

    def to_tuple(self) -> Tuple[int, int, int, int]:
        """Return the rect as an ``(x, y, width, height)`` tuple."""
        return self.x, self.y, self.width, self.height

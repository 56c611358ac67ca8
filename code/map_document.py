"""Immutable generated map plus the text format consumed by the game."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from generation_config import TerrainStrategy
from map_constants import GOAL, START
from map_geometry import TilePos
from map_grid import Grid
from map_models import PortalPair


class MapFormatError(ValueError):
    """Text does not describe a well-formed map."""


@dataclass(frozen=True)
class MapDocument:
    """An accepted map.

    Text layout: a free-text description line, the height, the width, then one
    line of exactly ``width`` tile characters per row.
    """

    description: str
    rows: Tuple[str, ...]
    start: TilePos
    goal: TilePos
    portal_pairs: Tuple[PortalPair, ...] = ()
    strategy: Optional[TerrainStrategy] = None
    seed: Optional[int] = None
    attempts: int = 0
    fallback: bool = False

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    def to_grid(self) -> Grid:
        """Return a fresh, mutable copy of the tiles."""
        return Grid.from_rows(self.rows)

    def to_text(self) -> str:
        lines = [self.description, str(self.height), str(self.width), *self.rows]
        return "\n".join(lines) + "\n"

    @classmethod
    def from_grid(
        cls,
        grid: Grid,
        description: str,
        *,
        strategy: Optional[TerrainStrategy] = None,
        seed: Optional[int] = None,
        attempts: int = 0,
        fallback: bool = False,
    ) -> MapDocument:
        start = grid.find_unique(START)
        goal = grid.find_unique(GOAL)
        if start is None or goal is None:
            raise MapFormatError("Map must contain exactly one start and exactly one goal")
        unpaired = [pid for pid, found in grid.portal_positions().items() if len(found) != 2]
        if unpaired:
            raise MapFormatError(f"Portal ids {sorted(unpaired)} do not appear exactly twice")
        if "\n" in description:
            raise MapFormatError("Description must fit on a single line")
        return cls(
            description=description,
            rows=grid.rows(),
            start=start,
            goal=goal,
            portal_pairs=tuple(grid.portal_pairs()),
            strategy=strategy,
            seed=seed,
            attempts=attempts,
            fallback=fallback,
        )

    @classmethod
    def from_text(cls, text: str) -> MapDocument:
        lines = text.splitlines()
        if len(lines) < 3:
            raise MapFormatError("Map text needs a description, a height, and a width")
        description = lines[0]
        try:
            height = int(lines[1].strip())
            width = int(lines[2].strip())
        except ValueError as exc:
            raise MapFormatError(f"Height and width must be integers: {exc}") from exc
        if height <= 0 or width <= 0:
            raise MapFormatError(f"Map dimensions must be positive, got {height}x{width}")

        rows = lines[3:3 + height]
        if len(rows) != height:
            raise MapFormatError(f"Expected {height} rows, found {len(rows)}")
        for index, row in enumerate(rows):
            if len(row) != width:
                raise MapFormatError(f"Row {index} has {len(row)} tiles, expected {width}")
        if any(line.strip() for line in lines[3 + height:]):
            raise MapFormatError("Unexpected content after the last map row")

        try:
            grid = Grid.from_rows(rows)
        except ValueError as exc:
            raise MapFormatError(str(exc)) from exc
        return cls.from_grid(grid, description)

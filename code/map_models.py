"""Core dataclasses and tile classification used by the map generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple

from map_constants import EMPTY, GOAL, MAX_PORTAL_IDS, PORTAL_CHARS, SAFE_ZONE, SPIKE, START, WALL
from map_geometry import Rect, TilePos

if TYPE_CHECKING:
    from map_grid import Grid


class TileKind(Enum):
    """Closed set of tile variants. PORTAL carries its pair id in the tile character."""

    WALL = WALL
    EMPTY = EMPTY
    SPIKE = SPIKE
    GOAL = GOAL
    START = START
    PORTAL = "portal"
    SAFE_ZONE = SAFE_ZONE

    @property
    def char(self) -> str:
        if self is TileKind.PORTAL:
            raise ValueError("Portal tiles need an id; use portal_char()")
        return self.value


_KIND_BY_CHAR = {kind.value: kind for kind in TileKind if kind is not TileKind.PORTAL}


def tile_kind(char: str) -> TileKind:
    """Classify a tile character, raising ValueError for unknown codes."""
    kind = _KIND_BY_CHAR.get(char)
    if kind is not None:
        return kind
    if len(char) == 1 and char in PORTAL_CHARS:
        return TileKind.PORTAL
    raise ValueError(f"Unknown tile code {char!r}")


def portal_char(portal_id: int) -> str:
    if not (0 <= portal_id < MAX_PORTAL_IDS):
        raise ValueError(f"Portal id must be in [0, {MAX_PORTAL_IDS}), got {portal_id}")
    return PORTAL_CHARS[portal_id]


def portal_id(char: str) -> Optional[int]:
    """Return the pair id for a portal tile, or None for any other tile."""
    if len(char) == 1 and char in PORTAL_CHARS:
        return PORTAL_CHARS.index(char)
    return None


def is_walkable(char: str) -> bool:
    """Everything except walls can be entered; spikes hurt but do not block."""
    return char != WALL


def is_open_floor(char: str) -> bool:
    """Plain floor for clearance and placement purposes (SafeZone behaves as Empty)."""
    return char == EMPTY or char == SAFE_ZONE


@dataclass(frozen=True)
class Chamber:
    """Rectangular room used by the chamber-style terrain strategies.

    ``bounds`` includes the wall ring for walled chambers; ``walled`` is False for
    rooms carved directly into a maze, whose whole rect is floor.
    """

    index: int
    bounds: Rect
    walled: bool = True

    @property
    def floor(self) -> Rect:
        return self.bounds.interior() if self.walled else self.bounds

    @property
    def center(self) -> TilePos:
        return self.bounds.center


@dataclass(frozen=True)
class PortalPair:
    """Two coordinates sharing a portal id; acts as a bidirectional teleport edge."""

    portal_id: int
    a: TilePos
    b: TilePos

    def __post_init__(self) -> None:
        if self.a == self.b:
            raise ValueError(f"Portal {self.portal_id} cannot pair a tile with itself")
        portal_char(self.portal_id)

    def other(self, pos: TilePos) -> TilePos:
        if pos == self.a:
            return self.b
        if pos == self.b:
            return self.a
        raise ValueError(f"{pos} is not an end of portal {self.portal_id}")

    def to_tuple(self) -> Tuple[int, Tuple[int, int], Tuple[int, int]]:
        return self.portal_id, self.a.to_tuple(), self.b.to_tuple()


@dataclass
class SynthesizedTerrain:
    """Output of a terrain strategy: the fresh grid plus any chambers it laid out."""

    grid: Grid
    chambers: List[Chamber] = field(default_factory=list)

"""Configuration container for map generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from generation_errors import InvalidDimensionsError
from map_constants import DEFAULT_MAX_ATTEMPTS, MAX_PORTAL_IDS, MIN_MAP_HEIGHT, MIN_MAP_WIDTH

logger = logging.getLogger(__name__)


class TerrainStrategy(Enum):
    """Interchangeable terrain synthesizers; exactly one runs per attempt."""

    CELL_COLLAPSE = "cell_collapse"
    CHAMBER_LAYOUT = "chamber_layout"
    MAZE_WITH_ROOMS = "maze_with_rooms"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def min_dimensions(self) -> tuple[int, int]:
        """Smallest (width, height) the strategy accepts; smaller requests are clamped."""
        return MIN_MAP_WIDTH, MIN_MAP_HEIGHT

    @classmethod
    def from_name(cls, name: str) -> TerrainStrategy:
        normalized = name.strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError as exc:
            choices = ", ".join(strategy.value for strategy in cls)
            raise ValueError(f"Unknown terrain strategy {name!r}; expected one of {choices}") from exc


@dataclass
class GenerationConfig:
    """Aggregates all tunable parameters for map generation."""

    width: int
    height: int
    strategy: TerrainStrategy = TerrainStrategy.CELL_COLLAPSE
    random_seed: int | None = None
    collect_metrics: bool = False

    # Full regenerations allowed before the fallback map is emitted.
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    # Contradiction restarts allowed inside a single cell-collapse synthesis.
    max_synthesis_restarts: int = 50

    # Clearance is the number of open tiles in the (2r+1)^2 window around a tile.
    clearance_radius: int = 2
    min_open_clearance: int = 5
    min_goal_clearance: int = 2

    # A walk longer than |dx| + detour_factor * |dy| counts as too convoluted.
    detour_factor: int = 2
    carve_radius: int = 1
    obstruction_clear_radius: int = 3
    obstruction_clear_probability: float = 0.4

    max_portal_pairs: int = 4
    # Open 4-neighbors a tile needs before it can host a portal.
    portal_min_empty_neighbors: int = 2

    # Spike clusters (8-connected) larger than this are thinned.
    max_spike_cluster_size: int = 2
    spike_removal_probability: float = 0.75

    min_chamber_width: int = 5
    min_chamber_height: int = 5
    max_chamber_columns: int = 4
    max_chamber_rows: int = 3
    chamber_padding: int = 1

    maze_room_attempts: int = 30
    maze_max_rooms: int = 6
    maze_room_min_size: int = 3
    maze_room_max_size: int = 7

    # Regions whose center lies within this distance of the goal get the sparse pattern.
    critical_path_radius: float = 12.0
    # Side length of hazard regions on terrain without chambers.
    hazard_region_size: int = 8
    safe_zone_radius: int = 1

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidDimensionsError(
                f"Map width and height must be positive, got {self.width}x{self.height}"
            )
        if not isinstance(self.strategy, TerrainStrategy):
            self.strategy = TerrainStrategy.from_name(str(self.strategy))

        min_width, min_height = self.strategy.min_dimensions
        if self.width < min_width or self.height < min_height:
            clamped = (max(self.width, min_width), max(self.height, min_height))
            logger.debug(
                "clamping %dx%d up to %dx%d for %s",
                self.width, self.height, clamped[0], clamped[1], self.strategy.value,
            )
            self.width, self.height = clamped

        if self.max_attempts <= 0:
            raise ValueError("GenerationConfig max_attempts must be positive")
        if self.max_synthesis_restarts < 0:
            raise ValueError("GenerationConfig max_synthesis_restarts cannot be negative")
        if self.clearance_radius <= 0:
            raise ValueError("GenerationConfig clearance_radius must be positive")
        if self.min_open_clearance < 0 or self.min_goal_clearance < 0:
            raise ValueError("GenerationConfig clearance thresholds cannot be negative")
        if self.detour_factor < 1:
            raise ValueError("GenerationConfig detour_factor must be at least 1")
        if self.carve_radius < 0 or self.obstruction_clear_radius < 0:
            raise ValueError("GenerationConfig carving radii cannot be negative")
        if not (0 <= self.max_portal_pairs <= MAX_PORTAL_IDS):
            raise ValueError(
                f"GenerationConfig max_portal_pairs must lie within [0, {MAX_PORTAL_IDS}]"
            )
        if not (0 <= self.portal_min_empty_neighbors <= 4):
            raise ValueError("GenerationConfig portal_min_empty_neighbors must lie within [0, 4]")
        if self.max_spike_cluster_size < 0:
            raise ValueError("GenerationConfig max_spike_cluster_size cannot be negative")
        for name in ("obstruction_clear_probability", "spike_removal_probability"):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"GenerationConfig {name} must lie within [0, 1]")
        # A walled chamber needs a 3x3 floor so a portal can stand with clear neighbors.
        if self.min_chamber_width < 5 or self.min_chamber_height < 5:
            raise ValueError("GenerationConfig chambers must be at least 5x5")
        if self.max_chamber_columns <= 0 or self.max_chamber_rows <= 0:
            raise ValueError("GenerationConfig chamber grid bounds must be positive")
        if self.chamber_padding < 0:
            raise ValueError("GenerationConfig chamber_padding cannot be negative")
        if self.maze_room_attempts < 0 or self.maze_max_rooms < 0:
            raise ValueError("GenerationConfig maze room counts cannot be negative")
        if not (1 <= self.maze_room_min_size <= self.maze_room_max_size):
            raise ValueError("GenerationConfig maze room sizes must satisfy 1 <= min <= max")
        if self.critical_path_radius < 0:
            raise ValueError("GenerationConfig critical_path_radius cannot be negative")
        if self.hazard_region_size <= 0:
            raise ValueError("GenerationConfig hazard_region_size must be positive")
        if self.safe_zone_radius < 0:
            raise ValueError("GenerationConfig safe_zone_radius cannot be negative")

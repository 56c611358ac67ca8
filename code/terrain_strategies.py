"""Selects the terrain synthesizer for a generation request."""

from __future__ import annotations

import random
from typing import Protocol

from cell_collapse import CellCollapseSynthesizer
from chamber_layout import ChamberLayoutSynthesizer
from generation_config import GenerationConfig, TerrainStrategy
from map_models import SynthesizedTerrain
from maze_rooms import MazeWithRoomsSynthesizer


class TerrainSynthesizer(Protocol):
    def synthesize(self) -> SynthesizedTerrain:
        ...


def synthesizer_for(config: GenerationConfig, rng: random.Random) -> TerrainSynthesizer:
    """Build the synthesizer named by ``config.strategy``, sharing the caller's RNG."""
    if config.strategy is TerrainStrategy.CELL_COLLAPSE:
        return CellCollapseSynthesizer(config, rng)
    if config.strategy is TerrainStrategy.CHAMBER_LAYOUT:
        return ChamberLayoutSynthesizer(config, rng)
    if config.strategy is TerrainStrategy.MAZE_WITH_ROOMS:
        return MazeWithRoomsSynthesizer(config, rng)
    raise AssertionError(f"Unhandled terrain strategy {config.strategy}")

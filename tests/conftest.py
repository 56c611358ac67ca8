import random
import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
CODE_DIR = ROOT_DIR / "code"
if str(CODE_DIR) not in sys.path:
    sys.path.insert(0, str(CODE_DIR))

from generation_config import GenerationConfig, TerrainStrategy
from map_grid import Grid, grid_from_lines


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def make_config() -> Callable[..., GenerationConfig]:
    def _make_config(
        *,
        width: int = 30,
        height: int = 20,
        strategy: TerrainStrategy = TerrainStrategy.CELL_COLLAPSE,
        random_seed: int | None = 7,
        **overrides,
    ) -> GenerationConfig:
        return GenerationConfig(
            width=width,
            height=height,
            strategy=strategy,
            random_seed=random_seed,
            **overrides,
        )

    return _make_config


@pytest.fixture
def corridor_grid() -> Grid:
    """Straight one-tile corridor: start on the left, goal on the right."""
    return grid_from_lines(
        [
            "##########",
            "#x++++++:#",
            "##########",
        ]
    )


@pytest.fixture
def open_room() -> Grid:
    return Grid(12, 10)


@pytest.fixture
def split_room() -> Grid:
    """Two halves separated by a solid wall column."""
    return grid_from_lines(
        [
            "###########",
            "#++++#++++#",
            "#+x++#++:+#",
            "#++++#++++#",
            "#++++#++++#",
            "###########",
        ]
    )

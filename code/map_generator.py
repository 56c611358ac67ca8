"""MapGenerator drives synthesis, feature placement, validation, and retries."""

from __future__ import annotations

import logging
import random
from enum import Enum
from time import perf_counter
from typing import Callable, List, Optional, Protocol, TypeVar

from fallback_map import build_fallback_grid
from feature_placement import StartGoalPlacer
from generation_config import GenerationConfig, TerrainStrategy
from generation_errors import ContradictionError, PlacementError
from hazard_distribution import HazardDistributor
from map_document import MapDocument
from map_geometry import TilePos
from map_grid import Grid
from metrics import GenerationMetrics
from portal_network import PortalPlacer
from reachability import ReachabilityValidator, ValidationResult
from terrain_strategies import synthesizer_for

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GenerationState(Enum):
    SYNTHESIZING = "synthesizing"
    PLACING = "placing"
    VALIDATING = "validating"
    RETRYING = "retrying"
    ACCEPTED = "accepted"
    FALLBACK_ACCEPTED = "fallback_accepted"


TERMINAL_STATES = frozenset((GenerationState.ACCEPTED, GenerationState.FALLBACK_ACCEPTED))


class MapValidator(Protocol):
    def validate(
        self,
        grid: Grid,
        start: Optional[TilePos] = None,
        goal: Optional[TilePos] = None,
    ) -> ValidationResult:
        ...


class MapGenerator:
    """Manages the retry loop that turns a config into an accepted map.

    Every attempt starts from a fresh grid. A rejected attempt is discarded whole,
    and after ``max_attempts`` rejections the deterministic fallback map is
    returned instead, so ``generate`` always yields a playable document.
    """

    def __init__(
        self,
        config: GenerationConfig,
        rng: Optional[random.Random] = None,
        validator: Optional[MapValidator] = None,
    ) -> None:
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.random_seed)
        self.validator: MapValidator = validator if validator is not None else ReachabilityValidator()
        self.metrics = GenerationMetrics() if config.collect_metrics else None

        self.start_goal_placer = StartGoalPlacer(config, self.rng)
        self.portal_placer = PortalPlacer(config, self.rng)
        self.hazard_distributor = HazardDistributor(config)

        self.state: Optional[GenerationState] = None
        self.history: List[GenerationState] = []
        self.attempts = 0

    def _transition(self, state: GenerationState) -> None:
        logger.debug("attempt %d: %s -> %s", self.attempts, self.state.value if self.state else "start", state.value)
        self.state = state
        self.history.append(state)

    def _run_stage(
        self,
        name: str,
        func: Callable[..., T],
        *args,
        succeeded: Optional[Callable[[T], bool]] = None,
        **kwargs,
    ) -> T:
        """Run one pipeline stage, timing it when metrics are enabled.

        A stage fails when it raises, or when ``succeeded`` rejects its result.
        """
        if self.metrics is None:
            return func(*args, **kwargs)

        start = perf_counter()
        failed = True
        try:
            result = func(*args, **kwargs)
            failed = succeeded is not None and not succeeded(result)
            return result
        finally:
            self.metrics.record_stage_run(name, perf_counter() - start, failed)

    def _reject(self, reason: str) -> None:
        logger.debug("attempt %d rejected: %s", self.attempts, reason)
        if self.metrics is not None:
            self.metrics.record_rejection(reason)

    def generate(self) -> MapDocument:
        """Runs attempts until one validates or the budget is spent."""
        if self.state in TERMINAL_STATES:
            raise RuntimeError("MapGenerator instances produce a single map; create a new one")

        while True:
            self.attempts += 1
            if self.metrics is not None:
                self.metrics.attempts = self.attempts
            document = self._run_attempt()
            if document is not None:
                self._transition(GenerationState.ACCEPTED)
                logger.info(
                    "accepted %dx%d %s map after %d attempt(s)",
                    document.width, document.height, self.config.strategy.value, self.attempts,
                )
                return document
            if self.attempts >= self.config.max_attempts:
                return self._emit_fallback()
            self._transition(GenerationState.RETRYING)

    def _run_attempt(self) -> Optional[MapDocument]:
        self._transition(GenerationState.SYNTHESIZING)
        synthesizer = synthesizer_for(self.config, self.rng)
        try:
            terrain = self._run_stage("synthesize", synthesizer.synthesize)
        except ContradictionError as exc:
            self._reject(f"contradiction: {exc}")
            return None
        grid = terrain.grid

        self._transition(GenerationState.PLACING)
        try:
            placement = self._run_stage("place_start_goal", self.start_goal_placer.place, grid)
        except PlacementError as exc:
            self._reject(f"placement: {exc}")
            return None
        self._run_stage("place_portals", self.portal_placer.place, grid, terrain.chambers)
        self._run_stage(
            "distribute_hazards",
            self.hazard_distributor.distribute,
            grid,
            terrain.chambers,
            placement.start,
            placement.goal,
        )
        self.hazard_distributor.mark_safe_zone(grid, placement.start)

        self._transition(GenerationState.VALIDATING)
        result = self._run_stage(
            "validate",
            self.validator.validate,
            grid,
            placement.start,
            placement.goal,
            succeeded=bool,
        )
        if not result:
            failure = result.failure.value if result.failure is not None else "invalid"
            self._reject(failure)
            return None

        return MapDocument.from_grid(
            grid,
            self.describe(grid.width, grid.height),
            strategy=self.config.strategy,
            seed=self.config.random_seed,
            attempts=self.attempts,
        )

    def describe(self, width: int, height: int) -> str:
        return f"Standard {height}x{width} {self.config.strategy.label.lower()} map with obstacles."

    def _emit_fallback(self) -> MapDocument:
        self._transition(GenerationState.FALLBACK_ACCEPTED)
        logger.warning(
            "no valid %s map after %d attempts; emitting fallback map",
            self.config.strategy.value, self.attempts,
        )
        if self.metrics is not None:
            self.metrics.used_fallback = True
        grid, _, _ = build_fallback_grid(self.config.width, self.config.height)
        return MapDocument.from_grid(
            grid,
            f"Fallback {grid.height}x{grid.width} map.",
            strategy=self.config.strategy,
            seed=self.config.random_seed,
            attempts=self.attempts,
            fallback=True,
        )


def generate(
    width: int,
    height: int,
    seed: Optional[int] = None,
    strategy: TerrainStrategy = TerrainStrategy.CELL_COLLAPSE,
    *,
    validator: Optional[MapValidator] = None,
    **tunables,
) -> MapDocument:
    """Generate one map. Raises InvalidDimensionsError for non-positive sizes."""
    config = GenerationConfig(
        width=width,
        height=height,
        strategy=strategy,
        random_seed=seed,
        **tunables,
    )
    return MapGenerator(config, validator=validator).generate()

"""Helpers for collecting instrumentation data during map generation."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class StageMetrics:
    """Aggregated metrics for a single pipeline stage across attempts.

    ``failures`` counts runs that raised or whose result the stage rejected,
    such as a validation verdict that refused the map.
    """

    name: str
    invocations: int = 0
    total_time: float = 0.0
    failures: int = 0

    def record(self, duration: float, failed: bool) -> None:
        self.invocations += 1
        self.total_time += duration
        if failed:
            self.failures += 1

    def to_dict(self) -> Dict[str, float | int]:
        average_time = self.total_time / self.invocations if self.invocations else 0.0
        return {
            "invocations": self.invocations,
            "total_time": self.total_time,
            "average_time": average_time,
            "failures": self.failures,
        }


@dataclass
class GenerationMetrics:
    """Container for stage metrics and attempt outcomes of one generation run."""

    stages: Dict[str, StageMetrics] = field(default_factory=dict)
    attempts: int = 0
    rejections: Counter[str] = field(default_factory=Counter)
    used_fallback: bool = False

    def record_stage_run(self, name: str, duration: float, failed: bool = False) -> None:
        metrics = self.stages.get(name)
        if metrics is None:
            metrics = StageMetrics(name=name)
            self.stages[name] = metrics
        metrics.record(duration, failed)

    def record_rejection(self, reason: str) -> None:
        self.rejections[reason] += 1

    def snapshot(self) -> Dict[str, object]:
        return {
            "attempts": self.attempts,
            "used_fallback": self.used_fallback,
            "rejections": dict(self.rejections),
            "stages": {name: metrics.to_dict() for name, metrics in self.stages.items()},
        }

import math

import pytest

from benchmark_generation import (
    MetricDefinition,
    aggregate_stage_metrics,
    percentile,
    run_benchmark,
    run_single_generation,
    summarize_metric_for_json,
)
from generation_config import TerrainStrategy


@pytest.mark.parametrize("strategy", list(TerrainStrategy))
def test_single_generation_is_measured(strategy):
    result = run_single_generation(4, 24, 16, strategy)

    assert result.seed == 4
    assert result.attempts >= 1
    assert result.duration >= 0.0
    assert 0.0 < result.open_fraction <= 1.0
    assert 0.0 <= result.spike_fraction < 1.0
    assert result.teleport_walk_length is not None
    if result.walk_length is not None:
        assert result.teleport_walk_length <= result.walk_length
    assert 0.0 < result.largest_component_fraction <= 1.0
    assert result.stage_metrics["synthesize"]["invocations"] == result.attempts


def test_benchmark_runs_are_reproducible_and_aggregate():
    first = run_benchmark(3, 11, 20, 12, TerrainStrategy.CELL_COLLAPSE)
    second = run_benchmark(3, 11, 20, 12, TerrainStrategy.CELL_COLLAPSE)

    assert [run.seed for run in first] == [run.seed for run in second]
    totals = aggregate_stage_metrics(first)
    assert totals["synthesize"]["invocations"] == sum(run.attempts for run in first)
    assert totals["validate"]["average_time"] >= 0.0


def test_percentile_interpolates_between_ranks():
    assert percentile([1.0, 2.0, 3.0, 4.0], 50) == pytest.approx(2.5)
    assert percentile([5.0, 1.0], 0) == 1.0
    assert math.isnan(percentile([], 50))


def test_json_summary_handles_empty_metrics():
    summary = summarize_metric_for_json(MetricDefinition("walk", "Walk length", [], success_threshold=10))

    assert summary["count"] == 0
    assert summary["mean"] is None
    assert summary["success_rate"] is None
    assert all(value is None for value in summary["percentiles"].values())

#!/usr/bin/env python3

# Generates many maps and reports timing and quality statistics.
# Used to compare terrain strategies and to catch regressions in playability.

from __future__ import annotations

import argparse
import datetime
import json
import math
import os
import random
import statistics
import time
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from generation_config import GenerationConfig, TerrainStrategy
from map_constants import SPIKE
from map_generator import MapGenerator
from map_graph import build_walk_graph, largest_component_fraction, shortest_path_length
from map_models import is_open_floor

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 60
DEFAULT_MAX_ATTEMPTS_THRESHOLD = 2

PERCENTILES = [1.0, 5.0] + [float(value) for value in range(10, 100, 10)] + [99.0]


@dataclass
class GenerationRunResult:
    seed: int
    duration: float
    attempts: int
    used_fallback: bool
    open_fraction: float
    spike_fraction: float
    portal_pairs: int
    walk_length: int | None
    teleport_walk_length: int | None
    largest_component_fraction: float
    rejections: Counter[str]
    stage_metrics: Dict[str, Dict[str, float | int]]


def percentile(values: List[float], pct: float) -> float:
    if not values:
        return float("nan")
    if pct <= 0:
        return min(values)
    if pct >= 100:
        return max(values)
    ordered = sorted(values)
    rank = (len(ordered) - 1) * (pct / 100.0)
    lower = math.floor(rank)
    upper = math.ceil(rank)
    if lower == upper:
        return ordered[int(rank)]
    fraction = rank - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * fraction


def fraction_at_most(values: List[float], threshold: float) -> float:
    if not values:
        return float("nan")
    return sum(1 for value in values if value <= threshold) / len(values)


def format_value(value: float, formatter: Callable[[float], str] | None = None) -> str:
    numeric = float(value)
    if math.isnan(numeric):
        return "nan"
    if formatter is None:
        return f"{numeric:.3f}"
    return formatter(numeric)


def format_seconds(value: float) -> str:
    if value >= 1.0:
        return f"{value:.3f}s"
    return f"{value * 1000:.1f}ms"


def json_safe_number(value: float | int | None) -> float | int | None:
    if value is None:
        return None
    numeric = float(value)
    if math.isnan(numeric) or math.isinf(numeric):
        return None
    if isinstance(value, int):
        return value
    return numeric


def compute_basic_stats(values: List[float]) -> Dict[str, float]:
    return {
        "mean": statistics.mean(values),
        "median": statistics.median(values),
        "min": min(values),
        "max": max(values),
        "stdev": statistics.stdev(values) if len(values) > 1 else float("nan"),
    }


def percentile_label(pct: float) -> str:
    return f"p{int(pct)}" if float(pct).is_integer() else f"p{pct:g}"


@dataclass
class MetricDefinition:
    key: str
    name: str
    values: List[float]
    value_formatter: Callable[[float], str] | None = None
    # Lower is better for every metric here, so success means "at most".
    success_threshold: float | None = None
    notes: str | None = None


def report_metric(definition: MetricDefinition) -> None:
    values = definition.values
    print(definition.name + ":")
    if not values:
        print("  (no data)")
        if definition.notes:
            print(f"  {definition.notes}")
        return

    stats = compute_basic_stats(values)
    formatted = {key: format_value(value, definition.value_formatter) for key, value in stats.items()}
    print(
        "  Count {count}, mean {mean}, median {median}, min {min}, max {max}, stdev {stdev}".format(
            count=len(values), **formatted
        )
    )
    percentile_parts = [
        f"{percentile_label(pct)}={format_value(percentile(values, pct), definition.value_formatter)}"
        for pct in PERCENTILES
    ]
    print("  Percentiles: " + ", ".join(percentile_parts))

    if definition.success_threshold is not None:
        rate = fraction_at_most(values, definition.success_threshold)
        threshold = format_value(definition.success_threshold, definition.value_formatter)
        print(f"  Success rate {rate:.1%} (<= {threshold})")
    if definition.notes:
        print(f"  {definition.notes}")


def summarize_metric_for_json(definition: MetricDefinition) -> Dict[str, Any]:
    values = definition.values
    summary: Dict[str, Any] = {"count": len(values)}
    if values:
        summary.update({key: json_safe_number(value) for key, value in compute_basic_stats(values).items()})
    else:
        summary.update({"mean": None, "median": None, "min": None, "max": None, "stdev": None})
    summary["percentiles"] = {
        percentile_label(pct): json_safe_number(percentile(values, pct)) if values else None
        for pct in PERCENTILES
    }
    if definition.success_threshold is not None:
        summary["success_threshold"] = json_safe_number(definition.success_threshold)
        summary["success_rate"] = json_safe_number(fraction_at_most(values, definition.success_threshold))
    if definition.notes:
        summary["notes"] = definition.notes
    return summary


def run_single_generation(
    seed: int, width: int, height: int, strategy: TerrainStrategy
) -> GenerationRunResult:
    """Generate one map with the provided seed and measure it."""
    config = GenerationConfig(
        width=width,
        height=height,
        strategy=strategy,
        random_seed=seed,
        collect_metrics=True,
    )
    generator = MapGenerator(config)

    start = time.perf_counter()
    document = generator.generate()
    duration = time.perf_counter() - start

    grid = document.to_grid()
    interior = (grid.width - 2) * (grid.height - 2)
    open_tiles = sum(1 for pos in grid.interior_positions() if is_open_floor(grid[pos]))

    walk_graph = build_walk_graph(grid, include_teleports=False)
    teleport_graph = build_walk_graph(grid)

    metrics = generator.metrics
    assert metrics is not None
    snapshot = metrics.snapshot()
    return GenerationRunResult(
        seed=seed,
        duration=duration,
        attempts=document.attempts,
        used_fallback=document.fallback,
        open_fraction=open_tiles / interior,
        spike_fraction=grid.count(SPIKE) / interior,
        portal_pairs=len(document.portal_pairs),
        walk_length=shortest_path_length(walk_graph, document.start, document.goal),
        teleport_walk_length=shortest_path_length(teleport_graph, document.start, document.goal),
        largest_component_fraction=largest_component_fraction(teleport_graph),
        rejections=Counter(metrics.rejections),
        stage_metrics=snapshot["stages"],  # type: ignore[arg-type]
    )


def run_benchmark(
    num_runs: int, seed: int | None, width: int, height: int, strategy: TerrainStrategy
) -> List[GenerationRunResult]:
    rng = random.Random(seed)
    return [
        run_single_generation(rng.randint(0, 1_000_000), width, height, strategy)
        for _ in range(num_runs)
    ]


def aggregate_stage_metrics(results: List[GenerationRunResult]) -> Dict[str, Dict[str, float]]:
    totals: Dict[str, Dict[str, float]] = {}
    for result in results:
        for name, metrics in result.stage_metrics.items():
            aggregate = totals.setdefault(name, {"invocations": 0.0, "total_time": 0.0, "failures": 0.0})
            aggregate["invocations"] += float(metrics.get("invocations", 0))
            aggregate["total_time"] += float(metrics.get("total_time", 0.0))
            aggregate["failures"] += float(metrics.get("failures", 0))
    for aggregate in totals.values():
        invocations = aggregate["invocations"]
        aggregate["average_time"] = aggregate["total_time"] / invocations if invocations else 0.0
    return totals


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Generate many maps and report timing and quality statistics."
    )
    parser.add_argument("-n", "--runs", type=int, default=20, help="Number of maps to generate (default: 20)")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional seed for the benchmark harness RNG; keeps run seeds reproducible",
    )
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    parser.add_argument(
        "--strategy",
        type=TerrainStrategy.from_name,
        default=TerrainStrategy.CELL_COLLAPSE,
        help="Terrain strategy: " + ", ".join(strategy.value for strategy in TerrainStrategy),
    )
    parser.add_argument(
        "--max-attempts-threshold",
        type=float,
        default=DEFAULT_MAX_ATTEMPTS_THRESHOLD,
        help="Attempts at or below this count as a success",
    )
    parser.add_argument("--json", action="store_true", help="Save results under benchmarks/ as JSON")
    args = parser.parse_args()

    if args.runs <= 0:
        raise SystemExit("Number of runs must be a positive integer")

    results = run_benchmark(args.runs, args.seed, args.width, args.height, args.strategy)

    durations = [result.duration for result in results]
    worst_index = durations.index(max(durations))

    for idx, result in enumerate(results, start=1):
        walk = result.walk_length if result.walk_length is not None else "-"
        teleport_walk = result.teleport_walk_length if result.teleport_walk_length is not None else "-"
        print(
            f"Run {idx:02d}: {format_seconds(result.duration)} (seed {result.seed}) | "
            f"attempts {result.attempts}{' fallback' if result.used_fallback else ''} | "
            f"open {result.open_fraction:.1%}, spikes {result.spike_fraction:.1%} | "
            f"portals {result.portal_pairs} | path {walk} (with teleports {teleport_walk})"
        )

    walk_lengths = [float(r.walk_length) for r in results if r.walk_length is not None]
    teleport_lengths = [float(r.teleport_walk_length) for r in results if r.teleport_walk_length is not None]
    unreachable_on_foot = sum(1 for r in results if r.walk_length is None)

    metrics_to_report = [
        MetricDefinition("generation_time", "Generation time", durations, lambda value: f"{value:.4f}s"),
        MetricDefinition(
            "attempts",
            "Attempts per map",
            [float(r.attempts) for r in results],
            lambda value: f"{value:.0f}",
            success_threshold=args.max_attempts_threshold,
        ),
        MetricDefinition("open_fraction", "Open floor fraction", [r.open_fraction for r in results], lambda v: f"{v:.1%}"),
        MetricDefinition("spike_fraction", "Spike fraction", [r.spike_fraction for r in results], lambda v: f"{v:.1%}"),
        MetricDefinition(
            "walk_length",
            "Shortest path on foot",
            walk_lengths,
            lambda value: f"{value:.0f}",
            notes=f"{unreachable_on_foot} map(s) need a teleport" if unreachable_on_foot else None,
        ),
        MetricDefinition("teleport_walk_length", "Shortest path with teleports", teleport_lengths, lambda v: f"{v:.0f}"),
        MetricDefinition(
            "largest_component_fraction",
            "Largest walkable region",
            [r.largest_component_fraction for r in results],
            lambda v: f"{v:.1%}",
        ),
    ]

    print()
    print(f"Strategy {args.strategy.value}, {args.width}x{args.height}, runs {args.runs}")
    print(f"Worst-case generation time: {format_seconds(durations[worst_index])} (seed {results[worst_index].seed})")
    fallback_rate = sum(1 for r in results if r.used_fallback) / len(results)
    print(f"Fallback rate: {fallback_rate:.1%}")

    aggregated: Dict[str, Any] = {"fallback_rate": fallback_rate}
    for metric in metrics_to_report:
        print()
        report_metric(metric)
        aggregated[metric.key] = summarize_metric_for_json(metric)

    rejections: Counter[str] = Counter()
    for result in results:
        rejections.update(result.rejections)
    if rejections:
        print()
        print("Rejection reasons:")
        for reason, count in rejections.most_common():
            print(f"  {reason}: {count}")

    stage_totals = aggregate_stage_metrics(results)
    if stage_totals:
        print()
        print("Stage performance summary:")
        for name, metrics in sorted(stage_totals.items(), key=lambda item: item[1]["total_time"], reverse=True):
            print(
                f"  {name}: invocations={int(metrics['invocations'])}, "
                f"total_time={format_seconds(metrics['total_time'])}, "
                f"avg_time={format_seconds(metrics['average_time'])}, failures={int(metrics['failures'])}"
            )

    if not args.json:
        return

    timestamp = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)
    script_dir = os.path.dirname(os.path.abspath(__file__))
    benchmarks_dir = os.path.abspath(os.path.join(script_dir, "..", "benchmarks"))
    os.makedirs(benchmarks_dir, exist_ok=True)
    output_path = os.path.join(benchmarks_dir, f"benchmark-{timestamp.strftime('%Y%m%dT%H%M%SZ')}.json")

    benchmark_data = {
        "benchmark_run_info": {
            "timestamp": timestamp.isoformat(),
            "num_iterations": args.runs,
            "parameters": {
                "seed": args.seed,
                "width": args.width,
                "height": args.height,
                "strategy": args.strategy.value,
            },
        },
        "aggregated_results": aggregated,
        "rejections": dict(rejections),
        "stage_summary": {
            name: {key: json_safe_number(value) for key, value in metrics.items()}
            for name, metrics in sorted(stage_totals.items())
        },
        "results": [
            {
                "run_id": idx,
                "seed": result.seed,
                "total_time_seconds": result.duration,
                "attempts": result.attempts,
                "used_fallback": result.used_fallback,
                "open_fraction": result.open_fraction,
                "spike_fraction": result.spike_fraction,
                "portal_pairs": result.portal_pairs,
                "walk_length": result.walk_length,
                "teleport_walk_length": result.teleport_walk_length,
            }
            for idx, result in enumerate(results, start=1)
        ],
    }
    with open(output_path, "w", encoding="utf-8") as handle:
        json.dump(benchmark_data, handle, indent=2, sort_keys=True)
        handle.write("\n")
    print(f"\nSaved benchmark results to {os.path.relpath(output_path)}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import List, Optional

from generation_config import GenerationConfig, TerrainStrategy
from generation_errors import InvalidDimensionsError
from map_generator import MapGenerator
from map_writer import MapWriter


def random_even_dimension(rng: random.Random, low: int = 75, high: int = 100) -> int:
    return rng.randrange(low + low % 2, high + 1, 2)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate tile maps for the platform game.")
    parser.add_argument("--width", type=int, default=None, help="Map width in tiles (default: random even 75-100)")
    parser.add_argument("--height", type=int, default=None, help="Map height in tiles (default: random even 75-100)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible maps")
    parser.add_argument(
        "--strategy",
        type=TerrainStrategy.from_name,
        default=TerrainStrategy.CELL_COLLAPSE,
        help="Terrain strategy: " + ", ".join(strategy.value for strategy in TerrainStrategy),
    )
    parser.add_argument("-n", "--count", type=int, default=1, help="Number of maps to generate (default: 1)")
    parser.add_argument("--output-dir", default="maps", help="Directory for map<N>.txt files (default: maps)")
    parser.add_argument("--stdout", action="store_true", help="Print maps instead of writing files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.count <= 0:
        raise SystemExit("Number of maps must be a positive integer")

    seed = args.seed
    if seed is None:
        # Pick a seed and print it, so a surprising map can be reproduced with --seed.
        seed = random.randint(0, 1000000)
    print(f"Using random seed {seed}")
    seed_rng = random.Random(seed)

    writer = MapWriter(args.output_dir)
    for index in range(args.count):
        map_seed = seed if index == 0 else seed_rng.randint(0, 1000000)
        width = args.width if args.width is not None else random_even_dimension(seed_rng)
        height = args.height if args.height is not None else random_even_dimension(seed_rng)
        try:
            config = GenerationConfig(
                width=width,
                height=height,
                strategy=args.strategy,
                random_seed=map_seed,
            )
        except InvalidDimensionsError as exc:
            raise SystemExit(str(exc)) from exc
        document = MapGenerator(config).generate()
        if args.stdout:
            sys.stdout.write(document.to_text())
        else:
            path = writer.write(document)
            status = "fallback" if document.fallback else f"{document.attempts} attempt(s)"
            print(f"Wrote {path} ({document.width}x{document.height}, seed {map_seed}, {status})")


if __name__ == "__main__":
    main()

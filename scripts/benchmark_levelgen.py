#!/usr/bin/env python3
"""Benchmark the level generators."""

from __future__ import annotations

import argparse
import json
import random
import time
from collections.abc import Callable
from pathlib import Path

from levelgen import config
from levelgen.environment.generators import (
    OutdoorTerrainGenerator,
    RoomsAndCorridorsGenerator,
    create_pipeline,
)

CASES: dict[str, Callable[[random.Random], object]] = {
    "station": create_pipeline("station").generate,
    "station_small": create_pipeline("station_small").generate,
    "terrain": OutdoorTerrainGenerator(
        config.OUTDOOR_WIDTH, config.OUTDOOR_HEIGHT
    ).generate,
    "dungeon": RoomsAndCorridorsGenerator(80, 43).generate,
}


class LevelGenBenchmark:
    """Benchmark runner for the level generators."""

    def __init__(self, iterations: int, cases: list[str]) -> None:
        self.iterations = iterations
        self.cases = cases
        self.results: dict[str, dict[str, float]] = {}

    def _run_case(self, name: str) -> float:
        """Run one benchmark case and return average generation time in ms."""
        generate = CASES[name]
        elapsed_total = 0.0

        for i in range(self.iterations):
            rng = random.Random(f"{name}-{i}")

            start = time.perf_counter()
            generate(rng)
            elapsed_total += time.perf_counter() - start

        return (elapsed_total / self.iterations) * 1000.0

    def run(self) -> None:
        """Run all selected cases."""
        print("Level Generation Benchmark")
        print("=" * 42)
        print(f"Iterations per case: {self.iterations}")
        print()
        print(f"{'Case':>14} {'Mean (ms)':>14}")
        print("-" * 42)

        for name in self.cases:
            mean_ms = self._run_case(name)
            self.results[name] = {"mean_ms": mean_ms}
            print(f"{name:>14} {mean_ms:14.2f}")

    def save_results(self, filename: str) -> None:
        """Save benchmark output to a JSON file."""
        with Path(filename).open("w") as f:
            json.dump(self.results, f, indent=2)
        print(f"\nSaved benchmark results to {filename}")

    def compare_with_baseline(self, baseline_file: str) -> None:
        """Compare current run with a saved baseline JSON file."""
        try:
            with Path(baseline_file).open() as f:
                baseline: dict[str, dict[str, float]] = json.load(f)
        except FileNotFoundError:
            print(f"\nBaseline file not found: {baseline_file}")
            return

        print(f"\nComparison vs baseline: {baseline_file}")
        print("=" * 64)

        for name, current in self.results.items():
            if name not in baseline:
                continue

            old_ms = baseline[name].get("mean_ms", 0.0)
            new_ms = current["mean_ms"]
            if old_ms <= 0:
                continue

            delta_pct = ((new_ms - old_ms) / old_ms) * 100.0
            speed_ratio = old_ms / new_ms if new_ms > 0 else 0.0
            trend = "faster" if speed_ratio > 1.0 else "slower"

            print(
                f"{name:>14}: {new_ms:8.2f}ms "
                f"vs {old_ms:8.2f}ms | {speed_ratio:5.2f}x {trend} "
                f"({delta_pct:+6.1f}%)"
            )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Benchmark level generation")
    parser.add_argument(
        "--iterations",
        type=int,
        default=5,
        help="Number of runs per case (default: 5)",
    )
    parser.add_argument(
        "--case",
        action="append",
        choices=sorted(CASES),
        help="Case to run; repeat for several (default: all)",
    )
    parser.add_argument("--save", type=str, help="Save current results to JSON")
    parser.add_argument(
        "--compare",
        type=str,
        help="Compare current results against baseline JSON",
    )
    args = parser.parse_args(argv)

    benchmark = LevelGenBenchmark(
        iterations=args.iterations, cases=args.case or list(CASES)
    )
    benchmark.run()

    if args.save:
        benchmark.save_results(args.save)

    if args.compare:
        benchmark.compare_with_baseline(args.compare)


if __name__ == "__main__":
    main()

"""
Rain Drop Performance Benchmarks

Measures:
- Drop creation cost
- Per-tick update cost for slow and fast drops
- Body growth
- Point projection
"""

import random
import statistics
import time
from typing import Any, Dict, List

from digital_rain.drop import RainDrop, RainDropStyle

SCREEN = (200, 60)
SPEED_RANGE = (2, 16)


class RainDropBenchmarks:
    """Benchmarks for the RainDrop component."""

    def __init__(self, iterations: int = 10000, seed: int = 1234):
        self.iterations = iterations
        self.rng = random.Random(seed)
        self.results: Dict[str, Dict[str, Any]] = {}

    def _make_drop(self, speed: int, body_len: int = 8, fy: float = 10.0) -> RainDrop:
        body = ['a'] * body_len
        return RainDrop(1, body, RainDropStyle.GRADIENT, 10, fy, 40, speed)

    def bench_create(self) -> Dict[str, Any]:
        """Benchmark drop creation."""
        times = []
        for i in range(self.iterations):
            start = time.perf_counter_ns()
            RainDrop.create(SCREEN, SPEED_RANGE, i, self.rng)
            times.append(time.perf_counter_ns() - start)
        return self._compute_stats("drop_create", times)

    def _bench_update(self, name: str, speed: int) -> Dict[str, Any]:
        drop = self._make_drop(speed)
        times = []
        for _ in range(self.iterations):
            start = time.perf_counter_ns()
            drop.update(SCREEN, SPEED_RANGE, 0.016, self.rng)
            times.append(time.perf_counter_ns() - start)
        return self._compute_stats(name, times)

    def bench_update_slow(self) -> Dict[str, Any]:
        """Benchmark ticking a slow drop through its whole lifecycle."""
        return self._bench_update("drop_update_slow", speed=4)

    def bench_update_fast(self) -> Dict[str, Any]:
        """Benchmark ticking a fast drop through its whole lifecycle."""
        return self._bench_update("drop_update_fast", speed=16)

    def bench_grow(self) -> Dict[str, Any]:
        """Benchmark growth by several rows at once."""
        times = []
        for _ in range(self.iterations):
            drop = self._make_drop(speed=12, body_len=1)
            start = time.perf_counter_ns()
            drop.grow(16, self.rng)
            times.append(time.perf_counter_ns() - start)
        return self._compute_stats("drop_grow", times)

    def bench_to_points_vec(self) -> Dict[str, Any]:
        """Benchmark projecting a full-length body."""
        drop = self._make_drop(speed=10, body_len=40, fy=50.0)
        times = []
        for _ in range(self.iterations):
            start = time.perf_counter_ns()
            drop.to_points_vec()
            times.append(time.perf_counter_ns() - start)
        return self._compute_stats("drop_to_points_vec", times)

    def _compute_stats(self, name: str, times_ns: List[int]) -> Dict[str, Any]:
        """Compute statistics from timing measurements."""
        times_us = [t / 1000 for t in times_ns]

        stats = {
            "name": name,
            "iterations": len(times_us),
            "mean_us": statistics.mean(times_us),
            "median_us": statistics.median(times_us),
            "stdev_us": statistics.stdev(times_us) if len(times_us) > 1 else 0,
            "min_us": min(times_us),
            "max_us": max(times_us),
            "p95_us": sorted(times_us)[int(len(times_us) * 0.95)],
            "p99_us": sorted(times_us)[int(len(times_us) * 0.99)],
            "ops_per_sec": 1_000_000 / statistics.mean(times_us) if statistics.mean(times_us) else 0,
        }
        self.results[name] = stats
        return stats

    def run_all(self) -> Dict[str, Dict[str, Any]]:
        """Run all benchmarks and return results."""
        print(f"\nRunning Rain Drop Benchmarks ({self.iterations} iterations each)...")
        print("-" * 60)

        benchmarks = [
            ("Drop creation", self.bench_create),
            ("Slow drop update", self.bench_update_slow),
            ("Fast drop update", self.bench_update_fast),
            ("Multi-row growth", self.bench_grow),
            ("Point projection", self.bench_to_points_vec),
        ]

        for desc, bench_func in benchmarks:
            print(f"  {desc}...", end=" ", flush=True)
            result = bench_func()
            print(f"{result['mean_us']:.2f} µs (p99: {result['p99_us']:.2f} µs)")

        return self.results


if __name__ == "__main__":
    bench = RainDropBenchmarks(iterations=10000)
    bench.run_all()

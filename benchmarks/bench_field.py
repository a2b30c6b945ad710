"""
Rain Field Performance Benchmarks

Measures:
- Full field tick at terminal and large-screen densities
- Frame rendering into a headless buffer
- Sustained ticks per second
"""

import random
import statistics
import time
from typing import Any, Dict, List

from digital_rain.field import Field
from digital_rain.options import DigitalRainOptionsBuilder
from digital_rain.renderer import FrameBuffer


class FieldBenchmarks:
    """Benchmarks for the Field orchestration."""

    def __init__(self, iterations: int = 2000, seed: int = 1234):
        self.iterations = iterations
        self.seed = seed
        self.results: Dict[str, Dict[str, Any]] = {}

    def _make_field(self, screen, drops) -> Field:
        options = (
            DigitalRainOptionsBuilder()
            .drops_range((drops, drops))
            .speed_range((2, 16))
            .build()
        )
        return Field(screen, options, rng=random.Random(self.seed))

    def bench_tick_terminal(self) -> Dict[str, Any]:
        """Benchmark one tick of an 80x24 field."""
        field = self._make_field((80, 24), 60)
        times = []
        for _ in range(self.iterations):
            start = time.perf_counter_ns()
            field.update(0.016)
            times.append(time.perf_counter_ns() - start)
        return self._compute_stats("field_tick_80x24", times)

    def bench_tick_large(self) -> Dict[str, Any]:
        """Benchmark one tick of a 240x70 field."""
        field = self._make_field((240, 70), 240)
        times = []
        for _ in range(self.iterations):
            start = time.perf_counter_ns()
            field.update(0.016)
            times.append(time.perf_counter_ns() - start)
        return self._compute_stats("field_tick_240x70", times)

    def bench_render(self) -> Dict[str, Any]:
        """Benchmark rendering a settled field into a FrameBuffer."""
        field = self._make_field((240, 70), 240)
        for _ in range(200):
            field.update(0.016)
        buffer = FrameBuffer()
        times = []
        for _ in range(self.iterations):
            start = time.perf_counter_ns()
            field.render(buffer)
            times.append(time.perf_counter_ns() - start)
        return self._compute_stats("field_render_240x70", times)

    def bench_throughput(self) -> Dict[str, Any]:
        """Measure sustained ticks per second (update + render)."""
        field = self._make_field((240, 70), 240)
        buffer = FrameBuffer()

        count = self.iterations
        start = time.perf_counter()
        for _ in range(count):
            field.update(0.016)
            field.render(buffer)
        elapsed = time.perf_counter() - start

        mean_us = elapsed / count * 1_000_000
        result = {
            "name": "field_throughput",
            "iterations": count,
            "total_time_sec": elapsed,
            "ticks_per_sec": count / elapsed,
            "mean_us": mean_us,
            "median_us": mean_us,
            "p95_us": mean_us,
            "p99_us": mean_us,
            "ops_per_sec": count / elapsed,
        }
        self.results["field_throughput"] = result
        return result

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
        print(f"\nRunning Field Benchmarks ({self.iterations} iterations each)...")
        print("-" * 60)

        benchmarks = [
            ("80x24 tick", self.bench_tick_terminal),
            ("240x70 tick", self.bench_tick_large),
            ("240x70 render", self.bench_render),
            ("Throughput", self.bench_throughput),
        ]

        for desc, bench_func in benchmarks:
            print(f"  {desc}...", end=" ", flush=True)
            result = bench_func()
            if "ticks_per_sec" in result:
                print(f"{result['ticks_per_sec']:.0f} ticks/sec")
            else:
                print(f"{result['mean_us']:.2f} µs (p99: {result['p99_us']:.2f} µs)")

        return self.results


if __name__ == "__main__":
    bench = FieldBenchmarks(iterations=2000)
    bench.run_all()

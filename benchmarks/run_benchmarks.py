#!/usr/bin/env python3
"""
Digital Rain Performance Benchmark Runner

Runs all performance benchmarks and generates a report.

Usage:
    python -m benchmarks.run_benchmarks [options]

Options:
    --quick         Run with fewer iterations (faster but less accurate)
    --full          Run with more iterations (slower but more accurate)
    --json          Output results as JSON
    --component X   Only run benchmarks for component X (drop, field)
    --save FILE     Save results to FILE
"""

import argparse
import json
import os
import platform
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import psutil

from benchmarks.bench_rain_drop import RainDropBenchmarks
from benchmarks.bench_field import FieldBenchmarks


def get_system_info() -> Dict[str, Any]:
    """Gather system information for the report."""
    memory = psutil.virtual_memory()
    process = psutil.Process(os.getpid())
    return {
        "platform": platform.platform(),
        "python_version": platform.python_version(),
        "processor": platform.processor() or "unknown",
        "machine": platform.machine(),
        "cpu_count": psutil.cpu_count(logical=True),
        "memory_total_mb": round(memory.total / (1024 * 1024)),
        "process_rss_mb": round(process.memory_info().rss / (1024 * 1024), 1),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def print_header():
    """Print benchmark suite header."""
    print("=" * 70)
    print("  Digital Rain Performance Benchmarks")
    print("=" * 70)
    print()
    info = get_system_info()
    print(f"  Platform:       {info['platform']}")
    print(f"  Python:         {info['python_version']}")
    print(f"  Processor:      {info['processor']} ({info['cpu_count']} CPUs)")
    print(f"  Memory:         {info['memory_total_mb']} MB total")
    print(f"  Timestamp:      {info['timestamp']}")
    print()


def print_summary(all_results: Dict[str, Dict[str, Dict[str, Any]]]):
    """Print a summary of all benchmark results."""
    print()
    print("=" * 70)
    print("  SUMMARY")
    print("=" * 70)
    print()

    metrics = []
    for component, results in all_results.items():
        for name, stats in results.items():
            metrics.append({
                "component": component,
                "benchmark": name,
                "mean_us": stats["mean_us"],
                "p99_us": stats["p99_us"],
                "ops_per_sec": stats["ops_per_sec"],
            })

    metrics.sort(key=lambda x: x["mean_us"])

    print(f"{'Component':<15} {'Benchmark':<30} {'Mean (µs)':<12} {'P99 (µs)':<12} {'Ops/sec':<12}")
    print("-" * 85)

    for m in metrics:
        print(f"{m['component']:<15} {m['benchmark']:<30} "
              f"{m['mean_us']:<12.2f} {m['p99_us']:<12.2f} {m['ops_per_sec']:<12,.0f}")

    print()

    print("-" * 70)
    print("  PERFORMANCE THRESHOLDS")
    print("-" * 70)

    # A 60 fps frame budget is ~16ms; a tick must leave room for drawing
    thresholds = {
        "drop_update_slow": {"max_us": 20, "min_ops": 50000},
        "drop_update_fast": {"max_us": 40, "min_ops": 25000},
        "field_tick_80x24": {"max_us": 1000, "min_ops": 1000},
        "field_tick_240x70": {"max_us": 4000, "min_ops": 250},
    }

    all_passed = True
    for m in metrics:
        if m["benchmark"] in thresholds:
            thresh = thresholds[m["benchmark"]]
            passed_latency = m["mean_us"] <= thresh["max_us"]
            passed_ops = m["ops_per_sec"] >= thresh["min_ops"]

            status = "PASS" if (passed_latency and passed_ops) else "FAIL"
            if status == "FAIL":
                all_passed = False

            print(f"  {m['benchmark']:<30} "
                  f"Latency: {'OK' if passed_latency else 'SLOW'} ({m['mean_us']:.1f}/{thresh['max_us']} µs)  "
                  f"Throughput: {'OK' if passed_ops else 'LOW'} ({m['ops_per_sec']:.0f}/{thresh['min_ops']} ops/s)  "
                  f"[{status}]")

    print()
    if all_passed:
        print("  All performance thresholds PASSED")
    else:
        print("  WARNING: Some performance thresholds FAILED")
    print()


def run_all_benchmarks(
    iterations: int = 10000,
    components: Optional[List[str]] = None
) -> Dict[str, Dict[str, Dict[str, Any]]]:
    """Run all benchmark suites and return combined results."""
    all_results = {}

    if components is None or "drop" in components:
        drop_bench = RainDropBenchmarks(iterations=iterations)
        all_results["drop"] = drop_bench.run_all()

    if components is None or "field" in components:
        # A field tick updates hundreds of drops
        field_bench = FieldBenchmarks(iterations=max(100, iterations // 5))
        all_results["field"] = field_bench.run_all()

    return all_results


def main():
    parser = argparse.ArgumentParser(
        description="Run Digital Rain performance benchmarks"
    )
    parser.add_argument(
        "--quick", action="store_true",
        help="Run with fewer iterations (faster)"
    )
    parser.add_argument(
        "--full", action="store_true",
        help="Run with more iterations (more accurate)"
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Output results as JSON"
    )
    parser.add_argument(
        "--component", type=str, action="append",
        choices=["drop", "field"],
        help="Only run benchmarks for specific component(s)"
    )
    parser.add_argument(
        "--save", type=str, metavar="FILE",
        help="Save results to a JSON file"
    )

    args = parser.parse_args()

    if args.quick:
        iterations = 1000
    elif args.full:
        iterations = 50000
    else:
        iterations = 10000

    if not args.json:
        print_header()

    start_time = time.time()
    results = run_all_benchmarks(
        iterations=iterations,
        components=args.component
    )
    elapsed = time.time() - start_time

    output = {
        "system": get_system_info(),
        "config": {
            "iterations": iterations,
            "components": args.component or ["all"],
        },
        "elapsed_seconds": elapsed,
        "results": results,
    }

    if args.json:
        print(json.dumps(output, indent=2))
    else:
        print_summary(results)
        print(f"  Total benchmark time: {elapsed:.1f}s")
        print()

    if args.save:
        with open(args.save, 'w') as f:
            json.dump(output, f, indent=2)
        if not args.json:
            print(f"  Results saved to: {args.save}")
            print()


if __name__ == "__main__":
    main()

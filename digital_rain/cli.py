"""
Digital Rain Command Line

Runs a headless simulation for a fixed number of ticks and prints a
summary of the resulting field. Time is simulated, the command never
sleeps between ticks.

Usage:
    digital-rain
    digital-rain --ticks 1000 --seed 7
    digital-rain --speed 4,12 --drops 50,80 --json
"""

import argparse
import json
import logging
import random
import shutil
import sys
from typing import List, Optional, Tuple

from .field import Field
from .options import DigitalRainOptions, DigitalRainOptionsBuilder
from .renderer import FrameBuffer
from .utils.error_handling import ErrorCategory, safe_execute

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_OPTIONS = 2


def parse_range(value: str) -> Tuple[int, int]:
    """Parse a ``MIN,MAX`` command line range."""
    parts = value.split(',')
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected MIN,MAX, got {value!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"range bounds must be integers, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="digital-rain",
        description="Digital Rain - headless falling character simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    digital-rain                        # Simulate ~10s on the terminal's size
    digital-rain --ticks 2000 --seed 1  # Longer, reproducible run
    digital-rain --speed 4,12           # Slower rain
    digital-rain --config rain.json     # Options from a JSON file
    digital-rain --json                 # Machine readable summary

Config file format:
    {"drops_range": [120, 240], "speed_range": [2, 16]}
        """
    )
    columns, lines = shutil.get_terminal_size(fallback=(80, 24))
    parser.add_argument("--width", type=int, default=columns,
                        help=f"Screen width in columns (default: {columns})")
    parser.add_argument("--height", type=int, default=lines,
                        help=f"Screen height in rows (default: {lines})")
    parser.add_argument("--drops", type=parse_range, metavar="MIN,MAX",
                        help="Range for the number of drops")
    parser.add_argument("--speed", type=parse_range, metavar="MIN,MAX",
                        help="Range for drop speed in rows per second")
    parser.add_argument("--config", "-c", type=str,
                        help="JSON options file")
    parser.add_argument("--ticks", "-t", type=int, default=600,
                        help="Number of ticks to simulate (default: 600)")
    parser.add_argument("--dt-ms", type=int, default=16,
                        help="Simulated milliseconds per tick (default: 16)")
    parser.add_argument("--seed", type=int,
                        help="Random seed for a reproducible run")
    parser.add_argument("--json", action="store_true",
                        help="Print the summary as JSON")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    return parser


def load_options(args: argparse.Namespace) -> DigitalRainOptions:
    """Combine the config file (if any) with command line overrides."""
    base = DigitalRainOptions.from_file(args.config) if args.config else DigitalRainOptions()
    builder = (
        DigitalRainOptionsBuilder()
        .drops_range(args.drops or base.drops_range)
        .speed_range(args.speed or base.speed_range)
    )
    return builder.build()


def run_simulation(
    width: int,
    height: int,
    options: DigitalRainOptions,
    ticks: int,
    dt_ms: int,
    seed: Optional[int] = None,
) -> dict:
    """Run the simulation and return its summary."""
    rng = random.Random(seed)
    field = Field((width, height), options, rng=rng)
    for _ in range(ticks):
        field.update(dt_ms / 1000.0)

    buffer = FrameBuffer()
    field.render(buffer)

    summary = field.stats().to_dict()
    summary['visible_cells'] = buffer.visible_cells
    summary['clipped_cells'] = buffer.clipped
    summary['options'] = options.to_dict()
    summary['seed'] = seed
    return summary


def print_summary(summary: dict):
    print("=" * 60)
    print("  Digital Rain Simulation")
    print("=" * 60)
    print(f"  Screen:         {summary['width']}x{summary['height']}")
    print(f"  Ticks:          {summary['frames']} ({summary['elapsed_seconds']:.2f}s simulated)")
    print(f"  Drops:          {summary['drops']}")
    print(f"  Recycles:       {summary['recycles']}")
    print(f"  Body cells:     {summary['body_cells']}")
    print(f"  Visible cells:  {summary['visible_cells']} ({summary['clipped_cells']} clipped)")
    print()
    print("  Phases:")
    for name, count in summary['phases'].items():
        print(f"    {name:<12} {count}")
    print("  Styles:")
    for name, count in sorted(summary['styles'].items()):
        print(f"    {name:<12} {count}")
    print()


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the digital-rain command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.width <= 0 or args.height <= 0:
        parser.error("--width and --height must be positive")
    if args.ticks < 0 or args.dt_ms < 0:
        parser.error("--ticks and --dt-ms must not be negative")

    # The builder already logged validation failures at ERROR
    with safe_execute("load_options", ErrorCategory.CONFIG, log_level=logging.DEBUG) as result:
        result.value = load_options(args)
    if not result.success:
        print(f"Error: {result.error.error}", file=sys.stderr)
        return EXIT_BAD_OPTIONS
    options = result.value

    summary = run_simulation(args.width, args.height, options, args.ticks, args.dt_ms, args.seed)
    logger.info(
        f"Simulated {summary['frames']} ticks with {summary['drops']} drops, "
        f"{summary['recycles']} recycles"
    )

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print_summary(summary)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

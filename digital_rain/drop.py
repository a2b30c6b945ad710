"""
Rain Drop - A single falling character stream and its state machine.

A drop owns a head-first body of characters, a fixed column and a
fractional row that advances with elapsed time. Each update moves the
drop down, grows its body while it is on screen, and recycles it in
place once its tail has left the bottom edge.

Drop coordinates may lie outside the screen rectangle; clipping is left
to whatever draws them.

Usage:
    rng = random.Random()
    drop = RainDrop.create((80, 24), (2, 16), drop_id=1, rng=rng)
    drop.update((80, 24), (2, 16), timedelta(milliseconds=16), rng)
    for column, row, char in drop.to_points_vec():
        ...
"""

import logging
import math
import random
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import List, Tuple, Union, Optional

from .characters import CharacterPool, default_pool

logger = logging.getLogger(__name__)

ScreenSize = Tuple[int, int]    # (width, height)
SpeedRange = Tuple[int, int]    # (min_speed, max_speed), rows per second
Point = Tuple[int, int]         # (column, row)
Cell = Tuple[int, int, str]     # (column, row, character)

# Drops faster than this grow one head character per row crossed,
# slower drops grow at most one character per update.
FAST_DROP_SPEED = 8

# Shortest body cap a freshly created drop can get
MIN_CREATE_LENGTH = 4


def round_half_away(value: float) -> int:
    """Round to the nearest integer with ties away from zero (2.5 -> 3, -2.5 -> -3).

    Used for every float-to-row conversion so projections and boundary
    checks agree with each other. The builtin round() uses banker's
    rounding and must not be used here.
    """
    magnitude = abs(value)
    whole = math.floor(magnitude)
    # Compare the fraction instead of adding 0.5, which rounds up just below a tie
    if magnitude - whole >= 0.5:
        whole += 1
    return int(math.copysign(whole, value))


def to_seconds(dt: Union[timedelta, float, int]) -> float:
    """Convert a timedelta or a number of seconds to seconds."""
    if isinstance(dt, timedelta):
        seconds = dt.total_seconds()
    else:
        seconds = float(dt)
    if seconds < 0:
        raise ValueError(f"Elapsed time must be non-negative, got {seconds}s")
    return seconds


def sample_speed(speed_range: SpeedRange, rng: random.Random) -> int:
    """Sample a speed from the inclusive ``(min_speed, max_speed)`` range.

    An inverted range is a configuration bug and raises ValueError
    instead of being clamped.
    """
    min_speed, max_speed = speed_range
    if min_speed > max_speed:
        raise ValueError(
            f"Invalid speed range: min_speed ({min_speed}) > max_speed ({max_speed})"
        )
    return rng.randint(min_speed, max_speed)


class RainDropStyle(Enum):
    """Visual intensity variant of a drop, interpreted by the renderer."""
    FRONT = "front"
    MIDDLE = "middle"
    BACK = "back"
    FADING = "fading"
    GRADIENT = "gradient"


# Inclusive upper bound of a 1-100 roll for each style:
# 10% front, 10% middle, 20% back, 10% fading, 50% gradient
STYLE_PERCENTILES: Tuple[Tuple[int, RainDropStyle], ...] = (
    (10, RainDropStyle.FRONT),
    (20, RainDropStyle.MIDDLE),
    (40, RainDropStyle.BACK),
    (50, RainDropStyle.FADING),
    (100, RainDropStyle.GRADIENT),
)


def style_for_roll(roll: int) -> RainDropStyle:
    """Map a roll in ``[1, 100]`` to its style bucket."""
    if not 1 <= roll <= 100:
        raise ValueError(f"Style roll must be in [1, 100], got {roll}")
    for upper, style in STYLE_PERCENTILES:
        if roll <= upper:
            return style
    raise AssertionError("STYLE_PERCENTILES must end at 100")


def random_style(rng: random.Random) -> RainDropStyle:
    """Pick a style using the STYLE_PERCENTILES table."""
    return style_for_roll(rng.randint(1, 100))


class DropPhase(Enum):
    """Where a drop is relative to the screen, decided from its head and tail rows."""
    EMERGING = "emerging"        # tail still above the top edge
    TRAVERSING = "traversing"    # fully on screen
    EXITING = "exiting"          # head below the bottom edge, tail still visible
    RECYCLING = "recycling"      # tail below the bottom edge

    @classmethod
    def classify(cls, head_row: int, tail_row: int, height: int) -> 'DropPhase':
        """Pick the phase for the given rows. Checks run in order, first match wins."""
        if tail_row <= 0:
            return cls.EMERGING
        if head_row <= height and tail_row > 0:
            return cls.TRAVERSING
        if head_row > height and tail_row < height:
            return cls.EXITING
        return cls.RECYCLING


@dataclass
class RainDrop:
    """
    One falling stream of characters.

    ``body[0]`` is the head (lowest row on screen); higher indices trail
    above it. ``fy`` is the head's fractional row, ``fx`` its column.
    Everything except ``drop_id`` is re-randomized when the drop recycles.
    """
    drop_id: int
    body: List[str]
    style: RainDropStyle
    fx: int
    fy: float
    max_length: int
    speed: int
    pool: CharacterPool = field(default_factory=default_pool, repr=False, compare=False)
    recycle_count: int = field(default=0, init=False, compare=False)

    @classmethod
    def create(
        cls,
        screen_size: ScreenSize,
        speed_range: SpeedRange,
        drop_id: int,
        rng: random.Random,
        pool: Optional[CharacterPool] = None,
    ) -> 'RainDrop':
        """Create a drop with random defaults bounded by the screen size.

        Every range is widened to hold at least one value so tiny screens
        still produce valid drops.
        """
        if pool is None:
            pool = default_pool()
        width, height = screen_size

        style = random_style(rng)
        fx = rng.randrange(max(1, width))
        fy = float(rng.randrange(max(1, height // 4)))
        max_length = rng.randint(MIN_CREATE_LENGTH, max(MIN_CREATE_LENGTH, 2 * height // 3))
        speed = sample_speed(speed_range, rng)

        init_length = rng.randrange(1, max(2, max_length // 2))
        body = [pool.choice(rng) for _ in range(init_length)]

        return cls(drop_id, body, style, fx, fy, max_length, speed, pool)

    @property
    def head_row(self) -> int:
        return round_half_away(self.fy)

    @property
    def tail_row(self) -> int:
        return self.head_row - len(self.body)

    @property
    def is_fast(self) -> bool:
        return self.speed > FAST_DROP_SPEED

    def phase(self, height: int) -> DropPhase:
        """Current phase of the drop for a screen of the given height."""
        return DropPhase.classify(self.head_row, self.tail_row, height)

    def to_point(self) -> Point:
        """Screen coordinates of the head."""
        return self.fx, round_half_away(self.fy)

    def to_points_vec(self) -> List[Cell]:
        """Coordinates of every body character, head first.

        Stops at the first character above row 0; the rest of the body
        is further up and cannot be visible either. Rows past the bottom
        edge are kept.
        """
        column, head_row = self.to_point()
        points = []
        for index, char in enumerate(self.body):
            row = head_row - index
            if row < 0:
                break
            points.append((column, row, char))
        return points

    def reset(self, screen_size: ScreenSize, speed_range: SpeedRange, rng: random.Random):
        """Recycle the drop in place with a one-character body at the top."""
        width, height = screen_size
        speed = sample_speed(speed_range, rng)

        self.body.clear()
        self.body.append(self.pool.choice(rng))
        self.style = random_style(rng)
        self.fy = 0.0
        self.fx = rng.randrange(max(1, width))
        self.speed = speed
        # Respawned drops get a shorter cap range than newly created ones
        min_length = height // 4 + 1
        self.max_length = rng.randint(min_length, max(min_length, height // 2))
        self.recycle_count += 1

    def grow(self, head_row: int, rng: random.Random):
        """Add head characters for the rows crossed since ``fy`` was last committed."""
        if len(self.body) >= self.max_length:
            del self.body[self.max_length:]
            return

        delta = head_row - round_half_away(self.fy)
        if delta > 0:
            count = delta if self.is_fast else 1
            # Anything beyond max_length would be trimmed again right away
            for _ in range(min(count, self.max_length)):
                self.body.insert(0, self.pool.choice(rng))

        del self.body[self.max_length:]

    def update(
        self,
        screen_size: ScreenSize,
        speed_range: SpeedRange,
        dt: Union[timedelta, float],
        rng: random.Random,
    ):
        """Advance the drop by ``dt`` (a timedelta or seconds).

        Drops that are emerging or on screen move and grow, drops whose
        head has left the bottom edge only move, and drops whose tail has
        left it are recycled.
        """
        if not self.body:
            logger.debug(f"Drop {self.drop_id} has an empty body, recycling")
            self.reset(screen_size, speed_range, rng)
            return

        fy = self.fy + self.speed * to_seconds(dt)
        head_row = round_half_away(fy)
        tail_row = head_row - len(self.body)
        phase = DropPhase.classify(head_row, tail_row, screen_size[1])

        if phase in (DropPhase.EMERGING, DropPhase.TRAVERSING):
            self.grow(head_row, rng)
            self.fy = fy
        elif phase == DropPhase.EXITING:
            self.fy = fy
        else:
            self.reset(screen_size, speed_range, rng)

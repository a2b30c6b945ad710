"""
Rain Field - Owns a set of rain drops and drives them every tick.

The field keeps the drop count fixed for its lifetime: drops are never
destroyed, only recycled in place. Each tick it hands the elapsed time,
current screen size and speed bounds to every drop, then forwards the
projected coordinates to a renderer.
"""

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .characters import CharacterPool, default_pool
from .drop import Cell, DropPhase, RainDrop, ScreenSize, to_seconds
from .options import DigitalRainOptions
from .renderer import RendererProtocol
from .utils.error_handling import ErrorCategory, handle_error

logger = logging.getLogger(__name__)


@dataclass
class FieldStats:
    """Snapshot of a field's state."""
    width: int
    height: int
    frames: int
    elapsed_seconds: float
    drops: int
    body_cells: int
    recycles: int
    phases: Dict[str, int] = field(default_factory=dict)
    styles: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            'width': self.width,
            'height': self.height,
            'frames': self.frames,
            'elapsed_seconds': round(self.elapsed_seconds, 3),
            'drops': self.drops,
            'body_cells': self.body_cells,
            'recycles': self.recycles,
            'phases': dict(self.phases),
            'styles': dict(self.styles),
        }


class Field:
    """Collection of rain drops sized by the configured density."""

    def __init__(
        self,
        screen_size: ScreenSize,
        options: Optional[DigitalRainOptions] = None,
        rng: Optional[random.Random] = None,
        pool: Optional[CharacterPool] = None,
    ):
        self.options = options or DigitalRainOptions()
        self.rng = rng if rng is not None else random.Random()
        self.pool = pool if pool is not None else default_pool()
        self.width, self.height = screen_size
        self.drops: List[RainDrop] = []
        self.frames = 0
        self.elapsed_seconds = 0.0

        self._target_drops = self.rng.randint(self.options.min_drops, self.options.max_drops)
        self._init_drops()
        logger.debug(
            f"Field {self.width}x{self.height} created with {len(self.drops)} drops"
        )

    @property
    def screen_size(self) -> ScreenSize:
        return self.width, self.height

    def _init_drops(self):
        """Create the drops with sequential ids starting at 1."""
        self.drops = [
            RainDrop.create(
                self.screen_size,
                self.options.speed_range,
                drop_id,
                self.rng,
                pool=self.pool,
            )
            for drop_id in range(1, self._target_drops + 1)
        ]

    def resize(self, width: int, height: int):
        """Handle a screen resize.

        Drops whose column fell off the right edge are recycled so they
        come back inside the screen. Drop ids are preserved.
        """
        if (width, height) == self.screen_size:
            return
        self.width = width
        self.height = height

        moved = 0
        for drop in self.drops:
            if drop.fx >= width:
                drop.reset(self.screen_size, self.options.speed_range, self.rng)
                moved += 1
        logger.debug(f"Field resized to {width}x{height}, recycled {moved} off-screen drops")

    def update(self, dt: Union[timedelta, float], screen_size: Optional[ScreenSize] = None):
        """Advance every drop by ``dt``, resizing first if a new size is given."""
        if screen_size is not None:
            self.resize(*screen_size)

        seconds = to_seconds(dt)
        speed_range = self.options.speed_range
        for drop in self.drops:
            try:
                drop.update(self.screen_size, speed_range, seconds, self.rng)
            except Exception as e:
                handle_error(
                    e,
                    "update_drop",
                    ErrorCategory.SIMULATION,
                    additional_context={'drop_id': drop.drop_id, 'frame': self.frames},
                    reraise=True,
                )

        self.frames += 1
        self.elapsed_seconds += seconds

    def points(self) -> Iterator[Tuple[RainDrop, List[Cell]]]:
        """Yield every drop with its projected body coordinates."""
        for drop in self.drops:
            yield drop, drop.to_points_vec()

    def render(self, renderer: RendererProtocol):
        """Send the current frame to a renderer."""
        try:
            renderer.begin_frame(self.width, self.height)
            for drop, cells in self.points():
                for column, row, char in cells:
                    renderer.draw(column, row, char, drop.style)
            renderer.end_frame()
        except Exception as e:
            handle_error(
                e,
                "render_frame",
                ErrorCategory.RENDER,
                additional_context={'renderer': type(renderer).__name__, 'frame': self.frames},
                reraise=True,
            )

    def stats(self) -> FieldStats:
        """Summarize the field at its current size."""
        phases = Counter(drop.phase(self.height).value for drop in self.drops)
        styles = Counter(drop.style.value for drop in self.drops)
        return FieldStats(
            width=self.width,
            height=self.height,
            frames=self.frames,
            elapsed_seconds=self.elapsed_seconds,
            drops=len(self.drops),
            body_cells=sum(len(drop.body) for drop in self.drops),
            recycles=sum(drop.recycle_count for drop in self.drops),
            phases={phase.value: phases.get(phase.value, 0) for phase in DropPhase},
            styles=dict(styles),
        )

    def __len__(self) -> int:
        return len(self.drops)

    def __iter__(self) -> Iterator[RainDrop]:
        return iter(self.drops)

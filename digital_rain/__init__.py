"""
Digital Rain - Falling character streams for terminal screens

A simulation core for the "digital rain" effect: drops of characters
that emerge from the top of a surface, grow while they fall, and are
recycled in place once they leave the bottom edge.

Basic Usage:
    from digital_rain import Field, FrameBuffer

    field = Field((80, 24))
    buffer = FrameBuffer()
    field.update(0.016)
    field.render(buffer)

Single Drop:
    from digital_rain import RainDrop

    drop = RainDrop.create((80, 24), (2, 16), drop_id=1, rng=random.Random())
    drop.update((80, 24), (2, 16), 0.016, rng)
"""

__version__ = "1.0.0"

# Simulation core
from .characters import CharacterPool, default_pool, random_character
from .drop import (
    RainDrop,
    RainDropStyle,
    DropPhase,
    STYLE_PERCENTILES,
    random_style,
    round_half_away,
)
from .field import Field, FieldStats

# Configuration
from .options import (
    DigitalRainOptions,
    DigitalRainOptionsBuilder,
    OptionsError,
)

# Rendering contract
from .renderer import RendererProtocol, FrameBuffer

__all__ = [
    # Version
    "__version__",
    # Core
    "CharacterPool",
    "default_pool",
    "random_character",
    "RainDrop",
    "RainDropStyle",
    "DropPhase",
    "STYLE_PERCENTILES",
    "random_style",
    "round_half_away",
    "Field",
    "FieldStats",
    # Options
    "DigitalRainOptions",
    "DigitalRainOptionsBuilder",
    "OptionsError",
    # Rendering
    "RendererProtocol",
    "FrameBuffer",
]

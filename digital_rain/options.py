"""
Digital Rain Options - Density and speed configuration.

Options are immutable once built. The builder validates every range and
reports problems through the shared error handler before raising, so a
bad configuration is caught before any drop is created.

Usage:
    options = (
        DigitalRainOptionsBuilder()
        .drops_range((20, 30))
        .speed_range((10, 20))
        .build()
    )
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from .utils.error_handling import ErrorCategory, handle_error

logger = logging.getLogger(__name__)

DEFAULT_DROPS_RANGE: Tuple[int, int] = (120, 240)
DEFAULT_SPEED_RANGE: Tuple[int, int] = (2, 16)


class OptionsError(ValueError):
    """Raised when digital rain options are invalid."""


def _validate_range(name: str, value: Any) -> Tuple[int, int]:
    try:
        low, high = value
    except (TypeError, ValueError):
        raise OptionsError(f"{name} must be a pair of integers, got {value!r}")
    for bound in (low, high):
        # bool is an int subclass but never a meaningful bound
        if isinstance(bound, bool) or not isinstance(bound, int):
            raise OptionsError(f"{name} bounds must be integers, got {value!r}")
        if bound <= 0:
            raise OptionsError(f"{name} bounds must be positive, got {value!r}")
    if low > high:
        raise OptionsError(f"{name} minimum ({low}) is greater than maximum ({high})")
    return low, high


@dataclass(frozen=True)
class DigitalRainOptions:
    """Validated rain configuration."""
    drops_range: Tuple[int, int] = DEFAULT_DROPS_RANGE
    speed_range: Tuple[int, int] = DEFAULT_SPEED_RANGE

    def __post_init__(self):
        object.__setattr__(self, 'drops_range', _validate_range("drops_range", self.drops_range))
        object.__setattr__(self, 'speed_range', _validate_range("speed_range", self.speed_range))

    @property
    def min_drops(self) -> int:
        return self.drops_range[0]

    @property
    def max_drops(self) -> int:
        return self.drops_range[1]

    @property
    def min_speed(self) -> int:
        return self.speed_range[0]

    @property
    def max_speed(self) -> int:
        return self.speed_range[1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'drops_range': list(self.drops_range),
            'speed_range': list(self.speed_range),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DigitalRainOptions':
        """Build options from a mapping such as a parsed JSON config."""
        if not isinstance(data, dict):
            raise OptionsError(f"Options must be a mapping, got {type(data).__name__}")
        unknown = set(data) - {'drops_range', 'speed_range'}
        if unknown:
            raise OptionsError(f"Unknown option(s): {', '.join(sorted(unknown))}")

        builder = DigitalRainOptionsBuilder()
        if 'drops_range' in data:
            builder.drops_range(data['drops_range'])
        if 'speed_range' in data:
            builder.speed_range(data['speed_range'])
        return builder.build()

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'DigitalRainOptions':
        """Load options from a JSON file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except json.JSONDecodeError as e:
            raise OptionsError(f"Invalid JSON in {path}: {e}") from e
        logger.debug(f"Loaded options from {path}")
        return cls.from_dict(data)


# Marks a builder field that was never set; None is a value to validate
_UNSET = object()


class DigitalRainOptionsBuilder:
    """Fluent builder for DigitalRainOptions."""

    def __init__(self):
        self._drops_range: Any = _UNSET
        self._speed_range: Any = _UNSET

    def drops_range(self, value: Tuple[int, int]) -> 'DigitalRainOptionsBuilder':
        self._drops_range = value
        return self

    def speed_range(self, value: Tuple[int, int]) -> 'DigitalRainOptionsBuilder':
        self._speed_range = value
        return self

    def build(self) -> DigitalRainOptions:
        """Validate and build the options.

        Raises:
            OptionsError: if a range is malformed, non-positive or inverted
        """
        kwargs = {}
        if self._drops_range is not _UNSET:
            kwargs['drops_range'] = self._drops_range
        if self._speed_range is not _UNSET:
            kwargs['speed_range'] = self._speed_range

        try:
            return DigitalRainOptions(**kwargs)
        except OptionsError as e:
            handle_error(
                e,
                "build_options",
                ErrorCategory.CONFIG,
                additional_context={k: repr(v) for k, v in kwargs.items()},
                reraise=True,
            )

"""
Character Pool - Candidate glyphs for falling rain drops.

Characters are grouped into named categories and flattened into a single
selection pool. Larger categories are proportionally more likely to be
picked, which gives the rain its katakana-heavy look.

Usage:
    from digital_rain.characters import default_pool, random_character

    rng = random.Random(42)
    char = random_character(rng)
"""

import functools
import random
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


# Some glyphs are wide unicode and break terminal column alignment
# (e.g. the middle dot "・" and kanji "日"), so they are left out.
DEFAULT_CATEGORIES: Dict[str, str] = {
    "digits": "012345789",
    "punctuation": ':."=*+-<>',
    "katakana": "ﾊﾐﾋｰｳｼﾅﾓﾆｻﾜﾂｵﾘｱﾎﾃﾏｹﾒｴｶｷﾑﾕﾗｾﾈｽﾀﾇﾍ",
    "other": "¦çﾘｸ",
}


@dataclass(frozen=True)
class CharacterPool:
    """
    Read-only set of candidate characters grouped by category.

    The flattened pool is the concatenation of every category, in
    insertion order, without deduplication.
    """
    categories: Tuple[Tuple[str, str], ...]
    characters: Tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.categories:
            raise ValueError("CharacterPool needs at least one category")
        flattened = tuple(ch for _, chars in self.categories for ch in chars)
        if not flattened:
            raise ValueError("CharacterPool categories are all empty")
        object.__setattr__(self, 'characters', flattened)

    @classmethod
    def from_mapping(cls, categories: Dict[str, str]) -> 'CharacterPool':
        """Build a pool from a ``{label: characters}`` mapping."""
        return cls(tuple(categories.items()))

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(label for label, _ in self.categories)

    def category(self, label: str) -> str:
        """Get the characters of a single category."""
        for name, chars in self.categories:
            if name == label:
                return chars
        raise KeyError(label)

    def __len__(self) -> int:
        return len(self.characters)

    def __contains__(self, char: str) -> bool:
        return char in self.characters

    def choice(self, rng: random.Random) -> str:
        """Pick one character uniformly from the flattened pool."""
        return rng.choice(self.characters)


@functools.lru_cache(maxsize=None)
def default_pool() -> CharacterPool:
    """Get the process-wide default pool, built on first use."""
    return CharacterPool.from_mapping(DEFAULT_CATEGORIES)


def random_character(rng: random.Random, pool: Optional[CharacterPool] = None) -> str:
    """Draw one character from ``pool`` (the default pool if omitted)."""
    if pool is None:
        pool = default_pool()
    return pool.choice(rng)

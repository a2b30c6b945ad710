"""
Tests for the Character Pool module.
"""

import dataclasses
import os
import random
import sys
from collections import Counter

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from digital_rain.characters import (
    CharacterPool,
    DEFAULT_CATEGORIES,
    default_pool,
    random_character,
)


class TestDefaultPool:
    def test_categories(self):
        pool = default_pool()
        assert pool.labels == ("digits", "punctuation", "katakana", "other")

    def test_digits_category(self):
        assert default_pool().category("digits") == "012345789"

    def test_flattened_size(self):
        expected = sum(len(chars) for chars in DEFAULT_CATEGORIES.values())
        assert len(default_pool()) == expected

    def test_built_once(self):
        assert default_pool() is default_pool()

    def test_immutable(self):
        pool = default_pool()
        with pytest.raises(dataclasses.FrozenInstanceError):
            pool.categories = ()

    def test_unknown_category(self):
        with pytest.raises(KeyError):
            default_pool().category("kanji")


class TestCharacterPool:
    def test_duplicates_are_kept(self):
        pool = CharacterPool.from_mapping({"a": "xy", "b": "x"})
        assert pool.characters == ("x", "y", "x")
        assert len(pool) == 3

    def test_contains(self):
        pool = CharacterPool.from_mapping({"a": "xy"})
        assert "x" in pool
        assert "z" not in pool

    def test_empty_pool_rejected(self):
        with pytest.raises(ValueError):
            CharacterPool(())

    def test_all_empty_categories_rejected(self):
        with pytest.raises(ValueError):
            CharacterPool.from_mapping({"a": "", "b": ""})

    def test_larger_categories_picked_more_often(self):
        pool = CharacterPool.from_mapping({"big": "abc", "small": "z"})
        rng = random.Random(7)
        counts = Counter(pool.choice(rng) for _ in range(20000))
        share = counts["z"] / 20000
        assert 0.22 < share < 0.28


class TestRandomCharacter:
    def test_default_pool_used(self):
        rng = random.Random(1)
        for _ in range(200):
            assert random_character(rng) in default_pool()

    def test_explicit_pool(self):
        pool = CharacterPool.from_mapping({"only": "q"})
        assert random_character(random.Random(1), pool) == "q"

    def test_seeded_sequence_is_repeatable(self):
        rng_a = random.Random(42)
        rng_b = random.Random(42)
        first = [random_character(rng_a) for _ in range(20)]
        second = [random_character(rng_b) for _ in range(20)]
        assert first == second

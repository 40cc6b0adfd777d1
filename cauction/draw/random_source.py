"""Substitutable random sources used by the drawing engine."""

from __future__ import annotations

import os
import random
from typing import MutableSequence, Optional, Protocol, TypeVar

from dotenv import load_dotenv

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything able to produce floats uniformly distributed in ``[0, 1)``."""

    def next(self) -> float: ...


class SystemRandomSource:
    """Random source backed by OS entropy."""

    def __init__(self) -> None:
        self._random = random.SystemRandom()

    def next(self) -> float:
        return self._random.random()


class SeededRandomSource:
    """Reproducible random source for replaying a draw from a known seed."""

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._random = random.Random(seed)

    def next(self) -> float:
        return self._random.random()


class FixedRandomSource:
    """Replay a fixed sequence of values, repeating the last one forever.

    ``FixedRandomSource(0.0)`` always selects the first pool position, which
    is what the deterministic draw scenarios in the test-suite rely on.
    """

    def __init__(self, *values: float) -> None:
        if not values:
            raise ValueError("FixedRandomSource requires at least one value")
        for value in values:
            if not 0.0 <= value < 1.0:
                raise ValueError("random values must lie in [0, 1)")
        self._values = list(values)
        self._index = 0
        self.calls = 0

    def next(self) -> float:
        self.calls += 1
        if self._index < len(self._values) - 1:
            value = self._values[self._index]
            self._index += 1
            return value
        return self._values[-1]


def pick_index(source: RandomSource, length: int) -> int:
    """Return ``floor(next() * length)`` clamped into ``range(length)``."""
    if length <= 0:
        raise ValueError("length must be positive")
    index = int(source.next() * length)
    # Guard against sources that round up to exactly 1.0.
    return min(max(index, 0), length - 1)


def shuffle_in_place(items: MutableSequence[T], source: RandomSource) -> None:
    """Fisher-Yates shuffle driven by ``source``."""
    for i in range(len(items) - 1, 0, -1):
        j = pick_index(source, i + 1)
        items[i], items[j] = items[j], items[i]


def random_source_from_env() -> RandomSource:
    """Return a seeded source when ``AUCTION_RANDOM_SEED`` is set.

    Falls back to :class:`SystemRandomSource` otherwise.
    """
    load_dotenv()
    raw_seed: Optional[str] = os.getenv("AUCTION_RANDOM_SEED")
    if raw_seed is None or not raw_seed.strip():
        return SystemRandomSource()
    try:
        seed = int(raw_seed.strip())
    except ValueError as exc:
        raise ValueError(
            f"AUCTION_RANDOM_SEED must be an integer, got {raw_seed!r}"
        ) from exc
    return SeededRandomSource(seed)


__all__ = [
    "FixedRandomSource",
    "RandomSource",
    "SeededRandomSource",
    "SystemRandomSource",
    "pick_index",
    "random_source_from_env",
    "shuffle_in_place",
]

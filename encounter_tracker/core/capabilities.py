"""
Injected capabilities for the encounter tracker.

Randomness and identifier generation are passed in explicitly instead of
reaching for process-wide generators, so that a fixed seed or sequence always
reproduces the same rolls and the same ids.
"""

import random
from collections.abc import Iterable
from typing import Protocol
from uuid import UUID, uuid4

from .constants import DEFAULT_DIE_SIDES


class RandomSource(Protocol):
    """Source of random integers."""

    def next(self, low: int, high: int) -> int:
        """Returns an integer in the inclusive range [low, high]."""
        ...

    def next_die_roll(self, sides: int = DEFAULT_DIE_SIDES) -> int:
        """Rolls a single die with the given number of sides."""
        return self.next(1, sides)


class SeededRandomSource(RandomSource):
    """Random source backed by a private `random.Random` instance."""

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)

    def next(self, low: int, high: int) -> int:
        return self._random.randint(low, high)


class SequenceRandomSource(RandomSource):
    """Replays a fixed sequence of values, cycling once exhausted.

    Values are returned as given; the roller clamps anything outside the
    requested range.
    """

    def __init__(self, values: Iterable[int]) -> None:
        self._values = list(values)
        if not self._values:
            raise ValueError("SequenceRandomSource needs at least one value")
        self._position = 0

    def next(self, low: int, high: int) -> int:
        value = self._values[self._position % len(self._values)]
        self._position += 1
        return value


class EverIncreasingRandomSource(RandomSource):
    """Yields low, low + 1, low + 2, ... wrapping at the top of the range."""

    def __init__(self) -> None:
        self._counter = 0

    def next(self, low: int, high: int) -> int:
        span = high - low + 1
        value = low + self._counter % span
        self._counter += 1
        return value


class IdGenerator(Protocol):
    """Source of process-unique identifiers."""

    def next_id(self) -> UUID:
        """Returns a fresh identifier."""
        ...


class UUIDGenerator(IdGenerator):
    """Random version 4 UUIDs."""

    def next_id(self) -> UUID:
        return uuid4()


class SequentialIdGenerator(IdGenerator):
    """Deterministic ids: UUID(int=start), UUID(int=start + 1), ..."""

    def __init__(self, start: int = 0) -> None:
        self._next = start

    def next_id(self) -> UUID:
        identifier = UUID(int=self._next)
        self._next += 1
        return identifier

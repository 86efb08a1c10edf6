"""
Bounded integer random source.

Every random draw in battle goes through a ``RandomSource`` so that a
seeded source replays a fight exactly.
"""

from __future__ import annotations

import math
import random
from typing import Any, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """
    Seedable integer RNG.

    Usage:
        rng = RandomSource(seed=42)
        damage_noise = rng.randint(-atk * 0.1, atk * 0.1)
        if rng.roll(crit_rate):
            ...
    """

    def __init__(self, seed: int | None = None):
        self._random = random.Random(seed)

    def randint(self, low: float, high: float) -> int:
        """
        Uniform integer in ``[ceil(low), floor(high)]``, both inclusive.

        Fractional bounds are allowed (noise is a percentage of a stat).
        An empty range collapses to its lower bound.
        """
        lo = math.ceil(low)
        hi = math.floor(high)
        if hi < lo:
            return lo
        return self._random.randint(lo, hi)

    def percent(self) -> int:
        """Uniform roll in 1..100."""
        return self.randint(1, 100)

    def roll(self, chance: float) -> bool:
        """True when a percentile roll lands at or under ``chance``."""
        return self.percent() <= chance

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return items[self.randint(0, len(items) - 1)]

    def get_state(self) -> Any:
        return self._random.getstate()

    def set_state(self, state: Any) -> None:
        self._random.setstate(state)

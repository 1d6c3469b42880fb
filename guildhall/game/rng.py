"""Random sources used by reward rolls and contract spawning."""

from __future__ import annotations

import random
from typing import Optional, Protocol, Sequence


class RandomSource(Protocol):
    def random(self) -> float:
        """Return a uniform float in ``[0.0, 1.0)``."""


class SeededRandom:
    """Thin wrapper around :class:`random.Random`.

    ``seed=None`` seeds from the OS like the module level generator does.
    """

    def __init__(self, seed: Optional[int | str] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()


class ScriptedRandom:
    """Replay a fixed sequence of draws. Used by tests and replays."""

    def __init__(self, values: Sequence[float], *, repeat: bool = False):
        if not values:
            raise ValueError("values must not be empty")
        self.values = list(values)
        self.repeat = repeat
        self.calls = 0

    def random(self) -> float:
        index = self.calls
        if index >= len(self.values):
            if not self.repeat:
                raise IndexError(f"scripted random exhausted after {len(self.values)} draws")
            index %= len(self.values)
        self.calls += 1
        return self.values[index]


__all__ = ["RandomSource", "SeededRandom", "ScriptedRandom"]

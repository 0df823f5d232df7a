from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional


@dataclass
class RNG:
    """
    Injectable RNG wrapper around random.Random.

    Every random decision in the engine (coin flips, damage variance, AI
    rolls, encounter and loot draws) goes through an instance of this class,
    or any object exposing ``random``, ``randint`` and ``choice``, so tests can
    substitute scripted sources instead of relying on global state.
    """

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def random(self) -> float:
        """Return the next random float in the range [0.0, 1.0)."""
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        """Return a random float N such that a <= N < b."""
        return a + self._rng.random() * (b - a)

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        return self._rng.randint(a, b)

    def choice(self, seq):
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self._rng.randrange(len(seq))]

    def chance(self, probability: float) -> bool:
        """Bernoulli trial: True with the given probability."""
        return self._rng.random() < probability

    def state(self):
        """Return the internal PRNG state for debugging."""
        return self._rng.getstate()

    def set_state(self, state) -> None:
        """Restore the internal PRNG state."""
        self._rng.setstate(state)


def weighted_choice(rng, weights: Mapping[Any, float]) -> Any:
    """
    Select a key from a mapping of non-negative weights using ``rng.random()``.
    Zero-weight keys are never selected. If all weights are zero, raises ValueError.
    """
    if not weights:
        raise ValueError("weighted_choice requires a non-empty weights mapping")

    keys: List[Any] = []
    cumulative: List[float] = []
    total = 0.0
    for k, w in weights.items():
        if w < 0:
            raise ValueError(f"Weight for {k!r} must be non-negative, got {w}")
        if w == 0:
            continue
        total += w
        keys.append(k)
        cumulative.append(total)

    if total == 0:
        raise ValueError("All weights are zero; cannot make a weighted choice")

    r = rng.random() * total
    for i, c in enumerate(cumulative):
        if r < c:
            return keys[i]
    return keys[-1]

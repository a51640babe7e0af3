"""
Seeded random number generation for Desire Paths.

The simulator lays out plants and walks players along noisy routes;
seeding keeps both reproducible between runs and in tests.
"""

import random
from typing import Optional


class SeededRNG:
    """
    Named random stream with its own ``random.Random`` state.

    Forked children draw their seed from the parent, so one top-level
    seed fixes the whole simulation.

    Example:
        >>> a = SeededRNG(seed=42, name="walker-1")
        >>> b = SeededRNG(seed=42, name="walker-2")
        >>> a.uniform(0, 1) == b.uniform(0, 1)
        True
    """

    def __init__(self, seed: Optional[int] = None, name: str = "default"):
        self.name = name
        self.seed = seed if seed is not None else random.randrange(2**32)
        self._random = random.Random(self.seed)
        self.calls = 0

    def uniform(self, a: float, b: float) -> float:
        self.calls += 1
        return self._random.uniform(a, b)

    def probability(self, p: float) -> bool:
        """True with probability ``p``."""
        self.calls += 1
        return self._random.random() < p

    def fork(self, name: str) -> 'SeededRNG':
        self.calls += 1
        return SeededRNG(seed=self._random.randrange(2**32), name=name)

    def __repr__(self) -> str:
        return f"SeededRNG(name={self.name!r}, seed={self.seed}, calls={self.calls})"

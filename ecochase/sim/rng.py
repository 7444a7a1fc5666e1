# ecochase/sim/rng.py
import random
from typing import Optional


class RNG:
    """Seedable random source passed explicitly to placement and prey moves."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def randrange(self, a: int, b: int) -> int:
        return self._rng.randrange(a, b)

    def choice(self, seq):
        return self._rng.choice(seq)

"""Seedable random source shared by the candidate generators of one optimizer."""

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """Single entry point for every random draw made during a search.

    Optimizers own one instance each, so a fixed seed reproduces the whole
    search trace.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        return self._random.random()

    def randint(self, low: int, high: int) -> int:
        """Return an integer in ``[low, high]``, both ends included."""
        return self._random.randint(low, high)

    def choice(self, items: Sequence[T]) -> T:
        return self._random.choice(items)

    def sample(self, items: Sequence[T], k: int) -> List[T]:
        """Sample ``k`` distinct items; ``k`` is clipped to the population size."""
        return self._random.sample(list(items), min(k, len(items)))

    def shuffled(self, items: Sequence[T]) -> List[T]:
        result = list(items)
        self._random.shuffle(result)
        return result

    def shuffle(self, items: List[T]) -> None:
        self._random.shuffle(items)

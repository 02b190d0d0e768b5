"""
Processing-order randomization.

Shuffling the feature list before a pass changes which feature seeds
each cluster wherever search rectangles overlap, and with it the order
values. It never changes which features are clusterable.
"""

import random
from enum import Enum
from typing import Optional, TypeVar


T = TypeVar("T")


class ShuffleMode(Enum):
    """How the permutation is drawn."""
    # Fisher-Yates: swap index drawn from the shrinking range [i, n)
    UNIFORM = "uniform"
    # Swap index drawn from the full range [0, n) at every step (biased)
    LEGACY = "legacy"


class OrderShuffler:
    """
    In-place permutation of a sequence.

    Each shuffler owns its random generator, so two engines never share
    random state. The generator carries over between calls, so successive
    shuffles differ. With a seed, a fresh shuffler (or one just reset())
    replays the same sequence of permutations for the same input lengths.
    """

    def __init__(self, seed: Optional[int] = None, mode: ShuffleMode = ShuffleMode.UNIFORM):
        self.seed = seed
        self.mode = mode
        self._rng = random.Random(seed)

    def reset(self) -> None:
        """Restart the generator from the configured seed."""
        self._rng = random.Random(self.seed)

    def shuffle(self, items: list[T]) -> list[T]:
        """
        Permute items in place.

        Args:
            items: List to permute

        Returns:
            The same list, for chaining
        """
        n = len(items)
        if self.mode == ShuffleMode.LEGACY:
            for i in range(n):
                j = self._rng.randrange(n)
                items[i], items[j] = items[j], items[i]
        else:
            for i in range(n - 1):
                j = self._rng.randrange(i, n)
                items[i], items[j] = items[j], items[i]
        return items

import random
from typing import List, Sequence, TypeVar

T = TypeVar("T")


def fisher_yates_shuffle(items: Sequence[T], rng: random.Random) -> List[T]:
    """
    Return a uniformly shuffled copy of ``items``.

    Explicit Fisher-Yates so that a given seed always produces the same
    permutation, independent of the input container.
    """
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled

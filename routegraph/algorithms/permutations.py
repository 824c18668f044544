"""Lazy permutation generation for brute-force stop ordering.

Orderings are produced one at a time with the iterative form of Heap's
algorithm: each ordering differs from the previous one by a single swap, and
only O(n) working memory is used regardless of n!.
"""

from __future__ import annotations

from math import factorial
from typing import Generic, Iterable, Iterator, List, Tuple, TypeVar

T = TypeVar("T")


def iter_permutations(items: Iterable[T]) -> Iterator[Tuple[T, ...]]:
    """Yield every ordering of ``items`` as a tuple.

    The first ordering is ``items`` in its given order. For an empty input a
    single empty tuple is yielded. Enumeration order is deterministic for a
    fixed input order.

    Args:
        items: Finite collection of distinct elements.

    Yields:
        Tuples holding one ordering each.
    """
    pool: List[T] = list(items)
    n = len(pool)
    yield tuple(pool)

    counters = [0] * n
    i = 1
    while i < n:
        if counters[i] < i:
            if i % 2 == 0:
                pool[0], pool[i] = pool[i], pool[0]
            else:
                j = counters[i]
                pool[j], pool[i] = pool[i], pool[j]
            yield tuple(pool)
            counters[i] += 1
            i = 1
        else:
            counters[i] = 0
            i += 1


class Permutations(Generic[T]):
    """Restartable, sized view over all orderings of a sequence.

    Each call to ``iter()`` starts a fresh enumeration; ``len()`` is n!.
    """

    def __init__(self, items: Iterable[T]) -> None:
        self._items: Tuple[T, ...] = tuple(items)

    def __iter__(self) -> Iterator[Tuple[T, ...]]:
        return iter_permutations(self._items)

    def __len__(self) -> int:
        return factorial(len(self._items))

    def __repr__(self) -> str:
        return f"Permutations({list(self._items)!r})"

    @property
    def items(self) -> Tuple[T, ...]:
        """The elements being permuted, in input order."""
        return self._items

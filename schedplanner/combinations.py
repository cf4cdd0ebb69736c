"""
Combination generator.

Enumerates every size-k subset of a candidate pool (one course, one event
type). Subsets are built index by index in lexicographic order of the pool,
and a prefix is abandoned as soon as its newest event clashes with an event
already in it, so no superset of a clashing pair is ever generated.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from schedplanner.conflicts import conflicts_with_any
from schedplanner.model import CourseEvent


def conflict_free_combinations(pool: Sequence[CourseEvent], k: int) -> Iterator[tuple[CourseEvent, ...]]:
    """
    Lazily yield every k-element subset of pool whose events are pairwise conflict-free.

    - k == 0 yields exactly one empty tuple
    - len(pool) < k yields nothing
    - the order of events inside a subset follows the pool order
    """
    if k < 0:
        raise ValueError(f"Combination size must not be negative, got {k}")
    n = len(pool)
    if n < k:
        return

    chosen: list[CourseEvent] = []

    def extend(start: int) -> Iterator[tuple[CourseEvent, ...]]:
        if len(chosen) == k:
            yield tuple(chosen)
            return
        # leave room for the remaining picks
        last = n - (k - len(chosen))
        for i in range(start, last + 1):
            candidate = pool[i]
            if conflicts_with_any(candidate, chosen):
                continue
            chosen.append(candidate)
            yield from extend(i + 1)
            chosen.pop()

    yield from extend(0)


def count_combinations(pool: Sequence[CourseEvent], k: int) -> int:
    """
    Number of conflict-free k-subsets of pool (walks the generator).
    """
    return sum(1 for _ in conflict_free_combinations(pool, k))

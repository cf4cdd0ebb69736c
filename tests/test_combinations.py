import unittest
from math import comb

from schedplanner.combinations import conflict_free_combinations, count_combinations
from schedplanner.model import CourseEvent, EventType


def _pool(n):
    # n practicals on different days/times, none of them clashing
    return [
        CourseEvent(
            event_id=f"p{i}",
            course_id="MA2",
            type=EventType.PRACTICAL,
            day=i % 5,
            start=f"{8 + i // 5:02d}:00",
            end=f"{8 + i // 5:02d}:50",
        )
        for i in range(n)
    ]


class TestCombinations(unittest.TestCase):
    def test_all_k_subsets_for_arbitrary_k(self) -> None:
        pool = _pool(7)
        for k in range(0, 8):
            subsets = list(conflict_free_combinations(pool, k))
            self.assertEqual(len(subsets), comb(7, k), k)
            # no repeats, no duplicate elements inside a subset
            keys = {frozenset(e.event_id for e in s) for s in subsets}
            self.assertEqual(len(keys), len(subsets))
            for s in subsets:
                self.assertEqual(len({e.event_id for e in s}), k)

    def test_lexicographic_pool_order(self) -> None:
        pool = _pool(4)
        ids = [tuple(e.event_id for e in s) for s in conflict_free_combinations(pool, 2)]
        self.assertEqual(ids, [("p0", "p1"), ("p0", "p2"), ("p0", "p3"), ("p1", "p2"), ("p1", "p3"), ("p2", "p3")])

    def test_k_zero_yields_one_empty_subset(self) -> None:
        self.assertEqual(list(conflict_free_combinations([], 0)), [()])

    def test_pool_smaller_than_k_is_empty(self) -> None:
        self.assertEqual(list(conflict_free_combinations(_pool(1), 2)), [])

    def test_negative_k_rejected(self) -> None:
        with self.assertRaises(ValueError):
            list(conflict_free_combinations(_pool(2), -1))

    def test_internally_conflicting_subsets_are_dropped(self) -> None:
        pool = _pool(3)
        # same hour as p0 -> every subset holding both p0 and clash is dropped
        clash = CourseEvent(
            event_id="clash", course_id="MA2", type=EventType.PRACTICAL, day=0, start="08:30", end="09:30"
        )
        pool.append(clash)
        subsets = [frozenset(e.event_id for e in s) for s in conflict_free_combinations(pool, 2)]
        self.assertNotIn(frozenset({"p0", "clash"}), subsets)
        self.assertEqual(len(subsets), comb(4, 2) - 1)
        self.assertEqual(count_combinations(pool, 3), comb(4, 3) - 2)

    def test_lazy(self) -> None:
        gen = conflict_free_combinations(_pool(20), 10)
        first = next(gen)
        self.assertEqual([e.event_id for e in first], [f"p{i}" for i in range(10)])


if __name__ == "__main__":
    unittest.main()

"""
Unit tests for conflict detection.

Definition used here:
- A conflict exists if two events overlap in time on the same weekday
  and their week parity lets them meet.
- Touching endpoints (end == start) is NOT a conflict.
- WEEKLY collides with any recurrence, ODD vs EVEN never collides.
"""

import itertools
import unittest

from schedplanner.conflicts import events_conflict, find_conflicts
from schedplanner.model import CourseEvent, EventType, Recurrence


def _ev(event_id, day=0, start="10:00", end="11:00", recurrence=Recurrence.WEEKLY):
    return CourseEvent(
        event_id=event_id,
        course_id="C",
        type=EventType.LECTURE,
        day=day,
        start=start,
        end=end,
        recurrence=recurrence,
    )


class TestEventsConflict(unittest.TestCase):
    def test_overlap_same_day(self) -> None:
        self.assertTrue(events_conflict(_ev("a"), _ev("b", start="10:30", end="12:00")))

    def test_no_overlap_touching_end(self) -> None:
        # end == start is allowed (no overlap)
        self.assertFalse(events_conflict(_ev("a"), _ev("b", start="11:00", end="12:00")))

    def test_different_day_no_conflict(self) -> None:
        self.assertFalse(events_conflict(_ev("a", day=0), _ev("b", day=1)))

    def test_weekly_vs_odd_conflicts(self) -> None:
        weekly = _ev("a", start="10:00", end="11:00")
        odd = _ev("b", start="10:30", end="11:30", recurrence=Recurrence.ODD_WEEK)
        self.assertTrue(events_conflict(weekly, odd))

    def test_odd_vs_even_same_slot_no_conflict(self) -> None:
        odd = _ev("a", recurrence=Recurrence.ODD_WEEK)
        even = _ev("b", recurrence=Recurrence.EVEN_WEEK)
        self.assertFalse(events_conflict(odd, even))

    def test_same_parity_conflicts(self) -> None:
        self.assertTrue(
            events_conflict(
                _ev("a", recurrence=Recurrence.ODD_WEEK),
                _ev("b", start="10:45", end="12:00", recurrence=Recurrence.ODD_WEEK),
            )
        )
        self.assertTrue(
            events_conflict(_ev("a", recurrence=Recurrence.EVEN_WEEK), _ev("b", recurrence=Recurrence.EVEN_WEEK))
        )

    def test_event_never_conflicts_with_itself(self) -> None:
        ev = _ev("a")
        self.assertFalse(events_conflict(ev, ev))

    def test_symmetry(self) -> None:
        events = [
            _ev("w1"),
            _ev("w2", start="10:30", end="11:30"),
            _ev("o1", recurrence=Recurrence.ODD_WEEK),
            _ev("o2", start="09:00", end="10:15", recurrence=Recurrence.ODD_WEEK),
            _ev("e1", start="10:59", end="12:00", recurrence=Recurrence.EVEN_WEEK),
            _ev("x", day=3),
        ]
        for a, b in itertools.product(events, repeat=2):
            self.assertEqual(events_conflict(a, b), events_conflict(b, a), (a.event_id, b.event_id))


class TestFindConflicts(unittest.TestCase):
    def test_each_pair_reported_once(self) -> None:
        events = [_ev("a"), _ev("b", start="10:30", end="12:00"), _ev("c", start="11:30", end="13:00")]
        pairs = [(x.event_id, y.event_id) for x, y in find_conflicts(events)]
        self.assertEqual(pairs, [("a", "b"), ("b", "c")])

    def test_no_conflicts(self) -> None:
        self.assertEqual(find_conflicts([_ev("a"), _ev("b", day=2)]), [])


if __name__ == "__main__":
    unittest.main()

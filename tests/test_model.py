"""
Unit tests for the data model: construction-time validation and the
exact-count rule of Course.conditions_met().
"""

import unittest

from schedplanner.model import (
    Course,
    CourseEvent,
    EventType,
    Recurrence,
    ValidationError,
    parse_day,
    time_to_minutes,
)


def _ev(event_id, etype=EventType.LECTURE, course_id="MA2", day=0, start="08:00", end="09:30"):
    return CourseEvent(event_id=event_id, course_id=course_id, type=etype, day=day, start=start, end=end)


class TestTimeParsing(unittest.TestCase):
    def test_valid(self) -> None:
        self.assertEqual(time_to_minutes("08:15"), 495)
        self.assertEqual(time_to_minutes(" 23:59 "), 1439)

    def test_midnight_end(self) -> None:
        self.assertEqual(time_to_minutes("24:00"), 1440)
        ev = _ev("e1", start="22:30", end="24:00")
        self.assertEqual(ev.end_minutes, 1440)
        with self.assertRaises(ValidationError):
            _ev("e2", start="24:00", end="24:00")

    def test_invalid(self) -> None:
        for bad in ["", None, "8", "1015", "24:01", "25:00", "10:60", "aa:bb"]:
            with self.assertRaises(ValidationError):
                time_to_minutes(bad)

    def test_day_aliases(self) -> None:
        self.assertEqual(parse_day(0), 0)
        self.assertEqual(parse_day("fri"), 4)
        self.assertEqual(parse_day("PO"), 0)
        self.assertEqual(parse_day("2"), 2)
        with self.assertRaises(ValidationError):
            parse_day(5)
        with self.assertRaises(ValidationError):
            parse_day("sat")


class TestCourseEvent(unittest.TestCase):
    def test_normalizes_labels(self) -> None:
        ev = CourseEvent(
            event_id="e1",
            course_id="MA2",
            type="CVIČENÍ",
            day="ut",
            start="10:00",
            end="11:30",
            recurrence="LICHÝ TÝDEN",
        )
        self.assertIs(ev.type, EventType.PRACTICAL)
        self.assertIs(ev.recurrence, Recurrence.ODD_WEEK)
        self.assertEqual(ev.day, 1)
        self.assertEqual((ev.start_minutes, ev.end_minutes), (600, 690))

    def test_start_must_precede_end(self) -> None:
        with self.assertRaises(ValidationError):
            _ev("e1", start="10:00", end="10:00")
        with self.assertRaises(ValidationError):
            _ev("e1", start="11:00", end="10:00")

    def test_missing_time(self) -> None:
        with self.assertRaises(ValidationError):
            CourseEvent(event_id="e1", course_id="MA2", type="lecture", day=0, start=None, end="10:00")

    def test_immutable(self) -> None:
        ev = _ev("e1")
        with self.assertRaises(AttributeError):
            ev.day = 3  # type: ignore[misc]

    def test_capacity(self) -> None:
        ev = CourseEvent(
            event_id="e1", course_id="MA2", type="lecture", day=0, start="08:00", end="09:00",
            current_capacity=20, max_capacity=20,
        )
        self.assertFalse(ev.has_capacity)


class TestCourse(unittest.TestCase):
    def test_needed_enrollments_validation(self) -> None:
        for bad in [{"lecture": -1}, {"lecture": 1.5}, {"lecture": "2"}, {"lecture": True}, {"exam": 1}]:
            with self.assertRaises(ValidationError):
                Course(course_id="MA2", name="Math", needed_enrollments=bad)

    def test_zero_count_for_missing_type_is_fine(self) -> None:
        course = Course(course_id="MA2", name="Math", needed_enrollments={"seminar": 0})
        self.assertEqual(course.needed_enrollments, {EventType.SEMINAR: 0})
        self.assertTrue(course.conditions_met([]))

    def test_event_of_other_course_rejected(self) -> None:
        course = Course(course_id="MA2", name="Math")
        with self.assertRaises(ValidationError):
            course.add_event(_ev("e1", course_id="PPA1"))

    def test_duplicate_event_id_ignored(self) -> None:
        course = Course(course_id="MA2", name="Math", events=[_ev("e1"), _ev("e1", day=3)])
        self.assertEqual(len(course.events), 1)
        self.assertEqual(course.events[0].day, 0)

    def test_conditions_met_requires_exact_counts(self) -> None:
        course = Course(course_id="MA2", name="Math", needed_enrollments={"lecture": 1, "practical": 2})
        lec = _ev("l1")
        p1 = _ev("p1", EventType.PRACTICAL, day=1)
        p2 = _ev("p2", EventType.PRACTICAL, day=2)
        p3 = _ev("p3", EventType.PRACTICAL, day=3)
        sem = _ev("s1", EventType.SEMINAR, day=4)

        self.assertTrue(course.conditions_met([lec, p1, p2]))
        # unconstrained type does not matter
        self.assertTrue(course.conditions_met([lec, p1, p2, sem]))
        self.assertFalse(course.conditions_met([lec, p1]))
        self.assertFalse(course.conditions_met([lec, p1, p2, p3]))
        # events of another course are not counted
        self.assertFalse(course.conditions_met([lec, p1, _ev("x", EventType.PRACTICAL, course_id="PPA1")]))

    def test_get_events_filters(self) -> None:
        course = Course(
            course_id="MA2",
            name="Math",
            events=[
                CourseEvent("l1", "MA2", "lecture", 0, "08:00", "09:00", room="UC101", instructor="Novak"),
                CourseEvent("p1", "MA2", "practical", 1, "08:00", "09:00", room="UC102", instructor="Novak"),
                CourseEvent("p2", "MA2", "practical", 2, "08:00", "09:00", room="UC101", instructor="Svoboda"),
            ],
        )
        self.assertEqual([e.event_id for e in course.get_events(type="practical")], ["p1", "p2"])
        self.assertEqual([e.event_id for e in course.get_events(room="UC101")], ["l1", "p2"])
        self.assertEqual([e.event_id for e in course.get_events(type=EventType.PRACTICAL, instructor="Novak")], ["p1"])

    def test_short_code(self) -> None:
        course = Course(course_id="1", name="Math", department_code="KMA", course_code="MA2")
        self.assertEqual(course.short_code, "KMA/MA2")

    def test_validate_catches_later_mutation(self) -> None:
        course = Course(course_id="MA2", name="Math", needed_enrollments={"lecture": 1})
        course.needed_enrollments[EventType.PRACTICAL] = -2
        with self.assertRaises(ValidationError):
            course.validate()


if __name__ == "__main__":
    unittest.main()

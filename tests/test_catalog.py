import json
import tempfile
import unittest
from pathlib import Path

from schedplanner.catalog import event_from_dict, load_catalog, parse_catalog
from schedplanner.model import EventType, Recurrence, ValidationError


NESTED = {
    "courses": [
        {
            "course_id": "KMA-MA2",
            "name": "Mathematics 2",
            "department_code": "KMA",
            "course_code": "MA2",
            "credits": 6,
            "needed_enrollments": {"lecture": 1, "practical": 1},
            "events": [
                {"event_id": "MA2-L1", "type": "lecture", "day": "mon", "start": "10:00", "end": "11:30"},
                {
                    "event_id": "MA2-P1",
                    "type": "practical",
                    "day": 2,
                    "start": "12:00",
                    "end": "13:30",
                    "recurrence": "odd",
                    "room": "UC101",
                    "instructor": {"name": "Dr. Novak"},
                },
            ],
        }
    ]
}


_LECTURE = {"event_id": "L1", "type": "lecture", "day": 0, "start": "08:00", "end": "09:00"}


class TestParseCatalog(unittest.TestCase):
    def test_nested_layout(self) -> None:
        courses = parse_catalog(NESTED)
        self.assertEqual(len(courses), 1)
        course = courses[0]
        self.assertEqual(course.short_code, "KMA/MA2")
        self.assertEqual(course.needed_enrollments, {EventType.LECTURE: 1, EventType.PRACTICAL: 1})
        self.assertEqual([e.event_id for e in course.events], ["MA2-L1", "MA2-P1"])
        practical = course.events[1]
        self.assertEqual(practical.course_id, "KMA-MA2")
        self.assertIs(practical.recurrence, Recurrence.ODD_WEEK)
        self.assertEqual(practical.instructor, "Dr. Novak")

    def test_side_by_side_layout_and_camel_case(self) -> None:
        data = {
            "courses": [
                {"courseId": "A", "name": "A", "neededEnrollments": {"PŘEDNÁŠKA": 1}},
                {"courseId": "B", "name": "B"},
            ],
            "events": [
                {"eventId": "a1", "courseId": "A", "type": "PŘEDNÁŠKA", "day": "PO",
                 "startTime": "08:00", "endTime": "09:00", "recurrence": "KAŽDÝ TÝDEN"},
            ],
        }
        a, b = parse_catalog(data)
        self.assertEqual([e.event_id for e in a.events], ["a1"])
        self.assertIs(a.events[0].type, EventType.LECTURE)
        self.assertEqual(b.events, [])

    def test_bare_list(self) -> None:
        courses = parse_catalog(NESTED["courses"])
        self.assertEqual(courses[0].course_id, "KMA-MA2")

    def test_malformed_records_fail_fast(self) -> None:
        bad_catalogs = [
            {"courses": [{"name": "no id"}]},
            {"courses": [{"course_id": "A", "needed_enrollments": {"lecture": -1}}]},
            {"courses": [{"course_id": "A", "needed_enrollments": [1]}]},
            {"courses": [{"course_id": "A", "events": [{"event_id": "x", "type": "lecture", "day": 0, "start": "10:00"}]}]},
            {"courses": [{"course_id": "A"}, {"course_id": "A"}]},
            {"courses": [{"course_id": "A"}], "events": [{"event_id": "x", "course_id": "Z"}]},
            {"courses": [{"course_id": "A", "events": [_LECTURE, _LECTURE]}]},
            "not a catalog",
        ]
        for data in bad_catalogs:
            with self.assertRaises(ValidationError, msg=repr(data)):
                parse_catalog(data)

    def test_event_id_shared_by_two_courses(self) -> None:
        data = {
            "courses": [
                {"course_id": "A", "needed_enrollments": {"lecture": 1}, "events": [_LECTURE]},
                {"course_id": "B", "needed_enrollments": {"lecture": 1}},
            ],
            "events": [
                {"event_id": "L1", "course_id": "B", "type": "lecture", "day": 2, "start": "12:00", "end": "13:00"},
            ],
        }
        with self.assertRaises(ValidationError) as ctx:
            parse_catalog(data)
        self.assertIn("L1", str(ctx.exception))

    def test_midnight_end_time(self) -> None:
        ev = event_from_dict(
            {"event_id": "x", "type": "lecture", "day": 0, "start": "22:00", "end": "24:00"}, course_id="A"
        )
        self.assertEqual(ev.end_minutes, 1440)

    def test_event_capacity_must_be_integer(self) -> None:
        with self.assertRaises(ValidationError):
            event_from_dict(
                {"event_id": "x", "type": "lecture", "day": 0, "start": "08:00", "end": "09:00", "maxCapacity": "lots"},
                course_id="A",
            )


class TestLoadCatalog(unittest.TestCase):
    def test_load_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "catalog.json"
            p.write_text(json.dumps(NESTED, ensure_ascii=False), encoding="utf-8")
            courses = load_catalog(p)
            self.assertEqual(courses[0].name, "Mathematics 2")

    def test_missing_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(FileNotFoundError):
                load_catalog(Path(d) / "missing.json")


if __name__ == "__main__":
    unittest.main()

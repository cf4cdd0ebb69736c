"""
Catalog loading (JSON -> Course / CourseEvent objects).

The catalog is an already-fetched export of the university system. Two
layouts are accepted:

- events nested inside their course:
    {"courses": [{"course_id": ..., "events": [...]}, ...]}
- courses and events side by side, events pointing to their course:
    {"courses": [...], "events": [{"course_id": ..., ...}, ...]}

A bare list is read as the list of courses.

Keys may be snake_case or the camelCase spelling of the catalog export
(startTime, neededEnrollments, ...).

Important rules:
- malformed records raise ValidationError; nothing is silently skipped,
  because a dropped event would produce a wrong schedule later.
- event ids are unique across the whole catalog.
- times are HH:MM; '24:00' is allowed as an end time.
"""

from __future__ import annotations

import json
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List

from schedplanner.model import Course, CourseEvent, ValidationError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get(record: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """
    Return the first present key out of several spellings.
    """
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{what} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{what} must be an integer, got {value!r}") from None


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def event_from_dict(record: Dict[str, Any], course_id: str | None = None) -> CourseEvent:
    """
    Build one CourseEvent from a catalog record.
    course_id overrides the record's own reference (used for nested events).
    """
    if not isinstance(record, dict):
        raise ValidationError(f"Event record must be an object, got {record!r}")

    event_id = str(_get(record, "event_id", "eventId", "id", "stagId", default="")).strip()
    owner = course_id or str(_get(record, "course_id", "courseId", default="")).strip()
    instructor = _get(record, "instructor")
    if isinstance(instructor, dict):
        instructor = instructor.get("name")

    return CourseEvent(
        event_id=event_id,
        course_id=owner,
        type=_get(record, "type", "kind"),
        day=_get(record, "day"),
        start=_get(record, "start", "startTime"),
        end=_get(record, "end", "endTime"),
        recurrence=_get(record, "recurrence", default="weekly"),
        room=_get(record, "room"),
        instructor=str(instructor).strip() if instructor else None,
        current_capacity=_as_int(_get(record, "current_capacity", "currentCapacity", default=0), "current_capacity"),
        max_capacity=_as_int(_get(record, "max_capacity", "maxCapacity", default=0), "max_capacity"),
        year=str(_get(record, "year", default="")),
        semester=str(_get(record, "semester", default="")),
        note=_get(record, "note"),
    )


def course_from_dict(record: Dict[str, Any], extra_events: List[Dict[str, Any]] | None = None) -> Course:
    """
    Build one Course (with its events) from a catalog record.
    """
    if not isinstance(record, dict):
        raise ValidationError(f"Course record must be an object, got {record!r}")

    course_id = str(_get(record, "course_id", "courseId", "id", default="")).strip()
    if not course_id:
        raise ValidationError(f"Course record without course_id: {record!r}")

    needed = _get(record, "needed_enrollments", "neededEnrollments", default={})
    if not isinstance(needed, dict):
        raise ValidationError(f"{course_id}: needed_enrollments must be an object, got {needed!r}")

    raw_events = list(_get(record, "events", default=[])) + list(extra_events or [])
    events = [event_from_dict(ev, course_id=course_id) for ev in raw_events]
    ids = [e.event_id for e in events]
    if len(set(ids)) != len(ids):
        dupes = ", ".join(sorted({i for i in ids if ids.count(i) > 1}))
        raise ValidationError(f"{course_id}: duplicate event id(s): {dupes}")

    return Course(
        course_id=course_id,
        name=str(_get(record, "name", "title", default="")).strip(),
        department_code=str(_get(record, "department_code", "departmentCode", default="")).strip(),
        course_code=str(_get(record, "course_code", "courseCode", default="")).strip(),
        credits=_as_int(_get(record, "credits", default=0), f"{course_id}: credits"),
        needed_enrollments=needed,
        events=events,
        stag_id=_get(record, "stag_id", "stagId"),
        year=str(_get(record, "year", default="")),
        semester=str(_get(record, "semester", default="")),
    )


def parse_catalog(data: Any) -> List[Course]:
    """
    Turn decoded catalog JSON into Course objects, keeping the catalog order.
    """
    if isinstance(data, list):
        course_records, event_records = data, []
    elif isinstance(data, dict):
        course_records = data.get("courses", [])
        event_records = data.get("events", [])
    else:
        raise ValidationError("Catalog must be a list of courses or an object with 'courses'")

    if not isinstance(course_records, list) or not isinstance(event_records, list):
        raise ValidationError("Catalog 'courses' and 'events' must be lists")

    # side-by-side layout: group top-level events by their course
    events_by_course_id: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for ev in event_records:
        if not isinstance(ev, dict):
            raise ValidationError(f"Event record must be an object, got {ev!r}")
        cid = str(_get(ev, "course_id", "courseId", default="")).strip()
        if not cid:
            raise ValidationError(f"Event record without course_id: {ev!r}")
        events_by_course_id[cid].append(ev)

    courses: List[Course] = []
    seen: set[str] = set()
    event_owner: Dict[str, str] = {}
    for record in course_records:
        cid = str(_get(record, "course_id", "courseId", "id", default="")).strip() if isinstance(record, dict) else ""
        course = course_from_dict(record, events_by_course_id.pop(cid, []))
        if course.course_id in seen:
            raise ValidationError(f"Duplicate course id in catalog: {course.course_id!r}")
        seen.add(course.course_id)
        for event in course.events:
            owner = event_owner.setdefault(event.event_id, course.course_id)
            if owner != course.course_id:
                raise ValidationError(
                    f"Event id {event.event_id!r} is used by both {owner!r} and {course.course_id!r}"
                )
        courses.append(course)

    if events_by_course_id:
        orphans = ", ".join(sorted(events_by_course_id))
        raise ValidationError(f"Events reference unknown course(s): {orphans}")

    return courses


def load_catalog(path: str | Path) -> List[Course]:
    """
    Read a catalog JSON file. File and JSON errors propagate to the caller.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_catalog(data)

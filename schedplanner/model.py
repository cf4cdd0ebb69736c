"""
Central data model definitions used across the project.

This module defines the canonical structure of Course and CourseEvent objects so that:
- all modules share the same field names
- invalid catalog data is rejected once, at construction time
- the search code can rely on parsed minute values instead of re-parsing strings
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from schedplanner.config import DAY_ALIASES, DAY_NAMES, EVENT_TYPE_ALIASES, RECURRENCE_ALIASES


class ValidationError(ValueError):
    """Raised when catalog or preference data is malformed."""


class EventType(str, Enum):
    """
    Kind of teaching event.

    The declaration order is the order in which the scheduler walks the
    required types of a course.
    """

    LECTURE = "lecture"
    PRACTICAL = "practical"
    SEMINAR = "seminar"

    @classmethod
    def parse(cls, value: object) -> "EventType":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        if key in EVENT_TYPE_ALIASES:
            return cls(EVENT_TYPE_ALIASES[key])
        raise ValidationError(f"Unknown event type: {value!r}")


class Recurrence(str, Enum):
    WEEKLY = "weekly"
    ODD_WEEK = "odd"
    EVEN_WEEK = "even"

    @classmethod
    def parse(cls, value: object) -> "Recurrence":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        if key in RECURRENCE_ALIASES:
            return cls(RECURRENCE_ALIASES[key])
        raise ValidationError(f"Unknown recurrence: {value!r}")


def time_to_minutes(hhmm: object) -> int:
    """
    Convert 'HH:MM' to minutes since midnight.
    '24:00' is accepted as the end of the day (1440).
    Raises ValidationError for missing or invalid values.
    """
    if not isinstance(hhmm, str) or not hhmm.strip():
        raise ValidationError(f"Missing time value: {hhmm!r}")
    parts = hhmm.strip().split(":")
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise ValidationError(f"Invalid time format: {hhmm!r}")
    h = int(parts[0])
    m = int(parts[1])
    if (h, m) == (24, 0):
        return 1440
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValidationError(f"Invalid time value: {hhmm!r}")
    return h * 60 + m


def parse_day(value: object) -> int:
    """
    Normalize a weekday given as 0..4 or as a name/alias ('mon', 'PO', ...).
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid day: {value!r}")
    if isinstance(value, int):
        if 0 <= value < len(DAY_NAMES):
            return value
        raise ValidationError(f"Day out of range (0-4): {value!r}")
    key = str(value or "").strip().lower()
    if key.isdigit():
        return parse_day(int(key))
    if key in DAY_ALIASES:
        return DAY_ALIASES[key]
    raise ValidationError(f"Unknown day: {value!r}")


@dataclass(frozen=True)
class CourseEvent:
    """
    One concrete schedulable teaching occurrence (weekly slot).

    Capacity fields are informational only; the scheduler never changes them.
    """

    event_id: str
    course_id: str
    type: EventType
    day: int
    start: str
    end: str
    recurrence: Recurrence = Recurrence.WEEKLY
    room: Optional[str] = None
    instructor: Optional[str] = None
    current_capacity: int = 0
    max_capacity: int = 0
    year: str = ""
    semester: str = ""
    note: Optional[str] = None

    # parsed minute values, filled in __post_init__
    start_minutes: int = field(init=False, repr=False, compare=False)
    end_minutes: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not str(self.event_id or "").strip():
            raise ValidationError("Event without event_id")
        if not str(self.course_id or "").strip():
            raise ValidationError(f"Event {self.event_id!r} has no owning course")

        object.__setattr__(self, "type", EventType.parse(self.type))
        object.__setattr__(self, "recurrence", Recurrence.parse(self.recurrence))
        object.__setattr__(self, "day", parse_day(self.day))

        start = time_to_minutes(self.start)
        end = time_to_minutes(self.end)
        if start >= end:
            raise ValidationError(f"Event {self.event_id!r}: start {self.start} is not before end {self.end}")
        object.__setattr__(self, "start_minutes", start)
        object.__setattr__(self, "end_minutes", end)

    @property
    def has_capacity(self) -> bool:
        return self.current_capacity < self.max_capacity

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day]

    def label(self) -> str:
        bits = [f"{self.day_name} {self.start}-{self.end}", self.course_id, self.type.value]
        if self.recurrence is not Recurrence.WEEKLY:
            bits.append(f"({self.recurrence.value} weeks)")
        if self.room:
            bits.append(self.room)
        return " ".join(bits)


def _parse_needed(raw: Dict[object, object]) -> Dict[EventType, int]:
    needed: Dict[EventType, int] = {}
    for key, count in dict(raw or {}).items():
        etype = EventType.parse(key)
        # bool is an int subclass, but True/False is never a meaningful count
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValidationError(f"Required count for {etype.value} must be an integer, got {count!r}")
        if count < 0:
            raise ValidationError(f"Required count for {etype.value} must not be negative, got {count}")
        needed[etype] = count
    return needed


@dataclass
class Course:
    """
    Represents one course and the teaching events it offers.

    needed_enrollments maps event type -> exact number of events of that type
    a student has to enroll in. Types missing from the map are unconstrained.
    """

    course_id: str
    name: str
    department_code: str = ""
    course_code: str = ""
    credits: int = 0
    needed_enrollments: Dict[EventType, int] = field(default_factory=dict)
    events: List[CourseEvent] = field(default_factory=list)
    stag_id: Optional[str] = None
    year: str = ""
    semester: str = ""

    def __post_init__(self) -> None:
        if not str(self.course_id or "").strip():
            raise ValidationError("Course without course_id")
        self.needed_enrollments = _parse_needed(self.needed_enrollments)
        events = list(self.events)
        self.events = []
        self.add_events(events)

    @property
    def short_code(self) -> str:
        return f"{self.department_code}/{self.course_code}"

    def add_event(self, event: CourseEvent) -> None:
        """
        Attach an event to this course. Events with an already known id are ignored.
        """
        if event.course_id != self.course_id:
            raise ValidationError(
                f"Event {event.event_id!r} belongs to course {event.course_id!r}, not {self.course_id!r}"
            )
        if any(e.event_id == event.event_id for e in self.events):
            return
        self.events.append(event)

    def add_events(self, events: Iterable[CourseEvent]) -> None:
        for event in events:
            self.add_event(event)

    def get_events(
        self,
        type: Optional[EventType] = None,
        instructor: Optional[str] = None,
        room: Optional[str] = None,
        has_capacity: Optional[bool] = None,
        semester: Optional[str] = None,
        year: Optional[str] = None,
    ) -> List[CourseEvent]:
        """
        Return this course's events, optionally filtered. Filters combine with AND.
        """
        out = list(self.events)
        if type is not None:
            etype = EventType.parse(type)
            out = [e for e in out if e.type is etype]
        if instructor:
            out = [e for e in out if e.instructor == instructor]
        if room:
            out = [e for e in out if e.room == room]
        if has_capacity is not None:
            out = [e for e in out if e.has_capacity == has_capacity]
        if semester:
            out = [e for e in out if e.semester == semester]
        if year:
            out = [e for e in out if e.year == year]
        return out

    def conditions_met(self, enrolled: Iterable[CourseEvent]) -> bool:
        """
        True if the enrolled events of this course match every required count exactly.
        """
        counts = {etype: 0 for etype in self.needed_enrollments}
        for event in enrolled:
            if event.course_id != self.course_id:
                continue
            if event.type in counts:
                counts[event.type] += 1
        return all(counts[etype] == needed for etype, needed in self.needed_enrollments.items())

    def validate(self) -> None:
        """
        Re-check invariants that callers could have broken after construction
        (needed_enrollments and events are plain mutable attributes).
        """
        self.needed_enrollments = _parse_needed(self.needed_enrollments)
        seen: set[str] = set()
        for event in self.events:
            if not isinstance(event, CourseEvent):
                raise ValidationError(f"Course {self.course_id!r} holds a non-event entry: {event!r}")
            if event.course_id != self.course_id:
                raise ValidationError(
                    f"Event {event.event_id!r} belongs to course {event.course_id!r}, not {self.course_id!r}"
                )
            if event.event_id in seen:
                raise ValidationError(f"Duplicate event id {event.event_id!r} in course {self.course_id!r}")
            seen.add(event.event_id)

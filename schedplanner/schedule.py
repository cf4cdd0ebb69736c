"""
Schedule: a conflict-free set of enrolled course events.

The invariant is enforced on every insertion. Events are kept in
insertion order so printed schedules are stable.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional

from schedplanner.conflicts import events_conflict
from schedplanner.model import CourseEvent


class ScheduleConflictError(ValueError):
    """Raised when an event would collide with an already enrolled one."""

    def __init__(self, event: CourseEvent, existing: CourseEvent) -> None:
        super().__init__(f"{event.label()} conflicts with {existing.label()}")
        self.event = event
        self.existing = existing


class Schedule:
    def __init__(self, events: Iterable[CourseEvent] = ()) -> None:
        self._events: Dict[str, CourseEvent] = {}
        self.add_events(events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[CourseEvent]:
        return iter(list(self._events.values()))

    def __contains__(self, event_id: object) -> bool:
        if isinstance(event_id, CourseEvent):
            event_id = event_id.event_id
        return event_id in self._events

    def __repr__(self) -> str:
        return f"Schedule({list(self._events)!r})"

    def first_conflict(self, event: CourseEvent) -> Optional[CourseEvent]:
        for existing in self._events.values():
            if events_conflict(event, existing):
                return existing
        return None

    def conflicts_with(self, event: CourseEvent) -> bool:
        return self.first_conflict(event) is not None

    def add_event(self, event: CourseEvent) -> bool:
        """
        Enroll an event. Returns False if the id is already enrolled (no-op).
        Raises ScheduleConflictError if it collides with an enrolled event.
        """
        if event.event_id in self._events:
            return False
        existing = self.first_conflict(event)
        if existing is not None:
            raise ScheduleConflictError(event, existing)
        self._events[event.event_id] = event
        return True

    def add_events(self, events: Iterable[CourseEvent]) -> None:
        for event in events:
            self.add_event(event)

    def remove_event_by_id(self, event_id: str) -> Optional[CourseEvent]:
        return self._events.pop(event_id, None)

    def get_all_enrolled_events(self) -> List[CourseEvent]:
        return list(self._events.values())

    def events_for_course(self, course_id: str) -> List[CourseEvent]:
        return [e for e in self._events.values() if e.course_id == course_id]

    def event_ids(self) -> frozenset:
        return frozenset(self._events)

    def clear(self) -> None:
        self._events.clear()

    def copy(self) -> "Schedule":
        clone = Schedule()
        # already conflict-free, skip the pairwise checks
        clone._events = dict(self._events)
        return clone

    @contextmanager
    def enrolled(self, events: Iterable[CourseEvent]) -> Iterator["Schedule"]:
        """
        Temporarily enroll events; they are removed again when the block exits,
        whether normally or through an exception.
        """
        added: List[str] = []
        try:
            for event in events:
                if self.add_event(event):
                    added.append(event.event_id)
            yield self
        finally:
            for event_id in reversed(added):
                self._events.pop(event_id, None)

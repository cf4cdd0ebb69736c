"""
Conflict detection.

Two weekly teaching events conflict if they fall on the same weekday,
their time intervals overlap and their week parity lets them meet.

Overlap rule:
    start < other_end AND end > other_start

Recurrence rule (only checked when the times overlap):
- a WEEKLY event collides with anything in its slot
- ODD/ODD and EVEN/EVEN collide
- ODD vs EVEN alternate weeks and never meet
"""

from __future__ import annotations

from typing import Iterable

from schedplanner.model import CourseEvent, Recurrence


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # touching endpoints (end == start) do not overlap
    return a_start < b_end and a_end > b_start


def events_conflict(a: CourseEvent, b: CourseEvent) -> bool:
    """
    True if the two events cannot both be attended. Symmetric.
    An event never conflicts with itself.
    """
    if a.event_id == b.event_id:
        return False
    if a.day != b.day:
        return False
    if not _overlaps(a.start_minutes, a.end_minutes, b.start_minutes, b.end_minutes):
        return False
    if a.recurrence is Recurrence.WEEKLY or b.recurrence is Recurrence.WEEKLY:
        return True
    return a.recurrence is b.recurrence


def conflicts_with_any(event: CourseEvent, others: Iterable[CourseEvent]) -> bool:
    return any(events_conflict(event, other) for other in others)


def find_conflicts(events: list[CourseEvent]) -> list[tuple[CourseEvent, CourseEvent]]:
    """
    Find conflicting event pairs (A,B), each pair appears once (i<j).
    """
    conflicts: list[tuple[CourseEvent, CourseEvent]] = []

    # O(n^2) is fine for typical uni schedule sizes
    for i in range(len(events)):
        for j in range(i + 1, len(events)):
            if events_conflict(events[i], events[j]):
                conflicts.append((events[i], events[j]))

    return conflicts

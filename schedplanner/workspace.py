"""
Workspace: the state a planning session works on.

Holds the course catalog, the user's preferences, the hand-edited primary
schedule and the generated alternatives, and drives the generator.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from schedplanner.config import MAX_GENERATED_SCHEDULES
from schedplanner.model import Course, CourseEvent
from schedplanner.preferences import Preference, PreferenceList
from schedplanner.schedule import Schedule
from schedplanner.scheduler import CancellationToken, GenerationResult, generate

logger = logging.getLogger(__name__)


class Workspace:
    def __init__(self, semester: str = "", year: str = "", preferences: Iterable[Preference] = ()) -> None:
        self.semester = semester
        self.year = year
        self.courses: List[Course] = []
        self.preferences = PreferenceList(preferences)
        self.primary_schedule = Schedule()
        self.generated_schedules: List[Schedule] = []
        # -1 = primary schedule, otherwise index into generated_schedules
        self.active_schedule_index = -1

    # -- schedules ----------------------------------------------------------

    @property
    def active_schedule(self) -> Schedule:
        if 0 <= self.active_schedule_index < len(self.generated_schedules):
            return self.generated_schedules[self.active_schedule_index]
        return self.primary_schedule

    def set_active_schedule_index(self, index: int) -> None:
        if not (-1 <= index < len(self.generated_schedules)):
            raise IndexError(f"No schedule with index {index} (generated: {len(self.generated_schedules)})")
        self.active_schedule_index = index

    # -- courses ------------------------------------------------------------

    def _find_existing(self, course: Course) -> Optional[Course]:
        for c in self.courses:
            if c.course_id == course.course_id:
                return c
            if course.stag_id and c.stag_id == course.stag_id:
                return c
            if (
                c.department_code
                and c.course_code
                and (c.department_code, c.course_code, c.year, c.semester)
                == (course.department_code, course.course_code, course.year, course.semester)
            ):
                return c
        return None

    def add_course(self, course: Course) -> Course:
        """
        Add a course. If the same course is already present, its events are
        replaced by the new ones (when given) and the existing object is returned.
        """
        existing = self._find_existing(course)
        if existing is None:
            self.courses.append(course)
            return course

        logger.warning("Course already in workspace: %s", existing.short_code)
        if course.events:
            old_ids = {e.event_id for e in existing.events}
            existing.events = []
            for event in course.events:
                # re-own the events if the duplicate came in under another id
                if event.course_id != existing.course_id:
                    event = replace(event, course_id=existing.course_id)
                existing.add_event(event)
            self._drop_enrolled(old_ids - {e.event_id for e in existing.events})
        return existing

    def _drop_enrolled(self, event_ids: Iterable[str]) -> None:
        for event_id in event_ids:
            self.primary_schedule.remove_event_by_id(event_id)
            for schedule in self.generated_schedules:
                schedule.remove_event_by_id(event_id)

    def add_courses(self, courses: Iterable[Course]) -> None:
        for course in courses:
            self.add_course(course)

    def get_course(self, course_id: str) -> Optional[Course]:
        for c in self.courses:
            if c.course_id == course_id or (c.stag_id and c.stag_id == course_id):
                return c
        return None

    def remove_course(self, course_id: str) -> bool:
        """
        Remove a course and drop its events from every schedule.
        """
        course = self.get_course(course_id)
        if course is None:
            return False
        self._drop_enrolled(e.event_id for e in course.events)
        self.courses = [c for c in self.courses if c is not course]
        return True

    def all_course_events(self) -> List[CourseEvent]:
        return [e for c in self.courses for e in c.events]

    def find_event(self, event_id: str) -> Optional[CourseEvent]:
        for event in self.all_course_events():
            if event.event_id == event_id:
                return event
        return None

    def all_instructors(self) -> List[str]:
        return sorted({e.instructor for e in self.all_course_events() if e.instructor})

    def all_rooms(self) -> List[str]:
        return sorted({e.room for e in self.all_course_events() if e.room})

    def all_departments(self) -> List[str]:
        return sorted({c.department_code for c in self.courses if c.department_code})

    # -- primary schedule editing ---------------------------------------------

    def enroll(self, event_id: str) -> CourseEvent:
        """
        Add an event to the primary schedule. Raises KeyError for unknown ids and
        ScheduleConflictError if it clashes with an enrolled event.
        """
        event = self.find_event(event_id)
        if event is None:
            raise KeyError(event_id)
        self.primary_schedule.add_event(event)
        return event

    def unenroll(self, event_id: str) -> Optional[CourseEvent]:
        return self.primary_schedule.remove_event_by_id(event_id)

    # -- generation -----------------------------------------------------------

    def generate_schedules(
        self,
        course_ids: Optional[Iterable[str]] = None,
        limit: int = MAX_GENERATED_SCHEDULES,
        timeout: Optional[float] = None,
        max_nodes: Optional[int] = None,
        token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """
        Run the generator on the given courses (all courses by default) with the
        active preferences. The first generated schedule becomes active.
        """
        if course_ids is None:
            courses = list(self.courses)
        else:
            courses = []
            for cid in course_ids:
                course = self.get_course(cid)
                if course is None:
                    raise KeyError(cid)
                courses.append(course)

        self.generated_schedules = []
        self.active_schedule_index = -1

        result = generate(
            courses,
            self.preferences.active(),
            limit,
            timeout=timeout,
            max_nodes=max_nodes,
            token=token,
        )
        self.generated_schedules = list(result.schedules)
        if result.success:
            self.active_schedule_index = 0
        return result

    def clear(self) -> None:
        self.semester = ""
        self.year = ""
        self.courses = []
        self.preferences = PreferenceList()
        self.primary_schedule.clear()
        self.generated_schedules = []
        self.active_schedule_index = -1

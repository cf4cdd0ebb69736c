"""
Backtracking schedule generator.

Courses are processed in input order; the course index is the recursion
depth. For every course the required event types are walked in EventType
order, and for each type the conflict-free k-combinations of its admissible
events are tried. A combination is rejected as soon as one of its events
clashes with the events already chosen for this course or committed by an
earlier course, so pruning happens before descending, not at the leaves.

The working schedule is mutated in place and rolled back through
Schedule.enrolled(), also when the search is aborted by cancellation or
by the time/node budget.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from schedplanner.combinations import conflict_free_combinations
from schedplanner.config import MAX_GENERATED_SCHEDULES
from schedplanner.conflicts import events_conflict
from schedplanner.model import Course, CourseEvent, EventType, ValidationError
from schedplanner.preferences import Preference, build_filter
from schedplanner.schedule import Schedule

logger = logging.getLogger(__name__)


class SearchStatus(str, Enum):
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    BUDGET_EXCEEDED = "budget_exceeded"


class CancellationToken:
    """
    Thread-safe flag another thread can set to stop a running search.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class GenerationResult:
    schedules: List[Schedule] = field(default_factory=list)
    status: SearchStatus = SearchStatus.COMPLETE
    nodes_visited: int = 0
    elapsed: float = 0.0

    @property
    def success(self) -> bool:
        return len(self.schedules) > 0

    @property
    def complete(self) -> bool:
        return self.status is SearchStatus.COMPLETE


class _SearchAborted(Exception):
    def __init__(self, status: SearchStatus) -> None:
        super().__init__(status.value)
        self.status = status


# (event type, required count, admissible events of that type)
_TypeOptions = tuple[EventType, int, List[CourseEvent]]


def validate_courses(courses: Sequence[Course]) -> None:
    """
    Fail fast on malformed input before any search work is done.
    """
    seen: set[str] = set()
    event_owner: dict[str, str] = {}
    for course in courses:
        if not isinstance(course, Course):
            raise ValidationError(f"Expected a Course, got {course!r}")
        course.validate()
        if course.course_id in seen:
            raise ValidationError(f"Course {course.course_id!r} is listed twice")
        seen.add(course.course_id)
        # schedules key events by id
        for event in course.events:
            owner = event_owner.setdefault(event.event_id, course.course_id)
            if owner != course.course_id:
                raise ValidationError(
                    f"Event id {event.event_id!r} is used by both {owner!r} and {course.course_id!r}"
                )


class BacktrackingScheduler:
    """
    One search run. Owns its working schedule for the whole call;
    create a new instance per run.
    """

    def __init__(
        self,
        courses: Sequence[Course],
        preferences: Iterable[Preference] = (),
        limit: int = MAX_GENERATED_SCHEDULES,
        timeout: Optional[float] = None,
        max_nodes: Optional[int] = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError(f"limit must be a positive integer, got {limit!r}")
        if timeout is not None and timeout < 0:
            raise ValidationError(f"timeout must not be negative, got {timeout!r}")
        if max_nodes is not None and max_nodes < 1:
            raise ValidationError(f"max_nodes must be positive, got {max_nodes!r}")
        self.courses = list(courses)
        validate_courses(self.courses)
        self.preferences = list(preferences)
        self.limit = limit
        self.timeout = timeout
        self.max_nodes = max_nodes
        self.token = token

        self._working = Schedule()
        self._solutions: List[Schedule] = []
        self._nodes = 0
        self._deadline: Optional[float] = None

    # -- preparation --------------------------------------------------------

    def _course_options(self, course: Course, admissible: Callable[[CourseEvent], bool]) -> List[_TypeOptions]:
        """
        Admissible pool per required type. Combinations are drawn from the
        pools lazily during the search; here only the first one is probed so
        an impossible type is known before any descent.
        """
        options: List[_TypeOptions] = []
        for etype in EventType:
            if etype not in course.needed_enrollments:
                continue
            needed = course.needed_enrollments[etype]
            pool = [e for e in course.get_events(type=etype) if admissible(e)]
            options.append((etype, needed, pool))
        return options

    def _combinations(self, pool: List[CourseEvent], needed: int) -> Iterator[tuple[CourseEvent, ...]]:
        for combo in conflict_free_combinations(pool, needed):
            self._check_budget()
            yield combo

    def _satisfiable(self, course: Course, options: List[_TypeOptions]) -> bool:
        for etype, needed, pool in options:
            if next(self._combinations(pool, needed), None) is None:
                logger.info(
                    "%s: no usable %s combination (%d admissible, %d required)",
                    course.course_id,
                    etype.value,
                    len(pool),
                    needed,
                )
                return False
        return True

    # -- search -------------------------------------------------------------

    def _check_budget(self) -> None:
        if self.token is not None and self.token.cancelled:
            raise _SearchAborted(SearchStatus.CANCELLED)
        if self.max_nodes is not None and self._nodes >= self.max_nodes:
            raise _SearchAborted(SearchStatus.BUDGET_EXCEEDED)
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise _SearchAborted(SearchStatus.BUDGET_EXCEEDED)

    def _done(self) -> bool:
        return len(self._solutions) >= self.limit

    def _search(self, depth: int, plan: List[List[_TypeOptions]]) -> None:
        if self._done():
            return
        self._check_budget()
        self._nodes += 1

        if depth == len(self.courses):
            self._accept()
            return

        self._assign(depth, plan, 0, [])

    def _assign(self, depth: int, plan: List[List[_TypeOptions]], type_idx: int, chosen: List[CourseEvent]) -> None:
        options = plan[depth]
        if type_idx == len(options):
            with self._working.enrolled(chosen):
                self._search(depth + 1, plan)
            return

        _, needed, pool = options[type_idx]
        for combo in self._combinations(pool, needed):
            if self._clashes(combo, chosen):
                continue
            self._assign(depth, plan, type_idx + 1, chosen + list(combo))
            if self._done():
                return

    def _clashes(self, combo: Sequence[CourseEvent], chosen: Sequence[CourseEvent]) -> bool:
        for event in combo:
            for other in chosen:
                if events_conflict(event, other):
                    return True
            if self._working.conflicts_with(event):
                return True
        return False

    def _accept(self) -> None:
        enrolled = self._working.get_all_enrolled_events()
        for course in self.courses:
            if not course.conditions_met(enrolled):
                logger.debug("Rejected leaf: %s does not meet its required counts", course.course_id)
                return
        self._solutions.append(self._working.copy())
        logger.debug("Solution %d found after %d nodes", len(self._solutions), self._nodes)

    def run(self) -> GenerationResult:
        started = time.monotonic()
        if self.timeout is not None:
            self._deadline = started + self.timeout

        logger.info(
            "Generating schedules for %d course(s), %d preference(s), limit %d",
            len(self.courses),
            len(self.preferences),
            self.limit,
        )

        admissible = build_filter(self.preferences)
        plan = [self._course_options(course, admissible) for course in self.courses]

        status = SearchStatus.COMPLETE
        try:
            if all(self._satisfiable(course, options) for course, options in zip(self.courses, plan)):
                self._search(0, plan)
            else:
                # some course can never meet a required count: nothing to search
                logger.info("At least one course is unsatisfiable, skipping search")
        except _SearchAborted as exc:
            status = exc.status
            logger.warning("Search stopped (%s) after %d nodes", status.value, self._nodes)

        result = GenerationResult(
            schedules=list(self._solutions),
            status=status,
            nodes_visited=self._nodes,
            elapsed=time.monotonic() - started,
        )
        logger.info(
            "Generated %d schedule(s) in %.3fs (%d nodes, %s)",
            len(result.schedules),
            result.elapsed,
            result.nodes_visited,
            result.status.value,
        )
        return result


def generate(
    courses: Sequence[Course],
    preferences: Iterable[Preference] = (),
    limit: int = MAX_GENERATED_SCHEDULES,
    *,
    timeout: Optional[float] = None,
    max_nodes: Optional[int] = None,
    token: Optional[CancellationToken] = None,
) -> GenerationResult:
    """
    Generate up to `limit` conflict-free schedules that meet every course's
    required counts. Validation problems raise ValidationError; an impossible
    catalog just returns an empty, unsuccessful result.
    """
    scheduler = BacktrackingScheduler(
        courses, preferences, limit=limit, timeout=timeout, max_nodes=max_nodes, token=token
    )
    return scheduler.run()

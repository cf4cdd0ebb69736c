"""
User preferences and the preference filter.

A Preference is a user-declared scheduling constraint with a priority
(1 = highest). The scheduler only sees the active ones, ordered by priority,
and turns them into a per-event admissibility predicate.

Each preference type maps to an exclusion rule in a small registry.
Types without a registered rule are accepted and stored but do not exclude
anything yet. Adding a new kind means registering one function here.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from schedplanner.config import DAY_NAMES
from schedplanner.model import CourseEvent, ValidationError, parse_day, time_to_minutes

logger = logging.getLogger(__name__)


class PreferenceType(str, Enum):
    FREE_DAY = "FREE_DAY"
    AVOID_TIMES = "AVOID_TIMES"
    PREFER_INSTRUCTOR = "PREFER_INSTRUCTOR"

    @classmethod
    def parse(cls, value: object) -> "PreferenceType":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(f"Unknown preference type: {value!r}") from None


def _check_free_day(params: Dict[str, Any]) -> None:
    params["day"] = parse_day(params.get("day"))


def _check_avoid_times(params: Dict[str, Any]) -> None:
    params["day"] = parse_day(params.get("day"))
    start = time_to_minutes(params.get("start"))
    end = time_to_minutes(params.get("end"))
    if start >= end:
        raise ValidationError(f"Avoided time range is empty: {params.get('start')}-{params.get('end')}")


def _check_prefer_instructor(params: Dict[str, Any]) -> None:
    if not str(params.get("instructor") or "").strip():
        raise ValidationError("PREFER_INSTRUCTOR needs an instructor")


_PARAM_CHECKS: Dict[PreferenceType, Callable[[Dict[str, Any]], None]] = {
    PreferenceType.FREE_DAY: _check_free_day,
    PreferenceType.AVOID_TIMES: _check_avoid_times,
    PreferenceType.PREFER_INSTRUCTOR: _check_prefer_instructor,
}


@dataclass
class Preference:
    pref_id: str
    type: PreferenceType
    priority: int
    active: bool = True
    params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.type = PreferenceType.parse(self.type)
        if isinstance(self.priority, bool) or not isinstance(self.priority, int) or self.priority < 1:
            raise ValidationError(f"Preference priority must be a positive integer, got {self.priority!r}")
        if self.params is None:
            self.params = {}
        if not isinstance(self.params, dict):
            raise ValidationError(f"Preference params must be an object, got {self.params!r}")
        self.params = dict(self.params)
        _PARAM_CHECKS[self.type](self.params)

    def label(self) -> str:
        if self.type is PreferenceType.FREE_DAY:
            return f"Free day: {DAY_NAMES[self.params['day']]}"
        if self.type is PreferenceType.AVOID_TIMES:
            return f"Avoid {DAY_NAMES[self.params['day']]} {self.params['start']}-{self.params['end']}"
        return f"Prefer instructor: {self.params['instructor']}"


# ---------------------------------------------------------------------------
# Rule registry
# ---------------------------------------------------------------------------

# A rule answers: does this preference exclude this event?
ExclusionRule = Callable[[CourseEvent, Preference], bool]

_RULES: Dict[PreferenceType, ExclusionRule] = {}


def register_rule(pref_type: PreferenceType) -> Callable[[ExclusionRule], ExclusionRule]:
    """
    Decorator: register the exclusion rule for one preference type.
    """

    def decorator(fn: ExclusionRule) -> ExclusionRule:
        _RULES[PreferenceType.parse(pref_type)] = fn
        return fn

    return decorator


def unregister_rule(pref_type: PreferenceType) -> Optional[ExclusionRule]:
    return _RULES.pop(PreferenceType.parse(pref_type), None)


def registered_types() -> List[PreferenceType]:
    return [t for t in PreferenceType if t in _RULES]


@register_rule(PreferenceType.FREE_DAY)
def _free_day_excludes(event: CourseEvent, pref: Preference) -> bool:
    # hard constraint: priority does not matter
    return event.day == pref.params["day"]


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------


def active_preferences(preferences: Iterable[Preference]) -> List[Preference]:
    """
    Active preferences sorted by priority (1 first).
    """
    return sorted((p for p in preferences if p.active), key=lambda p: p.priority)


def is_admissible(event: CourseEvent, preferences: Iterable[Preference]) -> bool:
    """
    False if any preference with a registered rule excludes the event.
    """
    for pref in preferences:
        rule = _RULES.get(pref.type)
        if rule is not None and rule(event, pref):
            return False
    return True


def build_filter(preferences: Iterable[Preference]) -> Callable[[CourseEvent], bool]:
    """
    Freeze a preference list into a per-event admissibility predicate.

    Only the active preferences count. The rules are looked up once here,
    so later registry changes do not affect a running search.
    """
    ordered = active_preferences(preferences)
    bound: List[tuple[ExclusionRule, Preference]] = []
    for pref in ordered:
        rule = _RULES.get(pref.type)
        if rule is None:
            logger.debug("No filtering rule for %s (priority %d), ignored", pref.type.value, pref.priority)
            continue
        bound.append((rule, pref))

    def admissible(event: CourseEvent) -> bool:
        return not any(rule(event, pref) for rule, pref in bound)

    return admissible


# ---------------------------------------------------------------------------
# Priority-ordered list (owned by the workspace)
# ---------------------------------------------------------------------------

_pref_counter = itertools.count(1)


def _new_pref_id() -> str:
    return f"pref_{next(_pref_counter)}"


class PreferenceList:
    """
    Ordered collection of preferences with dense priorities 1..N.

    Every mutation renumbers, so the list never holds gaps or duplicates.
    """

    def __init__(self, preferences: Iterable[Preference] = ()) -> None:
        self._items: List[Preference] = []
        for pref in sorted(preferences, key=lambda p: p.priority):
            if self.get(pref.pref_id) is not None:
                raise ValidationError(f"Duplicate preference id {pref.pref_id!r}")
            self._items.append(pref)
        self._renumber()

    def __iter__(self):
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def _renumber(self) -> None:
        self._items = [replace(p, priority=i) for i, p in enumerate(self._items, start=1)]

    def get(self, pref_id: str) -> Optional[Preference]:
        for pref in self._items:
            if pref.pref_id == pref_id:
                return pref
        return None

    def _index(self, pref_id: str) -> int:
        for i, pref in enumerate(self._items):
            if pref.pref_id == pref_id:
                return i
        raise KeyError(pref_id)

    def add(
        self, pref_type: PreferenceType, params: Dict[str, Any], active: bool = True, pref_id: Optional[str] = None
    ) -> Preference:
        """
        Append a new preference with the lowest priority (N+1).
        """
        pid = pref_id or _new_pref_id()
        while pref_id is None and self.get(pid) is not None:
            pid = _new_pref_id()
        if self.get(pid) is not None:
            raise ValidationError(f"Duplicate preference id {pid!r}")
        pref = Preference(pref_id=pid, type=pref_type, priority=len(self._items) + 1, active=active, params=params)
        self._items.append(pref)
        self._renumber()
        return self._items[-1]

    def remove(self, pref_id: str) -> Preference:
        pref = self._items.pop(self._index(pref_id))
        self._renumber()
        return pref

    def toggle(self, pref_id: str) -> Preference:
        i = self._index(pref_id)
        self._items[i] = replace(self._items[i], active=not self._items[i].active)
        return self._items[i]

    def move(self, pref_id: str, direction: str) -> Preference:
        """
        Swap with the neighbour above ('up') or below ('down'). No-op at the ends.
        """
        i = self._index(pref_id)
        if direction == "up":
            j = i - 1
        elif direction == "down":
            j = i + 1
        else:
            raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")
        if 0 <= j < len(self._items):
            self._items[i], self._items[j] = self._items[j], self._items[i]
            self._renumber()
        return self._items[self._index(pref_id)]

    def active(self) -> List[Preference]:
        return active_preferences(self._items)

"""
CLI (Command Line Interface).

This module provides terminal commands around the schedule generator, e.g.:

    schedplanner courses catalog.json
    schedplanner conflicts catalog.json EVENT_ID [EVENT_ID ...]
    schedplanner generate catalog.json --limit 5
    schedplanner prefs add-free-day mon
    schedplanner prefs list

Note:
- the catalog is a JSON export (see schedplanner/catalog.py)
- preferences are stored between runs in preferences.json (see storage.py)
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from schedplanner.catalog import load_catalog
from schedplanner.combinations import count_combinations
from schedplanner.config import DAY_NAMES, DEFAULT_CLI_TIMEOUT, MAX_GENERATED_SCHEDULES
from schedplanner.conflicts import find_conflicts
from schedplanner.model import CourseEvent, EventType, Recurrence, ValidationError
from schedplanner.preferences import PreferenceList, PreferenceType, build_filter, registered_types
from schedplanner.schedule import Schedule
from schedplanner.storage import load_preferences, save_preferences
from schedplanner.workspace import Workspace

console = Console()


def _load_preference_list(args: argparse.Namespace) -> PreferenceList:
    return PreferenceList(load_preferences(args.prefs))


def _load_workspace(args: argparse.Namespace) -> Optional[Workspace]:
    """
    Build a workspace from the catalog file and the stored preferences.
    Prints the reason and returns None if the catalog cannot be used.
    """
    try:
        courses = load_catalog(args.catalog)
    except FileNotFoundError:
        console.print(f"Catalog not found: {args.catalog}")
        return None
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        console.print(f"Cannot read catalog {args.catalog}: {exc}")
        return None
    except ValidationError as exc:
        console.print(f"Invalid catalog: {exc}")
        return None

    ws = Workspace(preferences=load_preferences(args.prefs))
    ws.add_courses(courses)
    return ws


def _needed_label(needed: dict[EventType, int]) -> str:
    if not needed:
        return "-"
    return ", ".join(f"{etype.value} x{count}" for etype, count in needed.items())


def _event_line(ev: CourseEvent) -> str:
    bits = [f"{ev.start}-{ev.end}", ev.course_id, ev.type.value]
    if ev.recurrence is not Recurrence.WEEKLY:
        bits.append(f"({ev.recurrence.value})")
    if ev.room:
        bits.append(ev.room)
    return " ".join(bits)


def _print_schedule(title: str, schedule: Schedule) -> None:
    """
    Mon-Fri grid, one column per day, events sorted by start time.
    """
    buckets: dict[int, list[CourseEvent]] = {d: [] for d in range(len(DAY_NAMES))}
    for ev in sorted(schedule, key=lambda e: (e.day, e.start_minutes)):
        buckets[ev.day].append(ev)

    table = Table(title=title, box=box.SIMPLE)
    for day in DAY_NAMES:
        table.add_column(day)
    max_len = max((len(b) for b in buckets.values()), default=0)
    for r in range(max_len):
        row = []
        for d in range(len(DAY_NAMES)):
            row.append(_event_line(buckets[d][r]) if r < len(buckets[d]) else "")
        table.add_row(*row)
    console.print(table)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_courses(args: argparse.Namespace) -> int:
    """
    List catalog courses with their requirements and how many usable
    combinations each required type has under the stored preferences.
    """
    ws = _load_workspace(args)
    if ws is None:
        return 1
    if not ws.courses:
        console.print("Catalog contains no courses.")
        return 0

    admissible = build_filter(ws.preferences.active())

    table = Table(title="Courses", box=box.SIMPLE)
    table.add_column("Course")
    table.add_column("Name")
    table.add_column("Credits", justify="right")
    table.add_column("Required")
    table.add_column("Events", justify="right")
    table.add_column("Options")

    for course in ws.courses:
        options = []
        for etype, needed in course.needed_enrollments.items():
            pool = [e for e in course.get_events(type=etype) if admissible(e)]
            options.append(f"{etype.value}: {count_combinations(pool, needed)}")
        table.add_row(
            course.course_id,
            course.name or "(no name)",
            str(course.credits),
            _needed_label(course.needed_enrollments),
            str(len(course.events)),
            ", ".join(options) or "-",
        )
    console.print(table)
    return 0


def _cmd_conflicts(args: argparse.Namespace) -> int:
    """
    Check a hand-picked set of events for clashes.
    """
    ws = _load_workspace(args)
    if ws is None:
        return 1

    events: list[CourseEvent] = []
    for event_id in args.event_ids:
        ev = ws.find_event(event_id)
        if ev is None:
            console.print(f"Unknown event id: {event_id}")
            return 1
        events.append(ev)

    confs = find_conflicts(events)
    if not confs:
        console.print("No conflicts found.")
        return 0

    console.print(f"Conflicts found: {len(confs)}")
    for a, b in confs:
        console.print(f"- {a.label()}  <->  {b.label()}")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    ws = _load_workspace(args)
    if ws is None:
        return 1

    try:
        result = ws.generate_schedules(
            course_ids=args.course or None,
            limit=args.limit,
            timeout=args.timeout,
            max_nodes=args.max_nodes,
        )
    except KeyError as exc:
        console.print(f"Unknown course: {exc.args[0]}")
        return 1
    except ValidationError as exc:
        console.print(f"Invalid input: {exc}")
        return 1

    if not result.complete:
        console.print(f"Search stopped early ({result.status.value}) after {result.nodes_visited} steps.")

    if not result.success:
        console.print("No valid schedule found.")
        return 1

    console.print(f"Generated {len(result.schedules)} schedule(s) in {result.elapsed:.2f}s")
    for i, schedule in enumerate(result.schedules[: args.show], start=1):
        _print_schedule(f"Schedule {i}", schedule)
    if len(result.schedules) > args.show:
        console.print(f"... and {len(result.schedules) - args.show} more")
    return 0


def _cmd_prefs(args: argparse.Namespace) -> int:
    prefs = _load_preference_list(args)

    try:
        if args.prefs_command == "list":
            return _print_preferences(prefs)
        if args.prefs_command == "add-free-day":
            pref = prefs.add(PreferenceType.FREE_DAY, {"day": args.day})
        elif args.prefs_command == "add-avoid-times":
            pref = prefs.add(PreferenceType.AVOID_TIMES, {"day": args.day, "start": args.start, "end": args.end})
        elif args.prefs_command == "remove":
            pref = prefs.remove(args.pref_id)
        elif args.prefs_command == "toggle":
            pref = prefs.toggle(args.pref_id)
        elif args.prefs_command == "move":
            pref = prefs.move(args.pref_id, args.direction)
        else:
            return 2
    except ValidationError as exc:
        console.print(f"Invalid preference: {exc}")
        return 1
    except KeyError:
        console.print(f"Unknown preference id: {args.pref_id}")
        return 1

    save_preferences(prefs, args.prefs)
    console.print(f"{args.prefs_command}: {pref.pref_id} ({pref.label()})")
    return 0


def _print_preferences(prefs: PreferenceList) -> int:
    if not len(prefs):
        console.print("No preferences stored.")
        return 0

    enforced = set(registered_types())
    table = Table(title="Preferences", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Id")
    table.add_column("Preference")
    table.add_column("Active")
    table.add_column("Enforced")
    for pref in prefs:
        table.add_row(
            str(pref.priority),
            pref.pref_id,
            pref.label(),
            "yes" if pref.active else "no",
            "yes" if pref.type in enforced else "no",
        )
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="schedplanner", description="Course timetable generator")
    parser.add_argument("--prefs", type=str, default=None, help="Preferences file (default: package data dir)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_courses = sub.add_parser("courses", help="List catalog courses")
    p_courses.add_argument("catalog", type=str, help="Catalog JSON file")

    p_conf = sub.add_parser("conflicts", help="Check selected events for clashes")
    p_conf.add_argument("catalog", type=str, help="Catalog JSON file")
    p_conf.add_argument("event_ids", nargs="+", help="Event ids to check")

    p_gen = sub.add_parser("generate", help="Generate conflict-free schedules")
    p_gen.add_argument("catalog", type=str, help="Catalog JSON file")
    p_gen.add_argument("--course", "-c", action="append", help="Only these course ids (repeatable)")
    p_gen.add_argument("--limit", type=int, default=MAX_GENERATED_SCHEDULES, help="Maximum schedules")
    p_gen.add_argument("--timeout", type=float, default=DEFAULT_CLI_TIMEOUT, help="Time budget in seconds")
    p_gen.add_argument("--max-nodes", type=int, default=None, help="Search step budget")
    p_gen.add_argument("--show", type=int, default=3, help="How many schedules to print")

    p_prefs = sub.add_parser("prefs", help="Manage preferences")
    prefs_sub = p_prefs.add_subparsers(dest="prefs_command", required=True)
    prefs_sub.add_parser("list", help="Show preferences by priority")
    p_free = prefs_sub.add_parser("add-free-day", help="Keep a weekday free")
    p_free.add_argument("day", type=str, help="Day (mon..fri or 0..4)")
    p_avoid = prefs_sub.add_parser("add-avoid-times", help="Avoid a time range on a day")
    p_avoid.add_argument("day", type=str, help="Day (mon..fri or 0..4)")
    p_avoid.add_argument("start", type=str, help="HH:MM")
    p_avoid.add_argument("end", type=str, help="HH:MM")
    for name in ("remove", "toggle"):
        p = prefs_sub.add_parser(name, help=f"{name.capitalize()} a preference")
        p.add_argument("pref_id", type=str)
    p_move = prefs_sub.add_parser("move", help="Change priority")
    p_move.add_argument("pref_id", type=str)
    p_move.add_argument("direction", choices=["up", "down"])

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "courses":
        raise SystemExit(_cmd_courses(args))
    if args.command == "conflicts":
        raise SystemExit(_cmd_conflicts(args))
    if args.command == "generate":
        raise SystemExit(_cmd_generate(args))
    if args.command == "prefs":
        raise SystemExit(_cmd_prefs(args))

    raise SystemExit(2)

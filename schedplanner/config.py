"""
Configuration constants for the schedule planner.

Everything that tunes the generator or maps catalog labels onto the
internal enums lives here, so the rest of the package does not carry
magic numbers or hard-coded spellings.
"""

from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

PACKAGE_DIR = Path(__file__).resolve().parent

# User state (stored preferences) lives next to the package unless overridden.
DATA_DIR = Path(os.environ.get("SCHEDPLANNER_DATA_DIR", PACKAGE_DIR / "data"))
PREFERENCES_PATH = DATA_DIR / "preferences.json"


# ---------------------------------------------------------------------------
# Generator limits
# ---------------------------------------------------------------------------

# Maximum number of generated schedules per search
MAX_GENERATED_SCHEDULES = 10

# Wall-clock budget used by the CLI when --timeout is not given (seconds)
DEFAULT_CLI_TIMEOUT = 30.0


# ---------------------------------------------------------------------------
# Days
# ---------------------------------------------------------------------------

# Index 0..4 = Monday..Friday
DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri"]

# Accepted spellings when a day is given as text.
# The two-letter codes are the labels used by the university catalog.
DAY_ALIASES = {
    "mon": 0, "monday": 0, "po": 0,
    "tue": 1, "tuesday": 1, "ut": 1, "út": 1,
    "wed": 2, "wednesday": 2, "st": 2,
    "thu": 3, "thursday": 3, "ct": 3, "čt": 3,
    "fri": 4, "friday": 4, "pa": 4, "pá": 4,
}


# ---------------------------------------------------------------------------
# Catalog labels
# ---------------------------------------------------------------------------

EVENT_TYPE_ALIASES = {
    "lecture": "lecture",
    "practical": "practical",
    "seminar": "seminar",
    "přednáška": "lecture",
    "cvičení": "practical",
    "seminář": "seminar",
    "př": "lecture",
    "cv": "practical",
    "se": "seminar",
}

RECURRENCE_ALIASES = {
    "weekly": "weekly",
    "odd": "odd",
    "even": "even",
    "odd_week": "odd",
    "even_week": "even",
    "každý týden": "weekly",
    "lichý týden": "odd",
    "sudý týden": "even",
}

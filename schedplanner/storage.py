"""
Persistent storage for the user's preferences.

This module manages the file:

    data/preferences.json   (see config.PREFERENCES_PATH)

The catalog is an input that changes with every export, the preferences
are user state. Keeping them in their own file means a new catalog never
wipes the user's free days.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List

from schedplanner.config import PREFERENCES_PATH
from schedplanner.preferences import Preference

logger = logging.getLogger(__name__)


def _default_preferences_path() -> Path:
    """
    Using a function instead of reading the constant at import time keeps
    the path overridable in tests.
    """
    return PREFERENCES_PATH


def load_preferences(path: str | Path | None = None) -> List[Preference]:
    """
    Load stored preferences, ordered by priority.

    Returns an empty list if the file does not exist or cannot be read.
    Single broken entries are skipped with a warning.
    """
    prefs_path = Path(path) if path is not None else _default_preferences_path()

    # First run: nothing stored yet
    if not prefs_path.exists():
        return []

    try:
        data = json.loads(prefs_path.read_text(encoding="utf-8"))
        items = data.get("preferences", [])
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        logger.warning("Ignoring unreadable preferences file: %s", prefs_path)
        return []

    if not isinstance(items, list):
        return []

    out: List[Preference] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            out.append(
                Preference(
                    pref_id=str(item["id"]),
                    type=item["type"],
                    priority=item["priority"],
                    active=bool(item.get("active", True)),
                    params=item.get("params", {}),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping stored preference %r: %s", item, exc)
    out.sort(key=lambda p: p.priority)
    return out


def save_preferences(preferences: Iterable[Preference], path: str | Path | None = None) -> None:
    """
    Save preferences as JSON. Creates parent directories if needed.
    """
    prefs_path = Path(path) if path is not None else _default_preferences_path()
    prefs_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "preferences": [
            {
                "id": p.pref_id,
                "type": p.type.value,
                "priority": p.priority,
                "active": p.active,
                "params": p.params,
            }
            for p in sorted(preferences, key=lambda p: p.priority)
        ]
    }

    prefs_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

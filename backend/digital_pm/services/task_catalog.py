"""Static catalogue rules: task types, amounts, project colours, worker PINs."""

from __future__ import annotations

import re
import secrets
from typing import Iterable

TASK_TYPES: tuple[str, ...] = (
    "hvac",
    "electrical",
    "plumbing",
    "carpentry",
    "roofing",
    "painting",
    "flooring",
    "other",
)

PROJECT_STATUSES: tuple[str, ...] = ("active", "completed", "on-hold")
PROJECT_COLORS: tuple[str, ...] = ("blue", "green", "purple", "orange", "red", "yellow", "cyan", "gray")

WORKER_STATUSES: tuple[str, ...] = ("active", "inactive")
_WORKER_STATUS_ALIASES = {"available": "active"}

PIN_RE = re.compile(r"^\d{4}$")

# Keywords match at the start of a word; short tokens must be the whole word.
_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("hvac", ("hvac", r"a/?c\b", "heat", "ventil", "radon", r"fans?\b", "furnace", "duct")),
    ("electrical", ("electric", "wiring", "outlet")),
    ("plumbing", ("plumb", "pipe", "water", "drain", "faucet", "sink", "toilet")),
    ("carpentry", ("carpen", "wood", "frame", "door", "window", "reseal")),
    ("roofing", ("roof",)),
    ("painting", ("paint",)),
    ("flooring", ("floor", "tile")),
)

_TYPE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (task_type, re.compile(r"\b(?:" + "|".join(keywords) + ")"))
    for task_type, keywords in _TYPE_KEYWORDS
)


def infer_task_type(description: str | None) -> str:
    """Type named earliest in the description; ties go to the first type listed."""
    text = (description or "").lower()
    best: tuple[int, str] | None = None
    for task_type, pattern in _TYPE_PATTERNS:
        match = pattern.search(text)
        if match and (best is None or match.start() < best[0]):
            best = (match.start(), task_type)
    return best[1] if best else "other"


def normalize_task_type(task_type: str | None, *, description: str | None = None) -> str:
    if not task_type:
        return infer_task_type(description)
    token = task_type.strip().lower()
    if token not in TASK_TYPES:
        raise ValueError(f"Unknown task type: {task_type!r}")
    return token


def compute_amount(quantity: float | None, price: float | None) -> float:
    return round(float(quantity or 0) * float(price or 0), 2)


def pick_project_color(used_colors: Iterable[str | None], project_count: int) -> str:
    """First palette colour not used yet; cycle through the palette once all are taken."""
    used = {color for color in used_colors if color}
    for color in PROJECT_COLORS:
        if color not in used:
            return color
    return PROJECT_COLORS[project_count % len(PROJECT_COLORS)]


def normalize_worker_status(status: str | None) -> str:
    if not status:
        return "active"
    token = status.strip().lower()
    token = _WORKER_STATUS_ALIASES.get(token, token)
    if token not in WORKER_STATUSES:
        raise ValueError(f"Unknown worker status: {status!r}")
    return token


def generate_worker_pin() -> str:
    return str(1000 + secrets.randbelow(9000))


def is_valid_pin(pin: str | None) -> bool:
    return bool(pin) and bool(PIN_RE.match(pin))

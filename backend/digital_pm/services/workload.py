"""Conflict/overload detection over the tasks of one calendar cell."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from ..config import settings

SEVERITY_NONE = "none"
SEVERITY_WARNING = "warning"
SEVERITY_HIGH = "high"


@dataclass(frozen=True)
class WorkloadSignal:
    total_hours: float
    is_overloaded: bool
    has_multiple: bool
    severity: str

    @property
    def is_conflict(self) -> bool:
        return self.is_overloaded and self.has_multiple


def task_hours(task: Any) -> float:
    """Estimated hours of a task record or mapping; missing values count as 0."""
    if isinstance(task, dict):
        value = task.get("estimated_hours")
    else:
        value = getattr(task, "estimated_hours", None)
    return float(value or 0)


def detect(tasks: Iterable[Any], *, workday_hours: float | None = None) -> WorkloadSignal:
    threshold = settings.WORKDAY_HOURS if workday_hours is None else workday_hours
    items = list(tasks)
    total = sum(task_hours(task) for task in items)
    overloaded = total > threshold
    multiple = len(items) > 1

    if not overloaded:
        severity = SEVERITY_NONE
    elif multiple:
        severity = SEVERITY_HIGH
    else:
        severity = SEVERITY_WARNING

    return WorkloadSignal(
        total_hours=total,
        is_overloaded=overloaded,
        has_multiple=multiple,
        severity=severity,
    )

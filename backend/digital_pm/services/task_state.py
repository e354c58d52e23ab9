"""Task lifecycle status table and transition rules."""

from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    UNASSIGNED = "unassigned"
    PENDING_ACCEPTANCE = "pending_acceptance"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskAction(str, Enum):
    ASSIGN = "assign"
    ACCEPT = "accept"
    REJECT = "reject"
    START = "start"
    COMPLETE = "complete"
    RELEASE = "release"


WORKER_ACTIONS: frozenset[TaskAction] = frozenset(
    {TaskAction.ACCEPT, TaskAction.REJECT, TaskAction.START, TaskAction.COMPLETE}
)

# (source status, action) -> target status
_TRANSITIONS: dict[tuple[TaskStatus, TaskAction], TaskStatus] = {
    (TaskStatus.UNASSIGNED, TaskAction.ASSIGN): TaskStatus.PENDING_ACCEPTANCE,
    (TaskStatus.REJECTED, TaskAction.ASSIGN): TaskStatus.PENDING_ACCEPTANCE,
    (TaskStatus.REJECTED, TaskAction.RELEASE): TaskStatus.UNASSIGNED,
    (TaskStatus.PENDING_ACCEPTANCE, TaskAction.ACCEPT): TaskStatus.ACCEPTED,
    (TaskStatus.PENDING_ACCEPTANCE, TaskAction.REJECT): TaskStatus.REJECTED,
    (TaskStatus.ACCEPTED, TaskAction.START): TaskStatus.IN_PROGRESS,
    (TaskStatus.IN_PROGRESS, TaskAction.COMPLETE): TaskStatus.COMPLETED,
}

# Past-tense activity names written to the task activity log.
ACTIVITY_NAMES: dict[TaskAction, str] = {
    TaskAction.ASSIGN: "assigned",
    TaskAction.ACCEPT: "accepted",
    TaskAction.REJECT: "rejected",
    TaskAction.START: "started",
    TaskAction.COMPLETE: "completed",
    TaskAction.RELEASE: "unassigned",
}

# Older clients wrote "confirmed" for the accept transition.
_LEGACY_ALIASES: dict[str, TaskStatus] = {
    "confirmed": TaskStatus.ACCEPTED,
}

TERMINAL_STATUSES: frozenset[TaskStatus] = frozenset({TaskStatus.COMPLETED})

PHASE_LABELS: dict[int, str] = {1: "Assignment", 2: "Execution", 3: "Complete"}


def normalize_task_status(status: str | TaskStatus | None) -> TaskStatus:
    """Map a stored/incoming status token onto the canonical enum.

    Unknown tokens raise ValueError instead of silently defaulting.
    """
    if isinstance(status, TaskStatus):
        return status
    if not status:
        return TaskStatus.UNASSIGNED
    token = status.strip().lower()
    if token in _LEGACY_ALIASES:
        return _LEGACY_ALIASES[token]
    try:
        return TaskStatus(token)
    except ValueError:
        raise ValueError(f"Unknown task status: {status!r}") from None


def parse_action(action: str | TaskAction) -> TaskAction:
    if isinstance(action, TaskAction):
        return action
    try:
        return TaskAction((action or "").strip().lower())
    except ValueError:
        raise ValueError(f"Unknown task action: {action!r}") from None


def next_status(*, current_status: str | TaskStatus | None, action: str | TaskAction) -> TaskStatus | None:
    """Target status for the action, or None when the edge is not in the graph."""
    current = normalize_task_status(current_status)
    return _TRANSITIONS.get((current, parse_action(action)))


def is_transition_allowed(*, current_status: str | TaskStatus | None, action: str | TaskAction) -> bool:
    return next_status(current_status=current_status, action=action) is not None


def allowed_actions(status: str | TaskStatus | None) -> list[TaskAction]:
    current = normalize_task_status(status)
    return [action for (source, action) in _TRANSITIONS if source == current]


def is_terminal_status(status: str | TaskStatus | None) -> bool:
    return normalize_task_status(status) in TERMINAL_STATUSES


def task_phase(status: str | TaskStatus | None) -> int:
    current = normalize_task_status(status)
    if current in {TaskStatus.UNASSIGNED, TaskStatus.REJECTED, TaskStatus.PENDING_ACCEPTANCE}:
        return 1
    if current in {TaskStatus.ACCEPTED, TaskStatus.IN_PROGRESS}:
        return 2
    return 3


def default_activity_details(action: str | TaskAction) -> str:
    return f"Task {ACTIVITY_NAMES[parse_action(action)]} by worker"

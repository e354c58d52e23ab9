"""Task lifecycle use-cases used by assignment and worker endpoints."""
from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from ..config import settings
from ..domain_errors import InvalidTransition, TaskNotAssigned, ValidationError
from ..models import Task, TaskActivity, now_utc
from ..services.calendar_grid import coerce_date
from ..services.entity_store import EntityStore
from ..services.task_state import (
    ACTIVITY_NAMES,
    WORKER_ACTIONS,
    TaskAction,
    TaskStatus,
    default_activity_details,
    next_status,
    normalize_task_status,
    parse_action,
)
from .notifications import dispatch_notification, transition_payload

logger = logging.getLogger(__name__)


def _require_transition(task: Task, action: TaskAction) -> tuple[TaskStatus, TaskStatus]:
    current = normalize_task_status(task.status)
    target = next_status(current_status=current, action=action)
    if target is None:
        raise InvalidTransition(
            task_id=task.id,
            current_state=current.value,
            attempted_action=action.value,
        )
    return current, target


def _append_activity(task: Task, *, action: TaskAction, actor: str, details: str | None) -> None:
    task.activity.append(
        TaskActivity(
            timestamp=now_utc(),
            action=ACTIVITY_NAMES[action],
            actor=actor,
            details=details,
        )
    )


def _log_transition(task_id: str, source: TaskStatus, target: TaskStatus, actor: str) -> None:
    logger.info("Task %s %s -> %s by %s", task_id, source.value, target.value, actor)


def assign_task_use_case(
    *,
    db: Session,
    project_id: str,
    task_id: str,
    worker_id: str | None,
    scheduled_date: date | str | None = None,
    estimated_hours: float | None = None,
    assigned_by: str,
) -> Task:
    """Assign an unassigned or previously rejected task to a worker."""
    if not worker_id:
        raise ValidationError(field="worker_id", reason="worker_id is required")
    if estimated_hours is not None and estimated_hours < 0:
        raise ValidationError(field="estimated_hours", reason="must be >= 0")
    try:
        scheduled = coerce_date(scheduled_date)
    except ValueError:
        raise ValidationError(field="scheduled_date", reason="expected YYYY-MM-DD") from None

    store = EntityStore(db)
    task = store.get_task(task_id, project_id=project_id, for_update=True)
    source, target = _require_transition(task, TaskAction.ASSIGN)
    worker = store.get_worker(worker_id)
    actor = assigned_by or "Admin"

    task.status = target.value
    task.assigned_to = worker.id
    task.assigned_by = actor
    task.assigned_at = now_utc()
    task.rejection_reason = None
    if scheduled is not None:
        task.scheduled_date = scheduled
    if estimated_hours is not None:
        task.estimated_hours = estimated_hours
    _append_activity(task, action=TaskAction.ASSIGN, actor=actor, details=f"Assigned to {worker.name}")

    payload = transition_payload(
        action=TaskAction.ASSIGN,
        task=task,
        actor_name=actor,
        target_worker_id=worker.id,
    )
    store.commit("assign_task", entity_id=task_id)
    _log_transition(task_id, source, target, actor)

    dispatch_notification(db=db, payload=payload)
    return task


def release_task_use_case(*, db: Session, project_id: str, task_id: str, released_by: str) -> Task:
    """Return a rejected task to the unassigned pool."""
    store = EntityStore(db)
    task = store.get_task(task_id, project_id=project_id, for_update=True)
    source, target = _require_transition(task, TaskAction.RELEASE)
    actor = released_by or "Admin"

    task.status = target.value
    task.assigned_to = None
    task.assigned_at = None
    task.rejection_reason = None
    _append_activity(task, action=TaskAction.RELEASE, actor=actor, details="Returned to the unassigned pool")

    store.commit("release_task", entity_id=task_id)
    _log_transition(task_id, source, target, actor)
    return task


def apply_worker_action_use_case(
    *,
    db: Session,
    project_id: str,
    task_id: str,
    worker_id: str,
    action: str | TaskAction,
    reason: str | None = None,
    details: str | None = None,
) -> Task:
    """Accept, reject, start or complete a task on behalf of its assigned worker.

    The transition is validated first, then assignment: acting on a task
    in the wrong state is always an ``InvalidTransition`` no matter who asks.
    """
    try:
        parsed = parse_action(action)
    except ValueError:
        raise ValidationError(field="action", reason=f"unknown action '{action}'") from None
    if parsed not in WORKER_ACTIONS:
        raise ValidationError(field="action", reason=f"'{parsed.value}' is not a worker action")

    store = EntityStore(db)
    task = store.get_task(task_id, project_id=project_id, for_update=True)
    source, target = _require_transition(task, parsed)
    if task.assigned_to != worker_id:
        raise TaskNotAssigned(task_id=task_id, worker_id=worker_id)

    worker = store.find_worker(worker_id)
    actor = worker.name if worker else worker_id

    details = (details or "").strip()
    task.status = target.value
    if parsed == TaskAction.REJECT:
        reason = (reason or "").strip() or settings.DEFAULT_REJECTION_REASON
        task.rejection_reason = reason
        task.assigned_to = None
        details = details or reason
    elif parsed == TaskAction.COMPLETE:
        task.completed_date = now_utc()
    _append_activity(
        task,
        action=parsed,
        actor=actor,
        details=details or default_activity_details(parsed),
    )

    # Worker-side transitions are reported to the office.
    payload = transition_payload(
        action=parsed,
        task=task,
        actor_name=actor,
        target_worker_id=settings.ADMIN_SENDER_ID,
        reason=reason,
    )
    store.commit(f"{parsed.value}_task", entity_id=task_id)
    _log_transition(task_id, source, target, actor)

    dispatch_notification(db=db, payload=payload)
    return task


def accept_task_use_case(*, db: Session, project_id: str, task_id: str, worker_id: str) -> Task:
    return apply_worker_action_use_case(
        db=db, project_id=project_id, task_id=task_id, worker_id=worker_id, action=TaskAction.ACCEPT,
    )


def reject_task_use_case(
    *, db: Session, project_id: str, task_id: str, worker_id: str, reason: str | None = None
) -> Task:
    return apply_worker_action_use_case(
        db=db, project_id=project_id, task_id=task_id, worker_id=worker_id, action=TaskAction.REJECT, reason=reason,
    )


def start_task_use_case(*, db: Session, project_id: str, task_id: str, worker_id: str) -> Task:
    return apply_worker_action_use_case(
        db=db, project_id=project_id, task_id=task_id, worker_id=worker_id, action=TaskAction.START,
    )


def complete_task_use_case(*, db: Session, project_id: str, task_id: str, worker_id: str) -> Task:
    return apply_worker_action_use_case(
        db=db, project_id=project_id, task_id=task_id, worker_id=worker_id, action=TaskAction.COMPLETE,
    )

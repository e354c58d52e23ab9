"""Notification dispatcher and read-state use-cases.

Notifications are created after the triggering mutation has committed.
A failed dispatch is rolled back on its own, logged and handed to the
Celery redelivery task; it never undoes the task transition or message
that caused it.
"""
from __future__ import annotations

import logging

from kombu.exceptions import OperationalError as BrokerUnavailable
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..domain_errors import DomainError, ValidationError
from ..models import NOTIFICATION_PRIORITIES, NOTIFICATION_TYPES, Notification, Task, new_id
from ..services.entity_store import EntityStore
from ..services.task_state import ACTIVITY_NAMES, TaskAction

logger = logging.getLogger(__name__)

REJECTED_TYPE = "task_rejected"
MESSAGE_TYPE = "message_received"

# action -> (type, priority, title)
_TRANSITION_NOTIFICATIONS: dict[TaskAction, tuple[str, str, str]] = {
    TaskAction.ASSIGN: ("task_assigned", "high", "New Task Assigned"),
    TaskAction.ACCEPT: ("task_accepted", "medium", "Task Accepted"),
    TaskAction.REJECT: (REJECTED_TYPE, "high", "Task Rejected!"),
    TaskAction.START: ("task_started", "low", "Task Started"),
    TaskAction.COMPLETE: ("task_completed", "medium", "Task Completed!"),
}


def is_office_sender(sender: str | None) -> bool:
    """Office identities push notifications to workers; everybody else does not."""
    token = (sender or "").strip().lower()
    if not token:
        return False
    return token in settings.office_sender_names or "office" in token


def message_preview(text: str) -> str:
    limit = settings.MESSAGE_NOTIFICATION_PREVIEW_CHARS
    if len(text) > limit:
        return f"Office: {text[:limit]}..."
    return f"Office: {text}"


def build_notification_payload(
    *,
    type: str,
    title: str,
    message: str,
    project_id: str | None,
    task_id: str | None,
    target_worker_id: str | None,
    priority: str = "medium",
) -> dict:
    """Serializable notification payload; the id is fixed up front so redelivery stays idempotent."""
    if type not in NOTIFICATION_TYPES:
        raise ValidationError(field="type", reason=f"unknown notification type '{type}'")
    if priority not in NOTIFICATION_PRIORITIES:
        raise ValidationError(field="priority", reason=f"unknown priority '{priority}'")
    return {
        "id": new_id(),
        "type": type,
        "title": title,
        "message": message,
        "project_id": project_id,
        "task_id": task_id,
        "target_worker_id": target_worker_id,
        "priority": priority,
    }


def transition_payload(
    *,
    action: TaskAction,
    task: Task,
    actor_name: str,
    target_worker_id: str | None,
    reason: str | None = None,
) -> dict:
    notification_type, priority, title = _TRANSITION_NOTIFICATIONS[action]
    description = task.description
    if action == TaskAction.ASSIGN:
        message = f'{actor_name} assigned you "{description}"'
    elif action == TaskAction.REJECT:
        message = f'{actor_name} rejected "{description}": {reason}'
    elif action == TaskAction.START:
        message = f'{actor_name} started working on "{description}"'
    else:
        message = f'{actor_name} {ACTIVITY_NAMES[action]} "{description}"'
    return build_notification_payload(
        type=notification_type,
        title=title,
        message=message,
        project_id=task.project_id,
        task_id=task.id,
        target_worker_id=target_worker_id,
        priority=priority,
    )


def message_payload(*, text: str, project_id: str, task_id: str, target_worker_id: str | None) -> dict:
    return build_notification_payload(
        type=MESSAGE_TYPE,
        title="New Message from Office",
        message=message_preview(text),
        project_id=project_id,
        task_id=task_id,
        target_worker_id=target_worker_id,
        priority="medium",
    )


def create_notification_use_case(*, db: Session, payload: dict) -> Notification:
    """Persist a notification built by :func:`build_notification_payload`."""
    store = EntityStore(db)
    notification = Notification(
        id=payload.get("id") or new_id(),
        type=payload["type"],
        title=payload["title"],
        message=payload["message"],
        project_id=payload.get("project_id"),
        task_id=payload.get("task_id"),
        target_worker_id=payload.get("target_worker_id"),
        priority=payload.get("priority", "medium"),
        read=False,
    )
    store.add(notification)
    store.commit("create_notification", entity="notification", entity_id=notification.id)
    logger.info(
        "Notification %s created: type=%s task=%s target=%s",
        notification.id,
        notification.type,
        notification.task_id,
        notification.target_worker_id,
    )
    return notification


def schedule_notification_retry(payload: dict) -> None:
    if not settings.NOTIFICATION_RETRY_ENABLED:
        return
    from ..celery_app import redeliver_notification

    try:
        redeliver_notification.delay(payload)
    except BrokerUnavailable:
        logger.exception("Notification redelivery could not be enqueued: %s", payload)
        return
    logger.warning("Notification %s scheduled for redelivery", payload.get("id"))


def dispatch_notification(*, db: Session, payload: dict) -> Notification | None:
    """Create the notification; on failure log it distinctly and schedule redelivery."""
    try:
        return create_notification_use_case(db=db, payload=payload)
    except (DomainError, SQLAlchemyError):
        db.rollback()
        logger.exception("Notification dispatch failed: %s", payload)
        schedule_notification_retry(payload)
        return None


def _visible_query(db: Session, *, worker_id: str):
    assigned_ids = select(Task.id).where(Task.assigned_to == worker_id)
    return db.query(Notification).filter(
        Notification.task_id.in_(assigned_ids),
        Notification.read.is_(False),
        Notification.type != REJECTED_TYPE,
    )


def list_for_worker_use_case(*, db: Session, worker_id: str) -> list[Notification]:
    """Unread notifications about the worker's current tasks, rejection notices excluded."""
    store = EntityStore(db)
    with store.guard("list_worker_notifications", entity="notification"):
        return (
            _visible_query(db, worker_id=worker_id)
            .order_by(Notification.created_at.desc(), Notification.id)
            .all()
        )


def list_all_use_case(*, db: Session, unread_only: bool = False) -> list[Notification]:
    return EntityStore(db).list_notifications(unread_only=unread_only)


def unread_count_use_case(*, db: Session) -> int:
    store = EntityStore(db)
    with store.guard("count_unread_notifications", entity="notification"):
        return db.query(Notification).filter(Notification.read.is_(False)).count()


def mark_read_use_case(*, db: Session, notification_id: str) -> Notification:
    store = EntityStore(db)
    notification = store.get_notification(notification_id, for_update=True)
    if not notification.read:
        notification.read = True
        store.commit("mark_notification_read", entity="notification", entity_id=notification_id)
    return notification


def mark_all_read_for_worker_use_case(*, db: Session, worker_id: str) -> int:
    """Mark every notification currently visible to the worker as read; nothing is deleted."""
    store = EntityStore(db)
    with store.guard("mark_worker_notifications_read", entity="notification"):
        notifications = _visible_query(db, worker_id=worker_id).with_for_update().all()
    for notification in notifications:
        notification.read = True
    if notifications:
        store.commit("mark_worker_notifications_read", entity="notification")
    return len(notifications)


def mark_all_read_use_case(*, db: Session) -> int:
    store = EntityStore(db)
    with store.guard("mark_all_notifications_read", entity="notification"):
        notifications = (
            db.query(Notification)
            .filter(Notification.read.is_(False))
            .with_for_update()
            .all()
        )
    for notification in notifications:
        notification.read = True
    if notifications:
        store.commit("mark_all_notifications_read", entity="notification")
    return len(notifications)

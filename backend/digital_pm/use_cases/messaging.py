"""Per-task message threads between the office and field workers."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..domain_errors import ValidationError
from ..models import MessageThread, ThreadMessage, now_utc
from ..services.entity_store import EntityStore
from .notifications import dispatch_notification, is_office_sender, message_payload

logger = logging.getLogger(__name__)


def send_message_use_case(*, db: Session, project_id: str, task_id: str, text: str, sender: str) -> ThreadMessage:
    """Append a message to the task's thread, creating the thread on first use."""
    text = (text or "").strip()
    sender = (sender or "").strip()
    if not text:
        raise ValidationError(field="text", reason="message text is required")
    if not sender:
        raise ValidationError(field="sender", reason="sender is required")

    store = EntityStore(db)
    task = store.get_task(task_id, project_id=project_id)
    assignee = task.assigned_to
    thread = store.get_or_create_thread(project_id, task_id)

    message = ThreadMessage(sender=sender, text=text, timestamp=now_utc(), read=False)
    thread.messages.append(message)
    thread.updated_at = now_utc()
    store.commit("send_message", entity="thread", entity_id=thread.id)
    logger.info("Message %s appended to thread %s by %s", message.id, thread.id, sender)

    if is_office_sender(sender) and assignee:
        dispatch_notification(
            db=db,
            payload=message_payload(
                text=text,
                project_id=project_id,
                task_id=task_id,
                target_worker_id=assignee,
            ),
        )
    return message


def mark_read_use_case(*, db: Session, project_id: str, task_id: str, reader_id: str) -> int:
    """Mark every message the reader did not author as read; returns how many flipped."""
    if not reader_id:
        raise ValidationError(field="reader_id", reason="reader_id is required")

    store = EntityStore(db)
    store.get_task(task_id, project_id=project_id)
    thread = store.find_thread(project_id, task_id, for_update=True)
    if thread is None:
        return 0

    updated = 0
    for message in thread.messages:
        if message.sender != reader_id and not message.read:
            message.read = True
            updated += 1
    if updated:
        thread.updated_at = now_utc()
        store.commit("mark_messages_read", entity="thread", entity_id=thread.id)
    return updated


def list_for_worker_use_case(*, db: Session, worker_id: str) -> list[MessageThread]:
    """Threads whose task is currently assigned to the worker."""
    store = EntityStore(db)
    return store.list_threads(task_ids=store.assigned_task_ids(worker_id))


def list_all_threads_use_case(*, db: Session) -> list[MessageThread]:
    return EntityStore(db).list_threads()

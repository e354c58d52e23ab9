"""Polling delta feed: everything that changed since the client's last cursor."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from ..models import MessageThread, Notification, Task, Worker, now_utc
from ..services.entity_store import EntityStore


@dataclass
class ChangeSet:
    server_time: datetime
    tasks: list[Task] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)
    threads: list[MessageThread] = field(default_factory=list)
    workers_by_id: dict[str, Worker] = field(default_factory=dict)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def changes_since_use_case(*, db: Session, since: datetime | None = None) -> ChangeSet:
    """Rows updated after ``since`` (all rows when omitted).

    ``server_time`` is captured before reading, so passing it back as the
    next ``since`` never skips a write that raced with this read.
    """
    server_time = now_utc()
    cursor = _as_utc(since)
    store = EntityStore(db)
    return ChangeSet(
        server_time=server_time,
        tasks=store.list_changed(Task, cursor),
        notifications=store.list_changed(Notification, cursor),
        threads=store.list_changed(MessageThread, cursor),
        workers_by_id={worker.id: worker for worker in store.list_workers()},
    )

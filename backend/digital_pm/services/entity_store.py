"""Entity store adapter over a SQLAlchemy session.

Use cases never touch ``Session`` error handling directly: every read
and commit goes through :class:`EntityStore`, which turns driver and
pool failures into :class:`StoreUnavailable` and lost optimistic
version checks into :class:`ConcurrentUpdate`.  The session is rolled
back in both cases so a failed request leaves no partial mutation.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator

from sqlalchemy import or_
from sqlalchemy.exc import DBAPIError, IntegrityError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from ..domain_errors import ConcurrentUpdate, NotFound, StoreUnavailable
from ..models import MessageThread, Notification, Project, Task, Worker

logger = logging.getLogger(__name__)


class EntityStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def guard(self, operation: str, *, entity: str = "task", entity_id: str | None = None) -> Iterator[None]:
        try:
            yield
        except StaleDataError:
            self.db.rollback()
            logger.warning("Concurrent update on %s %s during %s", entity, entity_id, operation)
            raise ConcurrentUpdate(entity=entity, entity_id=entity_id) from None
        except IntegrityError:
            self.db.rollback()
            logger.warning("Unique constraint race on %s %s during %s", entity, entity_id, operation)
            raise ConcurrentUpdate(entity=entity, entity_id=entity_id) from None
        except (DBAPIError, PoolTimeoutError) as exc:
            self.db.rollback()
            logger.error("Store failure during %s: %s", operation, exc)
            raise StoreUnavailable(operation=operation, reason=type(exc).__name__) from exc

    def commit(self, operation: str, *, entity: str = "task", entity_id: str | None = None) -> None:
        with self.guard(operation, entity=entity, entity_id=entity_id):
            self.db.commit()

    def add(self, instance) -> None:
        self.db.add(instance)

    def delete(self, instance) -> None:
        self.db.delete(instance)

    # Projects

    def list_projects(self) -> list[Project]:
        with self.guard("list_projects", entity="project"):
            return (
                self.db.query(Project)
                .options(selectinload(Project.tasks))
                .order_by(Project.created_at, Project.number)
                .all()
            )

    def find_project(self, project_id: str, *, for_update: bool = False) -> Project | None:
        with self.guard("get_project", entity="project", entity_id=project_id):
            query = self.db.query(Project).filter(Project.id == project_id)
            if for_update:
                query = query.with_for_update()
            return query.first()

    def get_project(self, project_id: str, *, for_update: bool = False) -> Project:
        project = self.find_project(project_id, for_update=for_update)
        if not project:
            raise NotFound(entity="project", entity_id=project_id)
        return project

    def project_number_taken(self, number: str, *, exclude_id: str | None = None) -> bool:
        with self.guard("check_project_number", entity="project"):
            query = self.db.query(Project.id).filter(Project.number == number)
            if exclude_id:
                query = query.filter(Project.id != exclude_id)
            return query.first() is not None

    def project_colors(self) -> list[str]:
        with self.guard("list_project_colors", entity="project"):
            return [row[0] for row in self.db.query(Project.color).all()]

    # Tasks

    def get_task(self, task_id: str, *, project_id: str | None = None, for_update: bool = False) -> Task:
        with self.guard("get_task", entity="task", entity_id=task_id):
            query = self.db.query(Task).filter(Task.id == task_id)
            if project_id:
                query = query.filter(Task.project_id == project_id)
            if for_update:
                query = query.with_for_update()
            task = query.first()
        if not task:
            raise NotFound(entity="task", entity_id=task_id)
        return task

    def list_tasks(self, *, assigned_to: str | None = None, project_id: str | None = None) -> list[Task]:
        with self.guard("list_tasks"):
            query = self.db.query(Task).options(selectinload(Task.project))
            if assigned_to:
                query = query.filter(Task.assigned_to == assigned_to)
            if project_id:
                query = query.filter(Task.project_id == project_id)
            return query.order_by(Task.project_id, Task.position).all()

    def list_calendar_tasks(self, week_start: date, week_end: date) -> list[Task]:
        """Assigned tasks that are unscheduled or scheduled within ``[week_start, week_end]``."""
        with self.guard("list_calendar_tasks"):
            return (
                self.db.query(Task)
                .options(selectinload(Task.project))
                .filter(
                    Task.assigned_to.isnot(None),
                    or_(
                        Task.scheduled_date.is_(None),
                        Task.scheduled_date.between(week_start, week_end),
                    ),
                )
                .order_by(Task.scheduled_date, Task.project_id, Task.position)
                .all()
            )

    def list_changed(self, model, since):
        with self.guard("list_changes", entity=model.__tablename__):
            query = self.db.query(model)
            if since is not None:
                query = query.filter(model.updated_at > since)
            return query.order_by(model.updated_at, model.id).all()

    def assigned_task_ids(self, worker_id: str) -> set[str]:
        with self.guard("list_assigned_task_ids", entity="worker", entity_id=worker_id):
            rows = self.db.query(Task.id).filter(Task.assigned_to == worker_id).all()
        return {row[0] for row in rows}

    # Workers

    def list_workers(self, *, status: str | None = None) -> list[Worker]:
        with self.guard("list_workers", entity="worker"):
            query = self.db.query(Worker)
            if status:
                query = query.filter(Worker.status == status)
            return query.order_by(Worker.name).all()

    def find_worker(self, worker_id: str) -> Worker | None:
        with self.guard("get_worker", entity="worker", entity_id=worker_id):
            return self.db.query(Worker).filter(Worker.id == worker_id).first()

    def get_worker(self, worker_id: str) -> Worker:
        worker = self.find_worker(worker_id)
        if not worker:
            raise NotFound(entity="worker", entity_id=worker_id)
        return worker

    def find_worker_by_pin(self, pin: str, *, exclude_id: str | None = None) -> Worker | None:
        with self.guard("find_worker_by_pin", entity="worker"):
            query = self.db.query(Worker).filter(Worker.pin == pin)
            if exclude_id:
                query = query.filter(Worker.id != exclude_id)
            return query.first()

    # Notifications

    def get_notification(self, notification_id: str, *, for_update: bool = False) -> Notification:
        with self.guard("get_notification", entity="notification", entity_id=notification_id):
            query = self.db.query(Notification).filter(Notification.id == notification_id)
            if for_update:
                query = query.with_for_update()
            notification = query.first()
        if not notification:
            raise NotFound(entity="notification", entity_id=notification_id)
        return notification

    def list_notifications(self, *, unread_only: bool = False) -> list[Notification]:
        with self.guard("list_notifications", entity="notification"):
            query = self.db.query(Notification)
            if unread_only:
                query = query.filter(Notification.read.is_(False))
            return query.order_by(Notification.created_at.desc(), Notification.id).all()

    # Threads

    def find_thread(self, project_id: str, task_id: str, *, for_update: bool = False) -> MessageThread | None:
        with self.guard("get_thread", entity="thread", entity_id=task_id):
            query = self.db.query(MessageThread).filter(
                MessageThread.project_id == project_id,
                MessageThread.task_id == task_id,
            )
            if for_update:
                query = query.with_for_update()
            return query.first()

    def get_or_create_thread(self, project_id: str, task_id: str) -> MessageThread:
        """Locked thread for the pair, creating it on first use.

        Two first messages racing on the same task collide on the
        ``(project_id, task_id)`` unique constraint; the loser rolls back
        and re-reads the winner's row.
        """
        thread = self.find_thread(project_id, task_id, for_update=True)
        if thread:
            return thread

        thread = MessageThread(project_id=project_id, task_id=task_id)
        self.db.add(thread)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            logger.info("Thread for task %s created concurrently, re-reading", task_id)
            thread = self.find_thread(project_id, task_id, for_update=True)
            if not thread:
                raise ConcurrentUpdate(entity="thread", entity_id=task_id) from None
        except (DBAPIError, PoolTimeoutError) as exc:
            self.db.rollback()
            logger.error("Store failure during create_thread: %s", exc)
            raise StoreUnavailable(operation="create_thread", reason=type(exc).__name__) from exc
        return thread

    def list_threads(self, *, task_ids: set[str] | None = None) -> list[MessageThread]:
        with self.guard("list_threads", entity="thread"):
            query = self.db.query(MessageThread).options(
                selectinload(MessageThread.messages),
                selectinload(MessageThread.task).selectinload(Task.project),
            )
            if task_ids is not None:
                if not task_ids:
                    return []
                query = query.filter(MessageThread.task_id.in_(task_ids))
            return query.order_by(MessageThread.updated_at.desc(), MessageThread.id).all()

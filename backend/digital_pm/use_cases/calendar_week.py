"""Calendar week read path and the schedule-task write path."""
from __future__ import annotations

import logging
from datetime import date, datetime

from sqlalchemy.orm import Session

from ..config import settings
from ..domain_errors import ValidationError
from ..models import Task
from ..services.calendar_grid import (
    VIEW_CREW,
    VIEW_MODES,
    WeekGrid,
    build_week_grid,
    date_for_day,
    week_days,
    week_start_for,
)
from ..services.entity_store import EntityStore
from ..services.task_response_builder import calendar_tasks

logger = logging.getLogger(__name__)


def _resolve_week_start(value: date | datetime | str | None) -> date:
    try:
        return week_start_for(value or date.today())
    except ValueError:
        raise ValidationError(field="start", reason="expected YYYY-MM-DD") from None


def build_week_use_case(
    *,
    db: Session,
    start: date | str | None = None,
    view: str = VIEW_CREW,
    project_id: str | None = None,
    worker_id: str | None = None,
) -> WeekGrid:
    if view not in VIEW_MODES:
        raise ValidationError(field="view", reason=f"expected one of {', '.join(VIEW_MODES)}")

    week_start = _resolve_week_start(start)
    days = week_days(week_start)
    store = EntityStore(db)

    workers = store.list_workers()
    workers_by_id = {worker.id: worker for worker in workers}
    tasks = store.list_calendar_tasks(days[0], days[-1])

    if view == VIEW_CREW:
        rows = [(worker.id, worker.name) for worker in workers if worker.status == "active"]
    else:
        rows = [
            (project.id, project.number)
            for project in store.list_projects()
            if project.status != "completed"
        ]

    return build_week_grid(
        calendar_tasks(tasks, workers_by_id),
        rows=rows,
        week_start=week_start,
        view=view,
        project_id=project_id,
        worker_id=worker_id,
    )


def schedule_task_use_case(
    *,
    db: Session,
    project_id: str,
    task_id: str,
    day_index: int,
    week_start: date | str | None = None,
) -> Task:
    """Overwrite the task's scheduled date with ``week_start + day_index``.

    Assignment and status are left untouched and no activity entry is
    written; calling it twice with the same arguments is a no-op the
    second time.
    """
    if not 0 <= day_index < settings.WORK_WEEK_DAYS:
        raise ValidationError(
            field="day_index",
            reason=f"must be between 0 and {settings.WORK_WEEK_DAYS - 1}",
        )
    start = _resolve_week_start(week_start)

    store = EntityStore(db)
    task = store.get_task(task_id, project_id=project_id, for_update=True)
    scheduled = date_for_day(start, day_index)
    if task.scheduled_date != scheduled:
        task.scheduled_date = scheduled
        store.commit("schedule_task", entity_id=task_id)
        logger.info("Task %s scheduled for %s", task_id, scheduled.isoformat())
    return task

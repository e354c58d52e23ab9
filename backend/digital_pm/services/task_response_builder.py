"""Denormalized response builders for tasks, projects, threads and calendar grids."""
from __future__ import annotations

from typing import Iterable

from ..models import MessageThread, Project, Task, Worker
from ..schemas import (
    CalendarCellResponse,
    CalendarRowResponse,
    CalendarTaskResponse,
    CalendarWeekResponse,
    DayBucketResponse,
    MaterialItem,
    MessageResponse,
    ProjectResponse,
    TaskActivityResponse,
    TaskResponse,
    ThreadResponse,
    WorkerTaskResponse,
)
from .calendar_grid import CalendarTask, WeekGrid, coerce_date
from .task_state import PHASE_LABELS, normalize_task_status, task_phase


def _task_fields(task: Task) -> dict:
    phase = task_phase(task.status)
    return {
        "id": task.id,
        "project_id": task.project_id,
        "position": task.position or 0,
        "description": task.description,
        "quantity": task.quantity,
        "price": task.price,
        "amount": task.amount,
        "type": task.type,
        "estimated_hours": task.estimated_hours or 0,
        "status": normalize_task_status(task.status).value,
        "phase": phase,
        "phase_label": PHASE_LABELS[phase],
        "assigned_to": task.assigned_to,
        "assigned_by": task.assigned_by,
        "assigned_at": task.assigned_at,
        "scheduled_date": task.scheduled_date,
        "completed_date": task.completed_date,
        "rejection_reason": task.rejection_reason,
        "materials": [MaterialItem.model_validate(item) for item in (task.materials or [])],
        "activity": [TaskActivityResponse.model_validate(entry) for entry in task.activity],
        "version": task.version,
        "created_at": task.created_at,
        "updated_at": task.updated_at,
    }


def task_to_response(task: Task) -> TaskResponse:
    return TaskResponse(**_task_fields(task))


def worker_task_to_response(task: Task, workers_by_id: dict[str, Worker] | None = None) -> WorkerTaskResponse:
    project: Project = task.project
    worker = (workers_by_id or {}).get(task.assigned_to) if task.assigned_to else None
    return WorkerTaskResponse(
        **_task_fields(task),
        project_number=project.number,
        client_name=project.client_name,
        client_address=project.client_address or "",
        project_color=project.color,
        worker_name=worker.name if worker else None,
    )


def project_to_response(project: Project) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        number=project.number,
        client_name=project.client_name,
        client_address=project.client_address or "",
        client_phone=project.client_phone,
        status=project.status,
        color=project.color,
        total_amount=round(sum(task.amount or 0 for task in project.tasks), 2),
        tasks=[task_to_response(task) for task in project.tasks],
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def unread_for_viewer(thread: MessageThread, viewer_id: str) -> int:
    """Messages still unread that the viewer did not author."""
    return sum(1 for message in thread.messages if not message.read and message.sender != viewer_id)


def thread_to_response(thread: MessageThread, *, viewer_id: str) -> ThreadResponse:
    task = thread.task
    project = task.project if task else None
    return ThreadResponse(
        id=thread.id,
        project_id=thread.project_id,
        task_id=thread.task_id,
        project_number=project.number if project else "",
        project_color=project.color if project else "gray",
        task_description=task.description if task else "",
        messages=[MessageResponse.model_validate(message) for message in thread.messages],
        unread_count=unread_for_viewer(thread, viewer_id),
        updated_at=thread.updated_at,
    )


def calendar_tasks(tasks: Iterable[Task], workers_by_id: dict[str, Worker]) -> list[CalendarTask]:
    result = []
    for task in tasks:
        project = task.project
        worker = workers_by_id.get(task.assigned_to) if task.assigned_to else None
        result.append(
            CalendarTask(
                task_id=task.id,
                project_id=task.project_id,
                project_number=project.number,
                project_color=project.color,
                client_name=project.client_name,
                client_address=project.client_address or "",
                description=task.description,
                status=normalize_task_status(task.status).value,
                type=task.type,
                estimated_hours=float(task.estimated_hours or 0),
                assigned_to=task.assigned_to,
                worker_name=worker.name if worker else "Unassigned",
                scheduled_date=coerce_date(task.scheduled_date),
            )
        )
    return result


def week_grid_to_response(grid: WeekGrid) -> CalendarWeekResponse:
    rows = []
    for row in grid.rows:
        cells = [
            CalendarCellResponse(
                day=cell.day,
                date=cell.date,
                tasks=[CalendarTaskResponse.model_validate(task) for task in cell.tasks],
                total_hours=cell.signal.total_hours,
                overloaded=cell.signal.is_overloaded,
                multi_task=cell.signal.has_multiple,
                conflict=cell.conflict,
                severity=cell.signal.severity,
            )
            for cell in row.cells
        ]
        rows.append(CalendarRowResponse(row_id=row.row_id, label=row.label, cells=cells))

    buckets = [
        DayBucketResponse(
            day=bucket.day,
            date=bucket.date,
            tasks=[CalendarTaskResponse.model_validate(task) for task in bucket.tasks],
            total_hours=bucket.total_hours,
            overloaded_cells=bucket.overloaded_cells,
            conflict_cells=bucket.conflict_cells,
            has_conflict=bucket.has_conflict,
        )
        for bucket in grid.buckets
    ]

    return CalendarWeekResponse(
        week_start=grid.week_start,
        view=grid.view,
        days=grid.days,
        rows=rows,
        buckets=buckets,
    )

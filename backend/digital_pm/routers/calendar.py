"""Weekly scheduling calendar endpoints."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import CalendarWeekResponse, ScheduleTaskRequest, TaskResponse
from ..services.calendar_grid import VIEW_CREW
from ..services.task_response_builder import task_to_response, week_grid_to_response
from ..use_cases.calendar_week import build_week_use_case, schedule_task_use_case

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("/week", response_model=CalendarWeekResponse)
def get_week(
    start: Optional[date] = None,
    view: str = Query(VIEW_CREW, pattern="^(crew|project)$"),
    project_id: Optional[str] = None,
    worker_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Worker x day (crew) or project x day grid for the week containing ``start``."""
    grid = build_week_use_case(
        db=db,
        start=start,
        view=view,
        project_id=project_id,
        worker_id=worker_id,
    )
    return week_grid_to_response(grid)


@router.post("/schedule-task", response_model=TaskResponse)
def schedule_task(data: ScheduleTaskRequest, db: Session = Depends(get_db)):
    """Move a task onto a day of the visible week."""
    task = schedule_task_use_case(
        db=db,
        project_id=data.project_id,
        task_id=data.task_id,
        day_index=data.day_index,
        week_start=data.week_start,
    )
    return task_to_response(task)

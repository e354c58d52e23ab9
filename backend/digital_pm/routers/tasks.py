"""Admin-side task lifecycle endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import AssignTaskRequest, ReleaseTaskRequest, TaskResponse
from ..services.task_response_builder import task_to_response
from ..use_cases.task_transitions import assign_task_use_case, release_task_use_case

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("/assign", response_model=TaskResponse)
def assign_task(data: AssignTaskRequest, db: Session = Depends(get_db)):
    """Assign task to a worker (status -> pending_acceptance)."""
    task = assign_task_use_case(
        db=db,
        project_id=data.project_id,
        task_id=data.task_id,
        worker_id=data.worker_id,
        scheduled_date=data.scheduled_date,
        estimated_hours=data.estimated_hours,
        assigned_by=data.assigned_by,
    )
    return task_to_response(task)


@router.post("/release", response_model=TaskResponse)
def release_task(data: ReleaseTaskRequest, db: Session = Depends(get_db)):
    """Return a rejected task to the unassigned pool."""
    task = release_task_use_case(
        db=db,
        project_id=data.project_id,
        task_id=data.task_id,
        released_by=data.released_by,
    )
    return task_to_response(task)

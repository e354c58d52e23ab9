"""Project and project-task directory endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import ProjectCreate, ProjectResponse, ProjectUpdate, TaskCreate, TaskResponse, TaskUpdate
from ..services.entity_store import EntityStore
from ..services.task_response_builder import project_to_response, task_to_response
from ..use_cases.directory import (
    add_task_use_case,
    create_project_use_case,
    delete_project_use_case,
    delete_task_use_case,
    update_project_use_case,
    update_task_use_case,
)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectResponse])
def list_projects(db: Session = Depends(get_db)):
    """List projects with their tasks."""
    return [project_to_response(project) for project in EntityStore(db).list_projects()]


@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(data: ProjectCreate, db: Session = Depends(get_db)):
    """Create project; colour is picked from the palette when omitted."""
    payload = data.model_dump()
    project = create_project_use_case(db=db, **payload)
    return project_to_response(project)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, db: Session = Depends(get_db)):
    return project_to_response(EntityStore(db).get_project(project_id))


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(project_id: str, data: ProjectUpdate, db: Session = Depends(get_db)):
    project = update_project_use_case(db=db, project_id=project_id, changes=data.model_dump(exclude_unset=True))
    return project_to_response(project)


@router.delete("/{project_id}", status_code=204)
def delete_project(project_id: str, db: Session = Depends(get_db)):
    """Delete project with its tasks, threads and notifications."""
    delete_project_use_case(db=db, project_id=project_id)


@router.post("/{project_id}/tasks", response_model=TaskResponse, status_code=201)
def add_task(project_id: str, data: TaskCreate, db: Session = Depends(get_db)):
    task = add_task_use_case(db=db, project_id=project_id, data=data.model_dump())
    return task_to_response(task)


@router.put("/{project_id}/tasks/{task_id}", response_model=TaskResponse)
def update_task(project_id: str, task_id: str, data: TaskUpdate, db: Session = Depends(get_db)):
    """Edit descriptive task fields."""
    task = update_task_use_case(
        db=db,
        project_id=project_id,
        task_id=task_id,
        changes=data.model_dump(exclude_unset=True),
    )
    return task_to_response(task)


@router.delete("/{project_id}/tasks/{task_id}", status_code=204)
def delete_task(project_id: str, task_id: str, db: Session = Depends(get_db)):
    delete_task_use_case(db=db, project_id=project_id, task_id=task_id)

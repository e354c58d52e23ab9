"""Project, task and crew directory use-cases (admin CRUD)."""
from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy.orm import Session

from ..domain_errors import NotFound, PinConflict, ValidationError
from ..models import Project, Task, Worker
from ..services.entity_store import EntityStore
from ..services.task_catalog import (
    PROJECT_COLORS,
    PROJECT_STATUSES,
    compute_amount,
    generate_worker_pin,
    is_valid_pin,
    normalize_task_type,
    normalize_worker_status,
    pick_project_color,
)
from ..services.task_state import TaskStatus

logger = logging.getLogger(__name__)

PIN_GENERATION_ATTEMPTS = 50

_TASK_FIELDS = ("description", "quantity", "price", "type", "estimated_hours", "materials")
_PROJECT_FIELDS = ("number", "client_name", "client_address", "client_phone", "status", "color")
_WORKER_FIELDS = ("name", "phone", "email", "role", "status", "skills", "pin")


def _task_type(value: str | None, description: str | None) -> str:
    try:
        return normalize_task_type(value, description=description)
    except ValueError as exc:
        raise ValidationError(field="type", reason=str(exc)) from None


def _materials(items: Iterable[Any] | None) -> list[dict]:
    result = []
    for item in items or []:
        if hasattr(item, "model_dump"):
            item = item.model_dump()
        result.append(dict(item))
    return result


def _build_task(data: dict) -> Task:
    description = (data.get("description") or "").strip()
    if not description:
        raise ValidationError(field="description", reason="task description is required")
    hours = data.get("estimated_hours") or 0
    if hours < 0:
        raise ValidationError(field="estimated_hours", reason="must be >= 0")
    quantity = data.get("quantity", 1)
    price = data.get("price", 0)
    return Task(
        description=description,
        quantity=quantity,
        price=price,
        amount=compute_amount(quantity, price),
        type=_task_type(data.get("type"), description),
        estimated_hours=hours,
        status=TaskStatus.UNASSIGNED.value,
        materials=_materials(data.get("materials")),
    )


def _check_project_status(status: str) -> None:
    if status not in PROJECT_STATUSES:
        raise ValidationError(field="status", reason=f"expected one of {', '.join(PROJECT_STATUSES)}")


def _check_color(color: str) -> None:
    if color not in PROJECT_COLORS:
        raise ValidationError(field="color", reason=f"expected one of {', '.join(PROJECT_COLORS)}")


def create_project_use_case(
    *,
    db: Session,
    number: str,
    client_name: str,
    client_address: str = "",
    client_phone: str | None = None,
    status: str = "active",
    color: str | None = None,
    tasks: Iterable[dict] = (),
) -> Project:
    number = (number or "").strip()
    if not number:
        raise ValidationError(field="number", reason="project number is required")
    _check_project_status(status)

    store = EntityStore(db)
    if store.project_number_taken(number):
        raise ValidationError(field="number", reason=f"project number '{number}' already exists")

    if color:
        _check_color(color)
    else:
        used = store.project_colors()
        color = pick_project_color(used, len(used))

    project = Project(
        number=number,
        client_name=client_name,
        client_address=client_address or "",
        client_phone=client_phone,
        status=status,
        color=color,
    )
    for data in tasks:
        project.tasks.append(_build_task(dict(data)))
    store.add(project)
    store.commit("create_project", entity="project")
    logger.info("Project %s (%s) created with %d tasks", project.id, number, len(project.tasks))
    return project


def update_project_use_case(*, db: Session, project_id: str, changes: dict) -> Project:
    store = EntityStore(db)
    project = store.get_project(project_id, for_update=True)
    updates = {key: value for key, value in changes.items() if key in _PROJECT_FIELDS and value is not None}

    if "number" in updates:
        updates["number"] = updates["number"].strip()
        if store.project_number_taken(updates["number"], exclude_id=project_id):
            raise ValidationError(field="number", reason=f"project number '{updates['number']}' already exists")
    if "status" in updates:
        _check_project_status(updates["status"])
    if "color" in updates:
        _check_color(updates["color"])

    for key, value in updates.items():
        setattr(project, key, value)
    store.commit("update_project", entity="project", entity_id=project_id)
    return project


def delete_project_use_case(*, db: Session, project_id: str) -> None:
    """Delete the project with its tasks, activity, threads and notifications."""
    store = EntityStore(db)
    project = store.get_project(project_id, for_update=True)
    store.delete(project)
    store.commit("delete_project", entity="project", entity_id=project_id)
    logger.info("Project %s deleted", project_id)


def add_task_use_case(*, db: Session, project_id: str, data: dict) -> Task:
    store = EntityStore(db)
    project = store.get_project(project_id, for_update=True)
    task = _build_task(data)
    project.tasks.append(task)
    store.commit("add_task", entity="project", entity_id=project_id)
    return task


def update_task_use_case(*, db: Session, project_id: str, task_id: str, changes: dict) -> Task:
    """Edit descriptive fields; status and assignment belong to the lifecycle use-cases."""
    store = EntityStore(db)
    task = store.get_task(task_id, project_id=project_id, for_update=True)
    updates = {key: value for key, value in changes.items() if key in _TASK_FIELDS and value is not None}

    if "description" in updates:
        updates["description"] = updates["description"].strip()
        if not updates["description"]:
            raise ValidationError(field="description", reason="task description is required")
    if "type" in updates:
        updates["type"] = _task_type(updates["type"], updates.get("description", task.description))
    if "estimated_hours" in updates and updates["estimated_hours"] < 0:
        raise ValidationError(field="estimated_hours", reason="must be >= 0")
    if "materials" in updates:
        updates["materials"] = _materials(updates["materials"])

    for key, value in updates.items():
        setattr(task, key, value)
    task.amount = compute_amount(task.quantity, task.price)
    store.commit("update_task", entity_id=task_id)
    return task


def delete_task_use_case(*, db: Session, project_id: str, task_id: str) -> None:
    store = EntityStore(db)
    project = store.get_project(project_id, for_update=True)
    task = store.get_task(task_id, project_id=project_id)
    project.tasks.remove(task)
    store.commit("delete_task", entity_id=task_id)
    logger.info("Task %s removed from project %s", task_id, project_id)


def _status(value: str | None) -> str:
    try:
        return normalize_worker_status(value)
    except ValueError as exc:
        raise ValidationError(field="status", reason=str(exc)) from None


def _claim_pin(store: EntityStore, pin: str | None, *, worker_id: str | None = None) -> str:
    if pin:
        if not is_valid_pin(pin):
            raise ValidationError(field="pin", reason="PIN must be exactly 4 digits")
        if store.find_worker_by_pin(pin, exclude_id=worker_id):
            raise PinConflict(pin=pin)
        return pin

    for _ in range(PIN_GENERATION_ATTEMPTS):
        candidate = generate_worker_pin()
        if not store.find_worker_by_pin(candidate, exclude_id=worker_id):
            return candidate
    raise ValidationError(field="pin", reason="no free PIN could be generated")


def create_worker_use_case(
    *,
    db: Session,
    name: str,
    phone: str | None = None,
    email: str | None = None,
    role: str = "technician",
    status: str | None = "active",
    skills: Iterable[str] = (),
    pin: str | None = None,
) -> Worker:
    name = (name or "").strip()
    if not name:
        raise ValidationError(field="name", reason="worker name is required")

    store = EntityStore(db)
    worker = Worker(
        name=name,
        phone=phone,
        email=email,
        role=role or "technician",
        status=_status(status),
        skills=sorted(set(skills or [])),
        pin=_claim_pin(store, pin),
    )
    store.add(worker)
    store.commit("create_worker", entity="worker")
    logger.info("Worker %s (%s) created", worker.id, name)
    return worker


def update_worker_use_case(*, db: Session, worker_id: str, changes: dict) -> Worker:
    store = EntityStore(db)
    worker = store.get_worker(worker_id)
    updates = {key: value for key, value in changes.items() if key in _WORKER_FIELDS and value is not None}

    if "status" in updates:
        updates["status"] = _status(updates["status"])
    if "pin" in updates and updates["pin"] != worker.pin:
        updates["pin"] = _claim_pin(store, updates["pin"], worker_id=worker_id)
    if "skills" in updates:
        updates["skills"] = sorted(set(updates["skills"]))

    for key, value in updates.items():
        setattr(worker, key, value)
    store.commit("update_worker", entity="worker", entity_id=worker_id)
    return worker


def delete_worker_use_case(*, db: Session, worker_id: str) -> None:
    store = EntityStore(db)
    worker = store.get_worker(worker_id)
    store.delete(worker)
    store.commit("delete_worker", entity="worker", entity_id=worker_id)
    logger.info("Worker %s deleted", worker_id)


def find_worker_by_pin_use_case(*, db: Session, pin: str) -> Worker:
    """Login lookup: resolve a worker from their PIN."""
    if not is_valid_pin(pin):
        raise ValidationError(field="pin", reason="PIN must be exactly 4 digits")
    worker = EntityStore(db).find_worker_by_pin(pin)
    if not worker:
        raise NotFound(entity="worker", entity_id=pin, message="No worker with this PIN")
    return worker

"""Field worker endpoints: own tasks, lifecycle actions, messages, notifications."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import (
    MarkReadResult,
    MessageCreate,
    MessageMarkReadRequest,
    MessageResponse,
    NotificationListResponse,
    NotificationResponse,
    ThreadResponse,
    WorkerNotificationMarkRequest,
    WorkerTaskResponse,
    WorkerUpdateTaskRequest,
)
from ..services.entity_store import EntityStore
from ..services.task_response_builder import thread_to_response, worker_task_to_response
from ..use_cases import messaging, notifications
from ..use_cases.task_transitions import apply_worker_action_use_case

router = APIRouter(prefix="/worker", tags=["worker"])


@router.get("/tasks", response_model=list[WorkerTaskResponse])
def get_worker_tasks(worker_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Tasks currently assigned to the worker, with project display fields."""
    store = EntityStore(db)
    worker = store.get_worker(worker_id)
    tasks = store.list_tasks(assigned_to=worker_id)
    return [worker_task_to_response(task, {worker.id: worker}) for task in tasks]


@router.post("/update-task", response_model=WorkerTaskResponse)
def update_task(data: WorkerUpdateTaskRequest, db: Session = Depends(get_db)):
    """Accept, reject, start or complete an assigned task."""
    task = apply_worker_action_use_case(
        db=db,
        project_id=data.project_id,
        task_id=data.task_id,
        worker_id=data.worker_id,
        action=data.action,
        reason=data.reason,
        details=data.details,
    )
    return worker_task_to_response(task)


@router.get("/messages", response_model=list[ThreadResponse])
def get_messages(worker_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    threads = messaging.list_for_worker_use_case(db=db, worker_id=worker_id)
    return [thread_to_response(thread, viewer_id=worker_id) for thread in threads]


@router.post("/messages", response_model=MessageResponse, status_code=201)
def send_message(data: MessageCreate, db: Session = Depends(get_db)):
    return messaging.send_message_use_case(
        db=db,
        project_id=data.project_id,
        task_id=data.task_id,
        text=data.text,
        sender=data.sender,
    )


@router.put("/messages", response_model=MarkReadResult)
def mark_messages_read(data: MessageMarkReadRequest, db: Session = Depends(get_db)):
    """Mark every message in the thread not authored by the reader as read."""
    updated = messaging.mark_read_use_case(
        db=db,
        project_id=data.project_id,
        task_id=data.task_id,
        reader_id=data.reader_id,
    )
    return MarkReadResult(updated=updated)


@router.get("/notifications", response_model=NotificationListResponse)
def get_notifications(worker_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Unread notifications about the worker's tasks, excluding rejection notices."""
    items = notifications.list_for_worker_use_case(db=db, worker_id=worker_id)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(item) for item in items],
        unread_count=len(items),
    )


@router.put("/notifications", response_model=MarkReadResult)
def mark_notifications_read(data: WorkerNotificationMarkRequest, db: Session = Depends(get_db)):
    if data.mark_all or not data.notification_id:
        updated = notifications.mark_all_read_for_worker_use_case(db=db, worker_id=data.worker_id)
        return MarkReadResult(updated=updated)

    notification = notifications.mark_read_use_case(db=db, notification_id=data.notification_id)
    return MarkReadResult(updated=1 if notification.read else 0)


@router.delete("/notifications", response_model=MarkReadResult)
def clear_notifications(worker_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Clear the worker's feed; notifications are marked read, never deleted."""
    updated = notifications.mark_all_read_for_worker_use_case(db=db, worker_id=worker_id)
    return MarkReadResult(updated=updated)

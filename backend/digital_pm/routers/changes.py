"""Polling change feed."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas import ChangesResponse, NotificationResponse
from ..services.task_response_builder import thread_to_response, worker_task_to_response
from ..use_cases.changes import changes_since_use_case

router = APIRouter(prefix="/changes", tags=["changes"])


@router.get("", response_model=ChangesResponse)
def get_changes(since: Optional[datetime] = None, db: Session = Depends(get_db)):
    """Tasks, notifications and threads updated after ``since``; pass back ``server_time`` next poll."""
    changes = changes_since_use_case(db=db, since=since)
    return ChangesResponse(
        server_time=changes.server_time,
        tasks=[worker_task_to_response(task, changes.workers_by_id) for task in changes.tasks],
        notifications=[NotificationResponse.model_validate(item) for item in changes.notifications],
        threads=[thread_to_response(thread, viewer_id=settings.ADMIN_SENDER_ID) for thread in changes.threads],
    )

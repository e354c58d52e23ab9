"""Admin notification feed endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import MarkReadResult, NotificationListResponse, NotificationResponse
from ..use_cases.notifications import (
    list_all_use_case,
    mark_all_read_use_case,
    mark_read_use_case,
    unread_count_use_case,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(unread_only: bool = False, db: Session = Depends(get_db)):
    """All notifications, newest first, including rejection notices."""
    items = list_all_use_case(db=db, unread_only=unread_only)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(item) for item in items],
        unread_count=unread_count_use_case(db=db),
    )


@router.put("/read-all", response_model=MarkReadResult)
def mark_all_read(db: Session = Depends(get_db)):
    return MarkReadResult(updated=mark_all_read_use_case(db=db))


@router.put("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(notification_id: str, db: Session = Depends(get_db)):
    return mark_read_use_case(db=db, notification_id=notification_id)

"""Admin message center endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas import ThreadResponse
from ..services.task_response_builder import thread_to_response
from ..use_cases.messaging import list_all_threads_use_case

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=list[ThreadResponse])
def list_threads(db: Session = Depends(get_db)):
    """Every thread with the office-side unread count."""
    threads = list_all_threads_use_case(db=db)
    return [thread_to_response(thread, viewer_id=settings.ADMIN_SENDER_ID) for thread in threads]

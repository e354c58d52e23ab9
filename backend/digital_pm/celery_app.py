"""
Celery worker for notification redelivery.

A notification whose dispatch failed after the triggering transition
committed is re-created here with exponential backoff.  The payload
carries a fixed notification id, so a redelivery that races a late
success never produces a duplicate row.
"""
from celery import Celery
from sqlalchemy.exc import SQLAlchemyError
import logging
from .config import settings
from .database import SessionLocal
from .domain_errors import StoreUnavailable, ConcurrentUpdate
from .models import Notification

logger = logging.getLogger(__name__)

celery_app = Celery(
    "digital_pm",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
)


@celery_app.task(
    name="redeliver_notification",
    autoretry_for=(SQLAlchemyError, StoreUnavailable, ConcurrentUpdate),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    max_retries=settings.NOTIFICATION_RETRY_MAX_ATTEMPTS,
)
def redeliver_notification(payload: dict):
    """Create a notification from a dispatch payload unless it already exists."""
    from .use_cases.notifications import create_notification_use_case

    db = SessionLocal()
    try:
        notification_id = payload.get("id")
        if notification_id:
            existing = db.query(Notification).filter(Notification.id == notification_id).first()
            if existing:
                logger.info("Skipping duplicate notification redelivery: %s", notification_id)
                return {"created": False, "id": notification_id}

        notification = create_notification_use_case(db=db, payload=payload)
        logger.info("Redelivered notification %s", notification.id)
        return {"created": True, "id": notification.id}

    except (SQLAlchemyError, StoreUnavailable, ConcurrentUpdate):
        db.rollback()
        logger.warning("Notification redelivery failed, will retry: %s", payload.get("id"), exc_info=True)
        raise

    finally:
        db.close()

"""FastAPI application."""
import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .domain_errors import DomainError, StoreUnavailable
from .problem_details import domain_error_handler
from .routers import calendar, changes, messages, notifications, projects, tasks, worker, workers

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create app
app = FastAPI(
    title="Digital PM Scheduling",
    version="1.0.0",
    description="Backend API for construction task scheduling, crew calendar and field messaging"
)

# Production safety checks.
if settings.ENV.lower() == "production" and not settings.cors_origins:
    raise RuntimeError("ALLOWED_ORIGINS must be set in production (explicit frontend origin required).")
if settings.ENV.lower() == "production" and any(origin.strip() == "*" for origin in settings.cors_origins):
    raise RuntimeError("ALLOWED_ORIGINS must be explicit in production (no wildcard when using credentials).")

# CORS
cors_methods = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
cors_headers = ["Content-Type"]
if settings.ENV.lower() != "production":
    cors_headers = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=cors_methods,
    allow_headers=cors_headers,
)

app.add_exception_handler(DomainError, domain_error_handler)

# Include routers
app.include_router(projects.router, prefix="/api/v1")
app.include_router(workers.router, prefix="/api/v1")
app.include_router(tasks.router, prefix="/api/v1")
app.include_router(worker.router, prefix="/api/v1")
app.include_router(calendar.router, prefix="/api/v1")
app.include_router(notifications.router, prefix="/api/v1")
app.include_router(messages.router, prefix="/api/v1")
app.include_router(changes.router, prefix="/api/v1")


@app.get("/api/v1/system/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise StoreUnavailable(operation="health_check", reason=type(exc).__name__) from exc
    return {
        "status": "ok",
        "version": "1.0.0",
        "database": "ok",
    }


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Digital PM Scheduling API",
        "version": "1.0.0",
        "docs": "/docs"
    }

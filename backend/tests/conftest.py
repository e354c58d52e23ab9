from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from digital_pm import models  # noqa: F401
from digital_pm.database import Base
from digital_pm.use_cases.directory import create_project_use_case, create_worker_use_case


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def notification_retries(monkeypatch):
    """Capture redelivery payloads instead of talking to the Celery broker."""
    scheduled: list[dict] = []
    monkeypatch.setattr(
        "digital_pm.use_cases.notifications.schedule_notification_retry",
        scheduled.append,
    )
    return scheduled


@pytest.fixture()
def site(db):
    """Two workers and one project with four unassigned tasks."""
    alice = create_worker_use_case(db=db, name="Alice Carter", pin="1111", skills=["HVAC"])
    bob = create_worker_use_case(db=db, name="Bob Diaz", pin="2222", skills=["Painting"])
    project = create_project_use_case(
        db=db,
        number="2011",
        client_name="Jack Shippee",
        client_address="2690 Stuart St, Denver CO 80212",
        tasks=[
            {"description": "Full AC service", "quantity": 1, "price": 475, "estimated_hours": 3},
            {"description": "Install outlets", "quantity": 4, "price": 35.5, "estimated_hours": 5},
            {"description": "Paint hallway", "quantity": 1, "price": 600, "estimated_hours": 6},
            {"description": "Repair drain", "quantity": 1, "price": 220, "estimated_hours": 4},
        ],
    )
    return SimpleNamespace(
        project=project,
        tasks=list(project.tasks),
        alice=alice,
        bob=bob,
    )

"""Crew directory endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import WorkerCreate, WorkerResponse, WorkerUpdate
from ..services.entity_store import EntityStore
from ..use_cases.directory import (
    create_worker_use_case,
    delete_worker_use_case,
    find_worker_by_pin_use_case,
    update_worker_use_case,
)

router = APIRouter(prefix="/workers", tags=["workers"])


@router.get("", response_model=list[WorkerResponse])
def list_workers(status: Optional[str] = None, db: Session = Depends(get_db)):
    return EntityStore(db).list_workers(status=status)


@router.post("", response_model=WorkerResponse, status_code=201)
def create_worker(data: WorkerCreate, db: Session = Depends(get_db)):
    """Create worker; a unique 4-digit PIN is generated when omitted."""
    return create_worker_use_case(db=db, **data.model_dump())


@router.get("/by-pin/{pin}", response_model=WorkerResponse)
def get_worker_by_pin(pin: str, db: Session = Depends(get_db)):
    """Resolve a worker from the PIN entered at login."""
    return find_worker_by_pin_use_case(db=db, pin=pin)


@router.get("/{worker_id}", response_model=WorkerResponse)
def get_worker(worker_id: str, db: Session = Depends(get_db)):
    return EntityStore(db).get_worker(worker_id)


@router.put("/{worker_id}", response_model=WorkerResponse)
def update_worker(worker_id: str, data: WorkerUpdate, db: Session = Depends(get_db)):
    return update_worker_use_case(db=db, worker_id=worker_id, changes=data.model_dump(exclude_unset=True))


@router.delete("/{worker_id}", status_code=204)
def delete_worker(worker_id: str, db: Session = Depends(get_db)):
    delete_worker_use_case(db=db, worker_id=worker_id)

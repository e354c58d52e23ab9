"""Pydantic schemas for API."""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import date, datetime

# Calendar cells carry a field named "date"; annotate through an alias.
OptionalDate = Optional[date]


# Task schemas
class MaterialItem(BaseModel):
    name: str
    quantity: float = 0
    unit: str = ""
    estimated_cost: float = 0


class TaskActivityResponse(BaseModel):
    id: str
    timestamp: datetime
    action: str
    actor: str
    details: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class TaskCreate(BaseModel):
    description: str = Field(min_length=1)
    quantity: float = Field(default=1, ge=0)
    price: float = Field(default=0, ge=0)
    type: Optional[str] = None
    estimated_hours: float = Field(default=0, ge=0)
    materials: list[MaterialItem] = []


class TaskUpdate(BaseModel):
    """Descriptive fields only; status and assignment go through the lifecycle endpoints."""

    description: Optional[str] = Field(default=None, min_length=1)
    quantity: Optional[float] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0)
    type: Optional[str] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    materials: Optional[list[MaterialItem]] = None


class TaskResponse(BaseModel):
    id: str
    project_id: str
    position: int
    description: str
    quantity: float
    price: float
    amount: float
    type: str
    estimated_hours: float
    status: str
    phase: int
    phase_label: str
    assigned_to: Optional[str] = None
    assigned_by: Optional[str] = None
    assigned_at: Optional[datetime] = None
    scheduled_date: Optional[date] = None
    completed_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    materials: list[MaterialItem] = []
    activity: list[TaskActivityResponse] = []
    version: int
    created_at: datetime
    updated_at: datetime


class WorkerTaskResponse(TaskResponse):
    """Task denormalized with the owning project's display fields."""

    project_number: str
    client_name: str
    client_address: str
    project_color: str
    worker_name: Optional[str] = None


# Project schemas
class ProjectCreate(BaseModel):
    number: str = Field(min_length=1)
    client_name: str = Field(min_length=1)
    client_address: str = ""
    client_phone: Optional[str] = None
    status: str = Field(default="active", pattern="^(active|completed|on-hold)$")
    color: Optional[str] = None
    tasks: list[TaskCreate] = []


class ProjectUpdate(BaseModel):
    number: Optional[str] = Field(default=None, min_length=1)
    client_name: Optional[str] = Field(default=None, min_length=1)
    client_address: Optional[str] = None
    client_phone: Optional[str] = None
    status: Optional[str] = Field(default=None, pattern="^(active|completed|on-hold)$")
    color: Optional[str] = None


class ProjectResponse(BaseModel):
    id: str
    number: str
    client_name: str
    client_address: str
    client_phone: Optional[str] = None
    status: str
    color: str
    total_amount: float
    tasks: list[TaskResponse] = []
    created_at: datetime
    updated_at: datetime


# Worker schemas
class WorkerCreate(BaseModel):
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    role: str = "technician"
    status: str = "active"
    skills: list[str] = []
    pin: Optional[str] = Field(default=None, pattern=r"^\d{4}$")


class WorkerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    skills: Optional[list[str]] = None
    pin: Optional[str] = Field(default=None, pattern=r"^\d{4}$")


class WorkerResponse(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    role: str
    status: str
    skills: list[str] = []
    pin: str
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# Lifecycle requests
class AssignTaskRequest(BaseModel):
    project_id: str
    task_id: str
    worker_id: Optional[str] = None
    scheduled_date: Optional[date] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    assigned_by: str = "Admin"


class ReleaseTaskRequest(BaseModel):
    project_id: str
    task_id: str
    released_by: str = "Admin"


class WorkerUpdateTaskRequest(BaseModel):
    project_id: str
    task_id: str
    worker_id: str
    action: str
    reason: Optional[str] = None
    details: Optional[str] = None


# Calendar schemas
class ScheduleTaskRequest(BaseModel):
    task_id: str
    project_id: str
    day_index: int
    week_start: Optional[date] = None


class CalendarTaskResponse(BaseModel):
    task_id: str
    project_id: str
    project_number: str
    project_color: str
    client_name: str
    client_address: str
    description: str
    status: str
    type: Optional[str] = None
    estimated_hours: float
    assigned_to: Optional[str] = None
    worker_name: str
    scheduled_date: Optional[date] = None
    day: int
    model_config = ConfigDict(from_attributes=True)


class CalendarCellResponse(BaseModel):
    day: int
    date: OptionalDate = None
    tasks: list[CalendarTaskResponse] = []
    total_hours: float
    overloaded: bool
    multi_task: bool
    conflict: bool
    severity: str


class CalendarRowResponse(BaseModel):
    row_id: str
    label: str
    cells: list[CalendarCellResponse] = []


class DayBucketResponse(BaseModel):
    day: int
    date: OptionalDate = None
    tasks: list[CalendarTaskResponse] = []
    total_hours: float
    overloaded_cells: int
    conflict_cells: int
    has_conflict: bool


class CalendarWeekResponse(BaseModel):
    week_start: date
    view: str
    days: list[date]
    rows: list[CalendarRowResponse] = []
    buckets: list[DayBucketResponse] = []


# Notification schemas
class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    target_worker_id: Optional[str] = None
    priority: str
    read: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse] = []
    unread_count: int


class WorkerNotificationMarkRequest(BaseModel):
    """Mark one notification (``notification_id``) or all visible ones (``mark_all``)."""

    worker_id: str
    notification_id: Optional[str] = None
    mark_all: bool = False


class MarkReadResult(BaseModel):
    updated: int


# Messaging schemas
class MessageCreate(BaseModel):
    project_id: str
    task_id: str
    text: str = Field(min_length=1)
    sender: str = Field(min_length=1)


class MessageMarkReadRequest(BaseModel):
    project_id: str
    task_id: str
    reader_id: str


class MessageResponse(BaseModel):
    id: str
    sender: str
    text: str
    timestamp: datetime
    read: bool
    model_config = ConfigDict(from_attributes=True)


class ThreadResponse(BaseModel):
    id: str
    project_id: str
    task_id: str
    project_number: str
    project_color: str
    task_description: str
    messages: list[MessageResponse] = []
    unread_count: int
    updated_at: datetime


# Change feed
class ChangesResponse(BaseModel):
    server_time: datetime
    tasks: list[WorkerTaskResponse] = []
    notifications: list[NotificationResponse] = []
    threads: list[ThreadResponse] = []

"""SQLAlchemy models for projects, tasks, crew, notifications and message threads."""
from datetime import datetime, timezone
import uuid

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, Date, DateTime, Float, ForeignKey,
    Index, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from .database import Base
from .services.task_catalog import PROJECT_STATUSES, TASK_TYPES, WORKER_STATUSES
from .services.task_state import TaskStatus

NOTIFICATION_TYPES = (
    "task_assigned",
    "task_accepted",
    "task_rejected",
    "task_started",
    "task_completed",
    "message_received",
)
NOTIFICATION_PRIORITIES = ("low", "medium", "high")


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Project(Base):
    """Construction project; owns its ordered tasks."""
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_id)
    number = Column(String(50), unique=True, nullable=False, index=True)
    client_name = Column(String(255), nullable=False)
    client_address = Column(Text, nullable=False, default="")
    client_phone = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    color = Column(String(20), nullable=False, default="blue")
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, index=True)

    __table_args__ = (
        CheckConstraint(status.in_(PROJECT_STATUSES), name="chk_project_status"),
    )

    tasks = relationship(
        "Task",
        back_populates="project",
        order_by="Task.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )


class Worker(Base):
    """Field crew member, identified at login by a 4-digit PIN."""
    __tablename__ = "workers"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    role = Column(String(100), nullable=False, default="technician")
    status = Column(String(20), nullable=False, default="active", index=True)
    skills = Column(JSON, nullable=False, default=list)
    pin = Column(String(4), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        CheckConstraint(status.in_(WORKER_STATUSES), name="chk_worker_status"),
    )


class Task(Base):
    """Billable unit of work inside a project."""
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=False)
    quantity = Column(Float, nullable=False, default=1)
    price = Column(Float, nullable=False, default=0)
    amount = Column(Float, nullable=False, default=0)
    type = Column(String(20), nullable=False, default="other")
    estimated_hours = Column(Float, nullable=False, default=0)
    status = Column(String(30), nullable=False, default=TaskStatus.UNASSIGNED.value, index=True)
    # Worker id; absence means unassigned.
    assigned_to = Column(String(36), nullable=True, index=True)
    assigned_by = Column(String(100), nullable=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    # Absence means the task sits in the unscheduled bucket.
    scheduled_date = Column(Date, nullable=True, index=True)
    completed_date = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    materials = Column(JSON, nullable=False, default=list)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, index=True)

    __table_args__ = (
        CheckConstraint(status.in_([s.value for s in TaskStatus]), name="chk_task_status"),
        CheckConstraint(type.in_(TASK_TYPES), name="chk_task_type"),
        CheckConstraint("estimated_hours >= 0", name="chk_task_hours"),
        Index("idx_tasks_assignee_date", "assigned_to", "scheduled_date"),
    )

    __mapper_args__ = {"version_id_col": version}

    project = relationship("Project", back_populates="tasks")
    activity = relationship(
        "TaskActivity",
        back_populates="task",
        order_by="TaskActivity.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    notifications = relationship("Notification", back_populates="task", cascade="all, delete-orphan")
    thread = relationship("MessageThread", back_populates="task", uselist=False, cascade="all, delete-orphan")


class TaskActivity(Base):
    """Append-only activity log entry of a task."""
    __tablename__ = "task_activity"

    id = Column(String(36), primary_key=True, default=new_id)
    task_id = Column(String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    action = Column(String(50), nullable=False)
    actor = Column(String(255), nullable=False)
    details = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("task_id", "position", name="uq_task_activity_position"),
    )

    task = relationship("Task", back_populates="activity")


class Notification(Base):
    """Notification produced by lifecycle transitions and office messages."""
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=new_id)
    type = Column(String(40), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True)
    task_id = Column(String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True)
    target_worker_id = Column(String(36), nullable=True, index=True)
    priority = Column(String(10), nullable=False, default="medium")
    read = Column(Boolean, nullable=False, default=False, index=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=now_utc, index=True)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, index=True)

    __table_args__ = (
        CheckConstraint(type.in_(NOTIFICATION_TYPES), name="chk_notification_type"),
        CheckConstraint(priority.in_(NOTIFICATION_PRIORITIES), name="chk_notification_priority"),
    )

    __mapper_args__ = {"version_id_col": version}

    task = relationship("Task", back_populates="notifications")


class MessageThread(Base):
    """The single conversation attached to one (project, task) pair."""
    __tablename__ = "message_threads"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    task_id = Column(String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, index=True)

    __table_args__ = (
        UniqueConstraint("project_id", "task_id", name="uq_message_thread_task"),
    )

    __mapper_args__ = {"version_id_col": version}

    task = relationship("Task", back_populates="thread")
    messages = relationship(
        "ThreadMessage",
        back_populates="thread",
        order_by="ThreadMessage.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )


class ThreadMessage(Base):
    __tablename__ = "thread_messages"

    id = Column(String(36), primary_key=True, default=new_id)
    thread_id = Column(String(36), ForeignKey("message_threads.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    # Worker id or the literal "admin".
    sender = Column(String(255), nullable=False)
    text = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    read = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("thread_id", "position", name="uq_thread_message_position"),
    )

    thread = relationship("MessageThread", back_populates="messages")

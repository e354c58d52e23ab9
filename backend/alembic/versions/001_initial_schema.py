"""initial schema: projects, tasks, crew, notifications, message threads

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("number", sa.String(50), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("client_address", sa.Text(), nullable=False, server_default=""),
        sa.Column("client_phone", sa.String(50), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("color", sa.String(20), nullable=False, server_default="blue"),
        *_timestamps(),
        sa.CheckConstraint("status IN ('active', 'completed', 'on-hold')", name="chk_project_status"),
    )
    op.create_index("ix_projects_number", "projects", ["number"], unique=True)
    op.create_index("ix_projects_status", "projects", ["status"])
    op.create_index("ix_projects_updated_at", "projects", ["updated_at"])

    op.create_table(
        "workers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("role", sa.String(100), nullable=False, server_default="technician"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("pin", sa.String(4), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("status IN ('active', 'inactive')", name="chk_worker_status"),
    )
    op.create_index("ix_workers_pin", "workers", ["pin"], unique=True)
    op.create_index("ix_workers_status", "workers", ["status"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False, server_default="1"),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("type", sa.String(20), nullable=False, server_default="other"),
        sa.Column("estimated_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(30), nullable=False, server_default="unassigned"),
        sa.Column("assigned_to", sa.String(36), nullable=True),
        sa.Column("assigned_by", sa.String(100), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("completed_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("materials", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('unassigned', 'pending_acceptance', 'accepted', 'rejected', 'in_progress', 'completed')",
            name="chk_task_status",
        ),
        sa.CheckConstraint(
            "type IN ('hvac', 'electrical', 'plumbing', 'carpentry', 'roofing', 'painting', 'flooring', 'other')",
            name="chk_task_type",
        ),
        sa.CheckConstraint("estimated_hours >= 0", name="chk_task_hours"),
    )
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])
    op.create_index("ix_tasks_status", "tasks", ["status"])
    op.create_index("ix_tasks_assigned_to", "tasks", ["assigned_to"])
    op.create_index("ix_tasks_scheduled_date", "tasks", ["scheduled_date"])
    op.create_index("ix_tasks_updated_at", "tasks", ["updated_at"])
    op.create_index("idx_tasks_assignee_date", "tasks", ["assigned_to", "scheduled_date"])

    op.create_table(
        "task_activity",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("task_id", sa.String(36), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("actor", sa.String(255), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.UniqueConstraint("task_id", "position", name="uq_task_activity_position"),
    )
    op.create_index("ix_task_activity_task_id", "task_activity", ["task_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=True),
        sa.Column("task_id", sa.String(36), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True),
        sa.Column("target_worker_id", sa.String(36), nullable=True),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.CheckConstraint(
            "type IN ('task_assigned', 'task_accepted', 'task_rejected', 'task_started', "
            "'task_completed', 'message_received')",
            name="chk_notification_type",
        ),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high')", name="chk_notification_priority"),
    )
    op.create_index("ix_notifications_type", "notifications", ["type"])
    op.create_index("ix_notifications_project_id", "notifications", ["project_id"])
    op.create_index("ix_notifications_task_id", "notifications", ["task_id"])
    op.create_index("ix_notifications_target_worker_id", "notifications", ["target_worker_id"])
    op.create_index("ix_notifications_read", "notifications", ["read"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])
    op.create_index("ix_notifications_updated_at", "notifications", ["updated_at"])

    op.create_table(
        "message_threads",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("task_id", sa.String(36), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.UniqueConstraint("project_id", "task_id", name="uq_message_thread_task"),
    )
    op.create_index("ix_message_threads_updated_at", "message_threads", ["updated_at"])

    op.create_table(
        "thread_messages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("thread_id", sa.String(36), sa.ForeignKey("message_threads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("sender", sa.String(255), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("thread_id", "position", name="uq_thread_message_position"),
    )
    op.create_index("ix_thread_messages_thread_id", "thread_messages", ["thread_id"])


def downgrade() -> None:
    op.drop_table("thread_messages")
    op.drop_table("message_threads")
    op.drop_table("notifications")
    op.drop_table("task_activity")
    op.drop_table("tasks")
    op.drop_table("workers")
    op.drop_table("projects")

"""Domain-level exception primitives with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class DomainError(Exception):
    """Use-case level error with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


class InvalidTransition(DomainError):
    """Lifecycle action is not legal from the task's current state."""

    def __init__(self, *, task_id: str, current_state: str, attempted_action: str) -> None:
        super().__init__(
            code="INVALID_TRANSITION",
            http_status=409,
            message=f"Cannot {attempted_action} task in status '{current_state}'",
            details={
                "task_id": task_id,
                "current_state": current_state,
                "attempted_action": attempted_action,
            },
        )


class NotFound(DomainError):
    """Referenced project/task/worker/thread/notification does not exist."""

    def __init__(self, *, entity: str, entity_id: str, message: str | None = None) -> None:
        super().__init__(
            code=f"{entity.upper()}_NOT_FOUND",
            http_status=404,
            message=message or f"{entity.capitalize()} not found",
            details={"entity": entity, "id": entity_id},
        )


class ValidationError(DomainError):
    """Missing or malformed input, raised before any mutation."""

    def __init__(self, *, field: str, reason: str) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            http_status=422,
            message=f"{field}: {reason}",
            details={"field": field, "reason": reason},
        )


class TaskNotAssigned(DomainError):
    def __init__(self, *, task_id: str, worker_id: str) -> None:
        super().__init__(
            code="TASK_NOT_ASSIGNED",
            http_status=403,
            message="Task not assigned to you",
            details={"task_id": task_id, "worker_id": worker_id},
        )


class PinConflict(DomainError):
    def __init__(self, *, pin: str) -> None:
        super().__init__(
            code="WORKER_PIN_TAKEN",
            http_status=409,
            message="PIN already in use by another worker",
            details={"pin": pin},
        )


class ConcurrentUpdate(DomainError):
    """Optimistic concurrency check lost; caller may retry against fresh state."""

    def __init__(self, *, entity: str, entity_id: str | None = None) -> None:
        super().__init__(
            code="CONCURRENT_UPDATE",
            http_status=409,
            message=f"{entity.capitalize()} was modified concurrently, retry the request",
            details={"entity": entity, "id": entity_id, "retryable": True},
        )


class StoreUnavailable(DomainError):
    """Underlying persistence failed; the request may be retried."""

    def __init__(self, *, operation: str, reason: str | None = None) -> None:
        super().__init__(
            code="STORE_UNAVAILABLE",
            http_status=503,
            message="Storage is temporarily unavailable",
            details={"operation": operation, "reason": reason, "retryable": True},
        )

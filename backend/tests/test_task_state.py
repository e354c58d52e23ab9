import pytest

from digital_pm.services.task_state import (
    TaskAction,
    TaskStatus,
    allowed_actions,
    default_activity_details,
    is_terminal_status,
    is_transition_allowed,
    next_status,
    normalize_task_status,
    task_phase,
)


@pytest.mark.parametrize(
    "current,action,expected",
    [
        ("unassigned", "assign", TaskStatus.PENDING_ACCEPTANCE),
        ("rejected", "assign", TaskStatus.PENDING_ACCEPTANCE),
        ("rejected", "release", TaskStatus.UNASSIGNED),
        ("pending_acceptance", "accept", TaskStatus.ACCEPTED),
        ("pending_acceptance", "reject", TaskStatus.REJECTED),
        ("accepted", "start", TaskStatus.IN_PROGRESS),
        ("in_progress", "complete", TaskStatus.COMPLETED),
    ],
)
def test_graph_edges_resolve_to_target(current, action, expected) -> None:
    assert next_status(current_status=current, action=action) is expected


@pytest.mark.parametrize(
    "current,action",
    [
        ("unassigned", "accept"),
        ("unassigned", "complete"),
        ("pending_acceptance", "assign"),
        ("pending_acceptance", "start"),
        ("accepted", "assign"),
        ("accepted", "reject"),
        ("in_progress", "start"),
        ("completed", "assign"),
        ("completed", "complete"),
        ("rejected", "accept"),
    ],
)
def test_edges_outside_graph_are_refused(current, action) -> None:
    assert next_status(current_status=current, action=action) is None
    assert is_transition_allowed(current_status=current, action=action) is False


def test_confirmed_is_read_as_accepted() -> None:
    assert normalize_task_status("confirmed") is TaskStatus.ACCEPTED
    assert normalize_task_status("Accepted") is TaskStatus.ACCEPTED
    assert next_status(current_status="confirmed", action="start") is TaskStatus.IN_PROGRESS


def test_missing_status_defaults_to_unassigned_but_unknown_is_rejected() -> None:
    assert normalize_task_status(None) is TaskStatus.UNASSIGNED
    with pytest.raises(ValueError, match="Unknown task status"):
        normalize_task_status("scheduled")


def test_unknown_action_raises_value_error() -> None:
    with pytest.raises(ValueError, match="Unknown task action"):
        next_status(current_status="unassigned", action="teleport")


def test_completed_is_the_only_terminal_state() -> None:
    assert allowed_actions("completed") == []
    assert is_terminal_status("completed") is True
    assert is_terminal_status("rejected") is False
    assert set(allowed_actions("rejected")) == {TaskAction.ASSIGN, TaskAction.RELEASE}


def test_phase_mapping() -> None:
    assert [task_phase(s) for s in ("unassigned", "rejected", "pending_acceptance")] == [1, 1, 1]
    assert [task_phase(s) for s in ("accepted", "in_progress")] == [2, 2]
    assert task_phase("completed") == 3


def test_default_activity_details_use_past_tense() -> None:
    assert default_activity_details("accept") == "Task accepted by worker"
    assert default_activity_details(TaskAction.COMPLETE) == "Task completed by worker"

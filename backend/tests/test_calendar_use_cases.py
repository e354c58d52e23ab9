from __future__ import annotations

from datetime import date

import pytest

from digital_pm.domain_errors import NotFound, ValidationError
from digital_pm.models import Task
from digital_pm.services.calendar_grid import UNSCHEDULED_DAY, find_cell
from digital_pm.services.task_response_builder import week_grid_to_response
from digital_pm.use_cases.calendar_week import build_week_use_case, schedule_task_use_case
from digital_pm.use_cases.directory import update_worker_use_case
from digital_pm.use_cases.task_transitions import accept_task_use_case, assign_task_use_case

MONDAY = date(2025, 9, 8)


def _assign(db, task, worker, scheduled_date=None):
    return assign_task_use_case(
        db=db,
        project_id=task.project_id,
        task_id=task.id,
        worker_id=worker.id,
        scheduled_date=scheduled_date,
        assigned_by="Office",
    )


def test_schedule_task_sets_date_without_touching_assignment(db, site) -> None:
    task = site.tasks[0]
    _assign(db, task, site.alice)
    accept_task_use_case(db=db, project_id=task.project_id, task_id=task.id, worker_id=site.alice.id)

    task = schedule_task_use_case(
        db=db, project_id=task.project_id, task_id=task.id, day_index=2, week_start="2025-09-10"
    )

    assert task.scheduled_date == date(2025, 9, 10)
    assert task.status == "accepted"
    assert task.assigned_to == site.alice.id
    assert [entry.action for entry in task.activity] == ["assigned", "accepted"]


def test_schedule_task_twice_is_a_no_op(db, site) -> None:
    task = site.tasks[0]
    _assign(db, task, site.alice)

    schedule_task_use_case(db=db, project_id=task.project_id, task_id=task.id, day_index=1, week_start=MONDAY)
    version = db.get(Task, task.id).version
    task = schedule_task_use_case(db=db, project_id=task.project_id, task_id=task.id, day_index=1, week_start=MONDAY)

    assert task.version == version
    assert task.scheduled_date == date(2025, 9, 9)


@pytest.mark.parametrize("day_index", [-1, 5, 7])
def test_schedule_task_rejects_days_outside_work_week(db, site, day_index) -> None:
    task = site.tasks[0]

    with pytest.raises(ValidationError) as exc_info:
        schedule_task_use_case(db=db, project_id=task.project_id, task_id=task.id, day_index=day_index)

    assert exc_info.value.details["field"] == "day_index"


def test_schedule_missing_task(db, site) -> None:
    with pytest.raises(NotFound):
        schedule_task_use_case(db=db, project_id=site.project.id, task_id="missing", day_index=0)


def test_crew_week_flags_overloaded_day(db, site) -> None:
    _assign(db, site.tasks[1], site.alice, scheduled_date=date(2025, 9, 9))
    _assign(db, site.tasks[2], site.alice, scheduled_date=date(2025, 9, 9))
    _assign(db, site.tasks[3], site.bob)

    grid = build_week_use_case(db=db, start="2025-09-11")

    assert grid.week_start == MONDAY
    assert [row.label for row in grid.rows] == ["Alice Carter", "Bob Diaz"]
    cell = find_cell(grid, site.alice.id, 1)
    assert cell.signal.total_hours == 11
    assert cell.signal.is_overloaded is True
    assert cell.signal.has_multiple is True
    assert cell.conflict is True
    loose = find_cell(grid, site.bob.id, UNSCHEDULED_DAY)
    assert [task.description for task in loose.tasks] == ["Repair drain"]
    assert loose.signal.is_overloaded is False

    response = week_grid_to_response(grid)
    assert response.rows[0].cells[2].severity == "high"


def test_week_excludes_other_weeks_and_unassigned_tasks(db, site) -> None:
    _assign(db, site.tasks[0], site.alice, scheduled_date=date(2025, 9, 15))

    grid = build_week_use_case(db=db, start=MONDAY)

    assert all(not cell.tasks for row in grid.rows for cell in row.cells)


def test_project_view_uses_active_projects_as_rows(db, site) -> None:
    _assign(db, site.tasks[0], site.alice, scheduled_date=MONDAY)
    _assign(db, site.tasks[1], site.bob, scheduled_date=MONDAY)

    grid = build_week_use_case(db=db, start=MONDAY, view="project", worker_id=site.alice.id)

    assert [row.label for row in grid.rows] == ["2011"]
    cell = find_cell(grid, site.project.id, 0)
    assert sorted(task.worker_name for task in cell.tasks) == ["Alice Carter", "Bob Diaz"]
    assert cell.signal.total_hours == 8


def test_worker_filter_narrows_crew_rows(db, site) -> None:
    _assign(db, site.tasks[0], site.alice, scheduled_date=MONDAY)
    _assign(db, site.tasks[1], site.bob, scheduled_date=MONDAY)

    grid = build_week_use_case(db=db, start=MONDAY, worker_id=site.bob.id)

    assert [row.row_id for row in grid.rows] == [site.bob.id]


def test_inactive_assignee_still_gets_a_row(db, site) -> None:
    _assign(db, site.tasks[0], site.alice, scheduled_date=MONDAY)
    update_worker_use_case(db=db, worker_id=site.alice.id, changes={"status": "inactive"})

    grid = build_week_use_case(db=db, start=MONDAY)

    assert [row.label for row in grid.rows] == ["Bob Diaz", "Alice Carter"]


def test_unknown_view_and_bad_start(db, site) -> None:
    with pytest.raises(ValidationError):
        build_week_use_case(db=db, view="timeline")
    with pytest.raises(ValidationError):
        build_week_use_case(db=db, start="next tuesday")

from datetime import date

import pytest

from digital_pm.services.calendar_grid import (
    UNSCHEDULED_DAY,
    VIEW_CREW,
    VIEW_PROJECT,
    CalendarTask,
    build_week_grid,
    day_index,
    find_cell,
    week_start_for,
)

MONDAY = date(2025, 9, 8)


def _task(task_id, *, worker="w1", project="p1", hours=1.0, scheduled=None, name="Alice"):
    return CalendarTask(
        task_id=task_id,
        project_id=project,
        project_number=f"#{project}",
        project_color="blue",
        client_name="Client",
        client_address="Somewhere",
        description=f"Task {task_id}",
        status="accepted",
        type="other",
        estimated_hours=hours,
        assigned_to=worker,
        worker_name=name,
        scheduled_date=scheduled,
    )


def test_sunday_maps_to_previous_monday() -> None:
    sunday = date(2025, 9, 14)
    assert week_start_for(sunday) == date(2025, 9, 8)
    assert (sunday - week_start_for(sunday)).days == 6


def test_wednesday_maps_two_days_back() -> None:
    wednesday = date(2025, 9, 10)
    assert week_start_for(wednesday) == date(2025, 9, 8)
    assert week_start_for("2025-09-10") == date(2025, 9, 8)


def test_day_index_bounds() -> None:
    assert day_index(None, MONDAY) == UNSCHEDULED_DAY
    assert day_index(date(2025, 9, 8), MONDAY) == 0
    assert day_index(date(2025, 9, 12), MONDAY) == 4
    assert day_index(date(2025, 9, 13), MONDAY) is None
    assert day_index(date(2025, 9, 7), MONDAY) is None


def test_overloaded_cell_with_five_and_six_hours() -> None:
    grid = build_week_grid(
        [
            _task("t1", hours=5, scheduled=date(2025, 9, 9)),
            _task("t2", hours=6, scheduled=date(2025, 9, 9)),
        ],
        rows=[("w1", "Alice")],
        week_start=MONDAY,
    )

    cell = find_cell(grid, "w1", 1)
    assert [task.task_id for task in cell.tasks] == ["t1", "t2"]
    assert cell.signal.total_hours == 11
    assert cell.signal.is_overloaded is True
    assert cell.signal.has_multiple is True
    assert cell.conflict is True
    assert grid.buckets[2].conflict_cells == 1


def test_unscheduled_and_out_of_week_tasks() -> None:
    grid = build_week_grid(
        [
            _task("loose", hours=12),
            _task("next-week", scheduled=date(2025, 9, 15)),
            _task("unassigned", worker=None, scheduled=date(2025, 9, 8)),
        ],
        rows=[("w1", "Alice")],
        week_start=date(2025, 9, 10),
    )

    row = grid.rows[0]
    assert [cell.day for cell in row.cells] == [UNSCHEDULED_DAY, 0, 1, 2, 3, 4]
    unscheduled = row.cells[0]
    assert [task.task_id for task in unscheduled.tasks] == ["loose"]
    assert unscheduled.signal.is_overloaded is False
    assert all(not cell.tasks for cell in row.cells[1:])
    assert grid.week_start == MONDAY


def test_project_filter_applies_before_grouping() -> None:
    tasks = [
        _task("a", project="p1", hours=5, scheduled=MONDAY),
        _task("b", project="p2", hours=5, scheduled=MONDAY),
    ]

    unfiltered = build_week_grid(tasks, rows=[("w1", "Alice")], week_start=MONDAY)
    filtered = build_week_grid(tasks, rows=[("w1", "Alice")], week_start=MONDAY, project_id="p1")

    assert find_cell(unfiltered, "w1", 0).signal.is_overloaded is True
    cell = find_cell(filtered, "w1", 0)
    assert [task.task_id for task in cell.tasks] == ["a"]
    assert cell.signal.is_overloaded is False


def test_worker_filter_only_applies_to_crew_view() -> None:
    tasks = [
        _task("a", worker="w1", project="p1", scheduled=MONDAY),
        _task("b", worker="w2", project="p1", scheduled=MONDAY, name="Bob"),
    ]

    crew = build_week_grid(tasks, rows=[("w1", "Alice"), ("w2", "Bob")], week_start=MONDAY, worker_id="w1")
    project = build_week_grid(
        tasks,
        rows=[("p1", "#p1")],
        week_start=MONDAY,
        view=VIEW_PROJECT,
        worker_id="w1",
    )

    assert [row.row_id for row in crew.rows] == ["w1"]
    assert len(find_cell(project, "p1", 0).tasks) == 2


def test_rows_missing_from_directory_are_appended() -> None:
    grid = build_week_grid(
        [_task("a", worker="ghost", name="Former worker", scheduled=MONDAY)],
        rows=[("w1", "Alice")],
        week_start=MONDAY,
        view=VIEW_CREW,
    )

    assert [(row.row_id, row.label) for row in grid.rows] == [("w1", "Alice"), ("ghost", "Former worker")]


def test_unknown_view_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_week_grid([], rows=[], week_start=MONDAY, view="timeline")

"""Weekly worker/project x day grid projection.

Tasks arrive already denormalized with their project metadata
(:class:`CalendarTask`).  The helpers here are pure: they place tasks
onto a Monday-based working week, apply filters, group them into cells
and attach the workload signal of :mod:`.workload` to every day cell.

Day index ``-1`` is the unscheduled bucket: assigned tasks without a
``scheduled_date``.  It is shown regardless of the visible week.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from ..config import settings
from .workload import SEVERITY_NONE, WorkloadSignal, detect

UNSCHEDULED_DAY = -1
VIEW_CREW = "crew"
VIEW_PROJECT = "project"
VIEW_MODES = (VIEW_CREW, VIEW_PROJECT)


@dataclass(frozen=True)
class CalendarTask:
    task_id: str
    project_id: str
    project_number: str
    project_color: str
    client_name: str
    client_address: str
    description: str
    status: str
    type: str | None
    estimated_hours: float
    assigned_to: str | None
    worker_name: str
    scheduled_date: date | None
    day: int = UNSCHEDULED_DAY


@dataclass
class CalendarCell:
    row_id: str
    day: int
    date: date | None
    tasks: list[CalendarTask]
    signal: WorkloadSignal

    @property
    def conflict(self) -> bool:
        return self.signal.is_conflict


@dataclass
class CalendarRow:
    row_id: str
    label: str
    cells: list[CalendarCell]


@dataclass
class DayBucket:
    day: int
    date: date | None
    tasks: list[CalendarTask]
    total_hours: float
    overloaded_cells: int
    conflict_cells: int

    @property
    def has_conflict(self) -> bool:
        return self.conflict_cells > 0


@dataclass
class WeekGrid:
    week_start: date
    view: str
    days: list[date]
    rows: list[CalendarRow]
    buckets: list[DayBucket] = field(default_factory=list)


def coerce_date(value: date | datetime | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def week_start_for(value: date | datetime | str) -> date:
    """Monday of the week containing ``value``; Sunday maps to the previous Monday."""
    day = coerce_date(value)
    if day is None:
        raise ValueError("week start requires a date")
    return day - timedelta(days=day.weekday())


def week_days(week_start: date, *, days: int | None = None) -> list[date]:
    count = settings.WORK_WEEK_DAYS if days is None else days
    return [week_start + timedelta(days=offset) for offset in range(count)]


def date_for_day(week_start: date, day: int) -> date:
    return week_start + timedelta(days=day)


def day_index(scheduled_date: date | datetime | str | None, week_start: date, *, days: int | None = None) -> int | None:
    """Grid column for a task, or None when it falls outside the visible week."""
    scheduled = coerce_date(scheduled_date)
    if scheduled is None:
        return UNSCHEDULED_DAY
    count = settings.WORK_WEEK_DAYS if days is None else days
    offset = (scheduled - week_start).days
    if 0 <= offset < count:
        return offset
    return None


def place_tasks(tasks: Iterable[CalendarTask], week_start: date, *, days: int | None = None) -> list[CalendarTask]:
    """Keep assigned tasks that land in the week (or are unscheduled), tagged with their day."""
    placed: list[CalendarTask] = []
    for task in tasks:
        if not task.assigned_to:
            continue
        idx = day_index(task.scheduled_date, week_start, days=days)
        if idx is None:
            continue
        placed.append(replace(task, day=idx))
    return placed


def filter_tasks(
    tasks: Iterable[CalendarTask],
    *,
    view: str,
    project_id: str | None = None,
    worker_id: str | None = None,
) -> list[CalendarTask]:
    """Apply filters before grouping so excluded tasks never count toward a cell."""
    result = list(tasks)
    if project_id:
        result = [task for task in result if task.project_id == project_id]
    if worker_id and view == VIEW_CREW:
        result = [task for task in result if task.assigned_to == worker_id]
    return result


def _row_key(task: CalendarTask, view: str) -> str:
    return task.assigned_to if view == VIEW_CREW else task.project_id


def _unscheduled_signal(tasks: Sequence[CalendarTask]) -> WorkloadSignal:
    # Unscheduled work is not tied to a day, so it never reports overload.
    total = sum(task.estimated_hours or 0 for task in tasks)
    return WorkloadSignal(
        total_hours=float(total),
        is_overloaded=False,
        has_multiple=len(tasks) > 1,
        severity=SEVERITY_NONE,
    )


def build_week_grid(
    tasks: Iterable[CalendarTask],
    *,
    rows: Sequence[tuple[str, str]],
    week_start: date,
    view: str = VIEW_CREW,
    project_id: str | None = None,
    worker_id: str | None = None,
    days: int | None = None,
) -> WeekGrid:
    """Group tasks into (row, day) cells for the crew or project view.

    ``rows`` is the ordered list of ``(row_id, label)`` to render; a row
    owning visible tasks but missing from it is appended at the end.
    """
    if view not in VIEW_MODES:
        raise ValueError(f"Unknown calendar view: {view!r}")

    start = week_start_for(week_start)
    visible_days = week_days(start, days=days)
    placed = place_tasks(tasks, start, days=len(visible_days))
    visible = filter_tasks(placed, view=view, project_id=project_id, worker_id=worker_id)

    ordered_rows = list(rows)
    if view == VIEW_CREW and worker_id:
        ordered_rows = [row for row in ordered_rows if row[0] == worker_id]
    if view == VIEW_PROJECT and project_id:
        ordered_rows = [row for row in ordered_rows if row[0] == project_id]

    known = {row_id for row_id, _label in ordered_rows}
    for task in visible:
        key = _row_key(task, view)
        if key not in known:
            label = task.worker_name if view == VIEW_CREW else task.project_number
            ordered_rows.append((key, label))
            known.add(key)

    by_cell: dict[tuple[str, int], list[CalendarTask]] = {}
    for task in visible:
        by_cell.setdefault((_row_key(task, view), task.day), []).append(task)

    grid_rows: list[CalendarRow] = []
    for row_id, label in ordered_rows:
        cells: list[CalendarCell] = []
        unscheduled = by_cell.get((row_id, UNSCHEDULED_DAY), [])
        cells.append(
            CalendarCell(
                row_id=row_id,
                day=UNSCHEDULED_DAY,
                date=None,
                tasks=unscheduled,
                signal=_unscheduled_signal(unscheduled),
            )
        )
        for idx, day in enumerate(visible_days):
            cell_tasks = by_cell.get((row_id, idx), [])
            cells.append(
                CalendarCell(
                    row_id=row_id,
                    day=idx,
                    date=day,
                    tasks=cell_tasks,
                    signal=detect(cell_tasks),
                )
            )
        grid_rows.append(CalendarRow(row_id=row_id, label=label, cells=cells))

    return WeekGrid(
        week_start=start,
        view=view,
        days=visible_days,
        rows=grid_rows,
        buckets=_day_buckets(grid_rows, visible_days),
    )


def _day_buckets(rows: Sequence[CalendarRow], visible_days: Sequence[date]) -> list[DayBucket]:
    buckets: list[DayBucket] = []
    for day in [UNSCHEDULED_DAY, *range(len(visible_days))]:
        cells = [cell for row in rows for cell in row.cells if cell.day == day]
        tasks = [task for cell in cells for task in cell.tasks]
        buckets.append(
            DayBucket(
                day=day,
                date=None if day == UNSCHEDULED_DAY else visible_days[day],
                tasks=tasks,
                total_hours=sum(cell.signal.total_hours for cell in cells),
                overloaded_cells=sum(1 for cell in cells if cell.signal.is_overloaded),
                conflict_cells=sum(1 for cell in cells if cell.conflict),
            )
        )
    return buckets


def find_cell(grid: WeekGrid, row_id: str, day: int) -> CalendarCell | None:
    for row in grid.rows:
        if row.row_id != row_id:
            continue
        for cell in row.cells:
            if cell.day == day:
                return cell
    return None

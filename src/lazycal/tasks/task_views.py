# src/lazycal/tasks/task_views.py

"""
Read-only projections over the task list.

Every function takes the tasks to look at (usually store.list_tasks()) and
derives its result at call time; nothing is cached. Display formatting stays
with the presentation layer.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from ..core.dates import as_date, as_datetime, end_of_day, start_of_day, start_of_week
from ..core.errors import ValidationError
from .task_models import ArchiveFilter, CalendarMode, Task, TaskStatus

MONTH_GRID_DAYS = 42


@dataclass(slots=True, frozen=True)
class CalendarDay:
    day: date
    tasks: list[Task]
    is_today: bool
    in_period: bool


@dataclass(slots=True, frozen=True)
class DailyEntry:
    task: Task
    target: int
    done_today: int
    remaining: int


def _covers(task: Task, moment: datetime) -> bool:
    return start_of_day(task.start_date) <= moment <= end_of_day(task.due_date)


def tasks_for_date(tasks: Iterable[Task], when: date | datetime) -> list[Task]:
    """Active tasks whose calendar-day window contains `when`, highest priority first."""
    moment = as_datetime(when)
    hits = [t for t in tasks if t.status is TaskStatus.ACTIVE and _covers(t, moment)]
    return sorted(hits, key=lambda t: -t.priority)


def has_tasks_for_date(tasks: Iterable[Task], when: date | datetime) -> bool:
    moment = as_datetime(when)
    return any(t.status is TaskStatus.ACTIVE and _covers(t, moment) for t in tasks)


def sorted_active_tasks(tasks: Iterable[Task]) -> list[Task]:
    active = [t for t in tasks if t.status is TaskStatus.ACTIVE]
    return sorted(active, key=lambda t: (-t.priority, t.due_date))


def _relevant_date(task: Task) -> datetime:
    if task.status is TaskStatus.COMPLETED:
        return task.completed_at or task.due_date
    return task.due_date


def archive_filtered(
    tasks: Iterable[Task],
    archive_filter: ArchiveFilter | str = ArchiveFilter.ALL,
) -> list[Task]:
    """Completed/overdue tasks, most recently finished (or due) first."""
    try:
        flt = ArchiveFilter(archive_filter)
    except ValueError:
        raise ValidationError(f"unknown archive filter {archive_filter!r}") from None

    if flt is ArchiveFilter.ALL:
        wanted = {TaskStatus.COMPLETED, TaskStatus.OVERDUE}
    else:
        wanted = {TaskStatus(flt.value)}

    archived = [t for t in tasks if t.status in wanted]
    return sorted(archived, key=_relevant_date, reverse=True)


# ---- calendar ----


def period_days(anchor: date | datetime, mode: CalendarMode | str = CalendarMode.WEEK) -> list[date]:
    """
    Days shown for a calendar period.

    week:  Sunday..Saturday of the anchor's week
    month: 6 full weeks starting at the Sunday on or before the 1st of the month
    """
    mode = CalendarMode(mode)
    a = as_date(anchor)
    if mode is CalendarMode.WEEK:
        first = start_of_week(a)
        count = 7
    else:
        first = start_of_week(a.replace(day=1))
        count = MONTH_GRID_DAYS
    return [first + timedelta(days=i) for i in range(count)]


def calendar_days(
    tasks: Iterable[Task],
    anchor: date | datetime,
    mode: CalendarMode | str = CalendarMode.WEEK,
    *,
    today: date | None = None,
) -> list[CalendarDay]:
    mode = CalendarMode(mode)
    pool = list(tasks)
    today = today or date.today()
    month = as_date(anchor).month

    out: list[CalendarDay] = []
    for day in period_days(anchor, mode):
        out.append(
            CalendarDay(
                day=day,
                tasks=tasks_for_date(pool, day),
                is_today=day == today,
                in_period=mode is CalendarMode.WEEK or day.month == month,
            )
        )
    return out


def shift_period(anchor: date | datetime, mode: CalendarMode | str, direction: int) -> date:
    """Move the calendar anchor by whole weeks or months."""
    mode = CalendarMode(mode)
    a = as_date(anchor)
    if mode is CalendarMode.WEEK:
        return a + timedelta(days=7 * direction)
    return a + relativedelta(months=direction)


# ---- daily panel ----


def daily_panel(tasks: Iterable[Task], today: date | datetime) -> list[DailyEntry]:
    return [
        DailyEntry(
            task=t,
            target=t.adjusted_daily_workload,
            done_today=t.progress_on(today),
            remaining=t.remaining_workload,
        )
        for t in tasks_for_date(tasks, today)
    ]

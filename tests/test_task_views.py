# tests/test_task_views.py

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from lazycal.core.errors import ValidationError
from lazycal.tasks.task_models import ArchiveFilter, CalendarMode
from lazycal.tasks.task_store import TaskStore
from lazycal.tasks.task_views import (
    archive_filtered,
    calendar_days,
    daily_panel,
    has_tasks_for_date,
    period_days,
    shift_period,
    sorted_active_tasks,
    tasks_for_date,
)

from .fakes import FIXED_NOW, FakeClock, make_task


def test_tasks_for_date_uses_whole_calendar_days(store: TaskStore) -> None:
    task = make_task(
        store,
        start_date=datetime(2025, 3, 10, 15, 0),
        due_date=datetime(2025, 3, 12, 9, 0),
    )
    tasks = store.list_tasks()

    assert tasks_for_date(tasks, datetime(2025, 3, 10, 8, 0)) == [task]
    assert tasks_for_date(tasks, datetime(2025, 3, 12, 23, 59, 59)) == [task]
    assert tasks_for_date(tasks, date(2025, 3, 12)) == [task]
    assert tasks_for_date(tasks, datetime(2025, 3, 9, 23, 59)) == []
    assert tasks_for_date(tasks, date(2025, 3, 13)) == []


def test_tasks_for_date_orders_by_priority_and_keeps_ties_stable(store: TaskStore) -> None:
    low = make_task(store, name="low", priority=1)
    first_mid = make_task(store, name="mid-1", priority=3)
    high = make_task(store, name="high", priority=5)
    second_mid = make_task(store, name="mid-2", priority=3)

    result = tasks_for_date(store.list_tasks(), FIXED_NOW)
    assert [t.name for t in result] == [high.name, first_mid.name, second_mid.name, low.name]


def test_tasks_for_date_excludes_archived_tasks(store: TaskStore) -> None:
    done = make_task(store, name="done", total_workload=1)
    late = make_task(
        store,
        name="late",
        start_date=FIXED_NOW - timedelta(days=3),
        due_date=FIXED_NOW - timedelta(days=1),
    )
    store.record_progress(done.id, 1)
    store.check_overdue()

    assert late.status.archived and done.status.archived
    assert tasks_for_date(store.list_tasks(), date(2025, 3, 9)) == []
    assert tasks_for_date(store.list_tasks(), FIXED_NOW) == []
    assert has_tasks_for_date(store.list_tasks(), FIXED_NOW) is False


def test_has_tasks_for_date(store: TaskStore) -> None:
    assert has_tasks_for_date(store.list_tasks(), FIXED_NOW) is False
    make_task(store)
    assert has_tasks_for_date(store.list_tasks(), FIXED_NOW) is True


def test_sorted_active_tasks_breaks_ties_by_due_date(store: TaskStore) -> None:
    later = make_task(store, name="later", priority=4, due_date=FIXED_NOW + timedelta(days=8))
    sooner = make_task(store, name="sooner", priority=4, due_date=FIXED_NOW + timedelta(days=2))
    top = make_task(store, name="top", priority=5, due_date=FIXED_NOW + timedelta(days=30))
    done = make_task(store, name="done", priority=5, total_workload=1)
    store.record_progress(done.id, 1)

    assert sorted_active_tasks(store.list_tasks()) == [top, sooner, later]


def test_archive_filtered_sorts_most_recent_first(store: TaskStore, clock: FakeClock) -> None:
    old_late = make_task(store, name="old late", start_date=FIXED_NOW - timedelta(days=10), due_date=FIXED_NOW - timedelta(days=8))
    new_late = make_task(store, name="new late", start_date=FIXED_NOW - timedelta(days=10), due_date=FIXED_NOW - timedelta(days=2))
    done_first = make_task(store, name="done first", total_workload=1)
    done_second = make_task(store, name="done second", total_workload=1)
    make_task(store, name="still active")

    store.record_progress(done_first.id, 1)
    clock.advance(hours=3)
    store.record_progress(done_second.id, 1)
    store.check_overdue()

    tasks = store.list_tasks()
    assert archive_filtered(tasks) == [done_second, done_first, new_late, old_late]
    assert archive_filtered(tasks, ArchiveFilter.COMPLETED) == [done_second, done_first]
    assert archive_filtered(tasks, "overdue") == [new_late, old_late]


def test_archive_filtered_falls_back_to_due_date(store: TaskStore) -> None:
    task = make_task(store, total_workload=1)
    store.record_progress(task.id, 1)
    task.completed_at = None

    assert archive_filtered(store.list_tasks()) == [task]


def test_archive_filtered_rejects_unknown_filter(store: TaskStore) -> None:
    with pytest.raises(ValidationError):
        archive_filtered(store.list_tasks(), "someday")


def test_week_period_starts_on_sunday() -> None:
    days = period_days(date(2025, 3, 12), CalendarMode.WEEK)
    assert days[0] == date(2025, 3, 9)
    assert days[-1] == date(2025, 3, 15)
    assert len(days) == 7


def test_month_grid_is_six_weeks() -> None:
    # March 2025 starts on a Saturday.
    days = period_days(date(2025, 3, 20), "month")
    assert len(days) == 42
    assert days[0] == date(2025, 2, 23)
    assert days[-1] == date(2025, 4, 5)


def test_calendar_days_marks_today_and_other_months(store: TaskStore) -> None:
    task = make_task(store, due_date=FIXED_NOW + timedelta(days=2))

    cells = calendar_days(store.list_tasks(), date(2025, 3, 20), CalendarMode.MONTH, today=FIXED_NOW.date())
    by_day = {c.day: c for c in cells}

    assert by_day[date(2025, 2, 28)].in_period is False
    assert by_day[date(2025, 3, 1)].in_period is True
    assert by_day[date(2025, 3, 10)].is_today is True
    assert by_day[date(2025, 3, 11)].is_today is False
    assert by_day[date(2025, 3, 12)].tasks == [task]
    assert by_day[date(2025, 3, 13)].tasks == []

    week = calendar_days(store.list_tasks(), FIXED_NOW, today=FIXED_NOW.date())
    assert all(c.in_period for c in week)
    assert [len(c.tasks) for c in week] == [0, 1, 1, 1, 0, 0, 0]


def test_shift_period() -> None:
    assert shift_period(date(2025, 3, 12), CalendarMode.WEEK, 1) == date(2025, 3, 19)
    assert shift_period(date(2025, 3, 12), "week", -2) == date(2025, 2, 26)
    assert shift_period(date(2025, 1, 31), CalendarMode.MONTH, 1) == date(2025, 2, 28)
    assert shift_period(date(2025, 1, 15), "month", -1) == date(2024, 12, 15)


def test_daily_panel_reports_target_and_today(store: TaskStore) -> None:
    task = make_task(store, total_workload=12, due_date=FIXED_NOW + timedelta(days=3), procrastination_coefficient=0.5)
    store.record_progress(task.id, 2)

    (entry,) = daily_panel(store.list_tasks(), FIXED_NOW)
    assert entry.task is task
    assert entry.target == 6
    assert entry.done_today == 2
    assert entry.remaining == 10

    (tomorrow,) = daily_panel(store.list_tasks(), FIXED_NOW + timedelta(days=1))
    assert tomorrow.done_today == 0

# tests/test_reminder_scheduler.py

from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from lazycal.core.errors import ValidationError
from lazycal.reminders.reminder_scheduler import ReminderScheduler, run_reminder_loop
from lazycal.tasks.task_store import TaskStore

from .fakes import FIXED_NOW, FakeClock, FakeNotifier, make_task

AT_REMINDER = datetime(2025, 3, 10, 17, 0, 20)


async def _run_briefly(coro, seconds: float = 0.05) -> None:
    runner = asyncio.create_task(coro)
    await asyncio.sleep(seconds)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner


@pytest.mark.asyncio
async def test_reminder_fires_at_configured_time(store: TaskStore, notifier: FakeNotifier) -> None:
    high = make_task(store, priority=5)
    low = make_task(store, priority=1)

    await _run_briefly(
        run_reminder_loop(store, notifier, reminder_time="17:00", interval_seconds=0.01, clock=FakeClock(AT_REMINDER))
    )

    assert len(notifier.calls) == 1
    assert notifier.calls[0].reminder_time == "17:00"
    assert notifier.calls[0].task_ids == [high.id, low.id]


@pytest.mark.asyncio
async def test_reminder_skips_empty_day(store: TaskStore, notifier: FakeNotifier) -> None:
    await _run_briefly(
        run_reminder_loop(store, notifier, reminder_time="17:00", interval_seconds=0.01, clock=FakeClock(AT_REMINDER))
    )
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_reminder_waits_for_its_minute(store: TaskStore, notifier: FakeNotifier) -> None:
    make_task(store)
    await _run_briefly(
        run_reminder_loop(store, notifier, reminder_time="17:01", interval_seconds=0.01, clock=FakeClock(AT_REMINDER))
    )
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_reminder_fires_once_per_day(store: TaskStore, notifier: FakeNotifier) -> None:
    make_task(store)
    clock = FakeClock(AT_REMINDER)

    # Several ticks inside the same minute.
    await _run_briefly(
        run_reminder_loop(store, notifier, reminder_time="17:00", interval_seconds=0.5, clock=clock),
        seconds=1.2,
    )
    assert len(notifier.calls) == 1


@pytest.mark.asyncio
async def test_notifier_failure_keeps_loop_alive(store: TaskStore) -> None:
    make_task(store)
    failing = FakeNotifier(fail=True)
    scheduler = ReminderScheduler(store, failing, interval_seconds=0.5, clock=FakeClock(AT_REMINDER))

    scheduler.start("17:00")
    await asyncio.sleep(0.05)

    assert len(failing.calls) == 1
    assert scheduler.running is True
    await scheduler.stop()
    assert scheduler.running is False


@pytest.mark.asyncio
async def test_replace_cancels_previous_schedule(store: TaskStore, notifier: FakeNotifier) -> None:
    scheduler = ReminderScheduler(store, notifier, clock=FakeClock(FIXED_NOW))

    old = scheduler.start("17:00")
    new = scheduler.replace("18:30")
    await asyncio.sleep(0.01)

    assert old.cancelled()
    assert not new.done()
    assert scheduler.reminder_time == "18:30"
    assert scheduler.running is True

    await scheduler.stop()
    assert new.cancelled()


@pytest.mark.asyncio
async def test_invalid_time_keeps_current_schedule(store: TaskStore, notifier: FakeNotifier) -> None:
    scheduler = ReminderScheduler(store, notifier, clock=FakeClock(FIXED_NOW))
    current = scheduler.start("17:00")

    with pytest.raises(ValidationError):
        scheduler.replace("25:00")

    await asyncio.sleep(0)
    assert not current.done()
    assert scheduler.reminder_time == "17:00"
    await scheduler.stop()


@pytest.mark.asyncio
async def test_reminder_never_mutates_store(store: TaskStore, notifier: FakeNotifier) -> None:
    task = make_task(store)
    before = task.to_record()

    await _run_briefly(
        run_reminder_loop(store, notifier, reminder_time="17:00", interval_seconds=0.01, clock=FakeClock(AT_REMINDER))
    )

    assert len(notifier.calls) == 1
    assert task.to_record() == before

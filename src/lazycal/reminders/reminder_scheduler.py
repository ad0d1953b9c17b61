# src/lazycal/reminders/reminder_scheduler.py

from __future__ import annotations

"""
Daily progress reminder.

A small polling loop that:
- checks the wall clock every interval_seconds,
- at the configured HH:MM, if any task is scheduled today, asks the notifier
  to prompt the user (at most once per day),
- never touches the store.

How the prompt is shown belongs to the notifier, not the scheduler.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import datetime

from ..core.dates import date_key, parse_hhmm
from ..core.ports import ReminderNotifier, TaskSource
from ..tasks.task_views import tasks_for_date

logger = logging.getLogger(__name__)


async def run_reminder_loop(
        task_source: TaskSource,
        notifier: ReminderNotifier,
        *,
        reminder_time: str,
        interval_seconds: float = 60.0,
        clock: Callable[[], datetime] = datetime.now,
) -> None:
    """
    Simple polling reminder.

    Every interval_seconds:
    - compare the current hour/minute with reminder_time
    - on match (first match of the day only), collect today's tasks
    - empty day -> nothing to ask; otherwise await notifier.remind(...)

    Notifier failures are logged and the loop keeps going.
    To stop the loop, cancel the coroutine/task.
    """
    hour, minute = parse_hhmm(reminder_time)
    sleep_s = max(0.5, float(interval_seconds))
    last_fired: str | None = None

    while True:
        now = clock()

        if now.hour == hour and now.minute == minute and last_fired != date_key(now):
            last_fired = date_key(now)

            try:
                today_tasks = tasks_for_date(task_source.list_tasks(), now)
            except Exception:
                logger.exception("Reminder could not read tasks")
                today_tasks = []

            if today_tasks:
                try:
                    await notifier.remind(reminder_time=reminder_time, tasks=today_tasks)
                    logger.info("Reminder sent at %s tasks=%d", reminder_time, len(today_tasks))
                except Exception:
                    logger.exception("Reminder notifier failed at %s", reminder_time)
            else:
                logger.debug("Reminder at %s skipped: no tasks today", reminder_time)

        await asyncio.sleep(sleep_s)


class ReminderScheduler:
    """
    Owns the running reminder loop.

    Changing the reminder time goes through replace(): the pending loop is
    cancelled before the new one is installed, so at most one loop is ever
    scheduled. Must be driven from inside a running event loop.
    """

    def __init__(
        self,
        task_source: TaskSource,
        notifier: ReminderNotifier,
        *,
        interval_seconds: float = 60.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._task_source = task_source
        self._notifier = notifier
        self._interval_seconds = interval_seconds
        self._clock = clock
        self._runner: asyncio.Task[None] | None = None
        self._reminder_time: str | None = None

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    @property
    def reminder_time(self) -> str | None:
        return self._reminder_time

    def start(self, reminder_time: str) -> asyncio.Task[None]:
        return self.replace(reminder_time)

    def replace(self, reminder_time: str) -> asyncio.Task[None]:
        # Validate first: a bad value keeps the current reminder running.
        parse_hhmm(reminder_time)

        self.cancel()
        self._reminder_time = reminder_time
        self._runner = asyncio.get_running_loop().create_task(
            run_reminder_loop(
                self._task_source,
                self._notifier,
                reminder_time=reminder_time,
                interval_seconds=self._interval_seconds,
                clock=self._clock,
            ),
            name=f"lazycal-reminder-{reminder_time}",
        )
        logger.info("Reminder scheduled at %s", reminder_time)
        return self._runner

    def cancel(self) -> None:
        if self._runner is not None and not self._runner.done():
            self._runner.cancel()
            logger.debug("Reminder at %s cancelled", self._reminder_time)
        self._runner = None

    async def stop(self) -> None:
        runner = self._runner
        self.cancel()
        if runner is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await runner

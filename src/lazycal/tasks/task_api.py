# src/lazycal/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime

from ..app.bootstrap import save_preferences
from ..core.dates import parse_hhmm
from ..core.state import AppState
from .task_store import clean_progress_amount

logger = logging.getLogger(__name__)


def submit_daily_progress(
    state: AppState,
    amounts: Mapping[str, int],
    day: date | datetime | None = None,
) -> list[str]:
    """
    Convenience helper: the "track progress" form submit.

    Records one amount per task id for the day, then re-runs overdue detection.
    Every amount is validated before anything is recorded, so one bad value
    leaves all tasks untouched. Unknown ids are skipped. Returns the ids that
    were recorded.
    """
    cleaned = {task_id: clean_progress_amount(amount) for task_id, amount in amounts.items()}

    updated: list[str] = []
    for task_id, amount in cleaned.items():
        if state.task_store.record_progress(task_id, amount, day):
            updated.append(task_id)
        else:
            logger.warning("Progress for unknown task_id=%s ignored", task_id)

    state.task_store.check_overdue()
    return updated


def set_reminder_time(state: AppState, value: str) -> None:
    """
    Change the reminder time of day.

    Validates HH:MM, stores the preference and reschedules the running
    reminder (the old schedule is cancelled first).
    """
    parse_hhmm(value)
    value = value.strip()

    state.preferences.reminder_time = value
    save_preferences(state)

    if state.reminder is not None:
        state.reminder.replace(value)

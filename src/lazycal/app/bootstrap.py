# src/lazycal/app/bootstrap.py

"""
Bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- loads the task list and user preferences into AppState,
- optionally saves the task list after every store change,
- starts/stops the daily reminder.

The presentation layer builds its state here and then talks to
state.task_store and lazycal.tasks.task_views directly.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ..config import DEFAULT_REMINDER_TIME, get_settings
from ..core.dates import parse_hhmm
from ..core.errors import ValidationError
from ..core.json_files import write_json_atomic
from ..core.ports import ReminderNotifier
from ..core.state import AppState, UserPreferences
from ..logging_setup import level_from_name, setup_logging
from ..reminders.reminder_scheduler import ReminderScheduler
from ..tasks.task_models import Task
from ..tasks.task_store import ChangeEvent, TaskStore

logger = logging.getLogger(__name__)

# Personal data; keep saved files private on disk.
PRIVATE_FILE_MODE = 0o600


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)
    settings.preferences_path.parent.mkdir(parents=True, exist_ok=True)


def _default_reminder_time(settings) -> str:
    raw = str(getattr(settings, "default_reminder_time", DEFAULT_REMINDER_TIME))
    try:
        parse_hhmm(raw)
    except ValidationError:
        logger.warning("Invalid default reminder time %r; using %s", raw, DEFAULT_REMINDER_TIME)
        return DEFAULT_REMINDER_TIME
    return raw


def init_logging(settings=None) -> None:
    """Configure logging from settings (console level from settings.log_level)."""
    if settings is None:
        settings = get_settings()

    console_level = level_from_name(getattr(settings, "log_level", "INFO"))
    log_dir = getattr(settings, "log_dir", None) or getattr(settings, "data_dir", ".local/lazycal")
    setup_logging(log_dir=log_dir, console_level=console_level)
    logger.info("Starting %s...", getattr(settings, "app_name", "lazycal"))


def create_initial_state(
    *,
    settings=None,
    clock: Callable[[], datetime] = datetime.now,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().

    Overdue detection runs once here, like at the start of every session.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore.load(settings.tasks_path, clock=clock)
    state = AppState(
        settings=settings,
        task_store=store,
        preferences=load_preferences(settings),
    )

    if getattr(settings, "save_on_mutation", False):
        attach_autosave(state)

    store.check_overdue()
    return state


def load_preferences(settings) -> UserPreferences:
    """Read user preferences; anything missing or malformed falls back to defaults."""
    default = UserPreferences(reminder_time=_default_reminder_time(settings))
    path = Path(settings.preferences_path)
    if not path.exists():
        return default
    try:
        data = json.loads(path.read_text("utf-8"))
    except Exception:
        logger.exception("Failed to load preferences from %s", path)
        return default
    if not isinstance(data, dict):
        return default

    raw_time = data.get("reminderTime")
    if not isinstance(raw_time, str):
        return default
    try:
        parse_hhmm(raw_time)
    except ValidationError:
        logger.warning("Ignoring invalid reminderTime %r in %s", raw_time, path)
        return default
    return UserPreferences(reminder_time=raw_time.strip())


def save_preferences(state: AppState) -> None:
    path = Path(state.settings.preferences_path)
    try:
        write_json_atomic(path, state.preferences.to_record(), mode=PRIVATE_FILE_MODE)
        logger.info("Saved preferences to %s", path)
    except Exception:
        logger.exception("Failed to save preferences to %s", path)


def save_tasks(state: AppState) -> None:
    path = Path(state.settings.tasks_path)
    try:
        state.task_store.save(path, mode=PRIVATE_FILE_MODE)
    except Exception:
        logger.exception("Failed to save tasks to %s", path)


def attach_autosave(state: AppState) -> Callable[[ChangeEvent, Task], None]:
    """Save the task list after every store change. Idempotent."""
    if state.autosave is not None:
        return state.autosave

    def _on_change(event: ChangeEvent, task: Task) -> None:
        logger.debug("Autosave after %s task_id=%s", event.value, task.id)
        save_tasks(state)

    state.task_store.add_listener(_on_change)
    state.autosave = _on_change
    return _on_change


def detach_autosave(state: AppState) -> None:
    if state.autosave is None:
        return
    state.task_store.remove_listener(state.autosave)
    state.autosave = None


def start_reminder(
    state: AppState,
    notifier: ReminderNotifier,
    *,
    clock: Callable[[], datetime] = datetime.now,
) -> ReminderScheduler | None:
    """Install the daily reminder at the user's reminder time (needs a running event loop)."""
    if not getattr(state.settings, "reminder_enabled", True):
        logger.info("Reminder disabled by settings.")
        return None

    if state.reminder is None:
        state.reminder = ReminderScheduler(
            state.task_store,
            notifier,
            interval_seconds=float(getattr(state.settings, "reminder_interval_seconds", 60.0)),
            clock=clock,
        )
    state.reminder.start(state.preferences.reminder_time)
    return state.reminder


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    if state.reminder is not None:
        try:
            await state.reminder.stop()
        except Exception:
            logger.debug("Reminder stop failed.", exc_info=True)

    save_tasks(state)
    save_preferences(state)

# src/lazycal/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..tasks.task_store import TaskStore

if TYPE_CHECKING:
    from ..reminders.reminder_scheduler import ReminderScheduler


@dataclass
class UserPreferences:
    reminder_time: str

    def to_record(self) -> dict[str, Any]:
        return {"reminderTime": self.reminder_time}


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    task_store: TaskStore
    preferences: UserPreferences

    reminder: ReminderScheduler | None = None
    autosave: Any | None = None

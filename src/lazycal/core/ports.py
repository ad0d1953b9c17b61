# src/lazycal/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the presentation layer and notification delivery swappable and makes testing easier.
"""

from typing import Any, Awaitable, Protocol


class ReminderNotifier(Protocol):
    """
    Presentation-side port: how the reminder surfaces its prompt.

    The notifier decides how to ask the user (dialog, toast, console line) and
    whether to open the progress form afterwards. It must not assume the
    reminder mutated anything; it never does.
    """

    def remind(self, *, reminder_time: str, tasks: list[Any]) -> Awaitable[None]: ...


class TaskSource(Protocol):
    """Read side of the task store, as seen by the reminder."""

    def list_tasks(self) -> list[Any]: ...

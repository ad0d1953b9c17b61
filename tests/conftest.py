# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from lazycal.app.bootstrap import create_initial_state
from lazycal.core.state import AppState
from lazycal.tasks.task_store import TaskStore

from .fakes import FIXED_NOW, FakeClock, FakeNotifier


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


@pytest.fixture()
def store(clock: FakeClock) -> TaskStore:
    return TaskStore(clock=clock)


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap helpers.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    data_dir = tmp_path / "data"
    return SimpleNamespace(
        app_name="lazycal-test",
        log_level="DEBUG",
        data_dir=data_dir,
        tasks_path=data_dir / "tasks.json",
        preferences_path=data_dir / "settings.json",
        log_dir=data_dir,
        reminder_enabled=True,
        default_reminder_time="17:00",
        reminder_interval_seconds=0.5,
        save_on_mutation=True,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock) -> AppState:
    """
    AppState wired like the real app, on a tmp data dir and a fixed clock.
    """
    return create_initial_state(settings=settings, clock=clock)

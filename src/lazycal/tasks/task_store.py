# src/lazycal/tasks/task_store.py

from __future__ import annotations

import json
import logging
import math
import uuid
from collections.abc import Callable, Iterable
from datetime import date, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any

from ..core.dates import date_key, parse_timestamp, start_of_day
from ..core.errors import NotFoundError, ValidationError
from ..core.json_files import write_json_atomic
from .task_models import Task, TaskStatus
from .workload import apply_daily_workload, compute_daily_workload

logger = logging.getLogger(__name__)


class ChangeEvent(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    PROGRESS = "progress"
    OVERDUE = "overdue"
    RESTORED = "restored"


ChangeListener = Callable[[ChangeEvent, Task], None]

EDITABLE_FIELDS = frozenset(
    {
        "name",
        "total_workload",
        "unit",
        "start_date",
        "due_date",
        "priority",
        "procrastination_coefficient",
    }
)

# Editing any of these makes the derived daily workload stale.
WORKLOAD_FIELDS = frozenset({"total_workload", "start_date", "due_date", "procrastination_coefficient"})


# ---- validation ----


def _clean_name(value: Any) -> str:
    name = str(value or "").strip()
    if not name:
        raise ValidationError("name is required")
    return name


def _clean_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{what} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{what} must be an integer")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{what} must be an integer") from None


def _clean_workload(value: Any) -> int:
    total = _clean_int(value, "total_workload")
    if total <= 0:
        raise ValidationError("total_workload must be greater than 0")
    return total


def _clean_unit(value: Any) -> str:
    unit = str(value or "").strip()
    if not unit:
        raise ValidationError("unit is required")
    return unit


def _clean_priority(value: Any) -> int:
    priority = _clean_int(value, "priority")
    if not 1 <= priority <= 5:
        raise ValidationError("priority must be between 1 and 5")
    return priority


def _clean_coefficient(value: Any) -> float:
    try:
        coeff = float(value)
    except (TypeError, ValueError):
        raise ValidationError("procrastination_coefficient must be a number") from None
    if not math.isfinite(coeff) or coeff < 0:
        raise ValidationError("procrastination_coefficient must be >= 0")
    return coeff


def _clean_datetime(value: Any, what: str) -> datetime:
    if value is None:
        raise ValidationError(f"{what} is required")
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise ValidationError(f"{what}: {e}") from None


def clean_progress_amount(value: Any) -> int:
    done = _clean_int(value, "amount")
    if done < 0:
        raise ValidationError("amount must be >= 0")
    return done


def _clean_window(start: datetime, due: datetime) -> None:
    if start >= due:
        raise ValidationError("due_date must be after start_date")


_CLEANERS: dict[str, Callable[[Any], Any]] = {
    "name": _clean_name,
    "total_workload": _clean_workload,
    "unit": _clean_unit,
    "start_date": lambda v: _clean_datetime(v, "start_date"),
    "due_date": lambda v: _clean_datetime(v, "due_date"),
    "priority": _clean_priority,
    "procrastination_coefficient": _clean_coefficient,
}


class TaskStore:
    """
    In-memory task store.

    Owns the ordered task list, every lifecycle transition and progress
    recording. Nothing here renders or persists implicitly:
    - mutations return the affected task (or a sentinel for a missing id),
    - listeners registered with add_listener() get (event, task) after each change,
    - save()/load() are explicit and called by the owner.

    Not thread-safe; one caller context drives it.
    """

    def __init__(
        self,
        tasks: Iterable[Task] | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
        on_change: ChangeListener | None = None,
    ) -> None:
        self._clock = clock
        self._tasks: list[Task] = []
        self._issued_ids: set[str] = set()
        self._listeners: list[ChangeListener] = []
        if on_change is not None:
            self._listeners.append(on_change)

        for task in tasks or ():
            if task.id in self._issued_ids:
                logger.warning("Duplicate task id=%s ignored", task.id)
                continue
            # Derived values are never trusted from outside.
            apply_daily_workload(task)
            self._tasks.append(task)
            self._issued_ids.add(task.id)

        logger.info("TaskStore ready total=%s", len(self._tasks))

    # ---- low-level helpers ----

    def _now(self) -> datetime:
        return self._clock()

    def _new_id(self) -> str:
        while True:
            task_id = uuid.uuid4().hex
            if task_id not in self._issued_ids:
                self._issued_ids.add(task_id)
                return task_id

    def _find(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def _emit(self, event: ChangeEvent, task: Task) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, task)
            except Exception:
                logger.exception("Change listener failed event=%s task_id=%s", event.value, task.id)

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---- reads ----

    def count_tasks(self) -> int:
        return len(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def list_tasks(self) -> list[Task]:
        """Tasks in insertion order (a copy of the list, the tasks themselves are live)."""
        return list(self._tasks)

    def get_task(self, task_id: str) -> Task | None:
        return self._find(task_id)

    def require_task(self, task_id: str) -> Task:
        task = self._find(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    # ---- lifecycle ----

    def create_task(
        self,
        *,
        name: str,
        total_workload: int,
        unit: str,
        start_date: datetime | date | str,
        due_date: datetime | date | str,
        priority: int = 3,
        procrastination_coefficient: float = 0.5,
    ) -> Task:
        clean_name = _clean_name(name)
        total = _clean_workload(total_workload)
        clean_unit = _clean_unit(unit)
        start = _clean_datetime(start_date, "start_date")
        due = _clean_datetime(due_date, "due_date")
        _clean_window(start, due)
        clean_priority = _clean_priority(priority)
        coeff = _clean_coefficient(procrastination_coefficient)
        workload = compute_daily_workload(total, start, due, coeff)

        task = Task(
            id=self._new_id(),
            name=clean_name,
            total_workload=total,
            remaining_workload=total,
            unit=clean_unit,
            start_date=start,
            due_date=due,
            priority=clean_priority,
            procrastination_coefficient=coeff,
            status=TaskStatus.ACTIVE,
            created_at=self._now(),
            daily_progress={},
            daily_workload=workload.daily_workload,
            adjusted_daily_workload=workload.adjusted_daily_workload,
        )
        self._tasks.append(task)

        logger.debug(
            "Task created id=%s total=%s daily=%s adjusted=%s",
            task.id,
            task.total_workload,
            task.daily_workload,
            task.adjusted_daily_workload,
        )
        self._emit(ChangeEvent.CREATED, task)
        return task

    def update_task(self, task_id: str, **fields: Any) -> Task | None:
        """
        Overwrite only the supplied fields.

        Each value is validated on its own. The start/due order is checked only
        when both are supplied in the same call; changing one end of the window
        alone is accepted as-is (a warning is logged if the window ends up
        inverted).
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"fields not editable: {', '.join(sorted(unknown))}")

        changes = {key: _CLEANERS[key](value) for key, value in fields.items()}
        if "start_date" in changes and "due_date" in changes:
            _clean_window(changes["start_date"], changes["due_date"])

        task = self._find(task_id)
        if task is None:
            logger.debug("update_task: no task id=%s", task_id)
            return None

        workload = None
        if WORKLOAD_FIELDS & changes.keys():
            # Computed before any field is touched so a failure leaves the task as it was.
            workload = compute_daily_workload(
                changes.get("total_workload", task.total_workload),
                changes.get("start_date", task.start_date),
                changes.get("due_date", task.due_date),
                changes.get("procrastination_coefficient", task.procrastination_coefficient),
            )

        for key, value in changes.items():
            setattr(task, key, value)

        if "total_workload" in changes and task.remaining_workload > task.total_workload:
            task.remaining_workload = task.total_workload

        if workload is not None:
            task.daily_workload = workload.daily_workload
            task.adjusted_daily_workload = workload.adjusted_daily_workload

        if task.start_date >= task.due_date:
            logger.warning(
                "Task id=%s has start_date %s not before due_date %s after update",
                task.id,
                task.start_date,
                task.due_date,
            )

        self._emit(ChangeEvent.UPDATED, task)
        return task

    def delete_task(self, task_id: str) -> bool:
        task = self._find(task_id)
        if task is None:
            return False
        self._tasks.remove(task)
        logger.info("Task deleted id=%s", task_id)
        self._emit(ChangeEvent.DELETED, task)
        return True

    def record_progress(
        self,
        task_id: str,
        amount: int,
        day: date | datetime | None = None,
    ) -> bool:
        """
        Log the amount done on a day and count it against the remaining workload.

        The day's entry is overwritten, but the full amount is always subtracted
        from remaining_workload (re-submitting a day counts again).
        """
        done = clean_progress_amount(amount)

        task = self._find(task_id)
        if task is None:
            logger.debug("record_progress: no task id=%s", task_id)
            return False

        now = self._now()
        key = date_key(day if day is not None else now)
        task.daily_progress[key] = done
        task.remaining_workload = max(0, task.remaining_workload - done)

        if task.remaining_workload == 0 and task.status is not TaskStatus.COMPLETED:
            task.status = TaskStatus.COMPLETED
            task.completed_at = now
            logger.info("Task %s -> completed", task.id)

        self._emit(ChangeEvent.PROGRESS, task)
        return True

    def check_overdue(self, reference: date | datetime | None = None) -> list[Task]:
        """
        Move active tasks whose due date passed before the reference midnight
        (today by default) and that still have work left to overdue.
        """
        cutoff = start_of_day(reference if reference is not None else self._now())
        changed: list[Task] = []
        for task in self._tasks:
            if task.status is not TaskStatus.ACTIVE:
                continue
            if task.due_date < cutoff and task.remaining_workload > 0:
                task.status = TaskStatus.OVERDUE
                changed.append(task)
                logger.info("Task %s -> overdue", task.id)

        for task in changed:
            self._emit(ChangeEvent.OVERDUE, task)
        return changed

    def restore_task(self, task_id: str) -> Task | None:
        task = self._find(task_id)
        if task is None or task.status is TaskStatus.ACTIVE:
            return None

        task.status = TaskStatus.ACTIVE
        task.completed_at = None
        if task.remaining_workload == 0:
            task.remaining_workload = 1

        logger.info("Task %s -> active (restored)", task.id)
        self._emit(ChangeEvent.RESTORED, task)
        return task

    def clear_archive(self) -> int:
        archived = [t for t in self._tasks if t.status.archived]
        if not archived:
            return 0
        self._tasks = [t for t in self._tasks if not t.status.archived]
        logger.info("Archive cleared removed=%s", len(archived))
        for task in archived:
            self._emit(ChangeEvent.DELETED, task)
        return len(archived)

    # ---- persistence ----

    def to_records(self) -> list[dict[str, Any]]:
        return [t.to_record() for t in self._tasks]

    @classmethod
    def from_records(
        cls,
        records: Any,
        *,
        clock: Callable[[], datetime] = datetime.now,
        on_change: ChangeListener | None = None,
    ) -> TaskStore:
        """
        Build a store from plain records.

        Anything that is not a list yields an empty store; records that cannot
        be read are skipped.
        """
        tasks: list[Task] = []
        if isinstance(records, list):
            for idx, rec in enumerate(records):
                try:
                    tasks.append(apply_daily_workload(Task.from_record(rec)))
                except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
                    logger.warning("Skipping malformed task record #%s: %s", idx, e)
        elif records is not None:
            logger.warning("Task records must be a list, got %s; starting empty", type(records).__name__)
        return cls(tasks, clock=clock, on_change=on_change)

    def save(self, path: str | Path, *, mode: int | None = None) -> None:
        path = write_json_atomic(path, self.to_records(), mode=mode)
        logger.debug("Saved %d tasks to %s", len(self._tasks), path)

    @classmethod
    def load(
        cls,
        path: str | Path,
        *,
        clock: Callable[[], datetime] = datetime.now,
        on_change: ChangeListener | None = None,
    ) -> TaskStore:
        """Load tasks from a JSON file. A missing or unreadable file yields an empty store."""
        path = Path(path)
        if not path.exists():
            return cls(clock=clock, on_change=on_change)
        try:
            data = json.loads(path.read_text("utf-8"))
        except Exception:
            logger.exception("Failed to load tasks from %s; starting empty", path)
            return cls(clock=clock, on_change=on_change)
        store = cls.from_records(data, clock=clock, on_change=on_change)
        logger.info("Loaded %d tasks from %s", store.count_tasks(), path)
        return store

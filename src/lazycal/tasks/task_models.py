# src/lazycal/tasks/task_models.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from ..core.dates import date_key, format_timestamp, parse_timestamp

STANDARD_UNITS = ("pages", "points", "hours", "items", "chapters", "exercises")

PRIORITY_LABELS = {
    1: "Lowest",
    2: "Low",
    3: "Medium",
    4: "High",
    5: "Highest",
}


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - completed/overdue tasks form the archive; restore moves them back to active.
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    OVERDUE = "overdue"

    @classmethod
    def from_record(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.ACTIVE
        try:
            return cls(raw)
        except ValueError:
            return cls.ACTIVE

    @property
    def archived(self) -> bool:
        return self is not TaskStatus.ACTIVE


class ArchiveFilter(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class CalendarMode(StrEnum):
    WEEK = "week"
    MONTH = "month"


@dataclass(slots=True)
class Task:
    id: str
    name: str
    total_workload: int
    remaining_workload: int
    unit: str

    start_date: datetime
    due_date: datetime

    priority: int
    procrastination_coefficient: float

    status: TaskStatus
    created_at: datetime

    daily_progress: dict[str, int] = field(default_factory=dict)
    daily_workload: int = 0
    adjusted_daily_workload: int = 0
    completed_at: datetime | None = None

    @property
    def is_custom_unit(self) -> bool:
        return self.unit not in STANDARD_UNITS

    @property
    def priority_label(self) -> str:
        return PRIORITY_LABELS.get(self.priority, "")

    def progress_ratio(self) -> float:
        if self.total_workload <= 0:
            return 0.0
        done = self.total_workload - self.remaining_workload
        return max(0.0, min(1.0, done / self.total_workload))

    def progress_on(self, day: date | datetime) -> int:
        return int(self.daily_progress.get(date_key(day), 0))

    # ---- persistence records ----

    def to_record(self) -> dict[str, Any]:
        """Plain record using the browser app's camelCase keys."""
        rec: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "totalWorkload": self.total_workload,
            "remainingWorkload": self.remaining_workload,
            "unit": self.unit,
            "startDate": format_timestamp(self.start_date),
            "dueDate": format_timestamp(self.due_date),
            "priority": self.priority,
            "procrastinationCoeff": self.procrastination_coefficient,
            "status": self.status.value,
            "dailyProgress": dict(self.daily_progress),
            "createdAt": format_timestamp(self.created_at),
            "dailyWorkload": self.daily_workload,
            "adjustedDailyWorkload": self.adjusted_daily_workload,
        }
        if self.completed_at is not None:
            rec["completedAt"] = format_timestamp(self.completed_at)
        return rec

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> Task:
        """
        Build a Task from a persisted record.

        Raises ValueError/TypeError/KeyError on a malformed record; the store
        decides what to do with it. Derived workload fields are not read here.
        """
        if not isinstance(rec, dict):
            raise TypeError("task record must be an object")

        task_id = str(rec["id"]).strip()
        name = str(rec.get("name") or "").strip()
        if not task_id or not name:
            raise ValueError("task record needs id and name")

        total = int(rec["totalWorkload"])
        if total <= 0:
            raise ValueError("totalWorkload must be positive")
        remaining_raw = rec.get("remainingWorkload")
        remaining = total if remaining_raw is None else int(remaining_raw)
        remaining = max(0, min(total, remaining))

        progress_raw = rec.get("dailyProgress") or {}
        if not isinstance(progress_raw, dict):
            raise TypeError("dailyProgress must be an object")
        progress = {str(k): max(0, int(v)) for k, v in progress_raw.items()}

        completed_raw = rec.get("completedAt")
        created_raw = rec.get("createdAt")
        start = parse_timestamp(rec["startDate"])

        coeff = float(rec.get("procrastinationCoeff") or 0.0)
        if not math.isfinite(coeff):
            raise ValueError("procrastinationCoeff must be a finite number")

        status = TaskStatus.from_record(rec.get("status"))
        if status is TaskStatus.COMPLETED:
            remaining = 0

        return cls(
            id=task_id,
            name=name,
            total_workload=total,
            remaining_workload=remaining,
            unit=str(rec.get("unit") or "items"),
            start_date=start,
            due_date=parse_timestamp(rec["dueDate"]),
            priority=max(1, min(5, int(rec.get("priority") or 3))),
            procrastination_coefficient=max(0.0, coeff),
            status=status,
            created_at=parse_timestamp(created_raw) if created_raw else start,
            daily_progress=progress,
            completed_at=parse_timestamp(completed_raw) if completed_raw else None,
        )

# src/lazycal/tasks/workload.py

"""
Daily workload calculation.

Pure functions: given the total workload, the task window and the
procrastination coefficient, derive
- daily_workload: even pace over the window, rounded up
- adjusted_daily_workload: daily pace inflated by (1 + coefficient), rounded down

Only the task store calls into this module (on create and on edits that touch
one of the inputs).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from ..core.errors import ValidationError
from .task_models import Task

SECONDS_PER_DAY = 24 * 3600


@dataclass(slots=True, frozen=True)
class DailyWorkload:
    daily_workload: int
    adjusted_daily_workload: int


def days_span(start_date: datetime, due_date: datetime) -> int:
    # Full timestamp precision: 1 day + 1 minute counts as 2 days.
    seconds = (due_date - start_date).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def compute_daily_workload(
    total_workload: int,
    start_date: datetime,
    due_date: datetime,
    procrastination_coefficient: float,
) -> DailyWorkload:
    span = days_span(start_date, due_date)
    if span <= 0:
        return DailyWorkload(daily_workload=total_workload, adjusted_daily_workload=total_workload)

    daily = -(-total_workload // span)
    try:
        adjusted = math.floor(daily * (1 + procrastination_coefficient))
    except (OverflowError, ValueError):
        raise ValidationError("workload too large to schedule") from None
    return DailyWorkload(daily_workload=daily, adjusted_daily_workload=adjusted)


def apply_daily_workload(task: Task) -> Task:
    result = compute_daily_workload(
        task.total_workload,
        task.start_date,
        task.due_date,
        task.procrastination_coefficient,
    )
    task.daily_workload = result.daily_workload
    task.adjusted_daily_workload = result.adjusted_daily_workload
    return task

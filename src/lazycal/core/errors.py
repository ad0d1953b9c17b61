# src/lazycal/core/errors.py

from __future__ import annotations


class LazyCalError(Exception):
    pass


class ValidationError(LazyCalError, ValueError):
    """Invalid task parameters. The operation aborts and the store is left unchanged."""


class NotFoundError(LazyCalError, LookupError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"task '{task_id}' not found")

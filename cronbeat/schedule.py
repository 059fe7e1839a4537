"""Schedules deciding when a task should run."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Schedule(ABC):
    """Strategy computing when a task must be executed next."""

    @abstractmethod
    def next_call_at(self, last_run_at: datetime | None) -> datetime | None:
        """Return the next execution time, or None if the task must not run again."""


class DeltaSchedule(Schedule):
    """Runs a task forever, starting immediately, at a regular interval."""

    def __init__(self, interval: timedelta | float) -> None:
        if not isinstance(interval, timedelta):
            interval = timedelta(seconds=interval)
        self.interval = interval

    def next_call_at(self, last_run_at: datetime | None) -> datetime | None:
        if last_run_at is None:
            return datetime.now(timezone.utc)
        return last_run_at + self.interval

    def __repr__(self) -> str:
        return f"DeltaSchedule(interval={self.interval!r})"
"""Scheduler backends keeping the scheduled tasks in step with a source of truth."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .scheduled_task import ScheduledTask


class SchedulerBackend(ABC):
    """Synchronises the scheduler's tasks with some external source, such as a database."""

    @abstractmethod
    def should_sync(self) -> bool:
        """Return whether :meth:`sync` should be called as soon as possible."""

    @abstractmethod
    def sync(self, scheduled_tasks: list[ScheduledTask]) -> None:
        """Update the scheduler's heap of tasks in place.

        Called in the pauses between scheduled tasks, only when
        :meth:`should_sync` returns True. It should be quick; slow work should be
        spread over several calls. The list must be kept a valid ``heapq`` heap.
        """


class LocalSchedulerBackend(SchedulerBackend):
    """The default backend: the locally defined schedules are the source of truth."""

    def should_sync(self) -> bool:
        return False

    def sync(self, scheduled_tasks: list[ScheduledTask]) -> None:
        """Nothing to synchronise with; the tasks are left untouched."""
        return None
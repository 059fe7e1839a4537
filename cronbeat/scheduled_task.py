"""A task together with the schedule deciding when it is sent."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .schedule import Schedule

MessageFactory = Callable[[], Any]
"""A callable building a fresh message each time the task is due."""


@dataclass(eq=False)
class ScheduledTask:
    """A task scheduled for execution: what to send, where, and when.

    Instances order by ``next_call_at`` so that they can be kept in a
    ``heapq`` min-heap.
    """

    name: str
    message_factory: MessageFactory
    queue: str
    schedule: Schedule
    next_call_at: datetime
    total_run_count: int = field(default=0)
    last_run_at: datetime | None = field(default=None)

    def reschedule(self) -> ScheduledTask | None:
        """Update ``next_call_at`` from the schedule.

        Return the task itself, or None when the schedule says it must not run again.
        """
        next_call_at = self.schedule.next_call_at(self.last_run_at)
        if next_call_at is None:
            return None
        self.next_call_at = next_call_at
        return self

    def __lt__(self, other: ScheduledTask) -> bool:
        if not isinstance(other, ScheduledTask):
            return NotImplemented
        return self.next_call_at < other.next_call_at
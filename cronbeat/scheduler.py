"""The scheduler sending scheduled tasks to the broker when they are due."""

from __future__ import annotations

import heapq
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from .schedule import Schedule
from .scheduled_task import MessageFactory, ScheduledTask

logger = logging.getLogger(__name__)

DEFAULT_SLEEP_INTERVAL = timedelta(milliseconds=500)


class Scheduler:
    """Keeps scheduled tasks in a min-heap and sends the due ones on each tick.

    By itself it does nothing; a driver (the beat service) calls :meth:`tick`
    repeatedly. The broker must provide ``async send(message, queue)``.
    """

    def __init__(self, broker: Any) -> None:
        self.broker = broker
        self.scheduled_tasks: list[ScheduledTask] = []
        self.default_sleep_interval = DEFAULT_SLEEP_INTERVAL

    def schedule_task(
        self,
        name: str,
        message_factory: MessageFactory,
        queue: str,
        schedule: Schedule,
    ) -> None:
        """Schedule a task; it is dropped if its schedule never lets it run."""
        next_call_at = schedule.next_call_at(None)
        if next_call_at is None:
            logger.debug(
                "The schedule of task %s never scheduled the task to run, "
                "so it has been dropped.",
                name,
            )
            return
        heapq.heappush(
            self.scheduled_tasks,
            ScheduledTask(name, message_factory, queue, schedule, next_call_at),
        )

    def next_task_time(self, now: datetime) -> datetime:
        """Return when the next task is due, or ``now`` plus the default sleep interval."""
        if self.scheduled_tasks:
            next_call_at = self.scheduled_tasks[0].next_call_at
            logger.debug("Next scheduled task is at %s", next_call_at)
            return next_call_at
        logger.debug("No scheduled tasks, sleeping for %s", self.default_sleep_interval)
        return now + self.default_sleep_interval

    async def tick(self) -> datetime:
        """Send the earliest task if it is due; return when to tick again.

        The task is rescheduled even if sending it fails; the error is then re-raised.
        """
        now = datetime.now(timezone.utc)
        next_task_time = self.next_task_time(now)
        if next_task_time > now:
            return next_task_time

        scheduled_task = heapq.heappop(self.scheduled_tasks)
        try:
            await self._send_scheduled_task(scheduled_task)
        finally:
            rescheduled = scheduled_task.reschedule()
            if rescheduled is not None:
                heapq.heappush(self.scheduled_tasks, rescheduled)
            else:
                logger.debug("A task is not scheduled to run anymore and will be dropped")
        return self.next_task_time(now)

    async def _send_scheduled_task(self, scheduled_task: ScheduledTask) -> None:
        message = scheduled_task.message_factory()
        logger.info(
            "Sending task %s to %s queue", scheduled_task.name, scheduled_task.queue
        )
        await self.broker.send(message, scheduled_task.queue)
        scheduled_task.last_run_at = datetime.now(timezone.utc)
        scheduled_task.total_run_count += 1
"""The beat service: drives the scheduler and sends tasks when they are due."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from fnmatch import fnmatchcase
from typing import Any

from .backend import LocalSchedulerBackend, SchedulerBackend
from .errors import BrokerError, NotConnectedError
from .schedule import Schedule
from .scheduled_task import MessageFactory
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


def _as_timedelta(value: timedelta | float | None) -> timedelta | None:
    if value is None or isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


class Beat:
    """Sends scheduled tasks to a broker.

    It makes the internal scheduler tick in a loop and lets the scheduler backend
    synchronise the scheduled tasks between ticks. The broker must provide
    ``async send(message, queue)`` and ``async reconnect(timeout)``.
    """

    def __init__(
        self,
        name: str,
        broker: Any,
        scheduler_backend: SchedulerBackend | None = None,
        task_routes: Iterable[tuple[str, str]] | None = None,
        default_queue: str = "celery",
        broker_connection_timeout: int = 2,
        broker_connection_retry: bool = True,
        broker_connection_max_retries: int = 5,
        broker_connection_retry_delay: float = 5,
        max_sleep_duration: timedelta | float | None = None,
    ) -> None:
        self.name = name
        self.scheduler = Scheduler(broker)
        self.scheduler_backend = (
            scheduler_backend if scheduler_backend is not None else LocalSchedulerBackend()
        )
        self.task_routes: list[tuple[str, str]] = list(task_routes or [])
        self.default_queue = default_queue
        self.broker_connection_timeout = broker_connection_timeout
        self.broker_connection_retry = broker_connection_retry
        self.broker_connection_max_retries = broker_connection_max_retries
        self.broker_connection_retry_delay = broker_connection_retry_delay
        self.max_sleep_duration = _as_timedelta(max_sleep_duration)

    @property
    def broker(self) -> Any:
        return self.scheduler.broker

    def route(self, task_name: str) -> str | None:
        """Return the queue of the first routing rule whose glob matches ``task_name``."""
        for pattern, queue in self.task_routes:
            if fnmatchcase(task_name, pattern):
                return queue
        return None

    def schedule_task(
        self,
        task_name: str,
        message_factory: MessageFactory,
        schedule: Schedule,
        queue: str | None = None,
        name: str | None = None,
    ) -> None:
        """Schedule the task ``task_name``; messages come from ``message_factory``.

        Without an explicit ``queue`` the task routes decide, falling back to the
        default queue. ``name`` labels the scheduled entry and defaults to the task name.
        """
        if queue is None:
            queue = self.route(task_name) or self.default_queue
        self.scheduler.schedule_task(
            name if name is not None else task_name, message_factory, queue, schedule
        )

    async def start(self) -> None:
        """Run the beat forever, reconnecting to the broker when the connection fails."""
        logger.info("Starting beat service")
        while True:
            try:
                await self._beat_loop()
            except BrokerError as err:
                if not self.broker_connection_retry or not err.is_connection_error():
                    raise
                logger.error("Broker connection failed")
            await self._reconnect()

    async def _reconnect(self) -> None:
        for _ in range(self.broker_connection_max_retries):
            logger.info("Trying to re-establish connection with broker")
            await asyncio.sleep(self.broker_connection_retry_delay)
            try:
                await self.scheduler.broker.reconnect(self.broker_connection_timeout)
            except BrokerError as err:
                if err.is_connection_error():
                    continue
                raise
            logger.info("Successfully reconnected with broker")
            return
        raise NotConnectedError()

    async def _beat_loop(self) -> None:
        while True:
            next_tick_at = await self.scheduler.tick()

            if self.scheduler_backend.should_sync():
                self.scheduler_backend.sync(self.scheduler.scheduled_tasks)

            now = datetime.now(timezone.utc)
            if now < next_tick_at:
                sleep_interval = next_tick_at - now
                if self.max_sleep_duration is not None:
                    sleep_interval = min(sleep_interval, self.max_sleep_duration)
                logger.debug("Now sleeping for %s", sleep_interval)
                await asyncio.sleep(sleep_interval.total_seconds())
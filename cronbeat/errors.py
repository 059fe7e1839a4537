"""Exceptions raised by schedules, the scheduler and the beat service."""

from __future__ import annotations


class BeatError(Exception):
    """Base class for every error raised by the beat service."""


class ScheduleError(BeatError):
    """A schedule could not be built or evaluated."""


class CronScheduleError(ScheduleError):
    """A cron schedule is invalid."""


class BrokerError(BeatError):
    """The broker failed to carry out an operation."""

    def is_connection_error(self) -> bool:
        """Return whether the error comes from a lost or missing connection."""
        return False


class BrokerConnectionError(BrokerError):
    """The connection to the broker failed."""

    def is_connection_error(self) -> bool:
        return True


class NotConnectedError(BrokerConnectionError):
    """The broker is not connected."""

    def __init__(self, message: str = "Broker not connected") -> None:
        super().__init__(message)
"""An asyncio beat service sending messages to a broker on cron and interval schedules."""

__version__ = "0.1.0"

__all__ = [
    "backend",
    "beat",
    "cron",
    "errors",
    "parsing",
    "schedule",
    "scheduled_task",
    "scheduler",
    "time_units",
]
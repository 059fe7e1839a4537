"""Cron schedules using crontab syntax."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone, tzinfo

from .errors import CronScheduleError, ScheduleError
from .parsing import Shorthand, parse_longhand, parse_shorthand
from .schedule import Schedule
from .time_units import TimeUnitField, TimeUnitValues

MAX_YEAR = 2100
"""The maximum year supported by a :class:`CronSchedule` (exclusive)."""

_ALL_WEEK_DAYS = range(0, 7)
_ALL_MONTH_DAYS = range(1, 32)
_ALL_MONTHS = range(1, 13)
_ALL_HOURS = range(0, 24)

_SHORTHANDS: dict[Shorthand, tuple[Iterable[int], ...]] = {
    Shorthand.YEARLY: ([0], [0], [1], [1], _ALL_WEEK_DAYS),
    Shorthand.MONTHLY: ([0], [0], [1], _ALL_MONTHS, _ALL_WEEK_DAYS),
    Shorthand.WEEKLY: ([0], [0], _ALL_MONTH_DAYS, _ALL_MONTHS, [1]),
    Shorthand.DAILY: ([0], [0], _ALL_MONTH_DAYS, _ALL_MONTHS, _ALL_WEEK_DAYS),
    Shorthand.HOURLY: ([0], _ALL_HOURS, _ALL_MONTH_DAYS, _ALL_MONTHS, _ALL_WEEK_DAYS),
}

_FIELD_NAMES = {
    TimeUnitField.MINUTES: "Minutes",
    TimeUnitField.HOURS: "Hours",
    TimeUnitField.MONTH_DAYS: "Month days",
    TimeUnitField.MONTHS: "Months",
    TimeUnitField.WEEK_DAYS: "Week days",
}


def is_leap_year(year: int) -> bool:
    """Return whether ``year`` is a leap year in the Gregorian calendar."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(month: int, year: int) -> int:
    """Return the number of days of ``month`` in ``year``."""
    if month in (4, 6, 9, 11):
        return 30
    if month == 2:
        return 29 if is_leap_year(year) else 28
    if month in (1, 3, 5, 7, 8, 10, 12):
        return 31
    raise ValueError(
        f"{month} is not a valid value for a month (it must be between 1 and 12)"
    )


def _validated(field: TimeUnitField, values: Iterable[int]) -> TimeUnitValues:
    ordered = sorted(set(values))
    name = _FIELD_NAMES[field]
    if not ordered:
        raise CronScheduleError(f"{name} were not set")
    if ordered[0] < field.inclusive_min:
        raise CronScheduleError(f"{name} cannot be less than {field.inclusive_min}")
    if ordered[-1] > field.inclusive_max:
        raise CronScheduleError(f"{name} cannot be more than {field.inclusive_max}")
    return TimeUnitValues.from_list(field, ordered)


def _resolve_local(
    tz: tzinfo | None, year: int, month: int, day: int, hour: int, minute: int
) -> datetime | None:
    """Return the single datetime matching the wall-clock time, if there is one."""
    naive = datetime(year, month, day, hour, minute)
    first = naive.replace(tzinfo=tz, fold=0)
    if tz is None:
        return first
    second = naive.replace(tzinfo=tz, fold=1)
    if first.utcoffset() != second.utcoffset():
        return None  # ambiguous or non-existent
    roundtrip = first.astimezone(timezone.utc).astimezone(tz)
    if roundtrip.replace(tzinfo=None) != naive:
        return None
    return first


class CronSchedule(Schedule):
    """A schedule running tasks at the minutes, hours, days and months of a crontab."""

    def __init__(
        self,
        minutes: Iterable[int],
        hours: Iterable[int],
        month_days: Iterable[int],
        months: Iterable[int],
        week_days: Iterable[int],
        time_zone: tzinfo = timezone.utc,
    ) -> None:
        self.minutes = _validated(TimeUnitField.MINUTES, minutes)
        self.hours = _validated(TimeUnitField.HOURS, hours)
        self.month_days = _validated(TimeUnitField.MONTH_DAYS, month_days)
        self.months = _validated(TimeUnitField.MONTHS, months)
        self.week_days = _validated(TimeUnitField.WEEK_DAYS, week_days)
        self.time_zone = time_zone

    @classmethod
    def from_string(cls, schedule: str, time_zone: tzinfo = timezone.utc) -> CronSchedule:
        """Build a schedule from a five-field cron string or an ``@`` shorthand."""
        if schedule.startswith("@"):
            return cls(*_SHORTHANDS[parse_shorthand(schedule)], time_zone=time_zone)
        components = schedule.split()
        if len(components) != 5:
            raise CronScheduleError(
                f"'{schedule}' is not a valid cron schedule: invalid number of elements"
            )
        fields = (
            TimeUnitField.MINUTES,
            TimeUnitField.HOURS,
            TimeUnitField.MONTH_DAYS,
            TimeUnitField.MONTHS,
            TimeUnitField.WEEK_DAYS,
        )
        parsed = [parse_longhand(text, field) for text, field in zip(components, fields)]
        return cls(*parsed, time_zone=time_zone)

    def next_call_at(self, last_run_at: datetime | None) -> datetime | None:
        now = datetime.now(timezone.utc).astimezone(self.time_zone)
        return self.next(now)

    def next(self, now: datetime) -> datetime | None:
        """Return the first scheduled minute strictly after ``now``, or None."""
        if now.tzinfo is None:
            now = now.replace(tzinfo=self.time_zone)
        tz = now.tzinfo
        current_minute = now.minute
        current_hour = now.hour
        current_month_day = now.day
        current_month = now.month
        current_year = now.year
        if current_year > MAX_YEAR:
            raise ScheduleError(f"Years after {MAX_YEAR} are not supported")

        overflow = False
        for year in range(current_year, MAX_YEAR):
            month_start = 1 if overflow else current_month
            for month in self.months.open_range(month_start):
                if month > current_month:
                    overflow = True
                month_day_start = 1 if overflow else current_month_day
                for month_day in self.month_days.bounded_range(
                    month_day_start, days_in_month(month, year)
                ):
                    if month_day > current_month_day:
                        overflow = True
                    wrong_week_day = False
                    hour_target = 0 if overflow else current_hour
                    for hour in self.hours.open_range(hour_target):
                        if hour > current_hour:
                            overflow = True
                        minute_target = 0 if overflow else current_minute + 1
                        for minute in self.minutes.open_range(minute_target):
                            candidate = _resolve_local(tz, year, month, month_day, hour, minute)
                            if candidate is None:
                                continue
                            if not self.week_days.contains(candidate.isoweekday() % 7):
                                # No other time on this day can match either.
                                wrong_week_day = True
                                break
                            return candidate
                        if wrong_week_day:
                            break
                        overflow = True
                    if not wrong_week_day:
                        overflow = True
                overflow = True
            overflow = True
        return None

    def __repr__(self) -> str:
        return (
            f"CronSchedule(minutes={self.minutes.as_list()!r}, hours={self.hours.as_list()!r}, "
            f"month_days={self.month_days.as_list()!r}, months={self.months.as_list()!r}, "
            f"week_days={self.week_days.as_list()!r}, time_zone={self.time_zone!r})"
        )
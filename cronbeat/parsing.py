"""Parsing of cron schedule strings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .errors import CronScheduleError
from .time_units import TimeUnitField

_NUMBER = re.compile(r"\+?[0-9]+")


class Shorthand(Enum):
    """The ``@``-prefixed cron shorthands."""

    YEARLY = "@yearly"
    MONTHLY = "@monthly"
    WEEKLY = "@weekly"
    DAILY = "@daily"
    HOURLY = "@hourly"


def parse_shorthand(s: str) -> Shorthand:
    """Parse a shorthand such as ``@daily`` (case-insensitive)."""
    try:
        return Shorthand(s.lower())
    except ValueError:
        raise CronScheduleError(
            f"'{s}' is not a valid shorthand for a cron schedule"
        ) from None


@dataclass(frozen=True)
class _Element:
    lower: int | None = None  # None together with upper None means "*"
    upper: int | None = None
    step: int = 1
    is_range: bool = False


class _ElementError(Exception):
    pass


def _parse_number(s: str) -> int:
    if not _NUMBER.fullmatch(s):
        raise _ElementError(s)
    return int(s)


def _parse_ordinal(s: str, field: TimeUnitField) -> int:
    if _NUMBER.fullmatch(s):
        return int(s)
    try:
        return field.ordinal_from_string(s)
    except ValueError:
        raise _ElementError(s) from None


def _parse_element(s: str, field: TimeUnitField) -> _Element:
    if s == "*":
        return _Element()
    if "-" in s:
        lower_text, _, upper_text = s.partition("-")
        return _Element(
            _parse_ordinal(lower_text, field),
            _parse_ordinal(upper_text, field),
            is_range=True,
        )
    number = _parse_ordinal(s, field)
    return _Element(number, number)


def _parse_element_with_step(s: str, field: TimeUnitField) -> _Element:
    if "/" not in s:
        return _parse_element(s, field)
    base_text, _, step_text = s.partition("/")
    base = _parse_element(base_text, field)
    step = _parse_number(step_text)
    if step == 0:
        raise _ElementError(s)
    if base.lower is not None and not base.is_range:
        raise _ElementError(s)
    return _Element(base.lower, base.upper, step, base.is_range)


def parse_longhand(s: str, field: TimeUnitField) -> list[int]:
    """Parse one comma-separated cron field into a sorted list of ordinals."""
    result: set[int] = set()
    for text in s.split(","):
        try:
            element = _parse_element_with_step(text, field)
        except _ElementError:
            raise CronScheduleError(
                f"'{s}' is an invalid value for {field.label}"
            ) from None
        if element.lower is None:
            lower, upper = field.inclusive_min, field.inclusive_max
        else:
            lower, upper = element.lower, element.upper
        result.update(range(lower, upper + 1, element.step))
    return sorted(result)
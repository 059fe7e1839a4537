"""Time units used by cron schedules and the sets of values they accept."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class TimeUnitField(Enum):
    """A cron field: its display label and its inclusive range of values."""

    MINUTES = ("minutes", 0, 59)
    HOURS = ("hours", 0, 23)
    MONTH_DAYS = ("month days", 1, 31)
    MONTHS = ("months", 1, 12)
    WEEK_DAYS = ("week days", 0, 6)

    def __init__(self, label: str, inclusive_min: int, inclusive_max: int) -> None:
        self.label = label
        self.inclusive_min = inclusive_min
        self.inclusive_max = inclusive_max

    @property
    def size(self) -> int:
        """Number of distinct valid values."""
        return self.inclusive_max - self.inclusive_min + 1

    def ordinal_from_string(self, s: str) -> int:
        """Convert a three-letter name (e.g. ``mon``, ``oct``) to its number."""
        try:
            return _NAMES[self][s.lower()]
        except KeyError:
            raise ValueError(f"{s!r} is not a valid name for {self.label}") from None


_NAMES: dict[TimeUnitField, dict[str, int]] = {
    TimeUnitField.MINUTES: {},
    TimeUnitField.HOURS: {},
    TimeUnitField.MONTH_DAYS: {},
    TimeUnitField.MONTHS: {
        name: number
        for number, name in enumerate(
            ["jan", "feb", "mar", "apr", "may", "jun",
             "jul", "aug", "sep", "oct", "nov", "dec"],
            start=1,
        )
    },
    TimeUnitField.WEEK_DAYS: {
        name: number
        for number, name in enumerate(["sun", "mon", "tue", "wed", "thu", "fri", "sat"])
    },
}


@dataclass(frozen=True)
class TimeUnitValues:
    """The values selected for one field; ``values`` is None when all are selected."""

    field: TimeUnitField
    values: tuple[int, ...] | None = None

    @classmethod
    def from_list(cls, field: TimeUnitField, values) -> TimeUnitValues:
        """Build from any iterable of ordinals, collapsing the full range to 'all'."""
        ordered = tuple(sorted(set(values)))
        if len(ordered) == field.size:
            return cls(field, None)
        return cls(field, ordered)

    @property
    def is_all(self) -> bool:
        return self.values is None

    def open_range(self, start: int) -> Iterator[int]:
        """Iterate selected values from ``start`` up to the field maximum."""
        return self.bounded_range(start, self.field.inclusive_max)

    def bounded_range(self, start: int, stop: int) -> Iterator[int]:
        """Iterate selected values within ``start`` and ``stop`` inclusive."""
        if self.values is None:
            return iter(range(start, stop + 1))
        return (value for value in self.values if start <= value <= stop)

    def contains(self, target: int) -> bool:
        if self.values is None:
            return self.field.inclusive_min <= target <= self.field.inclusive_max
        return target in self.values

    def as_list(self) -> list[int]:
        """Return every selected value in ascending order."""
        if self.values is None:
            return list(range(self.field.inclusive_min, self.field.inclusive_max + 1))
        return list(self.values)
"""Calendar helpers shared by the billing engine.

Every "is it overdue yet" decision goes through ``start_of_day`` so that a
record due today is never flagged before the day is over.
"""
import calendar
from datetime import date, datetime, timedelta
from typing import NamedTuple, Union

DateLike = Union[date, datetime]


class MonthKey(NamedTuple):
    year: int
    month: int

    @classmethod
    def parse(cls, value: str) -> "MonthKey":
        """Parse a ``YYYY-MM`` string"""
        year, month = value.split("-")[:2]
        return cls(int(year), int(month))

    def contains(self, value: DateLike | None) -> bool:
        if value is None:
            return False
        return value.year == self.year and value.month == self.month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def start_of_day(value: DateLike) -> date:
    """Normalize a date or datetime to its calendar day (midnight)."""
    if isinstance(value, datetime):
        return value.date()
    return value


def month_key(value: DateLike) -> MonthKey:
    return MonthKey(value.year, value.month)


def clamp_due_date(year: int, month: int, due_day: int) -> date:
    """Due date for ``due_day`` in the given month, clamped to the month's last day."""
    return date(year, month, min(due_day, days_in_month(year, month)))


def is_before(value: date, reference: DateLike) -> bool:
    """True when ``value`` falls strictly before the reference day."""
    return value < start_of_day(reference)


def window_end(reference: DateLike, days: int) -> date:
    return start_of_day(reference) + timedelta(days=days)


def in_window(value: date, reference: DateLike, days: int) -> bool:
    """True when ``value`` lies in ``[start_of_day(reference), +days]``, both ends inclusive."""
    return start_of_day(reference) <= value <= window_end(reference, days)

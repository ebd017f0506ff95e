"""Calendar date value type and period-start helpers.

Schema-agnostic: no pandas, no settings. Everything above this module
(week numbering, predicates, frames) consumes CalendarDate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from weekcal.errors import InvalidDate

ISO_DATE_FMT = "%Y-%m-%d"

# Strict yyyy-mm-dd. date.fromisoformat() also accepts 20240101 and week dates.
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True, order=True)
class CalendarDate:
    """An immutable Gregorian date without time of day.

    Field order is (year, month, day), so the generated ordering is
    calendar order.
    """

    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        try:
            date(self.year, self.month, self.day)
        except (TypeError, ValueError) as e:
            raise InvalidDate(
                f"Invalid calendar date {self.year!r}-{self.month!r}-{self.day!r}: {e}"
            ) from e

    @classmethod
    def parse(cls, text: str) -> CalendarDate:
        """Parse a YYYY-MM-DD string.

        Raises:
            InvalidDate: Not a string in that exact format, or not a real date.
        """
        if not isinstance(text, str):
            raise InvalidDate(f"Expected an ISO date string (YYYY-MM-DD), got {text!r}")
        m = _ISO_DATE_RE.match(text.strip())
        if not m:
            raise InvalidDate(f"Invalid ISO date {text!r}: expected YYYY-MM-DD")
        return cls(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    @classmethod
    def from_date(cls, value: date) -> CalendarDate:
        """Build from a date; datetimes (and pandas Timestamps) are truncated."""
        if isinstance(value, datetime):
            value = value.date()
        return cls(value.year, value.month, value.day)

    @classmethod
    def coerce(cls, value: CalendarDate | date | str) -> CalendarDate:
        """Accept a CalendarDate, a date/datetime, or an ISO string."""
        if isinstance(value, CalendarDate):
            return value
        if isinstance(value, date):
            return cls.from_date(value)
        return cls.parse(value)

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def weekday(self) -> int:
        """Day of week, Monday == 0 ... Sunday == 6."""
        return self.to_date().weekday()

    def add_days(self, days: int) -> CalendarDate:
        return CalendarDate.from_date(self.to_date() + timedelta(days=days))

    def __str__(self) -> str:
        return self.isoformat()


def month_start(year: int, month: int) -> CalendarDate:
    """First day of the given month."""
    return CalendarDate(year, month, 1)


def year_start(year: int) -> CalendarDate:
    """January 1st of the given year."""
    return CalendarDate(year, 1, 1)

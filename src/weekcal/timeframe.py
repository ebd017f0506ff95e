"""Timeframes, column schemes, and date ranges.

Every API that serves time-series data takes ``from`` and ``to`` as
YYYY-MM-DD plus a timeframe that picks the aggregation:

  day   : group by the date column
  week  : group by (week-year, week number)
  month : group by (year, month number)
  year  : group by year (the financial year in the IKEA scheme)

The timeframe decides both the GROUP BY columns (time_columns) and the
shape of the WHERE predicate (where_clause). A ColumnScheme names the
denormalized columns those refer to:

  ikea : ikea_year/ikea_week (Sunday-start weeks), iso_year/iso_month,
         financial_year
  iso  : year/week (ISO weeks), year/month, year

Validation of caller input (from <= to, allowed timeframes) happens at the
boundary in validate_date_range() / DateRange.parse(). where_clause()
assumes a valid range.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, fields
from datetime import date
from enum import Enum

from weekcal.dates import CalendarDate
from weekcal.errors import InvalidRange, InvalidTimeframe
from weekcal.fiscal import financial_year
from weekcal.predicate import Predicate, between, check_identifier, span
from weekcal.weeks import WeekKey, ikea_week, iso_week


@dataclass(frozen=True)
class ColumnScheme:
    """Names of the denormalized time columns and how weeks are numbered."""

    name: str
    date: str
    week_year: str
    week: str
    month_year: str
    month: str
    year: str
    week_key: Callable[[CalendarDate | date], WeekKey]
    fiscal_year: bool

    def __post_init__(self) -> None:
        for col in (self.date, self.week_year, self.week, self.month_year, self.month, self.year):
            check_identifier(col)


IKEA = ColumnScheme(
    name="ikea",
    date="date",
    week_year="ikea_year",
    week="ikea_week",
    month_year="iso_year",
    month="iso_month",
    year="financial_year",
    week_key=ikea_week,
    fiscal_year=True,
)

ISO = ColumnScheme(
    name="iso",
    date="date",
    week_year="year",
    week="week",
    month_year="year",
    month="month",
    year="year",
    week_key=iso_week,
    fiscal_year=False,
)

SCHEMES: dict[str, ColumnScheme] = {IKEA.name: IKEA, ISO.name: ISO}


def get_scheme(name: str | ColumnScheme) -> ColumnScheme:
    """Look up a scheme by name (case-insensitive); schemes pass through."""
    if isinstance(name, ColumnScheme):
        return name
    key = (name or "").strip().lower()
    if key not in SCHEMES:
        raise ValueError(f"Unknown column scheme {name!r}. Supported: {', '.join(SCHEMES)}")
    return SCHEMES[key]


def _aliased(column: str, alias: str, use_alias: bool) -> str:
    if use_alias and column != alias:
        return f"{column} AS {alias}"
    return column


class Timeframe(str, Enum):
    """Aggregation granularity of a date range."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str | Timeframe) -> Timeframe:
        if isinstance(value, Timeframe):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            supported = ", ".join(t.value for t in cls)
            raise InvalidTimeframe(
                f"Unknown timeframe {value!r}. Supported: {supported}"
            ) from None

    def time_columns(self, use_alias: bool = False, scheme: ColumnScheme = IKEA) -> list[str]:
        """Columns to GROUP BY, in order.

        With use_alias the columns read ``ikea_year AS year`` etc. for use in
        a SELECT list; columns already named year/week/month are left alone.
        """
        if self is Timeframe.DAY:
            return [scheme.date]
        if self is Timeframe.WEEK:
            return [
                _aliased(scheme.week_year, "year", use_alias),
                _aliased(scheme.week, "week", use_alias),
            ]
        if self is Timeframe.MONTH:
            return [
                _aliased(scheme.month_year, "year", use_alias),
                _aliased(scheme.month, "month", use_alias),
            ]
        return [_aliased(scheme.year, "year", use_alias)]

    def where_clause(
        self,
        from_date: CalendarDate | date | str,
        to_date: CalendarDate | date | str,
        scheme: ColumnScheme = IKEA,
    ) -> Predicate:
        """Predicate selecting every row of the range at this granularity.

        Week and month ranges cover whole periods: a range starting mid-week
        includes the entire first week.
        """
        start = CalendarDate.coerce(from_date)
        end = CalendarDate.coerce(to_date)

        if self is Timeframe.DAY:
            return between(scheme.date, start.isoformat(), end.isoformat())

        if self is Timeframe.WEEK:
            return span(scheme.week_year, scheme.week, scheme.week_key(start), scheme.week_key(end))

        if self is Timeframe.MONTH:
            return span(
                scheme.month_year,
                scheme.month,
                (start.year, start.month),
                (end.year, end.month),
            )

        if scheme.fiscal_year:
            return between(
                scheme.year,
                financial_year(start.year, start.month),
                financial_year(end.year, end.month),
            )
        return between(scheme.year, start.year, end.year)

    def period_key(self, value: CalendarDate | date, scheme: ColumnScheme = IKEA) -> tuple:
        """Values of this timeframe's time columns for one date."""
        d = CalendarDate.coerce(value)
        if self is Timeframe.DAY:
            return (d.isoformat(),)
        if self is Timeframe.WEEK:
            return tuple(scheme.week_key(d))
        if self is Timeframe.MONTH:
            return (d.year, d.month)
        if scheme.fiscal_year:
            return (financial_year(d.year, d.month),)
        return (d.year,)


@dataclass(frozen=True)
class ValidTimeframes:
    """Which timeframes an API accepts."""

    day: bool = True
    week: bool = True
    month: bool = True
    year: bool = True

    @classmethod
    def parse(cls, names: str) -> ValidTimeframes:
        """Build from a comma-separated list such as ``"week,month"``."""
        wanted = {Timeframe.parse(n).value for n in names.split(",") if n.strip()}
        return cls(**{f.name: f.name in wanted for f in fields(cls)})

    def allows(self, timeframe: Timeframe) -> bool:
        return bool(getattr(self, timeframe.value))

    def names(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name)]


@dataclass(frozen=True)
class DateRange:
    """A closed [from_date, to_date] range at a timeframe granularity."""

    from_date: CalendarDate
    to_date: CalendarDate
    timeframe: Timeframe
    scheme: ColumnScheme = IKEA

    @classmethod
    def parse(
        cls,
        from_date: CalendarDate | date | str,
        to_date: CalendarDate | date | str,
        timeframe: str | Timeframe,
        scheme: str | ColumnScheme = IKEA,
        allowed: ValidTimeframes | None = None,
    ) -> DateRange:
        """Parse and validate caller input.

        Raises:
            InvalidDate: from/to are not YYYY-MM-DD dates.
            InvalidTimeframe: Unknown or disallowed timeframe.
            InvalidRange: from is after to.
        """
        date_range = cls(
            from_date=CalendarDate.coerce(from_date),
            to_date=CalendarDate.coerce(to_date),
            timeframe=Timeframe.parse(timeframe),
            scheme=get_scheme(scheme),
        )
        validate_date_range(date_range, allowed)
        return date_range

    def time_columns(self, use_alias: bool = False) -> list[str]:
        return self.timeframe.time_columns(use_alias, self.scheme)

    def where_clause(self) -> Predicate:
        return self.timeframe.where_clause(self.from_date, self.to_date, self.scheme)

    def contains(self, value: CalendarDate | date | str) -> bool:
        """True if the date's period falls inside the range's periods."""
        key = self.timeframe.period_key(CalendarDate.coerce(value), self.scheme)
        low = self.timeframe.period_key(self.from_date, self.scheme)
        high = self.timeframe.period_key(self.to_date, self.scheme)
        return low <= key <= high

    def __str__(self) -> str:
        return f"{self.from_date} → {self.to_date} ({self.timeframe}, {self.scheme.name})"


def validate_date_range(date_range: DateRange, allowed: ValidTimeframes | None = None) -> None:
    """Check a caller-supplied range before it reaches the predicate builder.

    Raises:
        InvalidRange: from_date is after to_date.
        InvalidTimeframe: The timeframe is not in ``allowed``.
    """
    if date_range.from_date > date_range.to_date:
        raise InvalidRange(
            f"'from' ({date_range.from_date}) must not be after 'to' ({date_range.to_date})"
        )
    if allowed is not None and not allowed.allows(date_range.timeframe):
        raise InvalidTimeframe(
            f"Timeframe '{date_range.timeframe}' is not supported here. "
            f"Allowed: {', '.join(allowed.names()) or '(none)'}"
        )

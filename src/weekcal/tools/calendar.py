"""Calendar tools: week numbering, week boundaries and range predicates.

Pure computation, no data access. Each tool returns formatted text;
validation failures come back as ``Error: ...`` messages.
"""

from __future__ import annotations

import logging
from datetime import date

from weekcal.config import settings
from weekcal.dates import CalendarDate
from weekcal.errors import CalendarError
from weekcal.fiscal import financial_year_bounds, financial_year_of
from weekcal.predicate import sql_literal
from weekcal.timeframe import DateRange
from weekcal.weeks import WeekKey
from weekcal.weeks import week_first_day as _week_first_day
from weekcal.weeks import week_last_day as _week_last_day
from weekcal.weeks import weeks_in_year

logger = logging.getLogger(__name__)


def _iso_week_bounds(key: WeekKey) -> tuple[CalendarDate, CalendarDate]:
    first = CalendarDate.from_date(date.fromisocalendar(key.year, key.week, 1))
    return first, first.add_days(6)


async def week_of(date: str, scheme: str = "") -> str:
    """Describe the week a date belongs to.

    Args:
        date: YYYY-MM-DD.
        scheme: "ikea" (Sunday-start weeks) or "iso". Empty = configured default.

    Returns:
        Week key, first and last day of that week, and the financial year.
    """
    try:
        day = CalendarDate.parse(date)
        cols = settings.resolve_scheme(scheme)
        key = cols.week_key(day)
        if cols.fiscal_year:
            first = _week_first_day(key.year, key.week)
            last = first.add_days(6)
        else:
            first, last = _iso_week_bounds(key)
    except ValueError as e:
        return f"Error: {e}"

    lines = [
        f"{day} ({day.to_date():%A})",
        f"  Week:  {key} ({cols.name})",
        f"  Days:  {first} → {last}",
    ]
    if cols.fiscal_year:
        fy = financial_year_of(day)
        fy_start, fy_end = financial_year_bounds(fy)
        lines.append(f"  FY:    {fy} ({fy_start} → {fy_end})")
    return "\n".join(lines)


async def week_first_day(year: int, week: int) -> str:
    """First and last day of a Sunday-start week.

    Args:
        year: Week-year.
        week: Week number, 1-53.

    Returns:
        The week's date span, or an error if the year has no such week.
    """
    try:
        first = _week_first_day(year, week)
        last = _week_last_day(year, week)
    except CalendarError as e:
        return f"Error: {e}"
    return f"{WeekKey(year, week)}: {first} ({first.to_date():%a}) → {last} ({last.to_date():%a})"


async def list_weeks(year: int) -> str:
    """Every Sunday-start week of a week-year with its first and last days.

    Args:
        year: Week-year.

    Returns:
        One line per week; 52 or 53 lines.
    """
    try:
        count = weeks_in_year(year)
        first = _week_first_day(year, 1)
    except CalendarError as e:
        return f"Error: {e}"

    lines = [f"Week-year {year}: {count} weeks", ""]
    for week in range(1, count + 1):
        start = first.add_days(7 * (week - 1))
        lines.append(f"  W{week:02d}  {start} → {start.add_days(6)}")
    return "\n".join(lines)


async def where_clause(from_date: str, to_date: str, timeframe: str, scheme: str = "") -> str:
    """Build the filter predicate for a date range.

    Args:
        from_date: Range start, YYYY-MM-DD.
        to_date: Range end, YYYY-MM-DD (inclusive).
        timeframe: "day", "week", "month" or "year".
        scheme: Column scheme ("ikea" or "iso"). Empty = configured default.

    Returns:
        Group-by columns, the ``?`` template with its params, and the
        rendered SQL for reading.
    """
    try:
        date_range = DateRange.parse(
            from_date,
            to_date,
            timeframe,
            settings.resolve_scheme(scheme),
            settings.valid_timeframes,
        )
        predicate = date_range.where_clause()
    except ValueError as e:
        return f"Error: {e}"

    logger.debug("where_clause %s -> %s", date_range, predicate.render())
    params = ", ".join(sql_literal(p) for p in predicate.params)
    return (
        f"Range: {date_range}\n"
        f"Group by: {', '.join(date_range.time_columns(use_alias=True))}\n"
        f"Template: {predicate.template}\n"
        f"Params: [{params}]\n"
        f"SQL: {predicate.render()}"
    )


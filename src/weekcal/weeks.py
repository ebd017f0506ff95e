"""Sunday-start (IKEA) week numbering and its inverse.

Weeks start on Sunday and week 1 is the week that contains January 4th,
the same as US CDC epiweeks. Jan 1-3 of year n can belong to week 52 or 53
of year n-1, and Dec 28-31 can belong to week 1 of year n+1.

The numbering is derived from ISO-8601 (Monday-start) weeks:

1. Take the ISO (year, week) of the date.
2. A Sunday opens the next week instead of closing the current one, so
   Sundays move forward one week (wrapping at 52/53).
3. In years whose Jan 4th is a Sunday, ISO week 2 is Sunday-week 1, so
   every week in that year moves back by one.
4. The seven days before such a Jan 4th (Dec 28 - Jan 3) form a week 53
   of the previous year that ISO does not have.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import NamedTuple

from weekcal.dates import CalendarDate
from weekcal.errors import InvalidWeek

# Upper bound for the linear search in week_first_day: at most 53 weeks
# per year plus one step of slack.
MAX_WEEK_SEARCH = 54


class WeekKey(NamedTuple):
    """A week-owning year and week number (1..53)."""

    year: int
    week: int

    def __str__(self) -> str:
        return f"{self.year}-W{self.week:02d}"


def _as_date(value: CalendarDate | date) -> date:
    if isinstance(value, CalendarDate):
        return value.to_date()
    if isinstance(value, datetime):
        return value.date()
    return value


def _jan4_is_sunday(year: int) -> bool:
    # calendar.weekday() tolerates years outside date's range (e.g. 10000),
    # which step 4 can ask about for late December 9999.
    return calendar.weekday(year, 1, 4) == calendar.SUNDAY


def ikea_week(value: CalendarDate | date) -> WeekKey:
    """Return the Sunday-start (year, week) that contains the date.

    Total over every valid date.
    """
    d = _as_date(value)
    year, week, _ = d.isocalendar()
    is_sunday = d.weekday() == calendar.SUNDAY

    if is_sunday:
        if week < 52:
            week += 1
        elif week == 52:
            # The following Monday is either in ISO week 53 or week 1 of next year
            next_year, next_week, _ = (d + timedelta(days=1)).isocalendar()
            year, week = next_year, next_week
        else:
            year, week = year + 1, 1

    # Use the produced year, not d.year: 2005-01-01 is a Saturday in week 53 of 2004
    if _jan4_is_sunday(year) or (d.year != year and is_sunday and d.month == 1):
        week -= 1

    # Dec 28 - Jan 3 around a Sunday Jan 4th is week 53 of the December year
    if d.month == 12 and d.day >= 28 and _jan4_is_sunday(d.year + 1):
        year, week = d.year, 53
    elif d.month == 1 and d.day <= 3 and _jan4_is_sunday(d.year):
        year, week = d.year - 1, 53

    return WeekKey(year, week)


def iso_week(value: CalendarDate | date) -> WeekKey:
    """Return the plain ISO-8601 (year, week) of the date."""
    year, week, _ = _as_date(value).isocalendar()
    return WeekKey(year, week)


def week_first_day(year: int, week: int) -> CalendarDate:
    """Return the Sunday that starts the given Sunday-start week.

    ikea_week() is not affine near year boundaries, so this walks forward a
    week at a time from the first candidate Sunday until the numbering
    agrees, bounded by MAX_WEEK_SEARCH.

    Raises:
        InvalidWeek: The numbering never produces (year, week).
    """
    if not 1 <= week <= 53:
        raise InvalidWeek(f"Week must be between 1 and 53, got {week}")
    try:
        jan4 = date(year, 1, 4)
    except ValueError as e:
        raise InvalidWeek(f"Year {year} is outside the supported date range") from e

    target = WeekKey(year, week)
    try:
        if week == 1 and jan4.weekday() != calendar.SUNDAY:
            # The first week starts on the Sunday before Jan 4th, possibly in December
            candidate = jan4 - timedelta(days=(jan4.weekday() + 1) % 7)
        else:
            candidate = jan4 + timedelta(days=(calendar.SUNDAY - jan4.weekday()) % 7)

        for _ in range(MAX_WEEK_SEARCH):
            if ikea_week(candidate) == target:
                return CalendarDate.from_date(candidate)
            candidate += timedelta(days=7)
    except OverflowError as e:
        raise InvalidWeek(f"Week {target} is outside the supported date range") from e

    raise InvalidWeek(f"Week {week} does not exist in week-year {year}")


def week_last_day(year: int, week: int) -> CalendarDate:
    """Return the Saturday that ends the given week."""
    return week_first_day(year, week).add_days(6)


def weeks_in_year(year: int) -> int:
    """Number of Sunday-start weeks (52 or 53) in a week-year."""
    next_first = week_first_day(year + 1, 1)
    return ikea_week(next_first.add_days(-1)).week

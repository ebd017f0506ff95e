"""Financial year mapping. The financial year starts in September."""

from __future__ import annotations

from datetime import date

from weekcal.dates import CalendarDate

FISCAL_YEAR_START_MONTH = 9


def financial_year(year: int, month: int) -> int:
    """Return the financial year for a calendar (year, month).

    September onwards belongs to the next year's financial year:
    2024-09 is FY2025, 2024-08 is FY2024.
    """
    if month >= FISCAL_YEAR_START_MONTH:
        return year + 1
    return year


def financial_year_of(value: CalendarDate | date) -> int:
    return financial_year(value.year, value.month)


def financial_year_bounds(fy: int) -> tuple[CalendarDate, CalendarDate]:
    """First and last calendar day of a financial year."""
    return (
        CalendarDate(fy - 1, FISCAL_YEAR_START_MONTH, 1),
        CalendarDate(fy, FISCAL_YEAR_START_MONTH - 1, 31),
    )

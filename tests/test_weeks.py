"""Tests for Sunday-start week numbering, its inverse and ISO weeks."""

from datetime import date, timedelta

import pytest

from weekcal.dates import CalendarDate
from weekcal.errors import InvalidWeek
from weekcal.weeks import (
    WeekKey,
    ikea_week,
    iso_week,
    week_first_day,
    week_last_day,
    weeks_in_year,
)


def _reference_week(d: date) -> tuple[int, int]:
    """Sunday-week numbering via the week's Wednesday.

    Week 1 contains Jan 4th, so a Sunday-Saturday week belongs to the year
    its Wednesday falls in, and its number is that Wednesday's day-of-year
    bucket.
    """
    wednesday = d + timedelta(days=2 - (d.weekday() + 1) % 7)
    return wednesday.year, (wednesday.timetuple().tm_yday - 1) // 7 + 1


def _days(start: date, end: date):
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


class TestIkeaWeekKnownValues:
    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            ("2024-01-14", (2024, 3)),
            ("2024-12-01", (2024, 49)),
            ("2024-12-10", (2024, 50)),
            ("2025-12-10", (2025, 50)),
            ("2027-12-10", (2027, 49)),
        ],
    )
    def test_mid_year(self, day: str, expected: tuple[int, int]) -> None:
        assert ikea_week(CalendarDate.parse(day)) == expected

    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            # 2015-01-04 is a Sunday: the Dec 28 - Jan 3 week is 2014-W53
            ("2014-12-28", (2014, 53)),
            ("2015-01-03", (2014, 53)),
            ("2015-01-04", (2015, 1)),
            ("2015-01-05", (2015, 1)),
            # ordinary 52-week boundary
            ("2015-12-27", (2015, 52)),
            ("2016-01-02", (2015, 52)),
            ("2016-01-03", (2016, 1)),
            # 2026-01-04 is a Sunday
            ("2025-12-28", (2025, 53)),
            ("2026-01-03", (2025, 53)),
            ("2026-01-04", (2026, 1)),
            # late-December days that open next year's week 1
            ("2023-12-31", (2024, 1)),
            ("2024-12-29", (2025, 1)),
            ("2024-12-28", (2024, 52)),
            ("2026-12-27", (2026, 52)),
            ("2027-01-03", (2027, 1)),
        ],
    )
    def test_year_boundaries(self, day: str, expected: tuple[int, int]) -> None:
        assert ikea_week(CalendarDate.parse(day)) == expected

    def test_accepts_plain_date(self) -> None:
        assert ikea_week(date(2024, 1, 14)) == (2024, 3)

    def test_returns_week_key(self) -> None:
        key = ikea_week(CalendarDate(2025, 12, 28))
        assert isinstance(key, WeekKey)
        assert key.year == 2025
        assert key.week == 53
        assert str(key) == "2025-W53"


class TestIkeaWeekProperties:
    def test_matches_reference_over_decades(self) -> None:
        for d in _days(date(1999, 1, 1), date(2031, 12, 31)):
            assert tuple(ikea_week(d)) == _reference_week(d), d.isoformat()

    def test_sunday_opens_week(self) -> None:
        for d in _days(date(2010, 1, 1), date(2030, 12, 31)):
            key = ikea_week(d)
            if d.weekday() == 6:
                assert key != ikea_week(d - timedelta(days=1)), d.isoformat()
            else:
                assert key == ikea_week(d - timedelta(days=1)), d.isoformat()

    def test_week_range(self) -> None:
        for d in _days(date(2000, 1, 1), date(2030, 12, 31)):
            year, week = ikea_week(d)
            assert 1 <= week <= 53
            assert abs(year - d.year) <= 1

    def test_extreme_dates(self) -> None:
        assert ikea_week(date(1, 1, 7)) == _reference_week(date(1, 1, 7))
        assert ikea_week(date(9999, 12, 25)) == _reference_week(date(9999, 12, 25))


class TestWeekFirstDay:
    @pytest.mark.parametrize(
        ("year", "week", "expected"),
        [
            (2024, 3, "2024-01-14"),
            (2024, 1, "2023-12-31"),
            (2025, 1, "2024-12-29"),
            (2015, 1, "2015-01-04"),
            (2014, 53, "2014-12-28"),
            (2025, 53, "2025-12-28"),
            (2026, 1, "2026-01-04"),
        ],
    )
    def test_known_values(self, year: int, week: int, expected: str) -> None:
        assert week_first_day(year, week) == CalendarDate.parse(expected)

    @pytest.mark.parametrize(("year", "week"), [(2024, 53), (2024, 0), (2024, 54), (2015, -1)])
    def test_nonexistent_week_raises(self, year: int, week: int) -> None:
        with pytest.raises(InvalidWeek):
            week_first_day(year, week)

    def test_year_outside_date_range_raises(self) -> None:
        with pytest.raises(InvalidWeek):
            week_first_day(10000, 1)

    def test_last_day(self) -> None:
        assert week_last_day(2025, 53) == CalendarDate(2026, 1, 3)
        assert week_last_day(2025, 1) == CalendarDate(2025, 1, 4)

    def test_round_trip_every_week(self) -> None:
        for year in range(1995, 2035):
            for week in range(1, weeks_in_year(year) + 1):
                first = week_first_day(year, week)
                assert first.weekday() == 6, (year, week)
                assert ikea_week(first) == (year, week)
                assert ikea_week(first.add_days(6)) == (year, week)

    def test_round_trip_from_days(self) -> None:
        for d in _days(date(2012, 1, 1), date(2028, 12, 31)):
            key = ikea_week(d)
            first = week_first_day(*key).to_date()
            assert first <= d <= first + timedelta(days=6), d.isoformat()


class TestWeeksInYear:
    @pytest.mark.parametrize(("year", "count"), [(2024, 52), (2014, 53), (2025, 53), (2015, 52)])
    def test_known_counts(self, year: int, count: int) -> None:
        assert weeks_in_year(year) == count

    def test_weeks_are_gapless(self) -> None:
        for year in range(1995, 2035):
            count = weeks_in_year(year)
            weeks = {
                ikea_week(week_first_day(year, 1).add_days(i)).week for i in range(0, 7 * count, 7)
            }
            assert weeks == set(range(1, count + 1)), year
            assert ikea_week(week_first_day(year, 1).add_days(7 * count)) == (year + 1, 1)


class TestIsoWeek:
    def test_monday_start(self) -> None:
        assert iso_week(date(2024, 12, 1)) == (2024, 48)  # Sunday
        assert iso_week(date(2024, 12, 2)) == (2024, 49)  # Monday

    def test_year_boundary(self) -> None:
        assert iso_week(CalendarDate(2024, 12, 30)) == (2025, 1)
        assert iso_week(CalendarDate(2021, 1, 3)) == (2020, 53)

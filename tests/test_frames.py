"""Tests for DataFrame annotation, predicate masks and range aggregation."""

import pandas as pd
import pytest

from weekcal.frames import (
    aggregate_range,
    annotate,
    annotate_all,
    calendar_dimension,
    filter_range,
    predicate_mask,
)
from weekcal.timeframe import IKEA, ISO, DateRange, Timeframe


class TestAnnotate:
    def test_week_columns(self) -> None:
        df = pd.DataFrame({"date": ["2024-12-28", "2024-12-29", "2025-12-28"]})
        out = annotate(df, Timeframe.WEEK)
        assert out["ikea_year"].tolist() == [2024, 2025, 2025]
        assert out["ikea_week"].tolist() == [52, 1, 53]

    def test_month_columns(self) -> None:
        df = pd.DataFrame({"date": ["2024-12-31", "2025-01-01"]})
        out = annotate(df, Timeframe.MONTH)
        assert out["iso_year"].tolist() == [2024, 2025]
        assert out["iso_month"].tolist() == [12, 1]

    def test_financial_year_column(self) -> None:
        df = pd.DataFrame({"date": ["2024-08-31", "2024-09-01"]})
        assert annotate(df, Timeframe.YEAR)["financial_year"].tolist() == [2024, 2025]

    def test_iso_year_is_calendar_year(self) -> None:
        df = pd.DataFrame({"date": ["2024-08-31", "2024-09-01"]})
        assert annotate(df, Timeframe.YEAR, scheme=ISO)["year"].tolist() == [2024, 2024]

    def test_iso_week_columns(self) -> None:
        df = pd.DataFrame({"date": ["2024-12-30"]})
        out = annotate(df, Timeframe.WEEK, scheme=ISO)
        assert out["year"].tolist() == [2025]
        assert out["week"].tolist() == [1]

    def test_date_field_normalized_into_date_column(self) -> None:
        df = pd.DataFrame({"ServiceDate": ["2024-12-01 14:30:00", "12/02/2024"]})
        out = annotate(df, Timeframe.DAY, date_field="ServiceDate")
        assert out["date"].dt.strftime("%Y-%m-%d").tolist() == ["2024-12-01", "2024-12-02"]

    def test_unparseable_rows_dropped(self, caplog) -> None:
        df = pd.DataFrame({"date": ["2024-12-01", "not a date", None], "x": [1, 2, 3]})
        with caplog.at_level("WARNING"):
            out = annotate(df, Timeframe.WEEK)
        assert out["x"].tolist() == [1]
        assert "Dropped 2 row(s)" in caplog.text

    def test_source_not_mutated(self) -> None:
        df = pd.DataFrame({"date": ["2024-12-01"]})
        annotate(df, Timeframe.WEEK)
        assert df.columns.tolist() == ["date"]

    def test_missing_date_field(self) -> None:
        with pytest.raises(ValueError, match="Date field 'when'"):
            annotate(pd.DataFrame({"date": []}), Timeframe.DAY, date_field="when")


class TestCalendarDimension:
    def test_ikea_columns(self) -> None:
        df = calendar_dimension("2025-12-27", "2026-01-04")
        assert df.columns.tolist() == [
            "date",
            "ikea_year",
            "ikea_week",
            "iso_year",
            "iso_month",
            "financial_year",
        ]
        assert len(df) == 9
        assert df["ikea_week"].tolist() == [52, 53, 53, 53, 53, 53, 53, 53, 1]
        assert df["financial_year"].unique().tolist() == [2026]

    def test_iso_scheme_rejected(self) -> None:
        with pytest.raises(ValueError, match="reuses column names"):
            calendar_dimension("2025-01-01", "2025-01-31", ISO)

    def test_annotate_all_rejects_iso(self) -> None:
        with pytest.raises(ValueError):
            annotate_all(pd.DataFrame({"date": ["2025-01-01"]}), "date", ISO)


@pytest.fixture(scope="module")
def dimension() -> pd.DataFrame:
    return calendar_dimension("2013-11-01", "2028-02-29")


class TestPredicateMask:
    @pytest.mark.parametrize("timeframe", list(Timeframe))
    @pytest.mark.parametrize(
        ("from_date", "to_date"),
        [
            ("2024-12-01", "2024-12-10"),
            ("2024-12-01", "2025-12-10"),
            ("2024-12-01", "2027-12-10"),
            ("2014-12-30", "2015-01-06"),
            ("2025-12-31", "2026-01-01"),
            ("2024-07-01", "2024-08-30"),
            ("2024-07-01", "2025-12-10"),
        ],
    )
    def test_mask_matches_contains(
        self, dimension: pd.DataFrame, timeframe: Timeframe, from_date: str, to_date: str
    ) -> None:
        date_range = DateRange.parse(from_date, to_date, timeframe)
        mask = predicate_mask(dimension, date_range.where_clause())
        expected = dimension["date"].map(lambda ts: date_range.contains(ts.date())).astype(bool)
        assert (mask == expected).all()

    def test_day_mask_exact(self, dimension: pd.DataFrame) -> None:
        date_range = DateRange.parse("2024-12-01", "2024-12-10", "day")
        selected = dimension.loc[predicate_mask(dimension, date_range.where_clause()), "date"]
        assert selected.dt.strftime("%Y-%m-%d").tolist()[0] == "2024-12-01"
        assert len(selected) == 10

    def test_week_53_selected_whole(self, dimension: pd.DataFrame) -> None:
        date_range = DateRange.parse("2025-12-31", "2025-12-31", "week")
        selected = dimension.loc[predicate_mask(dimension, date_range.where_clause())]
        assert len(selected) == 7
        assert set(selected["ikea_week"]) == {53}

    def test_unknown_column(self) -> None:
        df = pd.DataFrame({"date": pd.to_datetime(["2024-12-01"])})
        date_range = DateRange.parse("2024-12-01", "2024-12-10", "week")
        with pytest.raises(ValueError, match="ikea_year"):
            predicate_mask(df, date_range.where_clause())


class TestFilterRange:
    def test_filters_raw_rows(self, sales_df: pd.DataFrame) -> None:
        date_range = DateRange.parse("2024-12-01", "2024-12-10", "week")
        rows = filter_range(sales_df, date_range)
        assert len(rows) == 14
        assert set(rows["ikea_week"]) == {49, 50}


class TestAggregateRange:
    def test_weekly_sum(self, sales_df: pd.DataFrame) -> None:
        date_range = DateRange.parse("2024-12-01", "2024-12-10", "week")
        result = aggregate_range(sales_df, date_range, {"Amount": ["sum", "count"]})
        assert result.columns.tolist() == ["ikea_year", "ikea_week", "Amount_sum", "Amount_count"]
        assert result["ikea_week"].tolist() == [49, 50]
        assert result["Amount_sum"].tolist() == [70.0, 70.0]
        assert result["Amount_count"].tolist() == [7, 7]

    def test_count_without_aggregates(self, sales_df: pd.DataFrame) -> None:
        date_range = DateRange.parse("2024-12-01", "2025-01-31", "month")
        result = aggregate_range(sales_df, date_range)
        assert result.to_dict("records") == [
            {"iso_year": 2024, "iso_month": 12, "count": 31},
            {"iso_year": 2025, "iso_month": 1, "count": 31},
        ]

    def test_financial_year_totals(self, sales_df: pd.DataFrame) -> None:
        date_range = DateRange.parse("2024-07-01", "2025-12-10", "year")
        result = aggregate_range(sales_df, date_range, {"Units": ["min", "max"]})
        assert result["financial_year"].tolist() == [2024, 2025, 2026]

    def test_day_periods_formatted(self, sales_df: pd.DataFrame) -> None:
        date_range = DateRange.parse("2024-12-30", "2025-01-02", "day")
        result = aggregate_range(sales_df, date_range, {"Units": ["sum"]})
        assert result["date"].tolist() == ["2024-12-30", "2024-12-31", "2025-01-01", "2025-01-02"]
        assert result["Units_sum"].tolist() == [30, 31, 1, 2]

    def test_empty_result(self, sales_df: pd.DataFrame) -> None:
        date_range = DateRange.parse("2030-01-01", "2030-01-31", "day")
        assert aggregate_range(sales_df, date_range).empty

    def test_unknown_field(self, sales_df: pd.DataFrame) -> None:
        date_range = DateRange.parse("2024-12-01", "2024-12-10", "week")
        with pytest.raises(ValueError, match="Field 'Revenue'"):
            aggregate_range(sales_df, date_range, {"Revenue": ["sum"]})

    def test_unknown_function(self, sales_df: pd.DataFrame) -> None:
        date_range = DateRange.parse("2024-12-01", "2024-12-10", "week")
        with pytest.raises(ValueError, match="Unknown function"):
            aggregate_range(sales_df, date_range, {"Amount": ["avg"]})

    def test_iso_scheme(self, sales_df: pd.DataFrame) -> None:
        date_range = DateRange.parse("2024-12-01", "2024-12-10", "week", ISO)
        result = aggregate_range(sales_df, date_range)
        assert result.columns.tolist() == ["year", "week", "count"]
        assert result["week"].tolist() == [48, 49, 50]
        assert result["count"].tolist() == [7, 7, 7]

    def test_default_scheme_is_ikea(self) -> None:
        assert DateRange.parse("2024-12-01", "2024-12-10", "week").scheme is IKEA

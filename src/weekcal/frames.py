"""Denormalized time columns and range filtering on pandas DataFrames.

annotate() derives the columns a timeframe groups by (ikea_year/ikea_week,
iso_year/iso_month, financial_year, ...) from a date field, and
predicate_mask() evaluates a Predicate against them. Together they let
the same predicate that goes to SQL run in memory.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable
from datetime import date

import pandas as pd  # type: ignore[import-untyped]

from weekcal.dates import CalendarDate
from weekcal.fiscal import financial_year
from weekcal.predicate import Comparison, Predicate
from weekcal.timeframe import IKEA, ColumnScheme, DateRange, Timeframe

logger = logging.getLogger(__name__)

SUPPORTED_AGGS = {"sum", "count", "mean", "min", "max", "median", "nunique", "std"}

_OPS: dict[str, Callable[[pd.Series, object], pd.Series]] = {
    "=": operator.eq,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


def _parse_dates(df: pd.DataFrame, date_field: str) -> pd.Series:
    if date_field not in df.columns:
        raise ValueError(
            f"Date field '{date_field}' not in data. Available: {', '.join(map(str, df.columns))}"
        )
    return pd.to_datetime(df[date_field], format="mixed", errors="coerce").dt.normalize()


def annotate(
    df: pd.DataFrame,
    timeframe: Timeframe,
    date_field: str = "date",
    scheme: ColumnScheme = IKEA,
) -> pd.DataFrame:
    """Return a copy of df with the timeframe's time columns added.

    The scheme's date column is (re)written as a normalized datetime.
    Rows whose date_field cannot be parsed are dropped.

    Raises:
        ValueError: date_field is not a column of df.
    """
    dates = _parse_dates(df, date_field)
    valid = dates.notna()
    if not valid.all():
        logger.warning(
            "Dropped %d row(s) with unparseable '%s' values", int((~valid).sum()), date_field
        )
    out = df.loc[valid].copy()
    dates = dates.loc[valid]
    out[scheme.date] = dates

    if timeframe is Timeframe.DAY:
        return out

    if timeframe is Timeframe.WEEK:
        # Number each distinct date once; daily data repeats dates heavily.
        keys = {ts: scheme.week_key(ts.date()) for ts in pd.DatetimeIndex(dates.unique())}
        out[scheme.week_year] = dates.map(lambda ts: keys[ts].year).astype("int64")
        out[scheme.week] = dates.map(lambda ts: keys[ts].week).astype("int64")
    elif timeframe is Timeframe.MONTH:
        out[scheme.month_year] = dates.dt.year.astype("int64")
        out[scheme.month] = dates.dt.month.astype("int64")
    elif scheme.fiscal_year:
        fy = [financial_year(y, m) for y, m in zip(dates.dt.year, dates.dt.month, strict=True)]
        out[scheme.year] = pd.Series(fy, index=out.index, dtype="int64")
    else:
        out[scheme.year] = dates.dt.year.astype("int64")
    return out


def annotate_all(
    df: pd.DataFrame,
    date_field: str = "date",
    scheme: ColumnScheme = IKEA,
) -> pd.DataFrame:
    """annotate() for week, month and year at once.

    Raises:
        ValueError: The scheme reuses a column name for different meanings
            (the ISO scheme's ``year``), so one row cannot hold all of them.
    """
    columns = [scheme.week_year, scheme.week, scheme.month_year, scheme.month, scheme.year]
    if len(set(columns)) != len(columns) or scheme.date in columns:
        raise ValueError(
            f"Scheme '{scheme.name}' reuses column names; annotate one timeframe at a time"
        )
    for timeframe in (Timeframe.WEEK, Timeframe.MONTH, Timeframe.YEAR):
        df = annotate(df, timeframe, date_field, scheme)
    return df


def calendar_dimension(
    start: CalendarDate | date | str,
    end: CalendarDate | date | str,
    scheme: ColumnScheme = IKEA,
) -> pd.DataFrame:
    """One row per day from start to end with every time column of the scheme.

    Raises:
        ValueError: See annotate_all().
    """
    first = CalendarDate.coerce(start).to_date()
    last = CalendarDate.coerce(end).to_date()
    df = pd.DataFrame({scheme.date: pd.date_range(first, last, freq="D")})
    return annotate_all(df, scheme.date, scheme).reset_index(drop=True)


def _comparison_mask(df: pd.DataFrame, comparison: Comparison) -> pd.Series:
    if comparison.column not in df.columns:
        raise ValueError(f"Column '{comparison.column}' not in data")
    col = df[comparison.column]
    values = list(comparison.values)
    if pd.api.types.is_datetime64_any_dtype(col):
        values = [pd.Timestamp(v) if isinstance(v, str) else v for v in values]
    if comparison.op == "BETWEEN":
        return col.between(values[0], values[1], inclusive="both")
    return _OPS[comparison.op](col, values[0])


def predicate_mask(df: pd.DataFrame, predicate: Predicate) -> pd.Series:
    """Evaluate a Predicate row-wise; returns a boolean Series aligned to df."""
    mask = pd.Series(False, index=df.index)
    for group in predicate.groups:
        group_mask = pd.Series(True, index=df.index)
        for comparison in group:
            group_mask &= _comparison_mask(df, comparison)
        mask |= group_mask
    return mask


def filter_range(df: pd.DataFrame, date_range: DateRange, date_field: str = "date") -> pd.DataFrame:
    """Rows of df that fall inside the range, with its time columns attached."""
    annotated = annotate(df, date_range.timeframe, date_field, date_range.scheme)
    return annotated.loc[predicate_mask(annotated, date_range.where_clause())]


def aggregate_range(
    df: pd.DataFrame,
    date_range: DateRange,
    aggregates: dict[str, list[str]] | None = None,
    date_field: str = "date",
) -> pd.DataFrame:
    """Filter to the range and aggregate per period.

    Args:
        df: Source rows (not mutated).
        date_range: Range, timeframe and column scheme.
        aggregates: {field: [func, ...]}; funcs from SUPPORTED_AGGS.
            Empty or None counts rows per period.
        date_field: Column holding each row's date.

    Returns:
        One row per period, ordered by the time columns. Aggregate columns
        are flattened to ``field_func``; a plain count is ``count``. Day
        periods are formatted YYYY-MM-DD.
    """
    for field, funcs in (aggregates or {}).items():
        if field not in df.columns:
            available = ", ".join(map(str, df.columns))
            raise ValueError(f"Field '{field}' not in data. Available: {available}")
        unknown = sorted(set(funcs) - SUPPORTED_AGGS)
        if unknown:
            raise ValueError(
                f"Unknown function(s) {', '.join(unknown)}. "
                f"Supported: {', '.join(sorted(SUPPORTED_AGGS))}"
            )

    group_cols = date_range.time_columns()
    rows = filter_range(df, date_range, date_field)

    if aggregates:
        result = rows.groupby(group_cols).agg(aggregates)
        result.columns = [f"{col}_{func}" for col, func in result.columns]
        result = result.reset_index()
    else:
        result = rows.groupby(group_cols).size().reset_index(name="count")

    result = result.sort_values(group_cols).reset_index(drop=True)
    if date_range.timeframe is Timeframe.DAY and not result.empty:
        result[group_cols[0]] = result[group_cols[0]].dt.strftime("%Y-%m-%d")
    return result

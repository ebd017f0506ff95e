"""SQL query boundary for range predicates (sqlite3 ``?`` paramstyle).

build_range_query() turns a DateRange into a grouped SELECT whose WHERE
clause is the range predicate template; values are always bound, never
inlined. read_range() executes it through pandas.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

import pandas as pd  # type: ignore[import-untyped]

from weekcal.predicate import check_identifier
from weekcal.timeframe import DateRange

logger = logging.getLogger(__name__)

# pandas-style names accepted from callers -> SQL aggregate function
SQL_AGGS = {"sum": "SUM", "count": "COUNT", "mean": "AVG", "avg": "AVG", "min": "MIN", "max": "MAX"}


def build_range_query(
    table: str,
    date_range: DateRange,
    aggregates: dict[str, list[str]] | None = None,
) -> tuple[str, list[Any]]:
    """Build ``SELECT ... FROM table WHERE <range> GROUP BY <time columns>``.

    Args:
        table: Table name (plain identifier).
        date_range: Range; decides group-by columns and predicate.
        aggregates: {field: [func, ...]} with funcs from SQL_AGGS. Empty or
            None selects ``COUNT(*) AS count``.

    Returns:
        (sql, params) ready for a DB-API cursor with qmark paramstyle.

    Raises:
        ValueError: Table/field is not an identifier, or unknown function.
    """
    check_identifier(table)
    select_cols = date_range.time_columns(use_alias=True)
    group_cols = date_range.time_columns()

    agg_exprs: list[str] = []
    for field, funcs in (aggregates or {}).items():
        check_identifier(field)
        for func in funcs:
            sql_func = SQL_AGGS.get(func.lower())
            if sql_func is None:
                raise ValueError(
                    f"Unknown function '{func}'. Supported: {', '.join(sorted(SQL_AGGS))}"
                )
            agg_exprs.append(f"{sql_func}({field}) AS {field}_{func.lower()}")
    if not agg_exprs:
        agg_exprs.append("COUNT(*) AS count")

    predicate = date_range.where_clause()
    sql = (
        f"SELECT {', '.join(select_cols + agg_exprs)} "
        f"FROM {table} "
        f"WHERE {predicate.template} "
        f"GROUP BY {', '.join(group_cols)} "
        f"ORDER BY {', '.join(group_cols)}"
    )
    return sql, list(predicate.params)


def read_range(
    conn: sqlite3.Connection,
    table: str,
    date_range: DateRange,
    aggregates: dict[str, list[str]] | None = None,
) -> pd.DataFrame:
    """Run build_range_query() against a connection and return the rows."""
    sql, params = build_range_query(table, date_range, aggregates)
    logger.debug("Range query: %s | params=%s", sql, params)
    return pd.read_sql_query(sql, conn, params=params)


def store_frame(
    conn: sqlite3.Connection,
    table: str,
    df: pd.DataFrame,
    if_exists: str = "replace",
) -> int:
    """Write df to a table, storing datetime columns as YYYY-MM-DD text.

    ISO text keeps ``date BETWEEN '2024-12-01' AND '2024-12-10'`` exact;
    pandas would otherwise write ``2024-12-10 00:00:00``, which sorts after
    the upper bound.

    Returns:
        Number of rows written.
    """
    check_identifier(table)
    out = df.copy()
    for col in out.columns:
        if pd.api.types.is_datetime64_any_dtype(out[col]):
            out[col] = out[col].dt.strftime("%Y-%m-%d")
    out.to_sql(table, conn, index=False, if_exists=if_exists)
    return len(out)

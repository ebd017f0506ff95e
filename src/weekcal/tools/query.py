"""Query tools for range aggregation against the SQLite store.

The store is the file at ``settings.database_path``. Tables hold one row
per record with a date column and, for week/month/year queries, the
denormalized time columns of the configured scheme (see
weekcal.frames.annotate and cal_store_dataset).

All range filters go through weekcal.sql.build_range_query: ``?``
placeholders with bound params, never inlined values.
"""

import logging
import sqlite3
from contextlib import closing
from pathlib import Path

import pandas as pd  # type: ignore[import-untyped]

from weekcal.config import settings
from weekcal.frames import annotate_all
from weekcal.predicate import check_identifier
from weekcal.sql import build_range_query, read_range, store_frame
from weekcal.timeframe import DateRange
from weekcal.tools.analytics import _datasets, _parse_aggregates

logger = logging.getLogger(__name__)


def _connect() -> sqlite3.Connection:
    return sqlite3.connect(settings.database_path)


def _table_columns(conn: sqlite3.Connection, table: str) -> list[str]:
    rows = conn.execute(f"PRAGMA table_info({check_identifier(table)})").fetchall()
    return [row[1] for row in rows]


async def list_tables() -> str:
    """List tables in the SQLite store with their row counts.

    Returns:
        One line per table, or a note that the store is empty.
    """
    if not Path(settings.database_path).is_file():
        return f"No database at {settings.database_path}. Use cal_store_dataset to create one."
    try:
        with closing(_connect()) as conn:
            names = [
                row[0]
                for row in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
                )
            ]
            lines = [f"Tables in {settings.database_path}:", ""]
            for name in names:
                (count,) = conn.execute(f'SELECT COUNT(*) FROM "{name}"').fetchone()
                lines.append(f"  {name}: {count} rows")
    except sqlite3.Error as e:
        return f"Database error: {e}"
    if not names:
        return f"Database {settings.database_path} has no tables."
    return "\n".join(lines)


async def store_dataset(dataset: str, table: str) -> str:
    """Write a loaded dataset to the SQLite store with every time column.

    The date column is stored as YYYY-MM-DD text and the week, month and
    year columns of the configured scheme are added, so cal_query_table
    can filter and group at any timeframe. Replaces an existing table.

    Args:
        dataset: Name of a dataset loaded with cal_load_dataset.
        table: Target table name (letters, digits, underscores).

    Returns:
        Confirmation with row count and stored columns.
    """
    if dataset not in _datasets:
        available = ", ".join(_datasets) or "(none)"
        return f"Dataset '{dataset}' not found. Available: {available}."
    entry = _datasets[dataset]

    try:
        check_identifier(table)
        df = annotate_all(entry.df, entry.date_field, settings.scheme)
        with closing(_connect()) as conn:
            rows = store_frame(conn, table, df)
            conn.commit()
    except ValueError as e:
        return f"Error: {e}"
    except sqlite3.Error as e:
        return f"Database error: {e}"

    logger.info("Stored dataset '%s' as table '%s' (%d rows)", dataset, table, rows)
    return (
        f"Stored '{dataset}' as table '{table}': {rows} rows\n"
        f"Columns: {', '.join(map(str, df.columns))}"
    )


async def query_table(
    table: str,
    from_date: str,
    to_date: str,
    timeframe: str,
    aggregate: str = "",
    scheme: str = "",
) -> str:
    """Aggregate a stored table per period over a date range, in SQL.

    Args:
        table: Table in the SQLite store (use cal_list_tables).
        from_date: Range start, YYYY-MM-DD.
        to_date: Range end, YYYY-MM-DD (inclusive).
        timeframe: "day", "week", "month" or "year".
        aggregate: Comma-separated function:field pairs with sum, count,
            mean, min or max (e.g., "sum:Amount"). Empty = row count.
        scheme: Column scheme ("ikea" or "iso"). Empty = configured default.

    Returns:
        The executed SQL with its params, then one row per period.
    """
    try:
        check_identifier(table)
        date_range = DateRange.parse(
            from_date,
            to_date,
            timeframe,
            settings.resolve_scheme(scheme),
            settings.valid_timeframes,
        )
    except ValueError as e:
        return f"Error: {e}"

    if not Path(settings.database_path).is_file():
        return f"Error: No database at {settings.database_path}."

    try:
        with closing(_connect()) as conn:
            columns = _table_columns(conn, table)
            if not columns:
                return f"Error: Unknown table '{table}'. Use cal_list_tables to see tables."
            agg_dict = _parse_aggregates(aggregate, columns)
            if isinstance(agg_dict, str):
                return agg_dict
            sql, params = build_range_query(table, date_range, agg_dict)
            result_df = read_range(conn, table, date_range, agg_dict)
    except ValueError as e:
        return f"Error: {e}"
    except (sqlite3.Error, pd.errors.DatabaseError) as e:
        return f"Database error: {e}"
    except Exception as e:
        logger.exception("Query failed on '%s'", table)
        return f"Query error: {type(e).__name__}: {e}"

    header = f"SQL: {sql}\nParams: {params}\n\n"
    if result_df.empty:
        return header + f"No rows in '{table}' fall in {date_range}."
    return header + result_df.to_string(index=False) + f"\n\n({len(result_df)} periods)"

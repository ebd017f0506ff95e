"""WeekCal MCP Server: entry point.

Registers all tools with FastMCP and handles lifecycle.
Run via: uv run weekcal-mcp
"""

import datetime
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from weekcal.config import settings
from weekcal.tools import analytics, calendar, query

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastMCP) -> AsyncIterator[None]:
    """Server lifecycle: log the active configuration, drop datasets on shutdown."""
    logger.info(
        "Scheme '%s', date column '%s', timeframes %s",
        settings.scheme.name,
        settings.scheme.date,
        ", ".join(settings.valid_timeframes.names()),
    )
    try:
        yield
    finally:
        await analytics.flush_datasets()


# --- Initialize FastMCP Server ---
mcp = FastMCP(
    "WeekCal",
    lifespan=lifespan,
    instructions=(
        "You are connected to the WeekCal server: Sunday-start week numbering, "
        "financial years (starting 1 September) and date-range aggregation.\n"
        "\n"
        "DATE RANGES:\n"
        f"- Today's date: {datetime.date.today().isoformat()}\n"
        "- Every range takes from_date and to_date as YYYY-MM-DD (inclusive) "
        "and a timeframe: day, week, month or year\n"
        "- Week and month ranges cover whole periods: a range starting mid-week "
        "includes that entire week\n"
        "- Year ranges use financial years in the ikea scheme, calendar years in iso\n"
        "\n"
        "WORKFLOW:\n"
        "- cal_week_of / cal_week_first_day / cal_list_weeks for week questions\n"
        "- cal_load_dataset to read a CSV once, then cal_analyze_range per period\n"
        "- cal_store_dataset to save it to SQLite, then cal_query_table to aggregate in SQL\n"
        "- cal_where_clause shows the exact filter any range produces\n"
    ),
)


# --- Register Tools ---
# Each function's docstring becomes the tool description the client sees.
# Type hints become the parameter schema.


@mcp.tool()
async def cal_week_of(date: str, scheme: str = "") -> str:
    """Find the week a date belongs to.

    Args:
        date: Date as YYYY-MM-DD.
        scheme: "ikea" for Sunday-start weeks (week 1 contains 4 January),
            "iso" for Monday-start ISO weeks. Empty = server default.

    Returns:
        Week-year and week number, the week's first and last day, and
        the financial year.
    """
    return await calendar.week_of(date=date, scheme=scheme)


@mcp.tool()
async def cal_week_first_day(year: int, week: int) -> str:
    """Get the first (Sunday) and last (Saturday) day of a week.

    Args:
        year: Week-year (can differ from the calendar year around New Year).
        week: Week number, 1-53. Only some years have a week 53.

    Returns:
        The week's date span, or an error if the week does not exist.
    """
    return await calendar.week_first_day(year=year, week=week)


@mcp.tool()
async def cal_list_weeks(year: int) -> str:
    """List every week of a week-year with its first and last day.

    Args:
        year: Week-year.

    Returns:
        52 or 53 lines, one per week.
    """
    return await calendar.list_weeks(year=year)


@mcp.tool()
async def cal_where_clause(
    from_date: str,
    to_date: str,
    timeframe: str,
    scheme: str = "",
) -> str:
    """Build the SQL filter for a date range at a timeframe.

    Use this to see which periods a range covers, or to filter your own
    tables that carry the denormalized time columns.

    Args:
        from_date: Range start, YYYY-MM-DD.
        to_date: Range end, YYYY-MM-DD (inclusive).
        timeframe: "day", "week", "month" or "year".
        scheme: "ikea" or "iso". Empty = server default.

    Returns:
        Group-by columns, parameterized template with params, and the
        rendered SQL.
    """
    return await calendar.where_clause(
        from_date=from_date, to_date=to_date, timeframe=timeframe, scheme=scheme
    )


@mcp.tool()
async def cal_load_dataset(name: str, path: str, date_field: str = "") -> str:
    """Load a CSV file into session memory as a named dataset.

    The dataset persists for the whole session. Loading the same name
    again replaces it.

    Args:
        name: Short identifier for the dataset (e.g., "sales24").
        path: CSV path, absolute or relative to the server's data directory.
        date_field: Column holding each row's date. Empty = server default.

    Returns:
        Row count, columns, date span and memory usage.
    """
    return await analytics.load_dataset(name=name, path=path, date_field=date_field)


@mcp.tool()
async def cal_list_datasets() -> str:
    """List all datasets currently loaded in session memory.

    Returns:
        Each dataset's name, source file, row count, date span and columns.
    """
    return await analytics.list_datasets()


@mcp.tool()
async def cal_flush_datasets(name: str = "") -> str:
    """Drop loaded datasets from session memory.

    Args:
        name: Dataset to drop. Empty = drop all.

    Returns:
        Confirmation message.
    """
    return await analytics.flush_datasets(name=name)


@mcp.tool()
async def cal_analyze_range(
    dataset: str,
    from_date: str,
    to_date: str,
    timeframe: str,
    aggregate: str = "",
    scheme: str = "",
    limit: int = 50,
) -> str:
    """Aggregate a loaded dataset per day, week, month or year over a date range.

    Pure in-memory pandas, no file or database access.

    Args:
        dataset: Name of a dataset loaded with cal_load_dataset.
        from_date: Range start, YYYY-MM-DD.
        to_date: Range end, YYYY-MM-DD (inclusive).
        timeframe: "day", "week", "month" or "year".
        aggregate: Comma-separated function:field pairs
            (e.g., "sum:Amount,count:Amount"). Supported functions: sum,
            count, mean, min, max, median, nunique, std. Empty = row count.
        scheme: "ikea" or "iso". Empty = server default.
        limit: Max periods in output (default 50).

    Returns:
        The filter used, then a table with one row per period.
    """
    return await analytics.analyze_range(
        dataset=dataset,
        from_date=from_date,
        to_date=to_date,
        timeframe=timeframe,
        aggregate=aggregate,
        scheme=scheme,
        limit=limit,
    )


@mcp.tool()
async def cal_list_tables() -> str:
    """List tables in the SQLite store with their row counts.

    Returns:
        One line per table.
    """
    return await query.list_tables()


@mcp.tool()
async def cal_store_dataset(dataset: str, table: str) -> str:
    """Save a loaded dataset to the SQLite store with all time columns.

    Args:
        dataset: Name of a dataset loaded with cal_load_dataset.
        table: Table name to write (replaced if it exists).

    Returns:
        Row count and stored columns.
    """
    return await query.store_dataset(dataset=dataset, table=table)


@mcp.tool()
async def cal_query_table(
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
        aggregate: Comma-separated function:field pairs using sum, count,
            mean, min or max (e.g., "sum:Amount"). Empty = row count.
        scheme: "ikea" or "iso". Empty = server default.

    Returns:
        The executed SQL and params, then one row per period.
    """
    return await query.query_table(
        table=table,
        from_date=from_date,
        to_date=to_date,
        timeframe=timeframe,
        aggregate=aggregate,
        scheme=scheme,
    )


def main() -> None:
    """Entry point for the MCP server."""
    logger.info("Starting WeekCal MCP Server")
    logger.info("Database: %s", settings.database_path)
    logger.info("Data dir: %s", settings.data_dir)
    mcp.run()


if __name__ == "__main__":
    main()

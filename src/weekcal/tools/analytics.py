"""Analytics tools: session-persistent DataFrames with range aggregation.

Load a CSV into a named DataFrame once, then aggregate it per day, week,
month or year over any date range without re-reading the file. Results
are compact period tables instead of raw rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

import pandas as pd  # type: ignore[import-untyped]

from weekcal.config import settings
from weekcal.frames import SUPPORTED_AGGS, aggregate_range
from weekcal.timeframe import DateRange

logger = logging.getLogger(__name__)


@dataclass
class DatasetEntry:
    """A named DataFrame with metadata about its source."""

    df: pd.DataFrame
    path: str
    loaded_at: datetime
    row_count: int
    date_field: str = "date"
    date_min: date | None = None  # earliest date in DataFrame
    date_max: date | None = None  # latest date in DataFrame


# Session-persistent cache, keyed by caller-chosen dataset names.
# Lives for the server process lifetime.
_datasets: dict[str, DatasetEntry] = {}


async def load_dataset(name: str, path: str, date_field: str = "") -> str:
    """Read a CSV file and store it as a named DataFrame.

    Args:
        name: Identifier for the dataset (e.g., "sales24"). Replaces any
            dataset already loaded under that name.
        path: CSV path, absolute or relative to the configured data_dir.
        date_field: Column holding each row's date. Empty = configured default.

    Returns:
        Summary of what was loaded (row count, columns, date span, memory).
    """
    date_field = date_field or settings.date_column
    csv_path = settings.resolve_path(path)
    if not csv_path.is_file():
        return f"Error: File not found: {csv_path}"

    try:
        df = pd.read_csv(csv_path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        return f"Error: Could not read {csv_path.name}: {e}"
    except Exception as e:
        logger.exception("Error loading dataset '%s' from %s", name, csv_path)
        return f"Error loading dataset: {type(e).__name__}: {e}"

    if date_field not in df.columns:
        cols = ", ".join(map(str, df.columns))
        return f"Error: Date field '{date_field}' not in {csv_path.name}. Available: {cols}"

    df[date_field] = pd.to_datetime(df[date_field], format="mixed", errors="coerce")
    dates = df[date_field].dropna()
    unparsed = len(df) - len(dates)
    if unparsed:
        logger.warning("Dataset '%s': %d row(s) with unparseable dates", name, unparsed)

    entry = DatasetEntry(
        df=df,
        path=str(csv_path),
        loaded_at=datetime.now(),
        row_count=len(df),
        date_field=date_field,
        date_min=dates.min().date() if not dates.empty else None,
        date_max=dates.max().date() if not dates.empty else None,
    )
    if name in _datasets:
        logger.info("Replacing dataset '%s'", name)
    _datasets[name] = entry

    cols = ", ".join(map(str, df.columns))
    mem = df.memory_usage(deep=True).sum()
    mem_str = f"{mem / 1024:.0f} KB" if mem < 1024 * 1024 else f"{mem / (1024 * 1024):.1f} MB"
    span = f"{entry.date_min} → {entry.date_max}" if entry.date_min else "(no valid dates)"
    return (
        f"Dataset '{name}': {len(df)} rows x {len(df.columns)} columns ({mem_str})\n"
        f"Source: {csv_path}\n"
        f"Dates: {date_field} {span}"
        + (f" ({unparsed} unparseable)" if unparsed else "")
        + f"\nColumns: {cols}"
    )


async def list_datasets() -> str:
    """List all datasets currently loaded in session memory.

    Returns:
        Formatted list of datasets with name, source, row count, and date span.
    """
    if not _datasets:
        return "No datasets loaded. Use cal_load_dataset to load a CSV file."

    lines = ["Loaded datasets:", ""]
    for name, entry in _datasets.items():
        cols = ", ".join(map(str, entry.df.columns))
        lines.append(f"  {name}: {entry.row_count} rows from {entry.path}")
        lines.append(f"    Dates: {entry.date_field} {entry.date_min} → {entry.date_max}")
        lines.append(f"    Columns: {cols}")
        lines.append(f"    Loaded: {entry.loaded_at.isoformat()}")
        lines.append("")
    return "\n".join(lines)


async def flush_datasets(name: str = "") -> str:
    """Drop loaded datasets.

    Args:
        name: Specific dataset to drop. Empty = drop all.

    Returns:
        Confirmation message.
    """
    if name:
        if name in _datasets:
            rows = _datasets.pop(name).row_count
            return f"Flushed '{name}' ({rows} rows)."
        return f"No dataset named '{name}'."
    count = len(_datasets)
    _datasets.clear()
    return f"Flushed {count} dataset(s)."


def _parse_aggregates(
    aggregate_str: str, available_columns: list[str]
) -> dict[str, list[str]] | str:
    """Parse 'sum:Field,count:Field' into {Field: [sum, count]}.

    Returns a dict on success, or an error string on failure.
    """
    if not aggregate_str:
        return {}

    agg_dict: dict[str, list[str]] = {}
    for pair in aggregate_str.split(","):
        pair = pair.strip()
        if ":" not in pair:
            return (
                f"Invalid aggregate format: '{pair}'. "
                "Expected 'function:field' (e.g., 'sum:Amount')."
            )
        func, field = pair.split(":", 1)
        func = func.strip().lower()
        field = field.strip()

        if func not in SUPPORTED_AGGS:
            return f"Unknown function '{func}'. Supported: {', '.join(sorted(SUPPORTED_AGGS))}"
        if field not in available_columns:
            return f"Field '{field}' not in dataset. Available: {', '.join(available_columns)}"

        funcs = agg_dict.setdefault(field, [])
        if func not in funcs:
            funcs.append(func)

    return agg_dict


async def analyze_range(
    dataset: str,
    from_date: str,
    to_date: str,
    timeframe: str,
    aggregate: str = "",
    scheme: str = "",
    limit: int = 50,
) -> str:
    """Aggregate a loaded dataset per period over a date range. Pure pandas.

    Args:
        dataset: Name of a previously loaded dataset.
        from_date: Range start, YYYY-MM-DD.
        to_date: Range end, YYYY-MM-DD (inclusive). Week and month ranges
            cover the whole first and last period.
        timeframe: "day", "week", "month" or "year".
        aggregate: Comma-separated function:field pairs
            (e.g., "sum:Amount,count:Amount"). Empty = row count per period.
        scheme: Column scheme ("ikea" or "iso"). Empty = configured default.
        limit: Max periods in output (default 50).

    Returns:
        Formatted text table with one row per period.
    """
    if dataset not in _datasets:
        available = ", ".join(_datasets) or "(none)"
        return (
            f"Dataset '{dataset}' not found. Available: {available}. "
            "Use cal_load_dataset to load data first."
        )
    entry = _datasets[dataset]

    try:
        date_range = DateRange.parse(
            from_date,
            to_date,
            timeframe,
            settings.resolve_scheme(scheme),
            settings.valid_timeframes,
        )
    except ValueError as e:
        return f"Error: {e}"

    agg_dict = _parse_aggregates(aggregate, [str(c) for c in entry.df.columns])
    if isinstance(agg_dict, str):
        return agg_dict

    try:
        result_df = aggregate_range(entry.df, date_range, agg_dict, entry.date_field)
    except ValueError as e:
        return f"Error: {e}"
    except Exception as e:
        logger.exception("Aggregation failed on '%s'", dataset)
        return f"Aggregation error: {type(e).__name__}: {e}"

    if result_df.empty:
        return f"No rows of '{dataset}' fall in {date_range}."

    total_periods = len(result_df)
    if total_periods > limit:
        logger.warning("Truncated %d periods to %d for '%s'", total_periods, limit, dataset)
    result_str = result_df.head(limit).to_string(index=False)
    suffix = f"showing {limit} of {total_periods}" if total_periods > limit else total_periods
    return (
        f"Range analysis of '{dataset}' ({date_range}):\n"
        f"Filter: {date_range.where_clause().render()}\n\n"
        f"{result_str}\n\n"
        f"({suffix} periods)"
    )

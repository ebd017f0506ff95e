"""Write a calendar dimension (one row per day with every time column).

The output joins against fact tables on the date column to give them
ikea_year/ikea_week, iso_year/iso_month and financial_year.

Run: uv run python scripts/export_calendar.py 2020-01-01 2030-12-31 --out calendar.csv
     uv run python scripts/export_calendar.py 2020-01-01 2030-12-31 --db weekcal.db
"""

import argparse
import logging
import sqlite3
import sys
from contextlib import closing
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))  # scripts/ root
from _common import add_scheme_arg, resolve_scheme
from rich.console import Console

from weekcal.frames import calendar_dimension
from weekcal.sql import store_frame

logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

console = Console()


def build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="export_calendar",
        description="Export a calendar dimension to CSV and/or a SQLite table.",
    )
    parser.add_argument("start", help="First date, YYYY-MM-DD")
    parser.add_argument("end", help="Last date, YYYY-MM-DD")
    parser.add_argument("--out", type=Path, help="CSV file to write")
    parser.add_argument("--db", type=Path, help="SQLite database to write into")
    parser.add_argument("--table", default="calendar", help="Table name for --db")
    add_scheme_arg(parser)
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    if not args.out and not args.db:
        parser.error("give --out and/or --db")

    try:
        scheme = resolve_scheme(args.scheme)
        df = calendar_dimension(args.start, args.end, scheme)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.print(f"{len(df)} days, columns: {', '.join(df.columns)}")

    if args.out:
        df.to_csv(args.out, index=False, date_format="%Y-%m-%d")
        console.print(f"[bold green]Wrote[/] {args.out}")

    if args.db:
        with closing(sqlite3.connect(args.db)) as conn:
            rows = store_frame(conn, args.table, df)
            conn.commit()
        console.print(f"[bold green]Wrote[/] {rows} rows to {args.db}:{args.table}")


if __name__ == "__main__":
    main()

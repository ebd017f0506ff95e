"""Print every Sunday-start week of one or more week-years as a table.

Run: uv run python scripts/print_calendar.py 2025
     uv run python scripts/print_calendar.py 2014 2016 --months
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))  # scripts/ root
from _common import year_span
from rich.console import Console
from rich.table import Table

from weekcal.errors import CalendarError
from weekcal.fiscal import financial_year_of
from weekcal.weeks import week_first_day, weeks_in_year

console = Console()


def build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="print_calendar",
        description="Print the weeks of a week-year with first/last day and financial year.",
    )
    parser.add_argument("start", type=int, help="First week-year")
    parser.add_argument("end", type=int, nargs="?", help="Last week-year (default: start)")
    parser.add_argument(
        "--months",
        action="store_true",
        help="Add a column with the calendar month(s) each week touches",
    )
    return parser


def week_table(year: int, months: bool = False) -> Table:
    count = weeks_in_year(year)
    table = Table(title=f"Week-year {year} ({count} weeks)")
    table.add_column("Week", justify="right", style="cyan")
    table.add_column("First (Sun)")
    table.add_column("Last (Sat)")
    table.add_column("FY", justify="right", style="magenta")
    if months:
        table.add_column("Month(s)", style="green")

    first = week_first_day(year, 1)
    for week in range(1, count + 1):
        start = first.add_days(7 * (week - 1))
        end = start.add_days(6)
        row = [f"W{week:02d}", str(start), str(end), str(financial_year_of(start))]
        if months:
            first_month, last_month = f"{start.to_date():%b}", f"{end.to_date():%b}"
            row.append(first_month if first_month == last_month else f"{first_month}/{last_month}")
        # week 53 and week 1 straddle the new year
        style = "bold yellow" if week == 53 or start.year != end.year else None
        table.add_row(*row, style=style)
    return table


def main() -> None:
    args = build_parser().parse_args()
    for year in year_span(args.start, args.end or args.start):
        try:
            console.print(week_table(year, args.months))
        except CalendarError as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)


if __name__ == "__main__":
    main()

"""Week numbering diagnostics over a span of years.

Checks, for every week-year in the span:
1. Every day maps to exactly one week and weeks run 1..N without gaps
2. Each week is exactly 7 consecutive days starting on a Sunday
3. week_first_day(ikea_week(d)) round-trips for every day
4. Week 53 exists only in years where weeks_in_year() says so
5. Day/week/month/year predicates partition the span (no day matched
   by a range that does not contain it, none missed)

Run: uv run python scripts/diagnostics/check_week_coverage.py 1990 2040
"""

import argparse
import logging
import sys
import time
from collections import defaultdict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # scripts/ root
from _common import year_span
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from weekcal.dates import CalendarDate
from weekcal.errors import CalendarError
from weekcal.frames import calendar_dimension, predicate_mask
from weekcal.timeframe import DateRange, Timeframe
from weekcal.weeks import ikea_week, week_first_day, weeks_in_year

logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

console = Console()


def build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="check_week_coverage",
        description="Round-trip and coverage checks for Sunday-start week numbering.",
    )
    parser.add_argument("start", type=int, help="First week-year")
    parser.add_argument("end", type=int, help="Last week-year")
    parser.add_argument(
        "--skip-predicates",
        action="store_true",
        help="Skip the predicate partition check (the slow part)",
    )
    return parser


def check_year(year: int) -> list[str]:
    """All week-level failures for one week-year."""
    failures: list[str] = []
    count = weeks_in_year(year)
    first = week_first_day(year, 1)
    if first.weekday() != 6:
        failures.append(f"{year}-W01 starts on weekday {first.weekday()}, not Sunday")

    days_by_week: dict[int, list[CalendarDate]] = defaultdict(list)
    day = first
    for _ in range(7 * count):
        key = ikea_week(day)
        if key.year != year:
            failures.append(f"{day} numbered {key}, expected week-year {year}")
        else:
            days_by_week[key.week].append(day)
        if week_first_day(*key) != day.add_days(-((day.weekday() + 1) % 7)):
            failures.append(f"{day}: week_first_day{tuple(key)} does not round-trip")
        day = day.add_days(1)

    if sorted(days_by_week) != list(range(1, count + 1)):
        failures.append(f"{year}: weeks {sorted(days_by_week)} are not 1..{count}")
    for week, days in days_by_week.items():
        if len(days) != 7:
            failures.append(f"{year}-W{week:02d} has {len(days)} days")
    if ikea_week(day).year != year + 1 or ikea_week(day).week != 1:
        failures.append(f"{day} follows {year}-W{count:02d} but is {ikea_week(day)}")

    try:
        week_first_day(year, 53)
        has_53 = True
    except CalendarError:
        has_53 = False
    if has_53 != (count == 53):
        failures.append(f"{year}: week 53 lookup disagrees with {count} weeks")
    return failures


def check_predicates(start: int, end: int) -> list[str]:
    """Predicate partition check: mask == contains() for sample ranges."""
    failures: list[str] = []
    df = calendar_dimension(f"{start - 1}-12-01", f"{end + 1}-01-31")
    froms = [f"{y}-{m:02d}-{d:02d}" for y in (start, end) for m, d in ((1, 1), (7, 15), (12, 29))]
    tos = [f"{end}-{m:02d}-{d:02d}" for m, d in ((1, 3), (8, 31), (12, 31))]
    for from_date in froms:
        for to_date in tos:
            if from_date > to_date:
                continue
            for timeframe in Timeframe:
                date_range = DateRange.parse(from_date, to_date, timeframe)
                mask = predicate_mask(df, date_range.where_clause())
                expected = (
                    df["date"].map(lambda ts, r=date_range: r.contains(ts.date())).astype(bool)
                )
                wrong = df.loc[mask != expected, "date"]
                if not wrong.empty:
                    failures.append(
                        f"{date_range}: {len(wrong)} day(s) disagree, "
                        f"first {wrong.iloc[0]:%Y-%m-%d}"
                    )
    return failures


def main() -> None:
    args = build_parser().parse_args()
    years = year_span(args.start, args.end)
    t0 = time.perf_counter()

    failures: list[str] = []
    week_counts: dict[int, int] = defaultdict(int)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Checking week-years...", total=len(years))
        for year in years:
            failures.extend(check_year(year))
            week_counts[weeks_in_year(year)] += 1
            progress.advance(task)

    if not args.skip_predicates:
        with console.status("[bold cyan]Checking predicate partitions...", spinner="dots"):
            failures.extend(check_predicates(args.start, args.end))

    summary = Table(title=f"Week-years {args.start}-{args.end}")
    summary.add_column("Weeks", style="bold")
    summary.add_column("Years", justify="right", style="cyan")
    for weeks, n in sorted(week_counts.items()):
        summary.add_row(str(weeks), str(n))
    console.print(summary)

    elapsed = time.perf_counter() - t0
    if failures:
        for failure in failures[:50]:
            console.print(f"  [red]FAIL[/red] {failure}")
        if len(failures) > 50:
            console.print(f"  [dim]... and {len(failures) - 50} more[/dim]")
        console.print(f"[bold red]{len(failures)} failure(s)[/] [dim]({elapsed:.1f}s)[/dim]")
        sys.exit(1)
    console.print(f"[bold green]All checks passed[/] [dim]({elapsed:.1f}s)[/dim]")


if __name__ == "__main__":
    main()

"""WeekCal CLI: unified entry point for calendar lookups, dev scripts and server.

Usage:
    weekcal --help                   # list all commands
    weekcal serve                    # start MCP server
    weekcal week 2024-12-29          # week of a date
    weekcal first-day 2025 1         # first/last day of a week
    weekcal where 2024-12-01 2025-12-10 week
    weekcal calendar 2025            # rich table of a year's weeks
"""

from __future__ import annotations

import asyncio
import subprocess
import sys
from pathlib import Path

# Commands: name → (script_filename, description)
# Scripts live in <repo>/scripts/ and are only available when running from source.
COMMANDS: dict[str, tuple[str, str]] = {
    "calendar": ("print_calendar.py", "Print a week-year's weeks as a table"),
    "export-calendar": ("export_calendar.py", "Write a calendar dimension to CSV or SQLite"),
    "check-weeks": ("check_week_coverage.py", "Round-trip and coverage checks over a year span"),
}

SCRIPTS_DIR = Path(__file__).resolve().parent.parent.parent / "scripts"


def _print_help() -> None:
    print("WeekCal CLI: calendar tools and server\n")
    print("Usage: weekcal <command> [options]\n")
    print("Commands:")

    # Built-in commands
    print(f"  {'serve':<20} Start the MCP server (stdio)")
    print(f"  {'week DATE':<20} Week, week span and financial year of a date")
    print(f"  {'first-day YEAR WEEK':<20} First and last day of a week")
    print(f"  {'where FROM TO TF':<20} Filter predicate for a range (--scheme ikea|iso)")
    print()

    # Script commands
    max_name = max(len(name) for name in COMMANDS)
    col = max(max_name + 2, 20)
    for name, (_, desc) in sorted(COMMANDS.items()):
        print(f"  {name:<{col}} {desc}")

    print()
    print("Options:")
    print("  --help, -h         Show this help or command-specific help")
    print()
    print("Examples:")
    print("  weekcal serve")
    print("  weekcal week 2025-12-28")
    print("  weekcal where 2024-07-01 2025-12-10 year")
    print("  weekcal export-calendar 2020-01-01 2030-12-31 --out calendar.csv")


def _pop_option(args: list[str], name: str, default: str = "") -> tuple[list[str], str]:
    """Remove ``--name VALUE`` from args, returning (rest, value)."""
    if name not in args:
        return args, default
    i = args.index(name)
    if i + 1 >= len(args):
        print(f"ERROR: {name} needs a value", file=sys.stderr)
        sys.exit(2)
    return args[:i] + args[i + 2 :], args[i + 1]


def _run_builtin(command: str, rest: list[str]) -> str | None:
    """Run a built-in lookup command; None if command is not built in."""
    from weekcal.tools import calendar

    rest, scheme = _pop_option(rest, "--scheme")
    if command == "week" and len(rest) == 1:
        return asyncio.run(calendar.week_of(rest[0], scheme=scheme))
    if command == "first-day" and len(rest) == 2:
        try:
            year, week = int(rest[0]), int(rest[1])
        except ValueError:
            return f"Error: YEAR and WEEK must be integers, got {rest[0]!r} {rest[1]!r}"
        return asyncio.run(calendar.week_first_day(year, week))
    if command == "where" and len(rest) == 3:
        return asyncio.run(calendar.where_clause(rest[0], rest[1], rest[2], scheme=scheme))
    if command in ("week", "first-day", "where"):
        return f"Error: wrong number of arguments for '{command}'. See weekcal --help."
    return None


def main() -> None:
    """Entry point for the weekcal CLI."""
    args = sys.argv[1:]

    if not args or args[0] in ("--help", "-h"):
        _print_help()
        sys.exit(0)

    command = args[0]
    rest = args[1:]

    # Built-in: serve
    if command == "serve":
        from weekcal.server import main as server_main

        server_main()
        return

    # Built-in: lookups
    output = _run_builtin(command, rest)
    if output is not None:
        print(output)
        sys.exit(1 if output.startswith("Error") else 0)

    # Script dispatch
    if command not in COMMANDS:
        print(f"Unknown command: {command}\n", file=sys.stderr)
        _print_help()
        sys.exit(1)

    script_file, _ = COMMANDS[command]

    if not SCRIPTS_DIR.is_dir():
        print(
            "ERROR: scripts/ directory not found. "
            "CLI scripts are only available when running from the source repo.",
            file=sys.stderr,
        )
        sys.exit(1)

    script_path = next(SCRIPTS_DIR.rglob(script_file), None)
    if script_path is None:
        print(f"ERROR: Script not found: {script_file} under {SCRIPTS_DIR}", file=sys.stderr)
        sys.exit(1)

    # Dispatch: run script with remaining args, cwd=scripts/ so _common imports work
    result = subprocess.run(
        [sys.executable, str(script_path), *rest],
        cwd=str(SCRIPTS_DIR),
    )
    sys.exit(result.returncode)


if __name__ == "__main__":
    main()

"""Shared helpers for CLI scripts.

Provides consistent --scheme / year-span argument handling so each
script doesn't duplicate the parsing and validation.
"""

from __future__ import annotations

import argparse
import sys

from weekcal.timeframe import SCHEMES, ColumnScheme, get_scheme


def add_scheme_arg(parser: argparse.ArgumentParser) -> None:
    """Add a --scheme flag to an argparse parser."""
    parser.add_argument(
        "--scheme",
        default="",
        choices=["", *SCHEMES],
        help="Column scheme (default: WEEKCAL calendar_scheme setting)",
    )


def resolve_scheme(name: str) -> ColumnScheme:
    """Scheme by name; empty uses the configured default."""
    if not name:
        from weekcal.config import settings

        return settings.scheme
    return get_scheme(name)


def year_span(start: int, end: int) -> range:
    """Inclusive range of years, exiting with an error if start > end."""
    if start > end:
        print(f"ERROR: start year {start} is after end year {end}", file=sys.stderr)
        sys.exit(2)
    return range(start, end + 1)

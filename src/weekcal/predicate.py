"""Parameterized filter predicates over denormalized time columns.

A Predicate is an OR of AND-groups of simple comparisons. It renders to a
``?``-placeholder SQL template plus ordered params for the query layer,
and frames.predicate_mask() evaluates the same structure on a DataFrame.

Column names are validated as plain identifiers; values are never inlined
into the template.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

OPERATORS = ("=", ">", "<", ">=", "<=", "BETWEEN")


def check_identifier(name: str) -> str:
    """Return name unchanged if it is a plain SQL identifier, else raise ValueError."""
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid SQL identifier {name!r}: use letters, digits and underscores")
    return name


def sql_literal(value: Any) -> str:
    """Inline a bound value for display. Strings are single-quoted with '' escaping."""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    text = str(value).replace("'", "''")
    return f"'{text}'"


@dataclass(frozen=True)
class Comparison:
    """A single ``column op value`` term (BETWEEN takes two values)."""

    column: str
    op: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        check_identifier(self.column)
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator {self.op!r}")
        expected = 2 if self.op == "BETWEEN" else 1
        if len(self.values) != expected:
            raise ValueError(f"{self.op} takes {expected} value(s), got {len(self.values)}")

    def sql(self, inline: bool = False) -> str:
        vals = [sql_literal(v) for v in self.values] if inline else ["?"] * len(self.values)
        if self.op == "BETWEEN":
            return f"{self.column} BETWEEN {vals[0]} AND {vals[1]}"
        return f"{self.column} {self.op} {vals[0]}"


@dataclass(frozen=True)
class Predicate:
    """A disjunction of conjunctions of Comparisons."""

    groups: tuple[tuple[Comparison, ...], ...]

    def _render(self, inline: bool) -> str:
        parts = [" AND ".join(c.sql(inline) for c in group) for group in self.groups]
        if len(parts) == 1:
            return parts[0]
        return " OR ".join(f"({p})" for p in parts)

    @property
    def template(self) -> str:
        """SQL boolean expression with ``?`` positional placeholders."""
        return self._render(inline=False)

    @property
    def params(self) -> tuple[Any, ...]:
        """Bound values in placeholder order."""
        return tuple(v for group in self.groups for c in group for v in c.values)

    @property
    def columns(self) -> list[str]:
        """Referenced columns, first-use order."""
        seen: list[str] = []
        for group in self.groups:
            for c in group:
                if c.column not in seen:
                    seen.append(c.column)
        return seen

    def render(self) -> str:
        """Literal form for logs and display. Execute with template + params instead."""
        return self._render(inline=True)

    def __str__(self) -> str:
        return self.render()


def between(column: str, low: Any, high: Any) -> Predicate:
    """``column BETWEEN low AND high`` (inclusive)."""
    return Predicate(((Comparison(column, "BETWEEN", (low, high)),),))


def span(
    year_column: str,
    unit_column: str,
    from_key: tuple[int, int],
    to_key: tuple[int, int],
) -> Predicate:
    """Range over (year, unit) pairs, where unit is a week or month number.

    Same year: ``year = ? AND unit BETWEEN ? AND ?``.

    Several years: three OR-ed groups in fixed order: the years strictly
    between, the tail of the first year, the head of the last year. The
    middle group is always emitted, even for consecutive years where it
    matches nothing.
    """
    from_year, from_unit = from_key
    to_year, to_unit = to_key

    if from_year == to_year:
        return Predicate(
            (
                (
                    Comparison(year_column, "=", (from_year,)),
                    Comparison(unit_column, "BETWEEN", (from_unit, to_unit)),
                ),
            )
        )

    return Predicate(
        (
            (
                Comparison(year_column, ">", (from_year,)),
                Comparison(year_column, "<", (to_year,)),
            ),
            (
                Comparison(year_column, "=", (from_year,)),
                Comparison(unit_column, ">=", (from_unit,)),
            ),
            (
                Comparison(year_column, "=", (to_year,)),
                Comparison(unit_column, "<=", (to_unit,)),
            ),
        )
    )

"""Error types for the calendar core.

Everything subclasses ValueError so code that already guards parsing with
``except ValueError`` keeps working. Tool functions catch CalendarError and
turn it into an error message; the core never recovers from these itself.
"""


class CalendarError(ValueError):
    """Base class for all calendar validation failures."""


class InvalidDate(CalendarError):
    """Calendar components or an ISO string do not form a Gregorian date."""


class InvalidWeek(CalendarError):
    """A (year, week) pair that the week numbering never produces."""


class InvalidRange(CalendarError):
    """A date range whose start lies after its end."""


class InvalidTimeframe(CalendarError):
    """Unknown timeframe name, or a timeframe the caller does not accept."""

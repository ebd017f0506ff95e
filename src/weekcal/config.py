"""Configuration management for the WeekCal MCP server.

Loads settings from environment variables or a .env file.
"""

from dataclasses import replace
from pathlib import Path

from pydantic_settings import BaseSettings

from weekcal.timeframe import ColumnScheme, ValidTimeframes, get_scheme


class Settings(BaseSettings):
    """WeekCal settings.

    When running under an MCP client, env vars are set in the client's
    server config. For local development, use a .env file.
    """

    # Column scheme used when a tool call does not name one: "ikea" or "iso"
    calendar_scheme: str = "ikea"
    # Name of the date column in stored tables and loaded datasets
    date_column: str = "date"
    # Comma-separated timeframes the tools accept
    allowed_timeframes: str = "day,week,month,year"

    # SQLite store for cal_query_table
    database_path: str = "weekcal.db"
    # Base directory for relative dataset paths
    data_dir: str = "."

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def scheme(self) -> ColumnScheme:
        """Configured column scheme with the configured date column."""
        return self.resolve_scheme()

    def resolve_scheme(self, name: str = "") -> ColumnScheme:
        """Scheme by name (empty = calendar_scheme), using date_column.

        Raises:
            ValueError: Unknown scheme name or invalid date_column.
        """
        base = get_scheme(name or self.calendar_scheme)
        if self.date_column == base.date:
            return base
        return replace(base, date=self.date_column)

    @property
    def valid_timeframes(self) -> ValidTimeframes:
        return ValidTimeframes.parse(self.allowed_timeframes)

    def resolve_path(self, path: str) -> Path:
        """Resolve a dataset path against data_dir unless it is absolute."""
        p = Path(path).expanduser()
        return p if p.is_absolute() else Path(self.data_dir).expanduser() / p


# Singleton settings instance
settings = Settings()

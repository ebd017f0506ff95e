"""Shared test fixtures for weekcal tests.

Points the settings singleton at a temporary data dir and database so
tests never touch a real store, and empties the session dataset cache
around every test.
"""

from datetime import date, timedelta

import pandas as pd
import pytest


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    """Default settings with data_dir/database_path under tmp_path."""
    from weekcal.config import settings

    monkeypatch.setattr(settings, "calendar_scheme", "ikea")
    monkeypatch.setattr(settings, "date_column", "date")
    monkeypatch.setattr(settings, "allowed_timeframes", "day,week,month,year")
    monkeypatch.setattr(settings, "data_dir", str(tmp_path))
    monkeypatch.setattr(settings, "database_path", str(tmp_path / "weekcal.db"))
    yield


@pytest.fixture(autouse=True)
def _clear_datasets():
    from weekcal.tools.analytics import _datasets

    _datasets.clear()
    yield
    _datasets.clear()


@pytest.fixture()
def sales_df() -> pd.DataFrame:
    """One row per day from 2024-06-01 to 2026-01-31; Amount = 10, Units = day of month."""
    start = date(2024, 6, 1)
    days = [start + timedelta(days=i) for i in range((date(2026, 1, 31) - start).days + 1)]
    return pd.DataFrame(
        {
            "date": [d.isoformat() for d in days],
            "Amount": [10.0] * len(days),
            "Units": [d.day for d in days],
            "Region": ["A" if i % 2 else "B" for i in range(len(days))],
        }
    )


@pytest.fixture()
def sales_csv(tmp_path, sales_df) -> str:
    """sales_df written to <tmp_path>/sales.csv; returns the relative name."""
    sales_df.to_csv(tmp_path / "sales.csv", index=False)
    return "sales.csv"

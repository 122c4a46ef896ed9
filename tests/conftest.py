"""Shared fixtures: raw grosses rows shaped like the TidyTuesday CSV."""

import sys
from pathlib import Path

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))


def _raw_row(week_ending="2015-03-01", show="X", theatre="Imperial", **overrides):
    row = {
        "week_ending": week_ending,
        "week_number": 9,
        "weekly_gross_overall": 25_000_000.0,
        "show": show,
        "theatre": theatre,
        "weekly_gross": 900_000.0,
        "potential_gross": 1_200_000.0,
        "avg_ticket_price": 110.0,
        "top_ticket_price": 250.0,
        "seats_sold": 8_000,
        "seats_in_theatre": 1_400,
        "pct_capacity": 0.95,
        "performances": 8,
        "previews": 0,
    }
    row.update(overrides)
    return row


@pytest.fixture
def raw_row():
    """Factory for one raw grosses row; keyword arguments override fields."""
    return _raw_row


@pytest.fixture
def make_raw():
    """Factory turning a list of row-override dicts into a raw grosses DataFrame."""
    def _make(rows):
        return pd.DataFrame([_raw_row(**r) for r in rows])
    return _make

"""
Read-only summaries over the cleaned grosses table.

Rankings sort with a stable algorithm over groups kept in first-encountered
order, so ties keep that order. When fewer than ``top_n`` groups exist all of
them are returned.
"""

import logging

import pandas as pd

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 20


def longest_running(cleaned: pd.DataFrame, top_n: int = DEFAULT_TOP_N) -> pd.DataFrame:
    """Shows ranked by days between their first and last week.

    Returns:
        DataFrame with columns ``show``, ``first_week``, ``last_week``,
        ``duration_days``, longest first
    """
    grouped = (
        cleaned.assign(show=cleaned["show"].astype(str))
        .groupby("show", sort=False)["week_ending"]
        .agg(first_week="min", last_week="max")
        .reset_index()
    )
    grouped["duration_days"] = (grouped["last_week"] - grouped["first_week"]).dt.days.astype(int)
    ranked = grouped.sort_values("duration_days", ascending=False, kind="stable")
    return ranked.head(top_n).reset_index(drop=True)


def top_capacity_theatres(cleaned: pd.DataFrame, top_n: int = DEFAULT_TOP_N) -> pd.DataFrame:
    """Theatres ranked by mean percent of capacity sold.

    Returns:
        DataFrame with columns ``theatre`` and ``mean_pct_capacity``, highest first
    """
    grouped = (
        cleaned.assign(theatre=cleaned["theatre"].astype(str))
        .groupby("theatre", sort=False)["pct_capacity"]
        .mean()
        .rename("mean_pct_capacity")
        .reset_index()
    )
    ranked = grouped.sort_values("mean_pct_capacity", ascending=False, kind="stable")
    return ranked.head(top_n).reset_index(drop=True)


def weekly_gross_series(cleaned: pd.DataFrame) -> pd.DataFrame:
    """(week_ending, weekly_gross_overall) for every row, ordered by date."""
    series = cleaned[["week_ending", "weekly_gross_overall"]].sort_values(
        "week_ending", kind="stable"
    )
    return series.reset_index(drop=True)

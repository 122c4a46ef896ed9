"""
Cleaning pipeline for weekly Broadway grosses.

Turns the raw grosses table into the canonical cleaned table used by every
view, chart and model in the dashboard:

1. derive ``year`` and ``month`` from ``week_ending``
2. derive the ``holiday`` flag (December or January)
3. drop out-of-scope columns (and ``show`` for the regression variant)
4. keep rows from ``min_year`` on with no missing retained value
5. coerce ``theatre`` to a fixed categorical domain

The steps are order-sensitive. The input frame is never modified.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

import pandas as pd

from config.validation import (
    OUT_OF_SCOPE_COLUMNS,
    RETAINED_GROSSES_COLUMNS,
    SchemaMismatchError,
    missing_columns,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_YEAR = 2010
HOLIDAY_MONTHS = frozenset({12, 1})


@dataclass(frozen=True)
class TheatreDomain:
    """Sorted, fixed set of theatre names computed once from cleaned data."""

    values: Tuple[str, ...]

    def __contains__(self, value: object) -> bool:
        return value in self.values

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    @property
    def first(self) -> str:
        if not self.values:
            raise ValueError("Theatre domain is empty")
        return self.values[0]

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "TheatreDomain":
        return cls(tuple(sorted({str(n) for n in names})))


def add_date_parts(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with ``week_ending`` parsed and ``year``/``month`` added."""
    df = df.copy()
    df["week_ending"] = pd.to_datetime(df["week_ending"], errors="coerce")
    df["year"] = df["week_ending"].dt.year.astype("Int64")
    df["month"] = df["week_ending"].dt.month.astype("Int64")
    return df


def add_holiday_flag(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with a boolean ``holiday`` column (month in {12, 1})."""
    df = df.copy()
    df["holiday"] = df["month"].isin(HOLIDAY_MONTHS).astype(bool)
    return df


def clean_grosses(
    raw: pd.DataFrame,
    min_year: int = DEFAULT_MIN_YEAR,
    drop_show: bool = False,
) -> pd.DataFrame:
    """Run the cleaning pipeline over a raw grosses table.

    Args:
        raw: Raw grosses as loaded by ``data.loader.load_grosses``
        min_year: Earliest year kept (inclusive)
        drop_show: Also drop the ``show`` column (regression variant)

    Returns:
        Cleaned DataFrame with ``year`` and ``month`` as int and ``theatre``
        as a categorical over the sorted theatre names

    Raises:
        SchemaMismatchError: If a column the pipeline relies on is missing
    """
    missing = missing_columns(raw, RETAINED_GROSSES_COLUMNS)
    if missing:
        raise SchemaMismatchError("grosses", missing)

    n_raw = len(raw)

    df = add_date_parts(raw)
    df = add_holiday_flag(df)

    to_drop = [c for c in OUT_OF_SCOPE_COLUMNS if c in df.columns]
    if drop_show:
        to_drop.append("show")
    df = df.drop(columns=to_drop)

    # Row must be in range and complete across every retained column
    keep = (df["year"] >= min_year).fillna(False) & df.notna().all(axis=1)
    df = df.loc[keep].copy()

    df["year"] = df["year"].astype(int)
    df["month"] = df["month"].astype(int)

    domain = TheatreDomain.from_names(df["theatre"].unique())
    df["theatre"] = pd.Categorical(df["theatre"].astype(str), categories=list(domain.values))

    df = df.reset_index(drop=True)
    logger.info(
        f"Cleaned grosses: kept {len(df):,} of {n_raw:,} rows "
        f"(min_year={min_year}, {len(domain)} theatres)"
    )
    return df


def theatre_domain(cleaned: pd.DataFrame) -> TheatreDomain:
    """Return the theatre domain of a cleaned table."""
    theatre = cleaned["theatre"]
    if isinstance(theatre.dtype, pd.CategoricalDtype):
        return TheatreDomain(tuple(str(c) for c in theatre.cat.categories))
    return TheatreDomain.from_names(theatre.dropna().unique())

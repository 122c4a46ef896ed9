"""
Schema Validation Module

This module checks that downloaded datasets carry the columns the cleaning
pipeline relies on. The remote schema is assumed stable; when it is not, every
downstream step would fail in confusing ways, so the check runs right after a
dataset is loaded and raises early.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

import pandas as pd

from utils.broadway_client import BroadwayDataError


class SchemaMismatchError(BroadwayDataError):
    """Raised when a dataset is missing columns the pipeline requires."""

    def __init__(self, dataset: str, missing: List[str]):
        self.dataset = dataset
        self.missing = list(missing)
        message = f"{dataset}: missing required column(s): " + ", ".join(self.missing)
        super().__init__(message)


# ============================================================================
# Required Columns per Dataset
# ============================================================================

# Columns dropped by the cleaning pipeline as out of scope
OUT_OF_SCOPE_COLUMNS: List[str] = [
    "performances",
    "previews",
    "seats_sold",
    "seats_in_theatre",
    "potential_gross",
    "top_ticket_price",
]

# Columns the cleaning pipeline keeps and requires to be non-null
RETAINED_GROSSES_COLUMNS: List[str] = [
    "week_ending",
    "weekly_gross_overall",
    "show",
    "theatre",
    "weekly_gross",
    "avg_ticket_price",
    "pct_capacity",
]

REQUIRED_COLUMNS: Dict[str, List[str]] = {
    "grosses": RETAINED_GROSSES_COLUMNS + OUT_OF_SCOPE_COLUMNS,
    "synopses": ["show", "synopsis"],
}


def missing_columns(df: pd.DataFrame, required_columns: List[str]) -> List[str]:
    """Return the required columns absent from ``df``, in declaration order."""
    actual = set(df.columns)
    return [c for c in required_columns if c not in actual]


def validate_dataset(df: pd.DataFrame, dataset: str) -> Tuple[bool, List[str]]:
    """
    Validate a loaded dataset against its required columns.

    Args:
        df: The loaded table
        dataset: Registered dataset name ("grosses" or "synopses")

    Returns:
        Tuple of (success, errors)
    """
    errors: List[str] = []
    required = REQUIRED_COLUMNS.get(dataset)
    if required is None:
        errors.append(f"{dataset}: no schema registered")
        return False, errors

    for col in missing_columns(df, required):
        errors.append(f"{dataset}: Missing required column '{col}'")

    return len(errors) == 0, errors


def validate_dataset_strict(df: pd.DataFrame, dataset: str) -> pd.DataFrame:
    """
    Validate a dataset and raise if any required column is absent.

    Returns the input unchanged so the call can be chained after a loader.

    Raises:
        SchemaMismatchError: If any required column is missing
    """
    required = REQUIRED_COLUMNS.get(dataset, [])
    missing = missing_columns(df, required)
    if missing:
        raise SchemaMismatchError(dataset, missing)
    return df

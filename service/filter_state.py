"""
Selection state for the interactive views.

Each state object is an explicit observable cell: a current value, a list of
named derived computations and a list of subscribers. A successful ``set``
synchronously re-runs every derived computation over the new value, stores
the value and the results together, then notifies subscribers. A rejected
``set`` raises ``InvalidSelectionError`` and leaves the value, and every
derived result, as they were. The same holds when a derived computation
raises: its exception propagates and nothing is committed.

Streamlit only keeps these objects in ``st.session_state``; the recompute
happens here, not through the script rerun.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Generic, List, Sequence, Tuple, TypeVar

import pandas as pd

from data.cleaning import TheatreDomain

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_YEAR_BOUNDS: Tuple[int, int] = (2010, 2020)

PREDICTOR_CHOICES: Tuple[str, ...] = ("avg_ticket_price", "pct_capacity", "weekly_gross_overall")


class InvalidSelectionError(ValueError):
    """Raised when a selection falls outside its domain or bounds."""
    pass


class ObservableCell(Generic[T]):
    """A validated value with derived computations re-run on every change."""

    def __init__(self, initial: T):
        self._validate(initial)
        self._value = initial
        self._derivations: Dict[str, Callable[[T], Any]] = {}
        self._results: Dict[str, Any] = {}
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def _validate(self, value: T) -> None:
        """Raise InvalidSelectionError if ``value`` is not acceptable."""

    def set(self, value: T) -> T:
        try:
            self._validate(value)
        except InvalidSelectionError as e:
            logger.warning(f"Rejected selection {value!r}: {e}")
            raise
        # All derivations must succeed before anything is committed
        results = {name: fn(value) for name, fn in self._derivations.items()}
        self._value = value
        self._results.update(results)
        for callback in self._subscribers:
            callback(value)
        return value

    def derive(self, name: str, fn: Callable[[T], Any]) -> Any:
        """Register a computation over the current value and run it once now."""
        self._results[name] = fn(self._value)
        self._derivations[name] = fn
        return self._results[name]

    def derived(self, name: str) -> Any:
        return self._results[name]

    def subscribe(self, callback: Callable[[T], None]) -> None:
        self._subscribers.append(callback)


# =============================================================================
# THEATRE / YEAR FILTER
# =============================================================================


@dataclass(frozen=True)
class FilterSelection:
    theatre: str
    year_lo: int
    year_hi: int

    @property
    def year_range(self) -> Tuple[int, int]:
        return (self.year_lo, self.year_hi)


def filter_view(cleaned: pd.DataFrame, selection: FilterSelection) -> pd.DataFrame:
    """Rows at the selected theatre within the selected years (inclusive)."""
    mask = (
        (cleaned["theatre"].astype(str) == selection.theatre)
        & (cleaned["year"] >= selection.year_lo)
        & (cleaned["year"] <= selection.year_hi)
    )
    return cleaned.loc[mask].copy()


class FilterState(ObservableCell[FilterSelection]):
    """Theatre and year-range selection driving the drill-down view.

    The filtered view is registered as a derived computation, so it is
    recomputed on every accepted change and never goes stale.
    """

    def __init__(
        self,
        cleaned: pd.DataFrame,
        domain: TheatreDomain,
        year_bounds: Tuple[int, int] = DEFAULT_YEAR_BOUNDS,
    ):
        self.domain = domain
        self.year_bounds = (int(year_bounds[0]), int(year_bounds[1]))
        self._cleaned = cleaned
        super().__init__(FilterSelection(domain.first, self.year_bounds[0], self.year_bounds[1]))
        self.derive("filtered_view", lambda sel: filter_view(self._cleaned, sel))

    def _validate(self, value: FilterSelection) -> None:
        if value.theatre not in self.domain:
            raise InvalidSelectionError(f"Unknown theatre: {value.theatre!r}")
        lo_bound, hi_bound = self.year_bounds
        if value.year_lo > value.year_hi:
            raise InvalidSelectionError(
                f"Year range start {value.year_lo} is after end {value.year_hi}"
            )
        if value.year_lo < lo_bound or value.year_hi > hi_bound:
            raise InvalidSelectionError(
                f"Year range [{value.year_lo}, {value.year_hi}] outside [{lo_bound}, {hi_bound}]"
            )

    @property
    def selection(self) -> FilterSelection:
        return self.value

    @property
    def theatre(self) -> str:
        return self.value.theatre

    @property
    def year_range(self) -> Tuple[int, int]:
        return self.value.year_range

    def set_theatre(self, theatre: str) -> FilterSelection:
        return self.set(replace(self.value, theatre=theatre))

    def set_year_range(self, lo: int, hi: int) -> FilterSelection:
        return self.set(replace(self.value, year_lo=int(lo), year_hi=int(hi)))

    def filtered_view(self) -> pd.DataFrame:
        return self.derived("filtered_view")


# =============================================================================
# REGRESSION PREDICTORS
# =============================================================================


class PredictorState(ObservableCell[Tuple[str, str]]):
    """Choice of the two numeric predictors for the regression page."""

    def __init__(
        self,
        choices: Sequence[str] = PREDICTOR_CHOICES,
        initial: Tuple[str, str] = ("avg_ticket_price", "pct_capacity"),
    ):
        self.choices = tuple(choices)
        super().__init__(tuple(initial))

    def _validate(self, value: Tuple[str, str]) -> None:
        if len(value) != 2:
            raise InvalidSelectionError(f"Expected two predictors, got {len(value)}")
        unknown = [p for p in value if p not in self.choices]
        if unknown:
            raise InvalidSelectionError(f"Unknown predictor(s): {unknown}")
        if value[0] == value[1]:
            raise InvalidSelectionError("Predictors must be distinct")

    @property
    def predictors(self) -> Tuple[str, str]:
        return self.value

    def set_predictors(self, first: str, second: str) -> Tuple[str, str]:
        return self.set((first, second))

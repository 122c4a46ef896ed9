"""
Streamlit session helpers shared by the dashboard pages.
"""

import logging

import streamlit as st

from config.validation import SchemaMismatchError
from service.dashboard_data import DashboardData, load_dashboard_data, regression_fit_for
from service.filter_state import FilterState, PredictorState
from utils.broadway_client import BroadwayDataError, CorruptCacheError, NetworkError

logger = logging.getLogger(__name__)


def get_dashboard_data() -> DashboardData:
    """Load and clean once per session; stop the page on a fatal data error."""
    if "dashboard_data" not in st.session_state:
        try:
            with st.spinner("Loading Broadway grosses…"):
                st.session_state["dashboard_data"] = load_dashboard_data()
        except NetworkError as e:
            st.error(f"⚠️ **Could not download the Broadway datasets.**\n\n{e}")
            st.stop()
        except CorruptCacheError as e:
            st.error(f"⚠️ **Local cache is unreadable.** Clear it on the Data Sources page.\n\n{e}")
            st.stop()
        except SchemaMismatchError as e:
            st.error(f"⚠️ **Dataset schema changed.**\n\n{e}")
            st.stop()
        except BroadwayDataError as e:
            st.error(f"⚠️ **Data error:** {e}")
            st.stop()
    return st.session_state["dashboard_data"]


def _log_selection(selection) -> None:
    logger.info(
        f"Drill-down selection: {selection.theatre} {selection.year_lo}-{selection.year_hi}"
    )


def get_filter_state(data: DashboardData) -> FilterState:
    if "filter_state" not in st.session_state:
        bounds = tuple(data.settings.get("year_bounds", (2010, 2020)))
        state = FilterState(data.cleaned, data.domain, year_bounds=bounds)
        state.subscribe(_log_selection)
        st.session_state["filter_state"] = state
    return st.session_state["filter_state"]


def get_predictor_state(data: DashboardData) -> PredictorState:
    """Predictor selection with the regression fit registered as derived "fit"."""
    if "predictor_state" not in st.session_state:
        initial = tuple(data.settings["regression"]["predictors"])
        state = PredictorState(initial=initial)
        state.derive("fit", lambda predictors: regression_fit_for(data, predictors))
        st.session_state["predictor_state"] = state
    return st.session_state["predictor_state"]


def reset_session_data() -> None:
    """Forget loaded data and selections so the next page run reloads."""
    for key in ("dashboard_data", "filter_state", "predictor_state"):
        st.session_state.pop(key, None)

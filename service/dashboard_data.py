"""
Startup data flow shared by the dashboard pages: fetch, then clean once.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import pandas as pd

from config.registry import get_cache_dir, load_settings
from data.cleaning import TheatreDomain, clean_grosses, theatre_domain
from data.loader import load_grosses, load_synopses
from ml.bayes_regression import BayesianFit, PriorSpec, fit_bayesian_linear

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardData:
    cleaned: pd.DataFrame
    regression_table: pd.DataFrame
    synopses: pd.DataFrame
    domain: TheatreDomain
    settings: Dict[str, Any]


def load_dashboard_data(
    settings: Optional[Dict[str, Any]] = None,
    cache_dir: Optional[Path] = None,
) -> DashboardData:
    """Load both datasets and run the cleaning pipeline.

    Raises:
        NetworkError, CorruptCacheError, SchemaMismatchError: startup is not
        possible without clean data, so these propagate to the page.
    """
    settings = settings if settings is not None else load_settings()
    cache_dir = cache_dir if cache_dir is not None else get_cache_dir(settings)
    min_year = int(settings["min_year"])

    raw = load_grosses(cache_dir)
    cleaned = clean_grosses(raw, min_year=min_year)
    regression_table = clean_grosses(raw, min_year=min_year, drop_show=True)
    synopses = load_synopses(cache_dir)

    logger.info(f"Dashboard data ready: {len(cleaned):,} cleaned rows, {len(synopses):,} synopses")
    return DashboardData(
        cleaned=cleaned,
        regression_table=regression_table,
        synopses=synopses,
        domain=theatre_domain(cleaned),
        settings=settings,
    )


def regression_fit_for(data: DashboardData, predictors: Sequence[str]) -> BayesianFit:
    """Fit the holiday regression for a predictor pair using the configured priors."""
    reg_cfg = data.settings["regression"]
    return fit_bayesian_linear(
        data.regression_table,
        predictors=list(predictors),
        response=reg_cfg["response"],
        prior_spec=PriorSpec.from_settings(reg_cfg),
        indicator=reg_cfg.get("indicator", "holiday"),
    )

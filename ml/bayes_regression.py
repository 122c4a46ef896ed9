"""
Bayesian linear regression of weekly gross on standardized predictors.

An illustrative model for the holiday effect on Broadway grosses:

    weekly_gross ~ intercept + b1 * z(predictor_1) + b2 * z(predictor_2) + b3 * holiday

Numeric predictors are standardized (mean 0, sample standard deviation 1);
the holiday indicator enters unstandardized as 0/1.

Fitting goes through a sampler with the interface ``fit(y, X, priors) ->
samples``. The default sampler uses scikit-learn's ``BayesianRidge`` (Gamma
hyperpriors on the noise and weight precisions) and draws coefficient samples
from its Gaussian posterior. Any other sampler with the same ``fit`` signature
can be passed in.

Posterior means of the samples serve as point estimates for the fitted values
compared against the actual response.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.linear_model import BayesianRidge
from sklearn.metrics import mean_absolute_error, r2_score

logger = logging.getLogger(__name__)

INTERCEPT = "intercept"


@dataclass(frozen=True)
class PriorSpec:
    """Weak Gamma hyperpriors plus sampling controls.

    ``alpha_*`` parameterize the prior on the noise precision and
    ``lambda_*`` the prior on the weight precision. The 1e-6 defaults are
    diffuse.
    """

    alpha_1: float = 1e-6
    alpha_2: float = 1e-6
    lambda_1: float = 1e-6
    lambda_2: float = 1e-6
    n_samples: int = 2000
    random_state: Optional[int] = 42

    @classmethod
    def from_settings(cls, regression_cfg: Dict) -> "PriorSpec":
        priors = regression_cfg.get("priors", {})
        return cls(
            alpha_1=float(priors.get("alpha_1", 1e-6)),
            alpha_2=float(priors.get("alpha_2", 1e-6)),
            lambda_1=float(priors.get("lambda_1", 1e-6)),
            lambda_2=float(priors.get("lambda_2", 1e-6)),
            n_samples=int(regression_cfg.get("n_samples", 2000)),
            random_state=regression_cfg.get("random_state", 42),
        )


class Sampler(Protocol):
    def fit(self, y: np.ndarray, X: pd.DataFrame, priors: PriorSpec) -> pd.DataFrame:
        ...


class BayesianRidgeSampler:
    """Posterior coefficient samples from scikit-learn's BayesianRidge."""

    def fit(self, y: np.ndarray, X: pd.DataFrame, priors: PriorSpec) -> pd.DataFrame:
        """
        Fit the model and draw posterior samples of every coefficient.

        Args:
            y: Response vector
            X: Design matrix (one named column per predictor, no intercept column)
            priors: Hyperpriors and sampling controls

        Returns:
            DataFrame of shape (n_samples, 1 + n_predictors) with columns
            ``intercept`` followed by the predictor names
        """
        model = BayesianRidge(
            alpha_1=priors.alpha_1,
            alpha_2=priors.alpha_2,
            lambda_1=priors.lambda_1,
            lambda_2=priors.lambda_2,
            fit_intercept=True,
        )
        X_arr = X.to_numpy(dtype=float)
        y_arr = np.asarray(y, dtype=float)
        model.fit(X_arr, y_arr)

        rng = np.random.default_rng(priors.random_state)
        coef_draws = rng.multivariate_normal(
            mean=model.coef_, cov=model.sigma_, size=priors.n_samples
        )
        # Same centring sklearn uses to recover the intercept from the coefficients
        intercept_draws = y_arr.mean() - coef_draws @ X_arr.mean(axis=0)

        samples = pd.DataFrame(coef_draws, columns=list(X.columns))
        samples.insert(0, INTERCEPT, intercept_draws)
        logger.debug(
            f"BayesianRidge converged: alpha={model.alpha_:.3g}, lambda={model.lambda_:.3g}"
        )
        return samples


@dataclass
class BayesianFit:
    coefficient_samples: pd.DataFrame
    summary_stats: pd.DataFrame
    fitted: pd.Series
    actual: pd.Series
    predictors: List[str]
    response: str
    scaling: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    metrics: Dict[str, float] = field(default_factory=dict)

    @property
    def posterior_means(self) -> pd.Series:
        return self.summary_stats["mean"]


def standardize(values) -> Tuple[pd.Series, float, float]:
    """Centre on the mean and divide by the sample standard deviation (ddof=1).

    Returns:
        (standardized values, mean, standard deviation)

    Raises:
        ValueError: If the standard deviation is zero or undefined
    """
    s = pd.Series(values, dtype=float)
    mean = float(s.mean())
    std = float(s.std(ddof=1))
    if not np.isfinite(std) or std == 0.0:
        raise ValueError(f"Cannot standardize {s.name or 'values'}: standard deviation is {std}")
    return (s - mean) / std, mean, std


def build_design_matrix(
    table: pd.DataFrame,
    predictors: Sequence[str],
    indicator: Optional[str] = "holiday",
) -> Tuple[pd.DataFrame, Dict[str, Tuple[float, float]]]:
    """Standardized predictors plus the 0/1 indicator, aligned to ``table``."""
    X = pd.DataFrame(index=table.index)
    scaling: Dict[str, Tuple[float, float]] = {}
    for col in predictors:
        z, mean, std = standardize(table[col])
        X[col] = z.to_numpy()
        scaling[col] = (mean, std)
    if indicator:
        X[indicator] = table[indicator].astype(int).to_numpy()
    return X, scaling


def summarize_samples(samples: pd.DataFrame) -> pd.DataFrame:
    """Posterior mean, sd and central 95% interval per coefficient."""
    return pd.DataFrame({
        "mean": samples.mean(),
        "sd": samples.std(ddof=1),
        "q2.5": samples.quantile(0.025),
        "q97.5": samples.quantile(0.975),
    })


def fit_bayesian_linear(
    table: pd.DataFrame,
    predictors: Sequence[str],
    response: str = "weekly_gross",
    prior_spec: Optional[PriorSpec] = None,
    indicator: Optional[str] = "holiday",
    sampler: Optional[Sampler] = None,
) -> BayesianFit:
    """Fit the regression and compute posterior-mean fitted values.

    Args:
        table: Cleaned grosses (the regression variant without ``show``)
        predictors: Numeric predictor columns to standardize
        response: Response column
        prior_spec: Hyperpriors and sampling controls (default: diffuse)
        indicator: Binary column entered as 0/1, or None to leave it out
        sampler: Object with ``fit(y, X, priors) -> samples``

    Returns:
        BayesianFit with samples, summary, fitted and actual values

    Raises:
        ValueError: If a column is missing, predictors overlap the response,
            or the table has too few rows
    """
    predictors = list(predictors)
    needed = predictors + [response] + ([indicator] if indicator else [])
    missing = [c for c in needed if c not in table.columns]
    if missing:
        raise ValueError(f"Regression columns missing from table: {missing}")
    if response in predictors:
        raise ValueError(f"Response {response!r} cannot also be a predictor")
    if len(table) <= len(predictors) + 2:
        raise ValueError(f"Need more than {len(predictors) + 2} rows to fit, got {len(table)}")

    prior_spec = prior_spec or PriorSpec()
    sampler = sampler or BayesianRidgeSampler()

    X, scaling = build_design_matrix(table, predictors, indicator)
    y = table[response].astype(float)

    samples = sampler.fit(y.to_numpy(), X, prior_spec)
    summary = summarize_samples(samples)

    means = summary["mean"]
    coef = means.drop(INTERCEPT).reindex(X.columns)
    fitted = pd.Series(
        means[INTERCEPT] + X.to_numpy(dtype=float) @ coef.to_numpy(),
        index=table.index,
        name="fitted",
    )
    actual = y.rename("actual")

    metrics = {
        "r2": float(r2_score(actual, fitted)),
        "mae": float(mean_absolute_error(actual, fitted)),
        "n_rows": float(len(table)),
    }
    logger.info(
        f"Fitted Bayesian linear model {response} ~ {' + '.join(X.columns)} "
        f"on {len(table):,} rows (R2={metrics['r2']:.3f})"
    )

    return BayesianFit(
        coefficient_samples=samples,
        summary_stats=summary,
        fitted=fitted,
        actual=actual,
        predictors=predictors,
        response=response,
        scaling=scaling,
        metrics=metrics,
    )


def comparison_frame(fit: BayesianFit) -> pd.DataFrame:
    """Actual vs fitted response per row, with residuals."""
    return pd.DataFrame({
        "actual": fit.actual,
        "fitted": fit.fitted,
        "residual": fit.actual - fit.fitted,
    })

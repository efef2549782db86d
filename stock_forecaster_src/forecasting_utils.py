# stock_forecaster_src/forecasting_utils.py

import warnings
from dataclasses import dataclass, field
from itertools import product
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import logging

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from statsmodels.tools.sm_exceptions import InterpolationWarning
from statsmodels.tsa.exponential_smoothing.ets import ETSModel
from statsmodels.tsa.statespace.sarimax import SARIMAX
from statsmodels.tsa.stattools import adfuller, kpss

from .errors import ConvergenceError

logger = logging.getLogger(__name__)

DEFAULT_INTERVALS = (80, 95)


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StationarityResult:
    """Outcome of an Augmented Dickey-Fuller test."""
    statistic: float
    p_value: float
    used_lag: int
    n_obs: int
    critical_values: Dict[str, float]
    alpha: float = 0.05

    @property
    def is_stationary(self) -> bool:
        return self.p_value <= self.alpha

    @property
    def decision(self) -> str:
        if self.is_stationary:
            return "stationary"
        return "fail to reject non-stationarity (series needs differencing)"


@dataclass(frozen=True)
class FittedModel:
    """
    A selected model with its in-sample diagnostics.

    ``observed``, ``fitted_values`` and ``residuals`` cover the evaluation
    window, i.e. the sample minus any likelihood burn-in.
    """
    name: str
    label: str
    kind: str
    aic: float
    bic: float
    aicc: float
    observed: pd.Series
    fitted_values: pd.Series
    residuals: pd.Series
    results: Any
    n_candidates: int
    spec: Dict[str, Any] = field(default_factory=dict)
    candidates: Optional[pd.DataFrame] = None


@dataclass(frozen=True)
class ForecastResult:
    """Point forecasts plus lower/upper bounds per coverage level."""
    model_name: str
    mean: pd.Series
    bounds: Dict[int, Tuple[pd.Series, pd.Series]]
    method: str = "analytic"

    @property
    def horizon(self) -> int:
        return len(self.mean)

    @property
    def levels(self) -> List[int]:
        return sorted(self.bounds)

    def to_frame(self) -> pd.DataFrame:
        cols = {"mean": self.mean}
        for lvl in self.levels:
            lower, upper = self.bounds[lvl]
            cols[f"lo_{lvl}"] = lower
            cols[f"hi_{lvl}"] = upper
        return pd.DataFrame(cols)


# ---------------------------------------------------------------------------
# Stationarity
# ---------------------------------------------------------------------------

def adf_test(series: Union[pd.Series, np.ndarray]) -> Tuple[float, float]:
    """
    Run the Augmented Dickey-Fuller (ADF) test for unit roots.

    Parameters
    ----------
    series : Union[pd.Series, np.ndarray]
        Input series. NaNs are dropped prior to testing.

    Returns
    -------
    Tuple[float, float]
        (test_statistic, p_value)

    Notes
    -----
    - ADF null hypothesis: the series has a unit root (non-stationary)
    - Lower p-values (< 0.05) suggest rejection of null (series is stationary)
    """
    res = adfuller(pd.Series(series).dropna())
    return res[0], res[1]


def check_stationarity(series: Union[pd.Series, np.ndarray], alpha: float = 0.05) -> StationarityResult:
    """
    ADF test with a human-readable decision.

    A p-value above ``alpha`` means the unit-root null cannot be rejected and
    the series needs differencing. The result is advisory: model fitting does
    its own differencing selection.
    """
    clean = pd.Series(series).dropna()
    stat, pval, used_lag, nobs, crit, _ = adfuller(clean, autolag="AIC")
    result = StationarityResult(
        statistic=float(stat),
        p_value=float(pval),
        used_lag=int(used_lag),
        n_obs=int(nobs),
        critical_values={k: float(v) for k, v in crit.items()},
        alpha=alpha,
    )
    logger.info("ADF test: statistic=%.3f, p-value=%.4f -> %s", result.statistic, result.p_value, result.decision)
    return result


def _unit_root_says_stationary(x: pd.Series, test: str, alpha: float) -> bool:
    if test == "adf":
        return adfuller(x, autolag="AIC")[1] <= alpha
    if test == "kpss":
        with warnings.catch_warnings():
            # p-values outside the lookup table are clipped to [0.01, 0.1]
            warnings.simplefilter("ignore", InterpolationWarning)
            return kpss(x, regression="c", nlags="auto")[1] >= alpha
    raise ValueError(f"Unknown unit-root test '{test}'. Use 'kpss' or 'adf'.")


def select_differencing_order(series: Union[pd.Series, np.ndarray],
                              max_d: int = 2,
                              test: str = "kpss",
                              alpha: float = 0.05) -> int:
    """
    Choose the non-seasonal differencing order by repeated unit-root testing.

    The series is differenced until the test accepts it as stationary or
    ``max_d`` is reached.

    Parameters
    ----------
    series : Union[pd.Series, np.ndarray]
        Input series (NaNs dropped)
    max_d : int, default=2
        Upper bound on the differencing order
    test : str, default="kpss"
        'kpss' (null: stationary) or 'adf' (null: unit root)
    alpha : float, default=0.05
        Significance level

    Returns
    -------
    int
        Selected differencing order d in [0, max_d]
    """
    x = pd.Series(series).dropna()
    d = 0
    while d < max_d:
        if x.nunique() <= 1 or _unit_root_says_stationary(x, test, alpha):
            break
        x = x.diff().dropna()
        d += 1
    logger.info("Differencing order selected by repeated %s tests: d=%d", test.upper(), d)
    return d


# ---------------------------------------------------------------------------
# ARIMA
# ---------------------------------------------------------------------------

def _converged(res) -> bool:
    retvals = getattr(res, "mle_retvals", None)
    if isinstance(retvals, dict):
        return bool(retvals.get("converged", True))
    return True


def _trend_candidates(d: int) -> List[str]:
    # SARIMAX adds the trend to the differenced series: 'c' after one
    # difference is a drift, 't' would be a quadratic trend in levels
    if d == 0:
        return ["c"]
    if d == 1:
        return ["n", "c"]
    return ["n"]


def arima_label(order: Tuple[int, int, int],
                seasonal_order: Tuple[int, int, int, int] = (0, 0, 0, 0),
                trend: str = "n") -> str:
    """Readable model label such as 'ARIMA(1,1,0)(0,0,1)[12] with drift'."""
    p, d, q = order
    label = f"ARIMA({p},{d},{q})"
    P, D, Q, s = seasonal_order
    if P or D or Q:
        label += f"({P},{D},{Q})[{s}]"
    if trend == "c":
        label += " with drift" if (d or D) else " with non-zero mean"
    elif trend == "t":
        label += " with linear trend"
    return label


def _fit_sarimax(endog: pd.Series,
                 order: Tuple[int, int, int],
                 seasonal_order: Tuple[int, int, int, int],
                 trend: str):
    return SARIMAX(
        endog,
        order=order,
        seasonal_order=seasonal_order,
        trend=trend,
        simple_differencing=False,
    ).fit(disp=False)


def optimize_arima(endog: pd.Series,
                   d: int,
                   max_p: int = 3,
                   max_q: int = 3,
                   max_P: int = 0,
                   max_Q: int = 0,
                   D: int = 0,
                   s: int = 12) -> pd.DataFrame:
    """
    Grid-search ARIMA orders for a fixed differencing order and rank by AIC.

    Parameters
    ----------
    endog : pd.Series
        Monthly series
    d : int
        Non-seasonal differencing order (from select_differencing_order)
    max_p, max_q : int
        Upper bounds for the AR and MA orders
    max_P, max_Q : int
        Upper bounds for the seasonal AR and MA orders (0 disables them)
    D : int
        Seasonal differencing order
    s : int
        Seasonal period

    Returns
    -------
    pd.DataFrame
        Columns ['order', 'seasonal_order', 'trend', 'AIC', 'BIC', 'AICc'],
        sorted ascending by AIC. Empty if nothing converged. The last
        exception raised by a candidate fit is kept in ``attrs["last_error"]``.

    Notes
    -----
    - The trend term depends on d: a mean for d=0, none or drift for d=1
    - Candidates that raise, fail to converge or give a non-finite AIC are skipped
    """
    grid = list(product(range(max_p + 1), range(max_q + 1),
                        range(max_P + 1), range(max_Q + 1), _trend_candidates(d)))
    results: List[List[object]] = []
    last_error: Optional[Exception] = None

    for p, q, P, Q, trend in tqdm(grid, desc="Grid search ARIMA"):
        order = (p, d, q)
        seasonal_order = (P, D, Q, s) if (P or D or Q) else (0, 0, 0, 0)
        try:
            res = _fit_sarimax(endog, order, seasonal_order, trend)
        except Exception as e:
            logger.debug("ARIMA%s%s trend=%s failed: %s", order, seasonal_order, trend, e)
            last_error = e
            continue

        aic = float(getattr(res, "aic", np.nan))
        if not _converged(res) or not np.isfinite(aic):
            logger.debug("ARIMA%s%s trend=%s did not converge", order, seasonal_order, trend)
            continue
        results.append([order, seasonal_order, trend, aic,
                        float(getattr(res, "bic", np.nan)), float(getattr(res, "aicc", np.nan))])

    result_df = pd.DataFrame(results, columns=["order", "seasonal_order", "trend", "AIC", "BIC", "AICc"])
    result_df = result_df.sort_values(by="AIC", ascending=True).reset_index(drop=True)
    result_df.attrs["last_error"] = last_error
    return result_df


def _last_error_text(err: Optional[BaseException]) -> str:
    if err is None:
        return ""
    return f" Last error: {type(err).__name__}: {err}"


def _in_sample_window(endog: pd.Series, fitted: pd.Series, burn: int) -> Tuple[pd.Series, pd.Series, pd.Series]:
    observed = endog.iloc[burn:]
    fitted = pd.Series(np.asarray(fitted, dtype=float), index=endog.index).iloc[burn:]
    return observed, fitted, observed - fitted


def fit_auto_arima(endog: pd.Series,
                   max_p: int = 3,
                   max_q: int = 3,
                   max_d: int = 2,
                   max_P: int = 0,
                   max_Q: int = 0,
                   D: int = 0,
                   s: int = 12,
                   ndiffs_test: str = "kpss",
                   alpha: float = 0.05) -> FittedModel:
    """
    Fit an ARIMA model with automatic differencing and order selection.

    The differencing order is chosen by repeated unit-root tests, then every
    (p, q) combination up to the bounds is fitted and the lowest-AIC model is
    kept.

    Raises
    ------
    ConvergenceError
        If no candidate in the search space converges.
    """
    d = select_differencing_order(endog, max_d=max_d, test=ndiffs_test, alpha=alpha)
    result_df = optimize_arima(endog, d, max_p=max_p, max_q=max_q, max_P=max_P, max_Q=max_Q, D=D, s=s)
    n_tried = (max_p + 1) * (max_q + 1) * (max_P + 1) * (max_Q + 1) * len(_trend_candidates(d))
    if result_df.empty:
        last_error = result_df.attrs.get("last_error")
        raise ConvergenceError(
            f"ARIMA search failed: none of {n_tried} candidates with d={d} converged."
            + _last_error_text(last_error),
            n_candidates=n_tried,
            last_error=last_error,
        ) from last_error
    logger.info("Top ARIMA candidates by AIC:\n%s", result_df.head().to_string())

    best = result_df.iloc[0]
    order, seasonal_order, trend = best["order"], best["seasonal_order"], best["trend"]
    res = _fit_sarimax(endog, order, seasonal_order, trend)
    burn = int(getattr(res, "loglikelihood_burn", 0))
    observed, fitted, resid = _in_sample_window(endog, res.fittedvalues, burn)

    label = arima_label(order, seasonal_order, trend)
    logger.info("Selected %s with AIC=%.3f", label, float(res.aic))
    return FittedModel(
        name="ARIMA",
        label=label,
        kind="arima",
        aic=float(res.aic),
        bic=float(res.bic),
        aicc=float(res.aicc),
        observed=observed,
        fitted_values=fitted,
        residuals=resid,
        results=res,
        n_candidates=n_tried,
        spec={"order": order, "seasonal_order": seasonal_order, "trend": trend},
        candidates=result_df,
    )


# ---------------------------------------------------------------------------
# Exponential smoothing (ETS)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ETSSpec:
    error: str
    trend: Optional[str]
    damped_trend: bool
    seasonal: Optional[str]

    @property
    def label(self) -> str:
        e = "A" if self.error == "add" else "M"
        t = "N" if self.trend is None else ("Ad" if self.damped_trend else "A")
        s = {None: "N", "add": "A", "mul": "M"}[self.seasonal]
        return f"ETS({e},{t},{s})"

    @property
    def has_analytic_intervals(self) -> bool:
        return self.error == "add" and self.seasonal != "mul"


def ets_candidate_grid(endog: pd.Series, period: int = 12) -> List[ETSSpec]:
    """
    Enumerate the ETS model family searched by fit_auto_ets.

    Error: additive or multiplicative. Trend: none, additive or damped.
    Seasonal: none, additive or multiplicative.

    Notes
    -----
    - Multiplicative components require strictly positive data
    - Additive error with multiplicative seasonality is excluded as numerically unstable
    - Seasonal components need at least two full periods of data
    """
    positive = bool((pd.Series(endog).dropna() > 0).all())
    seasonal_ok = len(endog) >= 2 * period
    errors = ["add", "mul"] if positive else ["add"]
    trends = [(None, False), ("add", False), ("add", True)]
    seasonals: List[Optional[str]] = [None]
    if seasonal_ok:
        seasonals += ["add", "mul"] if positive else ["add"]

    grid = []
    for error, (trend, damped), seasonal in product(errors, trends, seasonals):
        if error == "add" and seasonal == "mul":
            continue
        grid.append(ETSSpec(error=error, trend=trend, damped_trend=damped, seasonal=seasonal))
    return grid


def _fit_ets(endog: pd.Series, spec: ETSSpec, period: int):
    return ETSModel(
        endog,
        error=spec.error,
        trend=spec.trend,
        damped_trend=spec.damped_trend,
        seasonal=spec.seasonal,
        seasonal_periods=period if spec.seasonal else None,
    ).fit(disp=False)


def optimize_ets(endog: pd.Series, period: int = 12) -> pd.DataFrame:
    """
    Fit every ETS candidate and rank by AIC.

    Returns
    -------
    pd.DataFrame
        Columns ['spec', 'model', 'AIC', 'BIC', 'AICc'] sorted ascending by AIC.
        Empty if nothing converged; ``attrs["last_error"]`` holds the last
        exception raised by a candidate fit.
    """
    results: List[List[object]] = []
    last_error: Optional[Exception] = None
    for spec in tqdm(ets_candidate_grid(endog, period), desc="Grid search ETS"):
        try:
            res = _fit_ets(endog, spec, period)
        except Exception as e:
            logger.debug("%s failed: %s", spec.label, e)
            last_error = e
            continue

        aic = float(getattr(res, "aic", np.nan))
        if not _converged(res) or not np.isfinite(aic):
            logger.debug("%s did not converge", spec.label)
            continue
        results.append([spec, spec.label, aic,
                        float(getattr(res, "bic", np.nan)), float(getattr(res, "aicc", np.nan))])

    result_df = pd.DataFrame(results, columns=["spec", "model", "AIC", "BIC", "AICc"])
    result_df = result_df.sort_values(by="AIC", ascending=True).reset_index(drop=True)
    result_df.attrs["last_error"] = last_error
    return result_df


def fit_auto_ets(endog: pd.Series, period: int = 12) -> FittedModel:
    """
    Fit an ETS state-space model with automatic component selection by AIC.

    Raises
    ------
    ConvergenceError
        If no candidate in the model-family grid converges.
    """
    n_tried = len(ets_candidate_grid(endog, period))
    result_df = optimize_ets(endog, period)
    if result_df.empty:
        last_error = result_df.attrs.get("last_error")
        raise ConvergenceError(
            f"ETS search failed: none of {n_tried} candidates converged." + _last_error_text(last_error),
            n_candidates=n_tried,
            last_error=last_error,
        ) from last_error
    logger.info("Top ETS candidates by AIC:\n%s", result_df.drop(columns=["spec"]).head().to_string())

    spec = result_df.iloc[0]["spec"]
    res = _fit_ets(endog, spec, period)
    observed, fitted, resid = _in_sample_window(endog, res.fittedvalues, 0)

    logger.info("Selected %s with AIC=%.3f", spec.label, float(res.aic))
    return FittedModel(
        name="ETS",
        label=spec.label,
        kind="ets",
        aic=float(res.aic),
        bic=float(res.bic),
        aicc=float(res.aicc),
        observed=observed,
        fitted_values=fitted,
        residuals=resid,
        results=res,
        n_candidates=n_tried,
        spec={"ets": spec, "period": period},
        candidates=result_df.drop(columns=["spec"]),
    )


# ---------------------------------------------------------------------------
# Forecasting
# ---------------------------------------------------------------------------

def _future_index(observed: pd.Series, horizon: int) -> pd.Index:
    idx = observed.index
    if isinstance(idx, pd.DatetimeIndex):
        freq = idx.freq or pd.infer_freq(idx) or "MS"
        return pd.date_range(start=idx[-1], periods=horizon + 1, freq=freq)[1:]
    return pd.RangeIndex(len(idx), len(idx) + horizon)


def forecast_model(model: FittedModel,
                   horizon: int = 12,
                   levels: Sequence[int] = DEFAULT_INTERVALS,
                   random_state: int = 0) -> ForecastResult:
    """
    Project a fitted model forward with prediction intervals.

    Parameters
    ----------
    model : FittedModel
        Output of fit_auto_arima or fit_auto_ets
    horizon : int, default=12
        Number of future periods
    levels : Sequence[int], default=(80, 95)
        Coverage levels in percent
    random_state : int, default=0
        Seed for the ETS simulation path (multiplicative-error models only)

    Returns
    -------
    ForecastResult
        Mean and interval bounds of length ``horizon`` for every level.

    Notes
    -----
    ARIMA intervals are Gaussian from the state-space forecast variance.
    ETS intervals are analytic for additive-error models; the library only
    offers simulated intervals for multiplicative-error models, so those are
    drawn once with a fixed seed and every level is read off the same draws.
    """
    levels = sorted({int(lvl) for lvl in levels})
    res = model.results
    future = _future_index(model.observed, horizon)
    bounds: Dict[int, Tuple[pd.Series, pd.Series]] = {}
    method = "analytic"

    if model.kind == "arima":
        fc = res.get_forecast(steps=horizon)
        mean = pd.Series(np.asarray(fc.predicted_mean, dtype=float), index=future, name="mean")
        for lvl in levels:
            ci = np.asarray(fc.conf_int(alpha=1.0 - lvl / 100.0), dtype=float)
            bounds[lvl] = (pd.Series(ci[:, 0], index=future, name=f"lo_{lvl}"),
                           pd.Series(ci[:, 1], index=future, name=f"hi_{lvl}"))
    elif model.kind == "ets":
        spec: ETSSpec = model.spec["ets"]
        n = int(res.nobs)
        if spec.has_analytic_intervals:
            pred = res.get_prediction(start=n, end=n + horizon - 1, method="exact")
        else:
            method = "simulated"
            pred = res.get_prediction(start=n, end=n + horizon - 1, method="simulated",
                                      rng=np.random.default_rng(random_state))
        mean = pd.Series(np.asarray(pred.predicted_mean, dtype=float), index=future, name="mean")
        for lvl in levels:
            pi = np.asarray(pred.pred_int(alpha=1.0 - lvl / 100.0), dtype=float)
            bounds[lvl] = (pd.Series(pi[:, 0], index=future, name=f"lo_{lvl}"),
                           pd.Series(pi[:, 1], index=future, name=f"hi_{lvl}"))
    else:
        raise ValueError(f"Unknown model kind '{model.kind}'")

    logger.info("%s forecast: %d steps, levels=%s (%s intervals)", model.label, horizon, levels, method)
    return ForecastResult(model_name=model.name, mean=mean, bounds=bounds, method=method)

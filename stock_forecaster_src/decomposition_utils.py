# stock_forecaster_src/decomposition_utils.py

from dataclasses import dataclass
import logging

import numpy as np
import pandas as pd
from statsmodels.tsa.seasonal import seasonal_decompose

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecompositionResult:
    """Trend, seasonal and residual components aligned with the observed series."""
    observed: pd.Series
    trend: pd.Series
    seasonal: pd.Series
    residual: pd.Series
    period: int
    model: str = "additive"

    def reconstruct(self) -> pd.Series:
        """Sum of the components; NaN wherever the trend is undefined."""
        return self.trend + self.seasonal + self.residual

    def seasonal_profile(self) -> pd.Series:
        """One seasonal effect per position in the cycle (e.g. per calendar month)."""
        profile = self.seasonal.iloc[: self.period].copy()
        if isinstance(profile.index, pd.DatetimeIndex):
            profile.index = profile.index.strftime("%b")
        return profile

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "observed": self.observed,
            "trend": self.trend,
            "seasonal": self.seasonal,
            "residual": self.residual,
        })


def decompose_series(series: pd.Series, period: int = 12) -> DecompositionResult:
    """
    Classical additive decomposition of a fixed-frequency series.

    Parameters
    ----------
    series : pd.Series
        Monthly series without gaps.
    period : int, default=12
        Seasonal period; also the width of the centred moving average.

    Returns
    -------
    DecompositionResult
        Components aligned index-for-index with the input.

    Notes
    -----
    The trend is undefined (NaN) for the first and last ``period // 2``
    points; this is expected. The library raises ValueError for series
    shorter than two full periods.
    """
    res = seasonal_decompose(series, model="additive", period=period)
    n_undefined = int(np.isnan(np.asarray(res.trend, dtype=float)).sum())
    logger.info("Decomposed %d points (period=%d); trend undefined at %d boundary points",
                len(series), period, n_undefined)
    return DecompositionResult(
        observed=pd.Series(res.observed, index=series.index, name="observed"),
        trend=pd.Series(res.trend, index=series.index, name="trend"),
        seasonal=pd.Series(res.seasonal, index=series.index, name="seasonal"),
        residual=pd.Series(res.resid, index=series.index, name="residual"),
        period=period,
    )

# -*- coding: utf-8 -*-
"""
Temporal utilities for frequency alignment and aggregation.

Functions
---------
- daily_to_monthly_mean(series, name): Aggregate daily closes to a monthly
  series by within-month arithmetic mean, indexed at the month start.
- month_observation_counts(series): Number of daily records behind each month.
"""

from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

logger = logging.getLogger(__name__)

MONTHLY_FREQ = "MS"
PERIODS_PER_YEAR = 12


def _ensure_datetime_index(s: pd.Series) -> pd.Series:
    """
    Ensure a DatetimeIndex for the input series.

    - If PeriodIndex, convert to Timestamp index at the period start.
    - Leaves DatetimeIndex unchanged.
    """
    if isinstance(s.index, pd.PeriodIndex):
        s = s.copy()
        s.index = s.index.to_timestamp(how="start")
    elif not isinstance(s.index, pd.DatetimeIndex):
        raise TypeError("daily_to_monthly_mean expects a Series with DatetimeIndex or PeriodIndex.")
    return s


def daily_to_monthly_mean(series: pd.Series, name: Optional[str] = None) -> pd.Series:
    """
    Aggregate a daily price series to monthly by within-month mean.

    Parameters
    ----------
    series : pd.Series
        Daily series with DatetimeIndex or PeriodIndex.
    name : Optional[str]
        Name of the returned Series. Defaults to series.name or 'value'.

    Returns
    -------
    pd.Series
        Monthly series with a fixed month-start ('MS') index, one point per
        calendar month between the first and last record.

    Notes
    -----
    - Each date is truncated to its month start; the value is the arithmetic
      mean of every record in that month, however few there are.
    - A calendar month with no records at all is filled by time-linear
      interpolation and reported at WARNING level.
    """
    if not isinstance(series, pd.Series):
        raise TypeError("series must be a pandas Series")

    s = _ensure_datetime_index(series.dropna()).sort_index()
    if s.empty:
        raise ValueError("Cannot aggregate an empty series.")

    monthly = s.resample(MONTHLY_FREQ).mean()

    missing = int(monthly.isna().sum())
    if missing:
        logger.warning("%d calendar month(s) had no records; filled by linear interpolation.", missing)
        monthly = monthly.interpolate(method="time")

    monthly.index.name = "Month"
    monthly.name = name if name is not None else (series.name if series.name is not None else "value")
    return monthly


def month_observation_counts(series: pd.Series) -> pd.Series:
    """
    Count the daily records that fall in each calendar month.

    Months with zero records are included so thin or empty months stand out.
    """
    s = _ensure_datetime_index(series.dropna())
    counts = s.resample(MONTHLY_FREQ).count()
    counts.index.name = "Month"
    counts.name = "n_days"
    return counts

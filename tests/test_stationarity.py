import numpy as np
import pandas as pd
import pytest

from stock_forecaster_src.forecasting_utils import (
    StationarityResult, adf_test, check_stationarity, select_differencing_order
)


def _white_noise(n=200, seed=1):
    rng = np.random.default_rng(seed)
    return pd.Series(rng.normal(0, 1, n))


def _random_walk_with_drift(n=300, seed=2):
    rng = np.random.default_rng(seed)
    return pd.Series(np.cumsum(rng.normal(0.5, 1, n)))


def test_white_noise_is_stationary():
    res = check_stationarity(_white_noise())

    assert isinstance(res, StationarityResult)
    assert res.p_value < 0.05
    assert res.is_stationary
    assert res.decision == "stationary"
    assert set(res.critical_values) == {"1%", "5%", "10%"}


def test_random_walk_needs_differencing():
    res = check_stationarity(_random_walk_with_drift())

    assert res.p_value > 0.05
    assert not res.is_stationary
    assert "differencing" in res.decision


def test_first_difference_of_random_walk_is_stationary():
    rw = _random_walk_with_drift()
    assert check_stationarity(rw.diff().dropna()).is_stationary


def test_alpha_controls_decision():
    res = StationarityResult(statistic=-2.0, p_value=0.08, used_lag=1, n_obs=100,
                             critical_values={}, alpha=0.10)
    assert res.is_stationary
    res = StationarityResult(statistic=-2.0, p_value=0.08, used_lag=1, n_obs=100,
                             critical_values={}, alpha=0.05)
    assert not res.is_stationary


def test_adf_test_drops_nans():
    s = _white_noise()
    s.iloc[:5] = np.nan
    stat, pval = adf_test(s)
    assert np.isfinite(stat)
    assert 0.0 <= pval <= 1.0


def test_select_differencing_order():
    assert select_differencing_order(_white_noise(), test="adf") == 0
    d = select_differencing_order(_random_walk_with_drift(), test="kpss")
    assert 1 <= d <= 2


def test_select_differencing_order_unknown_test():
    with pytest.raises(ValueError):
        select_differencing_order(_random_walk_with_drift(), test="pp")

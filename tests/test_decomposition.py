import numpy as np
import pandas as pd
import pytest

from stock_forecaster_src.decomposition_utils import decompose_series


def _seasonal_monthly(n=60, seed=0):
    rng = np.random.default_rng(seed)
    idx = pd.date_range("2015-01-01", periods=n, freq="MS")
    t = np.arange(n)
    values = 50 + 0.8 * t + 5 * np.sin(2 * np.pi * t / 12) + rng.normal(0, 0.5, n)
    return pd.Series(values, index=idx, name="Close")


def test_components_add_back_to_observed():
    s = _seasonal_monthly()
    dec = decompose_series(s, period=12)

    defined = dec.trend.notna()
    assert np.allclose(dec.reconstruct()[defined], s[defined])


def test_trend_undefined_at_boundaries_only():
    s = _seasonal_monthly()
    dec = decompose_series(s, period=12)

    assert dec.trend.iloc[:6].isna().all()
    assert dec.trend.iloc[-6:].isna().all()
    assert dec.trend.iloc[6:-6].notna().all()
    assert dec.seasonal.notna().all()


def test_seasonal_profile_is_centred_and_labelled():
    s = _seasonal_monthly()
    dec = decompose_series(s, period=12)
    profile = dec.seasonal_profile()

    assert len(profile) == 12
    assert profile.index[0] == "Jan"
    assert abs(profile.sum()) < 1e-8
    # The sine peaks around April and bottoms out around October
    assert profile["Apr"] > 0 > profile["Oct"]


def test_components_share_input_index():
    s = _seasonal_monthly(n=36)
    dec = decompose_series(s)
    frame = dec.to_frame()

    assert list(frame.columns) == ["observed", "trend", "seasonal", "residual"]
    assert frame.index.equals(s.index)
    assert dec.model == "additive"


def test_too_short_series_is_rejected():
    s = _seasonal_monthly(n=18)
    with pytest.raises(ValueError):
        decompose_series(s, period=12)

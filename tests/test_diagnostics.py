from pathlib import Path

import numpy as np
import pandas as pd

from stock_forecaster_src.diagnostics_utils import residual_diagnostics, save_acf_pacf_plot


def test_residual_diagnostics_schema():
    rng = np.random.default_rng(5)
    resid = pd.Series(rng.normal(0, 1, 120))
    df = residual_diagnostics(resid, max_lag=12)

    assert list(df.columns) == ["test", "statistic", "p_value", "interpretation"]
    assert len(df) == 3
    assert df["test"].iloc[0] == "Ljung-Box (lag 12)"
    assert df["p_value"].between(0.0, 1.0).all()


def test_ljung_box_flags_autocorrelated_residuals():
    rng = np.random.default_rng(6)
    e = rng.normal(0, 1, 200)
    ar = np.zeros_like(e)
    for t in range(1, len(e)):
        ar[t] = 0.9 * ar[t - 1] + e[t]
    df = residual_diagnostics(ar)

    assert df["p_value"].iloc[0] < 0.05
    assert "Serial correlation detected" in df["interpretation"].iloc[0]


def test_short_residuals_shorten_the_lag():
    df = residual_diagnostics(np.random.default_rng(9).normal(0, 1, 20), max_lag=12)
    assert df["test"].iloc[0] == "Ljung-Box (lag 4)"


def test_save_acf_pacf_plot(tmp_path: Path):
    rng = np.random.default_rng(8)
    out = tmp_path / "figs" / "acf.png"
    save_acf_pacf_plot(rng.normal(0, 1, 60), out, title="ARIMA residual")
    assert out.exists()
    assert out.stat().st_size > 0

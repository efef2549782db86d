import numpy as np
import pandas as pd
import pytest

from stock_forecaster_src.forecasting_utils import FittedModel
from stock_forecaster_src.metrics_utils import (
    compare_models, compute_in_sample_metrics, mae, mape_eps, mase_metric, rmse
)


def _model(name, label, aic, observed, fitted):
    idx = pd.date_range("2020-01-01", periods=len(observed), freq="MS")
    obs = pd.Series(observed, index=idx, dtype=float)
    fit = pd.Series(fitted, index=idx, dtype=float)
    return FittedModel(name=name, label=label, kind="arima", aic=aic, bic=aic + 1.0, aicc=aic + 0.5,
                       observed=obs, fitted_values=fit, residuals=obs - fit,
                       results=None, n_candidates=1)


def test_rmse_and_mae_known_values():
    y = [1.0, 2.0, 3.0, 4.0]
    yhat = [1.0, 2.0, 3.0, 6.0]
    assert rmse(y, yhat) == pytest.approx(1.0)
    assert mae(y, yhat) == pytest.approx(0.5)


def test_metrics_ignore_non_finite_values():
    y = [1.0, np.nan, 3.0]
    yhat = [2.0, 5.0, 3.0]
    met = compute_in_sample_metrics(y, yhat)
    assert met["RMSE"] == pytest.approx(np.sqrt(0.5))
    assert met["ME"] == pytest.approx(-0.5)


def test_mape_eps_is_percentage():
    assert mape_eps([100.0, 200.0], [110.0, 180.0], eps=1e-8) == pytest.approx(10.0)


def test_mase_against_seasonal_naive():
    train = np.arange(30, dtype=float)
    # Seasonal-naive error with m=12 is constant 12
    assert mase_metric([10.0], [16.0], train, m=12) == pytest.approx(0.5)
    assert np.isnan(mase_metric([10.0], [16.0], train[:10], m=12))


def test_compare_models_table():
    a = _model("ARIMA", "ARIMA(1,1,0) with drift", 100.0, [1, 2, 3, 4], [1, 2, 3, 5])
    b = _model("ETS", "ETS(A,A,N)", 95.0, [1, 2, 3, 4], [1, 3, 3, 4])
    table = compare_models([a, b])

    assert list(table.columns) == ["Model", "Specification", "AIC", "BIC", "RMSE", "MAE", "MAPE", "MASE"]
    assert table["Model"].tolist() == ["ARIMA", "ETS"]
    assert table["AIC"].tolist() == [100.0, 95.0]
    assert table["RMSE"].tolist() == pytest.approx([0.5, 0.5])

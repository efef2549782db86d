from pathlib import Path

import numpy as np
import pandas as pd
import pytest

import stock_forecaster_src.config_utils as cu
from stock_forecaster_src.data_utils import load_price_csv, summary_statistics
from stock_forecaster_src.main import main, run_report_workflow

N_DAYS = 1501


def _documented_closes(seed=0) -> pd.Series:
    """
    Daily closes with min 3.05, max 233.81, mean 60.91 and median 29.80.

    The sorted values are fixed; only their order in time is random, with a
    noisy upward drift so the monthly series looks like a growth stock.
    """
    lower = np.linspace(3.05, 29.80, 750)
    target_sum = 60.91 * N_DAYS
    rest = target_sum - lower.sum() - 29.80 - 233.81
    top = 2.0 * rest / 749 - 29.80
    upper = np.linspace(29.80, top, 749)
    sorted_values = np.sort(np.concatenate([lower, [29.80], upper, [233.81]]))

    rng = np.random.default_rng(seed)
    noisy_rank = np.arange(N_DAYS) + rng.normal(0, 15, N_DAYS)
    values = np.empty(N_DAYS)
    values[np.argsort(noisy_rank)] = sorted_values

    idx = pd.bdate_range("2015-01-01", periods=N_DAYS)
    return pd.Series(values, index=idx, name="Close")


def _write_csv(tmp_path: Path) -> Path:
    closes = _documented_closes()
    df = pd.DataFrame({
        "Date": closes.index.strftime("%Y-%m-%d"),
        "Open": closes.values,
        "Close": closes.values,
        "Volume": 1000,
    })
    # Newest first, as many price exports are
    path = tmp_path / "prices.csv"
    df.iloc[::-1].to_csv(path, index=False)
    return path


@pytest.fixture
def small_search_config(tmp_path: Path):
    cfg = tmp_path / "report.yaml"
    cfg.write_text(
        "model:\n  arima:\n    max_p: 1\n    max_q: 1\n    max_d: 2\n"
        "forecast:\n  horizon: 12\n  intervals: [80, 95]\n",
        encoding="utf-8",
    )
    cu.reset_config()
    cu.initialize_config(cfg)
    yield cfg
    cu.reset_config()


def test_documented_summary_statistics(tmp_path: Path):
    close = load_price_csv(_write_csv(tmp_path))
    row = summary_statistics(close).iloc[0]

    assert row["count"] == N_DAYS
    assert round(row["min"], 2) == 3.05
    assert round(row["max"], 2) == 233.81
    assert round(row["mean"], 2) == 60.91
    assert round(row["median"], 2) == 29.80
    assert row["first_date"] == pd.Timestamp("2015-01-01").date()


def test_report_workflow_writes_report_and_figures(tmp_path: Path, small_search_config):
    price_path = _write_csv(tmp_path)
    out_dir = tmp_path / "report"

    report = run_report_workflow(price_path, out_dir)

    assert report == out_dir / "report.md"
    text = report.read_text(encoding="utf-8")
    for heading in ("## 1. Data", "## 2. Decomposition", "## 3. Stationarity", "## 4. Models",
                    "## 5. Model comparison", "## 7. Residual diagnostics"):
        assert heading in text
    assert "## 6. Forecasts (12 months, 80% and 95% intervals)" in text
    assert "### ARIMA" in text
    assert "### ETS" in text

    figures = out_dir / "figures"
    for name in ("ClosePrice.png", "MonthlyClose.png", "Decomposition.png",
                 "Forecast_ARIMA.png", "Forecast_ETS.png", "ForecastComparison.png",
                 "Residuals_ARIMA_ACF_PACF.png", "Residuals_ETS_ACF_PACF.png"):
        assert (figures / name).exists(), name


def test_cli_missing_file_exits_with_file_error(tmp_path: Path):
    cu.reset_config()
    try:
        with pytest.raises(SystemExit) as exc:
            main(["--price-csv", str(tmp_path / "missing.csv"), "--output-dir", str(tmp_path / "out")])
    finally:
        cu.reset_config()
    assert "FileError" in str(exc.value)
    assert not (tmp_path / "out").exists()

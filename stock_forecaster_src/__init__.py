# stock_forecaster_src/__init__.py

"""
Stock Price Forecaster - ARIMA and ETS analysis of a daily closing-price series

Key Components
--------------
- config_utils: Configuration management and CLI override support
- data_utils: Price CSV loading and summary statistics
- decomposition_utils: Classical additive decomposition
- forecasting_utils: ADF stationarity test, automatic ARIMA and ETS fitting, forecasts
- metrics_utils: In-sample accuracy metrics and the model comparison table
- diagnostics_utils: Residual tests and ACF/PACF plots
- plotting_utils: Price, decomposition and forecast charts
- report_utils: Markdown report rendering
- file_utils: Paths, hashing and markdown tables
- main: Main entry point and workflow orchestration

Usage
-----
    # Command-line usage
    python -m stock_forecaster_src.main

    # Programmatic usage
    from stock_forecaster_src import load_price_csv, fit_auto_arima, forecast_model
"""

__version__ = "1.0.0"

from .errors import StockReportError, FileError, ParseError, ConvergenceError
from .config_utils import initialize_config, get_config_value
from .data_utils import load_price_csv, summary_statistics
from .decomposition_utils import DecompositionResult, decompose_series
from .forecasting_utils import (
    FittedModel, ForecastResult, StationarityResult,
    adf_test, check_stationarity, fit_auto_arima, fit_auto_ets, forecast_model
)
from .metrics_utils import compare_models
from .main import main, run_report_workflow

__all__ = [
    # Core functionality
    "main",
    "run_report_workflow",
    "initialize_config",
    "get_config_value",
    "load_price_csv",
    "summary_statistics",
    "decompose_series",
    "adf_test",
    "check_stationarity",
    "fit_auto_arima",
    "fit_auto_ets",
    "forecast_model",
    "compare_models",
    # Result types
    "DecompositionResult",
    "FittedModel",
    "ForecastResult",
    "StationarityResult",
    # Errors
    "StockReportError",
    "FileError",
    "ParseError",
    "ConvergenceError",
    # Version info
    "__version__",
]

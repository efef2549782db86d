# stock_forecaster_src/main.py

"""
Exploratory analysis and 12-month forecast of a stock's closing price.

Purpose
-------
- Load daily closes from CSV and summarise them
- Aggregate to a monthly mean series and plot both
- Classical additive decomposition (period 12)
- ADF stationarity check on levels and first differences (advisory)
- Fit ARIMA (automatic differencing and order selection by AIC) and
  ETS (automatic error/trend/seasonal selection by AIC)
- Compare the two by AIC and in-sample RMSE
- Forecast 12 months ahead with 80% and 95% intervals
- Write report.md plus figures

Running with no flags renders the report from data/stock_prices.csv into
report/. Settings come from config/report.yaml; CLI flags override them.
"""

import argparse
import logging
import warnings
from pathlib import Path
from typing import Optional

from helpers.temporal import daily_to_monthly_mean, month_observation_counts

from .config_utils import initialize_config, get_config_value
from .data_utils import load_price_csv, summary_statistics
from .decomposition_utils import decompose_series
from .diagnostics_utils import residual_diagnostics, save_acf_pacf_plot
from .errors import StockReportError
from .file_utils import ensure_dir, get_file_hash, resolve_path
from .forecasting_utils import check_stationarity, fit_auto_arima, fit_auto_ets, forecast_model
from .metrics_utils import compare_models
from .parsing_utils import parse_intervals_arg, validate_log_level
from .plotting_utils import (
    plot_close_price, plot_monthly_series, plot_decomposition,
    plot_forecast_overlay, plot_forecast_comparison
)
from .report_utils import render_report

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent


def run_report_workflow(price_path: Path,
                        output_dir: Path,
                        args: Optional[argparse.Namespace] = None) -> Path:
    """
    Run the whole analysis and write the report.

    Each step uses the completed output of the previous one; any error
    aborts the run.

    Parameters
    ----------
    price_path : Path
        Input CSV with 'Date' and 'Close' columns
    output_dir : Path
        Directory for report.md; figures go to a subfolder
    args : Optional[argparse.Namespace]
        CLI arguments overriding configuration values

    Returns
    -------
    Path
        Path of the written report
    """
    period = get_config_value("decomposition.period", 12)
    alpha = get_config_value("stationarity.alpha", 0.05)
    horizon = int(get_config_value("forecast.horizon", 12, args, "horizon"))
    levels = parse_intervals_arg(get_config_value("forecast.intervals", [80, 95], args, "intervals"))
    random_state = get_config_value("forecast.random_state", 0)

    # 1) Load and aggregate
    close = load_price_csv(
        price_path,
        date_column=get_config_value("data.date_column", "Date"),
        close_column=get_config_value("data.close_column", "Close"),
        date_format=get_config_value("data.date_format", None),
    )
    figures_dir = output_dir / get_config_value("report.figures_subdir", "figures")
    ensure_dir(figures_dir)
    figures = {}

    summary = summary_statistics(close)
    logger.info("Summary statistics:\n%s", summary.to_string())

    monthly = daily_to_monthly_mean(close, name="Close")
    month_counts = month_observation_counts(close)
    logger.info("Monthly series: %d points from %s to %s",
                len(monthly), monthly.index[0].date(), monthly.index[-1].date())

    figures["close"] = figures_dir / "ClosePrice.png"
    plot_close_price(close, figures["close"])
    figures["monthly"] = figures_dir / "MonthlyClose.png"
    plot_monthly_series(monthly, figures["monthly"], daily=close)

    # 2) Decompose
    decomposition = decompose_series(monthly, period=period)
    figures["decomposition"] = figures_dir / "Decomposition.png"
    plot_decomposition(decomposition, figures["decomposition"])

    # 3) Stationarity (advisory)
    stationarity = {
        "Monthly close": check_stationarity(monthly, alpha=alpha),
        "Monthly close, first difference": check_stationarity(monthly.diff().dropna(), alpha=alpha),
    }

    # 4) Fit
    arima = fit_auto_arima(
        monthly,
        max_p=get_config_value("model.arima.max_p", 3),
        max_q=get_config_value("model.arima.max_q", 3),
        max_d=get_config_value("model.arima.max_d", 2),
        max_P=get_config_value("model.arima.max_P", 0),
        max_Q=get_config_value("model.arima.max_Q", 0),
        D=get_config_value("model.arima.D", 0),
        s=period,
        ndiffs_test=get_config_value("stationarity.ndiffs_test", "kpss"),
        alpha=alpha,
    )
    ets = fit_auto_ets(monthly, period=period)
    models = [arima, ets]

    # 5) Compare
    comparison = compare_models(models, m=period)

    # 6) Forecast
    forecasts = {}
    for model in models:
        fc = forecast_model(model, horizon=horizon, levels=levels, random_state=random_state)
        forecasts[model.name] = fc
        figures[f"forecast_{model.name}"] = figures_dir / f"Forecast_{model.name}.png"
        plot_forecast_overlay(monthly, fc, figures[f"forecast_{model.name}"],
                              title=f"{model.label}: {horizon}-month forecast",
                              fitted=model.fitted_values)
    figures["forecast_comparison"] = figures_dir / "ForecastComparison.png"
    plot_forecast_comparison(monthly, forecasts, figures["forecast_comparison"], level=max(levels))

    # 7) Residual diagnostics
    diagnostics = {}
    for model in models:
        diagnostics[model.name] = residual_diagnostics(model.residuals, max_lag=period)
        figures[f"acf_{model.name}"] = figures_dir / f"Residuals_{model.name}_ACF_PACF.png"
        save_acf_pacf_plot(model.residuals, figures[f"acf_{model.name}"], title=f"{model.name} residual")

    # 8) Report
    report_path = render_report(
        output_dir / "report.md",
        source_path=price_path,
        summary=summary,
        month_counts=month_counts,
        stationarity=stationarity,
        decomposition=decomposition,
        models=models,
        comparison=comparison,
        forecasts=forecasts,
        diagnostics=diagnostics,
        figures=figures,
        source_hash=get_file_hash(price_path),
        horizon=horizon,
        levels=levels,
    )
    logger.info("Report workflow completed: %s", report_path)
    return report_path


def setup_cli_parser() -> argparse.ArgumentParser:
    """
    Set up the command-line argument parser.

    Every flag is optional; without flags the configured defaults are used.
    """
    parser = argparse.ArgumentParser(
        description="Decompose, model (ARIMA, ETS) and forecast a stock's monthly closing price."
    )
    parser.add_argument(
        "--price-csv", type=str, default=None,
        help="CSV with 'Date' and 'Close' columns (resolved relative to the project root if not absolute)."
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Directory for report.md and figures."
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Alternative YAML configuration file."
    )
    parser.add_argument(
        "--horizon", type=int, default=None,
        help="Forecast horizon in months."
    )
    parser.add_argument(
        "--intervals", type=str, default=None,
        help="Comma-separated predictive interval coverages (e.g., '80,95')."
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity level."
    )
    return parser


def setup_logging(log_level: str) -> None:
    """
    Configure logging with specified level and warning filters.

    Parameters
    ----------
    log_level : str
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = validate_log_level(log_level)
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Configure warnings based on log level
    if level == "DEBUG":
        warnings.resetwarnings()
        warnings.filterwarnings("default")
    else:
        from statsmodels.tools.sm_exceptions import ConvergenceWarning, ValueWarning
        warnings.filterwarnings("ignore", category=ConvergenceWarning)
        warnings.filterwarnings("ignore", category=ValueWarning)
        warnings.filterwarnings("ignore", category=FutureWarning)
        warnings.filterwarnings("ignore", category=RuntimeWarning, module="statsmodels")
        warnings.filterwarnings("ignore", category=UserWarning, module="statsmodels")


def main(argv=None) -> None:
    """
    Main entry point: parse flags, load configuration, render the report.

    A failure anywhere in the pipeline stops the run and its message is
    printed unchanged.
    """
    parser = setup_cli_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    initialize_config(Path(args.config) if args.config else None)

    price_path = resolve_path(get_config_value("data.price_csv", "data/stock_prices.csv", args, "price_csv"), BASE_DIR)
    output_dir = resolve_path(get_config_value("report.output_dir", "report", args, "output_dir"), BASE_DIR)

    try:
        run_report_workflow(price_path, output_dir, args)
    except StockReportError as e:
        logger.error("Report aborted: %s", e)
        raise SystemExit(f"{type(e).__name__}: {e}") from e


if __name__ == "__main__":
    main()

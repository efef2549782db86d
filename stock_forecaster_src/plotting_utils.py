# stock_forecaster_src/plotting_utils.py

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
from pathlib import Path
from typing import Dict, Optional
import logging

from .decomposition_utils import DecompositionResult
from .file_utils import ensure_dir
from .forecasting_utils import ForecastResult

logger = logging.getLogger(__name__)

BAND_ALPHAS = {80: 0.35, 95: 0.18}


def plot_close_price(close: pd.Series, out_path: Path, title: str = "Daily closing price") -> None:
    """
    Render and save the raw daily closing price line.

    Parameters
    ----------
    close : pd.Series
        Daily closes with DatetimeIndex
    out_path : Path
        File path to save the rendered PNG (parents are created if missing)
    title : str
        Figure title
    """
    ensure_dir(out_path.parent)
    fig, ax = plt.subplots(figsize=(10, 4.5))
    ax.plot(close.index, close.values, color="black", linewidth=0.8)
    ax.set_xlabel("Date")
    ax.set_ylabel("Close ($)")
    ax.set_title(title)
    fig.autofmt_xdate()
    plt.tight_layout()
    fig.savefig(out_path, dpi=300)
    plt.close(fig)


def plot_monthly_series(monthly: pd.Series, out_path: Path, daily: Optional[pd.Series] = None) -> None:
    """
    Plot the monthly mean close, optionally over the daily closes it came from.
    """
    ensure_dir(out_path.parent)
    fig, ax = plt.subplots(figsize=(10, 4.5))
    if daily is not None:
        ax.plot(daily.index, daily.values, color="tab:gray", linewidth=0.5, alpha=0.6, label="daily close")
    ax.plot(monthly.index, monthly.values, color="tab:blue", linewidth=1.5, marker=".", label="monthly mean")
    ax.set_xlabel("Month")
    ax.set_ylabel("Close ($)")
    ax.set_title("Monthly mean closing price")
    ax.legend()
    fig.autofmt_xdate()
    plt.tight_layout()
    fig.savefig(out_path, dpi=300)
    plt.close(fig)


def plot_decomposition(decomp: DecompositionResult, out_path: Path) -> None:
    """
    Render the four-panel additive decomposition (observed, trend, seasonal, residual).
    """
    ensure_dir(out_path.parent)
    fig, axes = plt.subplots(nrows=4, ncols=1, sharex=True, figsize=(10, 8))
    panels = [
        ("Observed", decomp.observed),
        ("Trend", decomp.trend),
        ("Seasonal", decomp.seasonal),
        ("Residual", decomp.residual),
    ]
    for ax, (name, s) in zip(axes, panels):
        if name == "Residual":
            ax.scatter(s.index, s.values, s=8, color="black")
            ax.axhline(0.0, color="tab:gray", linewidth=0.8)
        else:
            ax.plot(s.index, s.values, color="black", linewidth=1)
        ax.set_ylabel(name)
        ax.spines["top"].set_alpha(0)
        ax.tick_params(labelsize=7)
    axes[0].set_title(f"Additive decomposition (period={decomp.period})")
    fig.autofmt_xdate()
    plt.tight_layout()
    fig.savefig(out_path, dpi=300)
    plt.close(fig)


def plot_forecast_overlay(history: pd.Series,
                          forecast: ForecastResult,
                          out_path: Path,
                          title: Optional[str] = None,
                          fitted: Optional[pd.Series] = None) -> None:
    """
    Plot history, point forecast and shaded confidence bands.

    Wider bands are drawn first so the narrower ones stay visible on top.
    """
    ensure_dir(out_path.parent)
    fig, ax = plt.subplots(figsize=(10, 4.5))
    ax.plot(history.index, history.values, color="black", linewidth=1.2, label="observed")
    if fitted is not None:
        ax.plot(fitted.index, fitted.values, color="tab:orange", linewidth=0.9, linestyle="--", label="fitted")

    for lvl in sorted(forecast.bounds, reverse=True):
        lower, upper = forecast.bounds[lvl]
        ax.fill_between(forecast.mean.index, lower.values, upper.values,
                        color="tab:blue", alpha=BAND_ALPHAS.get(lvl, 0.25), linewidth=0,
                        label=f"{lvl}% interval")
    ax.plot(forecast.mean.index, forecast.mean.values, color="tab:blue", linewidth=1.5, label="forecast")

    ax.set_xlabel("Month")
    ax.set_ylabel("Close ($)")
    ax.set_title(title or f"{forecast.model_name} forecast ({forecast.horizon} months)")
    ax.legend(loc="upper left")
    fig.autofmt_xdate()
    plt.tight_layout()
    fig.savefig(out_path, dpi=300)
    plt.close(fig)


def plot_forecast_comparison(history: pd.Series,
                             forecasts: Dict[str, ForecastResult],
                             out_path: Path,
                             level: int = 95) -> None:
    """
    Overlay the point forecasts of several models with their ``level`` bands.
    """
    ensure_dir(out_path.parent)
    fig, ax = plt.subplots(figsize=(10, 4.5))
    ax.plot(history.index, history.values, color="black", linewidth=1.2, label="observed")

    colors = ["tab:red", "tab:blue", "tab:green", "tab:orange", "tab:purple"]
    for i, (name, fc) in enumerate(forecasts.items()):
        color = colors[i % len(colors)]
        ax.plot(fc.mean.index, fc.mean.values, color=color, linestyle="--", label=name)
        if level in fc.bounds:
            lower, upper = fc.bounds[level]
            ax.fill_between(fc.mean.index, lower.values, upper.values, color=color, alpha=0.12, linewidth=0)

    ax.set_ylabel("Close ($)")
    ax.set_title(f"Forecast comparison ({level}% intervals)")
    ax.legend(loc="upper left")
    fig.autofmt_xdate()
    plt.tight_layout()
    fig.savefig(out_path, dpi=300)
    plt.close(fig)

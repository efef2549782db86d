# stock_forecaster_src/report_utils.py

"""
Markdown rendering of the analysis report.

Presentation only: every number shown here has already been computed by the
data, decomposition, forecasting and metrics modules.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional
import logging

import pandas as pd

from .decomposition_utils import DecompositionResult
from .file_utils import md_table_from_df, write_text
from .forecasting_utils import FittedModel, ForecastResult, StationarityResult

logger = logging.getLogger(__name__)


def _figure(figures: Dict[str, Path], key: str, caption: str, out_dir: Path) -> str:
    path = figures.get(key)
    if path is None:
        return ""
    try:
        rel = path.relative_to(out_dir)
    except ValueError:
        rel = path
    return f"![{caption}]({rel.as_posix()})\n"


def _stationarity_table(results: Dict[str, StationarityResult]) -> str:
    rows = []
    for name, res in results.items():
        rows.append({
            "Series": name,
            "ADF statistic": res.statistic,
            "p-value": res.p_value,
            "Lags": res.used_lag,
            "1% crit.": res.critical_values.get("1%"),
            "5% crit.": res.critical_values.get("5%"),
            "Decision": res.decision,
        })
    return md_table_from_df(pd.DataFrame(rows), float_fmt=".4f")


def _model_section(model: FittedModel, top_n: int = 5) -> List[str]:
    lines = [f"### {model.name}: {model.label}", ""]
    lines.append(f"Selected from {model.n_candidates} candidates by AIC "
                 f"(AIC={model.aic:.2f}, AICc={model.aicc:.2f}, BIC={model.bic:.2f}).")
    lines.append("")
    if model.candidates is not None and not model.candidates.empty:
        cand = model.candidates.head(top_n).copy()
        for col in cand.columns:
            if cand[col].dtype == object:
                cand[col] = cand[col].astype(str)
        lines.append(md_table_from_df(cand))
        lines.append("")
    return lines


def render_report(out_path: Path,
                  source_path: Path,
                  summary: pd.DataFrame,
                  month_counts: pd.Series,
                  stationarity: Dict[str, StationarityResult],
                  decomposition: DecompositionResult,
                  models: List[FittedModel],
                  comparison: pd.DataFrame,
                  forecasts: Dict[str, ForecastResult],
                  diagnostics: Dict[str, pd.DataFrame],
                  figures: Dict[str, Path],
                  source_hash: Optional[str] = None,
                  horizon: int = 12,
                  levels: Optional[List[int]] = None) -> Path:
    """
    Write the full analysis report as markdown.

    Parameters
    ----------
    out_path : Path
        Destination markdown file; figure links are made relative to its folder
    source_path : Path
        Input CSV, named in the data section
    summary : pd.DataFrame
        Output of data_utils.summary_statistics
    month_counts : pd.Series
        Trading days per month (helpers.temporal.month_observation_counts)
    stationarity : Dict[str, StationarityResult]
        ADF results keyed by series description
    decomposition : DecompositionResult
        Additive decomposition of the monthly series
    models : List[FittedModel]
        Selected models, in report order
    comparison : pd.DataFrame
        Output of metrics_utils.compare_models
    forecasts : Dict[str, ForecastResult]
        Forecasts keyed by model name
    diagnostics : Dict[str, pd.DataFrame]
        Residual test tables keyed by model name
    figures : Dict[str, Path]
        Figure paths keyed by 'close', 'monthly', 'decomposition',
        'forecast_<name>', 'forecast_comparison', 'acf_<name>'

    Returns
    -------
    Path
        The written report path
    """
    out_dir = out_path.parent
    if levels is None:
        levels = next(iter(forecasts.values())).levels if forecasts else []
    levels = sorted(levels)
    generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")

    lines: List[str] = [
        "# Stock closing price: decomposition, ARIMA and ETS forecasts",
        "",
        f"_Generated {generated} from `{source_path.name}`"
        + (f" (sha256 `{source_hash[:16]}`)" if source_hash else "") + "._",
        "",
        "## 1. Data",
        "",
        md_table_from_df(summary, index=True),
        "",
        _figure(figures, "close", "Daily closing price", out_dir),
    ]

    thin = month_counts[month_counts < 10]
    lines += [
        f"The daily closes are averaged within each calendar month, giving {len(month_counts)} monthly points "
        f"({month_counts.index[0]:%b %Y} to {month_counts.index[-1]:%b %Y}).",
        "",
    ]
    if not thin.empty:
        lines += [
            f"{len(thin)} month(s) rest on fewer than 10 trading days and are weighted like full months:",
            "",
            md_table_from_df(thin.to_frame(), index=True),
            "",
        ]
    lines.append(_figure(figures, "monthly", "Monthly mean closing price", out_dir))

    lines += [
        "## 2. Decomposition",
        "",
        f"Classical additive decomposition with a centred moving-average trend (period {decomposition.period}). "
        f"The trend is undefined for the first and last {decomposition.period // 2} months.",
        "",
        _figure(figures, "decomposition", "Additive decomposition", out_dir),
        "Seasonal effect by calendar month:",
        "",
        md_table_from_df(decomposition.seasonal_profile().to_frame("seasonal").T, index=False),
        "",
        "## 3. Stationarity",
        "",
        "Augmented Dickey-Fuller test; a p-value above the threshold means the unit-root null cannot be "
        "rejected and the series needs differencing. This is advisory only: the ARIMA search picks its "
        "own differencing order.",
        "",
        _stationarity_table(stationarity),
        "",
        "## 4. Models",
        "",
    ]
    for model in models:
        lines += _model_section(model)

    lines += [
        "## 5. Model comparison",
        "",
        "In-sample fit. Lower AIC and lower RMSE are preferred; the choice is left to the reader.",
        "",
        md_table_from_df(comparison),
        "",
        _figure(figures, "forecast_comparison", "Forecast comparison", out_dir),
        f"## 6. Forecasts ({horizon} months, {' and '.join(f'{lvl}%' for lvl in levels)} intervals)",
        "",
    ]
    for name, fc in forecasts.items():
        table = fc.to_frame()
        table.index = table.index.strftime("%Y-%m") if isinstance(table.index, pd.DatetimeIndex) else table.index
        table.index.name = "Month"
        lines += [
            f"### {name}",
            "",
            f"Interval method: {fc.method}.",
            "",
            _figure(figures, f"forecast_{name}", f"{name} forecast", out_dir),
            md_table_from_df(table, index=True),
            "",
        ]

    lines += ["## 7. Residual diagnostics", ""]
    for name, table in diagnostics.items():
        lines += [
            f"### {name}",
            "",
            md_table_from_df(table, float_fmt=".4f"),
            "",
            _figure(figures, f"acf_{name}", f"{name} residual ACF/PACF", out_dir),
        ]

    text = "\n".join(lines).rstrip() + "\n"
    return write_text(out_path, text)

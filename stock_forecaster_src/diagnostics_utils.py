# stock_forecaster_src/diagnostics_utils.py

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from pathlib import Path
from typing import Union
import logging

from statsmodels.graphics.tsaplots import plot_acf, plot_pacf
from statsmodels.stats.diagnostic import acorr_ljungbox, het_arch
from statsmodels.stats.stattools import jarque_bera

from .file_utils import ensure_dir

logger = logging.getLogger(__name__)


def residual_diagnostics(residuals: Union[pd.Series, np.ndarray],
                         max_lag: int = 12,
                         significance: float = 0.05) -> pd.DataFrame:
    """
    Ljung-Box, Jarque-Bera and ARCH-LM tests on a model's residuals.

    Parameters
    ----------
    residuals : Union[pd.Series, np.ndarray]
        Residual vector from a fitted model
    max_lag : int, default=12
        Ljung-Box lag (shortened for short series)
    significance : float, default=0.05
        Level used for the interpretation column

    Returns
    -------
    pd.DataFrame
        Columns ['test', 'statistic', 'p_value', 'interpretation']

    Notes
    -----
    A test that cannot be computed on the given residuals is reported with
    NaN statistics rather than aborting the report.
    """
    resid = pd.Series(np.asarray(residuals, dtype=float)).dropna()
    rows = []

    lag = int(min(max_lag, max(1, len(resid) // 5)))
    try:
        lb = acorr_ljungbox(resid, lags=[lag], return_df=True)
        stat, pval = float(lb["lb_stat"].iloc[0]), float(lb["lb_pvalue"].iloc[0])
    except (ValueError, np.linalg.LinAlgError) as e:
        logger.debug("Ljung-Box skipped: %s", e)
        stat, pval = float("nan"), float("nan")
    rows.append({
        "test": f"Ljung-Box (lag {lag})",
        "statistic": stat,
        "p_value": pval,
        "interpretation": ("Serial correlation detected in residuals" if pval < significance
                           else "No significant serial correlation in residuals"),
    })

    try:
        jb_stat, jb_pval, _, _ = jarque_bera(resid)
        jb_stat, jb_pval = float(jb_stat), float(jb_pval)
    except ValueError as e:
        logger.debug("Jarque-Bera skipped: %s", e)
        jb_stat, jb_pval = float("nan"), float("nan")
    rows.append({
        "test": "Jarque-Bera",
        "statistic": jb_stat,
        "p_value": jb_pval,
        "interpretation": ("Residuals not normally distributed" if jb_pval < significance
                           else "Residuals appear normally distributed"),
    })

    nlags = int(min(12, max(2, len(resid) // 10)))
    try:
        lm_stat, lm_pval, _, _ = het_arch(resid, nlags=nlags)
        lm_stat, lm_pval = float(lm_stat), float(lm_pval)
    except (ValueError, np.linalg.LinAlgError) as e:
        logger.debug("ARCH LM skipped: %s", e)
        lm_stat, lm_pval = float("nan"), float("nan")
    rows.append({
        "test": f"ARCH-LM (lags {nlags})",
        "statistic": lm_stat,
        "p_value": lm_pval,
        "interpretation": ("ARCH effects detected in residuals" if lm_pval < significance
                           else "No ARCH effects detected in residuals"),
    })

    return pd.DataFrame(rows, columns=["test", "statistic", "p_value", "interpretation"])


def save_acf_pacf_plot(residuals: Union[pd.Series, np.ndarray],
                       out_path: Path,
                       title: str = "Residuals") -> None:
    """
    Save a combined ACF and PACF panel for a residual series.

    Parameters
    ----------
    residuals : Union[pd.Series, np.ndarray]
        Residual vector
    out_path : Path
        PNG path (parents are created if missing)
    title : str
        Prefix for the panel titles
    """
    resid = pd.Series(np.asarray(residuals, dtype=float)).dropna()
    ensure_dir(out_path.parent)
    lags = int(min(24, max(1, len(resid) // 2 - 1)))

    fig, axes = plt.subplots(2, 1, figsize=(8, 6), dpi=150)
    plot_acf(resid, ax=axes[0], lags=lags, zero=False)
    axes[0].set_title(f"{title} ACF")
    plot_pacf(resid, ax=axes[1], lags=lags, zero=False, method="ywm")
    axes[1].set_title(f"{title} PACF")
    fig.tight_layout()
    fig.savefig(out_path, dpi=300)
    plt.close(fig)
    logger.debug("Saved ACF/PACF panel: %s", out_path)

# stock_forecaster_src/metrics_utils.py

import numpy as np
import pandas as pd
from typing import Union, List, Dict, Sequence
import logging

logger = logging.getLogger(__name__)


def to_1d_array(x: Union[List[float], np.ndarray, pd.Series]) -> np.ndarray:
    """
    Convert input to 1D numpy array, filtering out non-finite values.

    Parameters
    ----------
    x : Union[List[float], np.ndarray, pd.Series]
        Input data to convert

    Returns
    -------
    np.ndarray
        1D array containing only finite values
    """
    arr = np.asarray(x, dtype=float).ravel()
    return arr[np.isfinite(arr)]


def mape_epsilon_from_train(y_train: Union[List[float], np.ndarray, pd.Series]) -> float:
    """
    Calculate epsilon value for stabilized MAPE computation from training data.

    Based on the 10th percentile of absolute training values, with a floor of 1e-8.
    """
    arr = to_1d_array(y_train)
    if arr.size == 0:
        return 1e-8
    return float(max(1e-8, np.percentile(np.abs(arr), 10.0)))


def mape_eps(y_true: Union[List[float], np.ndarray, pd.Series],
             y_hat: Union[List[float], np.ndarray, pd.Series],
             eps: float) -> float:
    """
    Calculate Mean Absolute Percentage Error with epsilon stabilization.

    Parameters
    ----------
    y_true : Union[List[float], np.ndarray, pd.Series]
        True values
    y_hat : Union[List[float], np.ndarray, pd.Series]
        Predicted values
    eps : float
        Minimum denominator

    Returns
    -------
    float
        MAPE as percentage (0-100+), or NaN if no valid data
    """
    yt = to_1d_array(y_true)
    yh = to_1d_array(y_hat)
    n = min(len(yt), len(yh))
    if n == 0:
        return float("nan")
    yt = yt[:n]
    yh = yh[:n]
    denom = np.maximum(np.abs(yt), eps)
    return float(np.mean(np.abs(yh - yt) / denom) * 100.0)


def mae(y_true: Union[List[float], np.ndarray, pd.Series],
        y_hat: Union[List[float], np.ndarray, pd.Series]) -> float:
    """Mean Absolute Error, or NaN if no valid data."""
    yt = to_1d_array(y_true)
    yh = to_1d_array(y_hat)
    n = min(len(yt), len(yh))
    if n == 0:
        return float("nan")
    return float(np.mean(np.abs(yh[:n] - yt[:n])))


def rmse(y_true: Union[List[float], np.ndarray, pd.Series],
         y_hat: Union[List[float], np.ndarray, pd.Series]) -> float:
    """
    Calculate Root Mean Square Error.

    RMSE penalizes large errors more heavily than MAE.

    Returns
    -------
    float
        Root mean square error, or NaN if no valid data
    """
    yt = to_1d_array(y_true)
    yh = to_1d_array(y_hat)
    n = min(len(yt), len(yh))
    if n == 0:
        return float("nan")
    return float(np.sqrt(np.mean((yh[:n] - yt[:n]) ** 2)))


def mase_metric(y_true: Union[List[float], np.ndarray, pd.Series],
                y_hat: Union[List[float], np.ndarray, pd.Series],
                y_train: Union[List[float], np.ndarray, pd.Series],
                m: int = 12) -> float:
    """
    Calculate Mean Absolute Scaled Error.

    MASE scales the MAE by the in-sample MAE of a seasonal naive forecast
    with period m. Values < 1 beat the seasonal naive forecast.

    Returns
    -------
    float
        MASE value, or NaN if the training data is too short or constant
    """
    yt = to_1d_array(y_true)
    yh = to_1d_array(y_hat)
    n = min(len(yt), len(yh))
    if n == 0:
        return float("nan")

    num = np.mean(np.abs(yh[:n] - yt[:n]))
    tr = to_1d_array(y_train)
    if len(tr) <= m:
        return float("nan")

    denom = np.mean(np.abs(tr[m:] - tr[:-m]))
    if not np.isfinite(denom) or denom <= 0.0:
        return float("nan")
    return float(num / denom)


def compute_in_sample_metrics(observed: Union[List[float], np.ndarray, pd.Series],
                              fitted: Union[List[float], np.ndarray, pd.Series],
                              m: int = 12) -> Dict[str, float]:
    """
    In-sample accuracy of a fitted model.

    Includes: ME, RMSE, MAE, MAPE, MASE (seasonal naive scaling with period m)
    """
    yt = np.asarray(observed, dtype=float).ravel()
    yh = np.asarray(fitted, dtype=float).ravel()
    mask = np.isfinite(yt) & np.isfinite(yh)
    yt, yh = yt[mask], yh[mask]
    eps = mape_epsilon_from_train(yt)
    return {
        "ME": float(np.mean(yt - yh)) if yt.size else float("nan"),
        "RMSE": rmse(yt, yh),
        "MAE": mae(yt, yh),
        "MAPE": mape_eps(yt, yh, eps),
        "MASE": mase_metric(yt, yh, yt, m=m),
    }


def compare_models(models: Sequence, m: int = 12) -> pd.DataFrame:
    """
    Tabulate information criteria and in-sample error for fitted models.

    No winner is picked: lower AIC and lower RMSE are the preference signals
    for whoever reads the table.

    Parameters
    ----------
    models : Sequence[FittedModel]
        Fitted models, in the order their rows should appear
    m : int, default=12
        Seasonal period for MASE scaling

    Returns
    -------
    pd.DataFrame
        Columns ['Model', 'Specification', 'AIC', 'BIC', 'RMSE', 'MAE', 'MAPE', 'MASE']
    """
    rows = []
    for model in models:
        met = compute_in_sample_metrics(model.observed, model.fitted_values, m=m)
        rows.append({
            "Model": model.name,
            "Specification": model.label,
            "AIC": model.aic,
            "BIC": model.bic,
            "RMSE": met["RMSE"],
            "MAE": met["MAE"],
            "MAPE": met["MAPE"],
            "MASE": met["MASE"],
        })
    table = pd.DataFrame(rows, columns=["Model", "Specification", "AIC", "BIC", "RMSE", "MAE", "MAPE", "MASE"])
    logger.info("Model comparison:\n%s", table.to_string(index=False))
    return table

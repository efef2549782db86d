# stock_forecaster_src/data_utils.py

import pandas as pd
from pathlib import Path
from typing import Optional, Union
import logging

from .errors import FileError, ParseError

logger = logging.getLogger(__name__)


def _clean_price_text(values: pd.Series) -> pd.Series:
    """Strip currency symbols, thousands separators and whitespace from price strings."""
    if pd.api.types.is_numeric_dtype(values):
        return values
    return (
        values.astype(str)
        .str.strip()
        .str.replace("$", "", regex=False)
        .str.replace(",", "", regex=False)
    )


def load_price_csv(price_path: Union[str, Path],
                   date_column: str = "Date",
                   close_column: str = "Close",
                   date_format: Optional[str] = None) -> pd.Series:
    """
    Load daily closing prices from a CSV with a date column and a close column.

    Other columns (Open, High, Low, Volume, ...) are read but ignored. The
    records are sorted chronologically; duplicates are kept as-is.

    Parameters
    ----------
    price_path : Union[str, Path]
        Path to the CSV file.
    date_column : str, default="Date"
        Name of the date column. Values may be ISO or any format pandas can infer.
    close_column : str, default="Close"
        Name of the closing price column. Leading '$' and thousands separators
        are tolerated.
    date_format : Optional[str]
        Explicit strptime format for the date column, if inference is not wanted.

    Returns
    -------
    pd.Series
        Closing prices named 'Close' with a DatetimeIndex named 'Date',
        non-decreasing by date.

    Raises
    ------
    FileError
        If the file does not exist or cannot be read.
    ParseError
        If a required column is missing, or any date or close value cannot be parsed.
    """
    price_path = Path(price_path)
    if not price_path.is_file():
        raise FileError(f"Price CSV not found: {price_path}", path=str(price_path))

    logger.info("Loading price history from: %s", price_path)
    try:
        df = pd.read_csv(price_path)
    except (OSError, UnicodeDecodeError) as e:
        raise FileError(f"Cannot read price CSV {price_path}: {e}", path=str(price_path)) from e
    except pd.errors.ParserError as e:
        raise ParseError(f"Malformed CSV {price_path}: {e}") from e
    except pd.errors.EmptyDataError as e:
        raise ParseError(f"Price CSV is empty: {price_path}") from e

    df.columns = [str(c).strip() for c in df.columns]
    for col in (date_column, close_column):
        if col not in df.columns:
            raise ParseError(
                f"Price CSV must contain '{date_column}' and '{close_column}' columns "
                f"(found: {', '.join(df.columns)}).",
                column=col,
            )

    try:
        dates = pd.to_datetime(df[date_column], format=date_format, errors="raise")
    except (ValueError, TypeError) as e:
        raise ParseError(f"Unparseable value in '{date_column}' column: {e}", column=date_column) from e
    if dates.isna().any():
        raise ParseError(f"Missing values in '{date_column}' column.", column=date_column)

    try:
        close = pd.to_numeric(_clean_price_text(df[close_column]), errors="raise")
    except (ValueError, TypeError) as e:
        raise ParseError(f"Non-numeric value in '{close_column}' column: {e}", column=close_column) from e
    if close.isna().any():
        raise ParseError(f"Missing values in '{close_column}' column.", column=close_column)

    series = pd.Series(close.astype(float).values, index=pd.DatetimeIndex(dates, name="Date"), name="Close")
    series = series.sort_index(kind="mergesort")
    if series.empty:
        raise ParseError(f"No price records found in {price_path}.")

    logger.info("Loaded %d daily records from %s to %s",
                len(series), series.index[0].date(), series.index[-1].date())
    return series


def summary_statistics(close: pd.Series) -> pd.DataFrame:
    """
    Summary statistics of the daily closing price.

    Parameters
    ----------
    close : pd.Series
        Daily closing prices with DatetimeIndex.

    Returns
    -------
    pd.DataFrame
        One row with count, mean, std, min, 25%, median, 75%, max,
        first_date and last_date.
    """
    desc = close.describe()
    row = {
        "count": int(desc["count"]),
        "mean": float(desc["mean"]),
        "std": float(desc["std"]),
        "min": float(desc["min"]),
        "25%": float(desc["25%"]),
        "median": float(close.median()),
        "75%": float(desc["75%"]),
        "max": float(desc["max"]),
        "first_date": close.index.min().date(),
        "last_date": close.index.max().date(),
    }
    return pd.DataFrame([row], index=[close.name or "Close"])

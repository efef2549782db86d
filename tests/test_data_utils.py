from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from stock_forecaster_src.data_utils import load_price_csv, summary_statistics
from stock_forecaster_src.errors import FileError, ParseError, StockReportError


def _write(tmp_path: Path, text: str, name: str = "prices.csv") -> Path:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_load_sorts_chronologically_and_ignores_other_columns(tmp_path: Path):
    p = _write(tmp_path, (
        "Date,Open,High,Low,Close,Volume\n"
        "2020-01-03,1,1,1,12.5,100\n"
        "2020-01-01,1,1,1,10.0,100\n"
        "2020-01-02,1,1,1,11.0,100\n"
    ))
    close = load_price_csv(p)

    assert close.name == "Close"
    assert close.index.name == "Date"
    assert close.index.is_monotonic_increasing
    assert close.tolist() == [10.0, 11.0, 12.5]


def test_load_keeps_duplicate_dates(tmp_path: Path):
    p = _write(tmp_path, "Date,Close\n2020-01-02,2\n2020-01-01,1\n2020-01-02,3\n")
    close = load_price_csv(p)

    assert len(close) == 3
    assert close.index.is_monotonic_increasing
    # Stable sort keeps the file order for equal dates
    assert close.tolist() == [1.0, 2.0, 3.0]


def test_load_strips_currency_formatting(tmp_path: Path):
    p = _write(tmp_path, 'Date,Close\n01/02/2020,"$1,234.50"\n01/03/2020,$3.05\n')
    close = load_price_csv(p)

    assert close.tolist() == pytest.approx([1234.50, 3.05])
    assert close.index[0] == pd.Timestamp("2020-01-02")


def test_missing_file_raises_file_error(tmp_path: Path):
    with pytest.raises(FileError) as exc:
        load_price_csv(tmp_path / "nope.csv")
    assert "not found" in str(exc.value)
    assert isinstance(exc.value, StockReportError)


def test_unparseable_date_raises_parse_error(tmp_path: Path):
    p = _write(tmp_path, "Date,Close\n2020-01-01,1.0\nnot-a-date,2.0\n")
    with pytest.raises(ParseError) as exc:
        load_price_csv(p)
    assert exc.value.column == "Date"


def test_non_numeric_close_raises_parse_error(tmp_path: Path):
    p = _write(tmp_path, "Date,Close\n2020-01-01,1.0\n2020-01-02,abc\n")
    with pytest.raises(ParseError) as exc:
        load_price_csv(p)
    assert exc.value.column == "Close"


def test_missing_close_column_raises_parse_error(tmp_path: Path):
    p = _write(tmp_path, "Date,Open\n2020-01-01,1.0\n")
    with pytest.raises(ParseError):
        load_price_csv(p)


def test_custom_column_names(tmp_path: Path):
    p = _write(tmp_path, "day,Close/Last\n2020-01-02,5\n2020-01-01,4\n")
    close = load_price_csv(p, date_column="day", close_column="Close/Last")
    assert close.tolist() == [4.0, 5.0]


def test_summary_statistics_known_values():
    idx = pd.bdate_range("2020-01-01", periods=5)
    close = pd.Series([3.0, 1.0, 2.0, 5.0, 4.0], index=idx, name="Close")
    stats = summary_statistics(close)

    row = stats.iloc[0]
    assert row["count"] == 5
    assert row["min"] == 1.0
    assert row["max"] == 5.0
    assert row["mean"] == 3.0
    assert row["median"] == 3.0
    assert np.isclose(row["std"], np.std([1, 2, 3, 4, 5], ddof=1))
    assert row["first_date"] == idx[0].date()
    assert row["last_date"] == idx[-1].date()

# stock_forecaster_src/file_utils.py

import hashlib
import numbers
import pandas as pd
from pathlib import Path
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> None:
    """
    Create directory if it doesn't exist, including all parent directories.

    Parameters
    ----------
    path : Path
        Directory path to create
    """
    path.mkdir(parents=True, exist_ok=True)


def resolve_path(path_str: str, base_dir: Path) -> Path:
    """
    Resolve a path string relative to a base directory if not absolute.

    Examples
    --------
    >>> resolve_path("data/file.csv", Path("/project"))
    PosixPath('/project/data/file.csv')
    >>> resolve_path("/absolute/path.csv", Path("/project"))
    PosixPath('/absolute/path.csv')
    """
    path = Path(path_str)
    return path if path.is_absolute() else (base_dir / path)


def get_file_hash(file_path: Path, algorithm: str = "sha256") -> Optional[str]:
    """
    Calculate hash of file contents for the report's provenance line.

    Returns None if the file does not exist.
    """
    if not file_path.exists():
        return None

    hasher = hashlib.new(algorithm)
    with file_path.open("rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def _format_cell(value, float_fmt: str) -> str:
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, numbers.Integral):
        return str(value)
    if isinstance(value, numbers.Real):
        if pd.isna(value):
            return "NA"
        return format(float(value), float_fmt)
    if isinstance(value, pd.Timestamp):
        return value.strftime("%Y-%m-%d")
    return str(value)


def md_table_from_df(df: pd.DataFrame,
                     max_rows: Optional[int] = None,
                     columns: Optional[List[str]] = None,
                     index: bool = False,
                     float_fmt: str = ",.2f") -> str:
    """
    Convert a DataFrame to markdown table format.

    Parameters
    ----------
    df : pd.DataFrame
        DataFrame to convert
    max_rows : Optional[int]
        Maximum number of rows to include (None for all)
    columns : Optional[List[str]]
        Specific columns to include (None for all); missing ones are ignored
    index : bool, default=False
        Include the index as the first column
    float_fmt : str, default=",.2f"
        Format spec applied to float cells

    Returns
    -------
    str
        Markdown table string, empty if there are no columns
    """
    if columns is not None:
        keep = [c for c in columns if c in df.columns]
        if keep:
            df = df.loc[:, keep]

    df_disp = df.copy() if max_rows is None else df.head(max_rows).copy()
    if index:
        df_disp = df_disp.reset_index()
    cols = list(df_disp.columns)
    if not cols:
        return ""

    header = "| " + " | ".join(str(c) for c in cols) + " |"
    separator = "| " + " | ".join("---" for _ in cols) + " |"
    rows = []
    for row in df_disp.itertuples(index=False, name=None):
        rows.append("| " + " | ".join(_format_cell(v, float_fmt) for v in row) + " |")
    return "\n".join([header, separator] + rows)


def write_text(path: Path, text: str) -> Path:
    """Write UTF-8 text, creating parent directories."""
    ensure_dir(path.parent)
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote %s", path)
    return path

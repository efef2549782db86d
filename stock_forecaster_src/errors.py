# stock_forecaster_src/errors.py

"""
Exception taxonomy for the stock price report.

None of these are caught inside the pipeline: the first one raised aborts the
run and its message is surfaced to the user unchanged.
"""

from typing import Optional


class StockReportError(Exception):
    """Base class for all report failures."""


class FileError(StockReportError):
    """Input file is missing or cannot be read."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ParseError(StockReportError):
    """A date or numeric field could not be parsed."""

    def __init__(self, message: str, column: Optional[str] = None):
        super().__init__(message)
        self.column = column


class ConvergenceError(StockReportError):
    """No candidate in a model search space produced a converged fit."""

    def __init__(self, message: str, n_candidates: int = 0,
                 last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.n_candidates = n_candidates
        self.last_error = last_error

# stock_forecaster_src/parsing_utils.py

from typing import List, Optional, Sequence, Union
import logging

logger = logging.getLogger(__name__)


def parse_intervals_arg(s: Optional[Union[str, Sequence[int]]], default: str = "80,95") -> List[int]:
    """
    Parse an intervals argument like '80,95' into sorted unique integer coverage levels.

    A list from the configuration file is accepted as-is. Values outside 1..99
    are dropped.

    Examples
    --------
    >>> parse_intervals_arg("80,95")
    [80, 95]
    >>> parse_intervals_arg("90")
    [90]
    >>> parse_intervals_arg([95, 80])
    [80, 95]
    """
    if isinstance(s, (list, tuple)):
        vals = sorted({int(v) for v in s})
    else:
        txt = (s or default).strip()
        try:
            vals = sorted({int(x.strip()) for x in txt.split(",") if x.strip() != ""})
        except ValueError:
            logger.warning("Could not parse intervals '%s'; using %s", txt, default)
            vals = [int(x) for x in default.split(",")]
    vals = [v for v in vals if 1 <= v < 100]
    return vals or [80, 95]


def validate_log_level(log_level: str) -> str:
    """
    Validate and normalize logging level specification.

    Raises
    ------
    ValueError
        If the logging level is not supported
    """
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    level_upper = log_level.upper()
    if level_upper not in valid_levels:
        raise ValueError(f"Invalid log level '{log_level}'. Must be one of: {valid_levels}")
    return level_upper

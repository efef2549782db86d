"""YAML-backed configuration manager with dot-notation access."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "report.yaml"


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


class ConfigManager:
    """Loads one YAML file and serves values by dotted key path."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
        self._data: Dict[str, Any] = self._load(self.config_path)

    @staticmethod
    def _load(path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise ConfigurationError(f"Configuration file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {path} must be a mapping.")
        logger.debug("Loaded configuration from %s", path)
        return data

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Look up a value such as 'forecast.horizon'.

        Returns ``default`` if any segment of the path is missing.
        """
        node: Any = self._data
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def validate_configuration(self) -> Dict[str, List[str]]:
        """
        Check value ranges. Returns problems grouped by section (empty if none).
        """
        errors: Dict[str, List[str]] = {}

        def _add(section: str, msg: str) -> None:
            errors.setdefault(section, []).append(msg)

        period = self.get("decomposition.period", 12)
        if not isinstance(period, int) or period < 2:
            _add("decomposition", f"period must be an integer >= 2 (got {period!r})")

        alpha = self.get("stationarity.alpha", 0.05)
        if not isinstance(alpha, (int, float)) or not 0.0 < alpha < 1.0:
            _add("stationarity", f"alpha must be in (0, 1) (got {alpha!r})")
        if self.get("stationarity.ndiffs_test", "kpss") not in ("kpss", "adf"):
            _add("stationarity", "ndiffs_test must be 'kpss' or 'adf'")

        for key in ("max_p", "max_q", "max_d", "max_P", "max_Q", "D"):
            val = self.get(f"model.arima.{key}", 0)
            if not isinstance(val, int) or val < 0:
                _add("model", f"arima.{key} must be a non-negative integer (got {val!r})")

        horizon = self.get("forecast.horizon", 12)
        if not isinstance(horizon, int) or horizon < 1:
            _add("forecast", f"horizon must be a positive integer (got {horizon!r})")
        intervals = self.get("forecast.intervals", [80, 95])
        if not isinstance(intervals, list) or not all(isinstance(v, int) and 0 < v < 100 for v in intervals):
            _add("forecast", f"intervals must be a list of integers in (0, 100) (got {intervals!r})")

        return errors

    def get_configuration_summary(self) -> Dict[str, Any]:
        return {
            "config_path": str(self.config_path),
            "sections": sorted(self._data),
        }

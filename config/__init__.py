"""Configuration for the stock price report.

Values are read from ``config/report.yaml`` (or the file named by the
``STOCK_REPORT_CONFIG`` environment variable) and accessed by dotted key path.
"""

import os
from pathlib import Path
from typing import Optional

from .manager import ConfigManager, ConfigurationError, DEFAULT_CONFIG_PATH

_instance: Optional[ConfigManager] = None


def get_config(config_path: Optional[Path] = None, reload: bool = False) -> ConfigManager:
    """Return the shared ConfigManager, loading it on first use."""
    global _instance
    if _instance is None or reload or config_path is not None:
        if config_path is None:
            env_path = os.environ.get("STOCK_REPORT_CONFIG")
            config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
        _instance = ConfigManager(config_path)
    return _instance


__all__ = [
    "ConfigManager",
    "ConfigurationError",
    "DEFAULT_CONFIG_PATH",
    "get_config",
]

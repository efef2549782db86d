import argparse
from pathlib import Path

import pytest

import stock_forecaster_src.config_utils as cu
from config import ConfigManager, ConfigurationError, DEFAULT_CONFIG_PATH
from stock_forecaster_src.parsing_utils import parse_intervals_arg, validate_log_level


@pytest.fixture(autouse=True)
def _fresh_config():
    cu.reset_config()
    yield
    cu.reset_config()


def _yaml(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "cfg.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_shipped_configuration_is_valid():
    mgr = ConfigManager(DEFAULT_CONFIG_PATH)
    assert mgr.validate_configuration() == {}
    assert mgr.get("forecast.horizon") == 12
    assert mgr.get("forecast.intervals") == [80, 95]
    assert mgr.get("decomposition.period") == 12
    assert "model" in mgr.get_configuration_summary()["sections"]


def test_dot_path_lookup_with_default(tmp_path: Path):
    mgr = ConfigManager(_yaml(tmp_path, "model:\n  arima:\n    max_p: 2\n"))
    assert mgr.get("model.arima.max_p") == 2
    assert mgr.get("model.arima.max_q", 3) == 3
    assert mgr.get("model.arima.max_p.deeper", "x") == "x"


def test_validation_reports_bad_values(tmp_path: Path):
    mgr = ConfigManager(_yaml(tmp_path, (
        "forecast:\n  horizon: 0\n  intervals: [80, 120]\n"
        "stationarity:\n  ndiffs_test: pp\n"
    )))
    errors = mgr.validate_configuration()
    assert set(errors) == {"forecast", "stationarity"}
    assert len(errors["forecast"]) == 2


def test_missing_or_invalid_file(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        ConfigManager(tmp_path / "missing.yaml")
    with pytest.raises(ConfigurationError):
        ConfigManager(_yaml(tmp_path, "- just\n- a list\n"))


def test_precedence_cli_over_file_over_default(tmp_path: Path):
    cu.initialize_config(_yaml(tmp_path, "forecast:\n  horizon: 6\n"))
    args = argparse.Namespace(horizon=24)
    none_args = argparse.Namespace(horizon=None)

    assert cu.get_config_value("forecast.horizon", 12, args, "horizon") == 24
    assert cu.get_config_value("forecast.horizon", 12, none_args, "horizon") == 6
    assert cu.get_config_value("forecast.random_state", 0) == 0


def test_unreadable_config_falls_back_to_defaults(tmp_path: Path):
    cu.initialize_config(tmp_path / "missing.yaml")
    assert cu.config_manager is None
    assert cu.get_config_value("forecast.horizon", 12) == 12


def test_parse_intervals_arg():
    assert parse_intervals_arg("95, 80") == [80, 95]
    assert parse_intervals_arg([95, 80, 95]) == [80, 95]
    assert parse_intervals_arg("abc") == [80, 95]
    assert parse_intervals_arg(None) == [80, 95]
    assert parse_intervals_arg("90,150") == [90]


def test_validate_log_level():
    assert validate_log_level("debug") == "DEBUG"
    with pytest.raises(ValueError):
        validate_log_level("verbose")

"""Tests for configuration helpers."""

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from stock_direction.core.config import DatasetConfig, build_config

ENV_NAMES = (
    "STOCK_DIRECTION_SEQUENCE_LENGTH",
    "STOCK_DIRECTION_FORECAST_HORIZON",
    "STOCK_DIRECTION_TRAIN_SPLIT",
    "STOCK_DIRECTION_EXPECTED_SYMBOLS",
    "STOCK_DIRECTION_NORMALIZATION_SCOPE",
    "STOCK_DIRECTION_STRICT_DATES",
    "STOCK_DIRECTION_YIELD_EVERY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_match_application_settings():
    config = build_config()
    assert config.sequence_length == 12
    assert config.forecast_horizon == 3
    assert config.train_split_percent == 80.0
    assert config.expected_symbol_count == 10
    assert config.normalization_scope == "full"
    assert config.strict_dates is False


def test_environment_values_are_used(monkeypatch):
    monkeypatch.setenv("STOCK_DIRECTION_SEQUENCE_LENGTH", "20")
    monkeypatch.setenv("STOCK_DIRECTION_TRAIN_SPLIT", "70")
    monkeypatch.setenv("STOCK_DIRECTION_STRICT_DATES", "yes")
    monkeypatch.setenv("STOCK_DIRECTION_NORMALIZATION_SCOPE", "train")

    config = build_config()

    assert config.sequence_length == 20
    assert config.train_split_percent == 70.0
    assert config.strict_dates is True
    assert config.normalization_scope == "train"


def test_explicit_overrides_win_over_environment(monkeypatch):
    monkeypatch.setenv("STOCK_DIRECTION_FORECAST_HORIZON", "5")
    config = build_config(forecast_horizon=2, train_split_percent=0)
    assert config.forecast_horizon == 2
    assert config.train_split_percent == 0.0


def test_symbol_check_can_be_disabled():
    config = build_config(expected_symbol_count=4, check_symbol_count=False)
    assert config.expected_symbol_count is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"sequence_length": 0},
        {"forecast_horizon": -1},
        {"sequence_length": 2.5},
        {"train_split_percent": 101},
        {"train_split_percent": "abc"},
        {"normalization_scope": "test"},
        {"expected_symbol_count": 0},
    ],
)
def test_invalid_values_raise_value_error(overrides):
    with pytest.raises(ValueError):
        DatasetConfig(**overrides)


def test_asdict_round_trips():
    config = DatasetConfig(sequence_length=4, forecast_horizon=2)
    assert DatasetConfig(**config.asdict()) == config


@pytest.mark.parametrize(
    "overrides",
    [{"sequence_length": 0}, {"forecast_horizon": 0}, {"yield_every": 0}],
)
def test_explicit_zero_is_rejected_not_replaced(monkeypatch, overrides):
    monkeypatch.setenv("STOCK_DIRECTION_SEQUENCE_LENGTH", "20")
    with pytest.raises(ValueError):
        build_config(**overrides)

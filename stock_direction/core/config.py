"""Configuration utilities for the dataset pipeline."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any, Optional

from dotenv import load_dotenv

DEFAULT_SEQUENCE_LENGTH = 12
DEFAULT_FORECAST_HORIZON = 3
DEFAULT_TRAIN_SPLIT_PERCENT = 80.0
DEFAULT_EXPECTED_SYMBOL_COUNT: int | None = 10
DEFAULT_NORMALIZATION_SCOPE = "full"
DEFAULT_YIELD_EVERY = 256

NORMALIZATION_SCOPES: tuple[str, ...] = ("full", "train")

_TRUTHY = {"1", "true", "yes", "y", "on"}


@dataclass
class DatasetConfig:
    """Runtime configuration for :class:`~stock_direction.core.loader.DatasetLoader`."""

    sequence_length: int = DEFAULT_SEQUENCE_LENGTH
    forecast_horizon: int = DEFAULT_FORECAST_HORIZON
    train_split_percent: float = DEFAULT_TRAIN_SPLIT_PERCENT
    expected_symbol_count: Optional[int] = DEFAULT_EXPECTED_SYMBOL_COUNT
    normalization_scope: str = DEFAULT_NORMALIZATION_SCOPE
    strict_dates: bool = False
    yield_every: int = DEFAULT_YIELD_EVERY

    def __post_init__(self) -> None:
        self.sequence_length = _coerce_positive_int(self.sequence_length, "sequence_length")
        self.forecast_horizon = _coerce_positive_int(self.forecast_horizon, "forecast_horizon")
        self.yield_every = _coerce_positive_int(self.yield_every, "yield_every")
        self.train_split_percent = validate_split_percent(self.train_split_percent)
        if self.expected_symbol_count is not None:
            self.expected_symbol_count = _coerce_positive_int(
                self.expected_symbol_count, "expected_symbol_count"
            )
        self.normalization_scope = (
            str(self.normalization_scope).strip().lower() or DEFAULT_NORMALIZATION_SCOPE
        )
        if self.normalization_scope not in NORMALIZATION_SCOPES:
            raise ValueError(
                "normalization_scope must be one of 'full' or 'train'."
            )
        self.strict_dates = bool(self.strict_dates)

    def asdict(self) -> dict[str, Any]:
        return asdict(self)


def _coerce_positive_int(value: Any, name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer.") from exc
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{name} must be an integer.")
    if parsed <= 0:
        raise ValueError(f"{name} must be positive.")
    return parsed


def validate_split_percent(value: Any) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError("train_split_percent must be a number.") from exc
    if not 0.0 <= parsed <= 100.0:
        raise ValueError("train_split_percent must be between 0 and 100.")
    return parsed


def _env_value(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_environment() -> None:
    """Load configuration from an optional ``.env`` file."""

    load_dotenv()


def _resolve(value: Any, env_name: str, default: Any) -> Any:
    """Return *value* unless it is ``None``, then the environment, then *default*."""

    if value is not None:
        return value
    env_value = _env_value(env_name)
    return env_value if env_value is not None else default


def build_config(
    sequence_length: Optional[int] = None,
    forecast_horizon: Optional[int] = None,
    train_split_percent: Optional[float] = None,
    expected_symbol_count: Optional[int] = None,
    normalization_scope: Optional[str] = None,
    strict_dates: Optional[bool] = None,
    yield_every: Optional[int] = None,
    *,
    check_symbol_count: bool = True,
) -> DatasetConfig:
    """Build a :class:`DatasetConfig` from overrides, environment and defaults.

    Explicit arguments win over ``STOCK_DIRECTION_*`` environment variables,
    which in turn win over the module defaults.  Explicit values are never
    replaced, so invalid ones such as ``0`` raise ``ValueError``.  Pass
    ``check_symbol_count=False`` to disable the expected symbol count warning.
    """

    load_environment()

    strict_value = strict_dates
    if strict_value is None:
        strict_env = _env_value("STOCK_DIRECTION_STRICT_DATES")
        if strict_env is not None:
            strict_value = strict_env.lower() in _TRUTHY

    expected_value = _resolve(
        expected_symbol_count, "STOCK_DIRECTION_EXPECTED_SYMBOLS", DEFAULT_EXPECTED_SYMBOL_COUNT
    )

    return DatasetConfig(
        sequence_length=_resolve(
            sequence_length, "STOCK_DIRECTION_SEQUENCE_LENGTH", DEFAULT_SEQUENCE_LENGTH
        ),
        forecast_horizon=_resolve(
            forecast_horizon, "STOCK_DIRECTION_FORECAST_HORIZON", DEFAULT_FORECAST_HORIZON
        ),
        train_split_percent=_resolve(
            train_split_percent, "STOCK_DIRECTION_TRAIN_SPLIT", DEFAULT_TRAIN_SPLIT_PERCENT
        ),
        expected_symbol_count=expected_value if check_symbol_count else None,
        normalization_scope=_resolve(
            normalization_scope,
            "STOCK_DIRECTION_NORMALIZATION_SCOPE",
            DEFAULT_NORMALIZATION_SCOPE,
        ),
        strict_dates=bool(strict_value) if strict_value is not None else False,
        yield_every=_resolve(yield_every, "STOCK_DIRECTION_YIELD_EVERY", DEFAULT_YIELD_EVERY),
    )


__all__ = [
    "DEFAULT_EXPECTED_SYMBOL_COUNT",
    "DEFAULT_FORECAST_HORIZON",
    "DEFAULT_SEQUENCE_LENGTH",
    "DEFAULT_TRAIN_SPLIT_PERCENT",
    "DatasetConfig",
    "NORMALIZATION_SCOPES",
    "build_config",
    "validate_split_percent",
    "load_environment",
]

"""Per-symbol min-max scaling of aligned open and close prices."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Mapping

import numpy as np

from .alignment import AlignedSeries

LOGGER = logging.getLogger(__name__)

# Added to max when a symbol's range collapses to a single value.
RANGE_EPSILON = 1e-6


@dataclass(frozen=True)
class NormalizationStats:
    """Observed price range for one symbol; ``max > min`` always holds."""

    open_min: float
    open_max: float
    close_min: float
    close_max: float

    def bounds(self, field_name: str) -> tuple[float, float]:
        if field_name == "open":
            return self.open_min, self.open_max
        if field_name == "close":
            return self.close_min, self.close_max
        raise ValueError("field_name must be 'open' or 'close'.")

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def _bounded(values: np.ndarray) -> tuple[float, float]:
    lower = float(np.min(values))
    upper = float(np.max(values))
    if upper == lower:
        upper = lower + RANGE_EPSILON
    return lower, upper


class MinMaxNormalizer:
    """Scale prices into ``[0, 1]`` using per-symbol, per-field ranges."""

    def __init__(self, stats: Mapping[str, NormalizationStats]) -> None:
        self.stats = dict(stats)

    @classmethod
    def fit(cls, aligned: AlignedSeries, *, end_index: int | None = None) -> "MinMaxNormalizer":
        """Compute ranges over present slots of *aligned*.

        ``end_index`` restricts the statistics to date indices ``<= end_index``;
        by default the whole series is used.
        """

        stop = aligned.date_count if end_index is None else int(end_index) + 1
        stats: dict[str, NormalizationStats] = {}
        for row, symbol in enumerate(aligned.symbols):
            mask = aligned.present[row, :stop]
            if not mask.any():
                raise ValueError(f"Symbol '{symbol}' has no observations to normalise.")
            open_min, open_max = _bounded(aligned.opens[row, :stop][mask])
            close_min, close_max = _bounded(aligned.closes[row, :stop][mask])
            stats[symbol] = NormalizationStats(open_min, open_max, close_min, close_max)
        LOGGER.debug("Fitted min-max ranges for %s symbols over %s dates", len(stats), stop)
        return cls(stats)

    def normalize(self, symbol: str, field_name: str, value: float) -> float:
        lower, upper = self.stats[symbol].bounds(field_name)
        return (value - lower) / (upper - lower)

    def denormalize(self, symbol: str, field_name: str, value: float) -> float:
        lower, upper = self.stats[symbol].bounds(field_name)
        return value * (upper - lower) + lower

    def transform(self, aligned: AlignedSeries) -> tuple[np.ndarray, np.ndarray]:
        """Return normalised ``(opens, closes)`` arrays shaped like *aligned*.

        Missing slots stay ``NaN``.
        """

        opens = np.full_like(aligned.opens, np.nan)
        closes = np.full_like(aligned.closes, np.nan)
        for row, symbol in enumerate(aligned.symbols):
            stats = self.stats[symbol]
            opens[row] = (aligned.opens[row] - stats.open_min) / (stats.open_max - stats.open_min)
            closes[row] = (aligned.closes[row] - stats.close_min) / (
                stats.close_max - stats.close_min
            )
        return opens, closes

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {symbol: stats.to_dict() for symbol, stats in self.stats.items()}


__all__ = ["MinMaxNormalizer", "NormalizationStats", "RANGE_EPSILON"]

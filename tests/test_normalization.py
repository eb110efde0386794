from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from stock_direction.core.alignment import align_observations
from stock_direction.core.normalization import RANGE_EPSILON, MinMaxNormalizer
from stock_direction.core.observations import RawObservation, load_observations

from conftest import scenario_records


def test_ranges_are_per_symbol_and_per_field():
    aligned = align_observations(load_observations(scenario_records()))
    normalizer = MinMaxNormalizer.fit(aligned)

    a_stats = normalizer.stats["A"]
    assert (a_stats.close_min, a_stats.close_max) == (9.0, 14.0)
    assert (a_stats.open_min, a_stats.open_max) == (8.5, 13.5)
    assert normalizer.normalize("A", "close", 10.0) == pytest.approx(0.2)
    assert normalizer.normalize("B", "close", 8.0) == pytest.approx(1.0)


def test_round_trip_for_every_present_value():
    aligned = align_observations(load_observations(scenario_records(skip={("B", 2)})))
    normalizer = MinMaxNormalizer.fit(aligned)
    opens, closes = normalizer.transform(aligned)

    for row, symbol in enumerate(aligned.symbols):
        for idx in range(aligned.date_count):
            if not aligned.present[row, idx]:
                assert np.isnan(closes[row, idx])
                continue
            restored = normalizer.denormalize(symbol, "close", closes[row, idx])
            assert restored == pytest.approx(aligned.closes[row, idx])
            restored_open = normalizer.denormalize(symbol, "open", opens[row, idx])
            assert restored_open == pytest.approx(aligned.opens[row, idx])


def test_flat_series_gets_epsilon_range():
    aligned = align_observations(
        [
            RawObservation(symbol="F", date="2024-01-01", open=5.0, close=5.0),
            RawObservation(symbol="F", date="2024-01-02", open=5.0, close=5.0),
        ]
    )
    normalizer = MinMaxNormalizer.fit(aligned)
    stats = normalizer.stats["F"]
    assert stats.close_max == pytest.approx(5.0 + RANGE_EPSILON)
    assert stats.close_max > stats.close_min
    assert normalizer.normalize("F", "close", 5.0) == 0.0


def test_end_index_limits_statistics():
    aligned = align_observations(load_observations(scenario_records()))
    normalizer = MinMaxNormalizer.fit(aligned, end_index=1)
    assert normalizer.stats["A"].close_min == 10.0
    assert normalizer.stats["A"].close_max == 11.0
    # Later values fall outside the fitted range.
    assert normalizer.normalize("A", "close", 14.0) > 1.0

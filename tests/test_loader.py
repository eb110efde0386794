"""Tests for the dataset loader lifecycle."""

from __future__ import annotations

import asyncio
from pathlib import Path
import sys
from unittest import TestCase

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from stock_direction.core.config import DatasetConfig
from stock_direction.core.exceptions import StateError
from stock_direction.core.loader import DatasetLoader

from conftest import scenario_csv_text, scenario_records


def make_loader(**overrides) -> DatasetLoader:
    params = {
        "sequence_length": 2,
        "forecast_horizon": 1,
        "train_split_percent": 75,
        "expected_symbol_count": 2,
    }
    params.update(overrides)
    return DatasetLoader(DatasetConfig(**params))


class LoaderLifecycleTests(TestCase):
    def test_dataset_requires_prepare(self) -> None:
        loader = make_loader()
        with self.assertRaises(StateError):
            _ = loader.dataset
        with self.assertRaises(StateError):
            loader.prepare()
        loader.load(scenario_csv_text())
        with self.assertRaises(StateError):
            _ = loader.dataset

    def test_release_drops_everything(self) -> None:
        loader = make_loader()
        loader.load(scenario_records())
        loader.prepare()
        self.assertTrue(loader.is_prepared)
        loader.release()
        self.assertFalse(loader.is_loaded)
        with self.assertRaises(StateError):
            _ = loader.dataset

    def test_reload_discards_prepared_dataset(self) -> None:
        loader = make_loader()
        loader.load(scenario_records())
        loader.prepare()
        loader.load(scenario_records())
        self.assertFalse(loader.is_prepared)

    def test_context_manager_releases(self) -> None:
        with make_loader() as loader:
            loader.load(scenario_records())
            loader.prepare()
        self.assertFalse(loader.is_loaded)


def test_prepare_produces_scenario_dataset():
    loader = make_loader()
    loader.load(scenario_csv_text())
    dataset = loader.prepare()

    assert dataset.x_train.shape == (3, 2, 4)
    assert dataset.y_test.tolist() == [[1, 1]]
    assert dataset.test_dates == ("2024-01-05",)
    meta = dataset.meta()
    assert meta["samples"] == 4
    assert meta["train_samples"] == 3
    assert meta["test_samples"] == 1
    assert meta["features_per_step"] == 4
    assert meta["output_dim"] == 2
    assert meta["symbols"] == ["A", "B"]


def test_prepare_override_changes_split():
    loader = make_loader()
    loader.load(scenario_records())
    dataset = loader.prepare(50)
    assert dataset.meta()["train_samples"] == 2


def test_async_prepare_matches_sync():
    sync_loader = make_loader()
    sync_loader.load(scenario_records())
    expected = sync_loader.prepare()

    async_loader = make_loader(yield_every=1)
    async_loader.load(scenario_records())
    actual = asyncio.run(async_loader.aprepare())

    for left, right in zip(expected.arrays(), actual.arrays()):
        np.testing.assert_array_equal(left, right)
    assert expected.meta() == actual.meta()
    assert async_loader.dataset is actual


def test_train_scope_uses_only_train_span_statistics():
    loader = make_loader(normalization_scope="train")
    loader.load(scenario_records())
    dataset = loader.prepare()

    # Last train anchor is index 3, so A closes 10, 11, 9, 12 define the range.
    stats = dataset.normalizer.stats["A"]
    assert (stats.close_min, stats.close_max) == (9.0, 12.0)
    assert dataset.meta()["normalization_scope"] == "train"
    # The test window reaches a close of 13, above the fitted range.
    assert dataset.x_test[0, -1, 1] == pytest.approx((13.0 - 9.0) / 3.0)


def test_full_scope_uses_whole_series():
    loader = make_loader()
    loader.load(scenario_records())
    stats = loader.prepare().normalizer.stats["A"]
    assert (stats.close_min, stats.close_max) == (9.0, 14.0)


def test_prepare_without_fitted_ranges_raises_state_error():
    loader = make_loader(normalization_scope="train")
    loader.load(scenario_records())
    loader._normalizer = None
    with pytest.raises(StateError):
        loader.prepare()

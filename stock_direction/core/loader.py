"""Dataset lifecycle: load raw rows, prepare windows, release buffers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import numpy as np

from .alignment import AlignedSeries, align_observations
from .config import DatasetConfig, build_config, validate_split_percent
from .dataset import PreparedDataset
from .exceptions import StateError
from .normalization import MinMaxNormalizer
from .observations import RawObservation, load_observations
from .split import chronological_split, train_count_for
from .windows import SampleSet, WindowBuilder

LOGGER = logging.getLogger(__name__)


class DatasetLoader:
    """Own the raw observations, aligned series and prepared dataset.

    ``load`` replaces any previous state, ``prepare`` builds a fresh
    :class:`PreparedDataset` (dropping the previous one) and ``release``
    drops everything.
    """

    def __init__(self, config: DatasetConfig | None = None) -> None:
        self.config = config or build_config()
        self._observations: list[RawObservation] | None = None
        self._aligned: AlignedSeries | None = None
        self._normalizer: MinMaxNormalizer | None = None
        self._dataset: PreparedDataset | None = None

    def __enter__(self) -> "DatasetLoader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self, source: Any) -> AlignedSeries:
        """Load observations from a CSV path, CSV text, a DataFrame or records."""

        self.release()
        observations = load_observations(source)
        aligned = align_observations(
            observations,
            expected_symbol_count=self.config.expected_symbol_count,
            strict_dates=self.config.strict_dates,
        )
        self._observations = observations
        self._aligned = aligned
        self._normalizer = MinMaxNormalizer.fit(aligned)
        return aligned

    @property
    def is_loaded(self) -> bool:
        return self._aligned is not None

    @property
    def observations(self) -> list[RawObservation]:
        if self._observations is None:
            raise StateError("No data loaded. Call load() first.")
        return self._observations

    @property
    def aligned(self) -> AlignedSeries:
        if self._aligned is None:
            raise StateError("No data loaded. Call load() first.")
        return self._aligned

    @property
    def symbols(self) -> tuple[str, ...]:
        return self.aligned.symbols

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------
    def _plan(
        self, train_split_percent: Optional[float]
    ) -> tuple[WindowBuilder, np.ndarray, MinMaxNormalizer, float]:
        aligned = self.aligned
        percent = (
            self.config.train_split_percent
            if train_split_percent is None
            else validate_split_percent(train_split_percent)
        )
        self._dataset = None
        builder = WindowBuilder(self.config.sequence_length, self.config.forecast_horizon)
        anchors = builder.valid_anchors(aligned)
        return builder, anchors, self._normalizer_for(aligned, anchors, percent), percent

    def _normalizer_for(
        self, aligned: AlignedSeries, anchors: np.ndarray, percent: float
    ) -> MinMaxNormalizer:
        if self._normalizer is None:
            raise StateError("No data loaded. Call load() first.")
        if self.config.normalization_scope != "train":
            return self._normalizer
        train_count = train_count_for(len(anchors), percent)
        if train_count == 0:
            LOGGER.warning("No train samples; normalising with full-series statistics")
            return self._normalizer
        # Every asset is present at a valid anchor, so each symbol has data here.
        return MinMaxNormalizer.fit(aligned, end_index=int(anchors[train_count - 1]))

    def _finish(
        self, samples: SampleSet, normalizer: MinMaxNormalizer, percent: float
    ) -> PreparedDataset:
        split = chronological_split(samples, percent)
        dataset = PreparedDataset(
            samples=samples,
            split=split,
            normalizer=normalizer,
            normalization_scope=self.config.normalization_scope,
        )
        LOGGER.info(
            "Prepared dataset. Total samples: %s. Train: %s. Test: %s.",
            len(samples),
            split.train_count,
            split.test_count,
        )
        self._dataset = dataset
        return dataset

    def prepare(self, train_split_percent: Optional[float] = None) -> PreparedDataset:
        builder, anchors, normalizer, percent = self._plan(train_split_percent)
        samples = builder.build(self.aligned, normalizer, anchors)
        return self._finish(samples, normalizer, percent)

    async def aprepare(self, train_split_percent: Optional[float] = None) -> PreparedDataset:
        """Same result as :meth:`prepare`, yielding to the event loop between batches."""

        builder, anchors, normalizer, percent = self._plan(train_split_percent)
        aligned = self.aligned
        features = builder.feature_matrix(aligned, normalizer)
        step = self.config.yield_every

        input_parts: list[np.ndarray] = []
        label_parts: list[np.ndarray] = []
        for start in range(0, len(anchors), step):
            batch = anchors[start : start + step]
            input_parts.append(builder.window_inputs(features, batch))
            label_parts.append(builder.window_labels(aligned, batch))
            await asyncio.sleep(0)

        samples = builder.assemble(
            aligned,
            anchors,
            np.concatenate(input_parts, axis=0),
            np.concatenate(label_parts, axis=0),
        )
        return self._finish(samples, normalizer, percent)

    @property
    def is_prepared(self) -> bool:
        return self._dataset is not None

    @property
    def dataset(self) -> PreparedDataset:
        if self._dataset is None:
            raise StateError("Dataset not prepared. Call prepare() first.")
        return self._dataset

    def get_tensors(self, device: str | None = None) -> dict[str, Any]:
        return self.dataset.as_tensors(device)

    def release(self) -> None:
        """Drop the prepared dataset and all loaded state."""

        if self._dataset is not None or self._aligned is not None:
            LOGGER.debug("Releasing loaded data and prepared dataset")
        self._observations = None
        self._aligned = None
        self._normalizer = None
        self._dataset = None


__all__ = ["DatasetLoader"]

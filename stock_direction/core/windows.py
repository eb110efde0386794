"""Sliding-window sample construction over an aligned, normalised series."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from .alignment import AlignedSeries
from .exceptions import DataError
from .layout import LabelLayout
from .normalization import MinMaxNormalizer

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    """One (input window, label) pair anchored at ``anchor_index``."""

    anchor_index: int
    anchor_date: str
    inputs: np.ndarray
    label: np.ndarray


@dataclass(frozen=True)
class SampleSet:
    """Samples stored as stacked arrays in non-decreasing anchor order.

    ``inputs`` has shape ``[N, L, 2*S]`` and ``labels`` ``[N, S*h]`` following
    :class:`~stock_direction.core.layout.LabelLayout`.
    """

    inputs: np.ndarray
    labels: np.ndarray
    anchor_indices: np.ndarray
    anchor_dates: tuple[str, ...]
    layout: LabelLayout
    sequence_length: int

    def __len__(self) -> int:
        return int(self.labels.shape[0])

    def __iter__(self) -> Iterator[Sample]:
        for position in range(len(self)):
            yield self.sample(position)

    def sample(self, position: int) -> Sample:
        return Sample(
            anchor_index=int(self.anchor_indices[position]),
            anchor_date=self.anchor_dates[position],
            inputs=self.inputs[position],
            label=self.labels[position],
        )

    def slice(self, start: int, stop: int | None = None) -> "SampleSet":
        window = slice(start, stop)
        return SampleSet(
            inputs=self.inputs[window],
            labels=self.labels[window],
            anchor_indices=self.anchor_indices[window],
            anchor_dates=self.anchor_dates[window],
            layout=self.layout,
            sequence_length=self.sequence_length,
        )


class WindowBuilder:
    """Build leakage-free (window, label) samples for every usable anchor.

    An anchor ``i`` is usable when dates ``i - L + 1 .. i`` hold an open and
    close for every asset and dates ``i + 1 .. i + h`` hold a close for every
    asset.  Observations always carry both prices, so one presence mask
    covers both checks.
    """

    def __init__(self, sequence_length: int, forecast_horizon: int) -> None:
        if sequence_length <= 0:
            raise ValueError("sequence_length must be positive.")
        if forecast_horizon <= 0:
            raise ValueError("forecast_horizon must be positive.")
        self.sequence_length = int(sequence_length)
        self.forecast_horizon = int(forecast_horizon)

    def layout_for(self, aligned: AlignedSeries) -> LabelLayout:
        return LabelLayout(aligned.symbols, self.forecast_horizon)

    def candidate_anchors(self, date_count: int) -> range:
        """Anchors with enough history and future, before the missing-data check."""

        first = self.sequence_length - 1
        return range(first, max(first, date_count - self.forecast_horizon))

    def valid_anchors(self, aligned: AlignedSeries) -> np.ndarray:
        candidates = self.candidate_anchors(aligned.date_count)
        complete = aligned.present.all(axis=0)
        # gaps[k] counts incomplete dates among indices < k.
        gaps = np.concatenate(([0], np.cumsum(~complete)))

        before = self.sequence_length - 1
        after = self.forecast_horizon
        anchors = [
            anchor
            for anchor in candidates
            if gaps[anchor + after + 1] == gaps[anchor - before]
        ]
        rejected = len(candidates) - len(anchors)
        if rejected:
            LOGGER.debug(
                "Rejected %s of %s anchors for missing data", rejected, len(candidates)
            )
        if not anchors:
            raise DataError(
                "No valid sliding-window samples could be constructed "
                "(missing data or short series).",
                anchors_considered=len(candidates),
                anchors_rejected=rejected,
            )
        return np.asarray(anchors, dtype=np.int64)

    def feature_matrix(self, aligned: AlignedSeries, normalizer: MinMaxNormalizer) -> np.ndarray:
        """Return normalised features per date, shaped ``[D, 2*S]``."""

        layout = self.layout_for(aligned)
        opens, closes = normalizer.transform(aligned)
        features = np.empty((aligned.date_count, layout.feature_width), dtype=np.float32)
        for asset in range(layout.asset_count):
            features[:, layout.feature_column(asset, "open")] = opens[asset]
            features[:, layout.feature_column(asset, "close")] = closes[asset]
        return features

    def window_inputs(self, features: np.ndarray, anchors: np.ndarray) -> np.ndarray:
        """Stack the ``L`` feature rows ending at each anchor, oldest first."""

        windows = np.empty(
            (len(anchors), self.sequence_length, features.shape[1]), dtype=features.dtype
        )
        for position, anchor in enumerate(anchors):
            start = int(anchor) - self.sequence_length + 1
            windows[position] = features[start : int(anchor) + 1]
        return windows

    def window_labels(self, aligned: AlignedSeries, anchors: np.ndarray) -> np.ndarray:
        """Rise flags: ``close[i + o] > close[i]`` per asset and offset."""

        layout = self.layout_for(aligned)
        labels = np.zeros((len(anchors), layout.label_width), dtype=np.float32)
        anchors = np.asarray(anchors, dtype=np.int64)
        for asset in range(layout.asset_count):
            anchor_close = aligned.closes[asset, anchors]
            for offset in range(1, self.forecast_horizon + 1):
                future_close = aligned.closes[asset, anchors + offset]
                labels[:, layout.label_column(asset, offset)] = future_close > anchor_close
        return labels

    def assemble(
        self,
        aligned: AlignedSeries,
        anchors: np.ndarray,
        inputs: np.ndarray,
        labels: np.ndarray,
    ) -> SampleSet:
        return SampleSet(
            inputs=inputs,
            labels=labels,
            anchor_indices=np.asarray(anchors, dtype=np.int64),
            anchor_dates=tuple(aligned.dates[int(anchor)] for anchor in anchors),
            layout=self.layout_for(aligned),
            sequence_length=self.sequence_length,
        )

    def build(
        self,
        aligned: AlignedSeries,
        normalizer: MinMaxNormalizer,
        anchors: np.ndarray | None = None,
    ) -> SampleSet:
        if anchors is None:
            anchors = self.valid_anchors(aligned)
        features = self.feature_matrix(aligned, normalizer)
        inputs = self.window_inputs(features, anchors)
        labels = self.window_labels(aligned, anchors)
        return self.assemble(aligned, anchors, inputs, labels)


__all__ = ["Sample", "SampleSet", "WindowBuilder"]

"""Chronological train/test partitioning of ordered samples."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .windows import SampleSet

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetSplit:
    train: SampleSet
    test: SampleSet
    split_index: int

    @property
    def train_count(self) -> int:
        return len(self.train)

    @property
    def test_count(self) -> int:
        return len(self.test)


def train_count_for(total: int, train_split_percent: float) -> int:
    """Number of leading samples assigned to training.

    Halves round up so ``2.5`` becomes ``3``.
    """

    count = int(math.floor(float(train_split_percent) / 100.0 * total + 0.5))
    return max(0, min(total, count))


def chronological_split(samples: SampleSet, train_split_percent: float) -> DatasetSplit:
    """Split *samples* into leading train and trailing test subsets.

    Samples are never shuffled: shuffling would let training see anchors that
    come after test anchors.
    """

    total = len(samples)
    split_index = train_count_for(total, train_split_percent)
    if split_index == 0 or split_index == total:
        LOGGER.warning(
            "Split of %s%% over %s samples leaves an empty %s subset",
            train_split_percent,
            total,
            "train" if split_index == 0 else "test",
        )
    return DatasetSplit(
        train=samples.slice(0, split_index),
        test=samples.slice(split_index, None),
        split_index=split_index,
    )


__all__ = ["DatasetSplit", "chronological_split", "train_count_for"]

"""The prepared train/test dataset and its array views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import numpy as np

from .layout import LabelLayout
from .normalization import MinMaxNormalizer
from .split import DatasetSplit
from .windows import SampleSet

try:  # Optional dependency
    import torch
except Exception:  # pragma: no cover - torch is optional
    torch = None  # type: ignore


def _require_torch() -> None:
    if torch is None:  # pragma: no cover - guarded by runtime check
        raise ImportError(
            "PyTorch is required for tensor views. Install torch>=2.0 to use as_tensors()."
        )


@dataclass(frozen=True)
class PreparedDataset:
    """Ordered samples split chronologically into train and test subsets."""

    samples: SampleSet
    split: DatasetSplit
    normalizer: MinMaxNormalizer
    normalization_scope: str = "full"

    @property
    def layout(self) -> LabelLayout:
        return self.samples.layout

    @property
    def symbols(self) -> tuple[str, ...]:
        return self.layout.symbols

    @property
    def sequence_length(self) -> int:
        return self.samples.sequence_length

    @property
    def forecast_horizon(self) -> int:
        return self.layout.horizon

    @property
    def x_train(self) -> np.ndarray:
        return self.split.train.inputs

    @property
    def y_train(self) -> np.ndarray:
        return self.split.train.labels

    @property
    def x_test(self) -> np.ndarray:
        return self.split.test.inputs

    @property
    def y_test(self) -> np.ndarray:
        return self.split.test.labels

    @property
    def train_dates(self) -> tuple[str, ...]:
        return self.split.train.anchor_dates

    @property
    def test_dates(self) -> tuple[str, ...]:
        return self.split.test.anchor_dates

    def meta(self) -> Dict[str, Any]:
        return {
            "samples": len(self.samples),
            "train_samples": self.split.train_count,
            "test_samples": self.split.test_count,
            "sequence_length": self.sequence_length,
            "forecast_horizon": self.forecast_horizon,
            "features_per_step": self.layout.feature_width,
            "output_dim": self.layout.label_width,
            "symbols": list(self.symbols),
            "normalization_scope": self.normalization_scope,
            "train_dates": list(self.train_dates),
            "test_dates": list(self.test_dates),
        }

    def arrays(self) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        return self.x_train, self.y_train, self.x_test, self.y_test

    def as_tensors(self, device: str | None = None) -> Dict[str, Any]:
        """Return ``x_train``, ``y_train``, ``x_test`` and ``y_test`` as float tensors."""

        _require_torch()
        names = ("x_train", "y_train", "x_test", "y_test")
        tensors = {}
        for name, array in zip(names, self.arrays()):
            tensor = torch.as_tensor(np.ascontiguousarray(array), dtype=torch.float32)
            tensors[name] = tensor.to(device) if device is not None else tensor
        return tensors


__all__ = ["PreparedDataset"]

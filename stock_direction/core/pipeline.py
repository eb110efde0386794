"""High level orchestration: load, prepare, predict and evaluate."""

from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np

from .alignment import AlignedSeries
from .config import DatasetConfig
from .dataset import PreparedDataset
from .evaluation import AccuracyEvaluator, EvaluationResult
from .exceptions import StateError
from .loader import DatasetLoader
from .predictors import predict_probabilities

LOGGER = logging.getLogger(__name__)


class DirectionPipeline:
    """Sequence dataset preparation, external prediction and evaluation.

    Each step depends on the previous one; calling out of order raises
    :class:`StateError`.  Loading or preparing again discards the current
    prediction batch.
    """

    def __init__(
        self,
        config: DatasetConfig | None = None,
        *,
        loader: DatasetLoader | None = None,
    ) -> None:
        self.loader = loader or DatasetLoader(config)
        self._probabilities: np.ndarray | None = None

    @property
    def config(self) -> DatasetConfig:
        return self.loader.config

    @property
    def dataset(self) -> PreparedDataset:
        return self.loader.dataset

    @property
    def probabilities(self) -> np.ndarray:
        if self._probabilities is None:
            raise StateError("No prediction batch available. Call predict() first.")
        return self._probabilities

    def load(self, source: Any) -> AlignedSeries:
        self._probabilities = None
        return self.loader.load(source)

    def prepare(self, train_split_percent: Optional[float] = None) -> PreparedDataset:
        self._probabilities = None
        return self.loader.prepare(train_split_percent)

    async def aprepare(self, train_split_percent: Optional[float] = None) -> PreparedDataset:
        self._probabilities = None
        return await self.loader.aprepare(train_split_percent)

    def predict(self, predictor: Any) -> np.ndarray:
        """Run *predictor* over the test inputs of the prepared dataset."""

        dataset = self.dataset
        self._probabilities = predict_probabilities(predictor, dataset.x_test, dataset.layout)
        return self._probabilities

    def use_predictions(self, probabilities: Any) -> np.ndarray:
        """Accept a precomputed ``[test_samples, S*h]`` probability matrix."""

        dataset = self.dataset
        matrix = np.asarray(probabilities, dtype=np.float64)
        if matrix.ndim == 1 and dataset.layout.label_width == 1:
            matrix = matrix.reshape(-1, 1)
        self._probabilities = predict_probabilities(lambda _: matrix, dataset.x_test, dataset.layout)
        return self._probabilities

    def evaluate(self) -> EvaluationResult:
        probabilities = self.probabilities
        dataset = self.dataset
        evaluator = AccuracyEvaluator.for_layout(dataset.layout)
        return evaluator.evaluate(probabilities, dataset.y_test, anchor_dates=dataset.test_dates)

    def run(
        self,
        source: Any,
        predictor: Any,
        *,
        train_split_percent: Optional[float] = None,
    ) -> EvaluationResult:
        self.load(source)
        self.prepare(train_split_percent)
        self.predict(predictor)
        return self.evaluate()

    def release(self) -> None:
        self._probabilities = None
        self.loader.release()


__all__ = ["DirectionPipeline"]

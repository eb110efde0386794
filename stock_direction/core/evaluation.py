"""Accuracy aggregation of predicted rise probabilities against labels."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.metrics import accuracy_score, confusion_matrix

from .exceptions import ShapeError
from .layout import LabelLayout

LOGGER = logging.getLogger(__name__)

# Probabilities strictly above this value count as a predicted rise.
DECISION_THRESHOLD = 0.5


def _json_float(value: float) -> Optional[float]:
    return None if math.isnan(value) else float(value)


@dataclass
class EvaluationResult:
    """Per-asset accuracy, overall accuracy and correctness timelines.

    Cubes are shaped ``[N, S, h]``; ``per_stock_timeline`` is ``[S, N]`` in
    chronological sample order.
    """

    symbols: Tuple[str, ...]
    per_stock_accuracy: np.ndarray
    overall_accuracy: float
    per_stock_timeline: np.ndarray
    predictions: np.ndarray
    truths: np.ndarray
    probabilities: np.ndarray
    anchor_dates: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def sample_count(self) -> int:
        return int(self.predictions.shape[0])

    def accuracy_for(self, symbol: str) -> float:
        return float(self.per_stock_accuracy[self.symbols.index(symbol)])

    def timeline_for(self, symbol: str) -> np.ndarray:
        return self.per_stock_timeline[self.symbols.index(symbol)]

    def ranking(self) -> List[Tuple[str, float]]:
        """``(symbol, accuracy)`` pairs from best to worst."""

        pairs = [(symbol, float(acc)) for symbol, acc in zip(self.symbols, self.per_stock_accuracy)]
        return sorted(pairs, key=lambda item: item[1], reverse=True)

    def confusion(self, symbol: str) -> np.ndarray:
        """2x2 confusion matrix over all samples and horizons of *symbol*.

        Rows are true classes ``[fall, rise]``, columns predicted classes.
        """

        asset = self.symbols.index(symbol)
        if self.sample_count == 0:
            return np.zeros((2, 2), dtype=np.int64)
        return confusion_matrix(
            self.truths[:, asset, :].ravel(),
            self.predictions[:, asset, :].ravel(),
            labels=[0, 1],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbols": list(self.symbols),
            "samples": self.sample_count,
            "overall_accuracy": _json_float(self.overall_accuracy),
            "per_stock_accuracy": {
                symbol: _json_float(float(acc))
                for symbol, acc in zip(self.symbols, self.per_stock_accuracy)
            },
            "ranking": [[symbol, _json_float(acc)] for symbol, acc in self.ranking()],
            "per_stock_timeline": {
                symbol: self.per_stock_timeline[idx].astype(int).tolist()
                for idx, symbol in enumerate(self.symbols)
            },
            "anchor_dates": list(self.anchor_dates),
            "predictions": self.predictions.astype(int).tolist(),
            "truths": self.truths.astype(int).tolist(),
        }


class AccuracyEvaluator:
    """Score ``[N, S*h]`` probability matrices against binary labels."""

    def __init__(self, symbols: Sequence[str], horizon: int) -> None:
        self.layout = LabelLayout(tuple(symbols), horizon)

    @classmethod
    def for_layout(cls, layout: LabelLayout) -> "AccuracyEvaluator":
        return cls(layout.symbols, layout.horizon)

    def evaluate(
        self,
        probabilities: Any,
        truths: Any,
        anchor_dates: Optional[Sequence[str]] = None,
    ) -> EvaluationResult:
        proba = self.layout.check_matrix(np.asarray(probabilities, dtype=np.float64), "probabilities")
        truth = self.layout.check_matrix(np.asarray(truths), "truths")
        if proba.shape != truth.shape:
            raise ShapeError(
                "probabilities and truths differ in sample count",
                expected=truth.shape,
                actual=proba.shape,
            )
        dates = tuple(str(date) for date in anchor_dates) if anchor_dates is not None else ()
        if dates and len(dates) != proba.shape[0]:
            raise ShapeError(
                "anchor_dates length does not match the sample count",
                expected=(proba.shape[0],),
                actual=(len(dates),),
            )

        predicted = (proba > DECISION_THRESHOLD).astype(np.int8)
        pred_cube = self.layout.to_cube(predicted)
        truth_cube = self.layout.to_cube(truth.astype(np.int8))
        proba_cube = self.layout.to_cube(proba)

        samples = pred_cube.shape[0]
        assets = self.layout.asset_count
        if samples == 0:
            LOGGER.warning("No samples to evaluate; accuracies are undefined")
            return EvaluationResult(
                symbols=self.layout.symbols,
                per_stock_accuracy=np.full(assets, np.nan),
                overall_accuracy=float("nan"),
                per_stock_timeline=np.zeros((assets, 0), dtype=np.int8),
                predictions=pred_cube,
                truths=truth_cube,
                probabilities=proba_cube,
                anchor_dates=dates,
            )

        correctness = (pred_cube == truth_cube).astype(np.float64)
        per_stock = np.array(
            [
                accuracy_score(truth_cube[:, asset, :].ravel(), pred_cube[:, asset, :].ravel())
                for asset in range(assets)
            ],
            dtype=np.float64,
        )
        overall = float(correctness.mean())

        # Majority of horizons; an exact tie counts as incorrect.
        per_sample = correctness.mean(axis=2)
        timeline = (per_sample > 0.5).astype(np.int8).T

        LOGGER.info("Evaluated %s samples. Overall accuracy: %.4f", samples, overall)
        return EvaluationResult(
            symbols=self.layout.symbols,
            per_stock_accuracy=per_stock,
            overall_accuracy=overall,
            per_stock_timeline=timeline,
            predictions=pred_cube,
            truths=truth_cube,
            probabilities=proba_cube,
            anchor_dates=dates,
        )


__all__ = ["AccuracyEvaluator", "DECISION_THRESHOLD", "EvaluationResult"]

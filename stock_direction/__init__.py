"""Multi-asset price direction datasets and accuracy evaluation."""

from stock_direction.core import (
    AccuracyEvaluator,
    DatasetConfig,
    DatasetLoader,
    DirectionPipeline,
    EvaluationResult,
    PreparedDataset,
    build_config,
    load_environment,
)

__all__ = [
    "AccuracyEvaluator",
    "DatasetConfig",
    "DatasetLoader",
    "DirectionPipeline",
    "EvaluationResult",
    "PreparedDataset",
    "build_config",
    "load_environment",
]

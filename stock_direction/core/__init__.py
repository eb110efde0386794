"""Alignment, windowing and evaluation components for direction forecasting."""

from stock_direction.core.alignment import AlignedSeries, MISSING, PriceSlot, align_observations
from stock_direction.core.config import (
    DEFAULT_FORECAST_HORIZON,
    DEFAULT_SEQUENCE_LENGTH,
    DEFAULT_TRAIN_SPLIT_PERCENT,
    DatasetConfig,
    build_config,
    load_environment,
)
from stock_direction.core.dataset import PreparedDataset
from stock_direction.core.evaluation import (
    DECISION_THRESHOLD,
    AccuracyEvaluator,
    EvaluationResult,
)
from stock_direction.core.exceptions import (
    DataError,
    ShapeError,
    StateError,
    StockDirectionError,
)
from stock_direction.core.layout import LabelLayout
from stock_direction.core.loader import DatasetLoader
from stock_direction.core.normalization import MinMaxNormalizer, NormalizationStats
from stock_direction.core.observations import RawObservation, load_observations, parse_date
from stock_direction.core.pipeline import DirectionPipeline
from stock_direction.core.predictors import (
    Predictor,
    TorchModulePredictor,
    as_predictor,
    predict_probabilities,
)
from stock_direction.core.split import DatasetSplit, chronological_split
from stock_direction.core.windows import Sample, SampleSet, WindowBuilder

__all__ = [
    "AccuracyEvaluator",
    "AlignedSeries",
    "DataError",
    "DatasetConfig",
    "DatasetLoader",
    "DatasetSplit",
    "DirectionPipeline",
    "EvaluationResult",
    "LabelLayout",
    "MinMaxNormalizer",
    "NormalizationStats",
    "PreparedDataset",
    "Predictor",
    "PriceSlot",
    "RawObservation",
    "Sample",
    "SampleSet",
    "ShapeError",
    "StateError",
    "StockDirectionError",
    "TorchModulePredictor",
    "WindowBuilder",
    "MISSING",
    "DECISION_THRESHOLD",
    "DEFAULT_FORECAST_HORIZON",
    "DEFAULT_SEQUENCE_LENGTH",
    "DEFAULT_TRAIN_SPLIT_PERCENT",
    "align_observations",
    "as_predictor",
    "build_config",
    "chronological_split",
    "load_environment",
    "load_observations",
    "parse_date",
    "predict_probabilities",
]

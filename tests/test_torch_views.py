import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None

from stock_direction.core.config import DatasetConfig
from stock_direction.core.loader import DatasetLoader
from stock_direction.core.pipeline import DirectionPipeline
from stock_direction.core.predictors import TorchModulePredictor, as_predictor

from conftest import scenario_records

pytestmark = pytest.mark.skipif(torch is None, reason="PyTorch is not installed")


def _config() -> DatasetConfig:
    return DatasetConfig(
        sequence_length=2, forecast_horizon=1, train_split_percent=75, expected_symbol_count=2
    )


def test_tensor_views_match_arrays():
    loader = DatasetLoader(_config())
    loader.load(scenario_records())
    loader.prepare()
    tensors = loader.get_tensors()

    assert set(tensors) == {"x_train", "y_train", "x_test", "y_test"}
    assert tensors["x_train"].dtype == torch.float32
    assert tuple(tensors["x_train"].shape) == (3, 2, 4)
    np.testing.assert_array_equal(tensors["y_test"].numpy(), loader.dataset.y_test)


def test_torch_module_predictor_runs_batched_sigmoid_inference():
    torch.manual_seed(0)
    module = torch.nn.Sequential(torch.nn.Flatten(), torch.nn.Linear(8, 2))
    predictor = TorchModulePredictor(module, batch_size=2, apply_sigmoid=True)

    output = predictor(np.random.default_rng(0).random((5, 2, 4)).astype(np.float32))

    assert output.shape == (5, 2)
    assert np.all((output > 0) & (output < 1))
    assert not module.training


def test_pipeline_accepts_torch_module():
    torch.manual_seed(0)
    module = torch.nn.Sequential(torch.nn.Flatten(), torch.nn.Linear(8, 2), torch.nn.Sigmoid())
    assert isinstance(as_predictor(module), TorchModulePredictor)

    pipeline = DirectionPipeline(_config())
    result = pipeline.run(scenario_records(), module)
    assert result.predictions.shape == (1, 2, 1)

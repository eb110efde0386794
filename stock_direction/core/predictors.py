"""Adapters for the external model that turns input windows into probabilities."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, runtime_checkable

import numpy as np

from .dataset import _require_torch, torch
from .exceptions import ShapeError
from .layout import LabelLayout

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class Predictor(Protocol):
    """Map an ``[N, L, 2*S]`` batch to an ``[N, S*h]`` probability matrix.

    Column order must follow :class:`~stock_direction.core.layout.LabelLayout`.
    """

    def __call__(self, inputs: np.ndarray) -> Any:
        ...


def _to_numpy(output: Any) -> np.ndarray:
    if hasattr(output, "detach"):
        output = output.detach().cpu().numpy()
    return np.asarray(output, dtype=np.float64)


class TorchModulePredictor:
    """Batched, gradient-free inference through a ``torch.nn.Module``."""

    def __init__(
        self,
        module: Any,
        *,
        batch_size: int = 256,
        device: Optional[str] = None,
        apply_sigmoid: bool = False,
    ) -> None:
        _require_torch()
        if batch_size <= 0:
            raise ValueError("batch_size must be positive.")
        self.module = module
        self.batch_size = int(batch_size)
        self.device = torch.device(device or "cpu")
        self.apply_sigmoid = apply_sigmoid

    def __call__(self, inputs: np.ndarray) -> np.ndarray:
        self.module.to(self.device)
        self.module.eval()
        outputs: list[np.ndarray] = []
        with torch.no_grad():
            for start in range(0, len(inputs), self.batch_size):
                batch = torch.as_tensor(
                    np.ascontiguousarray(inputs[start : start + self.batch_size]),
                    dtype=torch.float32,
                    device=self.device,
                )
                result = self.module(batch)
                if self.apply_sigmoid:
                    result = torch.sigmoid(result)
                outputs.append(result.cpu().numpy())
        return np.concatenate(outputs, axis=0)


def as_predictor(model: Any) -> Callable[[np.ndarray], np.ndarray]:
    """Wrap *model* as a callable returning a numpy probability matrix.

    Accepted are ``torch.nn.Module`` instances, objects exposing
    ``predict_proba`` or ``predict``, and plain callables.
    """

    if torch is not None and isinstance(model, torch.nn.Module):
        return TorchModulePredictor(model)
    if hasattr(model, "predict_proba"):
        return lambda inputs: _to_numpy(model.predict_proba(inputs))
    if hasattr(model, "predict"):
        return lambda inputs: _to_numpy(model.predict(inputs))
    if callable(model):
        return lambda inputs: _to_numpy(model(inputs))
    raise TypeError(f"Object of type {type(model).__name__} cannot be used as a predictor.")


def predict_probabilities(model: Any, inputs: np.ndarray, layout: LabelLayout) -> np.ndarray:
    """Run *model* over *inputs* and validate the ``[N, S*h]`` result shape."""

    samples = int(inputs.shape[0])
    if samples == 0:
        LOGGER.warning("No input samples; returning an empty probability matrix")
        return np.zeros((0, layout.label_width), dtype=np.float64)

    output = _to_numpy(as_predictor(model)(inputs))
    expected = (samples, layout.label_width)
    if output.shape != expected:
        raise ShapeError(
            "predictor output does not match the label layout",
            expected=expected,
            actual=output.shape,
        )
    return output


__all__ = ["Predictor", "TorchModulePredictor", "as_predictor", "predict_probabilities"]

"""Axis layout shared by window construction and evaluation.

Feature vectors and label vectors are flat, but both are built from a pinned
ordering so the two ends of the pipeline agree:

* feature column ``2 * s + f`` holds field ``f`` (0 = open, 1 = close) of
  asset ``s``;
* label column ``s * h + (o - 1)`` holds the rise flag of asset ``s`` at
  forecast offset ``o`` (1-based), with ``h`` the horizon count.

Asset ``s`` is the position of the symbol in :attr:`LabelLayout.symbols`.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .exceptions import ShapeError

FEATURE_FIELDS: tuple[str, ...] = ("open", "close")


@dataclass(frozen=True)
class LabelLayout:
    """Asset-major, horizon-minor layout for ``S`` assets and ``h`` offsets."""

    symbols: tuple[str, ...]
    horizon: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbols", tuple(self.symbols))
        object.__setattr__(self, "horizon", int(self.horizon))
        if self.horizon <= 0:
            raise ValueError("horizon must be positive.")

    @property
    def asset_count(self) -> int:
        return len(self.symbols)

    @property
    def label_width(self) -> int:
        return self.asset_count * self.horizon

    @property
    def feature_width(self) -> int:
        return self.asset_count * len(FEATURE_FIELDS)

    def label_column(self, asset: int, offset: int) -> int:
        if not 0 <= asset < self.asset_count:
            raise IndexError(f"asset index {asset} out of range")
        if not 1 <= offset <= self.horizon:
            raise IndexError(f"offset {offset} out of range 1..{self.horizon}")
        return asset * self.horizon + (offset - 1)

    def feature_column(self, asset: int, field_name: str) -> int:
        if not 0 <= asset < self.asset_count:
            raise IndexError(f"asset index {asset} out of range")
        return asset * len(FEATURE_FIELDS) + FEATURE_FIELDS.index(field_name)

    def column_labels(self) -> list[str]:
        """Human readable names for each label column, e.g. ``AAPL+1``."""

        return [
            f"{symbol}+{offset}"
            for symbol in self.symbols
            for offset in range(1, self.horizon + 1)
        ]

    def check_matrix(self, matrix: np.ndarray, name: str = "matrix") -> np.ndarray:
        array = np.asarray(matrix)
        if array.ndim != 2 or array.shape[1] != self.label_width:
            raise ShapeError(
                f"{name} does not match {self.asset_count} assets x {self.horizon} horizons",
                expected=(None, self.label_width),
                actual=array.shape,
            )
        return array

    def to_cube(self, matrix: np.ndarray) -> np.ndarray:
        """Re-index a ``[N, S*h]`` matrix as ``[N, S, h]`` column by column."""

        array = self.check_matrix(matrix)
        cube = np.empty((array.shape[0], self.asset_count, self.horizon), dtype=array.dtype)
        for asset in range(self.asset_count):
            for offset in range(1, self.horizon + 1):
                cube[:, asset, offset - 1] = array[:, self.label_column(asset, offset)]
        return cube

    def to_matrix(self, cube: np.ndarray) -> np.ndarray:
        """Inverse of :meth:`to_cube`."""

        array = np.asarray(cube)
        expected = (self.asset_count, self.horizon)
        if array.ndim != 3 or array.shape[1:] != expected:
            raise ShapeError(
                "cube does not match the label layout",
                expected=(None, *expected),
                actual=array.shape,
            )
        matrix = np.empty((array.shape[0], self.label_width), dtype=array.dtype)
        for asset in range(self.asset_count):
            for offset in range(1, self.horizon + 1):
                matrix[:, self.label_column(asset, offset)] = array[:, asset, offset - 1]
        return matrix


__all__ = ["FEATURE_FIELDS", "LabelLayout"]

"""Custom exceptions for the dataset and evaluation pipeline."""

from __future__ import annotations

from typing import Sequence


class StockDirectionError(Exception):
    """Base class shared by every error raised by :mod:`stock_direction`."""

    kind = "error"


class DataError(StockDirectionError, ValueError):
    """Raised when the input data cannot produce rows or samples."""

    kind = "data"

    def __init__(
        self,
        message: str | None = None,
        *,
        rows_total: int | None = None,
        rows_valid: int | None = None,
        anchors_considered: int | None = None,
        anchors_rejected: int | None = None,
    ) -> None:
        self.rows_total = rows_total
        self.rows_valid = rows_valid
        self.anchors_considered = anchors_considered
        self.anchors_rejected = anchors_rejected

        details: list[str] = [message or "Input data is not usable."]
        if rows_total is not None:
            details.append(f"Rows: {rows_valid or 0}/{rows_total} valid.")
        if anchors_considered is not None:
            details.append(
                f"Anchors: {anchors_rejected or 0}/{anchors_considered} rejected for missing data."
            )
        super().__init__(" ".join(details))


class StateError(StockDirectionError, RuntimeError):
    """Raised when an operation is requested before its prerequisite ran."""

    kind = "state"


class ShapeError(StockDirectionError, ValueError):
    """Raised when prediction or truth matrices disagree with the label layout."""

    kind = "shape"

    def __init__(
        self,
        message: str,
        *,
        expected: Sequence[int | None] | None = None,
        actual: Sequence[int] | None = None,
    ) -> None:
        self.expected = tuple(expected) if expected is not None else None
        self.actual = tuple(actual) if actual is not None else None
        details = [message]
        if self.expected is not None or self.actual is not None:
            details.append(f"(expected {self.expected}, got {self.actual})")
        super().__init__(" ".join(details))


__all__ = ["StockDirectionError", "DataError", "StateError", "ShapeError"]

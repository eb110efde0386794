"""Align ragged per-symbol observations onto a shared chronological date axis."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple

import numpy as np
import pandas as pd

from .exceptions import DataError
from .observations import ParsedDate, RawObservation, parse_date

LOGGER = logging.getLogger(__name__)


class _Missing:
    """Marker for a (symbol, date) slot without an observation."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class PriceSlot(NamedTuple):
    open: float
    close: float


@dataclass(frozen=True)
class AlignedSeries:
    """Per-symbol price arrays indexed by a shared integer date axis.

    ``opens``, ``closes`` and ``present`` all have shape ``[S, D]`` where row
    ``s`` belongs to ``symbols[s]`` and column ``i`` to ``dates[i]``.  Missing
    slots hold ``NaN`` prices and ``present[s, i] == False``.
    """

    symbols: tuple[str, ...]
    dates: tuple[str, ...]
    opens: np.ndarray
    closes: np.ndarray
    present: np.ndarray
    unparsed_dates: tuple[str, ...] = ()
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def symbol_count(self) -> int:
        return len(self.symbols)

    @property
    def date_count(self) -> int:
        return len(self.dates)

    def symbol_index(self, symbol: str) -> int:
        try:
            return self.symbols.index(symbol)
        except ValueError as exc:
            raise KeyError(f"Unknown symbol '{symbol}'.") from exc

    def slot(self, symbol: str, index: int) -> PriceSlot | _Missing:
        """Return the observation for *symbol* at date index *index*."""

        row = self.symbol_index(symbol)
        if not self.present[row, index]:
            return MISSING
        return PriceSlot(float(self.opens[row, index]), float(self.closes[row, index]))

    def series(self, symbol: str) -> list[PriceSlot | _Missing]:
        return [self.slot(symbol, idx) for idx in range(self.date_count)]

    def frame(self, field_name: str = "close") -> pd.DataFrame:
        """Return a date-indexed frame with one column per symbol."""

        values = {"open": self.opens, "close": self.closes}.get(field_name)
        if values is None:
            raise ValueError("field_name must be 'open' or 'close'.")
        return pd.DataFrame(values.T, index=pd.Index(self.dates, name="Date"), columns=list(self.symbols))


def _order_dates(parsed: dict[str, ParsedDate]) -> tuple[list[str], list[str]]:
    known = {item.key: item.timestamp for item in parsed.values() if item.parsed}
    unknown = {item.key for item in parsed.values() if not item.parsed}
    ordered = sorted(known, key=lambda key: known[key])
    # Unparsed tokens cannot be placed chronologically; keep them last.
    trailing = sorted(unknown - set(known))
    return ordered + trailing, trailing


def align_observations(
    observations: Iterable[RawObservation],
    *,
    expected_symbol_count: int | None = None,
    strict_dates: bool = False,
) -> AlignedSeries:
    """Pivot observations into an :class:`AlignedSeries`.

    Symbols are sorted lexically and dates chronologically.  When the same
    (symbol, date) pair appears more than once the last row wins.
    """

    rows = list(observations)
    if not rows:
        raise DataError("No valid rows in input.", rows_total=0, rows_valid=0)

    parsed: dict[str, ParsedDate] = {}
    for row in rows:
        if row.date not in parsed:
            parsed[row.date] = parse_date(row.date)

    dates, unparsed = _order_dates(parsed)
    if unparsed:
        if strict_dates:
            raise DataError(
                f"Unable to parse {len(unparsed)} date value(s): {', '.join(unparsed[:5])}"
            )
        LOGGER.warning(
            "Retaining %s unparseable date value(s) verbatim; ordering is not guaranteed: %s",
            len(unparsed),
            ", ".join(unparsed[:5]),
        )

    symbols = sorted({row.symbol for row in rows})
    symbol_pos = {symbol: idx for idx, symbol in enumerate(symbols)}
    date_pos = {key: idx for idx, key in enumerate(dates)}

    shape = (len(symbols), len(dates))
    opens = np.full(shape, np.nan, dtype=np.float64)
    closes = np.full(shape, np.nan, dtype=np.float64)
    present = np.zeros(shape, dtype=bool)
    for row in rows:
        s_idx = symbol_pos[row.symbol]
        d_idx = date_pos[parsed[row.date].key]
        opens[s_idx, d_idx] = row.open
        closes[s_idx, d_idx] = row.close
        present[s_idx, d_idx] = True

    warnings: list[str] = []
    if expected_symbol_count is not None and len(symbols) != expected_symbol_count:
        message = (
            f"Found {len(symbols)} distinct symbols (expected {expected_symbol_count})."
        )
        LOGGER.warning(message)
        warnings.append(message)

    LOGGER.info(
        "Parsed %s rows. Symbols: %s. Dates: %s.", len(rows), len(symbols), len(dates)
    )
    return AlignedSeries(
        symbols=tuple(symbols),
        dates=tuple(dates),
        opens=opens,
        closes=closes,
        present=present,
        unparsed_dates=tuple(unparsed),
        warnings=tuple(warnings),
    )


__all__ = ["AlignedSeries", "MISSING", "PriceSlot", "align_observations"]

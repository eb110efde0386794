"""Raw price observations and tabular ingestion."""

from __future__ import annotations

import io
import logging
import math
import re
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import DataError

LOGGER = logging.getLogger(__name__)


# Logical field -> accepted column headers, in priority order. Matching is
# case-insensitive; the first alias present in the table wins.
COLUMN_ALIASES: Mapping[str, tuple[str, ...]] = {
    "date": ("Date", "date", "datetime", "Timestamp", "timestamp"),
    "symbol": ("Symbol", "symbol", "Ticker", "ticker"),
    "open": ("Open", "open", "O", "o"),
    "close": ("Close", "close", "C", "c"),
}

_SEPARATOR_PATTERN = re.compile(r"[./]")


class RawObservation(BaseModel):
    """A single (symbol, date, open, close) row that survived validation."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(min_length=1)
    date: str = Field(min_length=1)
    open: float = Field(allow_inf_nan=False)
    close: float = Field(allow_inf_nan=False)

    @field_validator("symbol", "date", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, float) and math.isnan(value):
            return ""
        return str(value).strip()


@dataclass(frozen=True, slots=True)
class ParsedDate:
    """Result of normalising a raw date token."""

    key: str
    timestamp: pd.Timestamp | None

    @property
    def parsed(self) -> bool:
        return self.timestamp is not None


def _try_parse(text: str) -> pd.Timestamp | None:
    try:
        # Day-first tokens make pandas warn once per value; they still parse.
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            value = pd.to_datetime(text, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if value is None or pd.isna(value):
        return None
    stamp = pd.Timestamp(value)
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert("UTC").tz_localize(None)
    return stamp.normalize()


def parse_date(token: str) -> ParsedDate:
    """Normalise *token* to an ISO calendar date when possible.

    A direct parse is attempted first; on failure periods and slashes are
    replaced by dashes and the parse retried.  Tokens that still fail are
    kept verbatim with ``timestamp=None``.
    """

    text = str(token).strip()
    stamp = _try_parse(text)
    if stamp is None:
        stamp = _try_parse(_SEPARATOR_PATTERN.sub("-", text))
    if stamp is None:
        return ParsedDate(key=text, timestamp=None)
    return ParsedDate(key=stamp.strftime("%Y-%m-%d"), timestamp=stamp)


def resolve_columns(columns: Sequence[Any]) -> dict[str, str]:
    """Map each logical field to the first matching header in *columns*."""

    lookup: dict[str, str] = {}
    for column in columns:
        lookup.setdefault(str(column).strip().lower(), column)

    resolved: dict[str, str] = {}
    for field_name, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            match = lookup.get(alias.lower())
            if match is not None:
                resolved[field_name] = match
                break
    return resolved


def observations_from_frame(frame: pd.DataFrame) -> list[RawObservation]:
    """Validate the rows of *frame* into :class:`RawObservation` records.

    Rows missing a field or carrying non-numeric prices are dropped.  Raises
    :class:`DataError` if no row survives.
    """

    columns = resolve_columns(list(frame.columns))
    missing = [name for name in COLUMN_ALIASES if name not in columns]
    total = int(frame.shape[0])
    if missing:
        LOGGER.debug("Input is missing required columns: %s", ", ".join(missing))
        raise DataError("No valid rows in input.", rows_total=total, rows_valid=0)

    subset = frame[[columns[name] for name in COLUMN_ALIASES]]
    subset.columns = list(COLUMN_ALIASES)

    observations: list[RawObservation] = []
    for record in subset.to_dict(orient="records"):
        try:
            observations.append(RawObservation.model_validate(record))
        except ValidationError:
            continue

    dropped = total - len(observations)
    if dropped:
        LOGGER.debug("Dropped %s of %s rows during validation", dropped, total)
    if not observations:
        raise DataError("No valid rows in input.", rows_total=total, rows_valid=0)
    return observations


def read_csv_frame(source: str | Path | io.TextIOBase) -> pd.DataFrame:
    """Read a CSV source as strings so validation can decide what is numeric."""

    return pd.read_csv(
        source,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        skipinitialspace=True,
    )


def load_observations(source: Any) -> list[RawObservation]:
    """Load observations from a path, CSV text, a DataFrame or records.

    Strings containing a newline are treated as CSV text; other strings and
    :class:`~pathlib.Path` objects are read as files.
    """

    if isinstance(source, pd.DataFrame):
        return observations_from_frame(source)
    if isinstance(source, Path):
        return observations_from_frame(read_csv_frame(source))
    if isinstance(source, str):
        if "\n" in source:
            return observations_from_frame(read_csv_frame(io.StringIO(source)))
        return observations_from_frame(read_csv_frame(Path(source)))
    if isinstance(source, Iterable):
        return _coerce_records(source)
    raise TypeError(f"Unsupported observation source: {type(source).__name__}")


def _coerce_records(records: Iterable[Any]) -> list[RawObservation]:
    observations: list[RawObservation] = []
    total = 0
    for record in records:
        total += 1
        if isinstance(record, RawObservation):
            observations.append(record)
            continue
        if isinstance(record, Mapping):
            columns = resolve_columns(list(record))
            record = {name: record.get(header) for name, header in columns.items()}
        try:
            observations.append(RawObservation.model_validate(record))
        except ValidationError:
            continue
    if not observations:
        raise DataError("No valid rows in input.", rows_total=total, rows_valid=0)
    return observations


__all__ = [
    "COLUMN_ALIASES",
    "ParsedDate",
    "RawObservation",
    "load_observations",
    "observations_from_frame",
    "parse_date",
    "read_csv_frame",
    "resolve_columns",
]

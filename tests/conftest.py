from __future__ import annotations

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

SCENARIO_DATES = [
    "2024-01-01",
    "2024-01-02",
    "2024-01-03",
    "2024-01-04",
    "2024-01-05",
    "2024-01-06",
]
SCENARIO_CLOSES = {
    "A": [10.0, 11.0, 9.0, 12.0, 13.0, 14.0],
    "B": [5.0, 5.0, 6.0, 6.0, 7.0, 8.0],
}


def scenario_records(skip: set[tuple[str, int]] | None = None) -> list[dict[str, object]]:
    """Two assets over six days; opens sit half a point under the close."""

    skip = skip or set()
    records = []
    for symbol, closes in SCENARIO_CLOSES.items():
        for idx, (date, close) in enumerate(zip(SCENARIO_DATES, closes)):
            if (symbol, idx) in skip:
                continue
            records.append({"Date": date, "Symbol": symbol, "Open": close - 0.5, "Close": close})
    return records


def scenario_csv_text(skip: set[tuple[str, int]] | None = None) -> str:
    lines = ["Date,Symbol,Open,Close"]
    for record in scenario_records(skip):
        lines.append(
            f"{record['Date']},{record['Symbol']},{record['Open']},{record['Close']}"
        )
    return "\n".join(lines) + "\n"


@pytest.fixture
def scenario_rows() -> list[dict[str, object]]:
    return scenario_records()


@pytest.fixture
def scenario_csv(tmp_path: Path) -> Path:
    path = tmp_path / "prices.csv"
    path.write_text(scenario_csv_text(), encoding="utf-8")
    return path

"""Command line entry point for dataset preparation and evaluation."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from stock_direction.core import DirectionPipeline, StockDirectionError, build_config
from stock_direction.core.config import NORMALIZATION_SCOPES

LOGGER = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _add_dataset_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--csv", required=True, help="CSV file with Date, Symbol, Open, Close columns.")
    parser.add_argument("--sequence-length", type=int, help="Window length in trading days.")
    parser.add_argument("--horizon", type=int, help="Number of future offsets per asset.")
    parser.add_argument("--train-split", type=float, help="Train share in percent (0-100).")
    parser.add_argument("--expected-symbols", type=int, help="Warn when the symbol count differs.")
    parser.add_argument(
        "--no-symbol-check",
        action="store_true",
        help="Disable the expected symbol count warning.",
    )
    parser.add_argument(
        "--normalization-scope",
        choices=NORMALIZATION_SCOPES,
        help="Compute min-max statistics over the full series or the train span only.",
    )
    parser.add_argument(
        "--strict-dates",
        action="store_true",
        default=None,
        help="Fail on date values that cannot be parsed.",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build multi-asset direction datasets and score model predictions.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    prepare = subparsers.add_parser("prepare", help="Print dataset metadata as JSON.")
    _add_dataset_arguments(prepare)

    evaluate = subparsers.add_parser(
        "evaluate", help="Score a probability matrix for the test split."
    )
    _add_dataset_arguments(evaluate)
    evaluate.add_argument(
        "--predictions",
        required=True,
        help="Probability matrix [test_samples, symbols*horizon] as .npy or headerless .csv.",
    )
    return parser.parse_args(argv)


def load_prediction_matrix(path: str | Path) -> np.ndarray:
    path = Path(path)
    if path.suffix.lower() == ".npy":
        return np.asarray(np.load(path), dtype=np.float64)
    return pd.read_csv(path, header=None).to_numpy(dtype=np.float64)


def _build_pipeline(args: argparse.Namespace) -> DirectionPipeline:
    config = build_config(
        sequence_length=args.sequence_length,
        forecast_horizon=args.horizon,
        train_split_percent=args.train_split,
        expected_symbol_count=args.expected_symbols,
        normalization_scope=args.normalization_scope,
        strict_dates=args.strict_dates,
        check_symbol_count=not args.no_symbol_check,
    )
    return DirectionPipeline(config)


def run_command(args: argparse.Namespace) -> dict[str, Any]:
    pipeline = _build_pipeline(args)
    try:
        pipeline.load(Path(args.csv))
        dataset = pipeline.prepare()
        if args.command == "prepare":
            return {"status": "ok", **dataset.meta()}
        pipeline.use_predictions(load_prediction_matrix(args.predictions))
        return {"status": "ok", **pipeline.evaluate().to_dict()}
    finally:
        pipeline.release()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        output = run_command(args)
    except StockDirectionError as exc:
        LOGGER.error("%s", exc)
        print(
            json.dumps({"status": "error", "kind": exc.kind, "message": str(exc)}),
            file=sys.stderr,
        )
        return 1
    except (OSError, ValueError) as exc:
        LOGGER.error("%s", exc)
        print(
            json.dumps({"status": "error", "kind": "input", "message": str(exc)}),
            file=sys.stderr,
        )
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Command line entry point for the stock direction toolkit."""

from __future__ import annotations

from stock_direction.cli import main


if __name__ == "__main__":
    raise SystemExit(main())

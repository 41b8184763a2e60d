#!/usr/bin/env python3
"""Command-line trade journal.

Reconstructs round-trip trades from a JSON file of executions, or from the
account's Bybit history when no file is given, and writes them as JSON or
as a plain-text table.

Environment Variables:
- BYBIT_API_KEY: Bybit API key (read-only is enough)
- BYBIT_API_SECRET: Bybit API secret
- LOG_LEVEL: Logging level (default INFO)
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from spot_journal.data import BybitAPIError, BybitExecutionClient
from spot_journal.matching import (
    ExecutionValidationError,
    Trade,
    TradeStats,
    calculate_trade_stats,
    match_with_open_lots,
    parse_executions,
)
from spot_journal.schemas import TradeOut, TradeSummary

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

TABLE_COLUMNS = (
    ("Token", 8),
    ("Qty", 14),
    ("Entry", 14),
    ("Exit", 14),
    ("Sum USDT", 12),
    ("Fee", 10),
    ("PnL", 10),
    ("PnL %", 9),
    ("Duration", 12),
)


def load_executions(path: Path) -> list[Any]:
    """Read executions from a JSON list or an object with an 'executions' key."""
    with open(path, "r") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("executions", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of executions in {path}")
    return data


def fetch_executions() -> list[Any]:
    """Fetch executions from Bybit using credentials from the environment."""
    api_key = os.environ.get("BYBIT_API_KEY", "")
    api_secret = os.environ.get("BYBIT_API_SECRET", "")
    if not api_key.strip() or not api_secret.strip():
        raise ValueError("BYBIT_API_KEY and BYBIT_API_SECRET must be set when --input is not given")
    return BybitExecutionClient(api_key, api_secret).fetch_all_executions()


def _signed(value: float, suffix: str = "") -> str:
    return f"{'+' if value >= 0 else ''}{value:.2f}{suffix}"


def render_table(trades: list[Trade], stats: TradeStats) -> str:
    """Render trades as a fixed-width table followed by a summary line."""
    header = " ".join(name.ljust(width) for name, width in TABLE_COLUMNS)
    lines = [header, "-" * len(header)]
    for trade in trades:
        out = TradeOut.from_trade(trade)
        cells = (
            out.token,
            f"{trade.quantity.normalize():f}",
            f"{trade.entry_price:.8g}",
            f"{trade.exit_price.normalize():f}",
            out.sum_usdt,
            out.commission,
            _signed(out.pnl_usdt),
            _signed(out.pnl_percent, "%"),
            out.duration,
        )
        lines.append(" ".join(str(cell).ljust(width) for cell, (_, width) in zip(cells, TABLE_COLUMNS)))
    if not trades:
        lines.append("No closed trades")

    lines.append("")
    lines.append(
        f"Trades: {stats.total_trades}  "
        f"Avg profit: {float(stats.avg_profit):.2f}  "
        f"Avg loss: {float(stats.avg_loss):.2f}  "
        f"Total PnL: {_signed(float(stats.total_pnl))}"
    )
    return "\n".join(lines)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconstruct FIFO round-trip trades from spot executions")
    parser.add_argument("--input", type=Path, help="JSON file of executions (default: fetch from Bybit)")
    parser.add_argument("--output", type=Path, help="Write result to this file instead of stdout")
    parser.add_argument("--table", action="store_true", help="Print a text table instead of JSON")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        records = load_executions(args.input) if args.input else fetch_executions()
        executions = parse_executions(records)
    except (ExecutionValidationError, BybitAPIError, ValueError, OSError) as e:
        logger.error(f"Failed to load executions: {e}")
        return 1

    trades, open_lots = match_with_open_lots(executions)
    stats = calculate_trade_stats(trades)
    open_count = sum(len(lots) for lots in open_lots.values())
    logger.info(f"Reconstructed {len(trades)} trades from {len(executions)} executions ({open_count} lots still open)")

    if args.table:
        text = render_table(trades, stats)
    else:
        result = {
            "trades": [TradeOut.from_trade(t).model_dump(by_alias=True) for t in trades],
            "summary": TradeSummary.from_stats(stats).model_dump(by_alias=True),
        }
        text = json.dumps(result, indent=2)

    if args.output:
        with open(args.output, "w") as f:
            f.write(text + "\n")
        logger.info(f"Wrote {len(trades)} trades to {args.output}")
    else:
        sys.stdout.write(text + "\n")

    return 0


if __name__ == "__main__":
    exit(main())

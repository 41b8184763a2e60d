"""FIFO matching of spot executions into round-trip trades."""

from .fifo import (
    ExecutionValidationError,
    format_duration,
    format_timestamp,
    match_executions,
    match_with_open_lots,
    parse_executions,
    reconstruct_trades,
    strip_quote_suffix,
)
from .stats import calculate_trade_stats
from .types import Lot, MatchResult, Trade, TradeStats

__all__ = [
    "ExecutionValidationError",
    "Lot",
    "MatchResult",
    "Trade",
    "TradeStats",
    "calculate_trade_stats",
    "format_duration",
    "format_timestamp",
    "match_executions",
    "match_with_open_lots",
    "parse_executions",
    "reconstruct_trades",
    "strip_quote_suffix",
]

"""FIFO lot matching of spot executions into round-trip trades."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from spot_journal.data.models import Execution, Side
from spot_journal.matching.types import Lot, MatchResult, Trade

logger = logging.getLogger(__name__)

QUOTE_SUFFIXES = ("USDT", "USDC")

MS_PER_SECOND = 1_000
MS_PER_MINUTE = 60_000
MS_PER_HOUR = 3_600_000
MS_PER_DAY = 86_400_000

ZERO = Decimal("0")


class ExecutionValidationError(ValueError):
    """An execution record failed validation; the whole batch is rejected."""

    def __init__(self, index: int, execution_id: str | None, detail: str):
        self.index = index
        self.execution_id = execution_id
        self.detail = detail
        label = f"execution #{index}"
        if execution_id:
            label += f" ({execution_id})"
        super().__init__(f"Invalid {label}: {detail}")


def strip_quote_suffix(symbol: str) -> str:
    """Derive the base-asset token from a trading pair symbol.

    Args:
        symbol: Pair symbol like 'BTCUSDT'

    Returns:
        Token like 'BTC'. Only one trailing quote suffix is removed.
    """
    for suffix in QUOTE_SUFFIXES:
        if symbol.endswith(suffix):
            return symbol[: -len(suffix)]
    return symbol


def _round_half_up(ms: int, unit: int) -> int:
    return (ms + unit // 2) // unit


def format_duration(ms: int) -> str:
    """Format an elapsed time in milliseconds as a coarse human string.

    Args:
        ms: Non-negative elapsed milliseconds

    Returns:
        e.g. '45 seconds', '3 minutes', '2 hours', '10 days'
    """
    if ms < MS_PER_MINUTE:
        return f"{_round_half_up(ms, MS_PER_SECOND)} seconds"
    if ms < MS_PER_HOUR:
        return f"{_round_half_up(ms, MS_PER_MINUTE)} minutes"
    if ms < MS_PER_DAY:
        return f"{_round_half_up(ms, MS_PER_HOUR)} hours"
    return f"{_round_half_up(ms, MS_PER_DAY)} days"


def format_timestamp(ms: int) -> str:
    """Format epoch milliseconds as 'YYYY-MM-DD HH:MM:SS' in UTC."""
    return datetime.fromtimestamp(ms // MS_PER_SECOND, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def open_lot(buy: Execution) -> Lot:
    """Create a lot from a Buy execution."""
    return Lot(
        price=buy.price,
        quantity=buy.quantity,
        original_quantity=buy.quantity,
        timestamp=buy.timestamp,
        fee=buy.fee,
    )


def close_against_lots(lots: deque[Lot], sell: Execution, token: str) -> Trade | None:
    """Consume lots oldest-first against a Sell execution.

    Lots are mutated in place; exhausted lots are popped from the head.
    Any part of the Sell that finds no lot is dropped without opening a
    short position.

    Args:
        lots: FIFO queue of open lots for the Sell's token
        sell: Sell execution
        token: Base-asset token

    Returns:
        The closed Trade, or None if no quantity was matched
    """
    remaining = sell.quantity
    matched = ZERO
    total_cost = ZERO
    total_buy_fee = ZERO
    entry_time = sell.timestamp

    while remaining > 0 and lots:
        lot = lots[0]
        match_qty = min(remaining, lot.quantity)
        if matched == 0:
            entry_time = lot.timestamp
        total_cost += lot.price * match_qty
        # Fee per unit is fixed by the lot's original quantity
        total_buy_fee += lot.fee * match_qty / lot.original_quantity
        lot.quantity -= match_qty
        remaining -= match_qty
        matched += match_qty
        if lot.quantity <= 0:
            lots.popleft()

    if matched == 0:
        logger.debug(f"Sell {sell.execution_id or sell.timestamp} on {token} has no open lots, skipped")
        return None
    if remaining > 0:
        logger.debug(f"Sell on {token} matched {matched} of {sell.quantity}, remainder dropped")

    exit_value = sell.price * matched
    sell_fee_share = sell.fee * matched / sell.quantity
    commission = total_buy_fee + sell_fee_share
    pnl_usdt = exit_value - total_cost - commission
    pnl_percent = (exit_value - total_cost) / total_cost * 100 if total_cost > 0 else ZERO

    return Trade(
        id=sell.execution_id or f"{token}-{sell.timestamp}",
        token=token,
        quantity=matched,
        entry_price=total_cost / matched,
        exit_price=sell.price,
        sum_usdt=exit_value,
        commission=commission,
        pnl_usdt=pnl_usdt,
        pnl_percent=pnl_percent,
        entry_time=entry_time,
        exit_time=sell.timestamp,
        entry_date=format_timestamp(entry_time),
        exit_date=format_timestamp(sell.timestamp),
        duration=format_duration(max(0, sell.timestamp - entry_time)),
    )


def match_with_open_lots(executions: Iterable[Execution]) -> tuple[list[Trade], dict[str, deque[Lot]]]:
    """Match executions and also return the lots left open per token.

    Executions are stable-sorted by timestamp, so fills sharing a
    timestamp are processed in input order.

    Args:
        executions: Validated executions in any order

    Returns:
        (trades newest-first, open lots keyed by token)
    """
    ordered = sorted(executions, key=lambda e: e.timestamp)
    queues: dict[str, deque[Lot]] = {}
    trades: list[Trade] = []

    for execution in ordered:
        token = strip_quote_suffix(execution.symbol)
        lots = queues.setdefault(token, deque())
        if execution.side is Side.BUY:
            lots.append(open_lot(execution))
            continue
        trade = close_against_lots(lots, execution, token)
        if trade is not None:
            trades.append(trade)

    trades.reverse()
    logger.debug(f"Matched {len(ordered)} executions into {len(trades)} trades")
    return trades, queues


def match_executions(executions: Iterable[Execution]) -> list[Trade]:
    """Reconstruct round-trip trades from executions using FIFO lots.

    Args:
        executions: Validated executions in any order

    Returns:
        Closed trades, newest first
    """
    trades, _ = match_with_open_lots(executions)
    return trades


def _describe_errors(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}"
        for err in error.errors()
    )


def parse_executions(records: Iterable[Any]) -> list[Execution]:
    """Validate raw execution records.

    Args:
        records: Exchange payload dicts (or already-built Executions)

    Returns:
        Validated executions, in input order

    Raises:
        ExecutionValidationError: naming the first invalid record
    """
    executions: list[Execution] = []
    for index, record in enumerate(records):
        if isinstance(record, Execution):
            executions.append(record)
            continue
        try:
            executions.append(Execution.model_validate(record))
        except ValidationError as e:
            execution_id = record.get("execId") if isinstance(record, Mapping) else None
            raise ExecutionValidationError(index, execution_id, _describe_errors(e)) from e
    return executions


def reconstruct_trades(records: Iterable[Any]) -> MatchResult:
    """Validate records and match them, reporting failure as a result.

    Args:
        records: Raw exchange execution records

    Returns:
        MatchResult with status 'success' and trades, or 'error' and a message
    """
    try:
        executions = parse_executions(records)
    except ExecutionValidationError as e:
        logger.warning(f"Rejected execution batch: {e}")
        return MatchResult(status="error", error=str(e))
    return MatchResult(status="success", trades=match_executions(executions))

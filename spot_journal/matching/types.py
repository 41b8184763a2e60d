"""Typed data structures for the matching layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal


@dataclass
class Lot:
    """Unconsumed remainder of a Buy fill. Created on Buy, consumed by Sells."""
    price: Decimal
    quantity: Decimal  # remaining, decremented as Sells consume it
    original_quantity: Decimal
    timestamp: int
    fee: Decimal = Decimal("0")  # fee of the full original fill


@dataclass(frozen=True)
class Trade:
    """A closed round-trip: one Sell matched against FIFO lots."""
    id: str
    token: str
    quantity: Decimal
    entry_price: Decimal
    exit_price: Decimal
    sum_usdt: Decimal
    commission: Decimal
    pnl_usdt: Decimal
    pnl_percent: Decimal
    entry_time: int
    exit_time: int
    entry_date: str
    exit_date: str
    duration: str


@dataclass(frozen=True)
class TradeStats:
    """Aggregates over a computed trade list."""
    total_trades: int
    winning_trades: int
    losing_trades: int
    avg_profit: Decimal
    avg_loss: Decimal
    total_pnl: Decimal


@dataclass
class MatchResult:
    """Outcome of reconstructing trades from raw execution records."""
    status: Literal["success", "error"]
    trades: list[Trade] = field(default_factory=list)
    error: str | None = None

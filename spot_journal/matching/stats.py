"""Summary statistics over reconstructed trades."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from spot_journal.matching.types import Trade, TradeStats


def calculate_trade_stats(trades: Sequence[Trade]) -> TradeStats:
    """Calculate trade statistics.

    Trades with zero PnL count as neither winners nor losers.

    Args:
        trades: Closed trades (any order)

    Returns:
        TradeStats with average profit, average loss and total PnL in quote currency
    """
    profits = [t.pnl_usdt for t in trades if t.pnl_usdt > 0]
    losses = [t.pnl_usdt for t in trades if t.pnl_usdt < 0]

    avg_profit = sum(profits, Decimal("0")) / len(profits) if profits else Decimal("0")
    avg_loss = sum(losses, Decimal("0")) / len(losses) if losses else Decimal("0")
    total_pnl = sum((t.pnl_usdt for t in trades), Decimal("0"))

    return TradeStats(
        total_trades=len(trades),
        winning_trades=len(profits),
        losing_trades=len(losses),
        avg_profit=avg_profit,
        avg_loss=avg_loss,
        total_pnl=total_pnl,
    )

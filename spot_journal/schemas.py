"""Request and response schemas shared by the HTTP service and the CLI."""

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from spot_journal.matching import Trade, TradeStats


def _fixed(value: Decimal, places: int) -> str:
    """Format a decimal with a fixed number of places, rounding half up."""
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the fraction
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return str(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


class CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class BybitRequest(CamelModel):
    """Credentials for loading executions from Bybit."""
    api_key: str | None = None
    api_secret: str | None = None


class MatchRequest(BaseModel):
    """Raw executions to match, in Bybit execution payload format."""
    executions: list[Any]


class TradeOut(CamelModel):
    """A round-trip trade as rendered to clients."""
    id: str
    token: str
    quantity: float
    entry_price: float
    exit_price: float
    sum_usdt: str
    commission: str
    pnl_usdt: float
    pnl_percent: float
    entry_date: str
    exit_date: str
    duration: str

    @classmethod
    def from_trade(cls, trade: Trade) -> "TradeOut":
        return cls(
            id=trade.id,
            token=trade.token,
            quantity=float(trade.quantity),
            entry_price=float(trade.entry_price),
            exit_price=float(trade.exit_price),
            sum_usdt=_fixed(trade.sum_usdt, 2),
            commission=_fixed(trade.commission, 4),
            pnl_usdt=float(trade.pnl_usdt),
            pnl_percent=float(trade.pnl_percent),
            entry_date=trade.entry_date,
            exit_date=trade.exit_date,
            duration=trade.duration,
        )


class TradeSummary(CamelModel):
    """Summary statistics over the returned trades."""
    total_trades: int
    winning_trades: int
    losing_trades: int
    avg_profit: float
    avg_loss: float
    total_pnl: float

    @classmethod
    def from_stats(cls, stats: TradeStats) -> "TradeSummary":
        return cls(
            total_trades=stats.total_trades,
            winning_trades=stats.winning_trades,
            losing_trades=stats.losing_trades,
            avg_profit=float(stats.avg_profit),
            avg_loss=float(stats.avg_loss),
            total_pnl=float(stats.total_pnl),
        )


class JournalResponse(BaseModel):
    """Trades newest-first plus summary."""
    trades: list[TradeOut]
    summary: TradeSummary


"""Unit tests for trade summary statistics."""

from decimal import Decimal

from spot_journal.matching import Trade, calculate_trade_stats


def _trade(pnl: str) -> Trade:
    return Trade(
        id=f"t{pnl}",
        token="BTC",
        quantity=Decimal("1"),
        entry_price=Decimal("100"),
        exit_price=Decimal("100"),
        sum_usdt=Decimal("100"),
        commission=Decimal("0"),
        pnl_usdt=Decimal(pnl),
        pnl_percent=Decimal("0"),
        entry_time=0,
        exit_time=0,
        entry_date="1970-01-01 00:00:00",
        exit_date="1970-01-01 00:00:00",
        duration="0 seconds",
    )


class TestCalculateTradeStats:
    def test_empty_list(self):
        """No trades gives zero averages and total."""
        stats = calculate_trade_stats([])
        assert stats.total_trades == 0
        assert stats.avg_profit == 0
        assert stats.avg_loss == 0
        assert stats.total_pnl == 0

    def test_averages_split_by_sign(self):
        """Profits and losses are averaged separately."""
        stats = calculate_trade_stats([_trade("10"), _trade("20"), _trade("-4"), _trade("-8")])

        assert stats.total_trades == 4
        assert stats.winning_trades == 2
        assert stats.losing_trades == 2
        assert stats.avg_profit == 15
        assert stats.avg_loss == -6
        assert stats.total_pnl == 18

    def test_zero_pnl_counts_in_total_only(self):
        """Break-even trades are neither winners nor losers."""
        stats = calculate_trade_stats([_trade("0"), _trade("5")])

        assert stats.total_trades == 2
        assert stats.winning_trades == 1
        assert stats.losing_trades == 0
        assert stats.avg_profit == 5
        assert stats.avg_loss == 0

    def test_only_losses(self):
        stats = calculate_trade_stats([_trade("-1.5")])
        assert stats.avg_profit == 0
        assert stats.avg_loss == Decimal("-1.5")
        assert stats.total_pnl == Decimal("-1.5")

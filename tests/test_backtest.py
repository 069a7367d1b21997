"""Tests for the RSI threshold backtester."""

from __future__ import annotations

import pytest

from src.analytics.backtest import backtest_rsi, threshold_error
from src.models.results import ResultStatus
from src.models.signals import TradeSide


def _round_trip_closes() -> list[float]:
    rise = [100.0 + i for i in range(30)]  # 100..129
    fall = [129.0 - 2 * (i + 1) for i in range(15)]  # 127..99
    rally = [99.0 + 3 * (i + 1) for i in range(25)]  # 102..174
    drift = [174.0 + i + 1 for i in range(10)]
    return rise + fall + rally + drift


class TestBacktestRSI:
    """Tests for backtest_rsi."""

    def test_none_is_unavailable(self) -> None:
        result = backtest_rsi(None, symbol="AAPL")
        assert result.status == ResultStatus.DATA_UNAVAILABLE
        assert result.symbol == "AAPL"

    def test_short_history_is_insufficient(self, make_frame) -> None:
        result = backtest_rsi(make_frame([100.0 + i for i in range(49)]), symbol="AAPL")
        assert result.status == ResultStatus.INSUFFICIENT_HISTORY
        assert "50" in result.error
        assert result.trades == 0

    def test_round_trip(self, make_frame) -> None:
        """One dip below 30 followed by a rally above 70 gives BUY then SELL."""
        closes = _round_trip_closes()
        result = backtest_rsi(make_frame(closes), symbol="TEST")
        assert result.ok
        assert result.trades == 2
        sides = [t.side for t in result.last_trades]
        assert sides == [TradeSide.BUY, TradeSide.SELL]
        buy, sell = result.last_trades
        assert buy.date < sell.date
        assert buy.rsi < 30
        assert sell.rsi > 70
        assert buy.price == pytest.approx(107.0)
        assert sell.price == pytest.approx(126.0)
        assert result.total_return == pytest.approx(126.0 / 107.0 - 1)
        assert result.buy_hold_return == pytest.approx(closes[-1] / closes[0] - 1)

    def test_open_position_marked_to_last_close(self, make_frame) -> None:
        rise = [100.0 + i for i in range(30)]
        fall = [129.0 - 2 * (i + 1) for i in range(30)]
        result = backtest_rsi(make_frame(rise + fall))
        assert result.trades == 1
        assert result.last_trades[-1].side == TradeSide.BUY
        buy_price = result.last_trades[-1].price
        assert result.final_equity == pytest.approx(fall[-1] / buy_price)
        assert result.total_return == pytest.approx(result.final_equity - 1.0)

    def test_no_signal_keeps_capital(self, make_frame, linear_closes) -> None:
        result = backtest_rsi(make_frame(linear_closes))
        assert result.trades == 0
        assert result.final_equity == pytest.approx(1.0)
        assert result.total_return == pytest.approx(0.0)
        assert result.latest_rsi == pytest.approx(100.0)
        assert not result.beat_buy_and_hold

    def test_dates_span_the_input(self, make_frame) -> None:
        df = make_frame(_round_trip_closes())
        result = backtest_rsi(df)
        assert result.start_date == df.index[0].to_pydatetime()
        assert result.end_date == df.index[-1].to_pydatetime()

    def test_custom_thresholds_recorded(self, make_frame) -> None:
        result = backtest_rsi(make_frame(_round_trip_closes()), 20.0, 80.0)
        assert result.buy_threshold == 20.0
        assert result.sell_threshold == 80.0

    @pytest.mark.parametrize("buy,sell", [(70.0, 30.0), (50.0, 50.0), (-1.0, 70.0), (30.0, 101.0)])
    def test_invalid_thresholds_return_result(self, make_frame, buy, sell) -> None:
        result = backtest_rsi(make_frame(_round_trip_closes()), buy, sell, "AAPL")
        assert result.status == ResultStatus.INVALID_PARAMETERS
        assert result.error.startswith("RSI thresholds must satisfy")
        assert result.trades == 0
        assert result.final_equity is None

    def test_threshold_error(self) -> None:
        assert threshold_error(0.0, 100.0) is None
        assert threshold_error(30.0, 70.0) is None
        assert threshold_error(70.0, 30.0).endswith("got 70/30")

"""Tests for single-symbol analysis, chart payloads and the market snapshot."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.analytics.analysis import (
    analyze_series,
    build_chart,
    build_quote_result,
    build_snapshot,
    classify_mood,
)
from src.models.bar import Bar, bars_to_frame
from src.models.quote import Quote
from src.models.results import ResultStatus
from src.models.signals import PatternSignal, Verdict


class TestAnalyzeSeries:
    def test_linear_uptrend(self, make_frame, linear_closes) -> None:
        result = analyze_series("UP", make_frame(linear_closes))
        assert result.ok
        assert result.price == pytest.approx(400.0)
        assert result.verdict == Verdict.BULLISH
        assert result.stats.max_drawdown == 0.0
        assert result.technicals.rsi == pytest.approx(100.0)
        assert result.technicals.sma200 is not None
        assert result.technicals.vol_ratio == 1.0
        signals = [p.signal for p in result.patterns]
        assert PatternSignal.RSI_OVERBOUGHT in signals
        assert PatternSignal.TWENTY_DAY_HIGH in signals

    def test_short_history(self, make_frame) -> None:
        result = analyze_series("NEW", make_frame([10.0] * 49))
        assert result.status == ResultStatus.INSUFFICIENT_HISTORY
        assert result.stats is None

    def test_missing_series(self) -> None:
        assert analyze_series("ZZZZ", None).status == ResultStatus.DATA_UNAVAILABLE

    def test_sma200_null_below_200_bars(self, make_frame) -> None:
        result = analyze_series("MID", make_frame([10.0 + i * 0.1 for i in range(120)]))
        assert result.ok
        assert result.technicals.sma200 is None
        assert result.technicals.sma50 is not None

    def test_minute_bars(self) -> None:
        start = datetime(2024, 3, 4, 14, 30, tzinfo=timezone.utc)
        bars = [
            Bar(timestamp=start + timedelta(minutes=i), close=100.0 + i * 0.1, volume=5000.0)
            for i in range(51)
        ]
        result = analyze_series("INTRA", bars_to_frame(bars))
        assert result.ok
        assert result.stats.total_return == pytest.approx(0.05)
        assert result.stats.annual_return is None
        assert result.stats.sharpe is None


class TestQuoteResult:
    def test_ok(self, sample_quote) -> None:
        result = build_quote_result("AAPL", sample_quote)
        assert result.ok
        assert result.quote.price == 185.5

    def test_missing_price(self) -> None:
        result = build_quote_result("ZZZZ", Quote(symbol="ZZZZ"))
        assert result.status == ResultStatus.DATA_UNAVAILABLE
        assert build_quote_result("ZZZZ", None).error == "No data for ZZZZ"


class TestBuildChart:
    def test_payload_aligned(self, make_frame) -> None:
        result = build_chart("AAPL", make_frame([10.0 + i for i in range(10)]), "1mo")
        assert result.ok
        assert result.range == "1mo"
        payload = result.payload
        assert len(payload["dates"]) == 10
        for key in ("open", "high", "low", "close", "volume", "sma50", "sma200", "rsi"):
            assert len(payload[key]) == 10
        assert payload["sma50"] == [None] * 10
        assert set(payload["bb"]) == {"upper", "middle", "lower"}
        assert set(payload["macd"]) == {"macd", "signal", "histogram"}
        assert payload["close"][-1] == 19.0

    def test_too_few_bars(self, make_frame) -> None:
        result = build_chart("AAPL", make_frame([10.0] * 4))
        assert result.status == ResultStatus.DATA_UNAVAILABLE
        assert result.payload == {}


class TestSnapshot:
    def _quote(self, symbol: str, change_pct: float, state: str | None = None) -> Quote:
        return Quote(symbol=symbol, name=symbol, price=100.0, change_pct=change_pct, state=state)

    def test_cash_session_uses_indices(self) -> None:
        quotes = {
            "^GSPC": self._quote("^GSPC", 1.2, "REGULAR"),
            "^NDX": self._quote("^NDX", 0.5),
            "^DJI": self._quote("^DJI", 0.3),
            "ES=F": self._quote("ES=F", -3.0),
            "BTC-USD": self._quote("BTC-USD", 2.346),
        }
        ts = datetime(2024, 1, 2, 15, 0, tzinfo=timezone.utc)
        snap = build_snapshot(quotes, ts)
        assert snap.is_cash_session
        assert [i.symbol for i in snap.indices] == ["^GSPC", "^NDX", "^DJI"]
        assert snap.mood == "solidly higher"
        assert snap.crypto[0].change_pct == 2.35
        assert snap.macro == []
        assert snap.timestamp == ts

    def test_outside_session_uses_futures(self) -> None:
        quotes = {
            "^GSPC": self._quote("^GSPC", 0.0, "POST"),
            "ES=F": self._quote("ES=F", -1.0),
        }
        snap = build_snapshot(quotes)
        assert not snap.is_cash_session
        assert snap.market_state == "POST"
        assert [i.symbol for i in snap.indices] == ["ES=F"]
        assert snap.mood == "under pressure"

    def test_no_quotes(self) -> None:
        snap = build_snapshot({})
        assert snap.market_state == "CLOSED"
        assert snap.mood == "little changed"

    @pytest.mark.parametrize(
        "move,mood",
        [(0.7, "solidly higher"), (0.3, "slightly higher"), (0.0, "little changed"),
         (-0.3, "slightly lower"), (-0.6, "under pressure")],
    )
    def test_mood_bands(self, move: float, mood: str) -> None:
        assert classify_mood(move) == mood

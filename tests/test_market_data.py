"""Tests for the market data provider."""

from __future__ import annotations

import pytest

from src.data.market_data import MarketDataProvider
from src.models.bar import Bar
from src.models.errors import DataUnavailable, InsufficientHistory, MarketDataClientError
from src.models.quote import Quote


class TestGetSeries:
    @pytest.mark.asyncio
    async def test_returns_validated_frame(self, mock_market_client, make_bars) -> None:
        bars = make_bars([10.0, 11.0, 12.0])
        mock_market_client.chart.return_value = list(reversed(bars))
        provider = MarketDataProvider(mock_market_client)
        df = await provider.get_series("AAPL", "1mo", "1d")
        assert list(df.columns) == ["open", "high", "low", "close", "volume"]
        assert df.index.is_monotonic_increasing
        assert str(df.index.tz) == "UTC"
        assert df["close"].tolist() == [10.0, 11.0, 12.0]
        mock_market_client.chart.assert_awaited_once_with("AAPL", "1mo", "1d")

    @pytest.mark.asyncio
    async def test_empty_chart_raises_unavailable(self, mock_market_client) -> None:
        provider = MarketDataProvider(mock_market_client)
        with pytest.raises(DataUnavailable):
            await provider.get_series("NOPE")
        mock_market_client.chart.return_value = []
        with pytest.raises(DataUnavailable):
            await provider.get_series("NOPE")

    @pytest.mark.asyncio
    async def test_all_null_closes_unavailable(self, mock_market_client, make_bars) -> None:
        ts = make_bars([1.0])[0].timestamp
        mock_market_client.chart.return_value = [Bar(timestamp=ts, close=None)]
        with pytest.raises(DataUnavailable):
            await MarketDataProvider(mock_market_client).get_series("NULL")

    @pytest.mark.asyncio
    async def test_min_bars(self, mock_market_client, make_bars) -> None:
        mock_market_client.chart.return_value = make_bars([10.0] * 20)
        provider = MarketDataProvider(mock_market_client)
        with pytest.raises(InsufficientHistory) as excinfo:
            await provider.get_series("AAPL", min_bars=50)
        assert excinfo.value.required == 50
        assert excinfo.value.available == 20
        assert len(await provider.get_series("AAPL", min_bars=20)) == 20

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, mock_market_client) -> None:
        mock_market_client.chart.side_effect = MarketDataClientError("boom")
        with pytest.raises(MarketDataClientError):
            await MarketDataProvider(mock_market_client).get_series("AAPL")


class TestQuotes:
    @pytest.mark.asyncio
    async def test_missing_symbols_are_none(self, mock_market_client, sample_quote) -> None:
        mock_market_client.batch_quote.return_value = {"AAPL": sample_quote}
        quotes = await MarketDataProvider(mock_market_client).get_quotes(["AAPL", "ZZZZ"])
        assert quotes == {"AAPL": sample_quote, "ZZZZ": None}

    @pytest.mark.asyncio
    async def test_failed_batch_is_all_none(self, mock_market_client) -> None:
        mock_market_client.batch_quote.side_effect = MarketDataClientError("503")
        quotes = await MarketDataProvider(mock_market_client).get_quotes(["A", "B"])
        assert quotes == {"A": None, "B": None}

    @pytest.mark.asyncio
    async def test_single_quote(self, mock_market_client) -> None:
        mock_market_client.batch_quote.return_value = {"X": Quote(symbol="X", price=1.0)}
        quote = await MarketDataProvider(mock_market_client).get_quote("X")
        assert quote.price == 1.0


class TestHeadlinesAndFundamentals:
    @pytest.mark.asyncio
    async def test_headlines_truncated_and_blank_dropped(self, mock_market_client) -> None:
        mock_market_client.headlines.return_value = ["a", "", "b", "c"]
        headlines = await MarketDataProvider(mock_market_client).get_headlines("X", 2)
        assert headlines == ["a", "b"]

    @pytest.mark.asyncio
    async def test_headline_failure_is_empty(self, mock_market_client) -> None:
        mock_market_client.headlines.side_effect = MarketDataClientError("403")
        assert await MarketDataProvider(mock_market_client).get_headlines("X") == []

    @pytest.mark.asyncio
    async def test_fundamentals_errors_propagate(self, mock_market_client) -> None:
        mock_market_client.fundamentals.side_effect = MarketDataClientError("timeout")
        with pytest.raises(MarketDataClientError):
            await MarketDataProvider(mock_market_client).get_fundamentals("X")


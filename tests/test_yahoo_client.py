"""Tests for the Yahoo/Finviz client: pure parsers and the HTTP wrapper."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import pytest

from src.market.yahoo_client import (
    YahooMarketDataClient,
    parse_chart_response,
    parse_finviz_headlines,
    parse_fundamentals,
    parse_quote_response,
)
from src.models.errors import MarketDataClientError


# ── Fakes ────────────────────────────────────────────────────────────────────


class FakeResponse:
    def __init__(self, status: int = 200, payload: Any = None, text: str = "") -> None:
        self.status = status
        self._payload = payload
        self._text = text

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp.ClientConnectionError(f"HTTP {self.status}")

    async def json(self, content_type: str | None = None) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def text(self) -> str:
        return self._text


class FakeRequest:
    def __init__(self, outcome: Any) -> None:
        self._outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    async def __aexit__(self, *exc: Any) -> None:
        return None


class FakeSession:
    """Replays a list of responses (or exceptions) in order."""

    def __init__(self, outcomes: list[Any]) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, params: dict | None = None, timeout: Any = None) -> FakeRequest:
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return FakeRequest(self._outcomes.pop(0))

    async def close(self) -> None:
        self.closed = True


# ── Parsers ──────────────────────────────────────────────────────────────────


class TestParseQuote:
    def test_maps_requested_symbols(self) -> None:
        data = {
            "quoteResponse": {
                "result": [
                    {
                        "symbol": "AAPL",
                        "shortName": "Apple Inc.",
                        "regularMarketPrice": 190.0,
                        "regularMarketChangePercent": 1.5,
                        "marketCap": 3e12,
                        "forwardPE": 28.0,
                        "fiftyTwoWeekLow": 160.0,
                        "marketState": "REGULAR",
                    },
                    {"symbol": "EXTRA", "regularMarketPrice": 1.0},
                ]
            }
        }
        quotes = parse_quote_response(data, ["AAPL", "MSFT"])
        assert set(quotes) == {"AAPL", "MSFT"}
        assert quotes["MSFT"] is None
        aapl = quotes["AAPL"]
        assert aapl.name == "Apple Inc."
        assert aapl.price == 190.0
        assert aapl.pe == 28.0
        assert aapl.state == "REGULAR"

    def test_malformed_payload(self) -> None:
        assert parse_quote_response(None, ["A"]) == {"A": None}
        assert parse_quote_response({"quoteResponse": None}, ["A"]) == {"A": None}


class TestParseChart:
    def test_skips_null_closes(self) -> None:
        data = {
            "chart": {
                "result": [
                    {
                        "timestamp": [1704204000, 1704290400, 1704376800],
                        "indicators": {
                            "quote": [
                                {
                                    "open": [10.0, None, 12.0],
                                    "high": [11.0, None, 13.0],
                                    "low": [9.0, None, 11.0],
                                    "close": [10.5, None, 12.5],
                                    "volume": [100, None, None],
                                }
                            ]
                        },
                    }
                ]
            }
        }
        bars = parse_chart_response(data)
        assert [b.close for b in bars] == [10.5, 12.5]
        assert bars[1].volume == 0.0
        assert bars[0].timestamp.tzinfo is not None

    def test_no_result(self) -> None:
        assert parse_chart_response({"chart": {"result": None}}) is None
        assert parse_chart_response(None) is None


class TestParseFundamentals:
    def test_reads_raw_values(self) -> None:
        data = {
            "quoteSummary": {
                "result": [
                    {
                        "financialData": {
                            "revenueGrowth": {"raw": 0.2, "fmt": "20%"},
                            "grossMargins": {"raw": 0.45},
                            "returnOnEquity": {"raw": 0.3},
                            "debtToEquity": {"raw": 1.1},
                        },
                        "summaryDetail": {
                            "payoutRatio": {"raw": 0.4},
                            "dividendYield": {"raw": 0.035},
                            "marketCap": {"raw": 2e10},
                        },
                        "defaultKeyStatistics": {"forwardPE": {"raw": 14.0}},
                    }
                ]
            }
        }
        fund = parse_fundamentals(data)
        assert fund.revenue_growth == 0.2
        assert fund.dividend_yield == 0.035
        assert fund.market_cap == 2e10
        assert fund.forward_pe == 14.0
        assert fund.trailing_pe is None

    def test_empty(self) -> None:
        assert parse_fundamentals({"quoteSummary": {"result": []}}) is None


class TestParseFinviz:
    def test_news_link_anchors(self) -> None:
        page = (
            '<a class="tab-link-news" href="/a">Apple beats estimates</a>'
            '<a class="tab-link-news" href="/b">Shares &amp; options rally</a>'
        )
        assert parse_finviz_headlines(page) == [
            "Apple beats estimates",
            "Shares & options rally",
        ]

    def test_left_column_fallback(self) -> None:
        page = '<span class="news-link-left x"><a href="/x" class="news-link-left x">Left column story</a>'
        assert parse_finviz_headlines(page) == ["Left column story"]

    def test_table_fallback_and_limit(self) -> None:
        rows = "".join(f"<tr><td><a href='/{i}'>Long enough headline number {i}</a></td></tr>" for i in range(4))
        page = f'<table id="news" class="fullview-news-outer">{rows}</table>'
        assert parse_finviz_headlines(page, limit=2) == [
            "Long enough headline number 0",
            "Long enough headline number 1",
        ]

    def test_no_news(self) -> None:
        assert parse_finviz_headlines("<html></html>") == []


# ── HTTP wrapper ─────────────────────────────────────────────────────────────


class TestYahooClient:
    @pytest.mark.asyncio
    async def test_not_connected_raises(self, mock_settings) -> None:
        client = YahooMarketDataClient(mock_settings)
        with pytest.raises(MarketDataClientError):
            await client.chart("AAPL")

    @pytest.mark.asyncio
    async def test_batch_quote_request(self, mock_settings) -> None:
        payload = {"quoteResponse": {"result": [{"symbol": "AAPL", "regularMarketPrice": 1.0}]}}
        session = FakeSession([FakeResponse(payload=payload)])
        client = YahooMarketDataClient(mock_settings, session=session)
        quotes = await client.batch_quote(["AAPL", "MSFT"])
        assert quotes["AAPL"].price == 1.0
        call = session.calls[0]
        assert call["url"] == mock_settings.YAHOO_QUOTE_URL
        assert call["params"]["symbols"] == "AAPL,MSFT"
        assert call["timeout"].total == mock_settings.HTTP_TIMEOUT_SECONDS

    @pytest.mark.asyncio
    async def test_empty_batch_skips_request(self, mock_settings) -> None:
        session = FakeSession([])
        assert await YahooMarketDataClient(mock_settings, session=session).batch_quote([]) == {}
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_client_error_status_returns_none(self, mock_settings) -> None:
        session = FakeSession([FakeResponse(status=404)])
        client = YahooMarketDataClient(mock_settings, session=session)
        assert await client.chart("NOPE") is None
        assert len(session.calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_retried_then_succeeds(self, mock_settings) -> None:
        chart = {
            "chart": {
                "result": [
                    {
                        "timestamp": [1704204000],
                        "indicators": {"quote": [{"close": [10.0]}]},
                    }
                ]
            }
        }
        session = FakeSession([FakeResponse(status=503), FakeResponse(payload=chart)])
        client = YahooMarketDataClient(mock_settings, session=session)
        bars = await client.chart("AAPL", "1y", "1d")
        assert len(bars) == 1
        assert len(session.calls) == 2
        assert session.calls[0]["url"].endswith("/AAPL")
        assert session.calls[0]["timeout"].total == mock_settings.CHART_TIMEOUT_SECONDS

    @pytest.mark.asyncio
    async def test_timeout_exhausts_retries(self, mock_settings) -> None:
        session = FakeSession([asyncio.TimeoutError(), asyncio.TimeoutError()])
        client = YahooMarketDataClient(mock_settings, session=session)
        with pytest.raises(MarketDataClientError, match="timed out"):
            await client.fundamentals("AAPL")
        assert len(session.calls) == mock_settings.FETCH_MAX_ATTEMPTS

    @pytest.mark.asyncio
    async def test_malformed_json(self, mock_settings) -> None:
        session = FakeSession([FakeResponse(payload=ValueError("bad json"))])
        client = YahooMarketDataClient(mock_settings, session=session)
        with pytest.raises(MarketDataClientError, match="malformed"):
            await client.batch_quote(["AAPL"])

    @pytest.mark.asyncio
    async def test_headlines_use_text(self, mock_settings) -> None:
        page = '<a class="tab-link-news" href="/a">Apple beats estimates</a>'
        session = FakeSession([FakeResponse(text=page)])
        client = YahooMarketDataClient(mock_settings, session=session)
        assert await client.headlines("AAPL") == ["Apple beats estimates"]
        assert session.calls[0]["params"] == {"t": "AAPL"}

    @pytest.mark.asyncio
    async def test_injected_session_not_closed(self, mock_settings) -> None:
        session = FakeSession([])
        client = YahooMarketDataClient(mock_settings, session=session)
        await client.close()
        assert not session.closed

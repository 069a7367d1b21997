"""MarketLens engine: wires the data client, analytics and scanners together."""

from __future__ import annotations

import pandas as pd
from loguru import logger

from src.analytics.analysis import (
    SNAPSHOT_SYMBOLS,
    analyze_series,
    build_chart,
    build_quote_result,
    build_snapshot,
)
from src.analytics.backtest import backtest_rsi, invalid_thresholds, threshold_error
from src.config.settings import Settings
from src.data.market_data import MarketDataProvider
from src.market.base_client import BaseMarketDataClient
from src.market.yahoo_client import YahooMarketDataClient
from src.models.errors import DataUnavailable, MarketDataClientError
from src.models.results import (
    AnalysisResult,
    BacktestResult,
    ChartResult,
    IdeaBuckets,
    MarketSnapshot,
    QuoteResult,
    ScanResult,
    SentimentResult,
)
from src.scanner.market_scanner import MarketScanner
from src.scanner.sentiment import SentimentScanner


class MarketLensEngine:
    """Facade over every MarketLens operation.

    Use as an async context manager so the HTTP session is opened once and
    always closed::

        async with MarketLensEngine(settings) as engine:
            result = await engine.analyze("AAPL")

    Single-symbol operations never raise for missing or short data; they
    return a tagged result instead.
    """

    def __init__(
        self,
        settings: Settings,
        client: BaseMarketDataClient | None = None,
        watchlist: list[str] | None = None,
    ) -> None:
        self.settings = settings
        self.client = client or YahooMarketDataClient(settings)
        self.market_data = MarketDataProvider(self.client)
        self.scanner = MarketScanner(self.market_data, settings, watchlist)
        self.sentiment_scanner = SentimentScanner(self.market_data, settings)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Open the market-data session."""
        await self.client.connect()
        logger.debug("MarketLens engine started")

    async def stop(self) -> None:
        """Close the market-data session."""
        await self.client.close()
        logger.debug("MarketLens engine stopped")

    async def __aenter__(self) -> "MarketLensEngine":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # ── Single symbol ─────────────────────────────────────────────────────────

    async def quote(self, symbol: str) -> QuoteResult:
        """Look up the latest quote for *symbol*."""
        symbol = symbol.upper()
        return build_quote_result(symbol, await self.market_data.get_quote(symbol))

    async def analyze(self, symbol: str) -> AnalysisResult:
        """Full quant analysis over ``ANALYSIS_RANGE`` of daily bars."""
        symbol = symbol.upper()
        df = await self._series(symbol, self.settings.ANALYSIS_RANGE)
        return analyze_series(symbol, df)

    async def chart(self, symbol: str, range_: str | None = None) -> ChartResult:
        """OHLCV + overlay arrays for chart rendering."""
        symbol = symbol.upper()
        range_ = range_ or self.settings.CHART_RANGE
        df = await self._series(symbol, range_)
        return build_chart(symbol, df, range_)

    async def backtest(
        self,
        symbol: str,
        buy_threshold: float | None = None,
        sell_threshold: float | None = None,
    ) -> BacktestResult:
        """Backtest the RSI threshold rule over ``BACKTEST_RANGE`` of daily bars."""
        symbol = symbol.upper()
        buy = self.settings.BACKTEST_RSI_BUY if buy_threshold is None else buy_threshold
        sell = self.settings.BACKTEST_RSI_SELL if sell_threshold is None else sell_threshold
        error = threshold_error(buy, sell)
        if error:
            logger.warning("Backtest {} rejected: {}", symbol, error)
            return invalid_thresholds(symbol, buy, sell, error)
        df = await self._series(symbol, self.settings.BACKTEST_RANGE)
        return backtest_rsi(df, buy, sell, symbol)

    async def sentiment(self, symbol: str) -> SentimentResult:
        """Keyword sentiment over recent headlines."""
        return await self.sentiment_scanner.get_sentiment(symbol)

    async def snapshot(self) -> MarketSnapshot:
        """Broad market snapshot: indices or futures, macro, crypto."""
        quotes = await self.market_data.get_quotes(SNAPSHOT_SYMBOLS)
        return build_snapshot(quotes)

    # ── Watchlist scans ───────────────────────────────────────────────────────

    async def momentum_scan(self, n: int | None = None) -> list[ScanResult]:
        return await self.scanner.momentum_scan(n)

    async def dislocation_scan(self, n: int | None = None) -> list[ScanResult]:
        return await self.scanner.dislocation_scan(n)

    async def moonshot_scan(self, limit: int | None = None) -> list[ScanResult]:
        return await self.scanner.moonshot_scan(limit)

    async def generate_ideas(self, per_bucket: int | None = None) -> IdeaBuckets:
        return await self.scanner.generate_ideas(per_bucket)

    # ── Internal ──────────────────────────────────────────────────────────────

    async def _series(self, symbol: str, range_: str) -> pd.DataFrame | None:
        """Fetch daily bars; ``None`` when the provider has nothing usable."""
        try:
            return await self.market_data.get_series(symbol, range_, "1d")
        except DataUnavailable as exc:
            logger.debug("{}", exc)
            return None
        except MarketDataClientError as exc:
            logger.warning("Chart fetch for {} failed: {}", symbol, exc)
            return None

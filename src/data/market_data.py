"""Market data provider for MarketLens."""

from __future__ import annotations

import pandas as pd
from loguru import logger

from src.market.base_client import BaseMarketDataClient
from src.models.bar import bars_to_frame
from src.models.errors import DataUnavailable, InsufficientHistory, MarketDataClientError
from src.models.quote import Fundamentals, Quote


class MarketDataProvider:
    """Fetches market data from the client and normalises it.

    Series come back as validated OHLCV DataFrames (UTC index, ascending,
    no duplicate timestamps).  Nothing is cached between calls.
    """

    def __init__(self, client: BaseMarketDataClient) -> None:
        self.client = client

    async def get_series(
        self,
        symbol: str,
        range_: str = "6mo",
        interval: str = "1d",
        min_bars: int = 0,
    ) -> pd.DataFrame:
        """Fetch bars for *symbol* and return them as a DataFrame.

        Args:
            symbol: Ticker symbol (e.g. "AAPL").
            range_: Provider range string ("1mo", "1y", "5y", ...).
            interval: Bar interval (e.g. "1d").
            min_bars: Minimum number of bars the caller needs.

        Returns:
            DataFrame with columns: open, high, low, close, volume.

        Raises:
            DataUnavailable: The provider returned nothing.
            InsufficientHistory: Fewer than *min_bars* bars came back.
            MarketDataClientError: Transport failure after retries.
        """
        bars = await self.client.chart(symbol, range_, interval)
        if not bars:
            raise DataUnavailable(symbol, f"empty {range_} chart")

        df = bars_to_frame(bars)
        if df.empty:
            raise DataUnavailable(symbol, "no bars with a close")
        if len(df) < min_bars:
            raise InsufficientHistory(symbol, min_bars, len(df))

        logger.debug("Fetched {} bars for {} ({}, {})", len(df), symbol, range_, interval)
        return df

    async def get_quotes(self, symbols: list[str]) -> dict[str, Quote | None]:
        """Batch-quote *symbols*; a failed batch yields ``None`` for every symbol."""
        try:
            quotes = await self.client.batch_quote(symbols)
        except MarketDataClientError as exc:
            logger.warning("Quote batch of {} symbols failed: {}", len(symbols), exc)
            return {s: None for s in symbols}
        return {s: quotes.get(s) for s in symbols}

    async def get_quote(self, symbol: str) -> Quote | None:
        """Return a single quote, or ``None``."""
        return (await self.get_quotes([symbol])).get(symbol)

    async def get_fundamentals(self, symbol: str) -> Fundamentals | None:
        """Return key statistics; transport errors propagate to the caller."""
        return await self.client.fundamentals(symbol)

    async def get_headlines(self, symbol: str, limit: int = 10) -> list[str]:
        """Return up to *limit* headlines; a failed fetch yields an empty list."""
        try:
            headlines = await self.client.headlines(symbol, limit)
        except MarketDataClientError as exc:
            logger.warning("Headline fetch for {} failed: {}", symbol, exc)
            return []
        return [h for h in headlines if h][:limit]

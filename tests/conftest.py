"""Shared pytest fixtures for MarketLens tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Sequence
from unittest.mock import AsyncMock

import numpy as np
import pandas as pd
import pytest

from src.config.settings import Settings
from src.market.base_client import BaseMarketDataClient
from src.models.bar import Bar, bars_to_frame
from src.models.quote import Quote

START = datetime(2023, 1, 2, 21, 0, tzinfo=timezone.utc)


def _make_bars(
    closes: Sequence[float],
    volumes: Sequence[float] | None = None,
    start: datetime = START,
    spread: float = 1.0,
) -> list[Bar]:
    volumes = volumes if volumes is not None else [1_000_000.0] * len(closes)
    return [
        Bar(
            timestamp=start + timedelta(days=i),
            open=float(c),
            high=float(c) + spread,
            low=float(c) - spread,
            close=float(c),
            volume=float(v),
        )
        for i, (c, v) in enumerate(zip(closes, volumes))
    ]


@pytest.fixture
def mock_settings() -> Settings:
    """Return a Settings object with safe test defaults."""
    return Settings(
        WATCHLIST=["AAPL", "MSFT"],
        FETCH_MAX_ATTEMPTS=2,
        FETCH_RETRY_DELAY=0.0,
        SCANNER_MAX_CONCURRENCY=4,
        LOG_LEVEL="DEBUG",
        LOG_FILE="logs/test_marketlens.log",
    )


@pytest.fixture
def make_bars() -> Callable[..., list[Bar]]:
    """Factory: closes (+ optional volumes) -> daily bars starting 2023-01-02."""
    return _make_bars


@pytest.fixture
def make_frame() -> Callable[..., pd.DataFrame]:
    """Factory: closes (+ optional volumes) -> validated OHLCV DataFrame."""

    def factory(
        closes: Sequence[float],
        volumes: Sequence[float] | None = None,
        spread: float = 1.0,
    ) -> pd.DataFrame:
        return bars_to_frame(_make_bars(closes, volumes, spread=spread))

    return factory


@pytest.fixture
def sample_df() -> pd.DataFrame:
    """Create a 300-bar random-walk OHLCV DataFrame for testing."""
    np.random.seed(42)
    n = 300
    close = np.cumsum(np.random.randn(n)) + 100
    index = pd.date_range("2023-01-02", periods=n, freq="D", tz="UTC", name="timestamp")
    return pd.DataFrame(
        {
            "open": close + np.random.randn(n) * 0.5,
            "high": close + abs(np.random.randn(n)),
            "low": close - abs(np.random.randn(n)),
            "close": close,
            "volume": np.random.randint(1000, 10000, n).astype(float),
        },
        index=index,
    )


@pytest.fixture
def linear_closes() -> np.ndarray:
    """300 closes rising linearly from 100 to 400."""
    return np.linspace(100.0, 400.0, 300)


@pytest.fixture
def sample_quote() -> Quote:
    """Return a sample AAPL quote."""
    return Quote(
        symbol="AAPL",
        name="Apple Inc.",
        price=185.5,
        change_pct=1.234,
        prev_close=183.24,
        change=2.26,
        volume=52_000_000,
        market_cap=2.9e12,
        forward_pe=28.4,
        trailing_pe=30.1,
        fifty_two_week_high=199.6,
        fifty_two_week_low=164.1,
        dividend_yield=0.005,
        eps=6.13,
        state="REGULAR",
    )


@pytest.fixture
def mock_market_client() -> AsyncMock:
    """Return an AsyncMock of BaseMarketDataClient with empty defaults."""
    client = AsyncMock(spec=BaseMarketDataClient)
    client.batch_quote.return_value = {}
    client.chart.return_value = None
    client.fundamentals.return_value = None
    client.headlines.return_value = []
    return client

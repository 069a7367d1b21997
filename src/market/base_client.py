"""Abstract market-data client interface for MarketLens."""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.bar import Bar
from src.models.quote import Fundamentals, Quote


class BaseMarketDataClient(ABC):
    """Abstract base class that every market-data adapter must implement.

    Adapters return ``None`` (or an empty list) for "no data" and raise
    :class:`~src.models.errors.MarketDataClientError` on transport failure.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the HTTP session."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the HTTP session."""
        ...

    @abstractmethod
    async def batch_quote(self, symbols: list[str]) -> dict[str, Quote | None]:
        """Return a quote per requested symbol (``None`` when missing)."""
        ...

    @abstractmethod
    async def chart(
        self, symbol: str, range_: str = "6mo", interval: str = "1d"
    ) -> list[Bar] | None:
        """Return OHLCV bars for *symbol*, or ``None`` if the provider has none."""
        ...

    @abstractmethod
    async def fundamentals(self, symbol: str) -> Fundamentals | None:
        """Return key statistics for *symbol*."""
        ...

    @abstractmethod
    async def headlines(self, symbol: str, limit: int = 10) -> list[str]:
        """Return up to *limit* recent news headlines for *symbol*."""
        ...

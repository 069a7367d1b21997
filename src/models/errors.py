"""Error taxonomy for MarketLens.

Top-level operations translate these into tagged results instead of
letting them escape; inside batch scans they mark a skipped symbol.
"""

from __future__ import annotations


class MarketLensError(Exception):
    """Base class for every MarketLens error."""


class DataUnavailable(MarketLensError):
    """The provider returned nothing (missing or empty response)."""

    def __init__(self, symbol: str, detail: str = "") -> None:
        self.symbol = symbol
        message = f"No data for {symbol}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InsufficientHistory(MarketLensError):
    """The series is shorter than the operation's minimum length."""

    def __init__(self, symbol: str, required: int, available: int) -> None:
        self.symbol = symbol
        self.required = required
        self.available = available
        super().__init__(
            f"Not enough data for {symbol}: need {required} bars, got {available}"
        )


class ComputationSkipped(MarketLensError):
    """A symbol was dropped from a batch scan after a fetch/compute failure."""

    def __init__(self, symbol: str, reason: str) -> None:
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"{symbol} skipped: {reason}")


class MarketDataClientError(MarketLensError):
    """Raised when a market-data HTTP call fails."""

    def __init__(self, message: str, original: Exception | None = None):
        super().__init__(message)
        self.original = original

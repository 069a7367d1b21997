"""Data model package for MarketLens."""

from src.models.bar import Bar, bars_to_frame
from src.models.quote import Fundamentals, Quote
from src.models.results import (
    AnalysisResult,
    BacktestResult,
    BacktestTrade,
    ChartResult,
    IdeaBuckets,
    MarketSnapshot,
    QuantStats,
    QuoteResult,
    ResultStatus,
    ScanResult,
    SentimentResult,
)

__all__ = [
    "AnalysisResult",
    "BacktestResult",
    "BacktestTrade",
    "Bar",
    "ChartResult",
    "Fundamentals",
    "IdeaBuckets",
    "MarketSnapshot",
    "QuantStats",
    "Quote",
    "QuoteResult",
    "ResultStatus",
    "ScanResult",
    "SentimentResult",
    "bars_to_frame",
]

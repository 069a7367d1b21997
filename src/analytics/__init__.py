"""Analytics package for MarketLens."""

from src.analytics.analysis import analyze_series, build_chart, build_quote_result, build_snapshot
from src.analytics.backtest import backtest_rsi
from src.analytics.patterns import classify_verdict, detect_patterns
from src.analytics.statistics import quant_stats

__all__ = [
    "analyze_series",
    "backtest_rsi",
    "build_chart",
    "build_quote_result",
    "build_snapshot",
    "classify_verdict",
    "detect_patterns",
    "quant_stats",
]

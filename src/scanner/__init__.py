"""Market scanner & sentiment package for MarketLens.

Provides:
- ``MarketScanner``: momentum / dislocation / moonshot scans and idea buckets
- ``SentimentScanner``: keyword-polarity headline sentiment
"""

from src.scanner.market_scanner import MarketScanner
from src.scanner.sentiment import SentimentScanner

__all__ = ["MarketScanner", "SentimentScanner"]

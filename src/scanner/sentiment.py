"""Headline sentiment via keyword-polarity scoring.

Each headline is lower-cased and every positive keyword it contains adds
one point, every negative keyword subtracts one.  Matching is by
substring, so "rise" also counts inside "rises" and "sunrise".  The summed
score maps to one of five bands.
"""

from __future__ import annotations

from typing import Iterable

from loguru import logger

from src.config.settings import Settings
from src.data.market_data import MarketDataProvider
from src.models.results import SentimentResult
from src.models.signals import SentimentBand

POSITIVE_WORDS: tuple[str, ...] = (
    "beat", "surge", "rally", "win", "profit", "outperform", "soars", "growth",
    "record", "raise", "strong", "bull", "gain", "jump", "rise", "boost",
    "climb", "beats", "outlook", "upgrade",
)

NEGATIVE_WORDS: tuple[str, ...] = (
    "miss", "drop", "loss", "plunge", "warn", "weak", "lawsuit", "down", "cut",
    "investigation", "probe", "sell", "bear", "falls", "crash", "tumble",
    "slump", "dip", "slide", "disappoint", "downgrade",
)

KEPT_HEADLINES = 5


def score_headline(headline: str) -> int:
    """Polarity of a single headline."""
    text = headline.lower()
    positive = sum(1 for w in POSITIVE_WORDS if w in text)
    negative = sum(1 for w in NEGATIVE_WORDS if w in text)
    return positive - negative


def score_headlines(headlines: Iterable[str]) -> int:
    """Summed polarity over all headlines."""
    return sum(score_headline(h) for h in headlines)


def classify_score(score: int) -> SentimentBand:
    """Map an integer score onto the five sentiment bands."""
    if score > 2:
        return SentimentBand.VERY_POSITIVE
    if score > 0:
        return SentimentBand.SLIGHTLY_POSITIVE
    if score == 0:
        return SentimentBand.NEUTRAL
    if score > -2:
        return SentimentBand.SLIGHTLY_NEGATIVE
    return SentimentBand.VERY_NEGATIVE


class SentimentScanner:
    """Fetch headlines for a symbol and score them."""

    def __init__(self, market_data: MarketDataProvider, settings: Settings) -> None:
        self.market_data = market_data
        self.settings = settings

    async def get_sentiment(self, symbol: str) -> SentimentResult:
        """Score up to ``HEADLINE_LIMIT`` recent headlines for *symbol*.

        No headlines is reported as the ``NO_DATA`` band with score 0,
        not as an error.
        """
        symbol = symbol.upper()
        headlines = await self.market_data.get_headlines(
            symbol, self.settings.HEADLINE_LIMIT
        )
        if not headlines:
            logger.debug("No headlines for {}", symbol)
            return SentimentResult(symbol=symbol, score=0, band=SentimentBand.NO_DATA)

        score = score_headlines(headlines)
        logger.debug("Sentiment {} | {} headlines | score={}", symbol, len(headlines), score)
        return SentimentResult(
            symbol=symbol,
            score=score,
            band=classify_score(score),
            headlines=headlines[:KEPT_HEADLINES],
        )

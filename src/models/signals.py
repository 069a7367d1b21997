"""Enumerations shared by the detector, backtester and sentiment scanner."""

from __future__ import annotations

from enum import Enum


class PatternSignal(str, Enum):
    """Qualitative signal extracted from the latest indicator values."""

    GOLDEN_CROSS = "golden_cross"
    DEATH_CROSS = "death_cross"
    RSI_OVERBOUGHT = "rsi_overbought"
    RSI_OVERSOLD = "rsi_oversold"
    UPPER_BAND_TOUCH = "upper_band_touch"
    LOWER_BAND_TOUCH = "lower_band_touch"
    MACD_BULLISH_CROSS = "macd_bullish_cross"
    MACD_BEARISH_CROSS = "macd_bearish_cross"
    TWENTY_DAY_HIGH = "twenty_day_high"
    TWENTY_DAY_LOW = "twenty_day_low"


class Verdict(str, Enum):
    """Coarse bucket from (Sharpe, max drawdown)."""

    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"


class TradeSide(str, Enum):
    """Backtest trade direction."""

    BUY = "BUY"
    SELL = "SELL"


class SentimentBand(str, Enum):
    """Five qualitative bands plus the explicit no-data state."""

    VERY_POSITIVE = "very_positive"
    SLIGHTLY_POSITIVE = "slightly_positive"
    NEUTRAL = "neutral"
    SLIGHTLY_NEGATIVE = "slightly_negative"
    VERY_NEGATIVE = "very_negative"
    NO_DATA = "no_data"

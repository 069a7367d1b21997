"""Rule-based pattern detection and the coarse verdict classifier.

Every rule compares the latest bar with the previous one.  Rules whose
inputs are still in warm-up are skipped rather than evaluated against a
placeholder.
"""

from __future__ import annotations

import pandas as pd

from src.data.indicators import value_at
from src.models.results import Pattern
from src.models.signals import PatternSignal, Verdict

RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0
BREAKOUT_WINDOW = 20

BULLISH_MIN_SHARPE = 1.2
BULLISH_MIN_DRAWDOWN = -0.3
BEARISH_MAX_SHARPE = 0.3
BEARISH_MAX_DRAWDOWN = -0.4


def _crossed_above(prev_a, prev_b, last_a, last_b) -> bool:
    if None in (prev_a, prev_b, last_a, last_b):
        return False
    return prev_a < prev_b and last_a > last_b


def detect_patterns(frame: pd.DataFrame) -> list[Pattern]:
    """Extract qualitative signals from an indicator frame.

    Args:
        frame: Output of :func:`src.data.indicators.indicator_frame`.

    Returns:
        Detected patterns, in a fixed evaluation order.
    """
    patterns: list[Pattern] = []
    if len(frame) < 2:
        return patterns

    def last(col: str) -> float | None:
        return value_at(frame[col], -1)

    def prev(col: str) -> float | None:
        return value_at(frame[col], -2)

    # Moving-average crosses
    if _crossed_above(prev("sma50"), prev("sma200"), last("sma50"), last("sma200")):
        patterns.append(Pattern(PatternSignal.GOLDEN_CROSS))
    if _crossed_above(prev("sma200"), prev("sma50"), last("sma200"), last("sma50")):
        patterns.append(Pattern(PatternSignal.DEATH_CROSS))

    # RSI extremes
    rsi_now = last("rsi")
    if rsi_now is not None:
        if rsi_now > RSI_OVERBOUGHT:
            patterns.append(Pattern(PatternSignal.RSI_OVERBOUGHT, rsi_now))
        if rsi_now < RSI_OVERSOLD:
            patterns.append(Pattern(PatternSignal.RSI_OVERSOLD, rsi_now))

    # Bollinger touches
    price = last("close")
    upper, lower = last("bb_upper"), last("bb_lower")
    if price is not None and upper is not None and price >= upper:
        patterns.append(Pattern(PatternSignal.UPPER_BAND_TOUCH, price))
    if price is not None and lower is not None and price <= lower:
        patterns.append(Pattern(PatternSignal.LOWER_BAND_TOUCH, price))

    # MACD crossovers
    if _crossed_above(prev("macd"), prev("macd_signal"), last("macd"), last("macd_signal")):
        patterns.append(Pattern(PatternSignal.MACD_BULLISH_CROSS))
    if _crossed_above(prev("macd_signal"), prev("macd"), last("macd_signal"), last("macd")):
        patterns.append(Pattern(PatternSignal.MACD_BEARISH_CROSS))

    # 20-bar high / low
    if price is not None:
        recent = frame["close"].iloc[-BREAKOUT_WINDOW:].dropna()
        if price >= float(recent.max()):
            patterns.append(Pattern(PatternSignal.TWENTY_DAY_HIGH, price))
        if price <= float(recent.min()):
            patterns.append(Pattern(PatternSignal.TWENTY_DAY_LOW, price))

    return patterns


def classify_verdict(sharpe: float | None, max_drawdown: float | None) -> Verdict:
    """Map (Sharpe, max drawdown) onto bullish / neutral / bearish."""
    if sharpe is None or max_drawdown is None:
        return Verdict.NEUTRAL
    if sharpe > BULLISH_MIN_SHARPE and max_drawdown > BULLISH_MIN_DRAWDOWN:
        return Verdict.BULLISH
    if sharpe < BEARISH_MAX_SHARPE and max_drawdown < BEARISH_MAX_DRAWDOWN:
        return Verdict.BEARISH
    return Verdict.NEUTRAL

"""Single-symbol operations: full analysis, quote, chart payload, market snapshot.

Everything here is pure: the engine fetches data and hands it over, these
functions turn it into tagged results.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pandas as pd

from src.analytics.patterns import classify_verdict, detect_patterns
from src.analytics.statistics import quant_stats
from src.data.indicators import indicator_frame, latest, value_at
from src.models.quote import Quote
from src.models.results import (
    AnalysisResult,
    ChartResult,
    MarketSnapshot,
    QuoteResult,
    SnapshotItem,
    Technicals,
)

MIN_ANALYSIS_BARS = 50
MIN_CHART_BARS = 5
VOLUME_WINDOW = 20

# ── Snapshot universe ────────────────────────────────────────────────────────

INDEX_SYMBOLS = ["^GSPC", "^NDX", "^DJI"]
FUTURES_SYMBOLS = ["ES=F", "NQ=F", "YM=F"]
MACRO_SYMBOLS = ["CL=F", "GC=F", "^TNX", "DX-Y.NYB"]
CRYPTO_SYMBOLS = ["BTC-USD", "ETH-USD", "SOL-USD"]
SNAPSHOT_SYMBOLS = INDEX_SYMBOLS + FUTURES_SYMBOLS + MACRO_SYMBOLS + CRYPTO_SYMBOLS
SESSION_REFERENCE = "^GSPC"


# ── Analysis ─────────────────────────────────────────────────────────────────


def analyze_series(symbol: str, df: pd.DataFrame | None) -> AnalysisResult:
    """Run statistics, indicators, patterns and verdict over one series.

    Args:
        symbol: Ticker label.
        df: OHLCV DataFrame (normally two years of daily bars).

    Returns:
        An :class:`AnalysisResult`; ``INSUFFICIENT_HISTORY`` below 50 bars.
    """
    if df is None or df.empty:
        return AnalysisResult.unavailable(symbol)
    if len(df) < MIN_ANALYSIS_BARS:
        return AnalysisResult.insufficient(symbol)

    stats = quant_stats(df)
    frame = indicator_frame(df)

    volumes = df["volume"].to_numpy(dtype=float)
    avg_volume = float(volumes[-VOLUME_WINDOW:].mean())
    vol_ratio = round(volumes[-1] / avg_volume, 2) if avg_volume > 0 else 0.0

    technicals = Technicals(
        rsi=latest(frame["rsi"]),
        adx=latest(frame["adx"]),
        atr=latest(frame["atr"]),
        macd=latest(frame["macd"]),
        macd_signal=latest(frame["macd_signal"]),
        sma50=value_at(frame["sma50"], -1),
        sma200=value_at(frame["sma200"], -1),
        bb_upper=latest(frame["bb_upper"]),
        bb_lower=latest(frame["bb_lower"]),
        vol_ratio=float(vol_ratio),
    )

    return AnalysisResult(
        symbol=symbol,
        price=float(df["close"].iloc[-1]),
        stats=stats,
        technicals=technicals,
        patterns=detect_patterns(frame),
        verdict=classify_verdict(stats.sharpe, stats.max_drawdown),
    )


def build_quote_result(symbol: str, quote: Quote | None) -> QuoteResult:
    """Wrap a provider quote; a missing quote or price is ``DATA_UNAVAILABLE``."""
    if quote is None or quote.price is None:
        return QuoteResult.unavailable(symbol)
    return QuoteResult(symbol=symbol, quote=quote)


def _as_list(series: pd.Series) -> list[float | None]:
    return [None if pd.isna(v) else float(v) for v in series]


def build_chart(symbol: str, df: pd.DataFrame | None, range_: str = "6mo") -> ChartResult:
    """Build OHLCV arrays plus overlay indicators for a price chart.

    Indicator arrays keep their warm-up entries as ``None`` so every array
    has the same length as ``dates``.
    """
    if df is None or len(df) < MIN_CHART_BARS:
        return ChartResult.unavailable(symbol, f"No chart data for {symbol}")

    frame = indicator_frame(df)
    payload: dict[str, Any] = {
        "dates": [ts.isoformat() for ts in df.index],
        "open": _as_list(df["open"]),
        "high": _as_list(df["high"]),
        "low": _as_list(df["low"]),
        "close": _as_list(df["close"]),
        "volume": _as_list(df["volume"]),
        "sma50": _as_list(frame["sma50"]),
        "sma200": _as_list(frame["sma200"]),
        "rsi": _as_list(frame["rsi"]),
        "bb": {
            "upper": _as_list(frame["bb_upper"]),
            "middle": _as_list(frame["bb_middle"]),
            "lower": _as_list(frame["bb_lower"]),
        },
        "macd": {
            "macd": _as_list(frame["macd"]),
            "signal": _as_list(frame["macd_signal"]),
            "histogram": _as_list(frame["macd_hist"]),
        },
    }
    return ChartResult(symbol=symbol, range=range_, payload=payload)


# ── Market snapshot ──────────────────────────────────────────────────────────


def _snapshot_items(symbols: list[str], quotes: dict[str, Quote | None]) -> list[SnapshotItem]:
    items: list[SnapshotItem] = []
    for sym in symbols:
        quote = quotes.get(sym)
        if quote is None or quote.change_pct is None:
            continue
        items.append(
            SnapshotItem(
                symbol=sym,
                name=quote.name,
                price=quote.price,
                change_pct=round(quote.change_pct, 2),
            )
        )
    return items


def classify_mood(average_move: float) -> str:
    """Describe the average index move (in percent) in words."""
    if average_move >= 0.6:
        return "solidly higher"
    if average_move >= 0.2:
        return "slightly higher"
    if average_move > -0.2:
        return "little changed"
    if average_move > -0.6:
        return "slightly lower"
    return "under pressure"


def build_snapshot(
    quotes: dict[str, Quote | None],
    timestamp: datetime | None = None,
) -> MarketSnapshot:
    """Summarise indices (or futures outside the cash session), macro and crypto.

    Args:
        quotes: Quotes keyed by symbol, normally for ``SNAPSHOT_SYMBOLS``.
        timestamp: Snapshot time; defaults to now (UTC).

    Returns:
        A :class:`MarketSnapshot`.
    """
    reference = quotes.get(SESSION_REFERENCE)
    market_state = (reference.state if reference else None) or "CLOSED"
    is_cash_session = market_state == "REGULAR"

    indices = _snapshot_items(
        INDEX_SYMBOLS if is_cash_session else FUTURES_SYMBOLS, quotes
    )
    moves = [item.change_pct for item in indices]
    average_move = sum(moves) / len(moves) if moves else 0.0

    return MarketSnapshot(
        timestamp=timestamp or datetime.now(timezone.utc),
        market_state=market_state,
        is_cash_session=is_cash_session,
        mood=classify_mood(average_move),
        indices=indices,
        macro=_snapshot_items(MACRO_SYMBOLS, quotes),
        crypto=_snapshot_items(CRYPTO_SYMBOLS, quotes),
    )

"""Pure scoring rules for the watchlist scans.

Each ``score_*`` function takes already-fetched data for one symbol and
returns a :class:`ScanResult`, or ``None`` when the symbol fails the
strategy's filters.  Ranking is done by :func:`rank`, after every symbol
has been scored.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np
import pandas as pd

from src.data.indicators import adx, latest, rsi
from src.models.quote import Fundamentals, Quote
from src.models.results import ScanResult

# ── Momentum ─────────────────────────────────────────────────────────────────

# (label, lookback in bars, weight)
LOOKBACKS: list[tuple[str, int, float]] = [
    ("r1m", 21, 0.1),
    ("r3m", 63, 0.2),
    ("r6m", 126, 0.3),
    ("r12m", 252, 0.4),
]
MOMENTUM_MIN_BARS = 60
MIN_PRICE = 5.0
VOLUME_WINDOW = 20
VOLUME_Z_CAP = 3.0
VOLUME_Z_WEIGHT = 0.15
PROXIMITY_WINDOW = 252
PROXIMITY_PIVOT = 0.95
PROXIMITY_WEIGHT = 2.0
ADX_TREND_LEVEL = 20.0
ADX_BONUS = 0.05
RSI_EXTREME_PENALTY = 0.05
RSI_HIGH = 80.0
RSI_LOW = 20.0
NEUTRAL_RSI = 50.0

# ── Dislocation / value ──────────────────────────────────────────────────────

DISLOCATION_PE_RANGE = (2.0, 80.0)
DISLOCATION_MAX_MARKET_CAP = 5e11
VALUE_PE_RANGE = (3.0, 60.0)
VALUE_MIN_MARKET_CAP = 1e9

# ── Moonshot ─────────────────────────────────────────────────────────────────

MOONSHOT_MIN_BARS = 10
MOONSHOT_MAX_MOVE_PCT = 4.0
MOONSHOT_MIN_VOL_RATIO = 2.0
MOONSHOT_BREAKOUT_WINDOW = 10
MOONSHOT_BREAKOUT_RATIO = 0.95

# ── Ideas ────────────────────────────────────────────────────────────────────

IDEA_MIN_ADV = 2_000_000
QUALITY_MIN_REVENUE_GROWTH = 0.15
QUALITY_MIN_GROSS_MARGIN = 0.40
QUALITY_MIN_ROE = 0.15
QUALITY_MAX_DEBT_TO_EQUITY = 2.0
QUALITY_LEVERAGE_PENALTY_ABOVE = 1.5
QUALITY_MARKET_CAP_RANGE = (5e8, 5e11)
INCOME_MIN_YIELD = 0.03
INCOME_MAX_PAYOUT = 0.8


# ── Building blocks ──────────────────────────────────────────────────────────


def trailing_return(closes: np.ndarray, bars: int) -> float | None:
    """Return ``last / closes[-1 - bars] - 1``, or ``None`` if history is too short."""
    if len(closes) <= bars:
        return None
    base = closes[-1 - bars]
    if base <= 0:
        return None
    return float(closes[-1] / base - 1.0)


def multi_timeframe_returns(closes: np.ndarray) -> dict[str, float | None]:
    """Trailing returns at the 1/3/6/12-month lookbacks."""
    return {label: trailing_return(closes, bars) for label, bars, _ in LOOKBACKS}


def composite_momentum(returns: dict[str, float | None]) -> float | None:
    """Weighted blend of the available returns.

    Weights are renormalised over the lookbacks that exist, so a short
    history drops the long lookbacks instead of scoring them as zero.
    """
    total = 0.0
    weight_sum = 0.0
    for label, _, weight in LOOKBACKS:
        value = returns.get(label)
        if value is None:
            continue
        total += value * weight
        weight_sum += weight
    if weight_sum == 0:
        return None
    return total / weight_sum


def volume_zscore(volumes: np.ndarray, window: int = VOLUME_WINDOW) -> float:
    """Z-score of the last volume against the trailing window (population std)."""
    recent = np.asarray(volumes[-window:], dtype=float)
    if recent.size == 0:
        return 0.0
    std = float(recent.std(ddof=0))
    if std <= 0:
        return 0.0
    return float((recent[-1] - recent.mean()) / std)


def high_proximity(closes: np.ndarray, window: int = PROXIMITY_WINDOW) -> float:
    """Last close as a fraction of the highest close in the trailing window."""
    high = float(np.max(closes[-window:]))
    return float(closes[-1] / high) if high > 0 else 0.0


def rank(results: Iterable[ScanResult], n: int) -> list[ScanResult]:
    """Sort by score descending and keep the top *n*; non-finite scores are dropped."""
    scored = [r for r in results if math.isfinite(r.score)]
    ordered = sorted(scored, key=lambda r: r.score, reverse=True)
    return ordered[: max(n, 0)]


# ── Momentum scan ────────────────────────────────────────────────────────────


def score_momentum(symbol: str, df: pd.DataFrame, name: str = "") -> ScanResult | None:
    """Multi-timeframe momentum with volume, 52-week-high, trend and RSI adjustments.

    Args:
        symbol: Ticker.
        df: About one year of daily OHLCV bars.
        name: Display name.

    Returns:
        A scored result, or ``None`` if the symbol is filtered out.
    """
    if df is None or len(df) < MOMENTUM_MIN_BARS:
        return None
    closes = df["close"].to_numpy(dtype=float)
    price = float(closes[-1])
    if price < MIN_PRICE:
        return None

    returns = multi_timeframe_returns(closes)
    composite = composite_momentum(returns)
    if composite is None:
        return None

    vol_z = volume_zscore(df["volume"].to_numpy(dtype=float))
    rsi_now = latest(rsi(df["close"]))
    adx_now = latest(adx(df))
    rsi_now = NEUTRAL_RSI if rsi_now is None else rsi_now
    adx_now = 0.0 if adx_now is None else adx_now
    proximity = high_proximity(closes)

    score = composite
    score += min(VOLUME_Z_CAP, max(0.0, vol_z)) * VOLUME_Z_WEIGHT
    score += (proximity - PROXIMITY_PIVOT) * PROXIMITY_WEIGHT
    if adx_now >= ADX_TREND_LEVEL:
        score += ADX_BONUS
    if rsi_now > RSI_HIGH or rsi_now < RSI_LOW:
        score -= RSI_EXTREME_PENALTY

    return ScanResult(
        symbol=symbol,
        strategy="momentum",
        score=score,
        price=price,
        name=name or symbol,
        metrics={
            **returns,
            "rsi": rsi_now,
            "adx": adx_now,
            "vol_z": vol_z,
            "prox_52w": proximity,
        },
    )


# ── Dislocation scan ─────────────────────────────────────────────────────────


def passes_dislocation(quote: Quote | None) -> bool:
    """P/E within [2, 80] and a positive market cap of at most $500B."""
    if quote is None or not quote.price:
        return False
    pe = quote.pe
    if pe is None or not DISLOCATION_PE_RANGE[0] <= pe <= DISLOCATION_PE_RANGE[1]:
        return False
    cap = quote.market_cap
    return cap is not None and 0 < cap <= DISLOCATION_MAX_MARKET_CAP


def score_dislocation(quote: Quote | None) -> ScanResult | None:
    """Score = ``1 / PE``; cheaper ranks higher."""
    if not passes_dislocation(quote):
        return None
    pe = quote.pe
    return ScanResult(
        symbol=quote.symbol,
        strategy="dislocation",
        score=1.0 / pe,
        price=quote.price,
        name=quote.display_name,
        metrics={
            "pe": pe,
            "market_cap": quote.market_cap,
            "change_pct": quote.change_pct,
        },
    )


# ── Moonshot scan ────────────────────────────────────────────────────────────


def moonshot_metrics(symbol: str, df: pd.DataFrame, name: str = "") -> ScanResult | None:
    """Quiet price, loud volume, close to the 10-bar high.

    Ranked by volume ratio (last bar volume over the previous bar's).
    """
    if df is None or len(df) < MOONSHOT_MIN_BARS:
        return None
    closes = df["close"].to_numpy(dtype=float)
    volumes = df["volume"].to_numpy(dtype=float)
    price = float(closes[-1])
    prev_price = float(closes[-2])
    if prev_price <= 0:
        return None

    move_pct = (price - prev_price) / prev_price * 100.0
    prev_volume = volumes[-2] or 1.0
    vol_ratio = float(volumes[-1] / prev_volume)
    near_breakout = price >= MOONSHOT_BREAKOUT_RATIO * float(
        np.max(closes[-MOONSHOT_BREAKOUT_WINDOW:])
    )

    if (
        price < MIN_PRICE
        or abs(move_pct) > MOONSHOT_MAX_MOVE_PCT
        or vol_ratio < MOONSHOT_MIN_VOL_RATIO
        or not near_breakout
    ):
        return None

    return ScanResult(
        symbol=symbol,
        strategy="moonshot",
        score=vol_ratio,
        price=price,
        name=name or symbol,
        metrics={"change_pct": move_pct, "vol_ratio": vol_ratio},
    )


# ── Idea buckets ─────────────────────────────────────────────────────────────


def score_value_idea(quote: Quote | None) -> ScanResult | None:
    """Value bucket: ``100 / PE`` plus a bonus for trading near the 52-week low."""
    if quote is None or not quote.price:
        return None
    pe = quote.pe
    if pe is None or not VALUE_PE_RANGE[0] <= pe <= VALUE_PE_RANGE[1]:
        return None
    if quote.market_cap is None or quote.market_cap < VALUE_MIN_MARKET_CAP:
        return None

    low = quote.fifty_two_week_low or 0.0
    above_low = quote.price / low - 1.0 if low > 0 else None
    discount = 0.0
    if above_low is not None:
        if above_low < 0.2:
            discount = 0.3
        elif above_low < 0.4:
            discount = 0.15

    reasons = [f"PE {pe:.1f}"]
    if above_low is not None and above_low < 0.15:
        reasons.append("near 52w low")
    if quote.dividend_yield and quote.dividend_yield > 0.02:
        reasons.append(f"yield {quote.dividend_yield * 100:.1f}%")

    return ScanResult(
        symbol=quote.symbol,
        strategy="value",
        score=100.0 / pe + discount,
        price=quote.price,
        name=quote.display_name,
        metrics={"pe": pe, "above_52w_low": above_low, "reason": ", ".join(reasons)},
    )


def score_momentum_idea(symbol: str, df: pd.DataFrame, name: str = "") -> ScanResult | None:
    """Momentum bucket: liquid names with a 1m or 3m return, composite score."""
    if df is None or len(df) < MOMENTUM_MIN_BARS:
        return None
    closes = df["close"].to_numpy(dtype=float)
    price = float(closes[-1])
    if price < MIN_PRICE:
        return None

    adv20 = float(df["volume"].to_numpy(dtype=float)[-VOLUME_WINDOW:].mean())
    if adv20 < IDEA_MIN_ADV:
        return None

    returns = multi_timeframe_returns(closes)
    if returns["r1m"] is None and returns["r3m"] is None:
        return None
    score = composite_momentum(returns)
    if score is None:
        return None

    rsi_now = latest(rsi(df["close"]))
    rsi_now = NEUTRAL_RSI if rsi_now is None else rsi_now
    if rsi_now > RSI_HIGH:
        score -= RSI_EXTREME_PENALTY

    return ScanResult(
        symbol=symbol,
        strategy="momentum",
        score=score,
        price=price,
        name=name or symbol,
        metrics={**returns, "rsi": rsi_now, "adv20": round(adv20)},
    )


def score_quality(
    symbol: str,
    fundamentals: Fundamentals | None,
    quote: Quote | None = None,
) -> ScanResult | None:
    """Quality-growth bucket: growth, margins, returns, modest leverage."""
    if fundamentals is None:
        return None
    rg = fundamentals.revenue_growth or 0.0
    gm = fundamentals.gross_margins or 0.0
    roe = fundamentals.return_on_equity or 0.0
    dte = fundamentals.debt_to_equity or 0.0
    cap = fundamentals.market_cap or (quote.market_cap if quote else None) or 0.0

    if (
        rg < QUALITY_MIN_REVENUE_GROWTH
        or gm < QUALITY_MIN_GROSS_MARGIN
        or roe < QUALITY_MIN_ROE
        or dte > QUALITY_MAX_DEBT_TO_EQUITY
    ):
        return None
    if not QUALITY_MARKET_CAP_RANGE[0] <= cap <= QUALITY_MARKET_CAP_RANGE[1]:
        return None

    score = rg * 0.5 + gm * 0.3 + roe * 0.2
    if dte > QUALITY_LEVERAGE_PENALTY_ABOVE:
        score -= 0.05

    return ScanResult(
        symbol=symbol,
        strategy="quality",
        score=score,
        price=quote.price if quote else None,
        name=quote.display_name if quote else symbol,
        metrics={
            "revenue_growth": rg,
            "gross_margins": gm,
            "return_on_equity": roe,
            "debt_to_equity": dte,
        },
    )


def score_income(
    symbol: str,
    fundamentals: Fundamentals | None,
    quote: Quote | None = None,
) -> ScanResult | None:
    """Income bucket: yield of at least 3% with a sustainable payout."""
    if fundamentals is None:
        return None
    dy = fundamentals.dividend_yield or 0.0
    payout = fundamentals.payout_ratio or 0.0
    if dy < INCOME_MIN_YIELD:
        return None
    if payout <= 0 or payout > INCOME_MAX_PAYOUT:
        return None

    return ScanResult(
        symbol=symbol,
        strategy="income",
        score=dy * 0.7 + (INCOME_MAX_PAYOUT - payout) * 0.3,
        price=quote.price if quote else None,
        name=quote.display_name if quote else symbol,
        metrics={"dividend_yield": dy, "payout_ratio": payout},
    )

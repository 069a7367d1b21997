"""Summary return/risk statistics for a price series."""

from __future__ import annotations

import math

import numpy as np
import pandas as pd

from src.models.results import QuantStats

TRADING_DAYS_PER_YEAR = 252
DAYS_PER_YEAR = 365.25


def max_drawdown(closes: pd.Series | np.ndarray) -> float:
    """Return the worst ``(price - running_peak) / running_peak`` (always <= 0)."""
    arr = np.asarray(closes, dtype=float)
    if arr.size == 0:
        return 0.0
    peaks = np.maximum.accumulate(arr)
    drawdowns = (arr - peaks) / peaks
    return float(min(0.0, drawdowns.min()))


def annualize(total_return: float, n_years: float) -> float | None:
    """Compound ``total_return`` to a yearly rate.

    Short spans (intraday bars) give huge exponents; anything that overflows
    or is not finite comes back as ``None``.
    """
    if n_years <= 0:
        return None
    if total_return <= -1.0:
        return -1.0
    try:
        annual = math.exp(math.log1p(total_return) / n_years) - 1.0
    except OverflowError:
        return None
    return annual if math.isfinite(annual) else None


def quant_stats(df: pd.DataFrame) -> QuantStats:
    """Compute total/annual return, volatility, Sharpe and max drawdown.

    Fewer than two bars produce an all-``None`` result rather than an error.

    Args:
        df: OHLCV DataFrame indexed by timestamp.

    Returns:
        A :class:`QuantStats` instance.
    """
    if df is None or len(df) < 2:
        return QuantStats(data_points=0 if df is None else len(df))

    closes = df["close"].to_numpy(dtype=float)
    elapsed = df.index[-1] - df.index[0]
    n_days = elapsed.total_seconds() / 86_400
    n_years = n_days / DAYS_PER_YEAR

    total_return = closes[-1] / closes[0] - 1.0
    annual_return = annualize(total_return, n_years)

    daily_returns = np.diff(closes) / closes[:-1]
    annual_vol = float(np.std(daily_returns, ddof=0) * math.sqrt(TRADING_DAYS_PER_YEAR))

    sharpe = None
    if annual_vol != 0 and annual_return is not None:
        sharpe = annual_return / annual_vol

    return QuantStats(
        total_return=float(total_return),
        annual_return=annual_return,
        annual_vol=annual_vol,
        sharpe=sharpe,
        max_drawdown=max_drawdown(closes),
        data_points=len(df),
        period_days=round(n_days),
    )

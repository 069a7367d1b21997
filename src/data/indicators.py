"""Technical indicators for MarketLens.

Every function returns a pandas Series aligned index-for-index with its
input.  Warm-up entries are ``pd.NA`` in a nullable ``Float64`` Series, so a
"not yet computable" reading is never confused with a real ``0.0``.
Short input never raises: it yields an all-``NA`` Series of the same length.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
import pandas as pd

ArrayLike = Union[pd.Series, np.ndarray, Sequence[float]]


# ── Helpers ───────────────────────────────────────────────────────────────────


def _validate_df(df: pd.DataFrame, required_cols: Sequence[str]) -> None:
    """Validate that the DataFrame has the required columns."""
    for col in required_cols:
        if col not in df.columns:
            raise ValueError(
                f"DataFrame must contain a '{col}' column. "
                f"Available columns: {list(df.columns)}"
            )


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


def _as_array(values: ArrayLike) -> np.ndarray:
    """Return a float64 copy of *values* with NaN for missing entries."""
    if isinstance(values, pd.Series):
        return values.to_numpy(dtype=float, na_value=np.nan)
    return np.asarray(values, dtype=float).copy()


def _index_of(values: ArrayLike | pd.DataFrame, n: int) -> pd.Index:
    if isinstance(values, (pd.Series, pd.DataFrame)):
        return values.index
    return pd.RangeIndex(n)


def _to_series(arr: np.ndarray, index: pd.Index) -> pd.Series:
    """Wrap a float array as a nullable Float64 Series (NaN -> NA)."""
    mask = np.isnan(arr)
    data = pd.arrays.FloatingArray(np.where(mask, 0.0, arr), mask)
    return pd.Series(data, index=index)


def _ema_array(arr: np.ndarray, period: int) -> np.ndarray:
    """SMA-seeded EMA; NaN during warm-up, all NaN when ``len < period``."""
    n = len(arr)
    out = np.full(n, np.nan)
    if n < period:
        return out
    k = 2.0 / (period + 1)
    prev = float(arr[:period].mean())
    out[period - 1] = prev
    for i in range(period, n):
        prev = arr[i] * k + prev * (1.0 - k)
        out[i] = prev
    return out


def _true_range_array(high: np.ndarray, low: np.ndarray, close: np.ndarray) -> np.ndarray:
    n = len(close)
    tr = np.empty(n)
    if n == 0:
        return tr
    tr[0] = high[0] - low[0]
    if n > 1:
        prev_close = close[:-1]
        tr[1:] = np.maximum(
            high[1:] - low[1:],
            np.maximum(np.abs(high[1:] - prev_close), np.abs(low[1:] - prev_close)),
        )
    return tr


def latest(series: pd.Series) -> float | None:
    """Return the last computable value of an indicator, or ``None``."""
    valid = series.dropna()
    if valid.empty:
        return None
    return float(valid.iloc[-1])


def value_at(series: pd.Series, position: int) -> float | None:
    """Return the value at integer *position*, ``None`` for a marker/out of range."""
    try:
        value = series.iloc[position]
    except IndexError:
        return None
    if pd.isna(value):
        return None
    return float(value)


# ── Moving averages ───────────────────────────────────────────────────────────


def sma(values: ArrayLike, period: int = 20) -> pd.Series:
    """Calculate Simple Moving Average.

    Args:
        values: Price (or any numeric) series.
        period: Look-back period.

    Returns:
        Float64 Series; the first ``period - 1`` entries are NA.
    """
    _check_period(period)
    arr = _as_array(values)
    out = pd.Series(arr).rolling(window=period, min_periods=period).mean().to_numpy()
    return _to_series(out, _index_of(values, len(arr)))


def ema(values: ArrayLike, period: int = 20) -> pd.Series:
    """Calculate Exponential Moving Average.

    Seeded with the SMA of the first ``period`` values, then
    ``ema[i] = x[i]·k + ema[i-1]·(1-k)`` with ``k = 2 / (period + 1)``.

    Args:
        values: Price (or any numeric) series.
        period: Look-back period.

    Returns:
        Float64 Series; the first ``period - 1`` entries are NA.
    """
    _check_period(period)
    arr = _as_array(values)
    return _to_series(_ema_array(arr, period), _index_of(values, len(arr)))


def volume_sma(values: ArrayLike, period: int = 20) -> pd.Series:
    """Simple Moving Average of volume."""
    return sma(values, period)


# ── Oscillators ───────────────────────────────────────────────────────────────


def rsi(values: ArrayLike, period: int = 14) -> pd.Series:
    """Calculate Relative Strength Index with Wilder smoothing.

    The first reading sits at index ``period`` (it needs ``period + 1``
    prices).  When the average loss is zero the RSI is exactly 100.

    Args:
        values: Close prices.
        period: Look-back period.

    Returns:
        Float64 Series of RSI values (0-100).
    """
    _check_period(period)
    closes = _as_array(values)
    n = len(closes)
    out = np.full(n, np.nan)
    if n < period + 1:
        return _to_series(out, _index_of(values, n))

    delta = np.diff(closes)
    gains = np.where(delta > 0, delta, 0.0)
    losses = np.where(delta < 0, -delta, 0.0)

    avg_gain = float(gains[:period].mean())
    avg_loss = float(losses[:period].mean())
    out[period] = _rsi_from_averages(avg_gain, avg_loss)

    for i in range(period + 1, n):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        out[i] = _rsi_from_averages(avg_gain, avg_loss)

    return _to_series(out, _index_of(values, n))


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def macd(
    values: ArrayLike,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> tuple[pd.Series, pd.Series, pd.Series]:
    """Calculate MACD (Moving Average Convergence Divergence).

    The signal line is the EMA of the computable part of the MACD line,
    placed back at the same positions.  With fewer than ``signal``
    computable MACD values the signal line (and histogram) stay all NA.

    Args:
        values: Close prices.
        fast: Fast EMA period.
        slow: Slow EMA period.
        signal: Signal line EMA period.

    Returns:
        Tuple of (macd_line, signal_line, histogram).
    """
    for p in (fast, slow, signal):
        _check_period(p)
    closes = _as_array(values)
    index = _index_of(values, len(closes))

    macd_line = _ema_array(closes, fast) - _ema_array(closes, slow)
    valid = ~np.isnan(macd_line)
    signal_line = np.full(len(closes), np.nan)
    signal_line[valid] = _ema_array(macd_line[valid], signal)
    histogram = macd_line - signal_line

    return (
        _to_series(macd_line, index),
        _to_series(signal_line, index),
        _to_series(histogram, index),
    )


# ── Volatility ────────────────────────────────────────────────────────────────


def bollinger_bands(
    values: ArrayLike,
    period: int = 20,
    std_dev: float = 2.0,
) -> tuple[pd.Series, pd.Series, pd.Series]:
    """Calculate Bollinger Bands (population standard deviation).

    Args:
        values: Close prices.
        period: SMA look-back period.
        std_dev: Number of standard deviations for upper/lower bands.

    Returns:
        Tuple of (upper_band, middle_band, lower_band).
    """
    _check_period(period)
    closes = pd.Series(_as_array(values))
    rolling = closes.rolling(window=period, min_periods=period)
    middle = rolling.mean().to_numpy()
    width = rolling.std(ddof=0).to_numpy() * std_dev
    index = _index_of(values, len(closes))
    return (
        _to_series(middle + width, index),
        _to_series(middle, index),
        _to_series(middle - width, index),
    )


def true_range(df: pd.DataFrame) -> pd.Series:
    """True range per bar; the first bar has no previous close and uses high-low."""
    _validate_df(df, ("high", "low", "close"))
    tr = _true_range_array(
        _as_array(df["high"]), _as_array(df["low"]), _as_array(df["close"])
    )
    return _to_series(tr, df.index)


def atr(df: pd.DataFrame, period: int = 14) -> pd.Series:
    """Calculate Average True Range (SMA of true range).

    Args:
        df: OHLCV DataFrame with 'high', 'low', 'close' columns.
        period: Look-back period.

    Returns:
        Float64 Series of ATR values.
    """
    _check_period(period)
    return sma(true_range(df), period)


# ── Trend strength ────────────────────────────────────────────────────────────


def adx(df: pd.DataFrame, period: int = 14) -> pd.Series:
    """Average Directional Index (0-100) via EMA-smoothed directional movement.

    +DM/-DM and true range start at bar 1; each is EMA-smoothed, then
    ``DX = |+DI - -DI| / (+DI + -DI) · 100`` (0 when the denominator or the
    smoothed range is 0) and ``ADX = EMA(DX)``.  Needs ``2 × period`` bars;
    the first reading sits at index ``2 × period - 1``.

    Args:
        df: OHLCV DataFrame with 'high', 'low', 'close' columns.
        period: Look-back period.

    Returns:
        Float64 Series of ADX values.
    """
    _validate_df(df, ("high", "low", "close"))
    _check_period(period)
    high = _as_array(df["high"])
    low = _as_array(df["low"])
    close = _as_array(df["close"])
    n = len(close)
    out = np.full(n, np.nan)
    if n < 2 * period:
        return _to_series(out, df.index)

    up_move = high[1:] - high[:-1]
    down_move = low[:-1] - low[1:]
    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)
    tr = _true_range_array(high, low, close)[1:]

    smooth_tr = _ema_array(tr, period)[period - 1:]
    smooth_plus = _ema_array(plus_dm, period)[period - 1:]
    smooth_minus = _ema_array(minus_dm, period)[period - 1:]

    dx = np.zeros(len(smooth_tr))
    for i, str_i in enumerate(smooth_tr):
        if str_i == 0:
            continue
        plus_di = smooth_plus[i] / str_i * 100.0
        minus_di = smooth_minus[i] / str_i * 100.0
        total = plus_di + minus_di
        if total != 0:
            dx[i] = abs(plus_di - minus_di) / total * 100.0

    out[period:] = _ema_array(dx, period)
    return _to_series(out, df.index)


# ── Composite frame ───────────────────────────────────────────────────────────


def indicator_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Compute the standard indicator set used by analysis and charts.

    Args:
        df: OHLCV DataFrame.

    Returns:
        DataFrame aligned with *df* holding ``close``, ``sma50``, ``sma200``,
        ``rsi``, ``adx``, ``atr``, ``bb_upper``, ``bb_middle``, ``bb_lower``,
        ``macd``, ``macd_signal`` and ``macd_hist`` columns.
    """
    _validate_df(df, ("high", "low", "close"))
    close = df["close"]
    upper, middle, lower = bollinger_bands(close)
    macd_line, signal_line, histogram = macd(close)
    return pd.DataFrame(
        {
            "close": close.astype("Float64"),
            "sma50": sma(close, 50),
            "sma200": sma(close, 200),
            "rsi": rsi(close),
            "adx": adx(df),
            "atr": atr(df),
            "bb_upper": upper,
            "bb_middle": middle,
            "bb_lower": lower,
            "macd": macd_line,
            "macd_signal": signal_line,
            "macd_hist": histogram,
        },
        index=df.index,
    )

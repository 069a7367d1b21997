"""RSI threshold backtester.

Simulates a single long position on one symbol: start flat with capital
1.0, buy everything when RSI is below the buy threshold while flat, sell
everything when RSI is above the sell threshold while holding.  An open
position at the end is marked to the final close but is not logged as a
trade, so the trade log only holds signal-driven fills.
"""

from __future__ import annotations

import pandas as pd
from loguru import logger

from src.data.indicators import latest, rsi
from src.models.results import BacktestResult, BacktestTrade
from src.models.signals import TradeSide

MIN_BARS = 50
RSI_PERIOD = 14
RECENT_TRADES = 6
STARTING_CAPITAL = 1.0


def threshold_error(buy_threshold: float, sell_threshold: float) -> str | None:
    """Describe why an RSI threshold pair is unusable, or ``None`` if it is fine."""
    if 0 <= buy_threshold < sell_threshold <= 100:
        return None
    return (
        "RSI thresholds must satisfy 0 <= buy < sell <= 100, "
        f"got {buy_threshold:g}/{sell_threshold:g}"
    )


def invalid_thresholds(
    symbol: str, buy_threshold: float, sell_threshold: float, error: str
) -> BacktestResult:
    """Non-``OK`` result echoing the rejected thresholds."""
    result = BacktestResult.invalid(symbol, error)
    result.buy_threshold = buy_threshold
    result.sell_threshold = sell_threshold
    return result


def backtest_rsi(
    df: pd.DataFrame | None,
    buy_threshold: float = 30.0,
    sell_threshold: float = 70.0,
    symbol: str = "",
) -> BacktestResult:
    """Run the RSI threshold strategy over *df* and compare with buy-and-hold.

    Args:
        df: OHLCV DataFrame indexed by timestamp, ascending.
        buy_threshold: Enter when RSI is below this level while flat.
        sell_threshold: Exit when RSI is above this level while holding.
        symbol: Symbol label for the result.

    Returns:
        A :class:`BacktestResult`; ``INSUFFICIENT_HISTORY`` below 50 bars.
    """
    error = threshold_error(buy_threshold, sell_threshold)
    if error:
        return invalid_thresholds(symbol, buy_threshold, sell_threshold, error)
    if df is None or df.empty:
        return BacktestResult.unavailable(symbol)
    if len(df) < MIN_BARS:
        return BacktestResult.insufficient(
            symbol,
            f"Not enough data for {symbol} backtest: need {MIN_BARS} bars, got {len(df)}",
        )

    closes = df["close"].to_numpy(dtype=float)
    rsi_values = rsi(df["close"], RSI_PERIOD)
    timestamps = df.index

    cash = STARTING_CAPITAL
    position = 0.0
    trade_log: list[BacktestTrade] = []

    for i in range(1, len(closes)):
        reading = rsi_values.iloc[i]
        if pd.isna(reading):
            continue
        reading = float(reading)
        if reading < buy_threshold and position == 0:
            position = cash / closes[i]
            cash = 0.0
            trade_log.append(
                BacktestTrade(TradeSide.BUY, float(closes[i]), timestamps[i].to_pydatetime(), reading)
            )
        elif reading > sell_threshold and position > 0:
            cash = position * closes[i]
            position = 0.0
            trade_log.append(
                BacktestTrade(TradeSide.SELL, float(closes[i]), timestamps[i].to_pydatetime(), reading)
            )

    if position > 0:
        cash = position * closes[-1]
        position = 0.0

    result = BacktestResult(
        symbol=symbol,
        buy_threshold=buy_threshold,
        sell_threshold=sell_threshold,
        total_return=float(cash - STARTING_CAPITAL),
        buy_hold_return=float(closes[-1] / closes[0] - 1.0),
        trades=len(trade_log),
        final_equity=float(cash),
        latest_rsi=latest(rsi_values),
        start_date=timestamps[0].to_pydatetime(),
        end_date=timestamps[-1].to_pydatetime(),
        last_trades=trade_log[-RECENT_TRADES:],
    )
    logger.debug(
        "Backtest {} | trades={} | strategy={:.4f} | buy_hold={:.4f}",
        symbol,
        result.trades,
        result.total_return,
        result.buy_hold_return,
    )
    return result

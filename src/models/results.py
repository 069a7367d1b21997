"""Tagged result types returned by every top-level MarketLens operation.

Each result carries a :class:`ResultStatus`.  Non-``OK`` results hold an
``error`` message and no payload, so callers can render a message without
exception handling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.models.quote import Quote
from src.models.signals import PatternSignal, SentimentBand, TradeSide, Verdict


class ResultStatus(str, Enum):
    """Discriminator for tagged results."""

    OK = "ok"
    DATA_UNAVAILABLE = "data_unavailable"
    INSUFFICIENT_HISTORY = "insufficient_history"
    INVALID_PARAMETERS = "invalid_parameters"


@dataclass
class OperationResult:
    """Common header: which symbol, and whether the payload is present."""

    symbol: str
    status: ResultStatus = ResultStatus.OK
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.OK

    @classmethod
    def unavailable(cls, symbol: str, error: str = ""):
        return cls(
            symbol=symbol,
            status=ResultStatus.DATA_UNAVAILABLE,
            error=error or f"No data for {symbol}",
        )

    @classmethod
    def insufficient(cls, symbol: str, error: str = ""):
        return cls(
            symbol=symbol,
            status=ResultStatus.INSUFFICIENT_HISTORY,
            error=error or f"Not enough data for {symbol}",
        )

    @classmethod
    def invalid(cls, symbol: str, error: str):
        return cls(symbol=symbol, status=ResultStatus.INVALID_PARAMETERS, error=error)


# ── Statistics / analysis ────────────────────────────────────────────────────


@dataclass
class QuantStats:
    """Summary return/risk statistics; every field is ``None`` below 2 bars."""

    total_return: float | None = None
    annual_return: float | None = None
    annual_vol: float | None = None
    sharpe: float | None = None
    max_drawdown: float | None = None
    data_points: int = 0
    period_days: int = 0


@dataclass
class Technicals:
    """Latest indicator readings."""

    rsi: float | None = None
    adx: float | None = None
    atr: float | None = None
    macd: float | None = None
    macd_signal: float | None = None
    sma50: float | None = None
    sma200: float | None = None
    bb_upper: float | None = None
    bb_lower: float | None = None
    vol_ratio: float = 0.0


@dataclass
class Pattern:
    """One detected signal, with the reading that triggered it when relevant."""

    signal: PatternSignal
    value: float | None = None


@dataclass
class AnalysisResult(OperationResult):
    """Full single-symbol analysis."""

    price: float | None = None
    stats: QuantStats | None = None
    technicals: Technicals | None = None
    patterns: list[Pattern] = field(default_factory=list)
    verdict: Verdict | None = None


@dataclass
class QuoteResult(OperationResult):
    """Single-symbol quote lookup."""

    quote: Quote | None = None


@dataclass
class ChartResult(OperationResult):
    """OHLCV arrays plus overlay indicators for chart rendering."""

    range: str = ""
    payload: dict[str, Any] = field(default_factory=dict)


# ── Backtest ─────────────────────────────────────────────────────────────────


@dataclass
class BacktestTrade:
    """One signal-driven trade in the audit trail."""

    side: TradeSide
    price: float
    date: datetime
    rsi: float


@dataclass
class BacktestResult(OperationResult):
    """RSI threshold strategy vs buy-and-hold over the same window."""

    buy_threshold: float = 30.0
    sell_threshold: float = 70.0
    total_return: float | None = None
    buy_hold_return: float | None = None
    trades: int = 0
    final_equity: float | None = None
    latest_rsi: float | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    last_trades: list[BacktestTrade] = field(default_factory=list)

    @property
    def beat_buy_and_hold(self) -> bool:
        if self.total_return is None or self.buy_hold_return is None:
            return False
        return self.total_return > self.buy_hold_return


# ── Sentiment ────────────────────────────────────────────────────────────────


@dataclass
class SentimentResult(OperationResult):
    """Keyword-polarity headline score."""

    score: int = 0
    band: SentimentBand = SentimentBand.NO_DATA
    headlines: list[str] = field(default_factory=list)


# ── Scans ────────────────────────────────────────────────────────────────────


@dataclass
class ScanResult:
    """One ranked symbol from a scan; exists only for one scan invocation."""

    symbol: str
    strategy: str
    score: float
    price: float | None = None
    name: str = ""
    metrics: dict[str, Any] = field(default_factory=dict)


@dataclass
class IdeaBuckets:
    """Four independently ranked idea lists."""

    value: list[ScanResult] = field(default_factory=list)
    momentum: list[ScanResult] = field(default_factory=list)
    quality: list[ScanResult] = field(default_factory=list)
    income: list[ScanResult] = field(default_factory=list)


# ── Market snapshot ──────────────────────────────────────────────────────────


@dataclass
class SnapshotItem:
    symbol: str
    name: str
    price: float | None
    change_pct: float


@dataclass
class MarketSnapshot:
    """Broad market picture: indices (or futures), macro, crypto, mood."""

    timestamp: datetime
    market_state: str
    is_cash_session: bool
    mood: str
    indices: list[SnapshotItem] = field(default_factory=list)
    macro: list[SnapshotItem] = field(default_factory=list)
    crypto: list[SnapshotItem] = field(default_factory=list)

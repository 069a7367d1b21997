"""Markdown formatters for MarketLens results.

Presentation only: each formatter renders every computed field of its
result in the order the result defines them.  Non-``OK`` results render
as a single warning line.
"""

from __future__ import annotations

from src.models.results import (
    AnalysisResult,
    BacktestResult,
    IdeaBuckets,
    MarketSnapshot,
    OperationResult,
    Pattern,
    QuoteResult,
    ScanResult,
    SentimentResult,
    SnapshotItem,
)
from src.models.signals import PatternSignal, SentimentBand, TradeSide, Verdict
from src.utils.helpers import (
    format_market_cap,
    format_number,
    format_pct,
    format_usd,
    format_volume,
)

DISCLAIMER = "_Not investment advice; data may be delayed._"

PATTERN_TEXT: dict[PatternSignal, str] = {
    PatternSignal.GOLDEN_CROSS: "🟢 Golden Cross: SMA50 crossed above SMA200",
    PatternSignal.DEATH_CROSS: "🔴 Death Cross: SMA50 crossed below SMA200",
    PatternSignal.RSI_OVERBOUGHT: "⚠️ RSI {value:.1f} | Overbought",
    PatternSignal.RSI_OVERSOLD: "🧊 RSI {value:.1f} | Oversold",
    PatternSignal.UPPER_BAND_TOUCH: "📈 Price at upper Bollinger Band",
    PatternSignal.LOWER_BAND_TOUCH: "📉 Price at lower Bollinger Band",
    PatternSignal.MACD_BULLISH_CROSS: "🟢 MACD bullish crossover",
    PatternSignal.MACD_BEARISH_CROSS: "🔴 MACD bearish crossover",
    PatternSignal.TWENTY_DAY_HIGH: "🚀 20-day high",
    PatternSignal.TWENTY_DAY_LOW: "📉 20-day low",
}

VERDICT_TEXT: dict[Verdict, str] = {
    Verdict.BULLISH: "🟢 BULLISH",
    Verdict.NEUTRAL: "🟡 NEUTRAL",
    Verdict.BEARISH: "🔴 BEARISH",
}

SENTIMENT_TEXT: dict[SentimentBand, str] = {
    SentimentBand.VERY_POSITIVE: "🔥 Very positive",
    SentimentBand.SLIGHTLY_POSITIVE: "🙂 Slightly positive",
    SentimentBand.NEUTRAL: "😐 Neutral",
    SentimentBand.SLIGHTLY_NEGATIVE: "🙁 Slightly negative",
    SentimentBand.VERY_NEGATIVE: "💀 Very negative",
    SentimentBand.NO_DATA: "No data",
}


def format_error(result: OperationResult) -> str:
    """Render a non-``OK`` result."""
    return f"⚠️ {result.error}"


def _signed_pct(value: float | None) -> str:
    """Format a value that is already in percent (e.g. 1.23 -> "+1.23%")."""
    if value is None:
        return "—"
    return f"{'+' if value >= 0 else ''}{value:.2f}%"


def format_pattern(pattern: Pattern) -> str:
    template = PATTERN_TEXT[pattern.signal]
    if "{value" in template:
        return template.format(value=pattern.value or 0.0)
    return template


# ── Single symbol ────────────────────────────────────────────────────────────


def format_quote(result: QuoteResult) -> str:
    """Format a quote lookup."""
    if not result.ok:
        return format_error(result)
    q = result.quote
    arrow = "🟢" if (q.change_pct or 0) >= 0 else "🔴"
    lines = [
        f"{arrow} *{q.display_name}* (`{q.symbol}`)",
        f"Price: {format_usd(q.price)} ({_signed_pct(q.change_pct)})",
        f"Prev Close: {format_usd(q.prev_close)}",
    ]
    if q.market_cap:
        lines.append(f"Market Cap: {format_market_cap(q.market_cap)}")
    if q.pe:
        lines.append(f"P/E: {q.pe:.1f}")
    if q.eps is not None:
        lines.append(f"EPS (TTM): {format_number(q.eps)}")
    if q.dividend_yield:
        lines.append(f"Dividend Yield: {format_pct(q.dividend_yield)}")
    if q.volume:
        lines.append(f"Volume: {format_volume(q.volume)}")
    if q.fifty_two_week_high:
        lines.append(
            f"52w Range: {format_usd(q.fifty_two_week_low)} — {format_usd(q.fifty_two_week_high)}"
        )
    if q.state:
        lines.append(f"Session: {q.state}")
    return "\n".join(lines)


def format_analysis(result: AnalysisResult) -> str:
    """Format a full quant analysis."""
    if not result.ok:
        return format_error(result)
    s = result.stats
    t = result.technicals
    lines = [
        f"📊 *Quant Report: {result.symbol}* @ {format_usd(result.price)}",
        "",
        f"📈 Total Return: {format_pct(s.total_return)}",
        f"📆 Annual Return: {format_pct(s.annual_return)}",
        f"🎢 Annual Volatility: {format_pct(s.annual_vol)}",
        f"⚖️ Sharpe Ratio: {format_number(s.sharpe)}",
        f"🪂 Max Drawdown: {format_pct(s.max_drawdown)}",
        f"📅 Data: {s.data_points} bars over {s.period_days} days",
        "",
        "*Technicals:*",
        f"RSI(14): {format_number(t.rsi, 1)} | ADX: {format_number(t.adx, 1)} | "
        f"ATR: {format_number(t.atr)}",
        f"MACD: {format_number(t.macd, 3)} / Signal: {format_number(t.macd_signal, 3)}",
        f"SMA50: {format_number(t.sma50)} | SMA200: {format_number(t.sma200)}",
        f"BB: {format_number(t.bb_lower)} — {format_number(t.bb_upper)} | "
        f"Vol Ratio: {t.vol_ratio:.2f}×",
    ]
    if result.patterns:
        lines += ["", "*Patterns:*"] + [format_pattern(p) for p in result.patterns]
    lines += ["", f"*Verdict:* {VERDICT_TEXT[result.verdict]}", DISCLAIMER]
    return "\n".join(lines)


def format_backtest(result: BacktestResult) -> str:
    """Format an RSI backtest report."""
    if not result.ok:
        return format_error(result)
    outcome = (
        "RSI strategy beat buy & hold."
        if result.beat_buy_and_hold
        else "Buy & hold won."
    )
    lines = [
        f"📊 *RSI Backtest: {result.symbol}* "
        f"(RSI<{result.buy_threshold:g} buy, RSI>{result.sell_threshold:g} sell)",
        "",
        f"Strategy Return: {format_pct(result.total_return)}",
        f"Buy & Hold Return: {format_pct(result.buy_hold_return)}",
        f"Trades: {result.trades}",
        f"Final Equity: {format_number(result.final_equity, 4)}",
        f"Current RSI(14): {format_number(result.latest_rsi, 1)}",
        f"Period: {result.start_date:%Y-%m-%d} — {result.end_date:%Y-%m-%d}",
    ]
    if result.last_trades:
        lines += ["", "*Recent Signals:*"]
        for trade in result.last_trades:
            emoji = "🟢" if trade.side == TradeSide.BUY else "🔴"
            lines.append(
                f"{emoji} {trade.side.value} {format_usd(trade.price)} "
                f"on {trade.date:%Y-%m-%d} (RSI {trade.rsi:.1f})"
            )
    lines += ["", outcome]
    return "\n".join(lines)


def format_sentiment(result: SentimentResult) -> str:
    """Format a headline sentiment score."""
    if not result.ok:
        return format_error(result)
    lines = [f"*Sentiment: {result.symbol}* | {SENTIMENT_TEXT[result.band]} (score: {result.score})"]
    if result.headlines:
        lines += ["", "*Headlines:*"] + [f"• {h}" for h in result.headlines]
    else:
        lines += ["", "No headlines found."]
    return "\n".join(lines)


# ── Scans ────────────────────────────────────────────────────────────────────


def format_momentum(picks: list[ScanResult]) -> str:
    """Format the momentum leaders."""
    if not picks:
        return "Momentum scan found nothing."
    lines = ["🚀 *Momentum Leaders:*", ""]
    for i, p in enumerate(picks, 1):
        m = p.metrics
        lines.append(
            f"`{i}.` *{p.symbol}* {format_usd(p.price)} (score {p.score:.3f}) "
            f"[1m {format_pct(m.get('r1m'), 1)} | 3m {format_pct(m.get('r3m'), 1)} | "
            f"6m {format_pct(m.get('r6m'), 1)} | 12m {format_pct(m.get('r12m'), 1)}] "
            f"• 52w {format_pct(m.get('prox_52w'), 1)} • vol-z {m.get('vol_z', 0.0):.1f} "
            f"• RSI {m.get('rsi', 0.0):.0f} • ADX {m.get('adx', 0.0):.0f}"
        )
    return "\n".join(lines)


def format_dislocations(picks: list[ScanResult]) -> str:
    """Format the dislocation detector output."""
    if not picks:
        return "No obvious dislocations."
    lines = ["🔍 *Dislocation Detector:*", ""]
    for i, p in enumerate(picks, 1):
        m = p.metrics
        lines.append(
            f"`{i}.` *{p.symbol}* ({p.name}) (score {p.score:.3f}) | PE {m['pe']:.1f} | "
            f"MC {format_market_cap(m.get('market_cap'))} | {format_usd(p.price)} "
            f"({_signed_pct(m.get('change_pct'))})"
        )
    return "\n".join(lines)


def format_moonshots(picks: list[ScanResult]) -> str:
    """Format the breakout watch."""
    if not picks:
        return "No stealth breakouts today."
    lines = ["🚀 *Breakout Watch:*", ""]
    for i, p in enumerate(picks, 1):
        m = p.metrics
        lines.append(
            f"`{i}.` *{p.symbol}* ({p.name}) {format_usd(p.price)} "
            f"({_signed_pct(m.get('change_pct'))}, Vol {m['vol_ratio']:.1f}× prior day) "
            f"(score {p.score:.2f})"
        )
    return "\n".join(lines)


def _idea_line(i: int, p: ScanResult) -> str:
    m = p.metrics
    head = f"`{i}.` *{p.symbol}* {format_usd(p.price)} (score {p.score:.3f})"
    if p.strategy == "value":
        return (
            f"{head} | PE {format_number(m.get('pe'), 1)} | "
            f"{format_pct(m.get('above_52w_low'), 1)} above 52w low | {m['reason']}"
        )
    if p.strategy == "momentum":
        return (
            f"{head} "
            f"[1m {format_pct(m.get('r1m'), 1, signed=True)} | "
            f"3m {format_pct(m.get('r3m'), 1, signed=True)} | "
            f"6m {format_pct(m.get('r6m'), 1, signed=True)} | "
            f"12m {format_pct(m.get('r12m'), 1, signed=True)}] "
            f"• RSI {format_number(m.get('rsi'), 0)} • ADV20 {format_volume(m.get('adv20'))}"
        )
    if p.strategy == "quality":
        return (
            f"{head} | rev {format_pct(m['revenue_growth'], 1, signed=True)} | "
            f"margin {format_pct(m['gross_margins'], 1)} | ROE {format_pct(m['return_on_equity'], 1)} | "
            f"D/E {m['debt_to_equity']:.2f}"
        )
    return (
        f"{head} | yield {format_pct(m['dividend_yield'])} | "
        f"payout {format_pct(m['payout_ratio'], 1)}"
    )


def format_ideas(ideas: IdeaBuckets) -> str:
    """Format the four idea buckets."""
    sections = [
        ("💎 Value / Dislocation", ideas.value),
        ("🚀 Momentum Leaders", ideas.momentum),
        ("⭐ Quality Growth", ideas.quality),
        ("💰 Income", ideas.income),
    ]
    lines = ["🧠 *Ideas:*"]
    for title, picks in sections:
        lines += ["", f"*{title}*"]
        if picks:
            lines += [_idea_line(i, p) for i, p in enumerate(picks, 1)]
        else:
            lines.append("—")
    lines += ["", DISCLAIMER]
    return "\n".join(lines)


# ── Market snapshot ──────────────────────────────────────────────────────────


def _snapshot_line(item: SnapshotItem, with_price: bool) -> str:
    label = item.name or item.symbol
    if with_price:
        return f"• {label}: {format_usd(item.price)} ({_signed_pct(item.change_pct)})"
    arrow = "🟢" if item.change_pct >= 0 else "🔴"
    return f"{arrow} {label}: {_signed_pct(item.change_pct)}"


def format_snapshot(snapshot: MarketSnapshot) -> str:
    """Format the broad market snapshot."""
    lines = [
        f"📊 *Market Snapshot* | {snapshot.timestamp:%Y-%m-%d %H:%M} UTC",
        f"State: {snapshot.market_state} | Mood: {snapshot.mood}",
        "",
        f"*{'Indices' if snapshot.is_cash_session else 'Futures'}:*",
    ]
    lines += [_snapshot_line(i, with_price=False) for i in snapshot.indices]
    if snapshot.macro:
        lines += ["", "*Macro:*"] + [_snapshot_line(m, with_price=True) for m in snapshot.macro]
    if snapshot.crypto:
        lines += ["", "*Crypto:*"] + [_snapshot_line(c, with_price=True) for c in snapshot.crypto]
    lines += ["", DISCLAIMER]
    return "\n".join(lines)

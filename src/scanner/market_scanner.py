"""Market Scanner: ranks the watchlist under four strategies.

**Momentum**: multi-timeframe trailing returns blended into one
composite, adjusted for unusual volume, distance from the 52-week high,
trend strength (ADX) and RSI extremes.

**Dislocation**: quote-only screen for cheap earnings multiples among
companies below mega-cap size.

**Moonshot**: "stealth" breakout watch: a quiet price move on at least
double the previous day's volume, within 5% of the 10-day high.

**Ideas**: four independent buckets (value, momentum, quality-growth,
income), each ranked on its own.

Per-symbol fetches run concurrently up to ``SCANNER_MAX_CONCURRENCY``.
A symbol whose fetch or computation fails is logged and skipped, it never
aborts the scan.  Ranking happens only once every symbol has reported.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from loguru import logger

from src.config.settings import Settings
from src.data.market_data import MarketDataProvider
from src.models.errors import ComputationSkipped
from src.models.quote import Fundamentals, Quote
from src.models.results import IdeaBuckets, ScanResult
from src.scanner import scoring


def _name(quotes: dict[str, Quote | None], symbol: str) -> str:
    quote = quotes.get(symbol)
    return quote.display_name if quote else symbol


class MarketScanner:
    """Watchlist scanner.

    The watchlist is injected (defaulting to ``settings.WATCHLIST``) and is
    only read.  Every scan call builds its own semaphore and result lists,
    so concurrent scans share no state.
    """

    def __init__(
        self,
        market_data: MarketDataProvider,
        settings: Settings,
        watchlist: list[str] | None = None,
    ) -> None:
        self.market_data = market_data
        self.settings = settings
        self.watchlist: list[str] = list(
            watchlist if watchlist is not None else settings.WATCHLIST
        )

    # ── Public API ────────────────────────────────────────────────────────

    async def momentum_scan(self, n: int | None = None) -> list[ScanResult]:
        """Rank the watchlist by composite momentum; return the top *n*."""
        n = self.settings.MOMENTUM_TOP_N if n is None else n
        logger.info("🔍 Momentum scan starting | universe={} symbols", len(self.watchlist))
        quotes = await self.market_data.get_quotes(self.watchlist)

        async def evaluate(symbol: str) -> ScanResult | None:
            df = await self.market_data.get_series(
                symbol,
                self.settings.MOMENTUM_RANGE,
                "1d",
                min_bars=scoring.MOMENTUM_MIN_BARS,
            )
            return scoring.score_momentum(symbol, df, _name(quotes, symbol))

        results = await self._collect(evaluate, "momentum")
        top = scoring.rank(results, n)
        self._log_finished("Momentum", results, top)
        return top

    async def dislocation_scan(self, n: int | None = None) -> list[ScanResult]:
        """Rank quote-level value dislocations by ``1 / PE``; return the top *n*."""
        n = self.settings.DISLOCATION_TOP_N if n is None else n
        logger.info("🔍 Dislocation scan starting | universe={} symbols", len(self.watchlist))
        quotes = await self.market_data.get_quotes(self.watchlist)

        results: list[ScanResult] = []
        for symbol in self.watchlist:
            hit = scoring.score_dislocation(quotes.get(symbol))
            if hit is not None:
                results.append(hit)

        top = scoring.rank(results, n)
        self._log_finished("Dislocation", results, top)
        return top

    async def moonshot_scan(self, limit: int | None = None) -> list[ScanResult]:
        """Find quiet-price / loud-volume breakout candidates, by volume ratio."""
        limit = self.settings.MOONSHOT_LIMIT if limit is None else limit
        logger.info("🔍 Moonshot scan starting | universe={} symbols", len(self.watchlist))
        quotes = await self.market_data.get_quotes(self.watchlist)

        async def evaluate(symbol: str) -> ScanResult | None:
            df = await self.market_data.get_series(
                symbol,
                self.settings.MOONSHOT_RANGE,
                "1d",
                min_bars=scoring.MOONSHOT_MIN_BARS,
            )
            return scoring.moonshot_metrics(symbol, df, _name(quotes, symbol))

        results = await self._collect(evaluate, "moonshot")
        top = scoring.rank(results, limit)
        self._log_finished("Moonshot", results, top)
        return top

    async def generate_ideas(self, per_bucket: int | None = None) -> IdeaBuckets:
        """Build the four idea buckets, each independently ranked.

        Fundamentals are fetched once per symbol and shared by the
        quality-growth and income buckets.
        """
        per_bucket = self.settings.IDEAS_PER_BUCKET if per_bucket is None else per_bucket
        logger.info("🧠 Idea generation starting | universe={} symbols", len(self.watchlist))
        quotes = await self.market_data.get_quotes(self.watchlist)

        value = [
            hit
            for hit in (scoring.score_value_idea(quotes.get(s)) for s in self.watchlist)
            if hit is not None
        ]

        async def momentum(symbol: str) -> ScanResult | None:
            df = await self.market_data.get_series(
                symbol,
                self.settings.MOMENTUM_RANGE,
                "1d",
                min_bars=scoring.MOMENTUM_MIN_BARS,
            )
            return scoring.score_momentum_idea(symbol, df, _name(quotes, symbol))

        async def fundamentals(symbol: str) -> tuple[str, Fundamentals] | None:
            info = await self.market_data.get_fundamentals(symbol)
            return (symbol, info) if info is not None else None

        semaphore = asyncio.Semaphore(self.settings.SCANNER_MAX_CONCURRENCY)
        momentum_hits, fundamentals_rows = await asyncio.gather(
            self._collect(momentum, "ideas/momentum", semaphore),
            self._collect(fundamentals, "ideas/fundamentals", semaphore),
        )

        quality: list[ScanResult] = []
        income: list[ScanResult] = []
        for symbol, info in fundamentals_rows:
            quote = quotes.get(symbol)
            hit = scoring.score_quality(symbol, info, quote)
            if hit is not None:
                quality.append(hit)
            hit = scoring.score_income(symbol, info, quote)
            if hit is not None:
                income.append(hit)

        buckets = IdeaBuckets(
            value=scoring.rank(value, per_bucket),
            momentum=scoring.rank(momentum_hits, per_bucket),
            quality=scoring.rank(quality, per_bucket),
            income=scoring.rank(income, per_bucket),
        )
        logger.info(
            "🧠 Idea generation complete | value={} momentum={} quality={} income={}",
            len(buckets.value),
            len(buckets.momentum),
            len(buckets.quality),
            len(buckets.income),
        )
        return buckets

    # ── Internal ──────────────────────────────────────────────────────────

    async def _collect(
        self,
        evaluate: Callable[[str], Awaitable[Any]],
        label: str,
        semaphore: asyncio.Semaphore | None = None,
    ) -> list[Any]:
        """Run *evaluate* for every watchlist symbol with bounded concurrency.

        Returns the non-``None`` outputs in watchlist order.  Failures are
        converted to :class:`ComputationSkipped`, logged at DEBUG and dropped.
        """
        semaphore = semaphore or asyncio.Semaphore(self.settings.SCANNER_MAX_CONCURRENCY)

        async def guarded(symbol: str) -> Any:
            async with semaphore:
                try:
                    return await evaluate(symbol)
                except Exception as exc:
                    raise ComputationSkipped(symbol, str(exc) or type(exc).__name__) from exc

        outputs = await asyncio.gather(
            *(guarded(s) for s in self.watchlist), return_exceptions=True
        )

        collected: list[Any] = []
        skipped = 0
        for output in outputs:
            if isinstance(output, ComputationSkipped):
                skipped += 1
                logger.debug("{} scan: {}", label, output)
                continue
            if isinstance(output, BaseException):
                raise output
            if output is not None:
                collected.append(output)

        if skipped:
            logger.debug("{} scan skipped {} of {} symbols", label, skipped, len(self.watchlist))
        return collected

    @staticmethod
    def _log_finished(name: str, results: list[ScanResult], top: list[ScanResult]) -> None:
        logger.info(
            "🔍 {} scan complete | {} hits (top: {})",
            name,
            len(results),
            [f"{r.symbol}({r.score:.3f})" for r in top[:5]],
        )

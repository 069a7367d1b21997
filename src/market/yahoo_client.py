"""Yahoo Finance / Finviz market-data client for MarketLens.

Quotes come from the v7 quote endpoint, bars from the v8 chart endpoint,
key statistics from the v10 quoteSummary endpoint and headlines are
scraped from the Finviz quote page.  Response parsing lives in pure
``parse_*`` functions so it can be tested without a network.
"""

from __future__ import annotations

import asyncio
import html
import re
from datetime import datetime, timezone
from typing import Any

import aiohttp
from loguru import logger

from src.config.settings import Settings
from src.market.base_client import BaseMarketDataClient
from src.models.bar import Bar
from src.models.errors import MarketDataClientError
from src.models.quote import Fundamentals, Quote
from src.utils.retry import call_with_retry

TRANSIENT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)
SUMMARY_MODULES = "defaultKeyStatistics,financialData,summaryDetail"

_NEWS_LINK_RE = re.compile(r'<a[^>]+class="tab-link-news"[^>]*>([^<]+)</a>')
_NEWS_LEFT_RE = re.compile(r'news-link-left[^"]*"[^>]*>([^<]+)</a>')
_NEWS_TABLE_RE = re.compile(r"fullview-news-outer[\s\S]*?</table>")
_TABLE_LINK_RE = re.compile(r"<a[^>]*>([^<]{15,})</a>")


# ── Response parsing ─────────────────────────────────────────────────────────


def parse_quote_response(data: Any, symbols: list[str]) -> dict[str, Quote | None]:
    """Map a v7 ``quoteResponse`` payload onto the requested symbols."""
    quotes: dict[str, Quote | None] = {s: None for s in symbols}
    items = ((data or {}).get("quoteResponse") or {}).get("result") or []
    for item in items:
        sym = item.get("symbol")
        if sym not in quotes:
            continue
        quotes[sym] = Quote(
            symbol=sym,
            name=item.get("shortName") or item.get("longName") or sym,
            price=item.get("regularMarketPrice"),
            change_pct=item.get("regularMarketChangePercent"),
            prev_close=item.get("regularMarketPreviousClose"),
            change=item.get("regularMarketChange"),
            volume=item.get("regularMarketVolume"),
            market_cap=item.get("marketCap"),
            forward_pe=item.get("forwardPE"),
            trailing_pe=item.get("trailingPE"),
            fifty_two_week_high=item.get("fiftyTwoWeekHigh"),
            fifty_two_week_low=item.get("fiftyTwoWeekLow"),
            dividend_yield=item.get("dividendYield"),
            eps=item.get("epsTrailingTwelveMonths"),
            state=item.get("marketState"),
        )
    return quotes


def parse_chart_response(data: Any) -> list[Bar] | None:
    """Turn a v8 ``chart`` payload into bars; rows without a close are skipped."""
    results = ((data or {}).get("chart") or {}).get("result") or []
    if not results:
        return None
    result = results[0] or {}
    timestamps = result.get("timestamp") or []
    quote = ((result.get("indicators") or {}).get("quote") or [{}])[0] or {}

    def column(name: str) -> list:
        return quote.get(name) or []

    opens, highs, lows = column("open"), column("high"), column("low")
    closes, volumes = column("close"), column("volume")

    def at(values: list, i: int) -> Any:
        return values[i] if i < len(values) else None

    bars: list[Bar] = []
    for i, ts in enumerate(timestamps):
        close = at(closes, i)
        if close is None:
            continue
        bars.append(
            Bar(
                timestamp=datetime.fromtimestamp(ts, tz=timezone.utc),
                open=at(opens, i),
                high=at(highs, i),
                low=at(lows, i),
                close=close,
                volume=at(volumes, i) or 0.0,
            )
        )
    return bars


def _raw(field: Any) -> Any:
    if isinstance(field, dict):
        if "raw" in field:
            return field["raw"]
        return field.get("rawValue")
    return field


def parse_fundamentals(data: Any) -> Fundamentals | None:
    """Read the ``raw`` values out of a v10 ``quoteSummary`` payload."""
    results = ((data or {}).get("quoteSummary") or {}).get("result") or []
    if not results:
        return None
    result = results[0] or {}
    stats = result.get("defaultKeyStatistics") or {}
    financial = result.get("financialData") or {}
    summary = result.get("summaryDetail") or {}

    return Fundamentals(
        revenue_growth=_raw(financial.get("revenueGrowth")),
        gross_margins=_raw(financial.get("grossMargins")),
        return_on_equity=_raw(financial.get("returnOnEquity")),
        debt_to_equity=_raw(financial.get("debtToEquity")),
        payout_ratio=_raw(summary.get("payoutRatio")),
        dividend_yield=_raw(summary.get("dividendYield")),
        market_cap=_raw(summary.get("marketCap")),
        forward_pe=_raw(summary.get("forwardPE")) or _raw(stats.get("forwardPE")),
        trailing_pe=_raw(summary.get("trailingPE")),
        short_name=_raw(summary.get("shortName")),
    )


def parse_finviz_headlines(page: str, limit: int = 10) -> list[str]:
    """Extract headline text from a Finviz quote page.

    Tries the news-link anchors first, then the left-column variant, then
    any long link text inside the news table.
    """
    matches = _NEWS_LINK_RE.findall(page)
    if not matches:
        matches = _NEWS_LEFT_RE.findall(page)
    if not matches:
        table = _NEWS_TABLE_RE.search(page)
        if table:
            matches = _TABLE_LINK_RE.findall(table.group(0))
    return [html.unescape(m.strip()) for m in matches[:limit]]


# ── Client ───────────────────────────────────────────────────────────────────


class YahooMarketDataClient(BaseMarketDataClient):
    """aiohttp-based client for the public Yahoo Finance and Finviz pages.

    One ``ClientSession`` is shared for the client's lifetime.  Every
    request carries an explicit timeout and transient failures are
    retried with exponential backoff before surfacing as
    :class:`MarketDataClientError`.
    """

    def __init__(
        self,
        settings: Settings,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._settings = settings
        self._session = session
        self._owns_session = session is None

    # ── Connection ───────────────────────────────────────────────────────────

    async def connect(self) -> None:
        """Create the shared HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self._settings.USER_AGENT}
            )
            self._owns_session = True
            logger.debug("Market-data HTTP session opened")

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            logger.debug("Market-data HTTP session closed")
        self._session = None

    def _ensure_connected(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise MarketDataClientError(
                "YahooMarketDataClient is not connected. Call connect() first."
            )
        return self._session

    # ── Market data ──────────────────────────────────────────────────────────

    async def batch_quote(self, symbols: list[str]) -> dict[str, Quote | None]:
        if not symbols:
            return {}
        params = {"symbols": ",".join(symbols), "lang": "en-US", "region": "US"}
        data = await self._get(
            self._settings.YAHOO_QUOTE_URL,
            params,
            self._settings.HTTP_TIMEOUT_SECONDS,
            label="batch_quote",
        )
        return parse_quote_response(data, symbols)

    async def chart(
        self, symbol: str, range_: str = "6mo", interval: str = "1d"
    ) -> list[Bar] | None:
        params = {"range": range_, "interval": interval, "includePrePost": "false"}
        data = await self._get(
            f"{self._settings.YAHOO_CHART_URL}/{symbol}",
            params,
            self._settings.CHART_TIMEOUT_SECONDS,
            label=f"chart({symbol})",
        )
        return parse_chart_response(data)

    async def fundamentals(self, symbol: str) -> Fundamentals | None:
        data = await self._get(
            f"{self._settings.YAHOO_SUMMARY_URL}/{symbol}",
            {"modules": SUMMARY_MODULES},
            self._settings.FUNDAMENTALS_TIMEOUT_SECONDS,
            label=f"fundamentals({symbol})",
        )
        return parse_fundamentals(data)

    async def headlines(self, symbol: str, limit: int = 10) -> list[str]:
        page = await self._get(
            self._settings.FINVIZ_NEWS_URL,
            {"t": symbol},
            self._settings.HTTP_TIMEOUT_SECONDS,
            label=f"headlines({symbol})",
            as_json=False,
        )
        return parse_finviz_headlines(page or "", limit)

    # ── Internal ─────────────────────────────────────────────────────────────

    async def _get(
        self,
        url: str,
        params: dict[str, str],
        timeout: float,
        *,
        label: str,
        as_json: bool = True,
    ) -> Any:
        """GET *url* with retry; ``None`` for a 4xx response."""
        session = self._ensure_connected()

        async def attempt() -> Any:
            async with session.get(
                url, params=params, timeout=aiohttp.ClientTimeout(total=timeout)
            ) as resp:
                if resp.status >= 500:
                    resp.raise_for_status()
                if resp.status != 200:
                    logger.warning("{} returned HTTP {}", label, resp.status)
                    return None
                if as_json:
                    return await resp.json(content_type=None)
                return await resp.text()

        try:
            return await call_with_retry(
                attempt,
                max_attempts=self._settings.FETCH_MAX_ATTEMPTS,
                delay=self._settings.FETCH_RETRY_DELAY,
                exceptions=TRANSIENT_ERRORS,
                label=label,
            )
        except asyncio.TimeoutError as exc:
            raise MarketDataClientError(
                f"{label} timed out after {timeout}s", original=exc
            ) from exc
        except aiohttp.ClientError as exc:
            raise MarketDataClientError(f"{label} failed: {exc}", original=exc) from exc
        except ValueError as exc:
            raise MarketDataClientError(
                f"{label} returned malformed JSON: {exc}", original=exc
            ) from exc

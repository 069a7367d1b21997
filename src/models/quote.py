"""Quote and fundamentals snapshots for MarketLens."""

from __future__ import annotations

from pydantic import BaseModel


class Quote(BaseModel):
    """Ephemeral market snapshot for one symbol; refreshed per call."""

    symbol: str
    name: str = ""
    price: float | None = None
    change_pct: float | None = None
    prev_close: float | None = None
    change: float | None = None
    volume: float | None = None
    market_cap: float | None = None
    forward_pe: float | None = None
    trailing_pe: float | None = None
    fifty_two_week_high: float | None = None
    fifty_two_week_low: float | None = None
    dividend_yield: float | None = None
    eps: float | None = None
    state: str | None = None

    @property
    def pe(self) -> float | None:
        """Forward P/E when available, else trailing P/E."""
        return self.forward_pe or self.trailing_pe

    @property
    def display_name(self) -> str:
        return self.name or self.symbol


class Fundamentals(BaseModel):
    """Key statistics used by the quality-growth and income idea buckets."""

    revenue_growth: float | None = None
    gross_margins: float | None = None
    return_on_equity: float | None = None
    debt_to_equity: float | None = None
    payout_ratio: float | None = None
    dividend_yield: float | None = None
    market_cap: float | None = None
    forward_pe: float | None = None
    trailing_pe: float | None = None
    short_name: str | None = None

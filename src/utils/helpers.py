"""Formatting helpers for MarketLens reports."""

from __future__ import annotations


def format_usd(amount: float | None) -> str:
    """Format a USD amount with a dollar sign and commas.

    Examples::

        format_usd(1234.5) -> "$1,234.50"
        format_usd(-50)    -> "-$50.00"
        format_usd(None)   -> "n/a"
    """
    if amount is None:
        return "n/a"
    negative = amount < 0
    formatted = f"${abs(amount):,.2f}"
    return f"-{formatted}" if negative else formatted


def format_pct(fraction: float | None, digits: int = 2, signed: bool = False) -> str:
    """Format a fraction (0.05) as a percentage string ("5.00%").

    ``None`` renders as a dash placeholder.
    """
    if fraction is None:
        return "—"
    value = fraction * 100
    sign = "+" if signed and value >= 0 else ""
    return f"{sign}{value:.{digits}f}%"


def format_number(value: float | None, digits: int = 2) -> str:
    """Format an optional float with fixed decimals, ``n/a`` when missing."""
    if value is None:
        return "n/a"
    return f"{value:.{digits}f}"


def format_market_cap(market_cap: float | None) -> str:
    """Format a market cap in billions ("$1,234.5B")."""
    if not market_cap:
        return "n/a"
    return f"${market_cap / 1e9:,.1f}B"


def format_volume(volume: float | None) -> str:
    """Format a share volume with thousands separators."""
    if volume is None:
        return "n/a"
    return f"{int(volume):,}"

"""OHLCV bar model and Series conversion for MarketLens."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

import pandas as pd
from pydantic import BaseModel, ConfigDict, field_validator

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]


class Bar(BaseModel):
    """One OHLCV sample for a fixed time bucket."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    open: float | None = None
    high: float | None = None
    low: float | None = None
    close: float | None = None
    volume: float = 0.0

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are treated as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_validator("volume", mode="before")
    @classmethod
    def default_volume(cls, v: object) -> object:
        return 0.0 if v is None else v


def bars_to_frame(bars: Iterable[Bar]) -> pd.DataFrame:
    """Convert bars into a validated OHLCV DataFrame (a *Series*).

    Rows without a close are dropped, the index is a UTC ``DatetimeIndex``
    named ``timestamp`` sorted ascending, and duplicate timestamps keep the
    last row.  Missing open/high/low fall back to the close.
    """
    rows = [b.model_dump() for b in bars if b.close is not None]
    if not rows:
        return empty_frame()

    df = pd.DataFrame(rows)
    for col in ("open", "high", "low"):
        df[col] = df[col].fillna(df["close"])
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df = df.set_index("timestamp").sort_index(kind="mergesort")
    df = df[~df.index.duplicated(keep="last")]
    return df[OHLCV_COLUMNS].astype(float)


def empty_frame() -> pd.DataFrame:
    """Return an empty OHLCV DataFrame with the canonical layout."""
    index = pd.DatetimeIndex([], tz="UTC", name="timestamp")
    return pd.DataFrame({c: pd.Series(dtype=float) for c in OHLCV_COLUMNS}, index=index)

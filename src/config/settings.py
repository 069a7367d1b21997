"""Pydantic-based settings management for MarketLens."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_WATCHLIST: list[str] = [
    "AAPL", "MSFT", "NVDA", "GOOGL", "AMZN", "META", "TSLA", "AVGO", "AMD", "INTC",
    "PLTR", "RKLB", "HIMS", "SOFI", "HOOD", "COIN", "MSTR", "APP", "SMCI", "CRWD",
    "CRM", "ORCL", "NFLX", "DIS", "PYPL", "SQ", "UBER", "SHOP", "SNOW", "NET",
    "DDOG", "MDB", "OKLO", "CELH", "OSCR", "NBIS", "RBRK", "ABCL", "OXY", "ASTS",
    "JPM", "GS", "BAC", "V", "MA", "BRK.B", "WMT", "COST", "HD", "NKE",
    "XOM", "CVX", "GLD", "SLV", "SCHD", "SPY", "QQQ", "TEM", "BIIB",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file.

    MarketLens is a **read-only analytics engine**: it fetches quotes,
    charts, fundamentals and headlines and never places orders.
    """

    # ── Watchlist ─────────────────────────────────────────────────────────────
    WATCHLIST: Annotated[list[str], NoDecode] = list(DEFAULT_WATCHLIST)

    # ── Data sources ──────────────────────────────────────────────────────────
    YAHOO_QUOTE_URL: str = "https://query1.finance.yahoo.com/v7/finance/quote"
    YAHOO_CHART_URL: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    YAHOO_SUMMARY_URL: str = "https://query1.finance.yahoo.com/v10/finance/quoteSummary"
    FINVIZ_NEWS_URL: str = "https://finviz.com/quote.ashx"
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    )

    # ── Timeouts / retry ──────────────────────────────────────────────────────
    HTTP_TIMEOUT_SECONDS: float = 10.0  # quotes + headlines
    CHART_TIMEOUT_SECONDS: float = 15.0
    FUNDAMENTALS_TIMEOUT_SECONDS: float = 8.0
    FETCH_MAX_ATTEMPTS: int = 2  # including the first call
    FETCH_RETRY_DELAY: float = 0.5  # seconds, doubled per retry

    # ── Scanner ───────────────────────────────────────────────────────────────
    SCANNER_MAX_CONCURRENCY: int = 8  # parallel per-symbol fetches
    MOMENTUM_TOP_N: int = 10
    DISLOCATION_TOP_N: int = 10
    MOONSHOT_LIMIT: int = 5
    IDEAS_PER_BUCKET: int = 5
    HEADLINE_LIMIT: int = 10

    # ── Analysis / backtest ───────────────────────────────────────────────────
    ANALYSIS_RANGE: str = "2y"
    MOMENTUM_RANGE: str = "1y"
    MOONSHOT_RANGE: str = "1mo"
    CHART_RANGE: str = "6mo"
    BACKTEST_RANGE: str = "5y"
    BACKTEST_RSI_BUY: float = 30.0
    BACKTEST_RSI_SELL: float = 70.0

    # ── Logging ───────────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/marketlens.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # ── Validators ────────────────────────────────────────────────────────────

    @field_validator("WATCHLIST", mode="before")
    @classmethod
    def parse_watchlist(cls, v: Any) -> list[str]:
        """Accept JSON string, comma-separated string, or list for WATCHLIST."""
        if isinstance(v, str):
            if not v.strip():
                return []
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(s).strip().upper() for s in parsed]
            except json.JSONDecodeError:
                return [s.strip().upper() for s in v.split(",") if s.strip()]
        if isinstance(v, list):
            return [str(s).strip().upper() for s in v]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}, got '{v}'")
        return v.upper()

    @field_validator(
        "HTTP_TIMEOUT_SECONDS", "CHART_TIMEOUT_SECONDS", "FUNDAMENTALS_TIMEOUT_SECONDS"
    )
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Every external fetch must carry a positive timeout."""
        if v <= 0:
            raise ValueError(f"timeouts must be positive, got {v}")
        return v

    @field_validator("FETCH_MAX_ATTEMPTS", "SCANNER_MAX_CONCURRENCY")
    @classmethod
    def validate_at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"value must be >= 1, got {v}")
        return v

    @model_validator(mode="after")
    def validate_backtest_thresholds(self) -> "Settings":
        """RSI buy threshold must sit below the sell threshold."""
        if not 0 <= self.BACKTEST_RSI_BUY < self.BACKTEST_RSI_SELL <= 100:
            raise ValueError(
                "BACKTEST_RSI_BUY must be below BACKTEST_RSI_SELL and both in [0, 100]"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance."""
    return Settings()

"""Retry helpers with exponential backoff for MarketLens fetches."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
    label: str = "",
) -> T:
    """Await ``func()`` until it succeeds or ``max_attempts`` is exhausted.

    Args:
        func: Zero-argument coroutine factory (called once per attempt).
        max_attempts: Maximum number of attempts (including the first call).
        delay: Initial delay in seconds between retries.
        backoff: Multiplier applied to delay after each retry.
        exceptions: Tuple of exception types to catch and retry.
        label: Name used in log lines.

    Returns:
        Whatever ``func()`` returns on the first successful attempt.
    """
    name = label or getattr(func, "__name__", "call")
    current_delay = delay
    for attempt in range(1, max_attempts + 1):
        try:
            return await func()
        except exceptions as exc:
            if attempt == max_attempts:
                logger.warning(
                    "{}() failed after {} attempts: {}", name, max_attempts, exc
                )
                raise
            logger.debug(
                "{}() attempt {}/{} failed ({}). Retrying in {:.1f}s …",
                name,
                attempt,
                max_attempts,
                exc,
                current_delay,
            )
            await asyncio.sleep(current_delay)
            current_delay *= backoff
    raise RuntimeError("unreachable")  # pragma: no cover


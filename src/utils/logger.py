"""loguru configuration for MarketLens.

Console output goes to stderr so command output on stdout (JSON chart
payloads in particular) stays machine-readable.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from src.config.settings import Settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logger(log_level: str = "INFO", log_file: str | None = "logs/marketlens.log") -> None:
    """Replace loguru's default sink with MarketLens' console and file sinks.

    Args:
        log_level: Minimum level for the console and main log file.
        log_file: Main log file; errors also go to ``<name>_error.log``
            next to it.  ``None`` logs to the console only.
    """
    logger.remove()
    logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT, colorize=True)

    if not log_file:
        logger.debug("Logging to console only (level={})", log_level)
        return

    error_file = log_file[:-4] + "_error.log" if log_file.endswith(".log") else log_file + ".error"
    for path, level in ((log_file, log_level), (error_file, "ERROR")):
        logger.add(
            path,
            level=level,
            format=FILE_FORMAT,
            rotation="10 MB",
            retention=5,
            compression="zip",
            enqueue=True,
        )
    logger.debug("Logging to {} (level={})", log_file, log_level)


def setup_from_settings(settings: "Settings") -> None:
    """Configure logging from ``LOG_LEVEL`` / ``LOG_FILE``."""
    setup_logger(settings.LOG_LEVEL, settings.LOG_FILE or None)

"""MarketLens command line entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Sequence

from loguru import logger

from src.config.settings import Settings, get_settings
from src.core.engine import MarketLensEngine
from src.notifications import formatters
from src.utils.logger import setup_from_settings


def build_parser() -> argparse.ArgumentParser:
    """Build the ``marketlens`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="marketlens",
        description="Market analytics: indicators, stats, scans, backtests, sentiment.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("snapshot", help="Broad market snapshot")

    for name, help_text in (
        ("quote", "Latest quote for a symbol"),
        ("analyze", "Full quant analysis for a symbol"),
        ("sentiment", "Headline sentiment for a symbol"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("symbol")

    for name, help_text in (
        ("momentum", "Momentum leaders in the watchlist"),
        ("dislocations", "Cheap-multiple dislocations in the watchlist"),
        ("moonshots", "Quiet-price / loud-volume breakout watch"),
        ("ideas", "Value, momentum, quality and income idea buckets"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("-n", type=int, default=None, help="Number of results")

    backtest = sub.add_parser("backtest", help="RSI threshold backtest vs buy-and-hold")
    backtest.add_argument("symbol")
    backtest.add_argument("--buy", type=float, default=None, help="RSI buy threshold")
    backtest.add_argument("--sell", type=float, default=None, help="RSI sell threshold")

    chart = sub.add_parser("chart", help="Chart payload as JSON")
    chart.add_argument("symbol")
    chart.add_argument("--range", dest="range_", default=None, help="e.g. 1mo, 6mo, 1y")

    return parser


async def dispatch(engine: MarketLensEngine, args: argparse.Namespace) -> str:
    """Run the requested command and return its printable output."""
    command = args.command
    if command == "snapshot":
        return formatters.format_snapshot(await engine.snapshot())
    if command == "quote":
        return formatters.format_quote(await engine.quote(args.symbol))
    if command == "analyze":
        return formatters.format_analysis(await engine.analyze(args.symbol))
    if command == "sentiment":
        return formatters.format_sentiment(await engine.sentiment(args.symbol))
    if command == "momentum":
        return formatters.format_momentum(await engine.momentum_scan(args.n))
    if command == "dislocations":
        return formatters.format_dislocations(await engine.dislocation_scan(args.n))
    if command == "moonshots":
        return formatters.format_moonshots(await engine.moonshot_scan(args.n))
    if command == "ideas":
        return formatters.format_ideas(await engine.generate_ideas(args.n))
    if command == "backtest":
        return formatters.format_backtest(
            await engine.backtest(args.symbol, args.buy, args.sell)
        )
    if command == "chart":
        result = await engine.chart(args.symbol, args.range_)
        if not result.ok:
            return formatters.format_error(result)
        return json.dumps({"symbol": result.symbol, "range": result.range, **result.payload})
    raise ValueError(f"Unknown command: {command}")


async def main(argv: Sequence[str] | None = None, settings: Settings | None = None) -> int:
    """Parse arguments, run one command and print the result."""
    args = build_parser().parse_args(argv)
    settings = settings or get_settings()
    setup_from_settings(settings)
    logger.debug("Running {} command", args.command)

    async with MarketLensEngine(settings) as engine:
        output = await dispatch(engine, args)
    print(output)
    return 0


def run() -> None:
    """Synchronous wrapper suitable for ``python -m`` or console_scripts."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nMarketLens interrupted, shutting down.")
        sys.exit(130)


if __name__ == "__main__":
    run()

"""Command line entry point: inspect one coin in the terminal."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from typing import Optional, Sequence

from coinscope.data.coincap_client import INTERVAL_LABELS, CoinCapClient
from coinscope.data.coingecko_client import CoinGeckoClient
from coinscope.display.keys import TerminalKeySource
from coinscope.display.renderer import RichRenderer
from coinscope.errors import UserClosed, ViewCancelled
from coinscope.infra.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from coinscope.infra.logging import configure_logging
from coinscope.view import CoinView


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="coinscope", description="Live terminal view of a single coin")
    parser.add_argument("coin_id", nargs="?", default="bitcoin", help="CoinCap asset id, e.g. bitcoin")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="YAML settings file")
    parser.add_argument("--interval", choices=INTERVAL_LABELS, help="initial price history interval")
    parser.add_argument("--favourite", action="append", default=None, help="coin id to track (repeatable)")
    return parser


async def run_view(coin_id: str, config: AppConfig, favourites: Optional[Sequence[str]] = None) -> None:
    logger = logging.getLogger("coinscope")
    endpoints = config.api.endpoints()
    assets = CoinCapClient(endpoints, timeout=config.api.timeout_seconds, logger=logger.getChild("coincap"))
    markets = CoinGeckoClient(endpoints, timeout=config.api.timeout_seconds, logger=logger.getChild("coingecko"))
    events: "asyncio.Queue[str]" = asyncio.Queue()

    with RichRenderer() as renderer, TerminalKeySource(events):
        view = CoinView(
            coin_id,
            config=config,
            assets=assets,
            markets=markets,
            renderer=renderer,
            favourites=favourites,
        )
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGTERM, view.close, "terminated")
            # cbreak mode keeps ISIG, so Ctrl-C arrives as SIGINT
            loop.add_signal_handler(signal.SIGINT, events.put_nowait, "<C-c>")
        except NotImplementedError:
            # Windows/limited environments
            pass

        try:
            await view.run(events)
        except UserClosed as exc:
            logger.info("Closed by user: %s", exc, extra={"event": "user_closed"})
        except ViewCancelled as exc:
            logger.info("View cancelled: %s", exc.reason, extra={"event": "view_cancelled"})


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    if args.interval:
        config.view.history_interval = args.interval
    configure_logging(config.logging.level, config.logging.file)
    asyncio.run(run_view(args.coin_id, config, favourites=args.favourite))


if __name__ == "__main__":
    main()

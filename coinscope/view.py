"""Coin view: the adapters and the coin page serving one inspected coin."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Dict, Iterable, List, NoReturn, Optional, Set

from coinscope.data.adapters import watch_asset, watch_favourites, watch_history
from coinscope.data.channels import CancelScope, LatestValue
from coinscope.data.clients import AssetClient, MarketsClient
from coinscope.data.models import USD, CurrencyRate, PollResult
from coinscope.data.websocket import watch_live_price
from coinscope.display.page import CoinPage, Renderer
from coinscope.display.state import CoinPageState
from coinscope.errors import FetchError, ViewCancelled
from coinscope.infra.config import AppConfig
from coinscope.infra.metrics import MetricsSink


class CoinView:
    """Owns one cancellation scope, its channels, four adapters and the page.

    Whatever ends the page (user close, external :meth:`close`, task
    cancellation), every adapter is cancelled and awaited before
    :meth:`run` returns.
    """

    def __init__(
        self,
        coin_id: str,
        *,
        config: AppConfig,
        assets: AssetClient,
        markets: MarketsClient,
        renderer: Renderer,
        favourites: Optional[Iterable[str]] = None,
        connect: Optional[Callable[..., Any]] = None,
        metrics: Optional[MetricsSink] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.coin_id = coin_id
        self.config = config
        self.assets = assets
        self.markets = markets
        self.renderer = renderer
        self.favourites: Set[str] = set(config.view.favourites if favourites is None else favourites)
        self.connect = connect
        self.metrics = metrics or MetricsSink()
        self.logger = logger or logging.getLogger("coinscope.view")
        self.scope = CancelScope()
        self.tasks: Dict[str, "asyncio.Task[NoReturn]"] = {}

    def close(self, reason: str = "view closed") -> None:
        self.scope.cancel(reason)

    def track(self, coin_id: str) -> None:
        self.favourites.add(coin_id)

    def untrack(self, coin_id: str) -> None:
        self.favourites.discard(coin_id)

    async def run(self, events: "asyncio.Queue[str]") -> NoReturn:
        """Serve the view until it ends with ``UserClosed`` or ``ViewCancelled``."""

        data_queue: "asyncio.Queue[PollResult]" = asyncio.Queue(maxsize=1)
        price_queue: "asyncio.Queue[str]" = asyncio.Queue(maxsize=1)
        interval_channel: LatestValue[str] = LatestValue()

        state = CoinPageState(self.coin_id, rates=await self._load_rates(), interval=self.config.view.history_interval)
        page = CoinPage(
            state,
            self.renderer,
            refresh_interval=self.config.polling.refresh_seconds,
            metrics=self.metrics,
            logger=self.logger.getChild("page"),
        )

        self._start_adapters(data_queue, price_queue, interval_channel)
        self.logger.info("Coin view started for %s", self.coin_id, extra={"event": "view_started", "coin_id": self.coin_id})
        try:
            await page.run(self.scope, events, data_queue, price_queue, interval_channel)
        finally:
            self.scope.cancel("view closed")
            await asyncio.gather(*self.tasks.values(), return_exceptions=True)
            self.logger.info(
                "Coin view stopped for %s", self.coin_id,
                extra={"event": "view_stopped", "coin_id": self.coin_id, "metrics": self.metrics.export()},
            )

    def _start_adapters(
        self,
        data_queue: "asyncio.Queue[PollResult]",
        price_queue: "asyncio.Queue[str]",
        interval_channel: LatestValue[str],
    ) -> None:
        polling = self.config.polling
        retry = polling.retry_policy()
        adapters = {
            "favourites": watch_favourites(
                self.scope,
                self.markets,
                self.favourites,
                data_queue,
                interval=polling.favourites_seconds,
                retry=retry,
                logger=self.logger.getChild("favourites"),
            ),
            "history": watch_history(
                self.scope,
                self.assets,
                self.coin_id,
                interval_channel,
                data_queue,
                default_interval=self.config.view.history_interval,
                interval=polling.history_seconds,
                retry=retry,
                logger=self.logger.getChild("history"),
            ),
            "asset": watch_asset(
                self.scope,
                self.assets,
                self.coin_id,
                data_queue,
                interval=polling.asset_seconds,
                retry=retry,
                logger=self.logger.getChild("asset"),
            ),
            "live": watch_live_price(
                self.scope,
                self.coin_id,
                price_queue,
                url=self.assets.stream_url(self.coin_id),
                connect=self.connect,
                interval=polling.live_price_seconds,
                logger=self.logger.getChild("live"),
            ),
        }
        for name, coroutine in adapters.items():
            task = asyncio.create_task(coroutine, name=f"{name}:{self.coin_id}")
            task.add_done_callback(functools.partial(self._on_adapter_done, name))
            self.tasks[name] = task

    def _on_adapter_done(self, name: str, task: "asyncio.Task[Any]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if isinstance(exc, ViewCancelled):
            self.logger.debug("%s adapter cancelled: %s", name, exc.reason, extra={"event": "adapter_cancelled", "adapter": name})
            return
        self.metrics.observe("adapter_stopped", {"adapter": name, "error": str(exc)})
        if isinstance(exc, FetchError):
            self.logger.error(
                "%s adapter stopped: %s", name, exc,
                extra={"event": "adapter_failed", "adapter": name, "source": exc.source},
            )
        else:
            self.logger.error("%s adapter crashed", name, exc_info=exc, extra={"event": "adapter_crashed", "adapter": name})

    async def _load_rates(self) -> List[CurrencyRate]:
        try:
            rates = await asyncio.to_thread(self.assets.fetch_rates)
        except FetchError as exc:
            self.logger.warning("Exchange rates unavailable, offering USD only: %s", exc, extra={"event": "rates_unavailable"})
            return [USD]
        return rates or [USD]


__all__ = ["CoinView"]

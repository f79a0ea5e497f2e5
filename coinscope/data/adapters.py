"""REST polling adapters feeding a coin view's shared data queue.

Each adapter is a coroutine built on :func:`loop_tick`. It owns its fixed
parameters, performs one blocking request per tick in a worker thread, and
ends by raising exactly one terminal condition: a
:class:`~coinscope.errors.FetchError` for a failed request or
:class:`~coinscope.errors.ViewCancelled` once the view goes away.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Dict, Iterable, Iterator, List, NoReturn, Optional, Tuple

from coinscope.errors import FetchError

from .channels import CancelScope, LatestValue, send
from .clients import AssetClient, MarketsClient
from .coingecko_client import ORDER_MARKET_CAP_DESC
from .models import History, PollResult, Snapshot
from .polling import RetryPolicy, loop_tick

LOGGER = logging.getLogger(__name__)

FAVOURITES_INTERVAL = 10.0
HISTORY_INTERVAL = 3.0
ASSET_INTERVAL = 3.0
DEFAULT_HISTORY_INTERVAL = "1 day"
# Display state converts from USD, so snapshots are always quoted in it.
QUOTE_CURRENCY = "usd"


class IntervalSelector:
    """History interval owned by one adapter, fed by a single-slot channel."""

    def __init__(self, initial: str, updates: LatestValue[str]) -> None:
        self.value = initial
        self._updates = updates

    def refresh(self) -> str:
        """Adopt the pending update, if any, without blocking."""

        update = self._updates.poll()
        if update is not None:
            self.value = update
        return self.value


def market_pairs(rows: Iterable[Dict[str, Any]]) -> Iterator[Tuple[str, float]]:
    for row in rows:
        symbol = row.get("symbol")
        price = row.get("current_price")
        if not symbol or price is None:
            continue
        try:
            yield str(symbol).upper(), float(price)
        except (TypeError, ValueError) as exc:
            raise FetchError("coingecko", f"bad price for {symbol}: {price!r}") from exc


def history_prices(points: Iterable[Any], coin_id: str) -> List[float]:
    prices: List[float] = []
    for point in points:
        raw = point.get("priceUsd") if isinstance(point, dict) else None
        try:
            prices.append(float(raw))
        except (TypeError, ValueError) as exc:
            raise FetchError("coincap", f"bad history price for {coin_id}: {raw!r}") from exc
    return prices


async def watch_favourites(
    scope: CancelScope,
    client: MarketsClient,
    tracked: Iterable[str],
    data_queue: "asyncio.Queue[PollResult]",
    *,
    interval: float = FAVOURITES_INTERVAL,
    retry: Optional[RetryPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> NoReturn:
    """Publish a :class:`Snapshot` of the tracked coins every ``interval`` seconds."""

    log = logger or LOGGER

    async def cycle() -> None:
        ids = list(tracked)
        if ids:
            rows = await asyncio.to_thread(
                client.coins_markets, QUOTE_CURRENCY, ids, ORDER_MARKET_CAP_DESC, len(ids), 1, True, []
            )
            snapshot = Snapshot.from_pairs(market_pairs(rows))
        else:
            snapshot = Snapshot()
        log.debug("favourites snapshot", extra={"event": "snapshot", "symbols": len(snapshot.prices)})
        await send(scope, data_queue, snapshot)

    await loop_tick(scope, interval, cycle, name="favourites", retry=retry, logger=log)


async def watch_history(
    scope: CancelScope,
    client: AssetClient,
    coin_id: str,
    interval_channel: LatestValue[str],
    data_queue: "asyncio.Queue[PollResult]",
    *,
    default_interval: str = DEFAULT_HISTORY_INTERVAL,
    interval: float = HISTORY_INTERVAL,
    retry: Optional[RetryPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> NoReturn:
    """Publish the baseline-zeroed price history of ``coin_id``."""

    log = logger or LOGGER
    selector = IntervalSelector(default_interval, interval_channel)

    async def cycle() -> None:
        previous = selector.value
        current = selector.refresh()
        if current != previous:
            log.info(
                "History interval for %s changed to %s", coin_id, current,
                extra={"event": "interval_change", "coin_id": coin_id, "interval": current},
            )
        points = await asyncio.to_thread(client.fetch_history, coin_id, current)
        await send(scope, data_queue, History.from_series(history_prices(points, coin_id)))

    await loop_tick(scope, interval, cycle, name=f"history:{coin_id}", retry=retry, logger=log)


async def watch_asset(
    scope: CancelScope,
    client: AssetClient,
    coin_id: str,
    data_queue: "asyncio.Queue[PollResult]",
    *,
    interval: float = ASSET_INTERVAL,
    retry: Optional[RetryPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> NoReturn:
    """Publish the full :class:`~coinscope.data.models.Detail` record of ``coin_id``."""

    request = functools.partial(client.fetch_asset, coin_id)

    async def cycle() -> None:
        detail = await asyncio.to_thread(request)
        await send(scope, data_queue, detail)

    await loop_tick(scope, interval, cycle, name=f"asset:{coin_id}", retry=retry, logger=logger or LOGGER)


__all__ = [
    "IntervalSelector",
    "watch_asset",
    "watch_favourites",
    "watch_history",
    "FAVOURITES_INTERVAL",
    "HISTORY_INTERVAL",
    "ASSET_INTERVAL",
    "DEFAULT_HISTORY_INTERVAL",
    "QUOTE_CURRENCY",
]

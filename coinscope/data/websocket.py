"""Live price relay over the CoinCap price stream."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, NoReturn, Optional

import websockets
from websockets.exceptions import WebSocketException

from coinscope.errors import StreamError

from .channels import CancelScope, send
from .polling import loop_tick

LOGGER = logging.getLogger(__name__)

LIVE_PRICE_INTERVAL = 0.1
_CONNECTION_ERRORS = (OSError, asyncio.TimeoutError, WebSocketException)


async def watch_live_price(
    scope: CancelScope,
    coin_id: str,
    price_queue: "asyncio.Queue[str]",
    *,
    url: str,
    connect: Optional[Callable[..., Any]] = None,
    interval: float = LIVE_PRICE_INTERVAL,
    logger: Optional[logging.Logger] = None,
) -> NoReturn:
    """Relay raw price strings for ``coin_id`` from one long-lived connection.

    The connection is opened once before polling starts; any read or decode
    fault ends the relay with :class:`StreamError` and the connection is not
    reopened here. Leaving the ``async with`` block always closes it.
    """

    log = logger or LOGGER
    connector = connect or websockets.connect
    scope.raise_if_cancelled()

    async def relay(ws: Any) -> None:
        try:
            raw = await ws.recv()
        except _CONNECTION_ERRORS as exc:
            raise StreamError("coincap-ws", f"read failed: {exc}") from exc
        try:
            message = json.loads(raw)
        except ValueError as exc:
            raise StreamError("coincap-ws", f"undecodable message: {raw!r}") from exc
        if not isinstance(message, dict):
            raise StreamError("coincap-ws", f"unexpected message: {raw!r}")

        price = message.get(coin_id)
        if price is None:
            return
        await send(scope, price_queue, str(price))

    try:
        async with connector(url, ping_interval=20, ping_timeout=20) as ws:
            log.info("Connected to price stream", extra={"event": "stream_connected", "coin_id": coin_id, "url": url})
            await loop_tick(scope, interval, lambda: relay(ws), name=f"live:{coin_id}", logger=log)
    except _CONNECTION_ERRORS as exc:
        raise StreamError("coincap-ws", f"connection to {url} failed: {exc}") from exc
    finally:
        log.debug("Price stream released", extra={"event": "stream_closed", "coin_id": coin_id})


__all__ = ["watch_live_price", "LIVE_PRICE_INTERVAL"]

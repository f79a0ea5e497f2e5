"""Coin page event loop: the single consumer of every view channel."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, NoReturn, Optional, Protocol, Tuple

from coinscope.data.channels import CancelScope, LatestValue, Selector
from coinscope.data.models import Detail, History, PollResult, Snapshot, result_kind
from coinscope.data.polling import Ticker
from coinscope.errors import UserClosed, ViewCancelled
from coinscope.infra.metrics import MetricsSink

from .state import CoinPageState

REFRESH_INTERVAL = 1.0
QUIT_KEYS = {"q", "<C-c>"}


class Renderer(Protocol):
    """Drawing surface the coin page redraws after every state change."""

    def render(self, state: CoinPageState) -> None:
        """Draw the full page, or only the currency picker while it is open."""

    def render_price(self, state: CoinPageState) -> None:
        """Redraw just the live price box."""

    def dimensions(self) -> Tuple[int, int]:
        """Return terminal ``(width, height)``."""


class CoinPage:
    """Multiplex timer, key, data and price inputs into one display state.

    Each loop iteration consumes exactly one input, applies it and redraws
    once. The loop performs no I/O of its own besides drawing.
    """

    def __init__(
        self,
        state: CoinPageState,
        renderer: Renderer,
        *,
        refresh_interval: float = REFRESH_INTERVAL,
        metrics: Optional[MetricsSink] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.state = state
        self.renderer = renderer
        self.refresh_interval = refresh_interval
        self.metrics = metrics or MetricsSink()
        self.logger = logger or logging.getLogger(__name__)
        self._previous_key = ""

    async def run(
        self,
        scope: CancelScope,
        events: "asyncio.Queue[str]",
        data_queue: "asyncio.Queue[PollResult]",
        price_queue: "asyncio.Queue[str]",
        interval_channel: LatestValue[str],
    ) -> NoReturn:
        """Run until cancelled (:class:`ViewCancelled`) or closed (:class:`UserClosed`)."""

        ticker = Ticker(self.refresh_interval)
        selector = Selector([
            ("cancel", scope.wait),
            ("event", events.get),
            ("data", data_queue.get),
            ("price", price_queue.get),
            ("tick", ticker.tick),
        ])

        self.refresh_layout()
        try:
            while True:
                source, value = await selector.select()
                if source == "cancel":
                    raise ViewCancelled(value)
                if source == "tick":
                    self.refresh_layout()
                elif source == "event":
                    self.handle_key(value, interval_channel)
                    self.renderer.render(self.state)
                elif source == "data":
                    self.apply_result(value)
                    self.renderer.render(self.state)
                elif source == "price":
                    self.state.apply_price(value)
                    self.metrics.incr("price_updates")
                    self.renderer.render_price(self.state)
        finally:
            selector.close()

    def refresh_layout(self) -> None:
        width, height = self.renderer.dimensions()
        self.state.resize(width, height)
        self.renderer.render(self.state)

    def apply_result(self, result: Any) -> None:
        if isinstance(result, Snapshot):
            self.state.apply_snapshot(result)
        elif isinstance(result, History):
            self.state.apply_history(result)
        elif isinstance(result, Detail):
            self.state.apply_detail(result)
        else:
            self.logger.warning("Ignoring unknown poll result %r", result, extra={"event": "unknown_result"})
            return
        self.metrics.incr(f"results_{result_kind(result)}")

    def handle_key(self, key: str, interval_channel: LatestValue[str]) -> None:
        state = self.state
        if key in QUIT_KEYS:
            raise UserClosed("coin UI closed")
        if key == "<Escape>" and not state.overlay:
            raise UserClosed("UI closed")
        if key == "<Resize>":
            width, height = self.renderer.dimensions()
            state.resize(width, height)
        elif key == "c":
            state.open_currency_picker(include_crypto=False)
        elif key == "C":
            state.open_currency_picker(include_crypto=True)

        if state.overlay:
            self._handle_picker_key(key)
        else:
            self._handle_page_key(key, interval_channel)

        self._previous_key = "" if self._previous_key == "g" else key

    def _handle_picker_key(self, key: str) -> None:
        if self._navigate(self.state.currency_picker, key):
            return
        if key == "<Enter>":
            if self.state.commit_currency():
                self.logger.info(
                    "Currency set to %s", self.state.currency.label,
                    extra={"event": "currency_change", "currency": self.state.currency.label},
                )
        elif key == "<Escape>":
            self.state.close_currency_picker()

    def _handle_page_key(self, key: str, interval_channel: LatestValue[str]) -> None:
        state = self.state
        state.favourites.show_cursor = True
        if self._navigate(state.favourites, key):
            return
        if key in ("1", "2"):
            state.sort_favourites(int(key) - 1, ascending=True)
        elif key in ("<F1>", "<F2>"):
            state.sort_favourites(int(key[2]) - 1, ascending=False)
        elif key in ("[", "]"):
            interval_channel.offer(state.step_interval(1 if key == "]" else -1))

    def _navigate(self, table: Any, key: str) -> bool:
        if key in ("j", "<Down>"):
            table.scroll_down()
        elif key in ("k", "<Up>"):
            table.scroll_up()
        elif key == "<C-d>":
            table.scroll_half_page_down()
        elif key == "<C-u>":
            table.scroll_half_page_up()
        elif key in ("<C-f>", "<PageDown>"):
            table.scroll_page_down()
        elif key in ("<C-b>", "<PageUp>"):
            table.scroll_page_up()
        elif key == "g" and self._previous_key == "g":
            table.scroll_top()
        elif key == "<Home>":
            table.scroll_top()
        elif key in ("G", "<End>"):
            table.scroll_bottom()
        else:
            return False
        return True


__all__ = ["CoinPage", "Renderer", "REFRESH_INTERVAL"]

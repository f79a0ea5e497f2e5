import asyncio
import unittest
from typing import Any, List, Tuple

from coinscope.data.channels import CancelScope, LatestValue
from coinscope.data.models import CurrencyRate, History, Snapshot
from coinscope.display.page import CoinPage
from coinscope.display.state import CoinPageState
from coinscope.errors import UserClosed, ViewCancelled
from coinscope.infra.metrics import MetricsSink

EURO = CurrencyRate(id="euro", symbol="EUR", currency_symbol="€", type="fiat", rate_usd="2")


class RecordingRenderer:
    def __init__(self) -> None:
        self.frames: List[Tuple[str, bool]] = []

    def render(self, state: CoinPageState) -> None:
        self.frames.append(("page", state.overlay))

    def render_price(self, state: CoinPageState) -> None:
        self.frames.append(("price", state.overlay))

    def dimensions(self) -> Tuple[int, int]:
        return 80, 24


class CoinPageLoopTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.renderer = RecordingRenderer()
        self.metrics = MetricsSink()
        self.page = CoinPage(CoinPageState("bitcoin"), self.renderer, refresh_interval=60, metrics=self.metrics)
        self.scope = CancelScope()
        self.events: asyncio.Queue = asyncio.Queue()
        self.data: asyncio.Queue = asyncio.Queue(maxsize=1)
        self.prices: asyncio.Queue = asyncio.Queue(maxsize=1)
        self.intervals: LatestValue[str] = LatestValue()

    def start(self) -> "asyncio.Task[Any]":
        return asyncio.create_task(self.page.run(self.scope, self.events, self.data, self.prices, self.intervals))

    async def wait_for_frames(self, count: int) -> None:
        for _ in range(200):
            if len(self.renderer.frames) >= count:
                return
            await asyncio.sleep(0.005)
        self.fail(f"expected {count} frames, got {self.renderer.frames}")

    async def test_quit_key_closes_page(self) -> None:
        await self.events.put("q")

        with self.assertRaises(UserClosed) as ctx:
            await asyncio.wait_for(self.start(), timeout=2)
        self.assertEqual("coin UI closed", str(ctx.exception))

    async def test_escape_outside_picker_closes_page(self) -> None:
        await self.events.put("<Escape>")

        with self.assertRaises(UserClosed) as ctx:
            await asyncio.wait_for(self.start(), timeout=2)
        self.assertEqual("UI closed", str(ctx.exception))

    async def test_cancel_wins_over_pending_inputs(self) -> None:
        await self.events.put("j")
        await self.data.put(Snapshot({"BTC": 1.0}))
        self.scope.cancel("view closed")

        with self.assertRaises(ViewCancelled) as ctx:
            await asyncio.wait_for(self.start(), timeout=2)
        self.assertEqual("view closed", ctx.exception.reason)
        self.assertEqual([("page", False)], self.renderer.frames)

    async def test_one_redraw_per_input(self) -> None:
        task = self.start()
        await self.wait_for_frames(1)

        await self.data.put(Snapshot({"BTC": 64000.0}))
        await self.wait_for_frames(2)
        await self.data.put(History.from_series([1.0, 2.0]))
        await self.wait_for_frames(3)
        await self.prices.put("64000.5")
        await self.wait_for_frames(4)
        self.scope.cancel()
        with self.assertRaises(ViewCancelled):
            await asyncio.wait_for(task, timeout=2)

        self.assertEqual([("page", False), ("page", False), ("page", False), ("price", False)], self.renderer.frames)
        self.assertEqual([["BTC", "64000.00"]], self.page.state.favourites.rows)
        self.assertEqual("64000.50 USD $", self.page.state.price_label)
        self.assertEqual(1, self.metrics.counters["results_snapshot"])
        self.assertEqual(1, self.metrics.counters["results_history"])
        self.assertEqual(1, self.metrics.counters["price_updates"])

    async def test_picker_renders_overlay_only(self) -> None:
        self.page.state.rates = (EURO,)
        task = self.start()
        await self.events.put("c")
        await self.wait_for_frames(2)
        await self.events.put("<Escape>")
        await self.wait_for_frames(3)
        self.scope.cancel()
        with self.assertRaises(ViewCancelled):
            await asyncio.wait_for(task, timeout=2)

        self.assertEqual([("page", False), ("page", True), ("page", False)], self.renderer.frames)

    async def test_tick_refreshes_layout(self) -> None:
        self.page.refresh_interval = 0.01
        task = self.start()
        await self.wait_for_frames(3)
        self.scope.cancel()
        with self.assertRaises(ViewCancelled):
            await asyncio.wait_for(task, timeout=2)

        self.assertEqual((80, 24), (self.page.state.width, self.page.state.height))


class HandleKeyTest(unittest.TestCase):
    def setUp(self) -> None:
        self.renderer = RecordingRenderer()
        self.state = CoinPageState("bitcoin", rates=(EURO,))
        self.page = CoinPage(self.state, self.renderer)
        self.intervals: LatestValue[str] = LatestValue()

    def press(self, *keys: str) -> None:
        for key in keys:
            self.page.handle_key(key, self.intervals)

    def test_interval_keys_offer_neighbouring_interval(self) -> None:
        self.press("]")
        self.assertEqual("1 min", self.intervals.poll())

        self.press("[", "[")
        self.assertEqual("12 hours", self.intervals.poll())
        self.assertEqual("12 hours", self.state.interval)

    def test_sort_keys(self) -> None:
        self.state.apply_snapshot(Snapshot({"ETH": 3000.0, "BTC": 64000.0, "DOGE": 0.1}))

        self.press("2")
        self.assertEqual(["DOGE", "ETH", "BTC"], [row[0] for row in self.state.favourites.rows])
        self.press("<F1>")
        self.assertEqual(["ETH", "DOGE", "BTC"], [row[0] for row in self.state.favourites.rows])
        self.assertEqual("Symbol ▼", self.state.favourites.header[0])

    def test_navigation_and_double_g(self) -> None:
        self.state.apply_snapshot(Snapshot({"A": 1.0, "B": 2.0, "C": 3.0}))

        self.press("G")
        self.assertEqual(2, self.state.favourites.selected)
        self.press("k")
        self.assertEqual(1, self.state.favourites.selected)
        self.press("g")
        self.assertEqual(1, self.state.favourites.selected)
        self.press("g")
        self.assertEqual(0, self.state.favourites.selected)

    def test_picker_enter_switches_currency(self) -> None:
        self.press("c")
        self.assertTrue(self.state.overlay)
        self.press("j", "<Enter>")

        self.assertFalse(self.state.overlay)
        self.assertEqual("EUR €", self.state.currency.label)
        self.assertEqual(2.0, self.state.currency.factor)

    def test_escape_in_picker_only_closes_picker(self) -> None:
        self.press("C", "<Escape>")

        self.assertFalse(self.state.overlay)
        self.assertEqual("USD $", self.state.currency.label)

    def test_resize_reads_renderer_dimensions(self) -> None:
        self.press("<Resize>")

        self.assertEqual((80, 24), (self.state.width, self.state.height))


if __name__ == "__main__":
    unittest.main()

"""``rich`` renderer for the coin page."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

from rich.console import Console, Group, RenderableType
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .format import DOWN_ARROW
from .state import CoinPageState
from .table import TableView

SPARK_BARS = "▁▂▃▄▅▆▇█"


def sparkline(series: Sequence[float], width: int) -> str:
    if not series or width <= 0:
        return ""
    if len(series) > width:
        step = len(series) / width
        series = [series[int(i * step)] for i in range(width)]
    top = max(series) or 1.0
    last = len(SPARK_BARS) - 1
    return "".join(SPARK_BARS[min(last, max(0, int(value / top * last)))] for value in series)


def gauge(percent: int, width: int) -> str:
    filled = max(0, min(width, round(width * percent / 100)))
    return f"{'█' * filled}{'░' * (width - filled)} {percent}%"


def _table(view: TableView, title: str) -> Table:
    table = Table(title=title, expand=True, box=None)
    for column in view.header:
        table.add_column(column)
    offset, rows = view.window()
    for index, row in enumerate(rows, start=offset):
        style = "reverse" if view.show_cursor and index == view.selected else None
        table.add_row(*row, style=style)
    return table


class RichRenderer:
    """Draws :class:`CoinPageState` into a full-screen ``rich.live.Live``."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self._live: Optional[Live] = None
        self._layout: Optional[Layout] = None

    def __enter__(self) -> "RichRenderer":
        self._live = Live(console=self.console, screen=True, auto_refresh=False, transient=True)
        self._live.__enter__()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._live is not None:
            self._live.__exit__(*exc_info)
        self._live = None

    def dimensions(self) -> Tuple[int, int]:
        size = self.console.size
        return size.width, size.height

    def render(self, state: CoinPageState) -> None:
        if state.overlay:
            self._layout = None
            self._show(self._currency_panel(state))
            return
        self._layout = self._page(state)
        self._show(self._layout)

    def render_price(self, state: CoinPageState) -> None:
        if state.overlay:
            return
        if self._layout is None:
            self.render(state)
            return
        self._layout["price"].update(self._price_panel(state))
        self._show(self._layout)

    def _show(self, renderable: RenderableType) -> None:
        if self._live is None:
            self.console.print(renderable)
            return
        self._live.update(renderable, refresh=True)

    # --- Panels -----------------------------------------------------------
    def _page(self, state: CoinPageState) -> Layout:
        layout = Layout()
        layout.split_column(Layout(name="top"), Layout(name="chart"), Layout(name="bottom"))
        layout["top"].split_row(Layout(name="price"), Layout(name="details", ratio=2))
        layout["bottom"].split_row(Layout(name="favourites"), Layout(name="volume"), Layout(name="supply"))

        layout["price"].update(self._price_panel(state))
        layout["details"].update(Panel(_table(state.details, ""), title=" Details "))
        layout["chart"].update(self._chart_panel(state))
        layout["favourites"].update(Panel(_table(state.favourites, ""), title=" Favourites "))
        layout["volume"].update(Panel(Text(gauge(state.volume_percent, max(10, state.width // 3 - 10))), title=" 24 Hr Volume / Market Cap "))
        layout["supply"].update(self._supply_panel(state))
        return layout

    def _price_panel(self, state: CoinPageState) -> Panel:
        style = "red" if state.change_label.startswith(DOWN_ARROW) else "green"
        body = Group(Text(state.price_label or "-", style="bold"), Text(state.change_label, style=style))
        return Panel(body, title=" Live Price ")

    def _chart_panel(self, state: CoinPageState) -> Panel:
        labels = "  ".join(f"{name}: {value}" for name, value in sorted(state.chart_labels.items()))
        line = sparkline(state.chart_series, max(10, state.width - 4))
        return Panel(Group(Text(line, style="cyan"), Text(labels)), title=f" Price History ({state.interval}) ")

    def _supply_panel(self, state: CoinPageState) -> Panel:
        lines: List[Text] = []
        for name, value in zip(("Supply", "Max Supply"), state.supply_values):
            lines.append(Text(f"{name}: {value:.2f}"))
        return Panel(Group(*lines), title=state.supply_title)

    def _currency_panel(self, state: CoinPageState) -> Panel:
        return Panel(_table(state.currency_picker, ""), title=f" Select Currency (current: {state.currency.label}) ")


__all__ = ["RichRenderer", "gauge", "sparkline"]

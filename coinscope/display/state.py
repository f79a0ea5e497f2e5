"""Display state of one coin page.

Only the coin page's event loop mutates a :class:`CoinPageState`; every
transition is derived from the value handed in and the active currency, so
re-applying the same result reproduces the same fields.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from coinscope.data.coincap_client import INTERVAL_LABELS
from coinscope.data.models import USD, CurrencyRate, Detail, History, Snapshot

from .format import DOWN_ARROW, UP_ARROW, change_label, parse_float, round_values, sort_rows
from .table import TableView

LOGGER = logging.getLogger(__name__)

SYMBOL_COLUMN = "Symbol"


@dataclass(frozen=True)
class Currency:
    label: str = "USD $"
    factor: float = 1.0

    def convert(self, value_usd: float) -> float:
        return value_usd / self.factor

    def format(self, value_usd: float) -> str:
        return f"{self.convert(value_usd):.2f} {self.label}"


class CoinPageState:
    """Everything the renderer shows for one coin."""

    def __init__(
        self,
        coin_id: str,
        rates: Sequence[CurrencyRate] = (USD,),
        currency: Optional[Currency] = None,
        interval: str = "1 day",
    ) -> None:
        self.coin_id = coin_id
        self.rates = tuple(rates) or (USD,)
        self.currency = currency or Currency()
        self.interval = interval

        self.favourites = TableView(header=self._favourites_header())
        self.sort_column = -1
        self.sort_ascending = False

        self.details = TableView(header=["Name", coin_id])
        self.chart_series: List[float] = []
        self.chart_labels: Dict[str, str] = {}
        self.volume_percent = 0
        self.supply_values: List[float] = []
        self.supply_title = " Supply "
        self.price_label = ""
        self.change_label = "NA"

        self.overlay = False
        self.currency_picker = TableView(header=["Currency", "Symbol", "Type", "Rate USD"])
        self.width = 0
        self.height = 0

    # --- Poll results ------------------------------------------------------
    def apply_snapshot(self, snapshot: Snapshot) -> None:
        rows = [[symbol, f"{self.currency.convert(price):.2f}"] for symbol, price in snapshot.prices.items()]
        self.favourites.header = self._favourites_header()
        self.favourites.set_rows(rows)
        if self.sort_column != -1:
            self.sort_favourites(self.sort_column, self.sort_ascending)
        else:
            self.favourites.set_rows(sort_rows(self.favourites.rows, 0, True))

    def apply_history(self, history: History) -> None:
        self.chart_series = list(history.prices)
        self.chart_labels["Max"] = self.currency.format(history.max_price)
        self.chart_labels["Min"] = self.currency.format(history.min_price)

    def apply_detail(self, detail: Detail) -> None:
        asset = detail.asset
        self.details.header = ["Name", asset.name]

        previous = {row[0]: row[1] for row in self.details.rows if len(row) == 2}
        market_cap: Optional[float] = None
        market_cap_text = previous.get("Market Cap", "")
        try:
            market_cap = parse_float(asset.market_cap_usd)
            values, unit = round_values(self.currency.convert(market_cap))
            market_cap_text = " ".join(part for part in (f"{values[0]:.2f}", unit, self.currency.label) if part)
        except ValueError:
            LOGGER.debug("unparsable market cap %r", asset.market_cap_usd)

        vwap_text = previous.get("VWAP 24Hr", "")
        try:
            vwap_text = self.currency.format(parse_float(asset.vwap_24hr))
        except ValueError:
            LOGGER.debug("unparsable vwap %r", asset.vwap_24hr)

        self.details.set_rows([
            ["Symbol", asset.symbol],
            ["Rank", asset.rank],
            ["Market Cap", market_cap_text],
            ["VWAP 24Hr", vwap_text],
            ["Explorer", asset.explorer],
        ])

        try:
            self.chart_labels["Value"] = self.currency.format(parse_float(asset.price_usd))
        except ValueError:
            LOGGER.debug("unparsable price %r", asset.price_usd)

        try:
            volume = parse_float(asset.volume_usd_24hr)
        except ValueError:
            volume = None
        if volume is not None and market_cap is not None and market_cap > 0:
            percent = int(volume / market_cap * 100)
            if 0 <= percent <= 100:
                self.volume_percent = percent

        try:
            supply_values, unit = round_values(parse_float(asset.supply), parse_float(asset.max_supply))
        except ValueError:
            pass
        else:
            self.supply_values = supply_values
            self.supply_title = f" Supply ({unit}) " if unit else " Supply "

        try:
            self.change_label = change_label(parse_float(asset.change_percent_24hr))
        except ValueError:
            self.change_label = "NA"

    def apply_price(self, raw_price: str) -> bool:
        try:
            price = parse_float(raw_price)
        except ValueError:
            LOGGER.debug("unparsable live price %r", raw_price)
            return False
        self.price_label = self.currency.format(price)
        return True

    # --- Favourites table --------------------------------------------------
    def sort_favourites(self, column: int, ascending: bool) -> None:
        header = self._favourites_header()
        if not 0 <= column < len(header):
            return
        self.sort_column = column
        self.sort_ascending = ascending
        header[column] = f"{header[column]} {UP_ARROW if ascending else DOWN_ARROW}"
        self.favourites.header = header
        self.favourites.set_rows(sort_rows(self.favourites.rows, column, ascending))

    def _favourites_header(self) -> List[str]:
        return [SYMBOL_COLUMN, f"Price ({self.currency.label})"]

    # --- Currency picker ---------------------------------------------------
    def open_currency_picker(self, include_crypto: bool = False) -> None:
        rates = [rate for rate in self.rates if include_crypto or rate.type == "fiat"]
        self.currency_picker.set_rows([rate.as_row() for rate in sorted(rates, key=lambda rate: rate.symbol)])
        self.currency_picker.show_cursor = True
        self.overlay = True

    def close_currency_picker(self) -> None:
        self.overlay = False

    def commit_currency(self) -> bool:
        """Adopt the highlighted currency; a malformed row keeps the current one."""

        self.overlay = False
        picker = self.currency_picker
        if picker.selected >= len(picker.rows):
            return False
        row = picker.rows[picker.selected]
        try:
            factor = parse_float(row[3])
            if factor <= 0:
                raise ValueError(f"non-positive rate {factor}")
        except (ValueError, IndexError) as exc:
            LOGGER.warning("Ignoring currency selection %s: %s", row, exc, extra={"event": "currency_rejected"})
            return False
        self.currency = Currency(label=f"{row[0]} {row[1]}".strip(), factor=factor)
        return True

    # --- History interval --------------------------------------------------
    def step_interval(self, step: int) -> str:
        try:
            index = INTERVAL_LABELS.index(self.interval)
        except ValueError:
            index = len(INTERVAL_LABELS) - 1
        self.interval = INTERVAL_LABELS[(index + step) % len(INTERVAL_LABELS)]
        return self.interval

    # --- Layout ------------------------------------------------------------
    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.favourites.page_size = max(1, height // 2 - 4)
        self.currency_picker.page_size = max(1, height - 6)


__all__ = ["CoinPageState", "Currency"]

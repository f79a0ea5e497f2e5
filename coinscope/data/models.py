"""Immutable values carried from adapters to the coin page."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Snapshot:
    """Current prices for the tracked favourites keyed by uppercase symbol."""

    prices: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "prices", MappingProxyType(dict(self.prices)))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, float]]) -> "Snapshot":
        """Fold ``(symbol, price)`` pairs; a repeated symbol keeps its last price."""

        prices: Dict[str, float] = {}
        for symbol, price in pairs:
            prices[symbol.upper()] = float(price)
        return cls(prices)


@dataclass(frozen=True)
class History:
    """Baseline-zeroed price series plus the raw minimum and maximum."""

    prices: Tuple[float, ...]
    min_price: float
    max_price: float

    @classmethod
    def from_series(cls, series: Iterable[float]) -> "History":
        raw = [float(value) for value in series]
        if not raw:
            return cls((), 0.0, 0.0)
        low, high = min(raw), max(raw)
        return cls(tuple(value - low for value in raw), low, high)

    def restored(self) -> Tuple[float, ...]:
        return tuple(value + self.min_price for value in self.prices)


@dataclass(frozen=True)
class AssetDetail:
    """Full asset record, fields kept as the raw strings the provider sends."""

    id: str
    name: str
    symbol: str
    rank: str
    supply: str
    max_supply: str
    market_cap_usd: str
    volume_usd_24hr: str
    price_usd: str
    change_percent_24hr: str
    vwap_24hr: str
    explorer: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AssetDetail":
        return cls(
            id=_text(payload.get("id")),
            name=_text(payload.get("name")),
            symbol=_text(payload.get("symbol")),
            rank=_text(payload.get("rank")),
            supply=_text(payload.get("supply")),
            max_supply=_text(payload.get("maxSupply")),
            market_cap_usd=_text(payload.get("marketCapUsd")),
            volume_usd_24hr=_text(payload.get("volumeUsd24Hr")),
            price_usd=_text(payload.get("priceUsd")),
            change_percent_24hr=_text(payload.get("changePercent24Hr")),
            vwap_24hr=_text(payload.get("vwap24Hr")),
            explorer=_text(payload.get("explorer")),
        )


@dataclass(frozen=True)
class Detail:
    """One asset record and the provider timestamp it was retrieved at."""

    asset: AssetDetail
    timestamp: int = 0


PollResult = Union[Snapshot, History, Detail]


@dataclass(frozen=True)
class CurrencyRate:
    """Exchange rate row offered by the currency picker."""

    id: str
    symbol: str
    currency_symbol: str
    type: str
    rate_usd: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CurrencyRate":
        return cls(
            id=_text(payload.get("id")),
            symbol=_text(payload.get("symbol")),
            currency_symbol=_text(payload.get("currencySymbol")),
            type=_text(payload.get("type")),
            rate_usd=_text(payload.get("rateUsd")),
        )

    def as_row(self) -> list[str]:
        return [self.symbol, self.currency_symbol, self.type, self.rate_usd]


USD = CurrencyRate(id="united-states-dollar", symbol="USD", currency_symbol="$", type="fiat", rate_usd="1")


def result_kind(result: PollResult) -> Optional[str]:
    if isinstance(result, Snapshot):
        return "snapshot"
    if isinstance(result, History):
        return "history"
    if isinstance(result, Detail):
        return "detail"
    return None


__all__ = [
    "AssetDetail",
    "CurrencyRate",
    "Detail",
    "History",
    "PollResult",
    "Snapshot",
    "USD",
    "result_kind",
]

"""Endpoints and client interfaces for the upstream market data providers."""

from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Sequence

from .models import CurrencyRate, Detail


@dataclass
class ApiEndpoints:
    """Base URLs of every provider a coin view talks to.

    Attributes:
        coincap_rest_url: CoinCap REST root (history, assets, rates).
        coincap_ws_url: CoinCap price stream endpoint.
        coingecko_rest_url: CoinGecko REST root for batched market snapshots.
    """

    coincap_rest_url: str = "https://api.coincap.io/v2"
    coincap_ws_url: str = "wss://ws.coincap.io/prices"
    coingecko_rest_url: str = "https://api.coingecko.com/api/v3"


class MarketsClient(Protocol):
    """Batched current-price lookups."""

    def coins_markets(
        self,
        vs_currency: str,
        ids: Sequence[str],
        order: str,
        per_page: int,
        page: int,
        sparkline: bool,
        price_change_percentage: Sequence[str],
    ) -> List[Dict[str, Any]]:
        """Return one market row (``symbol``, ``current_price``...) per id."""


class AssetClient(Protocol):
    """Per-asset history, detail records and exchange rates."""

    def fetch_history(self, coin_id: str, interval: str) -> List[Dict[str, Any]]:
        """Return chronological ``{"priceUsd": str, "time": int}`` points."""

    def fetch_asset(self, coin_id: str) -> Detail:
        """Return the full detail record of one asset."""

    def fetch_rates(self) -> List[CurrencyRate]:
        """Return every exchange rate known to the provider."""

    def stream_url(self, coin_id: str) -> str:
        """Return the price stream URL for one asset."""


def join_url(base: str, path: str) -> str:
    return f"{base.rstrip('/')}/{path.lstrip('/')}"

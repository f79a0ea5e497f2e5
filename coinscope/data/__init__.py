"""Data access layer: provider clients, polling adapters and channels."""

from .adapters import IntervalSelector, watch_asset, watch_favourites, watch_history
from .channels import CancelScope, LatestValue, Selector, send
from .clients import ApiEndpoints
from .coincap_client import CoinCapClient
from .coingecko_client import CoinGeckoClient
from .models import AssetDetail, CurrencyRate, Detail, History, PollResult, Snapshot
from .polling import RetryPolicy, loop_tick
from .websocket import watch_live_price

__all__ = [
    "ApiEndpoints",
    "AssetDetail",
    "CancelScope",
    "CoinCapClient",
    "CoinGeckoClient",
    "CurrencyRate",
    "Detail",
    "History",
    "IntervalSelector",
    "LatestValue",
    "PollResult",
    "RetryPolicy",
    "Selector",
    "Snapshot",
    "loop_tick",
    "send",
    "watch_asset",
    "watch_favourites",
    "watch_history",
    "watch_live_price",
]

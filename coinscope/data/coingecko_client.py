"""CoinGecko REST client for batched favourites prices."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from coinscope.errors import FetchError

from .clients import ApiEndpoints, join_url

ORDER_MARKET_CAP_DESC = "market_cap_desc"


class CoinGeckoClient:
    """Blocking CoinGecko client exposing the ``/coins/markets`` query."""

    def __init__(
        self,
        endpoints: Optional[ApiEndpoints] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.endpoints = endpoints or ApiEndpoints()
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    def coins_markets(
        self,
        vs_currency: str,
        ids: Sequence[str],
        order: str = ORDER_MARKET_CAP_DESC,
        per_page: int = 100,
        page: int = 1,
        sparkline: bool = False,
        price_change_percentage: Sequence[str] = (),
    ) -> List[Dict[str, Any]]:
        params = {
            "vs_currency": vs_currency,
            "ids": ",".join(ids),
            "order": order,
            "per_page": per_page,
            "page": page,
            "sparkline": str(sparkline).lower(),
            "price_change_percentage": ",".join(price_change_percentage),
        }
        url = join_url(self.endpoints.coingecko_rest_url, "/coins/markets")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            self.logger.debug("GET %s failed: %s", url, exc, extra={"event": "rest_error", "url": url})
            raise FetchError("coingecko", f"GET {url} failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError("coingecko", f"GET {url} returned invalid JSON: {exc}") from exc

        if not isinstance(payload, list):
            raise FetchError("coingecko", "coins/markets did not return a list")
        return payload


__all__ = ["CoinGeckoClient", "ORDER_MARKET_CAP_DESC"]

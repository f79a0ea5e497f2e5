"""CoinCap REST client for price history, asset details and exchange rates.

All failures raise :class:`~coinscope.errors.FetchError`; nothing is retried
here, so a caller sees exactly one error per failed request.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from coinscope.errors import FetchError

from .clients import ApiEndpoints, join_url
from .models import AssetDetail, CurrencyRate, Detail

INTERVAL_CODES: Dict[str, str] = {
    "1 min": "m1",
    "5 min": "m5",
    "15 min": "m15",
    "30 min": "m30",
    "1 hour": "h1",
    "2 hours": "h2",
    "6 hours": "h6",
    "12 hours": "h12",
    "1 day": "d1",
}

INTERVAL_LABELS = list(INTERVAL_CODES)


def interval_code(interval: str) -> str:
    """Map a human interval label to the provider code; unknown values pass through."""

    return INTERVAL_CODES.get(interval, interval)


class CoinCapClient:
    """Blocking CoinCap client; adapters call it from a worker thread."""

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

    def fetch_history(self, coin_id: str, interval: str) -> List[Dict[str, Any]]:
        payload = self._get(f"/assets/{coin_id}/history", params={"interval": interval_code(interval)})
        points = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(points, list):
            raise FetchError("coincap", f"history for {coin_id} has no data list")
        return points

    def fetch_asset(self, coin_id: str) -> Detail:
        payload = self._get(f"/assets/{coin_id}/")
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise FetchError("coincap", f"asset {coin_id} has no data object")
        try:
            timestamp = int(payload.get("timestamp") or 0)
        except (TypeError, ValueError) as exc:
            raise FetchError("coincap", f"bad timestamp for {coin_id}: {payload.get('timestamp')!r}") from exc
        return Detail(asset=AssetDetail.from_payload(data), timestamp=timestamp)

    def fetch_rates(self) -> List[CurrencyRate]:
        payload = self._get("/rates")
        rows = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise FetchError("coincap", "rates response has no data list")
        return [CurrencyRate.from_payload(row) for row in rows if isinstance(row, dict)]

    def stream_url(self, coin_id: str) -> str:
        return f"{self.endpoints.coincap_ws_url}?assets={coin_id}"

    # --- REST helpers -----------------------------------------------------
    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = join_url(self.endpoints.coincap_rest_url, path)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            self.logger.debug("GET %s failed: %s", url, exc, extra={"event": "rest_error", "url": url})
            raise FetchError("coincap", f"GET {url} failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError("coincap", f"GET {url} returned invalid JSON: {exc}") from exc


__all__ = ["CoinCapClient", "INTERVAL_CODES", "INTERVAL_LABELS", "interval_code"]

"""Config loading for the coin view."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from coinscope.data.clients import ApiEndpoints
from coinscope.data.polling import RetryPolicy

DEFAULT_CONFIG_PATH = Path(os.getenv("CONFIG_PATH", "config/settings.yaml"))


@dataclass
class ApiConfig:
    coincap_rest_url: str = "https://api.coincap.io/v2"
    coincap_ws_url: str = "wss://ws.coincap.io/prices"
    coingecko_rest_url: str = "https://api.coingecko.com/api/v3"
    timeout_seconds: float = 10.0

    def endpoints(self) -> ApiEndpoints:
        return ApiEndpoints(
            coincap_rest_url=self.coincap_rest_url,
            coincap_ws_url=self.coincap_ws_url,
            coingecko_rest_url=self.coingecko_rest_url,
        )


@dataclass
class PollingConfig:
    favourites_seconds: float = 10.0
    history_seconds: float = 3.0
    asset_seconds: float = 3.0
    live_price_seconds: float = 0.1
    refresh_seconds: float = 1.0
    max_retries: int = 0
    backoff_initial: float = 1.0
    backoff_maximum: float = 30.0
    backoff_factor: float = 2.0

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            initial=self.backoff_initial,
            maximum=self.backoff_maximum,
            factor=self.backoff_factor,
        )


@dataclass
class ViewConfig:
    favourites: List[str] = field(default_factory=lambda: ["bitcoin", "ethereum"])
    history_interval: str = "1 day"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = "var/coinscope.log"


@dataclass
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"config section '{name}' must be a mapping")
    return section


def parse_config(raw: Dict[str, Any]) -> AppConfig:
    api = _section(raw, "api")
    polling = _section(raw, "polling")
    view = _section(raw, "view")
    log = _section(raw, "logging")

    return AppConfig(
        api=ApiConfig(
            coincap_rest_url=api.get("coincap_rest_url", ApiConfig.coincap_rest_url),
            coincap_ws_url=api.get("coincap_ws_url", ApiConfig.coincap_ws_url),
            coingecko_rest_url=api.get("coingecko_rest_url", ApiConfig.coingecko_rest_url),
            timeout_seconds=float(api.get("timeout_seconds", ApiConfig.timeout_seconds)),
        ),
        polling=PollingConfig(
            favourites_seconds=float(polling.get("favourites_seconds", PollingConfig.favourites_seconds)),
            history_seconds=float(polling.get("history_seconds", PollingConfig.history_seconds)),
            asset_seconds=float(polling.get("asset_seconds", PollingConfig.asset_seconds)),
            live_price_seconds=float(polling.get("live_price_seconds", PollingConfig.live_price_seconds)),
            refresh_seconds=float(polling.get("refresh_seconds", PollingConfig.refresh_seconds)),
            max_retries=int(polling.get("max_retries", PollingConfig.max_retries)),
            backoff_initial=float(polling.get("backoff_initial", PollingConfig.backoff_initial)),
            backoff_maximum=float(polling.get("backoff_maximum", PollingConfig.backoff_maximum)),
            backoff_factor=float(polling.get("backoff_factor", PollingConfig.backoff_factor)),
        ),
        view=ViewConfig(
            favourites=[str(coin) for coin in view.get("favourites", ViewConfig().favourites)],
            history_interval=str(view.get("history_interval", ViewConfig.history_interval)),
        ),
        logging=LoggingConfig(
            level=str(log.get("level", LoggingConfig.level)),
            file=log.get("file", LoggingConfig.file),
        ),
    )


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load configuration from YAML, defaulting every field when the file is missing."""

    resolved = Path(path).expanduser()
    if not resolved.exists():
        logging.getLogger(__name__).warning("Config file %s not found, using defaults", resolved)
        return AppConfig()
    with resolved.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"config file {resolved} must contain a mapping")
    return parse_config(raw)


__all__ = [
    "AppConfig",
    "ApiConfig",
    "LoggingConfig",
    "PollingConfig",
    "ViewConfig",
    "load_config",
    "parse_config",
]

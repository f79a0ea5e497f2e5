"""Infrastructure utilities for configuration, logging and metrics."""

from .config import AppConfig, load_config
from .logging import configure_logging
from .metrics import MetricsSink

__all__ = [
    "AppConfig",
    "MetricsSink",
    "configure_logging",
    "load_config",
]

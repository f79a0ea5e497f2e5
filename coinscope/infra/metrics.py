"""In-process counters for a coin view."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping


@dataclass
class MetricsSink:
    """Collects counters and gauges for reporting."""

    counters: Dict[str, int] = field(default_factory=dict)
    gauges: Dict[str, float] = field(default_factory=dict)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("coinscope.metrics"))
    _lock: threading.Lock = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def incr(self, name: str, value: int = 1) -> None:
        with self._lock:
            self.counters[name] = self.counters.get(name, 0) + value

    def observe(self, name: str, values: Mapping[str, Any]) -> None:
        """Record an event, incrementing a counter and updating gauges."""

        with self._lock:
            counter_name = f"{name}_total"
            self.counters[counter_name] = self.counters.get(counter_name, 0) + 1
            for key, value in values.items():
                if isinstance(value, (int, float)):
                    self.gauges[f"{name}_{key}"] = float(value)
        self.log_event(name, dict(values))

    def export(self) -> Dict[str, float | int]:
        """Return a merged view of all current metrics."""

        with self._lock:
            snapshot = {**self.counters, **self.gauges}
        return snapshot

    def log_event(self, event: str, payload: Mapping[str, Any] | None = None) -> None:
        extras = {"event": event, **(payload or {})}
        self.logger.info(event, extra=extras)

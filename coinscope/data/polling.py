"""Fixed-interval polling loop every adapter is built on."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, NoReturn, Optional

from coinscope.data.channels import CancelScope, race
from coinscope.errors import ViewCancelled

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retries allowed after a failed callback before the loop gives up.

    The default of zero retries makes the first failure fatal.
    """

    max_retries: int = 0
    initial: float = 1.0
    maximum: float = 30.0
    factor: float = 2.0

    def delay(self, attempt: int) -> float:
        return min(self.initial * (self.factor ** attempt), self.maximum)


class Ticker:
    """Fires on a fixed grid; deadlines that already passed are skipped."""

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"tick interval must be positive, got {interval!r}")
        self.interval = float(interval)
        self._deadline: Optional[float] = None
        self.skipped = 0

    async def tick(self) -> float:
        loop = asyncio.get_running_loop()
        now = loop.time()
        if self._deadline is None:
            self._deadline = now + self.interval
        elif self._deadline <= now:
            missed = int((now - self._deadline) // self.interval) + 1
            self.skipped += missed
            self._deadline += missed * self.interval

        await asyncio.sleep(self._deadline - now)
        fired = self._deadline
        self._deadline += self.interval
        return fired


async def loop_tick(
    scope: CancelScope,
    interval: float,
    callback: Callable[[], Awaitable[None]],
    *,
    name: str = "poll",
    retry: Optional[RetryPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> NoReturn:
    """Invoke ``callback`` once per tick until cancelled or it fails.

    Raises :class:`ViewCancelled` once ``scope`` fires, or re-raises the
    callback's exception as soon as it fails and no retries remain. At most
    one invocation runs at a time.
    """

    log = logger or LOGGER
    ticker = Ticker(interval)
    failures = 0

    while True:
        await race(scope, ticker.tick())
        try:
            await race(scope, callback())
        except (ViewCancelled, asyncio.CancelledError):
            raise
        except Exception as exc:
            policy = retry or RetryPolicy()
            if failures >= policy.max_retries:
                log.debug(
                    "%s stopped after error: %s", name, exc,
                    extra={"event": "poll_stopped", "task": name, "failures": failures + 1},
                )
                raise
            delay = policy.delay(failures)
            failures += 1
            log.warning(
                "%s failed (%s), retrying in %.1fs", name, exc, delay,
                extra={"event": "poll_retry", "task": name, "attempt": failures, "sleep_seconds": delay},
            )
            await race(scope, asyncio.sleep(delay))
            continue
        failures = 0


__all__ = ["RetryPolicy", "Ticker", "loop_tick"]

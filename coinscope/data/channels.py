"""Cancellation and channel primitives shared by adapters and the coin page.

Every cross-task hand-off in a view goes through these helpers: adapters send
on bounded ``asyncio.Queue`` objects guarded by a :class:`CancelScope`, the
history interval travels through a single-slot :class:`LatestValue`, and the
coin page fans all of its inputs in through one :class:`Selector`.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from coinscope.errors import ViewCancelled

T = TypeVar("T")

DEFAULT_CANCEL_REASON = "context canceled"


class CancelScope:
    """Cancellation signal shared by every task of one view."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = DEFAULT_CANCEL_REASON) -> None:
        """Fire the signal. Only the first reason is kept."""

        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    async def wait(self) -> Optional[str]:
        await self._event.wait()
        return self._reason

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ViewCancelled(self._reason)


async def race(scope: CancelScope, awaitable: Awaitable[T]) -> T:
    """Await ``awaitable`` unless ``scope`` fires first.

    When the scope wins, the pending awaitable is cancelled and
    :class:`ViewCancelled` is raised with the scope's reason.
    """

    if scope.cancelled:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise ViewCancelled(scope.reason)

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(scope.wait())
    try:
        done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        waiter.cancel()
        raise

    if work in done:
        waiter.cancel()
        return work.result()

    work.cancel()
    raise ViewCancelled(scope.reason)


async def send(scope: CancelScope, queue: "asyncio.Queue[T]", item: T) -> None:
    """Put ``item`` on ``queue`` while simultaneously waiting on ``scope``."""

    scope.raise_if_cancelled()
    if not queue.full():
        queue.put_nowait(item)
        return
    await race(scope, queue.put(item))


class LatestValue(Generic[T]):
    """Single-slot overwrite channel: one pending value at most, newest wins."""

    def __init__(self) -> None:
        self._value: Optional[T] = None
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def offer(self, value: T) -> None:
        self._value = value
        self._pending = True

    def poll(self) -> Optional[T]:
        """Return and clear the pending value without blocking."""

        if not self._pending:
            return None
        value, self._value = self._value, None
        self._pending = False
        return value


SourceFactory = Callable[[], Awaitable[Any]]


class Selector:
    """Merge several awaitable sources, yielding one ready item per call.

    Each source keeps a single armed getter between calls so nothing it
    produced is dropped. When several sources are ready at once, the one
    declared first wins and the others stay ready for the following calls.
    """

    def __init__(self, sources: Sequence[Tuple[str, SourceFactory]]) -> None:
        names = [name for name, _ in sources]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate source names: {names}")
        self._sources: List[Tuple[str, SourceFactory]] = list(sources)
        self._pending: Dict[str, "asyncio.Future[Any]"] = {}

    async def select(self) -> Tuple[str, Any]:
        for name, factory in self._sources:
            if name not in self._pending:
                self._pending[name] = asyncio.ensure_future(factory())

        if not any(task.done() for task in self._pending.values()):
            await asyncio.wait(list(self._pending.values()), return_when=asyncio.FIRST_COMPLETED)

        for name, _ in self._sources:
            task = self._pending[name]
            if task.done():
                del self._pending[name]
                return name, task.result()
        raise RuntimeError("selector woke up without a ready source")  # pragma: no cover

    def close(self) -> None:
        for task in self._pending.values():
            task.cancel()
        self._pending.clear()


__all__ = ["CancelScope", "LatestValue", "Selector", "race", "send", "DEFAULT_CANCEL_REASON"]

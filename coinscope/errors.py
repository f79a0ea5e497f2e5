"""Terminal conditions raised by adapters and the coin view."""

from __future__ import annotations

from typing import Optional


class CoinscopeError(Exception):
    """Base class for all coinscope errors."""


class FetchError(CoinscopeError):
    """A single request against an upstream provider failed to transport or decode."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class StreamError(FetchError):
    """The live price stream failed to read or decode a message."""


class ViewCancelled(CoinscopeError):
    """The owning view was cancelled; expected, never surfaced to the user."""

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason or "view cancelled"
        super().__init__(self.reason)


class UserClosed(CoinscopeError):
    """The user asked to close the view."""

    def __init__(self, message: str = "coin UI closed") -> None:
        super().__init__(message)


__all__ = ["CoinscopeError", "FetchError", "StreamError", "ViewCancelled", "UserClosed"]

"""Terminal coin inspector multiplexing polled and streamed market data."""

__version__ = "0.1.0"

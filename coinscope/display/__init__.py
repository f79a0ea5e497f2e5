"""Coin page display state, event loop and terminal collaborators."""

from .page import CoinPage, Renderer
from .state import CoinPageState, Currency

__all__ = ["CoinPage", "CoinPageState", "Currency", "Renderer"]

"""Scrollable table model shared by the favourites table and the currency picker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class TableView:
    header: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)
    selected: int = 0
    show_cursor: bool = False
    page_size: int = 10

    def set_rows(self, rows: List[List[str]]) -> None:
        self.rows = rows
        self._clamp()

    def scroll_down(self, amount: int = 1) -> None:
        self.selected += amount
        self._clamp()

    def scroll_up(self, amount: int = 1) -> None:
        self.selected -= amount
        self._clamp()

    def scroll_half_page_down(self) -> None:
        self.scroll_down(max(1, self.page_size // 2))

    def scroll_half_page_up(self) -> None:
        self.scroll_up(max(1, self.page_size // 2))

    def scroll_page_down(self) -> None:
        self.scroll_down(self.page_size)

    def scroll_page_up(self) -> None:
        self.scroll_up(self.page_size)

    def scroll_top(self) -> None:
        self.selected = 0

    def scroll_bottom(self) -> None:
        self.selected = max(0, len(self.rows) - 1)

    def window(self) -> Tuple[int, List[List[str]]]:
        """Offset and rows of the page that keeps the selection on screen."""

        start = max(0, self.selected - self.page_size + 1)
        return start, self.rows[start:start + self.page_size]

    def _clamp(self) -> None:
        self.selected = min(max(self.selected, 0), max(0, len(self.rows) - 1))

"""Number formatting and row sorting used by the coin page."""

from __future__ import annotations

from typing import List, Sequence, Tuple

UP_ARROW = "▲"
DOWN_ARROW = "▼"
UNITS = ("", "K", "M", "B", "T")


def round_values(*values: float) -> Tuple[List[float], str]:
    """Scale every value by the thousands unit that fits the largest one."""

    largest = max((abs(value) for value in values), default=0.0)
    index = 0
    while largest >= 1000 and index < len(UNITS) - 1:
        largest /= 1000
        index += 1
    divisor = 1000 ** index
    return [value / divisor for value in values], UNITS[index]


def parse_float(raw: str) -> float:
    """``float`` that also rejects the empty strings providers send for nulls."""

    if raw is None or raw == "":
        raise ValueError("empty value")
    return float(raw)


def change_label(change: float) -> str:
    if change < 0:
        return f"{DOWN_ARROW} {-change:.2f}"
    return f"{UP_ARROW} {change:.2f}"


def _numeric_key(value: str) -> Tuple[int, float]:
    try:
        return 0, float(value)
    except ValueError:
        return 1, 0.0


def sort_rows(rows: Sequence[Sequence[str]], column: int, ascending: bool) -> List[List[str]]:
    """Stable sort; the first column compares as text, the others as numbers."""

    if column == 0:
        return sorted((list(row) for row in rows), key=lambda row: row[0], reverse=not ascending)
    return sorted((list(row) for row in rows), key=lambda row: _numeric_key(row[column]), reverse=not ascending)

"""Display ordering for the dashboard chart list."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Callable, Final, Literal

from .collation import text_sort_key
from .dto import ChartConfig

SortKey = Literal["date-asc", "date-desc", "title-asc", "title-desc", "type-asc"]

DEFAULT_SORT_KEY: Final[SortKey] = "date-desc"

_ASCENDING_KEYS: Final[dict[str, Callable[[ChartConfig], object]]] = {
    "date": lambda chart: _created_at(chart.id),
    "title": lambda chart: text_sort_key(chart.title),
    "type": lambda chart: text_sort_key(str(chart.chart_type)),
}

SORT_KEYS: Final[tuple[SortKey, ...]] = ("date-desc", "date-asc", "title-asc", "title-desc", "type-asc")


def sort_charts(charts: Iterable[ChartConfig], sort_key: str | None = None) -> list[ChartConfig]:
    """Return a new list of charts ordered by a sort key.

    Args:
        charts: Chart configurations in list order; never mutated.
        sort_key: One of `SORT_KEYS`. Unknown or missing keys fall back to
            `DEFAULT_SORT_KEY` (newest first).

    Returns:
        Sorted copy. Date keys keep list order on ties in both directions;
        `title-desc` is the exact reverse of the `title-asc` order.
    """

    if sort_key not in SORT_KEYS:
        sort_key = DEFAULT_SORT_KEY
    field, direction = sort_key.split("-")
    key = _ASCENDING_KEYS[field]
    if direction == "asc":
        return sorted(charts, key=key)
    if field == "date":
        return sorted(charts, key=key, reverse=True)
    ordered = sorted(charts, key=key)
    ordered.reverse()
    return ordered


def _created_at(chart_id: str) -> int:
    """Interpret a chart id as its creation timestamp (0 when not an integer)."""

    try:
        return int(str(chart_id).strip())
    except ValueError:
        return 0

"""Aggregation engine turning raw rows into chart-ready grouped values.

This module provides a deterministic aggregation function used by the
dashboard (one call per chart) without introducing Django dependencies.
Non-numeric or missing measure cells are data-quality noise: they are
excluded from the numeric pool and never raised as errors.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from .cells import CellKind, Row, cell_group_key, cell_number, classify_cell
from .collation import text_sort_key
from .dto import AggregationKind

AggregatedRow = dict[str, object]


def measure_key(*, group_column: str, measure_column: str, aggregation: AggregationKind) -> str:
    """Return the key holding the reduced value in aggregated rows.

    The measure column name is used directly, except for frequency counts
    (Count over the group column itself) where it would collide with the
    group key.
    """

    if aggregation == AggregationKind.count and group_column == measure_column:
        return f"Count of {group_column}"
    return measure_column


def aggregate_rows(
    rows: Sequence[Row],
    *,
    group_column: str,
    measure_column: str,
    aggregation: AggregationKind,
) -> list[AggregatedRow]:
    """Group rows by a dimension column and reduce a measure column.

    Args:
        rows: Raw rows; may be empty.
        group_column: Column whose stringified value buckets the rows.
        measure_column: Column whose numeric values are reduced per group.
        aggregation: Sum, Count, or Average.

    Returns:
        One row per group with exactly two keys: `group_column` mapped to the
        group key, and `measure_key(...)` mapped to the reduced value. Rows
        are sorted ascending by group key. Groups with no numeric measure
        values are omitted.

    Notes:
        `Count` over the group column itself counts occurrences of each
        distinct value (categorical counting) without numeric coercion.
    """

    if not rows:
        return []

    value_key = measure_key(group_column=group_column, measure_column=measure_column, aggregation=aggregation)
    if aggregation == AggregationKind.count and group_column == measure_column:
        counts, numeric_groups = _frequency_counts(rows, column=group_column)
        return [
            {group_column: key, value_key: counts[key]}
            for key in _ordered_keys(counts.keys(), numeric_groups=numeric_groups)
        ]

    pools: dict[str, list[float]] = defaultdict(list)
    numeric_groups: dict[str, bool] = {}
    for row in rows:
        raw_key = row.get(group_column)
        key = cell_group_key(raw_key)
        numeric_groups[key] = numeric_groups.get(key, True) and classify_cell(raw_key) is CellKind.number
        value = cell_number(row.get(measure_column))
        if value is None:
            continue
        pools[key].append(value)

    return [
        {group_column: key, value_key: _reduce(pools[key], aggregation=aggregation)}
        for key in _ordered_keys(pools.keys(), numeric_groups=numeric_groups)
    ]


def _frequency_counts(rows: Sequence[Row], *, column: str) -> tuple[dict[str, int], dict[str, bool]]:
    """Count occurrences of each distinct stringified value of one column."""

    counts: dict[str, int] = defaultdict(int)
    numeric_groups: dict[str, bool] = {}
    for row in rows:
        raw_value = row.get(column)
        key = cell_group_key(raw_value)
        counts[key] += 1
        numeric_groups[key] = numeric_groups.get(key, True) and classify_cell(raw_value) is CellKind.number
    return counts, numeric_groups


def _reduce(values: Sequence[float], *, aggregation: AggregationKind) -> float | int:
    if aggregation == AggregationKind.sum:
        return float(sum(values))
    if aggregation == AggregationKind.count:
        return len(values)
    if aggregation == AggregationKind.average:
        return sum(values) / len(values)
    return 0


def _ordered_keys(keys: Iterable[str], *, numeric_groups: dict[str, bool]) -> list[str]:
    """Order group keys: numeric groups numerically, then text groups by locale order.

    A group is numeric when every original value that produced it was a
    number, so the order depends only on the set of values seen.
    """

    def sort_key(key: str) -> tuple[int, float, tuple[str, str, str, str]]:
        if numeric_groups.get(key):
            number = cell_number(key)
            if number is not None:
                return (0, number, text_sort_key(key))
        return (1, 0.0, text_sort_key(key))

    return sorted(keys, key=sort_key)

"""Tests for dashboard chart list ordering."""

from __future__ import annotations

import pytest

from analysis.dto import AggregationKind, ChartConfig, ChartKind
from analysis.sorting import SORT_KEYS, sort_charts

pytestmark = pytest.mark.unit


def _chart(chart_id: str, title: str, chart_type: ChartKind = ChartKind.bar) -> ChartConfig:
    return ChartConfig(
        id=chart_id,
        title=title,
        chart_type=chart_type,
        x_axis="Region",
        y_axis="Sales",
        aggregation=AggregationKind.sum,
    )


CHARTS = [
    _chart("1700000000200", "beta", ChartKind.pie),
    _chart("1700000000100", "Alpha", ChartKind.line),
    _chart("1700000000300", "gamma", ChartKind.area),
]


def test_date_keys_order_by_creation_id() -> None:
    """Interpret ids as creation timestamps."""

    assert [c.id for c in sort_charts(CHARTS, "date-asc")] == ["1700000000100", "1700000000200", "1700000000300"]
    assert [c.id for c in sort_charts(CHARTS, "date-desc")] == ["1700000000300", "1700000000200", "1700000000100"]


def test_unknown_or_missing_key_defaults_to_newest_first() -> None:
    """Fall back to date-desc for unknown keys."""

    expected = sort_charts(CHARTS, "date-desc")
    assert sort_charts(CHARTS, "size-asc") == expected
    assert sort_charts(CHARTS, None) == expected


def test_title_and_type_keys_use_locale_order() -> None:
    """Order titles case-insensitively and types by label."""

    assert [c.title for c in sort_charts(CHARTS, "title-asc")] == ["Alpha", "beta", "gamma"]
    assert [c.chart_type for c in sort_charts(CHARTS, "type-asc")] == [ChartKind.area, ChartKind.line, ChartKind.pie]


def test_sort_does_not_mutate_input() -> None:
    """Return a new list and leave the input untouched."""

    original = list(CHARTS)
    for key in SORT_KEYS:
        sort_charts(CHARTS, key)
    assert CHARTS == original


def test_ascending_ties_keep_list_order() -> None:
    """Charts sharing a timestamp id keep their list order."""

    charts = [_chart("5", "first"), _chart("5", "second"), _chart("1", "oldest")]
    assert [c.title for c in sort_charts(charts, "date-asc")] == ["oldest", "first", "second"]


def test_title_desc_is_exact_reverse_of_title_asc_with_ties() -> None:
    """Descending order fully inverts ascending order, ties included."""

    charts = [_chart("1", "Same"), _chart("2", "Other"), _chart("3", "Same"), _chart("4", "other")]
    ascending = sort_charts(charts, "title-asc")
    descending = sort_charts(ascending, "title-desc")
    assert descending == list(reversed(ascending))


def test_non_integer_ids_sort_as_oldest() -> None:
    """Ids that are not integers behave as timestamp 0."""

    charts = [_chart("10", "ten"), _chart("draft", "draft")]
    assert [c.title for c in sort_charts(charts, "date-asc")] == ["draft", "ten"]


def test_date_desc_ties_keep_list_order() -> None:
    """Newest first still keeps list order among charts sharing a timestamp id."""

    charts = [_chart("5", "first"), _chart("5", "second"), _chart("9", "newest")]
    assert [c.title for c in sort_charts(charts, "date-desc")] == ["newest", "first", "second"]
    assert [c.title for c in sort_charts(charts)] == ["newest", "first", "second"]

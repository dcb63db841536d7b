"""Tests for AI suggestion intake."""

from __future__ import annotations

import json
import logging

import pytest

from analysis.dto import AggregationKind, ChartKind
from core.dashboard.suggestions import ChartSuggestion, fetch_suggestion_batch, parse_suggestion_batch

pytestmark = pytest.mark.unit

PAYLOAD = [
    {
        "title": "Top regions",
        "description": "Shows which regions sell the most.",
        "type": "Bar",
        "xAxis": "Region",
        "yAxis": "Sales",
        "aggregation": "Sum",
    }
]


def test_parse_suggestion_batch_from_json_text() -> None:
    """Decode a JSON array of suggestion objects."""

    batch = parse_suggestion_batch(json.dumps(PAYLOAD))
    assert batch == (
        ChartSuggestion(
            title="Top regions",
            description="Shows which regions sell the most.",
            chart_type=ChartKind.bar,
            x_axis="Region",
            y_axis="Sales",
            aggregation=AggregationKind.sum,
        ),
    )


@pytest.mark.parametrize(
    "payload",
    ["not json", "[" * 100_000, json.dumps({"title": "x"}), [PAYLOAD[0], "oops"], None],
)
def test_malformed_batches_become_empty(payload: object, caplog: pytest.LogCaptureFixture) -> None:
    """Any malformed batch yields no suggestions rather than a partial one."""

    with caplog.at_level(logging.WARNING, logger="core.dashboard.suggestions"):
        assert parse_suggestion_batch(payload) == ()
    assert "Discarding suggestion batch" in caplog.text


def test_fetch_failure_yields_empty_batch() -> None:
    """Exceptions from the suggestion service never propagate."""

    def failing_fetch() -> object:
        raise ConnectionError("service unavailable")

    assert fetch_suggestion_batch(failing_fetch) == ()
    assert len(fetch_suggestion_batch(lambda: PAYLOAD)) == 1


def test_suggestion_to_chart_config_assigns_id() -> None:
    """Accepting a suggestion produces a ChartConfig with the given id."""

    suggestion = parse_suggestion_batch(PAYLOAD)[0]
    config = suggestion.to_chart_config("1700000000000")
    assert config.id == "1700000000000"
    assert config.title == "Top regions"
    assert config.aggregation is AggregationKind.sum


def test_fetch_with_overly_nested_response_yields_empty_batch() -> None:
    """A response nested past the decoder's depth limit becomes an empty batch."""

    assert fetch_suggestion_batch(lambda: "[" * 100_000) == ()

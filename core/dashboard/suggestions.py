"""Intake of AI-suggested charts.

The suggestion service itself is an external collaborator; this module only
turns whatever it produced into `ChartSuggestion` values. Failures never
propagate: a broken fetch or a malformed payload yields an empty batch.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from analysis.dto import AggregationKind, ChartConfig, ChartKind, parse_aggregation_kind, parse_chart_kind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChartSuggestion:
    """A suggested chart: a ChartConfig without an id, plus a description.

    Args:
        title: Suggested chart title.
        description: One-sentence explanation of the insight.
        chart_type: Suggested visualization (raw label when unknown).
        x_axis: Suggested dimension column.
        y_axis: Suggested measure column.
        aggregation: Suggested reduction (raw label when unknown).
    """

    title: str
    description: str
    chart_type: ChartKind
    x_axis: str
    y_axis: str
    aggregation: AggregationKind

    def to_chart_config(self, chart_id: str) -> ChartConfig:
        """Build the ChartConfig created when the user accepts this suggestion."""

        return ChartConfig(
            id=chart_id,
            title=self.title,
            chart_type=self.chart_type,
            x_axis=self.x_axis,
            y_axis=self.y_axis,
            aggregation=self.aggregation,
        )


def _decode_suggestion(payload: dict[str, Any]) -> ChartSuggestion:
    raw_type = payload.get("type")
    raw_aggregation = payload.get("aggregation")
    return ChartSuggestion(
        title=str(payload.get("title") or ""),
        description=str(payload.get("description") or ""),
        chart_type=parse_chart_kind(raw_type) or str(raw_type or ""),  # type: ignore[arg-type]
        x_axis=str(payload.get("xAxis") or ""),
        y_axis=str(payload.get("yAxis") or ""),
        aggregation=parse_aggregation_kind(raw_aggregation) or str(raw_aggregation or ""),  # type: ignore[arg-type]
    )


def parse_suggestion_batch(payload: object) -> tuple[ChartSuggestion, ...]:
    """Parse a suggestion batch from JSON text or an already-decoded list.

    Args:
        payload: JSON array text, bytes, or a list of suggestion objects.

    Returns:
        Suggestions in service order. Any malformed batch (invalid JSON, not
        a list, or a non-object entry) yields an empty tuple.
    """

    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except (ValueError, RecursionError):
            logger.warning("Discarding suggestion batch: response is not valid JSON.")
            return ()
    if not isinstance(payload, list):
        logger.warning("Discarding suggestion batch: expected a list, got %s.", type(payload).__name__)
        return ()
    if not all(isinstance(item, dict) for item in payload):
        logger.warning("Discarding suggestion batch: every suggestion must be an object.")
        return ()
    return tuple(_decode_suggestion(item) for item in payload)


def fetch_suggestion_batch(fetcher: Callable[[], object]) -> tuple[ChartSuggestion, ...]:
    """Call the suggestion service and parse its response.

    Args:
        fetcher: Zero-argument callable returning the raw service response.

    Returns:
        Parsed suggestions, or an empty tuple when the fetch fails.
    """

    try:
        response = fetcher()
    except Exception:  # noqa: BLE001 - external service failures become an empty batch
        logger.warning("Suggestion service failed; returning no suggestions.", exc_info=True)
        return ()
    return parse_suggestion_batch(response)

"""Snapshot encoding/decoding helpers for persisted dashboard state.

Wire format (one JSON object stored under a single key):

    {"charts": [ChartConfig, ...], "fileName": str, "dashboardTitle": str}

Each chart is `{"id", "title", "type", "xAxis", "yAxis", "aggregation"}`.
"""

from __future__ import annotations

import json
from typing import Any, cast

from analysis.dto import ChartConfig, DashboardSnapshot, parse_aggregation_kind, parse_chart_kind


class SnapshotDecodeError(ValueError):
    """Raised when a stored snapshot cannot be restored."""


class CorruptSnapshotError(SnapshotDecodeError):
    """Raised when the stored text is not valid JSON."""


class IncompleteSnapshotError(SnapshotDecodeError):
    """Raised when valid JSON lacks the chart list or the source file name."""


def encode_chart_config(config: ChartConfig) -> dict[str, Any]:
    """Encode a ChartConfig into its camelCase wire dictionary."""

    return {
        "id": config.id,
        "title": config.title,
        "type": str(config.chart_type),
        "xAxis": config.x_axis,
        "yAxis": config.y_axis,
        "aggregation": str(config.aggregation),
    }


def decode_chart_config(payload: dict[str, Any]) -> ChartConfig:
    """Best-effort decode of a wire chart dictionary.

    Unknown chart types or aggregations are kept as raw strings so the
    validator can report them by field name.
    """

    raw_type = payload.get("type")
    raw_aggregation = payload.get("aggregation")
    return ChartConfig(
        id=str(payload.get("id") or ""),
        title=str(payload.get("title") or ""),
        chart_type=parse_chart_kind(raw_type) or str(raw_type or ""),  # type: ignore[arg-type]
        x_axis=str(payload.get("xAxis") or ""),
        y_axis=str(payload.get("yAxis") or ""),
        aggregation=parse_aggregation_kind(raw_aggregation) or str(raw_aggregation or ""),  # type: ignore[arg-type]
    )


def encode_dashboard_snapshot(snapshot: DashboardSnapshot) -> dict[str, Any]:
    """Encode a DashboardSnapshot into a JSON-serializable dictionary."""

    return {
        "charts": [encode_chart_config(chart) for chart in snapshot.charts],
        "fileName": snapshot.file_name,
        "dashboardTitle": snapshot.dashboard_title,
    }


def decode_dashboard_snapshot(payload: object, *, default_title: str) -> DashboardSnapshot:
    """Decode a DashboardSnapshot from a parsed JSON value.

    Args:
        payload: Parsed JSON value previously produced by `encode_dashboard_snapshot`.
        default_title: Title used when the payload carries none.

    Returns:
        DashboardSnapshot instance. Chart entries that are not objects are skipped.

    Raises:
        IncompleteSnapshotError: When the payload is not an object, or lacks a
            `charts` list or a non-empty `fileName`.
    """

    if not isinstance(payload, dict):
        raise IncompleteSnapshotError("Snapshot payload must be a JSON object.")
    charts_raw = payload.get("charts")
    file_name = payload.get("fileName")
    if not isinstance(charts_raw, list):
        raise IncompleteSnapshotError("Snapshot payload has no charts list.")
    if not file_name:
        raise IncompleteSnapshotError("Snapshot payload has no fileName.")

    charts = tuple(
        decode_chart_config(cast(dict[str, Any], item)) for item in charts_raw if isinstance(item, dict)
    )
    return DashboardSnapshot(
        charts=charts,
        file_name=str(file_name),
        dashboard_title=str(payload.get("dashboardTitle") or default_title),
    )


def dumps_dashboard_snapshot(snapshot: DashboardSnapshot) -> str:
    """Serialize a DashboardSnapshot to JSON text for storage."""

    return json.dumps(encode_dashboard_snapshot(snapshot))


def loads_dashboard_snapshot(raw: str, *, default_title: str) -> DashboardSnapshot:
    """Parse stored JSON text into a DashboardSnapshot.

    Raises:
        CorruptSnapshotError: When `raw` is not valid JSON.
        IncompleteSnapshotError: When the JSON lacks required fields.
    """

    try:
        payload = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as exc:
        raise CorruptSnapshotError(f"Stored snapshot is not valid JSON: {exc}") from exc
    return decode_dashboard_snapshot(payload, default_title=default_title)

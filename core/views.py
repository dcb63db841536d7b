"""JSON endpoints exposing the pure dashboard computations."""

from __future__ import annotations

import json
import math
from typing import Any

from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_POST

from analysis.aggregations import aggregate_rows, measure_key
from analysis.chart_config_validator import validate_chart_config
from analysis.dto import parse_aggregation_kind
from core.dashboard.snapshot_codec import decode_chart_config


def _json_body(request: HttpRequest) -> dict[str, Any] | None:
    """Return the decoded JSON object body, or None when it is not an object."""

    try:
        payload = json.loads(request.body or b"")
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _json_safe_rows(rows: list[dict[str, object]]) -> list[dict[str, object]]:
    """Replace non-finite floats (which JSON cannot carry) with None."""

    return [
        {key: None if isinstance(value, float) and not math.isfinite(value) else value for key, value in row.items()}
        for row in rows
    ]


def _bad_request(error: str) -> JsonResponse:
    return JsonResponse({"ok": False, "error": error}, status=400)


@login_required
@require_POST
def aggregate_api(request: HttpRequest) -> JsonResponse:
    """Aggregate posted rows for one chart.

    Body: `{"rows": [...], "groupColumn": str, "measureColumn": str, "aggregation": str}`.
    """

    payload = _json_body(request)
    if payload is None:
        return _bad_request("Request body must be a JSON object.")

    rows = payload.get("rows")
    if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        return _bad_request("rows must be a list of objects.")
    group_column = str(payload.get("groupColumn") or "")
    measure_column = str(payload.get("measureColumn") or "")
    if not group_column or not measure_column:
        return _bad_request("groupColumn and measureColumn are required.")
    aggregation = parse_aggregation_kind(payload.get("aggregation"))
    if aggregation is None:
        return _bad_request("aggregation must be one of Sum, Count, Average.")

    return JsonResponse(
        {
            "ok": True,
            "valueKey": measure_key(
                group_column=group_column,
                measure_column=measure_column,
                aggregation=aggregation,
            ),
            "rows": _json_safe_rows(
                aggregate_rows(
                    rows,
                    group_column=group_column,
                    measure_column=measure_column,
                    aggregation=aggregation,
                )
            ),
        },
        json_dumps_params={"allow_nan": False},
    )


@login_required
@require_POST
def validate_chart_api(request: HttpRequest) -> JsonResponse:
    """Validate a posted chart configuration.

    Body: `{"chart": {...}, "columns": [str, ...] | null}`.
    """

    payload = _json_body(request)
    if payload is None:
        return _bad_request("Request body must be a JSON object.")
    chart_raw = payload.get("chart")
    if not isinstance(chart_raw, dict):
        return _bad_request("chart must be an object.")
    columns_raw = payload.get("columns")
    if columns_raw is not None and not isinstance(columns_raw, list):
        return _bad_request("columns must be a list when provided.")

    known_columns = None if columns_raw is None else [str(column) for column in columns_raw]
    result = validate_chart_config(decode_chart_config(chart_raw), known_columns=known_columns)
    return JsonResponse(
        {
            "ok": True,
            "isValid": result.is_valid,
            "missingFields": list(result.missing_fields),
            "errors": list(result.errors),
            "message": result.message,
        }
    )

"""Integration tests for the JSON dashboard endpoints."""

from __future__ import annotations

import json

import pytest
from django.test import Client
from django.urls import reverse

from tests.sample_data import SALES_ROWS

pytestmark = pytest.mark.integration


def _post(client, name: str, payload: object):
    return client.post(reverse(name), data=json.dumps(payload), content_type="application/json")


@pytest.mark.django_db
def test_aggregate_api_returns_sorted_groups(auth_client) -> None:
    """Aggregate posted rows for a chart."""

    response = _post(
        auth_client,
        "core:aggregate_api",
        {"rows": list(SALES_ROWS), "groupColumn": "Region", "measureColumn": "Sales", "aggregation": "Average"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["valueKey"] == "Sales"
    assert body["rows"] == [{"Region": "East", "Sales": 75.0}, {"Region": "West", "Sales": 80.0}]


@pytest.mark.django_db
def test_aggregate_api_frequency_count_uses_count_key(auth_client) -> None:
    """Counting a column against itself reports the count under its own key."""

    response = _post(
        auth_client,
        "core:aggregate_api",
        {"rows": list(SALES_ROWS), "groupColumn": "Product", "measureColumn": "Product", "aggregation": "Count"},
    )
    body = response.json()
    assert body["valueKey"] == "Count of Product"
    assert body["rows"] == [
        {"Product": "Gadget", "Count of Product": 1},
        {"Product": "Widget", "Count of Product": 2},
    ]


@pytest.mark.django_db
def test_aggregate_api_sends_non_finite_values_as_null(auth_client) -> None:
    """Infinite sums are reported as null so the response stays valid JSON."""

    rows = [
        {"Region": "East", "Sales": "Infinity"},
        {"Region": "East", "Sales": 10},
        {"Region": "North", "Sales": "Infinity"},
        {"Region": "North", "Sales": "-Infinity"},
        {"Region": "West", "Sales": 80},
    ]
    response = _post(
        auth_client,
        "core:aggregate_api",
        {"rows": rows, "groupColumn": "Region", "measureColumn": "Sales", "aggregation": "Sum"},
    )
    assert response.status_code == 200
    assert b"Infinity" not in response.content
    assert b"NaN" not in response.content
    assert response.json()["rows"] == [
        {"Region": "East", "Sales": None},
        {"Region": "North", "Sales": None},
        {"Region": "West", "Sales": 80.0},
    ]


@pytest.mark.django_db
@pytest.mark.parametrize(
    "payload",
    [
        {"rows": "nope", "groupColumn": "a", "measureColumn": "b", "aggregation": "Sum"},
        {"rows": [], "groupColumn": "", "measureColumn": "b", "aggregation": "Sum"},
        {"rows": [], "groupColumn": "a", "measureColumn": "b", "aggregation": "Median"},
        [1, 2, 3],
    ],
)
def test_aggregate_api_rejects_malformed_requests(auth_client, payload: object) -> None:
    """Malformed bodies return a 400 with an error message."""

    response = _post(auth_client, "core:aggregate_api", payload)
    assert response.status_code == 400
    assert response.json()["ok"] is False


@pytest.mark.django_db
def test_validate_chart_api_reports_missing_fields(auth_client) -> None:
    """Validation results are returned with a UI message."""

    response = _post(
        auth_client,
        "core:validate_chart_api",
        {
            "chart": {"id": "1", "title": "", "type": "Bar", "xAxis": "Region", "yAxis": "Profit", "aggregation": "Sum"},
            "columns": ["Region", "Sales"],
        },
    )
    body = response.json()
    assert response.status_code == 200
    assert body["isValid"] is False
    assert body["missingFields"] == ["title", "yAxis"]
    assert body["message"] == "Please fill out all fields: Title and Y-Axis."


@pytest.mark.django_db
def test_endpoints_require_login_and_post(auth_client) -> None:
    """Anonymous requests redirect to login; GET is not allowed."""

    anonymous = Client().post(reverse("core:aggregate_api"), data="{}", content_type="application/json")
    assert anonymous.status_code == 302

    assert auth_client.get(reverse("core:validate_chart_api")).status_code == 405

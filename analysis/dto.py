"""DTO types shared by the aggregation engine and the dashboard controller.

DTOs are plain data containers. They intentionally avoid any Django/ORM
dependencies so the analysis layer stays testable in isolation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class AggregationKind(StrEnum):
    """Reduction applied to the measure column of each group."""

    sum = "Sum"
    count = "Count"
    average = "Average"


class ChartKind(StrEnum):
    """Visualization type of a configured chart.

    Values are the labels used on the wire and in the chart toolbox.
    """

    bar = "Bar"
    line = "Line"
    area = "Area"
    pie = "Pie"
    donut = "Donut"
    scatter = "Scatter"


def parse_aggregation_kind(value: object) -> AggregationKind | None:
    """Return the AggregationKind for a wire label, or None when unknown."""

    try:
        return AggregationKind(str(value))
    except ValueError:
        return None


def parse_chart_kind(value: object) -> ChartKind | None:
    """Return the ChartKind for a wire label, or None when unknown."""

    try:
        return ChartKind(str(value))
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class ChartConfig:
    """A single configured chart on the dashboard.

    Args:
        id: Unique id within the active chart list; the string form of the
            millisecond clock reading taken when the chart was created.
        title: Display title.
        chart_type: Visualization type. Decoded payloads may carry an
            unknown raw label here, which validation rejects.
        x_axis: Group (dimension) column name.
        y_axis: Measure column name.
        aggregation: Reduction applied to the measure column.
    """

    id: str
    title: str
    chart_type: ChartKind
    x_axis: str
    y_axis: str
    aggregation: AggregationKind


@dataclass(frozen=True, slots=True)
class DashboardSnapshot:
    """Persisted unit of dashboard configuration (no row data).

    Args:
        charts: Ordered chart configurations.
        file_name: Source file name the charts were built against.
        dashboard_title: Dashboard title shown above the charts.
    """

    charts: tuple[ChartConfig, ...]
    file_name: str
    dashboard_title: str

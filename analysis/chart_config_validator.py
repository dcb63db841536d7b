"""Validation for ChartConfig values before they enter the dashboard list.

Validation never raises: the result is usable both by the interactive chart
form and by bulk-import paths (AI suggestions, restored snapshots) that must
not fail on a single bad item.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from analysis.dto import AggregationKind, ChartConfig, ChartKind

_FIELD_LABELS: dict[str, str] = {
    "id": "Id",
    "title": "Title",
    "type": "Chart Type",
    "xAxis": "X-Axis",
    "yAxis": "Y-Axis",
    "aggregation": "Aggregation",
}


@dataclass(frozen=True, slots=True)
class ChartConfigValidationResult:
    """Validation result for ChartConfig.

    Args:
        is_valid: True when no errors exist.
        missing_fields: Wire names of fields that are missing or invalid, in
            form order (`title`, `type`, `xAxis`, `yAxis`, `aggregation`).
        errors: Detailed error strings, one per problem.
    """

    is_valid: bool
    missing_fields: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def message(self) -> str:
        """Return a single human-readable message for the UI (empty when valid)."""

        if self.is_valid:
            return ""
        labels = [_FIELD_LABELS.get(field, field) for field in self.missing_fields]
        if len(labels) <= 2:
            joined = " and ".join(labels)
        else:
            joined = ", ".join(labels[:-1]) + f", and {labels[-1]}"
        return f"Please fill out all fields: {joined}."


def validate_chart_config(
    config: ChartConfig,
    *,
    known_columns: Collection[str] | None = None,
) -> ChartConfigValidationResult:
    """Validate a candidate ChartConfig.

    Args:
        config: Candidate configuration.
        known_columns: Optional column set of the loaded dataset. When given,
            both axes must be members of it.

    Returns:
        ChartConfigValidationResult listing missing/invalid fields.

    Notes:
        `x_axis == y_axis` is legal; it requests a frequency count.
    """

    missing: list[str] = []
    errors: list[str] = []

    if not str(config.id or "").strip():
        missing.append("id")
        errors.append("ChartConfig.id must be a non-empty string.")
    if not str(config.title or "").strip():
        missing.append("title")
        errors.append(f"ChartConfig[{config.id}].title must be a non-empty string.")
    if not isinstance(config.chart_type, ChartKind):
        missing.append("type")
        errors.append(f"ChartConfig[{config.id}].type is not a supported value: {config.chart_type!r}.")

    for field, column in (("xAxis", config.x_axis), ("yAxis", config.y_axis)):
        if not str(column or "").strip():
            missing.append(field)
            errors.append(f"ChartConfig[{config.id}].{field} must select a column.")
        elif known_columns is not None and column not in known_columns:
            missing.append(field)
            errors.append(f"ChartConfig[{config.id}].{field} references unknown column {column!r}.")

    if not isinstance(config.aggregation, AggregationKind):
        missing.append("aggregation")
        errors.append(
            f"ChartConfig[{config.id}].aggregation is not a supported value: {config.aggregation!r}."
        )

    return ChartConfigValidationResult(
        is_valid=not errors,
        missing_fields=tuple(missing),
        errors=tuple(errors),
    )

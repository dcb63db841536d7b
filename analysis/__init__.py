"""Pure analysis package for InsightHub.

This package contains deterministic, testable computations that operate on
in-memory rows and chart configurations. It must not import Django or perform
any I/O.
"""

from .aggregations import aggregate_rows
from .chart_config_validator import validate_chart_config
from .sorting import sort_charts

__all__ = ["aggregate_rows", "sort_charts", "validate_chart_config"]

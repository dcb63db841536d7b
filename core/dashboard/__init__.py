"""Dashboard session state, persistence and suggestion intake.

The dashboard is driven by a per-session `DashboardStateController` that owns
the chart list and autosaves it through a `PersistenceGateway`. Aggregation,
sorting and validation live in the pure `analysis` package.
"""

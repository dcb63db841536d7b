"""Stateful coordinator for one user's dashboard session.

The controller owns the chart list and dashboard metadata, runs validation
before every mutation, restores the persisted snapshot once per
authenticated session, and autosaves through a debounced write.

Session states:

    unauthenticated --login()--> no_data | restored
    no_data | restored --load_dataset()--> data_loaded
    any authenticated state --logout()--> unauthenticated

A controller is constructed per session; it is not a process-wide singleton.
All methods run on the caller's single thread of control.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from django.conf import settings

from analysis.aggregations import AggregatedRow, aggregate_rows, measure_key
from analysis.cells import Row, columns_from_rows
from analysis.chart_config_validator import ChartConfigValidationResult, validate_chart_config
from analysis.dto import AggregationKind, ChartConfig, DashboardSnapshot, parse_chart_kind
from analysis.file_names import file_name_without_extension, safe_file_name
from analysis.sorting import sort_charts
from core.dashboard.ids import ChartIdFactory
from core.dashboard.persistence import PersistenceGateway
from core.dashboard.scheduling import DebouncedCall, Scheduler
from core.dashboard.snapshot_codec import (
    CorruptSnapshotError,
    IncompleteSnapshotError,
    dumps_dashboard_snapshot,
    loads_dashboard_snapshot,
)
from core.dashboard.suggestions import ChartSuggestion

logger = logging.getLogger(__name__)


class SessionState(StrEnum):
    """Session-level state of a dashboard controller."""

    unauthenticated = "unauthenticated"
    no_data = "no_data"
    restored = "restored"
    data_loaded = "data_loaded"


class DashboardStateError(RuntimeError):
    """Raised when an operation is not allowed in the current session state."""


@dataclass(frozen=True, slots=True)
class DashboardOptions:
    """Tunables for a dashboard controller.

    Args:
        autosave_key: Persistence key holding the snapshot.
        autosave_delay_seconds: Debounce quiet period before a write.
        default_title: Title used before any dataset names the dashboard.
    """

    autosave_key: str = "insighthub-autosave"
    autosave_delay_seconds: float = 1.0
    default_title: str = "Untitled Dashboard"

    @classmethod
    def from_settings(cls) -> "DashboardOptions":
        """Build options from Django settings, falling back to the defaults."""

        defaults = cls()
        return cls(
            autosave_key=getattr(settings, "INSIGHTHUB_AUTOSAVE_KEY", defaults.autosave_key),
            autosave_delay_seconds=float(
                getattr(settings, "INSIGHTHUB_AUTOSAVE_DEBOUNCE_SECONDS", defaults.autosave_delay_seconds)
            ),
            default_title=getattr(settings, "INSIGHTHUB_DEFAULT_DASHBOARD_TITLE", defaults.default_title),
        )


class DashboardStateController:
    """Own the chart list, dashboard title and source file name for a session.

    Args:
        gateway: Key-value store holding the persisted snapshot.
        scheduler: Scheduler used for the debounced autosave.
        options: Optional DashboardOptions; defaults to Django settings.
        id_factory: Optional ChartIdFactory for new chart ids.
    """

    def __init__(
        self,
        *,
        gateway: PersistenceGateway,
        scheduler: Scheduler,
        options: DashboardOptions | None = None,
        id_factory: ChartIdFactory | None = None,
    ) -> None:
        self._options = options if options is not None else DashboardOptions.from_settings()
        self._gateway = gateway
        self._ids = id_factory if id_factory is not None else ChartIdFactory()
        self._autosave = DebouncedCall(
            scheduler,
            delay=self._options.autosave_delay_seconds,
            callback=self._write_snapshot,
        )
        self._state = SessionState.unauthenticated
        self._reset()

    def _reset(self) -> None:
        self._charts: list[ChartConfig] = []
        self._dashboard_title = self._options.default_title
        self._file_name = ""
        self._rows: tuple[Row, ...] = ()
        self._columns: tuple[str, ...] = ()
        self._is_restored = False

    # Read-only views

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def charts(self) -> tuple[ChartConfig, ...]:
        return tuple(self._charts)

    @property
    def dashboard_title(self) -> str:
        return self._dashboard_title

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def rows(self) -> tuple[Row, ...]:
        return self._rows

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    @property
    def is_restored(self) -> bool:
        """True while restored charts await the dataset being re-supplied."""

        return self._is_restored

    @property
    def autosave_pending(self) -> bool:
        return self._autosave.pending

    def snapshot(self) -> DashboardSnapshot:
        """Return the current persistable state."""

        return DashboardSnapshot(
            charts=tuple(self._charts),
            file_name=self._file_name,
            dashboard_title=self._dashboard_title,
        )

    def sorted_charts(self, sort_key: str | None = None) -> list[ChartConfig]:
        """Return the chart list in display order (see `analysis.sorting.sort_charts`)."""

        return sort_charts(self._charts, sort_key)

    def chart_rows(self, chart_id: str) -> list[AggregatedRow]:
        """Aggregate the loaded rows for one chart.

        Each row holds the group under `chart.x_axis` and the value under
        `chart_value_key(chart_id)`. That key differs from `chart.y_axis` for
        frequency counts, so renderers read values through it.

        Raises:
            KeyError: When no chart has `chart_id`.
        """

        chart = self._require_chart(chart_id)
        return aggregate_rows(
            self._rows,
            group_column=chart.x_axis,
            measure_column=chart.y_axis,
            aggregation=chart.aggregation,
        )

    def chart_value_key(self, chart_id: str) -> str:
        """Return the key holding the aggregated value in `chart_rows` output.

        Raises:
            KeyError: When no chart has `chart_id`.
        """

        chart = self._require_chart(chart_id)
        return measure_key(
            group_column=chart.x_axis,
            measure_column=chart.y_axis,
            aggregation=chart.aggregation,
        )

    def export_file_stem(self) -> str:
        """Return a file-system safe base name for exported dashboards."""

        return safe_file_name(self._dashboard_title, "dashboard")

    def new_chart_id(self) -> str:
        return self._ids.new_id()

    # Session transitions

    def login(self) -> DashboardSnapshot | None:
        """Enter the authenticated session and attempt the one snapshot restore.

        Returns:
            The restored snapshot, or None when nothing was restored (including
            when the session was already authenticated).
        """

        if self._state is not SessionState.unauthenticated:
            return None
        self._state = SessionState.no_data
        return self._restore()

    def logout(self) -> None:
        """Hard reset: cancel any pending write, forget state, delete the snapshot."""

        self._autosave.cancel()
        self._gateway.delete(self._options.autosave_key)
        self._reset()
        self._state = SessionState.unauthenticated

    def close(self) -> None:
        """Tear down the controller, cancelling a pending autosave without writing."""

        self._autosave.cancel()

    def load_dataset(self, file_name: str, rows: Sequence[Row], columns: Sequence[str] | None = None) -> None:
        """Accept a newly decoded row set.

        Args:
            file_name: Name of the uploaded file.
            rows: Decoded rows.
            columns: Column set; derived from the first row when omitted.
        """

        self._require_authenticated("load a dataset")
        self._rows = tuple(rows)
        self._columns = tuple(columns) if columns is not None else columns_from_rows(self._rows)
        self._state = SessionState.data_loaded
        self.on_file_changed(file_name)

    def on_file_changed(self, new_file_name: str) -> None:
        """Reconcile the chart list with a (re-)supplied source file.

        The chart list survives only when the session was restored and the
        incoming name equals the restored one; otherwise the list is emptied
        and the title is derived from the new file name.
        """

        self._require_authenticated("change the source file")
        if not self._is_restored or self._file_name != new_file_name:
            self._dashboard_title = file_name_without_extension(new_file_name)
            self._charts = []
        self._file_name = new_file_name
        self._is_restored = False
        self._changed()

    # Chart list mutations

    def create_or_update(self, config: ChartConfig) -> ChartConfigValidationResult:
        """Insert a chart, or replace the chart with the same id wholesale.

        Returns:
            The validation result; on failure the list is unchanged.
        """

        self._require_authenticated("edit charts")
        known_columns = self._columns if self._state is SessionState.data_loaded else None
        result = validate_chart_config(config, known_columns=known_columns)
        if not result.is_valid:
            return result

        for idx, existing in enumerate(self._charts):
            if existing.id == config.id:
                self._charts[idx] = config
                break
        else:
            self._charts.append(config)
        self._ids.observe(config.id)
        self._changed()
        return result

    def remove(self, chart_id: str) -> bool:
        """Remove a chart by id. Returns False (and changes nothing) when absent."""

        self._require_authenticated("edit charts")
        remaining = [chart for chart in self._charts if chart.id != chart_id]
        if len(remaining) == len(self._charts):
            return False
        self._charts = remaining
        self._changed()
        return True

    def clear_all(self) -> None:
        """Empty the chart list, keeping the title and file name."""

        self._require_authenticated("edit charts")
        self._charts = []
        self._changed()

    def set_dashboard_title(self, title: str) -> None:
        self._require_authenticated("rename the dashboard")
        self._dashboard_title = title
        self._changed()

    def replace_from_snapshot(self, snapshot: DashboardSnapshot) -> None:
        """Atomically replace charts, title and file name.

        Each chart is validated on its own; invalid charts and repeated ids
        are dropped with a warning instead of failing the whole snapshot.
        """

        self._require_authenticated("restore a snapshot")
        charts: list[ChartConfig] = []
        seen_ids: set[str] = set()
        for chart in snapshot.charts:
            result = validate_chart_config(chart)
            if not result.is_valid:
                logger.warning("Dropping invalid chart from snapshot: %s", "; ".join(result.errors))
                continue
            if chart.id in seen_ids:
                logger.warning("Dropping chart with duplicate id %r from snapshot.", chart.id)
                continue
            seen_ids.add(chart.id)
            charts.append(chart)

        self._charts = charts
        self._dashboard_title = snapshot.dashboard_title
        self._file_name = snapshot.file_name
        for chart in charts:
            self._ids.observe(chart.id)
        self._changed()

    def draft_from_drop(self, chart_type_label: str) -> ChartConfig | None:
        """Start a new chart from a chart type dropped onto the dashboard.

        Returns:
            A draft ChartConfig with a fresh id and empty title/axes for the
            chart form to complete, or None for an unknown chart type.
        """

        chart_type = parse_chart_kind(chart_type_label)
        if chart_type is None:
            return None
        return ChartConfig(
            id=self.new_chart_id(),
            title="",
            chart_type=chart_type,
            x_axis="",
            y_axis="",
            aggregation=AggregationKind.count,
        )

    def accept_suggestion(self, suggestion: ChartSuggestion) -> ChartConfigValidationResult:
        """Add one AI-suggested chart under a fresh id."""

        return self.create_or_update(suggestion.to_chart_config(self.new_chart_id()))

    def accept_suggestions(self, suggestions: Iterable[ChartSuggestion]) -> tuple[ChartConfigValidationResult, ...]:
        """Accept suggestions one by one; a rejected item does not affect the others."""

        return tuple(self.accept_suggestion(suggestion) for suggestion in suggestions)

    # Persistence

    def _restore(self) -> DashboardSnapshot | None:
        key = self._options.autosave_key
        raw = self._gateway.read(key)
        if raw is None:
            return None
        try:
            snapshot = loads_dashboard_snapshot(raw, default_title=self._options.default_title)
        except CorruptSnapshotError:
            logger.warning("Discarding corrupt dashboard snapshot stored under %r.", key)
            self._gateway.delete(key)
            return None
        except IncompleteSnapshotError as exc:
            logger.info("Ignoring incomplete dashboard snapshot: %s", exc)
            return None

        self.replace_from_snapshot(snapshot)
        self._is_restored = True
        self._state = SessionState.restored
        logger.info("Restored dashboard %r with %d chart(s).", snapshot.file_name, len(self._charts))
        return snapshot

    def _changed(self) -> None:
        if self._state is SessionState.data_loaded:
            self._autosave.trigger()

    def _write_snapshot(self) -> None:
        if self._state is not SessionState.data_loaded:
            return
        self._gateway.write(self._options.autosave_key, dumps_dashboard_snapshot(self.snapshot()))
        logger.debug("Autosaved dashboard %r with %d chart(s).", self._file_name, len(self._charts))

    def _find(self, chart_id: str) -> ChartConfig | None:
        for chart in self._charts:
            if chart.id == chart_id:
                return chart
        return None

    def _require_chart(self, chart_id: str) -> ChartConfig:
        chart = self._find(chart_id)
        if chart is None:
            raise KeyError(chart_id)
        return chart

    def _require_authenticated(self, action: str) -> None:
        if self._state is SessionState.unauthenticated:
            raise DashboardStateError(f"Cannot {action} while signed out.")

"""Pytest fixtures shared across unit and Django integration tests."""

from __future__ import annotations

from collections.abc import Sequence

import pytest
from django.contrib.auth import get_user_model

from core.dashboard.controller import DashboardOptions, DashboardStateController
from core.dashboard.ids import ChartIdFactory
from core.dashboard.persistence import InMemoryPersistenceGateway
from core.dashboard.scheduling import ManualScheduler


@pytest.fixture
def user(db):
    """Return a logged-in capable User."""

    user_model = get_user_model()
    return user_model.objects.create_user(username="alice", password="password")


@pytest.fixture
def auth_client(client, user):
    """Return a Django test client authenticated as the default test user."""

    client.force_login(user)
    return client


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Return a scheduler driven by a virtual clock."""

    return ManualScheduler()


@pytest.fixture
def gateway() -> InMemoryPersistenceGateway:
    return InMemoryPersistenceGateway()


@pytest.fixture
def options() -> DashboardOptions:
    return DashboardOptions(autosave_key="test-autosave", autosave_delay_seconds=1.0, default_title="Untitled Dashboard")


@pytest.fixture
def controller(gateway, scheduler, options) -> DashboardStateController:
    """Return a signed-out controller with a deterministic id clock."""

    ticks = iter(range(1_700_000_000_000, 1_700_000_000_000 + 10_000, 10))
    return DashboardStateController(
        gateway=gateway,
        scheduler=scheduler,
        options=options,
        id_factory=ChartIdFactory(clock=lambda: next(ticks)),
    )


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    The suite is runnable by intent:
    - `unit`: pure, fast tests with no database or cache access.
    - `integration`: tests touching Django, the cache, views, or the database.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )

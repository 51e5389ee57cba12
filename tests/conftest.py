"""Pytest fixtures shared across the dashboard engine and API tests."""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any

import pytest

from core.jsonrender.examples import EXAMPLE_DOCUMENT


@pytest.fixture
def example_document() -> dict[str, Any]:
    """Return a private copy of the example wire document."""

    return copy.deepcopy(EXAMPLE_DOCUMENT)


@pytest.fixture
def metric_document() -> dict[str, Any]:
    """Return the single metric-card document used across scenarios."""

    return {
        "version": 1,
        "layout": [{"component": "metric-card", "props": {"title": "Revenue", "value": 1000}}],
    }


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    The suite must be runnable by intent:
    - `unit`: pure, fast tests with no database access.
    - `integration`: tests touching Django, database, views, or IO.

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

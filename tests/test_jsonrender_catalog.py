"""Tests for the component catalog and generator prompt."""

from __future__ import annotations

import pytest

from core.jsonrender.catalog import DEFAULT_REGISTRY, ComponentRegistry, build_default_specs, catalog_description
from core.jsonrender.prompts import dashboard_generation_prompt

pytestmark = pytest.mark.unit

EXPECTED_KINDS = (
    "kpi-card",
    "metric-card",
    "stat-card",
    "alert-item",
    "data-table",
    "line-chart",
    "bar-chart",
    "progress-card",
    "text-block",
    "action-button",
    "quick-actions",
    "grid",
    "stack",
    "card",
    "conditional",
)


def test_default_registry_lists_every_kind_in_order() -> None:
    assert DEFAULT_REGISTRY.kinds() == EXPECTED_KINDS
    assert len(DEFAULT_REGISTRY) == len(EXPECTED_KINDS)


def test_duplicate_kinds_are_rejected() -> None:
    registry = ComponentRegistry(build_default_specs())

    with pytest.raises(ValueError, match="Duplicate ComponentSpec kind"):
        registry.register(build_default_specs()[0])


def test_metric_card_shares_the_kpi_contract() -> None:
    kpi = DEFAULT_REGISTRY.get("kpi-card")
    metric = DEFAULT_REGISTRY.get("metric-card")

    assert kpi is not None and metric is not None
    assert metric.fields == kpi.fields
    assert metric.props_type is kpi.props_type
    assert metric.renderer is kpi.renderer


def test_container_flags() -> None:
    containers = {spec.kind for spec in DEFAULT_REGISTRY.list() if spec.container}
    fallback = {spec.kind for spec in DEFAULT_REGISTRY.list() if spec.accepts_fallback}

    assert containers == {"grid", "stack", "card", "conditional"}
    assert fallback == {"conditional"}
    assert "sparkline" not in DEFAULT_REGISTRY
    assert DEFAULT_REGISTRY.get("sparkline") is None


def test_catalog_description_documents_props_and_children() -> None:
    text = catalog_description()

    for kind in EXPECTED_KINDS:
        assert f"### {kind}" in text
    assert "- title (required): a string" in text
    assert "- children (optional): list of components" in text
    assert "- fallback (optional)" in text


def test_generation_prompt_includes_catalog() -> None:
    prompt = dashboard_generation_prompt()

    assert prompt.startswith("You are a dashboard generator")
    assert '"version": 1' in prompt
    assert "### conditional" in prompt
    assert "overdue_invoice" in prompt

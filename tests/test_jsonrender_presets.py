"""Tests for preset builders and the example dashboard."""

from __future__ import annotations

from typing import Any

import pytest

from core.jsonrender.catalog import DEFAULT_REGISTRY
from core.jsonrender.codec import encode_dashboard, encode_output
from core.jsonrender.examples import (
    EXAMPLE_DASHBOARD,
    AlertSummary,
    KpiDashboardData,
    RevenuePoint,
    create_kpi_dashboard,
)
from core.jsonrender.output import OutputNode
from core.jsonrender.presets import (
    DASHBOARD_PRESETS,
    PRESET_BUILDERS,
    AgingBuckets,
    CollectionsSummary,
    ExecutiveKpis,
    InvoiceRow,
    ProjectManagerSummary,
    ProjectRow,
    build_preset_dashboard,
    create_collections_dashboard,
    create_executive_dashboard,
    create_project_manager_dashboard,
    finalize_document,
)
from core.jsonrender.render import render_dashboard
from core.jsonrender.schema import ComponentNode

pytestmark = pytest.mark.unit


def _kinds(nodes: tuple[ComponentNode, ...]) -> list[str]:
    found: list[str] = []
    for node in nodes:
        found.append(node.kind)
        found.extend(_kinds(node.children))
        found.extend(_kinds(node.fallback))
    return found


def test_every_preset_has_a_builder() -> None:
    assert set(DASHBOARD_PRESETS) == set(PRESET_BUILDERS)


def test_executive_dashboard_net_position_variant() -> None:
    positive = create_executive_dashboard(
        ExecutiveKpis(total_receivables=100000, total_payables=40000, net_position=60000, active_projects=5)
    )
    negative = create_executive_dashboard(
        ExecutiveKpis(total_receivables=10000, total_payables=40000, net_position=-30000, active_projects=5)
    )

    assert positive.title == "Executive Summary"
    assert len(positive.layout[0].children) == 4
    assert positive.layout[0].children[2].props.variant == "success"  # type: ignore[union-attr]
    assert negative.layout[0].children[2].props.variant == "danger"  # type: ignore[union-attr]


def test_collections_dashboard_adds_action_items_only_when_overdue() -> None:
    clean = create_collections_dashboard(
        CollectionsSummary(
            total_receivables=50000,
            overdue_amount=0,
            overdue_count=0,
            due_soon_amount=0,
            due_soon_count=0,
        )
    )
    overdue = create_collections_dashboard(
        CollectionsSummary(
            total_receivables=125750,
            overdue_amount=28500,
            overdue_count=3,
            due_soon_amount=12400,
            due_soon_count=2,
            aging=AgingBuckets(current=97250, days_31_60=16000, days_61_90=8000, over_90=4500),
            top_invoices=(InvoiceRow(number="DC0360", client="ADR Construction", amount=8750, due_date="2026-01-10", status="Overdue"),),
        )
    )

    assert len(clean.layout) == 2
    assert len(overdue.layout) == 3
    assert overdue.layout[2].props.title == "Action Items"  # type: ignore[union-attr]
    assert overdue.layout[2].children[0].kind == "alert-item"


def test_collections_empty_table_message_renders() -> None:
    dashboard = create_collections_dashboard(
        CollectionsSummary(total_receivables=0, overdue_amount=0, overdue_count=0, due_soon_amount=0, due_soon_count=0)
    )

    table = render_dashboard(dashboard).nodes[1].children[1]

    assert table.kind == "data-table"
    assert table.props["empty_message"] == "No overdue invoices! 🎉"


def test_project_manager_dashboard_binds_sync_shortcut() -> None:
    dashboard = create_project_manager_dashboard(
        ProjectManagerSummary(
            active_projects=2,
            total_estimated=250000,
            total_invoiced=90000,
            missing_estimates=1,
            recent_projects=(ProjectRow(code="P-101", client="Certified Demolition", status="Active", invoiced=90000),),
        )
    )

    quick = render_dashboard(dashboard).nodes[-1]

    assert quick.kind == "quick-actions"
    assert [binding.action for binding in quick.actions] == ["sync-projects"]


def test_build_preset_dashboard_dispatches_by_key() -> None:
    kpis = ExecutiveKpis(total_receivables=1, total_payables=1, net_position=0, active_projects=0)

    assert build_preset_dashboard("executive", kpis) == create_executive_dashboard(kpis)
    with pytest.raises(KeyError):
        build_preset_dashboard("operations", kpis)


def test_finalize_document_rejects_invalid_documents() -> None:
    with pytest.raises(ValueError, match="layout\\[0\\]"):
        finalize_document({"version": 1, "title": "Broken", "layout": [{"component": "sparkline", "props": {}}]})


def test_kpi_dashboard_sections_follow_inputs() -> None:
    base: dict[str, Any] = {
        "total_receivables": 125750,
        "total_payables": 45200,
        "overdue_amount": 0,
        "overdue_count": 1,
        "active_projects": 8,
        "net_position": 80550,
    }

    bare = create_kpi_dashboard(KpiDashboardData(**base))
    full = create_kpi_dashboard(
        KpiDashboardData(
            **base,
            alerts=(AlertSummary(type="missing_pbs", count=2),),
            revenue_data=(RevenuePoint(month="Jan", invoiced=55000, paid=42000),),
        )
    )

    assert [node.kind for node in bare.layout] == ["grid"]
    assert [node.kind for node in full.layout] == ["grid", "line-chart", "card"]
    assert bare.layout[0].children[2].props.subtitle == "1 invoice"  # type: ignore[union-attr]
    assert bare.layout[0].children[2].props.variant == "default"  # type: ignore[union-attr]


def test_example_dashboard_exercises_every_kind() -> None:
    assert set(_kinds(EXAMPLE_DASHBOARD.layout)) == set(DEFAULT_REGISTRY.kinds())


def test_example_dashboard_encodes_to_json_safe_output() -> None:
    rendered = render_dashboard(EXAMPLE_DASHBOARD)
    encoded = [encode_output(node) for node in rendered.nodes]

    assert encoded[0]["kind"] == "grid"
    assert encoded[0]["children"][3]["props"]["display_value"] == "8"
    buttons = encoded[5]["children"]
    assert [button["actions"] for button in buttons] == [
        [{"action": "sync-quickbooks", "params": {}}],
        [{"action": "refresh", "params": {}}],
    ]
    assert "actions" not in encode_output(OutputNode(kind="text-block", props={"content": "x"}))


def test_encode_dashboard_omits_unset_props() -> None:
    encoded = encode_dashboard(EXAMPLE_DASHBOARD)

    stat = encoded["layout"][2]["children"][0]
    assert stat == {
        "component": "stat-card",
        "props": {"label": "Average Days to Pay", "value": "34", "description": "Last 90 days", "variant": "default"},
    }
    assert "fallback" in encoded["layout"][3]
    assert encoded["layout"][0]["children"][0]["props"]["trend"] == {"value": 12, "isPositive": True}

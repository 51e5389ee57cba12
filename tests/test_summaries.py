"""Tests for KPI, alert and aging computation."""

from __future__ import annotations

from datetime import date

import pytest

from core.summaries import (
    ActiveProject,
    OpenBill,
    OpenInvoice,
    build_aging_buckets,
    build_alerts,
    build_dashboard_kpis,
    collections_summary,
    days_overdue,
    days_until_due,
    kpi_dashboard_data,
    parse_bills,
    parse_invoices,
    parse_projects,
    project_manager_summary,
)

pytestmark = pytest.mark.unit

TODAY = date(2026, 1, 20)

INVOICES = (
    OpenInvoice(id="1", invoice_number="DC0361", client_name="Certified Demolition", amount=12500, balance=12500, due_date=date(2026, 2, 1), project_id="p1"),
    OpenInvoice(id="2", invoice_number="DC0360", client_name="ADR Construction", amount=8750, balance=8750, due_date=date(2026, 1, 10), project_id="p1"),
    OpenInvoice(id="3", invoice_number=None, client_name="Russell & Sons", amount=20000, balance=4500, due_date=date(2025, 10, 1)),
    OpenInvoice(id="4", invoice_number="DC0358", client_name="Harbour Civil", amount=3000, balance=3000, due_date=date(2026, 1, 25), project_id="p2"),
)
BILLS = (
    OpenBill(id="b1", vendor_name="Rentals Ltd", balance=2400, due_date=date(2026, 1, 22)),
    OpenBill(id="b2", vendor_name="Fuel Co", balance=1000, due_date=date(2026, 3, 1)),
    OpenBill(id="b3", vendor_name="Disposal Inc", balance=600, due_date=date(2026, 1, 19)),
)
PROJECTS = (
    ActiveProject(id="p1", code="P-101", client_name="Certified Demolition", estimate_amount=150000, has_pbs=True),
    ActiveProject(id="p2", code="P-102", client_name="Harbour Civil"),
)


def test_days_helpers() -> None:
    assert days_overdue(date(2026, 1, 10), today=TODAY) == 10
    assert days_overdue(None, today=TODAY) == 0
    assert days_until_due(date(2026, 1, 25), today=TODAY) == 5
    assert days_until_due(None, today=TODAY) is None


def test_build_dashboard_kpis() -> None:
    kpis = build_dashboard_kpis(INVOICES, BILLS, PROJECTS, today=TODAY)

    assert kpis.total_receivables == 28750
    assert kpis.total_payables == 4000
    assert kpis.net_position == 24750
    assert kpis.active_projects == 2
    assert kpis.overdue_invoices == 2
    assert kpis.overdue_amount == 13250
    assert kpis.bills_due_this_week == 1
    assert kpis.bills_due_amount == 2400


def test_build_alerts_only_lists_non_zero_counts() -> None:
    alerts = build_alerts(INVOICES, BILLS, PROJECTS, today=TODAY)

    assert [(alert.type, alert.count, alert.severity) for alert in alerts] == [
        ("overdue_invoice", 2, "critical"),
        ("bills_due_soon", 1, "warning"),
        ("unassigned_invoices", 1, "info"),
        ("missing_estimate", 1, "warning"),
        ("missing_pbs", 1, "info"),
    ]
    assert build_alerts((), (), (), today=TODAY) == ()


def test_build_aging_buckets() -> None:
    aging = build_aging_buckets(INVOICES, today=TODAY)

    assert aging.current == 12500 + 8750 + 3000
    assert aging.days_31_60 == 0
    assert aging.days_61_90 == 0
    assert aging.over_90 == 4500


def test_collections_summary_orders_priority_invoices() -> None:
    summary = collections_summary(INVOICES, today=TODAY)

    assert summary.overdue_count == 2
    assert summary.due_soon_count == 1
    assert summary.due_soon_amount == 3000
    assert [row.number for row in summary.top_invoices] == ["DC0360", "3"]
    assert summary.top_invoices[0].due_date == "2026-01-10"


def test_project_manager_summary_sums_linked_invoices() -> None:
    summary = project_manager_summary(INVOICES, PROJECTS)

    assert summary.total_estimated == 150000
    assert summary.total_invoiced == 24250
    assert summary.missing_estimates == 1
    assert [(row.code, row.status, row.invoiced) for row in summary.recent_projects] == [
        ("P-101", "Active", 21250),
        ("P-102", "Missing PBS", 3000),
    ]


def test_kpi_dashboard_data_carries_alerts() -> None:
    data = kpi_dashboard_data(INVOICES, BILLS, PROJECTS, today=TODAY)

    assert data.overdue_count == 2
    assert len(data.alerts) == 5
    assert data.revenue_data is None


def test_parse_rows() -> None:
    invoices = parse_invoices(
        [{"id": 7, "invoice_number": "DC0400", "client_name": "ADR", "balance": "1500.50", "due_date": "2026-01-31T00:00:00"}]
    )
    bills = parse_bills([{"id": "b1", "balance": 20, "due_date": ""}])
    projects = parse_projects([{"id": "p1", "code": "P-1", "estimate_amount": None, "has_pbs": True}])

    assert invoices[0].id == "7"
    assert invoices[0].amount == invoices[0].balance == 1500.5
    assert invoices[0].due_date == date(2026, 1, 31)
    assert bills[0].due_date is None
    assert projects[0].estimate_amount is None
    assert parse_invoices(None) == ()


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"id": "1"}, "must be a list"),
        (["row"], "must be an object"),
        ([{"balance": 10}], "'id' is required"),
        ([{"id": "1", "balance": "lots"}], "must be a number"),
        ([{"id": "1", "balance": "nan"}], "must be a number"),
        ([{"id": "1", "amount": 10, "balance": float("inf")}], "'balance' must be a number"),
        ([{"id": "1", "balance": 10, "due_date": "soon"}], "'due_date' must be an ISO date"),
    ],
)
def test_parse_invoices_rejects_malformed_rows(payload: object, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        parse_invoices(payload)

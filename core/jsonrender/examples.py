"""Example dashboard and the general-purpose KPI dashboard factory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final

from .presets import finalize_document, grid, kpi
from .schema import SCHEMA_VERSION, AlertType, Dashboard, Severity


@dataclass(frozen=True, slots=True)
class AlertSummary:
    """One alert line for the KPI dashboard."""

    type: AlertType
    count: int
    total: float | None = None
    severity: Severity = "info"


@dataclass(frozen=True, slots=True)
class RevenuePoint:
    """Invoiced and paid totals for one month."""

    month: str
    invoiced: float
    paid: float


@dataclass(frozen=True, slots=True)
class KpiDashboardData:
    """Inputs for `create_kpi_dashboard`.

    Args:
        total_receivables: Open receivables total.
        total_payables: Open payables total.
        overdue_amount: Sum of overdue receivables.
        overdue_count: Number of overdue invoices.
        active_projects: Number of active projects.
        net_position: Receivables minus payables.
        alerts: Alert lines; the alerts card is omitted when empty.
        revenue_data: Monthly revenue; the trend chart is omitted when None.
    """

    total_receivables: float
    total_payables: float
    overdue_amount: float
    overdue_count: int
    active_projects: int
    net_position: float
    alerts: tuple[AlertSummary, ...] = ()
    revenue_data: tuple[RevenuePoint, ...] | None = None


EXAMPLE_DOCUMENT: Final[dict[str, Any]] = {
    "version": SCHEMA_VERSION,
    "title": "Financial Overview",
    "data": {"project": {"profit": -500}, "syncedAt": "2026-01-15"},
    "layout": [
        grid(
            4,
            [
                kpi("Total Receivables", 125750, icon="dollar-sign", trend={"value": 12, "isPositive": True}),
                kpi("Total Payables", 45200, icon="credit-card", variant="warning"),
                kpi("Overdue", 28500, icon="alert-triangle", variant="danger", subtitle="3 invoices"),
                {
                    "component": "metric-card",
                    "props": {"title": "Active Projects", "value": 8, "format": "number", "icon": "folder", "variant": "success"},
                },
            ],
        ),
        grid(
            2,
            [
                {
                    "component": "line-chart",
                    "props": {
                        "title": "Revenue Trend",
                        "description": "Monthly invoiced vs paid",
                        "xKey": "month",
                        "lines": [
                            {"dataKey": "invoiced", "label": "Invoiced", "color": "primary"},
                            {"dataKey": "paid", "label": "Paid", "color": "success"},
                        ],
                        "data": [
                            {"month": "Sep", "invoiced": 42000, "paid": 35000},
                            {"month": "Oct", "invoiced": 48000, "paid": 40000},
                            {"month": "Nov", "invoiced": 52000, "paid": 45000},
                            {"month": "Dec", "invoiced": 38000, "paid": 48000},
                            {"month": "Jan", "invoiced": 55000, "paid": 42000},
                        ],
                    },
                },
                {
                    "component": "card",
                    "props": {"title": "Alerts", "description": "Items requiring attention"},
                    "children": [
                        {
                            "component": "stack",
                            "props": {"direction": "vertical", "gap": "sm"},
                            "children": [
                                {
                                    "component": "alert-item",
                                    "props": {"type": "overdue_invoice", "count": 3, "total": 28500, "severity": "critical"},
                                },
                                {
                                    "component": "alert-item",
                                    "props": {"type": "bills_due_soon", "count": 2, "total": 12400, "severity": "warning"},
                                },
                                {"component": "alert-item", "props": {"type": "missing_estimate", "count": 4}},
                            ],
                        }
                    ],
                },
            ],
        ),
        grid(
            3,
            [
                {
                    "component": "stat-card",
                    "props": {"label": "Average Days to Pay", "value": "34", "description": "Last 90 days"},
                },
                {
                    "component": "progress-card",
                    "props": {"title": "Monthly Billing Target", "current": 55000, "target": 60000, "variant": "success"},
                },
                {
                    "component": "bar-chart",
                    "props": {
                        "title": "Aging Analysis",
                        "xKey": "range",
                        "layout": "horizontal",
                        "bars": [{"dataKey": "amount", "label": "Amount"}],
                        "data": [
                            {"range": "0-30", "amount": 97250},
                            {"range": "31-60", "amount": 16000},
                            {"range": "61-90", "amount": 8000},
                            {"range": "90+", "amount": 4500},
                        ],
                    },
                },
            ],
        ),
        {
            "component": "conditional",
            "props": {"condition": "project.profit", "operator": "lt", "value": 0},
            "children": [
                {"component": "alert-item", "props": {"type": "negative_profit", "count": 1, "severity": "warning"}},
            ],
            "fallback": [
                {"component": "text-block", "props": {"content": "All projects are profitable.", "variant": "caption"}},
            ],
        },
        {
            "component": "data-table",
            "props": {
                "title": "Recent Invoices",
                "columns": [
                    {"key": "number", "label": "Invoice #"},
                    {"key": "client", "label": "Client"},
                    {"key": "amount", "label": "Amount", "format": "currency"},
                    {"key": "status", "label": "Status", "format": "badge"},
                    {"key": "dueDate", "label": "Due Date", "format": "date"},
                ],
                "rows": [
                    {"number": "DC0361", "client": "Certified Demolition", "amount": 12500, "status": "Sent", "dueDate": "2026-02-01"},
                    {"number": "DC0360", "client": "ADR Construction", "amount": 8750, "status": "Overdue", "dueDate": "2026-01-10"},
                    {"number": "DC0359", "client": "Russell & Sons", "amount": 15200, "status": "Paid", "dueDate": "2026-01-05"},
                ],
            },
        },
        {
            "component": "stack",
            "props": {"direction": "horizontal", "gap": "sm", "align": "center"},
            "children": [
                {
                    "component": "action-button",
                    "props": {
                        "label": "Sync QuickBooks",
                        "action": "sync-quickbooks",
                        "variant": "primary",
                        "confirm": {"title": "Sync now?", "description": "Pulls the latest invoices and bills."},
                    },
                },
                {"component": "action-button", "props": {"label": "Refresh", "action": "refresh", "variant": "outline", "size": "sm"}},
            ],
        },
        {
            "component": "quick-actions",
            "props": {
                "actions": [
                    {"id": "new-invoice", "label": "New Invoice", "href": "/receivables/new"},
                    {"id": "sync-quickbooks", "label": "Sync QuickBooks"},
                    {"id": "view-projects", "label": "View Projects", "href": "/projects"},
                    {"id": "run-reports", "label": "Run Reports", "href": "/reports"},
                ]
            },
        },
    ],
}

EXAMPLE_DASHBOARD: Final[Dashboard] = finalize_document(EXAMPLE_DOCUMENT)


def create_kpi_dashboard(data: KpiDashboardData) -> Dashboard:
    """Build a KPI dashboard from live totals.

    The revenue chart and alerts card only appear when their inputs are present.
    """

    plural = "" if data.overdue_count == 1 else "s"
    layout: list[dict[str, Any]] = [
        grid(
            4,
            [
                kpi("Total Receivables", data.total_receivables, icon="dollar-sign"),
                kpi("Total Payables", data.total_payables, icon="credit-card", variant="warning"),
                kpi(
                    "Overdue",
                    data.overdue_amount,
                    icon="alert-triangle",
                    variant="danger" if data.overdue_amount > 0 else "default",
                    subtitle=f"{data.overdue_count} invoice{plural}",
                ),
                kpi("Active Projects", data.active_projects, icon="folder", variant="success", fmt="number"),
            ],
        )
    ]
    if data.revenue_data is not None:
        layout.append(
            {
                "component": "line-chart",
                "props": {
                    "title": "Revenue Trend",
                    "description": "Monthly invoiced vs paid",
                    "xKey": "month",
                    "lines": [
                        {"dataKey": "invoiced", "label": "Invoiced", "color": "primary"},
                        {"dataKey": "paid", "label": "Paid", "color": "success"},
                    ],
                    "data": [
                        {"month": point.month, "invoiced": point.invoiced, "paid": point.paid}
                        for point in data.revenue_data
                    ],
                },
            }
        )
    if data.alerts:
        layout.append(
            {
                "component": "card",
                "props": {"title": "Alerts", "description": "Items requiring attention"},
                "children": [
                    {
                        "component": "stack",
                        "props": {"direction": "vertical", "gap": "sm"},
                        "children": [
                            {
                                "component": "alert-item",
                                "props": {
                                    "type": alert.type,
                                    "count": alert.count,
                                    "total": alert.total,
                                    "severity": alert.severity,
                                },
                            }
                            for alert in data.alerts
                        ],
                    }
                ],
            }
        )
    return finalize_document({"version": SCHEMA_VERSION, "layout": layout})

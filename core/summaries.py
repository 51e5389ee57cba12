"""KPI and alert computation for the finance dashboards.

This module turns plain rows (open invoices, open bills, active projects) into
the typed summaries consumed by `core.jsonrender.presets` and
`core.jsonrender.examples`. It is Django-free: rows arrive already loaded, and
the view layer decides where they come from.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, Final

from core.jsonrender.examples import AlertSummary, KpiDashboardData
from core.jsonrender.presets import (
    AgingBuckets,
    CollectionsSummary,
    ExecutiveKpis,
    InvoiceRow,
    ProjectManagerSummary,
    ProjectRow,
)

DUE_SOON_DAYS: Final[int] = 7
TOP_INVOICES: Final[int] = 5


@dataclass(frozen=True, slots=True)
class OpenInvoice:
    """An invoice with an outstanding balance."""

    id: str
    invoice_number: str | None
    client_name: str
    amount: float
    balance: float
    due_date: date | None = None
    project_id: str | None = None


@dataclass(frozen=True, slots=True)
class OpenBill:
    """A vendor bill with an outstanding balance."""

    id: str
    vendor_name: str
    balance: float
    due_date: date | None = None
    project_id: str | None = None


@dataclass(frozen=True, slots=True)
class ActiveProject:
    """A project in the active state."""

    id: str
    code: str
    client_name: str = ""
    estimate_amount: float | None = None
    has_pbs: bool = False


@dataclass(frozen=True, slots=True)
class DashboardKpis:
    """Headline numbers shown across presets.

    Args:
        total_receivables: Sum of open invoice balances.
        total_payables: Sum of open bill balances.
        net_position: Receivables minus payables.
        active_projects: Number of active projects.
        overdue_invoices: Invoices past their due date.
        overdue_amount: Balance of overdue invoices.
        bills_due_this_week: Bills due within the next seven days (today included).
        bills_due_amount: Balance of those bills.
    """

    total_receivables: float
    total_payables: float
    net_position: float
    active_projects: int
    overdue_invoices: int
    overdue_amount: float
    bills_due_this_week: int
    bills_due_amount: float


def days_overdue(due_date: date | None, *, today: date) -> int:
    """Return days past due; zero or negative when not yet due (or undated)."""

    if due_date is None:
        return 0
    return (today - due_date).days


def days_until_due(due_date: date | None, *, today: date) -> int | None:
    """Return days until the due date, or None when the row has no due date."""

    if due_date is None:
        return None
    return (due_date - today).days


def _is_due_soon(due_date: date | None, *, today: date) -> bool:
    remaining = days_until_due(due_date, today=today)
    return remaining is not None and 0 <= remaining <= DUE_SOON_DAYS


def build_dashboard_kpis(
    invoices: Sequence[OpenInvoice],
    bills: Sequence[OpenBill],
    projects: Sequence[ActiveProject],
    *,
    today: date,
) -> DashboardKpis:
    """Compute headline KPIs from open rows.

    Args:
        invoices: Invoices with an outstanding balance.
        bills: Bills with an outstanding balance.
        projects: Active projects.
        today: Reference date for overdue and due-soon checks.

    Returns:
        DashboardKpis with totals and counts.
    """

    total_receivables = sum(inv.balance for inv in invoices)
    total_payables = sum(bill.balance for bill in bills)
    overdue = [inv for inv in invoices if days_overdue(inv.due_date, today=today) > 0]
    due_soon = [bill for bill in bills if _is_due_soon(bill.due_date, today=today)]
    return DashboardKpis(
        total_receivables=total_receivables,
        total_payables=total_payables,
        net_position=total_receivables - total_payables,
        active_projects=len(projects),
        overdue_invoices=len(overdue),
        overdue_amount=sum(inv.balance for inv in overdue),
        bills_due_this_week=len(due_soon),
        bills_due_amount=sum(bill.balance for bill in due_soon),
    )


def build_alerts(
    invoices: Sequence[OpenInvoice],
    bills: Sequence[OpenBill],
    projects: Sequence[ActiveProject],
    *,
    today: date,
) -> tuple[AlertSummary, ...]:
    """Derive alert lines; an alert only appears when its count is non-zero."""

    kpis = build_dashboard_kpis(invoices, bills, projects, today=today)
    alerts: list[AlertSummary] = []
    if kpis.overdue_invoices:
        alerts.append(
            AlertSummary(type="overdue_invoice", count=kpis.overdue_invoices, total=kpis.overdue_amount, severity="critical")
        )
    if kpis.bills_due_this_week:
        alerts.append(
            AlertSummary(type="bills_due_soon", count=kpis.bills_due_this_week, total=kpis.bills_due_amount, severity="warning")
        )

    unassigned = [inv for inv in invoices if not inv.project_id]
    if unassigned:
        alerts.append(
            AlertSummary(
                type="unassigned_invoices",
                count=len(unassigned),
                total=sum(inv.balance for inv in unassigned),
                severity="info",
            )
        )

    missing_estimate = [project for project in projects if not project.estimate_amount]
    if missing_estimate:
        alerts.append(AlertSummary(type="missing_estimate", count=len(missing_estimate), severity="warning"))

    missing_pbs = [project for project in projects if not project.has_pbs]
    if missing_pbs:
        alerts.append(AlertSummary(type="missing_pbs", count=len(missing_pbs), severity="info"))
    return tuple(alerts)


def build_aging_buckets(invoices: Iterable[OpenInvoice], *, today: date) -> AgingBuckets:
    """Bucket open balances by days past due (0-30, 31-60, 61-90, 90+)."""

    buckets = {"current": 0.0, "days_31_60": 0.0, "days_61_90": 0.0, "over_90": 0.0}
    for inv in invoices:
        age = days_overdue(inv.due_date, today=today)
        if age <= 30:
            buckets["current"] += inv.balance
        elif age <= 60:
            buckets["days_31_60"] += inv.balance
        elif age <= 90:
            buckets["days_61_90"] += inv.balance
        else:
            buckets["over_90"] += inv.balance
    return AgingBuckets(**buckets)


def executive_summary(
    invoices: Sequence[OpenInvoice],
    bills: Sequence[OpenBill],
    projects: Sequence[ActiveProject],
    *,
    today: date,
) -> ExecutiveKpis:
    kpis = build_dashboard_kpis(invoices, bills, projects, today=today)
    return ExecutiveKpis(
        total_receivables=kpis.total_receivables,
        total_payables=kpis.total_payables,
        net_position=kpis.net_position,
        active_projects=kpis.active_projects,
        overdue_invoices=kpis.overdue_invoices,
        bills_due_this_week=kpis.bills_due_this_week,
    )


def collections_summary(invoices: Sequence[OpenInvoice], *, today: date) -> CollectionsSummary:
    """Build the collections summary; the priority list is the largest overdue balances."""

    overdue = [inv for inv in invoices if days_overdue(inv.due_date, today=today) > 0]
    due_soon = [inv for inv in invoices if _is_due_soon(inv.due_date, today=today)]
    top = sorted(overdue, key=lambda inv: inv.balance, reverse=True)[:TOP_INVOICES]
    return CollectionsSummary(
        total_receivables=sum(inv.balance for inv in invoices),
        overdue_amount=sum(inv.balance for inv in overdue),
        overdue_count=len(overdue),
        due_soon_amount=sum(inv.balance for inv in due_soon),
        due_soon_count=len(due_soon),
        aging=build_aging_buckets(invoices, today=today),
        top_invoices=tuple(
            InvoiceRow(
                number=inv.invoice_number or inv.id,
                client=inv.client_name,
                amount=inv.balance,
                due_date=inv.due_date.isoformat() if inv.due_date else None,
                status="Overdue",
            )
            for inv in top
        ),
    )


def project_manager_summary(
    invoices: Sequence[OpenInvoice],
    projects: Sequence[ActiveProject],
) -> ProjectManagerSummary:
    """Build the project manager summary; invoiced totals come from linked invoices."""

    invoiced: dict[str, float] = {}
    for inv in invoices:
        if inv.project_id:
            invoiced[inv.project_id] = invoiced.get(inv.project_id, 0.0) + inv.amount
    return ProjectManagerSummary(
        active_projects=len(projects),
        total_estimated=sum(project.estimate_amount or 0 for project in projects),
        total_invoiced=sum(invoiced.values()),
        missing_estimates=sum(1 for project in projects if not project.estimate_amount),
        recent_projects=tuple(
            ProjectRow(
                code=project.code,
                client=project.client_name,
                status="Missing PBS" if not project.has_pbs else "Active",
                invoiced=invoiced.get(project.id, 0.0),
            )
            for project in projects
        ),
    )


def kpi_dashboard_data(
    invoices: Sequence[OpenInvoice],
    bills: Sequence[OpenBill],
    projects: Sequence[ActiveProject],
    *,
    today: date,
) -> KpiDashboardData:
    kpis = build_dashboard_kpis(invoices, bills, projects, today=today)
    return KpiDashboardData(
        total_receivables=kpis.total_receivables,
        total_payables=kpis.total_payables,
        overdue_amount=kpis.overdue_amount,
        overdue_count=kpis.overdue_invoices,
        active_projects=kpis.active_projects,
        net_position=kpis.net_position,
        alerts=build_alerts(invoices, bills, projects, today=today),
    )


def parse_invoices(payload: object) -> tuple[OpenInvoice, ...]:
    """Decode invoice rows from a JSON list.

    Raises:
        ValueError: When the payload or a row is malformed.
    """

    return tuple(
        OpenInvoice(
            id=_require_str(row, "id", idx),
            invoice_number=_optional_str(row, "invoice_number", idx),
            client_name=_optional_str(row, "client_name", idx) or "",
            amount=_require_number(row, "amount", idx, default=_number_or_none(row.get("balance"))),
            balance=_require_number(row, "balance", idx),
            due_date=_optional_date(row, "due_date", idx),
            project_id=_optional_str(row, "project_id", idx),
        )
        for idx, row in _rows(payload, "invoices")
    )


def parse_bills(payload: object) -> tuple[OpenBill, ...]:
    """Decode bill rows from a JSON list.

    Raises:
        ValueError: When the payload or a row is malformed.
    """

    return tuple(
        OpenBill(
            id=_require_str(row, "id", idx),
            vendor_name=_optional_str(row, "vendor_name", idx) or "",
            balance=_require_number(row, "balance", idx),
            due_date=_optional_date(row, "due_date", idx),
            project_id=_optional_str(row, "project_id", idx),
        )
        for idx, row in _rows(payload, "bills")
    )


def parse_projects(payload: object) -> tuple[ActiveProject, ...]:
    """Decode active project rows from a JSON list.

    Raises:
        ValueError: When the payload or a row is malformed.
    """

    return tuple(
        ActiveProject(
            id=_require_str(row, "id", idx),
            code=_require_str(row, "code", idx),
            client_name=_optional_str(row, "client_name", idx) or "",
            estimate_amount=_number_or_none(row.get("estimate_amount")),
            has_pbs=bool(row.get("has_pbs", False)),
        )
        for idx, row in _rows(payload, "projects")
    )


def _rows(payload: object, name: str) -> list[tuple[int, Mapping[str, Any]]]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"{name} must be a list.")
    rows: list[tuple[int, Mapping[str, Any]]] = []
    for idx, row in enumerate(payload):
        if not isinstance(row, Mapping):
            raise ValueError(f"{name}[{idx}] must be an object.")
        rows.append((idx, row))
    return rows


def _require_str(row: Mapping[str, Any], key: str, idx: int) -> str:
    value = row.get(key)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str) or not value:
        raise ValueError(f"Row {idx}: {key!r} is required.")
    return value


def _optional_str(row: Mapping[str, Any], key: str, idx: int) -> str | None:
    value = row.get(key)
    if value is None:
        return None
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        raise ValueError(f"Row {idx}: {key!r} must be a string.")
    return str(value)


def _number_or_none(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _require_number(row: Mapping[str, Any], key: str, idx: int, default: float | None = None) -> float:
    number = _number_or_none(row.get(key))
    if number is None:
        number = default
    if number is None:
        raise ValueError(f"Row {idx}: {key!r} must be a number.")
    return number


def _optional_date(row: Mapping[str, Any], key: str, idx: int) -> date | None:
    value = row.get(key)
    if value in (None, ""):
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise ValueError(f"Row {idx}: {key!r} must be an ISO date.") from exc

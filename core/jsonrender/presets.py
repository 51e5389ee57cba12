"""Built-in dashboard presets assembled from typed business summaries.

Each builder maps a summary onto a wire document and runs it through the
validator once, strictly. A builder that produces an invalid document is a
programming error and raises immediately.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Final, Literal

from .catalog import DEFAULT_REGISTRY
from .schema import SCHEMA_VERSION, Dashboard
from .validator import validate_dashboard

PresetKey = Literal["executive", "collections", "project-manager"]
PresetLayout = Literal["full", "compact", "kpi-only"]

DEFAULT_PRESET: Final[PresetKey] = "executive"


@dataclass(frozen=True, slots=True)
class ExecutiveKpis:
    """Headline totals for the executive summary."""

    total_receivables: float
    total_payables: float
    net_position: float
    active_projects: int
    overdue_invoices: int = 0
    bills_due_this_week: int = 0


@dataclass(frozen=True, slots=True)
class AgingBuckets:
    """Outstanding receivables by days past due."""

    current: float = 0
    days_31_60: float = 0
    days_61_90: float = 0
    over_90: float = 0


@dataclass(frozen=True, slots=True)
class InvoiceRow:
    """One invoice row of the priority collections table."""

    number: str
    client: str
    amount: float
    due_date: str | None = None
    status: str = ""


@dataclass(frozen=True, slots=True)
class CollectionsSummary:
    """Inputs for the collections dashboard.

    Args:
        total_receivables: Open receivables total.
        overdue_amount: Sum of overdue balances.
        overdue_count: Number of overdue invoices.
        due_soon_amount: Sum of balances due within the week.
        due_soon_count: Number of invoices due within the week.
        aging: Aging buckets for the bar chart.
        top_invoices: Highest-priority invoices, already ordered.
    """

    total_receivables: float
    overdue_amount: float
    overdue_count: int
    due_soon_amount: float
    due_soon_count: int
    aging: AgingBuckets = field(default_factory=AgingBuckets)
    top_invoices: tuple[InvoiceRow, ...] = ()


@dataclass(frozen=True, slots=True)
class ProjectRow:
    """One row of the active projects table."""

    code: str
    client: str
    status: str
    invoiced: float


@dataclass(frozen=True, slots=True)
class ProjectManagerSummary:
    """Inputs for the project manager dashboard."""

    active_projects: int
    total_estimated: float
    total_invoiced: float
    missing_estimates: int
    recent_projects: tuple[ProjectRow, ...] = ()


@dataclass(frozen=True, slots=True)
class DashboardPreset:
    """A selectable dashboard view.

    Args:
        key: Stable preset key (stored as the user's preference).
        name: Display name.
        description: One-line description for the preset picker.
        layout: Layout density hint for the host UI.
        emphasis: Topics the preset puts first.
    """

    key: PresetKey
    name: str
    description: str
    layout: PresetLayout
    emphasis: tuple[str, ...]


DASHBOARD_PRESETS: Final[dict[str, DashboardPreset]] = {
    "executive": DashboardPreset(
        key="executive",
        name="Executive Summary",
        description="KPIs + trend chart only",
        layout="kpi-only",
        emphasis=("kpis", "trends"),
    ),
    "collections": DashboardPreset(
        key="collections",
        name="Collections Focus",
        description="Receivables heavy, aging breakdown",
        layout="full",
        emphasis=("receivables", "aging", "overdue"),
    ),
    "project-manager": DashboardPreset(
        key="project-manager",
        name="Project Manager",
        description="Projects + active work emphasis",
        layout="full",
        emphasis=("projects", "activity", "estimates"),
    ),
}


def finalize_document(payload: Mapping[str, Any]) -> Dashboard:
    """Validate a builder's wire document strictly.

    Raises:
        ValueError: When the document has any node-level issue.
    """

    result = validate_dashboard(payload, DEFAULT_REGISTRY, strict=True)
    if not result.is_valid or result.dashboard is None:
        joined = "\n".join(f"- {issue.path}: {issue.message}" for issue in result.issues)
        raise ValueError(f"Invalid preset dashboard {payload.get('title')!r}:\n{joined}")
    return result.dashboard


def kpi(title: str, value: float, *, icon: str, variant: str = "default", fmt: str = "currency", **extra: Any) -> dict[str, Any]:
    """Return a wire `kpi-card` node."""

    props: dict[str, Any] = {"title": title, "value": value, "format": fmt, "icon": icon, "variant": variant}
    props.update(extra)
    return {"component": "kpi-card", "props": props}


def grid(columns: int, children: Sequence[Mapping[str, Any]], gap: str = "md") -> dict[str, Any]:
    """Return a wire `grid` node."""

    return {"component": "grid", "props": {"columns": columns, "gap": gap}, "children": list(children)}


def create_executive_dashboard(kpis: ExecutiveKpis) -> Dashboard:
    """Build the executive summary: four headline KPIs."""

    return finalize_document(
        {
            "version": SCHEMA_VERSION,
            "title": "Executive Summary",
            "layout": [
                grid(
                    4,
                    [
                        kpi("Total Receivables", kpis.total_receivables, icon="trending-up", variant="success"),
                        kpi("Total Payables", kpis.total_payables, icon="trending-down", variant="danger"),
                        kpi(
                            "Net Position",
                            kpis.net_position,
                            icon="dollar-sign",
                            variant="success" if kpis.net_position >= 0 else "danger",
                        ),
                        kpi("Active Projects", kpis.active_projects, icon="folder", fmt="number"),
                    ],
                )
            ],
        }
    )


def create_collections_dashboard(summary: CollectionsSummary) -> Dashboard:
    """Build the collections view: receivable KPIs, aging chart, priority table.

    An action-items card is appended only when something is overdue.
    """

    aging = summary.aging
    layout: list[dict[str, Any]] = [
        grid(
            3,
            [
                kpi("Total Receivables", summary.total_receivables, icon="dollar-sign"),
                kpi(
                    "Overdue",
                    summary.overdue_amount,
                    icon="alert-triangle",
                    variant="danger" if summary.overdue_amount > 0 else "success",
                    subtitle=f"{summary.overdue_count} invoices",
                ),
                kpi(
                    "Due This Week",
                    summary.due_soon_amount,
                    icon="clock",
                    variant="warning" if summary.due_soon_amount > 0 else "default",
                    subtitle=f"{summary.due_soon_count} invoices",
                ),
            ],
        ),
        grid(
            2,
            [
                {
                    "component": "bar-chart",
                    "props": {
                        "title": "Aging Analysis",
                        "description": "Outstanding by age",
                        "xKey": "range",
                        "bars": [{"dataKey": "amount", "label": "Amount", "color": "primary"}],
                        "data": [
                            {"range": "0-30", "amount": aging.current},
                            {"range": "31-60", "amount": aging.days_31_60},
                            {"range": "61-90", "amount": aging.days_61_90},
                            {"range": "90+", "amount": aging.over_90},
                        ],
                    },
                },
                {
                    "component": "data-table",
                    "props": {
                        "title": "Priority Collections",
                        "columns": [
                            {"key": "number", "label": "Invoice #"},
                            {"key": "client", "label": "Client"},
                            {"key": "amount", "label": "Amount", "format": "currency"},
                            {"key": "status", "label": "Status", "format": "badge"},
                        ],
                        "rows": [
                            {
                                "number": row.number,
                                "client": row.client,
                                "amount": row.amount,
                                "dueDate": row.due_date,
                                "status": row.status,
                            }
                            for row in summary.top_invoices
                        ],
                        "emptyMessage": "No overdue invoices! 🎉",
                    },
                },
            ],
        ),
    ]
    if summary.overdue_count > 0:
        layout.append(
            {
                "component": "card",
                "props": {"title": "Action Items"},
                "children": [
                    {
                        "component": "alert-item",
                        "props": {
                            "type": "overdue_invoice",
                            "count": summary.overdue_count,
                            "total": summary.overdue_amount,
                            "severity": "critical",
                        },
                    }
                ],
            }
        )
    return finalize_document({"version": SCHEMA_VERSION, "title": "Collections Focus", "layout": layout})


def create_project_manager_dashboard(summary: ProjectManagerSummary) -> Dashboard:
    """Build the project manager view: project KPIs, active projects, shortcuts."""

    return finalize_document(
        {
            "version": SCHEMA_VERSION,
            "title": "Project Manager",
            "layout": [
                grid(
                    4,
                    [
                        kpi("Active Projects", summary.active_projects, icon="folder", variant="success", fmt="number"),
                        kpi("Total Estimated", summary.total_estimated, icon="file-text"),
                        kpi("Total Invoiced", summary.total_invoiced, icon="dollar-sign", variant="success"),
                        kpi(
                            "Missing Estimates",
                            summary.missing_estimates,
                            icon="alert-triangle",
                            variant="warning" if summary.missing_estimates > 0 else "success",
                            fmt="number",
                        ),
                    ],
                ),
                {
                    "component": "data-table",
                    "props": {
                        "title": "Active Projects",
                        "columns": [
                            {"key": "code", "label": "Code"},
                            {"key": "client", "label": "Client"},
                            {"key": "invoiced", "label": "Invoiced", "format": "currency"},
                            {"key": "status", "label": "Status", "format": "badge"},
                        ],
                        "rows": [
                            {"code": row.code, "client": row.client, "status": row.status, "invoiced": row.invoiced}
                            for row in summary.recent_projects
                        ],
                        "emptyMessage": "No active projects",
                    },
                },
                {
                    "component": "quick-actions",
                    "props": {
                        "actions": [
                            {"id": "new-project", "label": "New Project", "href": "/projects/new"},
                            {"id": "sync-projects", "label": "Sync Drive"},
                            {"id": "view-bids", "label": "View Bids", "href": "/bids"},
                            {"id": "estimates", "label": "Estimates", "href": "/projects?filter=missing-estimate"},
                        ]
                    },
                },
            ],
        }
    )


PRESET_BUILDERS: Final[dict[str, Callable[[Any], Dashboard]]] = {
    "executive": create_executive_dashboard,
    "collections": create_collections_dashboard,
    "project-manager": create_project_manager_dashboard,
}


def build_preset_dashboard(key: str, summary: object) -> Dashboard:
    """Build a preset by key.

    Args:
        key: One of `DASHBOARD_PRESETS`.
        summary: The summary type the preset's builder expects.

    Raises:
        KeyError: When `key` is not a preset.
    """

    if key not in PRESET_BUILDERS:
        raise KeyError(f"Unknown dashboard preset: {key!r}")
    return PRESET_BUILDERS[key](summary)

"""Schema types for declarative dashboard documents.

A dashboard is a tree of `ComponentNode` values. Each node carries a kind tag
and a typed props dataclass for that kind; container kinds also own ordered
child sequences. Instances are only produced by the validator (or by code that
already went through it), so downstream code can rely on the props types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias

SCHEMA_VERSION: Literal[1] = 1

Variant = Literal["default", "success", "warning", "danger"]
Size = Literal["sm", "md", "lg"]
ChartColor = Literal["primary", "success", "warning", "danger"]
ValueFormat = Literal["currency", "number", "percent"]
ColumnFormat = Literal["text", "currency", "date", "badge"]
Severity = Literal["critical", "warning", "info"]
TextVariant = Literal["heading", "subheading", "body", "caption"]
ButtonVariant = Literal["default", "primary", "secondary", "destructive", "outline", "ghost"]
StackDirection = Literal["horizontal", "vertical"]
StackAlign = Literal["start", "center", "end", "stretch"]
BarLayout = Literal["vertical", "horizontal"]

ConditionOperator = Literal["exists", "notExists", "eq", "neq", "gt", "gte", "lt", "lte"]

Icon = Literal[
    "dollar-sign",
    "credit-card",
    "trending-up",
    "trending-down",
    "folder",
    "file-text",
    "alert-triangle",
    "check-circle",
    "clock",
    "users",
]

AlertType = Literal[
    "overdue_invoice",
    "bills_due_soon",
    "missing_estimate",
    "missing_pbs",
    "unassigned_invoices",
    "invoice_suggestions",
    "aging_receivables",
    "negative_profit",
]


@dataclass(frozen=True, slots=True)
class Trend:
    """Period-over-period change shown under a KPI value."""

    value: float
    is_positive: bool


@dataclass(frozen=True, slots=True)
class KpiCardProps:
    """Props for `kpi-card` and `metric-card` nodes.

    Args:
        title: Metric caption.
        value: Numeric value to display.
        format: Display format for `value`.
        variant: Color variant for the icon badge.
        subtitle: Optional secondary line (e.g. "3 invoices").
        icon: Icon name from the catalog.
        trend: Optional percentage change versus the previous period.
    """

    title: str
    value: float
    format: Literal["currency", "number"] = "currency"
    variant: Variant = "default"
    subtitle: str | None = None
    icon: Icon = "dollar-sign"
    trend: Trend | None = None


@dataclass(frozen=True, slots=True)
class StatCardProps:
    """Props for `stat-card` nodes."""

    label: str
    value: str
    description: str | None = None
    variant: Variant = "default"


@dataclass(frozen=True, slots=True)
class AlertItemProps:
    """Props for `alert-item` nodes."""

    type: AlertType
    count: float
    total: float | None = None
    severity: Severity = "info"


@dataclass(frozen=True, slots=True)
class TableColumn:
    """A `data-table` column definition."""

    key: str
    label: str
    format: ColumnFormat = "text"


@dataclass(frozen=True, slots=True)
class DataTableProps:
    """Props for `data-table` nodes. Rows are free-form records keyed by column key."""

    columns: tuple[TableColumn, ...]
    rows: tuple[Mapping[str, Any], ...]
    title: str | None = None
    empty_message: str = "No data available"


@dataclass(frozen=True, slots=True)
class ChartSeries:
    """A single plotted series (a line or a bar group)."""

    data_key: str
    label: str
    color: ChartColor = "primary"


@dataclass(frozen=True, slots=True)
class LineChartProps:
    """Props for `line-chart` nodes."""

    title: str
    data: tuple[Mapping[str, Any], ...]
    x_key: str
    lines: tuple[ChartSeries, ...]
    description: str | None = None
    y_axis_format: ValueFormat = "currency"


@dataclass(frozen=True, slots=True)
class BarChartProps:
    """Props for `bar-chart` nodes."""

    title: str
    data: tuple[Mapping[str, Any], ...]
    x_key: str
    bars: tuple[ChartSeries, ...]
    description: str | None = None
    layout: BarLayout = "vertical"


@dataclass(frozen=True, slots=True)
class ProgressCardProps:
    """Props for `progress-card` nodes."""

    title: str
    current: float
    target: float
    format: ValueFormat = "currency"
    variant: Variant = "default"


@dataclass(frozen=True, slots=True)
class TextBlockProps:
    """Props for `text-block` nodes."""

    content: str
    variant: TextVariant = "body"


@dataclass(frozen=True, slots=True)
class GridProps:
    """Props for `grid` containers."""

    columns: int = 2
    gap: Size = "md"


@dataclass(frozen=True, slots=True)
class StackProps:
    """Props for `stack` containers."""

    direction: StackDirection = "vertical"
    gap: Size = "md"
    align: StackAlign = "stretch"


@dataclass(frozen=True, slots=True)
class CardProps:
    """Props for `card` containers."""

    title: str | None = None
    description: str | None = None
    padding: Size = "md"


@dataclass(frozen=True, slots=True)
class ConditionalProps:
    """Predicate for `conditional` containers.

    Args:
        condition: Dot-separated path into the dashboard data bag.
        operator: Comparison operator applied to the resolved value.
        value: Literal the resolved value is compared against.
    """

    condition: str
    operator: ConditionOperator = "exists"
    value: Any = None


@dataclass(frozen=True, slots=True)
class ConfirmPrompt:
    """Confirmation dialog text shown before an action fires."""

    title: str
    description: str


@dataclass(frozen=True, slots=True)
class ActionButtonProps:
    """Props for `action-button` nodes."""

    label: str
    action: str
    variant: ButtonVariant = "default"
    size: Size = "md"
    confirm: ConfirmPrompt | None = None


@dataclass(frozen=True, slots=True)
class QuickAction:
    """One entry of a `quick-actions` grid."""

    id: str
    label: str
    icon: str | None = None
    href: str | None = None


@dataclass(frozen=True, slots=True)
class QuickActionsProps:
    """Props for `quick-actions` nodes."""

    actions: tuple[QuickAction, ...]


ComponentProps: TypeAlias = (
    KpiCardProps
    | StatCardProps
    | AlertItemProps
    | DataTableProps
    | LineChartProps
    | BarChartProps
    | ProgressCardProps
    | TextBlockProps
    | GridProps
    | StackProps
    | CardProps
    | ConditionalProps
    | ActionButtonProps
    | QuickActionsProps
)


@dataclass(frozen=True, slots=True)
class ComponentNode:
    """A validated node of the dashboard tree.

    Args:
        kind: Catalog kind (the wire `component` field).
        props: Typed props for the kind.
        children: Ordered child nodes (containers only).
        fallback: Nodes rendered when a conditional predicate is false.
    """

    kind: str
    props: ComponentProps
    children: tuple["ComponentNode", ...] = ()
    fallback: tuple["ComponentNode", ...] = ()


@dataclass(frozen=True, slots=True)
class Dashboard:
    """The root document.

    Args:
        layout: Top-level nodes in rendering order.
        version: Schema version gate; always 1.
        title: Optional dashboard title.
        data: Data bag consulted by conditional nodes.
    """

    layout: tuple[ComponentNode, ...]
    version: Literal[1] = SCHEMA_VERSION
    title: str | None = None
    data: Mapping[str, Any] = field(default_factory=dict)


IssueCode = Literal["structural_invalid", "unknown_kind"]


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A node-level problem found while validating a document.

    Args:
        code: `structural_invalid` for shape failures, `unknown_kind` for
            kinds missing from the registry.
        path: Location of the offending node (e.g. `layout[0].children[2]`).
        message: Human-readable description of the problem.
        kind: The node's declared kind, when it had one.
    """

    code: IssueCode
    path: str
    message: str
    kind: str | None = None

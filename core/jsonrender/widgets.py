"""Per-kind renderers for the component catalog.

Every renderer has the same signature: it receives a validated node, the
render context, and a callback that renders a child sequence. Leaf renderers
ignore the callback; container renderers use it so recursion (and the
skip-invalid-node policy) stays in the engine.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Final, cast

from .conditions import evaluate
from .formatting import format_cell, format_compact_currency, format_number, format_value
from .output import OutputNode, RenderContext
from .schema import (
    ActionButtonProps,
    AlertItemProps,
    BarChartProps,
    CardProps,
    ComponentNode,
    ConditionalProps,
    DataTableProps,
    GridProps,
    KpiCardProps,
    LineChartProps,
    ProgressCardProps,
    QuickActionsProps,
    StackProps,
    StatCardProps,
    TextBlockProps,
)

ChildRenderer = Callable[[tuple[ComponentNode, ...], RenderContext], tuple[OutputNode, ...]]
Renderer = Callable[[ComponentNode, RenderContext, ChildRenderer], OutputNode]

ALERT_TYPES: Final[dict[str, tuple[str, str]]] = {
    "overdue_invoice": ("Overdue Invoices", "/receivables?filter=overdue"),
    "bills_due_soon": ("Bills Due Soon", "/payables?filter=due-soon"),
    "missing_estimate": ("Missing Estimates", "/projects?filter=missing-estimate"),
    "missing_pbs": ("Missing PBS", "/projects?filter=missing-pbs"),
    "unassigned_invoices": ("Unassigned Invoices", "/receivables?filter=unassigned"),
    "invoice_suggestions": ("Invoice Suggestions", "/receivables"),
    "aging_receivables": ("Aging Receivables", "/receivables?filter=overdue"),
    "negative_profit": ("Negative Profit Projects", "/projects?filter=has-issues"),
}


def render_kpi_card(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    """Render a KPI / metric card."""

    props = cast(KpiCardProps, node.props)
    trend = None
    if props.trend is not None:
        sign = "+" if props.trend.is_positive else ""
        trend = {
            "value": props.trend.value,
            "is_positive": props.trend.is_positive,
            "label": f"{sign}{format_number(props.trend.value)}% from last month",
        }
    return OutputNode(
        kind=node.kind,
        props={
            "title": props.title,
            "value": props.value,
            "display_value": format_value(props.value, props.format),
            "format": props.format,
            "variant": props.variant,
            "icon": props.icon,
            "subtitle": props.subtitle,
            "trend": trend,
        },
    )


def render_stat_card(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    props = cast(StatCardProps, node.props)
    return OutputNode(
        kind=node.kind,
        props={
            "label": props.label,
            "value": props.value,
            "description": props.description,
            "variant": props.variant,
        },
    )


def render_alert_item(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    """Render an alert line linking to the page that resolves it."""

    props = cast(AlertItemProps, node.props)
    label, href = ALERT_TYPES.get(props.type, (props.type, "/"))
    count_label = f"{format_number(props.count)} {'item' if props.count == 1 else 'items'}"
    return OutputNode(
        kind=node.kind,
        props={
            "type": props.type,
            "label": label,
            "href": href,
            "count": props.count,
            "count_label": count_label,
            "total": props.total,
            "display_total": format_value(props.total, "currency") if props.total else None,
            "severity": props.severity,
        },
    )


def render_data_table(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    """Render a data table; cells are formatted per column format."""

    props = cast(DataTableProps, node.props)
    columns = [{"key": col.key, "label": col.label, "format": col.format} for col in props.columns]
    rows = [
        {col.key: format_cell(row.get(col.key), col.format) for col in props.columns}
        for row in props.rows
    ]
    return OutputNode(
        kind=node.kind,
        props={
            "title": props.title,
            "columns": columns,
            "rows": rows,
            "empty_message": props.empty_message if not rows else None,
        },
    )


def render_line_chart(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    props = cast(LineChartProps, node.props)
    return OutputNode(
        kind=node.kind,
        props={
            "title": props.title,
            "description": props.description,
            "x_key": props.x_key,
            "data": [dict(point) for point in props.data],
            "series": _series_payload(props.lines),
            "y_axis_format": props.y_axis_format,
            "y_ticks": _axis_ticks(props.data, props.lines, props.y_axis_format),
        },
    )


def render_bar_chart(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    """Render a bar chart. Horizontal bars put the value axis on x."""

    props = cast(BarChartProps, node.props)
    return OutputNode(
        kind=node.kind,
        props={
            "title": props.title,
            "description": props.description,
            "x_key": props.x_key,
            "data": [dict(point) for point in props.data],
            "series": _series_payload(props.bars),
            "layout": props.layout,
            "value_axis": "x" if props.layout == "horizontal" else "y",
        },
    )


def render_progress_card(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    """Render progress toward a target, capped at 100 percent."""

    props = cast(ProgressCardProps, node.props)
    if props.target:
        percentage = min(100, round(props.current / props.target * 100))
    else:
        percentage = 100 if props.current > 0 else 0
    return OutputNode(
        kind=node.kind,
        props={
            "title": props.title,
            "current": props.current,
            "target": props.target,
            "display_current": format_value(props.current, props.format),
            "display_target": format_value(props.target, props.format),
            "percentage": percentage,
            "variant": props.variant,
        },
    )


def render_text_block(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    props = cast(TextBlockProps, node.props)
    return OutputNode(kind=node.kind, props={"content": props.content, "variant": props.variant})


def render_grid(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    props = cast(GridProps, node.props)
    return OutputNode(
        kind=node.kind,
        props={"columns": props.columns, "gap": props.gap},
        children=render_children(node.children, ctx),
    )


def render_stack(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    props = cast(StackProps, node.props)
    return OutputNode(
        kind=node.kind,
        props={"direction": props.direction, "gap": props.gap, "align": props.align},
        children=render_children(node.children, ctx),
    )


def render_card(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    props = cast(CardProps, node.props)
    return OutputNode(
        kind=node.kind,
        props={"title": props.title, "description": props.description, "padding": props.padding},
        children=render_children(node.children, ctx),
    )


def render_conditional(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    """Render exactly one branch of a conditional.

    The untaken branch is never passed to `render_children`, so actions inside
    it are never bound.
    """

    props = cast(ConditionalProps, node.props)
    matched = evaluate(props.condition, props.operator, props.value, ctx.data)
    branch = node.children if matched else node.fallback
    return OutputNode(
        kind=node.kind,
        props={"branch": "children" if matched else "fallback"},
        children=render_children(branch, ctx),
    )


def render_action_button(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    props = cast(ActionButtonProps, node.props)
    confirm = None
    if props.confirm is not None:
        confirm = {"title": props.confirm.title, "description": props.confirm.description}
    return OutputNode(
        kind=node.kind,
        props={
            "label": props.label,
            "action": props.action,
            "variant": props.variant,
            "size": props.size,
            "confirm": confirm,
        },
        actions=(ctx.bind(props.action),),
    )


def render_quick_actions(node: ComponentNode, ctx: RenderContext, render_children: ChildRenderer) -> OutputNode:
    """Render a grid of shortcuts; entries without an href dispatch their id."""

    props = cast(QuickActionsProps, node.props)
    entries = [
        {"id": action.id, "label": action.label, "icon": action.icon, "href": action.href}
        for action in props.actions
    ]
    bindings = tuple(ctx.bind(action.id) for action in props.actions if action.href is None)
    return OutputNode(kind=node.kind, props={"actions": entries}, actions=bindings)


def _series_payload(series: tuple[Any, ...]) -> list[dict[str, str]]:
    return [{"data_key": item.data_key, "label": item.label, "color": item.color} for item in series]


def _axis_ticks(data: tuple[Any, ...], series: tuple[Any, ...], axis_format: str) -> list[str]:
    """Label the min and max plotted values the way the value axis shows them."""

    values = [
        point[item.data_key]
        for point in data
        for item in series
        if isinstance(point.get(item.data_key), (int, float)) and not isinstance(point.get(item.data_key), bool)
    ]
    if not values:
        return []
    bounds = (min(values), max(values))
    if axis_format == "currency":
        return [format_compact_currency(value) for value in bounds]
    return [format_value(value, axis_format) for value in bounds]

"""Recursive render engine for dashboard documents.

The engine walks a typed tree and asks each kind's registered renderer for an
`OutputNode`. It never branches on kind itself; dispatch is a registry lookup.
Rendering is pure and synchronous: the same document, data and registry always
produce the same output, and nothing is remembered between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .catalog import DEFAULT_REGISTRY, ComponentRegistry
from .errors import InvalidDocument
from .output import ActionHandler, DiagnosticHandler, OutputNode, RenderContext
from .schema import ComponentNode, Dashboard, ValidationIssue
from .validator import validate_dashboard, validate_node

logger = logging.getLogger("ledgerboard.render")


@dataclass(frozen=True, slots=True)
class RenderedDashboard:
    """A rendered document.

    Args:
        title: Dashboard title, if any.
        nodes: Rendered top-level nodes in layout order.
        diagnostics: Issues for every node that was skipped.
    """

    title: str | None
    nodes: tuple[OutputNode, ...]
    diagnostics: tuple[ValidationIssue, ...] = ()


def render_node(
    node: ComponentNode | Mapping[str, Any],
    ctx: RenderContext,
    *,
    path: str = "node",
) -> OutputNode | None:
    """Render a single node.

    Raw wire mappings are validated first. A node that fails validation (or
    whose kind is not in the context's registry) is reported through the
    context's diagnostic channel and yields None; it never raises.

    Args:
        node: Typed node or raw wire node.
        ctx: Render context threaded through the recursion.
        path: Location used in diagnostics for raw nodes.

    Returns:
        The rendered node, or None when it was skipped.
    """

    registry = _registry(ctx)
    if isinstance(node, ComponentNode):
        typed: ComponentNode | None = node
    else:
        result = validate_node(node, registry, path)
        for issue in result.issues:
            ctx.report(issue)
        typed = result.node
    if typed is None:
        return None

    spec = registry.get(typed.kind)
    if spec is None:
        ctx.report(
            ValidationIssue(
                code="unknown_kind",
                path=path,
                message=f"Unknown component kind {typed.kind!r}.",
                kind=typed.kind,
            )
        )
        return None
    return spec.renderer(typed, ctx, _render_children)


def render_nodes(nodes: Iterable[ComponentNode | Mapping[str, Any]], ctx: RenderContext) -> tuple[OutputNode, ...]:
    """Render siblings in declaration order, omitting skipped nodes."""

    rendered: list[OutputNode] = []
    for idx, node in enumerate(nodes):
        output = render_node(node, ctx, path=f"node[{idx}]")
        if output is not None:
            rendered.append(output)
    return tuple(rendered)


def render_dashboard(
    document: Dashboard | Mapping[str, Any],
    *,
    data: Mapping[str, Any] | None = None,
    on_action: ActionHandler | None = None,
    on_diagnostic: DiagnosticHandler | None = None,
    registry: ComponentRegistry | None = None,
) -> RenderedDashboard:
    """Render a whole dashboard.

    Args:
        document: Typed dashboard or raw wire document.
        data: Caller data overlaid on the document's own data bag.
        on_action: Handler receiving `(action, params)` from interactive nodes.
        on_diagnostic: Handler receiving an issue for each skipped node.
        registry: Catalog to render with; the default catalog when None.

    Returns:
        RenderedDashboard with output nodes and diagnostics.

    Raises:
        SchemaVersionMismatch: When a raw document's version is not 1.
        InvalidDocument: When a raw document is not dashboard-shaped.
    """

    diagnostics: list[ValidationIssue] = []

    def collect(issue: ValidationIssue) -> None:
        diagnostics.append(issue)
        if on_diagnostic is not None:
            on_diagnostic(issue)

    ctx = RenderContext(on_action=on_action, on_diagnostic=collect, registry=registry)

    if isinstance(document, Dashboard):
        dashboard = document
    else:
        result = validate_dashboard(document, registry if registry is not None else DEFAULT_REGISTRY)
        for issue in result.issues:
            ctx.report(issue)
        if result.dashboard is None:
            raise InvalidDocument("Invalid dashboard: validation produced no document.")
        dashboard = result.dashboard

    ctx = ctx.with_data({**dashboard.data, **(data or {})})
    nodes = render_nodes(dashboard.layout, ctx)
    logger.debug("Rendered dashboard %r: %d nodes, %d skipped", dashboard.title, len(nodes), len(diagnostics))
    return RenderedDashboard(title=dashboard.title, nodes=nodes, diagnostics=tuple(diagnostics))


def _render_children(children: tuple[ComponentNode, ...], ctx: RenderContext) -> tuple[OutputNode, ...]:
    return render_nodes(children, ctx)


def _registry(ctx: RenderContext) -> ComponentRegistry:
    return ctx.registry if ctx.registry is not None else DEFAULT_REGISTRY

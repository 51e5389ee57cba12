"""Structural validation of raw dashboard documents.

Validation converts wire JSON (dicts/lists as produced by `json.loads`) into
the typed tree in `schema`. It is lenient per node: a node with an unknown kind
or a broken props contract is dropped and reported as a `ValidationIssue`,
while its siblings survive. Only document-level problems raise.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .catalog import DEFAULT_REGISTRY, ComponentRegistry
from .errors import InvalidDocument, SchemaVersionMismatch
from .fields import check_fields
from .schema import SCHEMA_VERSION, ComponentNode, Dashboard, ValidationIssue

_FENCE = re.compile(r"^\s*```(?:json)?\s*\n?|\n?\s*```\s*$")


@dataclass(frozen=True, slots=True)
class NodeValidation:
    """Result of validating one raw node.

    Args:
        node: The typed node, or None when the node itself is invalid.
        issues: Problems found at or below this node, in document order.
    """

    node: ComponentNode | None
    issues: tuple[ValidationIssue, ...] = ()


@dataclass(frozen=True, slots=True)
class DashboardValidation:
    """Result of validating a whole document.

    Args:
        dashboard: The typed document, or None when strict validation failed.
        issues: Node-level problems; their nodes are absent from `dashboard`.
    """

    dashboard: Dashboard | None
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return self.dashboard is not None and not self.issues


def validate_node(
    raw: object,
    registry: ComponentRegistry | None = None,
    path: str = "node",
) -> NodeValidation:
    """Validate one raw node and, recursively, its children.

    Args:
        raw: Wire node (`{component, props, children?, fallback?}`).
        registry: Catalog to check kinds against; the default catalog when None.
        path: Location of the node, used in issue paths.

    Returns:
        NodeValidation with the typed node (or None) and every issue found.
    """

    registry = registry if registry is not None else DEFAULT_REGISTRY

    if not isinstance(raw, Mapping):
        return _invalid(path, f"{path} must be an object.")

    kind = raw.get("component")
    if not isinstance(kind, str):
        return _invalid(path, f"{path}.component must be a string.")

    spec = registry.get(kind)
    if spec is None:
        issue = ValidationIssue(
            code="unknown_kind",
            path=path,
            message=f"Unknown component kind {kind!r}.",
            kind=kind,
        )
        return NodeValidation(node=None, issues=(issue,))

    raw_props = raw.get("props")
    if raw_props is None:
        raw_props = {}
    if not isinstance(raw_props, Mapping):
        return _invalid(path, f"{path}.props must be an object.", kind=kind)

    if not spec.container and raw.get("children") is not None:
        return _invalid(path, f"{path}: {kind!r} is not a container and cannot have children.", kind=kind)
    if not spec.accepts_fallback and raw.get("fallback") is not None:
        return _invalid(path, f"{path}: {kind!r} does not accept a fallback.", kind=kind)

    kwargs, problems = check_fields(spec.fields, raw_props, path=f"{path}.props")
    if problems:
        return _invalid(path, *problems, kind=kind)

    issues: list[ValidationIssue] = []
    children: tuple[ComponentNode, ...] = ()
    fallback: tuple[ComponentNode, ...] = ()

    if spec.container:
        raw_children = raw.get("children")
        if raw_children is None and spec.children_required:
            return _invalid(path, f"{path}.children is required for {kind!r}.", kind=kind)
        if raw_children is not None and not isinstance(raw_children, list):
            return _invalid(path, f"{path}.children must be a list.", kind=kind)
        children = _validate_sequence(raw_children or [], registry, f"{path}.children", issues)

    if spec.accepts_fallback:
        raw_fallback = raw.get("fallback")
        if raw_fallback is not None and not isinstance(raw_fallback, list):
            return _invalid(path, f"{path}.fallback must be a list.", kind=kind)
        fallback = _validate_sequence(raw_fallback or [], registry, f"{path}.fallback", issues)

    node = ComponentNode(
        kind=kind,
        props=spec.props_type(**kwargs),
        children=children,
        fallback=fallback,
    )
    return NodeValidation(node=node, issues=tuple(issues))


def validate_dashboard(
    payload: object,
    registry: ComponentRegistry | None = None,
    *,
    strict: bool = False,
) -> DashboardValidation:
    """Validate a raw dashboard document.

    Args:
        payload: Parsed JSON document.
        registry: Catalog to validate against; the default catalog when None.
        strict: When True, any node-level issue invalidates the whole document
            (`dashboard` is None). Used for streamed candidates and presets.

    Returns:
        DashboardValidation with the typed document and node-level issues.

    Raises:
        SchemaVersionMismatch: When `version` is missing or not 1.
        InvalidDocument: When the payload is not a dashboard-shaped object.
    """

    if not isinstance(payload, Mapping):
        raise InvalidDocument("Invalid dashboard: expected a JSON object.")

    version = payload.get("version")
    if isinstance(version, bool) or version != SCHEMA_VERSION:
        raise SchemaVersionMismatch(version)

    layout = payload.get("layout")
    if not isinstance(layout, list):
        raise InvalidDocument('Invalid dashboard: "layout" must be a list.')

    title = payload.get("title")
    if title is not None and not isinstance(title, str):
        raise InvalidDocument('Invalid dashboard: "title" must be a string.')

    data = payload.get("data")
    if data is not None and not isinstance(data, Mapping):
        raise InvalidDocument('Invalid dashboard: "data" must be an object.')

    issues: list[ValidationIssue] = []
    nodes = _validate_sequence(layout, registry if registry is not None else DEFAULT_REGISTRY, "layout", issues)
    if strict and issues:
        return DashboardValidation(dashboard=None, issues=tuple(issues))

    dashboard = Dashboard(layout=nodes, title=title, data=dict(data or {}))
    return DashboardValidation(dashboard=dashboard, issues=tuple(issues))


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if present."""

    return _FENCE.sub("", text.strip())


def parse_dashboard(
    text: str,
    registry: ComponentRegistry | None = None,
    *,
    strict: bool = False,
) -> DashboardValidation:
    """Parse JSON text (optionally fenced as ```json) and validate it.

    Raises:
        InvalidDocument: When the text is not valid JSON.
        SchemaVersionMismatch: When the document version is not 1.
    """

    try:
        payload: Any = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise InvalidDocument(f"Invalid dashboard: not valid JSON ({exc.msg}).") from exc
    return validate_dashboard(payload, registry, strict=strict)


def _validate_sequence(
    raw_nodes: list[Any],
    registry: ComponentRegistry,
    path: str,
    issues: list[ValidationIssue],
) -> tuple[ComponentNode, ...]:
    """Validate sibling nodes, dropping invalid ones and collecting their issues."""

    nodes: list[ComponentNode] = []
    for idx, raw in enumerate(raw_nodes):
        result = validate_node(raw, registry, f"{path}[{idx}]")
        issues.extend(result.issues)
        if result.node is not None:
            nodes.append(result.node)
    return tuple(nodes)


def _invalid(path: str, *messages: str, kind: str | None = None) -> NodeValidation:
    """Reject a node with one `structural_invalid` issue per message."""

    issues = tuple(
        ValidationIssue(code="structural_invalid", path=path, message=message, kind=kind) for message in messages
    )
    return NodeValidation(node=None, issues=issues)

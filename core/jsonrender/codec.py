"""Encoding helpers for dashboards and rendered output.

`encode_dashboard` is the inverse of validation: it produces the wire document
(camelCase prop names, unset optional props omitted) that validates back into
an equal `Dashboard`. `encode_output` makes a rendered tree JSON-safe for the
HTTP layer.
"""

from __future__ import annotations

from typing import Any

from .catalog import DEFAULT_REGISTRY, ComponentRegistry
from .fields import ListOf, ObjectOf, PropField
from .output import OutputNode
from .schema import SCHEMA_VERSION, ComponentNode, Dashboard


def encode_dashboard(dashboard: Dashboard, registry: ComponentRegistry | None = None) -> dict[str, Any]:
    """Encode a Dashboard into a JSON-serializable wire document.

    Args:
        dashboard: Dashboard to encode.
        registry: Catalog the dashboard was validated against.

    Returns:
        Dict payload accepted by `validate_dashboard`.
    """

    registry = registry if registry is not None else DEFAULT_REGISTRY
    payload: dict[str, Any] = {
        "version": SCHEMA_VERSION,
        "layout": [encode_node(node, registry) for node in dashboard.layout],
    }
    if dashboard.title is not None:
        payload["title"] = dashboard.title
    if dashboard.data:
        payload["data"] = dict(dashboard.data)
    return payload


def encode_node(node: ComponentNode, registry: ComponentRegistry | None = None) -> dict[str, Any]:
    """Encode one node (and its subtree) into its wire form.

    Raises:
        KeyError: When the node's kind is not in the registry.
    """

    registry = registry if registry is not None else DEFAULT_REGISTRY
    spec = registry.get(node.kind)
    if spec is None:
        raise KeyError(f"Unknown component kind: {node.kind!r}")

    payload: dict[str, Any] = {"component": node.kind, "props": _encode_fields(spec.fields, node.props)}
    if spec.container:
        payload["children"] = [encode_node(child, registry) for child in node.children]
    if spec.accepts_fallback and node.fallback:
        payload["fallback"] = [encode_node(child, registry) for child in node.fallback]
    return payload


def encode_output(node: OutputNode) -> dict[str, Any]:
    """Encode a rendered node into a JSON-safe dict.

    Action bindings are reduced to `{action, params}`; handlers stay server-side.
    """

    payload: dict[str, Any] = {"kind": node.kind, "props": dict(node.props)}
    if node.children:
        payload["children"] = [encode_output(child) for child in node.children]
    if node.actions:
        payload["actions"] = [
            {"action": binding.action, "params": dict(binding.params)} for binding in node.actions
        ]
    return payload


def _encode_fields(declared: tuple[PropField, ...], value: Any) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for spec in declared:
        attr = getattr(value, spec.attr)
        if attr is None:
            continue
        out[spec.name] = _encode_value(spec.shape, attr)
    return out


def _encode_value(shape: Any, value: Any) -> Any:
    if isinstance(shape, ObjectOf):
        return _encode_fields(shape.fields, value)
    if isinstance(shape, ListOf):
        return [_encode_value(shape.item, item) for item in value]
    if isinstance(value, dict):
        return dict(value)
    return value

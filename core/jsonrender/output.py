"""Output tree and render context types.

The render engine turns `ComponentNode` trees into `OutputNode` trees: plain,
display-ready values a host UI (templates, a JSON client) can draw without
knowing the catalog. Interactive nodes carry `ActionBinding` values that
forward to the caller's action handler when triggered.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from .schema import ValidationIssue

if TYPE_CHECKING:
    from .catalog import ComponentRegistry

logger = logging.getLogger("ledgerboard.render")

ActionHandler = Callable[[str, Mapping[str, Any]], None]
DiagnosticHandler = Callable[[ValidationIssue], None]


@dataclass(frozen=True, slots=True)
class ActionBinding:
    """An action attached to a rendered interactive node.

    Args:
        action: Action identifier declared by the document.
        params: Parameters forwarded with the action.
        dispatch: Caller-supplied handler; None when rendering without one.
    """

    action: str
    params: Mapping[str, Any] = field(default_factory=dict)
    dispatch: ActionHandler | None = field(default=None, compare=False, repr=False)

    def trigger(self) -> None:
        """Forward `(action, params)` to the handler, if one was supplied."""

        if self.dispatch is None:
            logger.debug("Action %r triggered without a handler", self.action)
            return
        self.dispatch(self.action, self.params)


@dataclass(frozen=True, slots=True)
class OutputNode:
    """A rendered node.

    Args:
        kind: Catalog kind that produced the node.
        props: Display-ready values (raw values plus formatted strings).
        children: Rendered children, in declaration order.
        actions: Bound actions for interactive nodes.
    """

    kind: str
    props: Mapping[str, Any]
    children: tuple["OutputNode", ...] = ()
    actions: tuple[ActionBinding, ...] = ()


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Immutable context threaded through every recursive render call.

    Args:
        data: Data bag consulted by conditional nodes.
        on_action: Handler that receives `(action, params)` from interactive nodes.
        on_diagnostic: Error channel for skipped nodes.
        registry: Component registry; the default catalog when None.
    """

    data: Mapping[str, Any] = field(default_factory=dict)
    on_action: ActionHandler | None = None
    on_diagnostic: DiagnosticHandler | None = None
    registry: "ComponentRegistry | None" = None

    def with_data(self, extra: Mapping[str, Any] | None) -> RenderContext:
        """Return a context whose data bag is overlaid with `extra`."""

        if not extra:
            return self
        return replace(self, data={**self.data, **extra})

    def bind(self, action: str, params: Mapping[str, Any] | None = None) -> ActionBinding:
        """Bind an action to this context's handler."""

        return ActionBinding(action=action, params=dict(params or {}), dispatch=self.on_action)

    def report(self, issue: ValidationIssue) -> None:
        """Emit a diagnostic for a skipped node."""

        logger.warning("Skipping dashboard node at %s: %s", issue.path, issue.message)
        if self.on_diagnostic is not None:
            self.on_diagnostic(issue)

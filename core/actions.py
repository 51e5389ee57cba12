"""Server-side handling of dashboard actions.

Interactive nodes (`action-button`, `quick-actions`) carry an action name. The
dispatcher resolves that name to an effect the client should carry out: reload
the dashboard, or call a sync endpoint. Unknown actions are reported as
unhandled rather than raising, matching how the render engine treats
unrecognised input elsewhere.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final, Literal

logger = logging.getLogger("ledgerboard.actions")

EffectKind = Literal["reload", "sync", "none"]

DASHBOARD_SYNC_ENDPOINTS: Final[dict[str, str]] = {
    "sync-quickbooks": "/api/sync/quickbooks",
    "sync-projects": "/api/sync/projects",
}


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of dispatching one action.

    Args:
        action: Action name as received.
        handled: Whether the action is known.
        effect: What the client should do.
        endpoint: Sync endpoint to POST to, for `sync` effects.
        params: Parameters forwarded with the action.
    """

    action: str
    handled: bool
    effect: EffectKind = "none"
    endpoint: str | None = None
    params: Mapping[str, Any] = field(default_factory=dict)

    def as_json(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "handled": self.handled,
            "effect": self.effect,
            "endpoint": self.endpoint,
            "params": dict(self.params),
        }


class ActionDispatcher:
    """Resolve action names; usable directly as a render `on_action` handler."""

    def __init__(self, sync_endpoints: Mapping[str, str] | None = None) -> None:
        self._sync_endpoints = dict(DASHBOARD_SYNC_ENDPOINTS if sync_endpoints is None else sync_endpoints)
        self.dispatched: list[ActionResult] = []

    def known_actions(self) -> tuple[str, ...]:
        return ("refresh", *sorted(self._sync_endpoints))

    def dispatch(self, action: str, params: Mapping[str, Any] | None = None) -> ActionResult:
        """Resolve one action and record the result."""

        params = dict(params or {})
        if action == "refresh":
            result = ActionResult(action=action, handled=True, effect="reload", params=params)
        elif action in self._sync_endpoints:
            result = ActionResult(
                action=action,
                handled=True,
                effect="sync",
                endpoint=self._sync_endpoints[action],
                params=params,
            )
        else:
            logger.info("Unhandled dashboard action %r", action)
            result = ActionResult(action=action, handled=False, params=params)
        logger.debug("Dashboard action %r -> %s", action, result.effect)
        self.dispatched.append(result)
        return result

    def __call__(self, action: str, params: Mapping[str, Any]) -> None:
        self.dispatch(action, params)

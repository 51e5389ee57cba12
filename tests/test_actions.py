"""Tests for dashboard action dispatch."""

from __future__ import annotations

import pytest

from core.actions import ActionDispatcher
from core.jsonrender.examples import EXAMPLE_DASHBOARD
from core.jsonrender.render import render_dashboard

pytestmark = pytest.mark.unit


def test_refresh_reloads() -> None:
    result = ActionDispatcher().dispatch("refresh")

    assert result.handled
    assert result.effect == "reload"
    assert result.endpoint is None


def test_sync_actions_resolve_endpoints() -> None:
    result = ActionDispatcher().dispatch("sync-projects", {"full": True})

    assert result.as_json() == {
        "action": "sync-projects",
        "handled": True,
        "effect": "sync",
        "endpoint": "/api/sync/projects",
        "params": {"full": True},
    }


def test_unknown_actions_are_unhandled(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("INFO", logger="ledgerboard.actions"):
        result = ActionDispatcher().dispatch("launch-rocket")

    assert not result.handled
    assert result.effect == "none"
    assert "launch-rocket" in caplog.text


def test_custom_sync_endpoints_replace_defaults() -> None:
    dispatcher = ActionDispatcher({"sync-bank": "/api/sync/bank"})

    assert dispatcher.known_actions() == ("refresh", "sync-bank")
    assert not dispatcher.dispatch("sync-quickbooks").handled


def test_dispatcher_is_a_render_action_handler() -> None:
    """Triggering rendered bindings records results on the dispatcher."""

    dispatcher = ActionDispatcher()
    rendered = render_dashboard(EXAMPLE_DASHBOARD, on_action=dispatcher)

    for button in rendered.nodes[5].children:
        for binding in button.actions:
            binding.trigger()

    assert [(result.action, result.effect) for result in dispatcher.dispatched] == [
        ("sync-quickbooks", "sync"),
        ("refresh", "reload"),
    ]

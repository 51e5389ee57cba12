"""Views for the dashboard API."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from datetime import date
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse, StreamingHttpResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt

from core.actions import ActionDispatcher
from core.generator import DashboardGenerator, GeneratorNotConfigured
from core.jsonrender.codec import encode_dashboard, encode_output
from core.jsonrender.errors import DashboardError
from core.jsonrender.examples import EXAMPLE_DASHBOARD, create_kpi_dashboard
from core.jsonrender.presets import DASHBOARD_PRESETS, build_preset_dashboard
from core.jsonrender.render import RenderedDashboard, render_dashboard
from core.jsonrender.schema import Dashboard, ValidationIssue
from core.jsonrender.streaming import DecoderState, StreamingDecoder
from core.preferences import get_stored_preset, set_stored_preset
from core.summaries import (
    ActiveProject,
    OpenBill,
    OpenInvoice,
    collections_summary,
    executive_summary,
    kpi_dashboard_data,
    parse_bills,
    parse_invoices,
    parse_projects,
    project_manager_summary,
)

logger = logging.getLogger("ledgerboard.views")


def _method_not_allowed(allowed: str) -> JsonResponse:
    response = JsonResponse({"ok": False, "error": "Method not allowed."}, status=405)
    response["Allow"] = allowed
    return response


def _bad_request(message: str) -> JsonResponse:
    return JsonResponse({"ok": False, "error": message}, status=400)


def _json_body(request: HttpRequest) -> Any:
    """Decode the request body as JSON.

    Raises:
        ValueError: When the body is empty or not valid JSON.
    """

    if not request.body:
        raise ValueError("Request body is required.")
    try:
        return json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("Request body must be valid JSON.") from exc


def _finance_rows(
    request: HttpRequest,
) -> tuple[tuple[OpenInvoice, ...], tuple[OpenBill, ...], tuple[ActiveProject, ...], date]:
    """Decode the optional `invoices`/`bills`/`projects` rows and `today` of a body.

    Raises:
        ValueError: When the body or a row is malformed.
    """

    body = _json_body(request) if request.body else {}
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object.")
    invoices = parse_invoices(body.get("invoices"))
    bills = parse_bills(body.get("bills"))
    projects = parse_projects(body.get("projects"))
    try:
        today = date.fromisoformat(body["today"]) if body.get("today") else timezone.localdate()
    except TypeError as exc:
        raise ValueError('"today" must be an ISO date string.') from exc
    return invoices, bills, projects, today


def _issue_json(issue: ValidationIssue) -> dict[str, Any]:
    return {"code": issue.code, "path": issue.path, "message": issue.message, "kind": issue.kind}


def _rendered_json(rendered: RenderedDashboard, dispatcher: ActionDispatcher | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ok": True,
        "title": rendered.title,
        "nodes": [encode_output(node) for node in rendered.nodes],
        "diagnostics": [_issue_json(issue) for issue in rendered.diagnostics],
    }
    if dispatcher is not None:
        payload["actions"] = list(dispatcher.known_actions())
    return payload


def _render(dashboard: Dashboard) -> dict[str, Any]:
    dispatcher = ActionDispatcher()
    rendered = render_dashboard(dashboard, on_action=dispatcher)
    payload = _rendered_json(rendered, dispatcher)
    payload["document"] = encode_dashboard(dashboard)
    return payload


def dashboard_example(request: HttpRequest) -> HttpResponse:
    """Return the rendered example dashboard."""

    if request.method != "GET":
        return _method_not_allowed("GET")
    return JsonResponse(_render(EXAMPLE_DASHBOARD))


@csrf_exempt
def dashboard_render(request: HttpRequest) -> HttpResponse:
    """Render a posted dashboard document.

    The body is either the document itself or `{"document": ..., "data": ...}`,
    where `data` is overlaid on the document's own data bag. Invalid nodes are
    skipped and listed under `diagnostics`; document-level problems are a 400.
    """

    if request.method != "POST":
        return _method_not_allowed("POST")
    try:
        body = _json_body(request)
    except ValueError as exc:
        return _bad_request(str(exc))
    if not isinstance(body, dict):
        return _bad_request("Request body must be a JSON object.")

    if "document" in body:
        document, data = body["document"], body.get("data")
    else:
        document, data = body, None
    if data is not None and not isinstance(data, dict):
        return _bad_request('"data" must be an object.')

    try:
        rendered = render_dashboard(document, data=data, on_action=ActionDispatcher())
    except DashboardError as exc:
        return _bad_request(str(exc))
    return JsonResponse(_rendered_json(rendered))


def dashboard_presets(request: HttpRequest) -> HttpResponse:
    """List presets and the preset stored for this session."""

    if request.method != "GET":
        return _method_not_allowed("GET")
    return JsonResponse(
        {
            "ok": True,
            "selected": get_stored_preset(request),
            "presets": [
                {
                    "key": preset.key,
                    "name": preset.name,
                    "description": preset.description,
                    "layout": preset.layout,
                    "emphasis": list(preset.emphasis),
                }
                for preset in DASHBOARD_PRESETS.values()
            ],
        }
    )


@csrf_exempt
def dashboard_kpis(request: HttpRequest) -> HttpResponse:
    """Build the live KPI dashboard from posted rows.

    The body has the same shape as a preset request. The alerts card is only
    present when at least one alert fires.
    """

    if request.method != "POST":
        return _method_not_allowed("POST")
    try:
        invoices, bills, projects, today = _finance_rows(request)
    except ValueError as exc:
        return _bad_request(str(exc))
    data = kpi_dashboard_data(invoices, bills, projects, today=today)
    return JsonResponse(_render(create_kpi_dashboard(data)))


@csrf_exempt
def dashboard_preset(request: HttpRequest, key: str) -> HttpResponse:
    """Build a preset dashboard from posted rows and remember the choice.

    The body carries `invoices`, `bills` and `projects` row lists and an
    optional ISO `today` used for overdue calculations.
    """

    if request.method != "POST":
        return _method_not_allowed("POST")
    if key not in DASHBOARD_PRESETS:
        return JsonResponse({"ok": False, "error": f"Unknown preset {key!r}."}, status=404)
    try:
        invoices, bills, projects, today = _finance_rows(request)
    except ValueError as exc:
        return _bad_request(str(exc))

    if key == "executive":
        summary: object = executive_summary(invoices, bills, projects, today=today)
    elif key == "collections":
        summary = collections_summary(invoices, today=today)
    else:
        summary = project_manager_summary(invoices, projects)

    dashboard = build_preset_dashboard(key, summary)
    set_stored_preset(request, key)
    return JsonResponse(_render(dashboard))


@csrf_exempt
def dashboard_action(request: HttpRequest) -> HttpResponse:
    """Dispatch a dashboard action posted as `{"action": ..., "params": {...}}`."""

    if request.method != "POST":
        return _method_not_allowed("POST")
    try:
        body = _json_body(request)
    except ValueError as exc:
        return _bad_request(str(exc))
    if not isinstance(body, dict) or not isinstance(body.get("action"), str):
        return _bad_request('"action" is required.')
    params = body.get("params") or {}
    if not isinstance(params, dict):
        return _bad_request('"params" must be an object.')

    result = ActionDispatcher().dispatch(body["action"], params)
    if not result.handled:
        return JsonResponse({"ok": False, "error": f"Unknown action {result.action!r}.", **result.as_json()}, status=400)
    return JsonResponse({"ok": True, **result.as_json()})


async def generation_events(text: AsyncIterator[str]) -> AsyncIterator[str]:
    """Turn generator text into NDJSON events.

    Emits one `dashboard` event per publication, then a single `complete` or
    `error` event.
    """

    decoder = StreamingDecoder()
    async for dashboard in decoder.publications(text):
        yield json.dumps({"type": "dashboard", "dashboard": encode_dashboard(dashboard)}) + "\n"
    if decoder.state is DecoderState.COMPLETED and decoder.value is not None:
        yield json.dumps({"type": "complete", "dashboard": encode_dashboard(decoder.value)}) + "\n"
    else:
        message = str(decoder.error) if decoder.error else "Generation stopped."
        yield json.dumps({"type": "error", "error": message}) + "\n"


@csrf_exempt
async def dashboard_generate(request: HttpRequest) -> HttpResponse:
    """Stream a generated dashboard for `{"prompt": ...}` as NDJSON."""

    if request.method != "POST":
        return _method_not_allowed("POST")
    try:
        body = _json_body(request)
    except ValueError as exc:
        return _bad_request(str(exc))
    prompt = body.get("prompt") if isinstance(body, dict) else None
    if not isinstance(prompt, str) or not prompt.strip():
        return _bad_request("Prompt is required.")

    try:
        generator = DashboardGenerator()
    except GeneratorNotConfigured as exc:
        logger.warning("Dashboard generation requested but not configured: %s", exc)
        return JsonResponse({"ok": False, "error": "Dashboard generation is not configured."}, status=503)

    return StreamingHttpResponse(
        generation_events(generator.stream_text(prompt.strip())),
        content_type="application/x-ndjson",
    )

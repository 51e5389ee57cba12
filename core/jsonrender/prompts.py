"""System prompt used to ask a text generator for a dashboard document."""

from __future__ import annotations

from typing import get_args

from .catalog import ComponentRegistry, catalog_description
from .schema import AlertType, Icon, Variant

PROMPT_HEADER = """\
You are a dashboard generator for a construction company's financial dashboard.

Respond with a single JSON document and nothing else. The document format is:
{
  "version": 1,
  "title": "Dashboard Title",
  "layout": [ /* components */ ],
  "data": { /* optional values referenced by conditional components */ }
}

Every component is an object {"component": <kind>, "props": {...}} and
containers also carry "children": [...]. Use these components:"""


def dashboard_generation_prompt(registry: ComponentRegistry | None = None) -> str:
    """Return the generator system prompt, listing every registered kind."""

    return "\n\n".join(
        (
            PROMPT_HEADER,
            catalog_description(registry),
            "Variants: " + ", ".join(get_args(Variant)),
            "Icons: " + ", ".join(get_args(Icon)),
            "Alert types: " + ", ".join(get_args(AlertType)),
        )
    )

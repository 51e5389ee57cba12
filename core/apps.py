"""App configuration for the dashboard API app."""

from __future__ import annotations

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Hosts the dashboard HTTP surface; the engine lives in `core.jsonrender`."""

    name = "core"
    verbose_name = "Ledgerboard dashboards"

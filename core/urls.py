"""URL configuration for core views."""

from __future__ import annotations

from django.urls import path

from core import views

app_name = "core"

urlpatterns = [
    path("api/dashboard/example/", views.dashboard_example, name="dashboard_example"),
    path("api/dashboard/render/", views.dashboard_render, name="dashboard_render"),
    path("api/dashboard/kpis/", views.dashboard_kpis, name="dashboard_kpis"),
    path("api/dashboard/presets/", views.dashboard_presets, name="dashboard_presets"),
    path("api/dashboard/presets/<str:key>/", views.dashboard_preset, name="dashboard_preset"),
    path("api/dashboard/generate/", views.dashboard_generate, name="dashboard_generate"),
    path("api/dashboard/actions/", views.dashboard_action, name="dashboard_action"),
]

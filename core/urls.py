"""URL configuration for core views."""

from __future__ import annotations

from django.urls import path

from core import views

app_name = "core"

urlpatterns = [
    path("api/aggregate/", views.aggregate_api, name="aggregate_api"),
    path("api/charts/validate/", views.validate_chart_api, name="validate_chart_api"),
]

"""URL routing for admin moderation."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import (
    AdminLogListView,
    ApproveCompanionView,
    DisputeListView,
    PlatformSettingsView,
    RejectCompanionView,
    ResolveDisputeView,
)

urlpatterns = [
    path("disputes/", DisputeListView.as_view(), name="dispute-list"),
    path("disputes/<str:booking_id>/resolve/", ResolveDisputeView.as_view(), name="dispute-resolve"),
    path("companions/<str:companion_id>/approve/", ApproveCompanionView.as_view(), name="companion-approve"),
    path("companions/<str:companion_id>/reject/", RejectCompanionView.as_view(), name="companion-reject"),
    path("settings/", PlatformSettingsView.as_view(), name="platform-settings"),
    path("logs/", AdminLogListView.as_view(), name="admin-log-list"),
]

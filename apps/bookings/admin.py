"""Admin registration for bookings.

Status changes go through the command handlers, so every field is
read-only here.
"""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "client",
        "companion",
        "status",
        "booking_date",
        "hours",
        "total_amount",
        "request_expires_at",
        "created_at",
    )
    list_filter = ("status", "booking_date")
    search_fields = ("id", "client__email", "companion__user__email")
    readonly_fields = (
        "client",
        "companion",
        "booking_date",
        "hours",
        "meeting_location",
        "special_requests",
        "total_amount",
        "status",
        "request_expires_at",
        "completion_requested_at",
        "disputed_at",
        "dispute_reason",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False

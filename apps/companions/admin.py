"""Admin registration for companions."""

from __future__ import annotations

from django.contrib import admin

from .models import Companion


@admin.register(Companion)
class CompanionAdmin(admin.ModelAdmin):
    list_display = (
        "user",
        "city",
        "hourly_rate",
        "is_available",
        "moderation_status",
        "total_bookings",
        "total_earnings",
    )
    list_filter = ("moderation_status", "is_available", "city")
    search_fields = ("user__email", "city", "bank_account_name")
    readonly_fields = ("total_bookings", "total_earnings", "paystack_subaccount_code", "created_at", "updated_at")

"""Admin registrations for moderation records."""

from __future__ import annotations

from django.contrib import admin

from .models import AdminLog, PlatformSetting


@admin.register(AdminLog)
class AdminLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "admin", "action", "target_type", "target_id")
    list_filter = ("action", "target_type")
    search_fields = ("admin__email", "target_id")
    readonly_fields = ("admin", "action", "target_type", "target_id", "details", "created_at")

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(PlatformSetting)
class PlatformSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")

    def has_change_permission(self, request, obj=None):  # type: ignore
        # Changes go through the settings API so they are logged
        return False

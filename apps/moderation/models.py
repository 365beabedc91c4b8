"""Moderation models: append-only admin audit log and platform settings."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class AdminLog(models.Model):
    """Immutable audit record of an admin moderation or dispute action."""

    class Action(models.TextChoices):
        APPROVE_COMPANION = "approve_companion", _("Companion approved")
        REJECT_COMPANION = "reject_companion", _("Companion rejected")
        RESOLVE_DISPUTE_COMPLETE = "resolve_dispute_complete", _("Dispute resolved: complete")
        RESOLVE_DISPUTE_REVOKE = "resolve_dispute_revoke", _("Dispute resolved: revoke")
        UPDATE_PLATFORM_FEE = "update_platform_fee", _("Platform fee updated")

    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="admin_logs",
    )
    action = models.CharField(max_length=50, choices=Action.choices)
    target_type = models.CharField(max_length=50, blank=True)
    target_id = models.CharField(max_length=64, blank=True)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Admin log entry")
        verbose_name_plural = _("Admin log")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["action", "created_at"], name="moderation__action_3e9c41_idx"),
            models.Index(fields=["target_type", "target_id"], name="moderation__target__8b7d25_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.admin_id} - {self.action} - {self.target_type}:{self.target_id}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise ValueError("Admin log entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):  # type: ignore
        raise ValueError("Admin log entries cannot be deleted.")

    @classmethod
    def record(cls, admin, action: str, target=None, *, target_type: str = "", details: dict | None = None):
        """Append an entry; ``target`` may be any model instance."""
        if target is not None:
            target_type = target_type or target.__class__.__name__.lower()
        return cls.objects.create(
            admin=admin,
            action=action,
            target_type=target_type,
            target_id=str(target.pk) if target is not None else "",
            details=details or {},
        )


class PlatformSetting(models.Model):
    """Admin-editable key/value setting."""

    PLATFORM_FEE_PERCENTAGE = "platform_fee_percentage"

    key = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=255)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Platform setting")
        verbose_name_plural = _("Platform settings")
        ordering = ["key"]

    def __str__(self) -> str:
        return f"{self.key}={self.value}"

"""Companion profile models (the part the booking engine depends on)."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Companion(models.Model):
    """Bookable profile owned by a user with the companion role."""

    class ModerationStatus(models.TextChoices):
        PENDING = "pending", _("Awaiting moderation")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="companion_profile",
    )
    city = models.CharField(max_length=100, blank=True)
    bio = models.TextField(blank=True)
    hourly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Price per hour charged to clients."),
    )
    is_available = models.BooleanField(default=True)
    moderation_status = models.CharField(
        max_length=20,
        choices=ModerationStatus.choices,
        default=ModerationStatus.PENDING,
    )

    # Payout destination for split payments
    paystack_subaccount_code = models.CharField(max_length=64, blank=True)
    bank_account_name = models.CharField(max_length=255, blank=True)
    bank_account_number = models.CharField(max_length=20, blank=True)
    bank_code = models.CharField(max_length=20, blank=True)

    total_bookings = models.PositiveIntegerField(default=0)
    total_earnings = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Companion")
        verbose_name_plural = _("Companions")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["moderation_status", "is_available"], name="companions__moderat_6b1f0e_idx"),
        ]

    def __str__(self) -> str:
        return f"Companion {self.pk} ({self.user_id})"

    @property
    def is_bookable(self) -> bool:
        return self.moderation_status == self.ModerationStatus.APPROVED and self.is_available

    @property
    def has_split_account(self) -> bool:
        return bool(self.paystack_subaccount_code)

    def record_completed_booking(self, earning: Decimal) -> None:
        """Atomically bump payout counters; callers guarantee once-per-booking."""
        type(self).objects.filter(pk=self.pk).update(
            total_bookings=F("total_bookings") + 1,
            total_earnings=F("total_earnings") + earning,
        )

"""Booking domain models for Fliq."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinLengthValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder

from .domain.state_machine import BookingStatus, is_terminal


def request_ttl() -> timedelta:
    return getattr(settings, "BOOKING_REQUEST_TTL", timedelta(minutes=15))


def completion_window() -> timedelta:
    return getattr(settings, "BOOKING_COMPLETION_WINDOW", timedelta(hours=48))


class Booking(EventRecorder, models.Model):
    """Paid request by a client for a companion's time."""

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Awaiting companion")
        ACCEPTED = BookingStatus.ACCEPTED.value, _("Accepted")
        ACTIVE = BookingStatus.ACTIVE.value, _("In progress")
        PENDING_COMPLETION = BookingStatus.PENDING_COMPLETION.value, _("Awaiting client confirmation")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")
        DISPUTED = BookingStatus.DISPUTED.value, _("Disputed")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")
        REJECTED = BookingStatus.REJECTED.value, _("Rejected")
        EXPIRED = BookingStatus.EXPIRED.value, _("Expired")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    companion = models.ForeignKey(
        "companions.Companion",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    booking_date = models.DateTimeField()
    hours = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(24)])
    meeting_location = models.CharField(max_length=255, validators=[MinLengthValidator(5)])
    special_requests = models.TextField(blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    request_expires_at = models.DateTimeField()
    completion_requested_at = models.DateTimeField(null=True, blank=True)
    disputed_at = models.DateTimeField(null=True, blank=True)
    dispute_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(hours__gte=1) & Q(hours__lte=24),
                name="booking_hours_in_range",
            ),
            models.CheckConstraint(condition=Q(total_amount__gte=0), name="booking_total_non_negative"),
        ]
        indexes = [
            models.Index(fields=["status", "request_expires_at"], name="bookings_bo_status_5a1c2e_idx"),
            models.Index(fields=["status", "completion_requested_at"], name="bookings_bo_status_9d3f7b_idx"),
            models.Index(fields=["companion", "status"], name="bookings_bo_compani_4e8a10_idx"),
            models.Index(fields=["client", "status"], name="bookings_bo_client__7c2b96_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.pk} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    def is_request_overdue(self, now: datetime | None = None) -> bool:
        now = now or timezone.now()
        return self.status == self.Status.PENDING and now >= self.request_expires_at

    def completion_deadline(self) -> datetime | None:
        if self.completion_requested_at is None:
            return None
        return self.completion_requested_at + completion_window()

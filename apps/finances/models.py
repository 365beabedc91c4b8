"""Financial domain models for Fliq."""

from __future__ import annotations

from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Payment(models.Model):
    """Gateway payment for a booking, with its fee split fixed at creation."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Awaiting payment")
        PAID = "paid", _("Paid")
        REFUNDED = "refunded", _("Refund owed")
        FAILED = "failed", _("Failed")

    booking = models.OneToOneField(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payment",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="NGN")
    platform_fee = models.DecimalField(max_digits=12, decimal_places=2)
    companion_earning = models.DecimalField(max_digits=12, decimal_places=2)
    platform_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        help_text=_("Fee percentage in effect when the booking was created."),
    )
    reference = models.CharField(max_length=100, unique=True, null=True, blank=True)
    authorization_url = models.URLField(max_length=500, blank=True)
    subaccount_code = models.CharField(
        max_length=64,
        blank=True,
        help_text=_("Split destination; empty means the platform collects the full amount."),
    )
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    paid_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    settled_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount=F("platform_fee") + F("companion_earning")),
                name="payment_split_sums_to_amount",
            ),
        ]

    def __str__(self) -> str:
        return f"Payment {self.booking_id} ({self.status})"

    def _guarded_update(self, allowed_from, *, unless_booking_in=(), **fields) -> bool:
        """
        Apply ``fields`` only if the stored status is still one of
        ``allowed_from`` and the booking is not in ``unless_booking_in``.
        Returns False when another writer got there first.
        """
        fields["updated_at"] = timezone.now()
        qs = type(self).objects.filter(pk=self.pk, status__in=list(allowed_from))
        if unless_booking_in:
            qs = qs.exclude(booking__status__in=list(unless_booking_in))
        updated = qs.update(**fields)
        if updated:
            for name, value in fields.items():
                setattr(self, name, value)
        return bool(updated)

    def mark_paid(self, allowed_from=(Status.PENDING,), unless_booking_in=()) -> bool:
        return self._guarded_update(
            allowed_from,
            unless_booking_in=unless_booking_in,
            status=self.Status.PAID,
            paid_at=timezone.now(),
        )

    def mark_refunded(self, allowed_from=(Status.PAID,), reason: str = "") -> bool:
        metadata = dict(self.metadata or {})
        if reason:
            metadata["refund_reason"] = reason
        return self._guarded_update(
            allowed_from,
            status=self.Status.REFUNDED,
            refunded_at=timezone.now(),
            metadata=metadata,
        )

    def mark_settled(self) -> bool:
        """Record the payout exactly once; False if it was already recorded."""
        now = timezone.now()
        updated = type(self).objects.filter(pk=self.pk, settled_at__isnull=True).update(
            settled_at=now,
            updated_at=now,
        )
        if updated:
            self.settled_at = now
        return bool(updated)


class PaymentTransaction(models.Model):
    """History of gateway interactions (initialise, verify, webhooks, callbacks)."""

    class Event(models.TextChoices):
        INITIALIZE = "initialize", _("Checkout initialised")
        VERIFY = "verify", _("Verification")
        WEBHOOK = "webhook", _("Webhook")
        CALLBACK = "callback", _("Redirect callback")

    payment = models.ForeignKey(
        Payment,
        on_delete=models.CASCADE,
        related_name="transactions",
    )
    event = models.CharField(max_length=50, choices=Event.choices)
    payload = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    status = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Payment transaction")
        verbose_name_plural = _("Payment transactions")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.event} for payment {self.payment_id}"

    @classmethod
    def log(cls, payment: Payment, event: str, payload: dict | None = None, status: str = "") -> "PaymentTransaction":
        return cls.objects.create(payment=payment, event=event, payload=payload or {}, status=status)

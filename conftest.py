"""Shared pytest fixtures: users by role, an approved companion and bookings in any status."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.utils import timezone

from apps.bookings.models import Booking
from apps.companions.models import Companion
from apps.finances import paystack
from apps.finances.models import Payment
from apps.finances.services import calculate_split_amounts
from apps.users.models import User


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=User.RoleChoices.CLIENT, **extra):
        counter["n"] += 1
        email = extra.pop("email", f"{role}{counter['n']}@fliq.test")
        return User.objects.create_user(email=email, password="Secret123!", role=role, **extra)

    return _make


@pytest.fixture
def client_user(make_user):
    return make_user(User.RoleChoices.CLIENT, email="client@fliq.test")


@pytest.fixture
def companion_user(make_user):
    return make_user(User.RoleChoices.COMPANION, email="companion@fliq.test")


@pytest.fixture
def admin_user(make_user):
    return make_user(User.RoleChoices.ADMIN, email="admin@fliq.test")


@pytest.fixture
def companion(companion_user):
    return Companion.objects.create(
        user=companion_user,
        city="Lagos",
        hourly_rate=Decimal("5000.00"),
        moderation_status=Companion.ModerationStatus.APPROVED,
        paystack_subaccount_code="ACCT_companion",
    )


@pytest.fixture
def make_booking(client_user, companion):
    """Booking plus its payment in the requested statuses, bypassing the gateway."""
    counter = {"n": 0}

    def _make(status=Booking.Status.PENDING, payment_status=Payment.Status.PENDING, hours=2, **fields):
        counter["n"] += 1
        now = timezone.now()
        total = companion.hourly_rate * hours
        split = calculate_split_amounts(total, Decimal("20"))
        values = {
            "client": client_user,
            "companion": companion,
            "booking_date": now + timedelta(days=1),
            "hours": hours,
            "meeting_location": "Victoria Island, Lagos",
            "total_amount": split.total_amount,
            "status": status,
            "request_expires_at": now + timedelta(minutes=15),
        }
        if status == Booking.Status.PENDING_COMPLETION:
            values["completion_requested_at"] = now
        values.update(fields)
        booking = Booking.objects.create(**values)
        Payment.objects.create(
            booking=booking,
            status=payment_status,
            amount=split.total_amount,
            platform_fee=split.platform_fee,
            companion_earning=split.companion_earning,
            platform_percentage=Decimal("20"),
            reference=f"fliq_test_{counter['n']}",
            authorization_url=f"https://checkout.paystack.test/{counter['n']}",
            subaccount_code=companion.paystack_subaccount_code,
        )
        return Booking.objects.select_related("client", "companion", "companion__user", "payment").get(pk=booking.pk)

    return _make


@pytest.fixture
def paystack_checkout():
    """Gateway initialise call that succeeds and echoes the reference back."""

    def _initialize(email, amount, *, reference, metadata, **kwargs):
        return paystack.InitializedTransaction(
            authorization_url=f"https://checkout.paystack.test/{reference}",
            reference=reference,
            access_code="access",
        )

    with patch("apps.finances.paystack.initialize_transaction", side_effect=_initialize) as mocked:
        yield mocked

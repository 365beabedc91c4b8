"""Admin moderation endpoints: disputes, companion approval, fee and audit log."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from apps.bookings.application import command_handlers as commands
from apps.bookings.models import Booking
from apps.companions.models import Companion
from apps.finances import paystack
from apps.finances.models import Payment
from apps.moderation.models import AdminLog, PlatformSetting
from apps.moderation.services import get_platform_fee_percentage
from shared.domain.exceptions import ValidationError

pytestmark = pytest.mark.django_db


@pytest.fixture
def admin_api(admin_user):
    api = APIClient()
    api.force_authenticate(admin_user)
    return api


def test_dispute_queue_and_resolution(admin_api, make_booking):
    disputed = make_booking(status=Booking.Status.DISPUTED, payment_status=Payment.Status.PAID)
    make_booking(status=Booking.Status.PENDING_COMPLETION)

    listed = admin_api.get(reverse("dispute-list"))
    assert [item["id"] for item in listed.data] == [str(disputed.pk)]

    response = admin_api.post(
        reverse("dispute-resolve", args=[disputed.pk]),
        {"resolution": "revoke", "notes": "No-show confirmed"},
        format="json",
    )

    assert response.status_code == 200, response.data
    assert response.data["status"] == "cancelled"
    assert response.data["payment"]["status"] == "refunded"
    assert AdminLog.objects.get().action == "resolve_dispute_revoke"


def test_resolving_a_completed_booking_is_a_conflict(admin_api, make_booking):
    booking = make_booking(status=Booking.Status.COMPLETED)

    response = admin_api.post(reverse("dispute-resolve", args=[booking.pk]), {"resolution": "complete"}, format="json")

    assert response.status_code == 409
    assert response.data["code"] == "invalid_state"


def test_unknown_booking_is_404(admin_api):
    response = admin_api.post(
        reverse("dispute-resolve", args=["00000000-0000-4000-8000-000000000000"]),
        {"resolution": "complete"},
        format="json",
    )

    assert response.status_code == 404
    assert response.data["code"] == "not_found"


def test_moderation_requires_admin_role(client_user, make_booking):
    booking = make_booking(status=Booking.Status.DISPUTED)
    api = APIClient()
    api.force_authenticate(client_user)

    assert api.get(reverse("dispute-list")).status_code == 403
    response = api.post(reverse("dispute-resolve", args=[booking.pk]), {"resolution": "revoke"}, format="json")
    assert response.status_code == 403
    booking.refresh_from_db()
    assert booking.status == "disputed"


def test_approve_and_reject_companion(admin_api, make_user):
    companion = Companion.objects.create(user=make_user("companion"), hourly_rate=Decimal("3000"))

    response = admin_api.post(reverse("companion-approve", args=[companion.pk]))
    assert response.status_code == 200
    assert response.data["moderation_status"] == "approved"

    response = admin_api.post(reverse("companion-reject", args=[companion.pk]), {"reason": "Fake photos"}, format="json")
    assert response.data["moderation_status"] == "rejected"

    actions = list(AdminLog.objects.order_by("created_at", "id").values_list("action", flat=True))
    assert actions == ["approve_companion", "reject_companion"]
    assert AdminLog.objects.get(action="reject_companion").details == {"reason": "Fake photos"}


def test_approve_unknown_companion(admin_api):
    response = admin_api.post(reverse("companion-approve", args=["nope"]))

    assert response.status_code == 404


def test_fee_change_applies_to_new_bookings_only(admin_api, make_booking, client_user, companion):
    existing = make_booking()
    assert admin_api.get(reverse("platform-settings")).data == {"platform_fee_percentage": "20"}

    response = admin_api.patch(reverse("platform-settings"), {"platform_fee_percentage": "15"}, format="json")
    assert response.status_code == 200, response.data
    assert get_platform_fee_percentage() == Decimal("15")

    with patch("apps.finances.paystack.initialize_transaction") as initialize:
        initialize.return_value = paystack.InitializedTransaction("https://checkout.paystack.test/n", "fliq_new")
        result = commands.create_booking(
            commands.CreateBookingCommand(
                client_id=client_user.id,
                companion_id=companion.id,
                booking_date=existing.booking_date,
                hours=2,
                meeting_location="Yaba, Lagos",
            )
        )

    new_payment = Payment.objects.get(booking_id=result.booking_id)
    assert new_payment.platform_fee == Decimal("1500.00")
    assert new_payment.platform_percentage == Decimal("15.00")
    existing.payment.refresh_from_db()
    assert existing.payment.platform_fee == Decimal("2000.00")
    log = AdminLog.objects.get(action="update_platform_fee")
    assert log.details["previous"] == "20"


def test_fee_outside_range_is_rejected(admin_api, admin_user):
    response = admin_api.patch(reverse("platform-settings"), {"platform_fee_percentage": "120"}, format="json")
    assert response.status_code == 400

    PlatformSetting.objects.create(key=PlatformSetting.PLATFORM_FEE_PERCENTAGE, value="garbage")
    assert get_platform_fee_percentage() == Decimal("20")


def test_fee_service_validates_directly(admin_user):
    from apps.moderation.services import set_platform_fee_percentage

    with pytest.raises(ValidationError):
        set_platform_fee_percentage(admin_user, "-3")
    assert not AdminLog.objects.exists()


def test_admin_log_limit(admin_api, admin_user):
    for n in range(5):
        AdminLog.record(admin_user, AdminLog.Action.UPDATE_PLATFORM_FEE, details={"n": n})

    response = admin_api.get(reverse("admin-log-list"), {"limit": 3})
    assert len(response.data) == 3
    assert response.data[0]["admin"]["email"] == "admin@fliq.test"

    assert len(admin_api.get(reverse("admin-log-list")).data) == 5


def test_admin_log_is_append_only(admin_user):
    entry = AdminLog.record(admin_user, AdminLog.Action.APPROVE_COMPANION, target_type="companion")

    entry.details = {"edited": True}
    with pytest.raises(ValueError):
        entry.save()
    with pytest.raises(ValueError):
        entry.delete()

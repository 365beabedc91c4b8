"""Client disputes and their resolution by an admin."""

from decimal import Decimal
from unittest.mock import patch

import pytest

from apps.bookings.application import command_handlers as commands
from apps.bookings.domain.events import DisputeOpened
from apps.bookings.models import Booking
from apps.finances.models import Payment
from apps.moderation.models import AdminLog
from shared.domain.exceptions import InvalidState, NotFound, Unauthorized, ValidationError

pytestmark = pytest.mark.django_db


def test_dispute_then_revoke(make_booking, client_user, admin_user):
    booking = make_booking(status=Booking.Status.PENDING_COMPLETION, payment_status=Payment.Status.PAID)

    commands.dispute_completion(booking.pk, client_user.id, "Companion never showed up at the venue.")
    booking.refresh_from_db()
    assert booking.status == "disputed"
    assert booking.disputed_at is not None
    assert booking.dispute_reason == "Companion never showed up at the venue."

    commands.resolve_dispute(booking.pk, "revoke", admin_user.id, "Refund approved")

    booking.refresh_from_db()
    booking.payment.refresh_from_db()
    assert booking.status == "cancelled"
    assert booking.payment.status == "refunded"
    log = AdminLog.objects.get()
    assert log.action == "resolve_dispute_revoke"
    assert log.admin == admin_user
    assert log.target_id == str(booking.pk)
    assert log.details == {"resolution": "revoke", "notes": "Refund approved"}


def test_revoke_records_a_refund_even_before_payment_confirmation(make_booking, admin_user):
    booking = make_booking(status=Booking.Status.DISPUTED)

    commands.resolve_dispute(booking.pk, "revoke", admin_user.id)

    booking.payment.refresh_from_db()
    assert booking.payment.status == "refunded"


def test_resolve_complete_pays_out(make_booking, admin_user, companion):
    booking = make_booking(status=Booking.Status.DISPUTED)

    commands.resolve_dispute(booking.pk, "complete", admin_user.id)

    booking.refresh_from_db()
    booking.payment.refresh_from_db()
    companion.refresh_from_db()
    assert booking.status == "completed"
    assert booking.payment.status == "paid"
    assert booking.payment.settled_at is not None
    assert companion.total_earnings == Decimal("8000.00")
    assert AdminLog.objects.get().action == "resolve_dispute_complete"


def test_resolve_requires_a_disputed_booking(make_booking, admin_user):
    booking = make_booking(status=Booking.Status.COMPLETED, payment_status=Payment.Status.PAID)
    before = Payment.objects.filter(pk=booking.payment.pk).values().get()

    with pytest.raises(InvalidState) as excinfo:
        commands.resolve_dispute(booking.pk, "revoke", admin_user.id)

    assert excinfo.value.current == "completed"
    assert Payment.objects.filter(pk=booking.payment.pk).values().get() == before
    assert not AdminLog.objects.exists()


def test_resolve_requires_admin_role(make_booking, client_user):
    booking = make_booking(status=Booking.Status.DISPUTED)

    with pytest.raises(Unauthorized):
        commands.resolve_dispute(booking.pk, "complete", client_user.id)

    booking.refresh_from_db()
    assert booking.status == "disputed"


def test_resolve_unknown_booking(admin_user):
    with pytest.raises(NotFound):
        commands.resolve_dispute("00000000-0000-4000-8000-000000000000", "complete", admin_user.id)


def test_resolve_rejects_unknown_resolution_and_long_notes(make_booking, admin_user):
    booking = make_booking(status=Booking.Status.DISPUTED)

    with pytest.raises(ValidationError):
        commands.resolve_dispute(booking.pk, "refund_half", admin_user.id)
    with pytest.raises(ValidationError):
        commands.resolve_dispute(booking.pk, "complete", admin_user.id, "x" * 501)


def test_failing_audit_write_rolls_back_the_resolution(make_booking, admin_user, companion):
    booking = make_booking(status=Booking.Status.DISPUTED)

    with patch.object(AdminLog, "record", side_effect=RuntimeError("audit store unavailable")):
        with pytest.raises(RuntimeError):
            commands.resolve_dispute(booking.pk, "complete", admin_user.id)

    booking.refresh_from_db()
    booking.payment.refresh_from_db()
    companion.refresh_from_db()
    assert booking.status == "disputed"
    assert booking.payment.status == "pending"
    assert booking.payment.settled_at is None
    assert companion.total_bookings == 0


def test_dispute_alerts_admins_after_commit(make_booking, client_user, django_capture_on_commit_callbacks):
    booking = make_booking(status=Booking.Status.PENDING_COMPLETION)

    with patch("shared.application.message_bus.message_bus.publish_events") as publish:
        with django_capture_on_commit_callbacks(execute=True):
            commands.dispute_completion(booking.pk, client_user.id)

    (events,), _ = publish.call_args
    assert [type(e).__name__ for e in events] == ["BookingStateChanged", "DisputeOpened"]
    assert isinstance(events[1], DisputeOpened)
    assert events[1].booking_id == booking.pk

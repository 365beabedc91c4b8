"""Booking request, answer and completion through the command handlers."""

from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.utils import timezone

from apps.bookings.application import command_handlers as commands
from apps.bookings.application.command_handlers import CreateBookingCommand, settle_payout
from apps.bookings.domain.events import BookingStateChanged
from apps.bookings.models import Booking
from apps.companions.models import Companion
from apps.finances.models import Payment
from shared.domain.exceptions import (
    Expired,
    GatewayError,
    InvalidState,
    NotFound,
    Unauthorized,
    ValidationError,
)

pytestmark = pytest.mark.django_db


def _command(client_user, companion, **overrides):
    values = {
        "client_id": client_user.id,
        "companion_id": companion.id,
        "booking_date": timezone.now() + timedelta(days=2),
        "hours": 2,
        "meeting_location": "Lekki Phase 1, Lagos",
        "total_amount": Decimal("10000"),
    }
    values.update(overrides)
    return CreateBookingCommand(**values)


def test_booking_from_request_to_completion(client_user, companion, companion_user, paystack_checkout):
    result = commands.create_booking(_command(client_user, companion))

    booking = Booking.objects.get(pk=result.booking_id)
    payment = booking.payment
    assert booking.status == "pending"
    assert booking.total_amount == Decimal("10000.00")
    assert payment.status == "pending"
    assert (payment.platform_fee, payment.companion_earning) == (Decimal("2000.00"), Decimal("8000.00"))
    assert result.reference == payment.reference
    assert result.reference.startswith("fliq_")
    assert result.payment_url.endswith(result.reference)

    kwargs = paystack_checkout.call_args.kwargs
    assert kwargs["subaccount_code"] == "ACCT_companion"
    assert kwargs["transaction_charge"] == Decimal("2000.00")
    assert kwargs["metadata"]["booking_id"] == str(booking.pk)

    booking = commands.accept_booking(booking.pk, companion_user.id)
    assert booking.status == "accepted"

    booking = commands.request_completion(booking.pk, companion_user.id)
    booking.refresh_from_db()
    assert booking.status == "pending_completion"
    assert booking.completion_requested_at is not None

    commands.confirm_completion(booking.pk, client_user.id)
    booking.refresh_from_db()
    payment.refresh_from_db()
    companion.refresh_from_db()
    assert booking.status == "completed"
    assert payment.status == "paid"
    assert payment.settled_at is not None
    assert companion.total_bookings == 1
    assert companion.total_earnings == Decimal("8000.00")


def test_total_is_computed_when_not_supplied(client_user, companion, paystack_checkout):
    result = commands.create_booking(_command(client_user, companion, hours=3, total_amount=None))

    assert Booking.objects.get(pk=result.booking_id).total_amount == Decimal("15000.00")


def test_supplied_total_must_match_rate(client_user, companion, paystack_checkout):
    with pytest.raises(ValidationError) as excinfo:
        commands.create_booking(_command(client_user, companion, total_amount=Decimal("9000")))

    assert "total_amount" in excinfo.value.errors
    assert not Booking.objects.exists()
    paystack_checkout.assert_not_called()


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"hours": 0}, "hours"),
        ({"hours": 25}, "hours"),
        ({"meeting_location": " Ikj "}, "meeting_location"),
        ({"booking_date": datetime(2031, 1, 1, 12, 0)}, "booking_date"),
    ],
)
def test_invalid_terms_are_rejected_before_any_write(client_user, companion, paystack_checkout, overrides, field):
    with pytest.raises(ValidationError) as excinfo:
        commands.create_booking(_command(client_user, companion, **overrides))

    assert field in excinfo.value.errors
    assert not Booking.objects.exists()
    assert not Payment.objects.exists()


def test_booking_in_the_past_is_rejected(client_user, companion, paystack_checkout):
    with pytest.raises(ValidationError) as excinfo:
        commands.create_booking(_command(client_user, companion, booking_date=timezone.now() - timedelta(hours=1)))

    assert "booking_date" in excinfo.value.errors


def test_companion_cannot_book_themselves(companion, companion_user, paystack_checkout):
    with pytest.raises(ValidationError) as excinfo:
        commands.create_booking(_command(companion_user, companion))

    assert "companion_id" in excinfo.value.errors


def test_unavailable_or_unapproved_companion_is_not_bookable(client_user, companion, paystack_checkout):
    Companion.objects.filter(pk=companion.pk).update(moderation_status=Companion.ModerationStatus.PENDING)

    with pytest.raises(ValidationError):
        commands.create_booking(_command(client_user, companion))


def test_unknown_companion(client_user, companion, paystack_checkout):
    with pytest.raises(NotFound):
        commands.create_booking(_command(client_user, companion, companion_id="not-a-uuid"))


def test_gateway_failure_keeps_booking_pending_and_can_be_retried(client_user, companion):
    with patch("apps.finances.paystack.initialize_transaction", side_effect=GatewayError("Paystack timed out")):
        with pytest.raises(GatewayError) as excinfo:
            commands.create_booking(_command(client_user, companion))

    booking = Booking.objects.get()
    assert excinfo.value.extra["booking_id"] == str(booking.pk)
    assert booking.status == "pending"
    assert booking.payment.reference is None

    retry = commands.InitializePaymentHandler()
    with patch("apps.finances.paystack.initialize_transaction") as initialize:
        initialize.return_value.authorization_url = "https://checkout.paystack.test/retry"
        initialize.return_value.reference = "fliq_retry"
        result = retry.handle(commands.InitializePaymentCommand(booking.pk, client_user.id))

    assert result.payment_url == "https://checkout.paystack.test/retry"
    booking.payment.refresh_from_db()
    assert booking.payment.reference == "fliq_retry"


def test_initialize_payment_reuses_stored_checkout(make_booking, client_user):
    booking = make_booking()

    with patch("apps.finances.paystack.initialize_transaction") as initialize:
        result = commands.initialize_payment(booking.pk, client_user.id)

    initialize.assert_not_called()
    assert result.reference == booking.payment.reference
    assert result.payment_url == booking.payment.authorization_url


def test_initialize_payment_on_closed_booking(make_booking, client_user):
    booking = make_booking(status=Booking.Status.REJECTED)

    with pytest.raises(InvalidState):
        commands.initialize_payment(booking.pk, client_user.id)


def test_only_the_booked_companion_can_answer(make_booking, make_user):
    booking = make_booking()
    stranger = make_user("companion")

    with pytest.raises(Unauthorized):
        commands.accept_booking(booking.pk, stranger.id)
    with pytest.raises(Unauthorized):
        commands.reject_booking(booking.pk, stranger.id)

    booking.refresh_from_db()
    assert booking.status == "pending"


def test_only_the_client_can_confirm(make_booking, companion_user):
    booking = make_booking(status=Booking.Status.PENDING_COMPLETION)

    with pytest.raises(Unauthorized):
        commands.confirm_completion(booking.pk, companion_user.id)

    booking.refresh_from_db()
    assert booking.status == "pending_completion"


def test_not_found_comes_before_authorization(companion_user):
    with pytest.raises(NotFound):
        commands.accept_booking("5d7c8a3e-0000-4000-8000-000000000000", companion_user.id)


@pytest.mark.parametrize("status", ["completed", "cancelled", "rejected", "expired"])
def test_terminal_bookings_refuse_every_operation(make_booking, client_user, companion_user, admin_user, status):
    booking = make_booking(status=status)
    operations = [
        lambda: commands.accept_booking(booking.pk, companion_user.id),
        lambda: commands.reject_booking(booking.pk, companion_user.id),
        lambda: commands.request_completion(booking.pk, companion_user.id),
        lambda: commands.confirm_completion(booking.pk, client_user.id),
        lambda: commands.dispute_completion(booking.pk, client_user.id),
        lambda: commands.resolve_dispute(booking.pk, "complete", admin_user.id),
        lambda: commands.resolve_dispute(booking.pk, "revoke", admin_user.id),
    ]

    for operation in operations:
        with pytest.raises(InvalidState):
            operation()

    booking.refresh_from_db()
    assert booking.status == status


def test_accept_after_deadline_expires_the_request(make_booking, companion_user):
    deadline = timezone.now() + timedelta(minutes=15)
    booking = make_booking(request_expires_at=deadline)

    with patch("django.utils.timezone.now", return_value=deadline + timedelta(milliseconds=1)):
        with pytest.raises(Expired) as excinfo:
            commands.accept_booking(booking.pk, companion_user.id)

    assert excinfo.value.code == "expired"
    booking.refresh_from_db()
    assert booking.status == "expired"


def test_accept_just_before_deadline_succeeds(make_booking, companion_user):
    deadline = timezone.now() + timedelta(minutes=15)
    booking = make_booking(request_expires_at=deadline)

    with patch("django.utils.timezone.now", return_value=deadline - timedelta(milliseconds=1)):
        commands.accept_booking(booking.pk, companion_user.id)

    booking.refresh_from_db()
    assert booking.status == "accepted"


def test_accepting_an_expired_booking_again(make_booking, companion_user):
    booking = make_booking(status=Booking.Status.EXPIRED)

    with pytest.raises(Expired):
        commands.accept_booking(booking.pk, companion_user.id)


def test_reject_refunds_only_a_paid_payment(make_booking, companion_user):
    paid = make_booking(payment_status=Payment.Status.PAID)
    unpaid = make_booking()

    commands.reject_booking(paid.pk, companion_user.id)
    commands.reject_booking(unpaid.pk, companion_user.id)

    paid.payment.refresh_from_db()
    unpaid.payment.refresh_from_db()
    assert paid.payment.status == "refunded"
    assert paid.payment.refunded_at is not None
    assert unpaid.payment.status == "pending"


def test_active_booking_can_request_completion(make_booking, companion_user):
    booking = make_booking(status=Booking.Status.ACTIVE)

    commands.request_completion(booking.pk, companion_user.id)

    booking.refresh_from_db()
    assert booking.status == "pending_completion"


def test_dispute_reason_length_is_validated(make_booking, client_user):
    booking = make_booking(status=Booking.Status.PENDING_COMPLETION)

    with pytest.raises(ValidationError):
        commands.dispute_completion(booking.pk, client_user.id, "too short")

    booking.refresh_from_db()
    assert booking.status == "pending_completion"


def test_payout_is_marked_once(make_booking, client_user, companion):
    booking = make_booking(status=Booking.Status.PENDING_COMPLETION, payment_status=Payment.Status.PAID)

    commands.confirm_completion(booking.pk, client_user.id)
    booking.refresh_from_db()
    settle_payout(booking)

    companion.refresh_from_db()
    assert companion.total_bookings == 1
    assert companion.total_earnings == Decimal("8000.00")


def test_transition_events_are_published_after_commit(make_booking, companion_user, django_capture_on_commit_callbacks):
    booking = make_booking()

    with patch("shared.application.message_bus.message_bus.publish_events") as publish:
        with django_capture_on_commit_callbacks(execute=True):
            commands.accept_booking(booking.pk, companion_user.id)

    (events,), _ = publish.call_args
    assert len(events) == 1
    event = events[0]
    assert isinstance(event, BookingStateChanged)
    assert (event.old_status, event.new_status) == ("pending", "accepted")
    assert event.companion_user_id == companion_user.id


def test_failed_transition_publishes_nothing(make_booking, companion_user, django_capture_on_commit_callbacks):
    booking = make_booking(status=Booking.Status.COMPLETED)

    with patch("shared.application.message_bus.message_bus.publish_events") as publish:
        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(InvalidState):
                commands.reject_booking(booking.pk, companion_user.id)

    publish.assert_not_called()

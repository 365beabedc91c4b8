"""Domain events relayed into notifications after commit."""

import pytest
from django.core import mail
from django.urls import reverse
from rest_framework.test import APIClient

from apps.bookings.application import command_handlers as commands
from apps.bookings.models import Booking
from apps.notifications.models import Notification
from apps.notifications.services import status_notifications
from shared.domain.exceptions import InvalidState

pytestmark = pytest.mark.django_db


def test_status_messages_pick_recipients():
    assert [user for user, _, _ in status_notifications("expired", 1, 2)] == [1, 2]
    assert [user for user, _, _ in status_notifications("disputed", 1, 2)] == [2]
    assert status_notifications("pending", 1, 2) == []


def test_accept_notifies_the_client(make_booking, client_user, companion_user, django_capture_on_commit_callbacks):
    booking = make_booking()

    with django_capture_on_commit_callbacks(execute=True):
        commands.accept_booking(booking.pk, companion_user.id)

    notification = Notification.objects.get()
    assert notification.user == client_user
    assert notification.event_type == "booking_state_changed"
    assert notification.payload["new_status"] == "accepted"
    assert notification.payload["booking_id"] == str(booking.pk)


def test_nothing_is_sent_for_a_rolled_back_transition(make_booking, companion_user, django_capture_on_commit_callbacks):
    booking = make_booking(status=Booking.Status.COMPLETED)

    with django_capture_on_commit_callbacks(execute=True):
        with pytest.raises(InvalidState):
            commands.accept_booking(booking.pk, companion_user.id)

    assert not Notification.objects.exists()


def test_dispute_alerts_admins_by_app_and_email(make_booking, client_user, admin_user, django_capture_on_commit_callbacks):
    booking = make_booking(status=Booking.Status.PENDING_COMPLETION)

    with django_capture_on_commit_callbacks(execute=True):
        commands.dispute_completion(booking.pk, client_user.id, "The companion left after ten minutes.")

    alert = Notification.objects.get(user=admin_user)
    assert alert.event_type == "dispute_opened"
    assert "ten minutes" in alert.message
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ["admin@fliq.test"]


def test_notification_inbox(client_user):
    Notification.objects.create(user=client_user, title="A", message="first")
    Notification.objects.create(user=client_user, title="B", message="second")
    api = APIClient()
    api.force_authenticate(client_user)

    assert len(api.get(reverse("notification-list")).data) == 2
    response = api.post(reverse("notification-mark-all-read"))
    assert response.data == {"updated": 2}
    assert api.get(reverse("notification-list"), {"unread": "1"}).data == []

"""
Realtime relay

Subscribers of booking domain events. They run after the booking
transaction has committed and only enqueue delivery, so nothing here
can affect booking state.
"""

from __future__ import annotations

import logging

from apps.bookings.domain.events import BookingStateChanged, DisputeOpened, PaymentConfirmed
from shared.application.message_bus import message_bus

from .services import status_notifications
from .tasks import alert_admins, deliver_notification

logger = logging.getLogger(__name__)


@message_bus.subscribe(BookingStateChanged)
def relay_booking_state_changed(event: BookingStateChanged) -> None:
    payload = event.to_dict()
    for user_id, title, message in status_notifications(
        event.new_status, event.client_id, event.companion_user_id
    ):
        deliver_notification.delay(user_id, title, message, "booking_state_changed", payload)


@message_bus.subscribe(DisputeOpened)
def relay_dispute_opened(event: DisputeOpened) -> None:
    message = f"Booking {event.booking_id} was disputed by the client."
    if event.reason:
        message = f"{message} Reason: {event.reason}"
    alert_admins.delay(
        "New dispute awaiting resolution",
        message,
        "dispute_opened",
        {"booking_id": str(event.booking_id), "reason": event.reason},
    )


@message_bus.subscribe(PaymentConfirmed)
def relay_payment_confirmed(event: PaymentConfirmed) -> None:
    deliver_notification.delay(
        event.companion_user_id,
        "Booking paid",
        f"Payment of {event.amount} for booking {event.booking_id} was confirmed.",
        "payment_confirmed",
        {"booking_id": str(event.booking_id), "reference": event.reference, "amount": str(event.amount)},
    )

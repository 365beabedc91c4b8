"""
Booking Repository

Loads bookings and applies status transitions as conditional writes:
``UPDATE ... WHERE id = ? AND status = <status we read>``. If another
writer changed the row in between, nothing is written and
``ConflictError`` is raised.
"""

from datetime import datetime
from typing import List, Optional
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet

from apps.bookings.domain.events import BookingStateChanged
from apps.bookings.domain.state_machine import BookingAction, Transition, resolve
from apps.bookings.models import Booking
from shared.domain.exceptions import ConflictError, NotFound

logger = logging.getLogger(__name__)


class DjangoBookingRepository:
    """Booking persistence backed by the Django ORM"""

    def _queryset(self) -> QuerySet:
        return Booking.objects.select_related("client", "companion", "companion__user")

    def get_by_id(self, booking_id) -> Booking:
        try:
            return self._queryset().get(pk=booking_id)
        except (Booking.DoesNotExist, DjangoValidationError, ValueError, TypeError):
            raise NotFound(f"Booking {booking_id} not found.")

    def current_status(self, booking_id) -> Optional[str]:
        return Booking.objects.filter(pk=booking_id).values_list("status", flat=True).first()

    def transition(
        self,
        booking: Booking,
        action: BookingAction,
        now: datetime,
        **fields,
    ) -> Transition:
        """
        Move ``booking`` along ``action`` and record a BookingStateChanged event.

        Raises InvalidState if the action is illegal from the status held
        in memory, ConflictError if the stored status no longer matches it.
        """
        transition, target = resolve(booking.status, action)
        old_status = booking.status

        values = dict(fields, status=target.value, updated_at=now)
        updated = Booking.objects.filter(pk=booking.pk, status=old_status).update(**values)
        if not updated:
            current = self.current_status(booking.pk) or "unknown"
            logger.warning(
                f"Conflict on booking {booking.pk}: expected '{old_status}', found '{current}' "
                f"while applying '{transition.action.value}'"
            )
            raise ConflictError(current, transition.action.value)

        for name, value in values.items():
            setattr(booking, name, value)

        booking.add_event(BookingStateChanged(
            aggregate_id=booking.pk,
            booking_id=booking.pk,
            old_status=old_status,
            new_status=target.value,
            client_id=booking.client_id,
            companion_user_id=booking.companion.user_id,
            action=transition.action.value,
        ))
        logger.info(f"Booking {booking.pk}: {old_status} -> {target.value} ({transition.action.value})")
        return transition

    def overdue_requests(self, now: datetime) -> List[Booking]:
        return list(
            self._queryset().filter(status=Booking.Status.PENDING, request_expires_at__lte=now)
        )

    def overdue_completions(self, completion_cutoff: datetime) -> List[Booking]:
        return list(
            self._queryset().filter(
                status=Booking.Status.PENDING_COMPLETION,
                completion_requested_at__lte=completion_cutoff,
            )
        )

    def live_requests_for_companion(self, companion_user_id, now: datetime) -> QuerySet:
        return self._queryset().filter(
            companion__user_id=companion_user_id,
            status=Booking.Status.PENDING,
            request_expires_at__gt=now,
        ).order_by("request_expires_at")

    def awaiting_confirmation_for_client(self, client_id, completion_cutoff: datetime) -> QuerySet:
        """Bookings past ``completion_cutoff`` are left to the auto-completion sweep."""
        return self._queryset().filter(
            client_id=client_id,
            status=Booking.Status.PENDING_COMPLETION,
            completion_requested_at__gt=completion_cutoff,
        ).order_by("completion_requested_at")

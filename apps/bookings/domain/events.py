"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits; subscribers
(the notification relay) never see state that was rolled back.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict
from uuid import UUID

from shared.domain.base import DomainEvent


# ===== Booking Events =====

@dataclass
class BookingStateChanged(DomainEvent):
    """
    Event: A booking moved from one status to another

    Emitted for every committed transition, whether triggered by a
    party, an admin or a sweep.

    Triggers:
    - Notify the client and the companion
    - Push the new status to connected dashboards
    """
    booking_id: UUID
    old_status: str
    new_status: str
    client_id: int
    companion_user_id: int
    action: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            booking_id=str(self.booking_id),
            old_status=self.old_status,
            new_status=self.new_status,
            client_id=self.client_id,
            companion_user_id=self.companion_user_id,
            action=self.action,
        )
        return data


@dataclass
class DisputeOpened(DomainEvent):
    """
    Event: Client disputed a completion request

    Triggers:
    - Alert admins that a dispute awaits resolution
    """
    booking_id: UUID
    client_id: int
    companion_user_id: int
    reason: str = ""


# ===== Payment Events =====

@dataclass
class PaymentConfirmed(DomainEvent):
    """
    Event: Gateway verification confirmed the charge (Payment -> paid)

    Booking status is not affected.

    Triggers:
    - Tell the companion the request is paid for
    """
    booking_id: UUID
    reference: str
    amount: Decimal
    client_id: int
    companion_user_id: int

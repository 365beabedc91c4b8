"""Payment processing services: fee split, checkout initialisation and verification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from django.db import transaction  # type: ignore

from apps.bookings.domain.events import PaymentConfirmed
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import GatewayError, InvalidState, NotFound, ValidationError

from . import paystack
from .models import Payment, PaymentTransaction

logger = logging.getLogger(__name__)

WHOLE_UNIT = Decimal("1")
CENTS = Decimal("0.01")

# Booking statuses in which a received charge is owed back to the client.
CLOSED_BOOKING_STATUSES = frozenset({"rejected", "expired", "cancelled"})

# PaymentTransaction status for a verified charge that disagrees with the stored amount.
AMOUNT_MISMATCH = "amount_mismatch"


@dataclass(frozen=True)
class SplitAmounts:
    total_amount: Decimal
    platform_fee: Decimal
    companion_earning: Decimal


def _to_decimal(value: Any, field: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number.", errors={field: ["Must be a number."]})
    if not result.is_finite():
        raise ValidationError(f"{field} must be finite.", errors={field: ["Must be finite."]})
    return result


def calculate_split_amounts(total_amount, platform_percentage=Decimal("20")) -> SplitAmounts:
    """
    Split ``total_amount`` between the platform and the companion.

    The platform fee is rounded half-up to whole currency units and the
    companion receives the remainder, so the two parts always add up to
    the total exactly: 9999 at 33% gives a fee of 3300 and an earning
    of 6699.
    """
    total = _to_decimal(total_amount, "total_amount")
    percentage = _to_decimal(platform_percentage, "platform_percentage")
    if total < 0:
        raise ValidationError("Total amount cannot be negative.", errors={"total_amount": ["Must be >= 0."]})
    if percentage < 0 or percentage > 100:
        raise ValidationError(
            "Platform percentage must be between 0 and 100.",
            errors={"platform_percentage": ["Must be between 0 and 100."]},
        )

    total = total.quantize(CENTS, rounding=ROUND_HALF_UP)
    platform_fee = (total * percentage / Decimal(100)).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)
    # Rounding a fractional total up must not push the fee past the total
    platform_fee = min(platform_fee, total)
    return SplitAmounts(
        total_amount=total,
        platform_fee=platform_fee,
        companion_earning=total - platform_fee,
    )


def start_checkout(payment: Payment) -> Payment:
    """
    Open a hosted checkout for a stored, unpaid payment.

    Must be called outside a transaction holding the booking row. On
    ``GatewayError`` nothing is written and the caller may retry later.
    """
    booking = payment.booking
    companion = booking.companion
    reference = paystack.generate_reference()
    metadata = {
        "booking_id": str(booking.pk),
        "client_id": booking.client_id,
        "companion_id": str(companion.pk),
        "platform_fee": str(payment.platform_fee),
        "companion_earning": str(payment.companion_earning),
    }

    result = paystack.initialize_transaction(
        booking.client.email,
        payment.amount,
        reference=reference,
        metadata=metadata,
        subaccount_code=payment.subaccount_code,
        transaction_charge=payment.platform_fee if payment.subaccount_code else None,
        currency=payment.currency,
    )

    with transaction.atomic():
        updated = Payment.objects.filter(pk=payment.pk, reference__isnull=True).update(
            reference=result.reference,
            authorization_url=result.authorization_url,
        )
        if not updated:
            # A concurrent retry stored its own checkout first; keep that one.
            payment.refresh_from_db(fields=["reference", "authorization_url", "status"])
            logger.warning(f"Checkout for payment {payment.pk} already initialised, discarding {reference}")
            return payment
        payment.reference = result.reference
        payment.authorization_url = result.authorization_url
        PaymentTransaction.log(
            payment,
            PaymentTransaction.Event.INITIALIZE,
            {"reference": result.reference, "split": bool(payment.subaccount_code), "metadata": metadata},
        )

    logger.info(f"Checkout initialised for booking {booking.pk}: reference={payment.reference}")
    return payment


def ensure_checkout(payment: Payment) -> Payment:
    """Return the stored checkout if there is one, otherwise initialise it."""
    if payment.status != Payment.Status.PENDING:
        raise InvalidState(
            payment.status,
            "initialize_payment",
            message=f"Payment is already {payment.status}.",
        )
    if payment.reference and payment.authorization_url:
        return payment
    return start_checkout(payment)


def apply_successful_charge(payment: Payment, charged_amount: Decimal) -> Payment:
    """
    Record a gateway-confirmed charge against ``payment``.

    Never changes the booking status. If the booking was closed before
    the money arrived the payment is marked as owed back instead of paid;
    the closed-booking check is part of the paid write, so a reject that
    commits first always wins. Repeated calls are no-ops.

    A charge for the wrong amount leaves the payment pending, so a later
    correct verification can still apply.
    """
    payment.refresh_from_db()
    if payment.status != Payment.Status.PENDING:
        logger.info(f"Payment {payment.reference} already {payment.status}, verification ignored")
        return payment

    if Decimal(charged_amount).quantize(CENTS) != payment.amount:
        PaymentTransaction.log(
            payment,
            PaymentTransaction.Event.VERIFY,
            {"charged": str(charged_amount), "expected": str(payment.amount)},
            AMOUNT_MISMATCH,
        )
        logger.error(
            f"Payment {payment.reference} amount mismatch: charged {charged_amount}, expected {payment.amount}"
        )
        raise GatewayError("Charged amount does not match the booking total.")

    booking = payment.booking

    with DjangoUnitOfWork() as uow:
        if payment.mark_paid(unless_booking_in=CLOSED_BOOKING_STATUSES):
            uow.add_event(
                PaymentConfirmed(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    reference=payment.reference,
                    amount=payment.amount,
                    client_id=booking.client_id,
                    companion_user_id=booking.companion.user_id,
                )
            )
            logger.info(f"Payment {payment.reference} confirmed for booking {booking.pk}")
            return payment

        booking.refresh_from_db(fields=["status"])
        if booking.status in CLOSED_BOOKING_STATUSES and payment.mark_refunded(
            allowed_from=(Payment.Status.PENDING,),
            reason=f"booking {booking.status} before payment arrived",
        ):
            logger.info(f"Payment {payment.reference} received for {booking.status} booking, refund owed")
    return payment


def verify_payment_callback(reference: str) -> dict[str, Any]:
    """
    Ask the gateway for the outcome of ``reference`` and apply it.

    Returns ``{"status", "amount", "metadata"}`` as reported by the gateway.
    """
    payment = Payment.objects.select_related("booking", "booking__companion").filter(reference=reference).first()
    if payment is None:
        raise NotFound(f"No payment with reference '{reference}'.")

    verification = paystack.verify_transaction(reference)
    PaymentTransaction.log(payment, PaymentTransaction.Event.VERIFY, verification.to_dict(), verification.status)

    if verification.succeeded:
        apply_successful_charge(payment, verification.amount)
    return verification.to_dict()

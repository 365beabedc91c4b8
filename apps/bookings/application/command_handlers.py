"""
Booking Command Handlers

These are the use cases of the booking lifecycle and settlement engine.
They validate and authorize before writing, then apply one state-machine
transition per unit of work.

Commands:
- CreateBookingCommand: Client requests a companion (booking + payment split)
- AcceptBookingCommand / RejectBookingCommand: Companion answers a request
- RequestCompletionCommand: Companion reports the booking as delivered
- ConfirmCompletionCommand / DisputeCompletionCommand: Client answers
- ResolveDisputeCommand: Admin settles a dispute
- InitializePaymentCommand: Client (re)opens the hosted checkout

Sweeps:
- ExpirySweep: expire pending requests past their deadline
- AutoCompletionSweep: complete bookings the client never answered
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple
from uuid import UUID
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from apps.bookings.domain.events import DisputeOpened
from apps.bookings.domain.state_machine import Actor, BookingAction, BookingStatus, Transition
from apps.bookings.models import Booking, completion_window, request_ttl
from apps.bookings.repository import DjangoBookingRepository
from apps.companions.models import Companion
from apps.finances.models import Payment
from apps.finances.services import calculate_split_amounts, ensure_checkout, start_checkout
from apps.moderation.models import AdminLog
from apps.moderation.services import get_platform_fee_percentage
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    ConflictError,
    Expired,
    GatewayError,
    InvalidState,
    NotFound,
    Unauthorized,
    ValidationError,
)
from shared.domain.value_objects import Money

logger = logging.getLogger(__name__)

MIN_HOURS = 1
MAX_HOURS = 24
MIN_LOCATION_LENGTH = 5
DISPUTE_REASON_LENGTH = (10, 500)
MAX_RESOLUTION_NOTES = 500

RESOLUTIONS: Dict[str, Tuple[BookingAction, str]] = {
    "complete": (BookingAction.RESOLVE_COMPLETE, AdminLog.Action.RESOLVE_DISPUTE_COMPLETE),
    "revoke": (BookingAction.RESOLVE_REVOKE, AdminLog.Action.RESOLVE_DISPUTE_REVOKE),
}

# Payment statuses a refund obligation may be recorded from, per action.
# Rejected and expired requests only owe money back if it was actually paid.
REFUNDABLE_FROM = {
    BookingAction.RESOLVE_REVOKE: (Payment.Status.PENDING, Payment.Status.PAID, Payment.Status.FAILED),
}
DEFAULT_REFUNDABLE_FROM = (Payment.Status.PAID,)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to request a companion

    ``total_amount`` is optional: the engine always computes
    ``hours * hourly_rate`` itself and only uses a supplied value to
    reject requests priced against a stale rate.
    """
    client_id: int
    companion_id: UUID
    booking_date: datetime
    hours: int
    meeting_location: str
    special_requests: str = ''
    total_amount: Optional[Decimal] = None


@dataclass
class AcceptBookingCommand:
    booking_id: UUID
    companion_user_id: int


@dataclass
class RejectBookingCommand:
    booking_id: UUID
    companion_user_id: int


@dataclass
class RequestCompletionCommand:
    booking_id: UUID
    companion_user_id: int


@dataclass
class ConfirmCompletionCommand:
    booking_id: UUID
    client_id: int


@dataclass
class DisputeCompletionCommand:
    booking_id: UUID
    client_id: int
    reason: str = ''


@dataclass
class ResolveDisputeCommand:
    booking_id: UUID
    resolution: str
    admin_id: int
    notes: str = ''


@dataclass
class InitializePaymentCommand:
    booking_id: UUID
    client_id: int


# ===== Results =====

@dataclass(frozen=True)
class BookingCreated:
    """Outcome of a booking request: where the client goes to pay"""
    booking_id: UUID
    payment_url: str
    reference: str


# ===== Settlement helpers =====

def _payment_of(booking: Booking) -> Optional[Payment]:
    return Payment.objects.filter(booking_id=booking.pk).first()


def settle_payout(booking: Booking):
    """
    Payout marking for a completed booking

    Payment becomes ``paid`` if it is not already, ``settled_at`` is set
    and the companion's counters are bumped. ``settled_at`` is written
    with a guarded update, so the counters move once per booking.
    """
    payment = _payment_of(booking)
    if payment is None:
        logger.error(f"Booking {booking.pk} completed without a payment record")
        return
    payment.mark_paid(allowed_from=(Payment.Status.PENDING, Payment.Status.FAILED))
    if payment.mark_settled():
        booking.companion.record_completed_booking(payment.companion_earning)
        logger.info(
            f"Payout marked for booking {booking.pk}: "
            f"companion {booking.companion_id} earns {payment.companion_earning}"
        )


def record_refund_obligation(booking: Booking, action: BookingAction):
    payment = _payment_of(booking)
    if payment is None:
        return
    allowed_from = REFUNDABLE_FROM.get(action, DEFAULT_REFUNDABLE_FROM)
    if payment.mark_refunded(allowed_from=allowed_from, reason=f"booking {booking.status}"):
        logger.info(f"Refund owed on payment {payment.reference} for booking {booking.pk} ({action.value})")


# ===== Command Handlers =====

class BookingHandler:
    """Shared plumbing: repository access, authorization and transition side effects"""

    def __init__(self, booking_repo=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    @staticmethod
    def now() -> datetime:
        return timezone.now()

    def authorize(self, booking: Booking, actor: Actor, user_id):
        if actor == Actor.COMPANION and booking.companion.user_id != user_id:
            raise Unauthorized("Only the booked companion can do this.")
        if actor == Actor.CLIENT and booking.client_id != user_id:
            raise Unauthorized("Only the client who made the booking can do this.")

    def apply(self, uow: DjangoUnitOfWork, booking: Booking, action: BookingAction, now: datetime, **fields) -> Transition:
        """Guarded status write plus the side effects the transition carries"""
        transition = self.booking_repo.transition(booking, action, now, **fields)
        if transition.settles_payout:
            settle_payout(booking)
        if transition.refunds_payment:
            record_refund_obligation(booking, action)
        uow.collect_events(booking)
        return transition


class CreateBookingHandler(BookingHandler):
    """
    Handler for CreateBooking command

    1. Validate terms and companion bookability (no writes yet)
    2. Compute the total server-side and fix the fee split
    3. Persist Booking (pending) and Payment (pending) atomically
    4. Open the hosted checkout, outside the transaction

    If step 4 fails the booking stays pending without a reference and
    the client retries through InitializePaymentHandler.
    """

    def handle(self, command: CreateBookingCommand) -> BookingCreated:
        client = self._get_client(command.client_id)
        companion = self._get_companion(command.companion_id)
        now = self.now()
        self._validate_terms(command, companion, client, now)

        total = (Money(companion.hourly_rate) * int(command.hours)).quantized()
        self._check_client_total(command.total_amount, total.amount)

        percentage = get_platform_fee_percentage()
        split = calculate_split_amounts(total.amount, percentage)

        with DjangoUnitOfWork():
            booking = Booking.objects.create(
                client=client,
                companion=companion,
                booking_date=command.booking_date,
                hours=command.hours,
                meeting_location=command.meeting_location.strip(),
                special_requests=(command.special_requests or '').strip(),
                total_amount=split.total_amount,
                status=Booking.Status.PENDING,
                request_expires_at=now + request_ttl(),
            )
            payment = Payment.objects.create(
                booking=booking,
                amount=split.total_amount,
                platform_fee=split.platform_fee,
                companion_earning=split.companion_earning,
                platform_percentage=percentage,
                subaccount_code=companion.paystack_subaccount_code,
            )

        logger.info(
            f"Booking {booking.pk} requested by client {client.pk} for companion {companion.pk}: "
            f"{split.total_amount} (fee {split.platform_fee}, earning {split.companion_earning})"
        )

        try:
            payment = start_checkout(payment)
        except GatewayError as exc:
            exc.extra["booking_id"] = str(booking.pk)
            logger.error(f"Checkout for booking {booking.pk} failed, booking kept pending: {exc.message}")
            raise

        return BookingCreated(booking_id=booking.pk, payment_url=payment.authorization_url, reference=payment.reference)

    def _get_client(self, client_id):
        User = get_user_model()
        try:
            return User.objects.get(pk=client_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFound("Client not found.")

    def _get_companion(self, companion_id) -> Companion:
        try:
            return Companion.objects.select_related("user").get(pk=companion_id)
        except (Companion.DoesNotExist, DjangoValidationError, ValueError, TypeError):
            raise NotFound("Companion not found.")

    def _validate_terms(self, command: CreateBookingCommand, companion: Companion, client, now: datetime):
        errors: Dict[str, List[str]] = {}

        if isinstance(command.hours, bool) or not isinstance(command.hours, int):
            errors['hours'] = ["Must be a whole number of hours."]
        elif not MIN_HOURS <= command.hours <= MAX_HOURS:
            errors['hours'] = [f"Must be between {MIN_HOURS} and {MAX_HOURS}."]

        if len((command.meeting_location or '').strip()) < MIN_LOCATION_LENGTH:
            errors['meeting_location'] = [f"Must be at least {MIN_LOCATION_LENGTH} characters."]

        if not isinstance(command.booking_date, datetime):
            errors['booking_date'] = ["Must be a date and time."]
        elif timezone.is_naive(command.booking_date):
            errors['booking_date'] = ["Must include a timezone."]
        elif command.booking_date < now:
            errors['booking_date'] = ["Cannot be in the past."]

        if companion.user_id == client.pk:
            errors['companion_id'] = ["You cannot book yourself."]
        elif not companion.is_bookable:
            errors['companion_id'] = ["Companion is not available for booking."]

        if errors:
            raise ValidationError("Booking request is invalid.", errors=errors)

    def _check_client_total(self, supplied, expected: Decimal):
        if supplied is None or supplied == '':
            return
        try:
            supplied_amount = Decimal(str(supplied))
        except (InvalidOperation, ValueError):
            raise ValidationError("Total amount must be a number.", errors={'total_amount': ["Must be a number."]})
        if not supplied_amount.is_finite() or supplied_amount != expected:
            raise ValidationError(
                "Total amount does not match the companion's rate.",
                errors={'total_amount': [f"Expected {expected}."]},
            )


class AcceptBookingHandler(BookingHandler):
    """
    Handler for AcceptBooking command

    A request past its deadline is expired on the spot: the ``expired``
    status is committed in its own transaction and then ``Expired`` is
    raised, so the failure is observable in storage.
    """

    def handle(self, command: AcceptBookingCommand) -> Booking:
        booking = self.booking_repo.get_by_id(command.booking_id)
        self.authorize(booking, Actor.COMPANION, command.companion_user_id)
        now = self.now()

        if booking.status == Booking.Status.EXPIRED:
            raise Expired()
        if booking.is_request_overdue(now):
            self._expire_lazily(booking, now)
            raise Expired()

        with DjangoUnitOfWork() as uow:
            self.apply(uow, booking, BookingAction.ACCEPT, now)
        return booking

    def _expire_lazily(self, booking: Booking, now: datetime):
        try:
            with DjangoUnitOfWork() as uow:
                self.apply(uow, booking, BookingAction.EXPIRE, now)
        except ConflictError as exc:
            if exc.current != BookingStatus.EXPIRED.value:
                raise
        logger.info(f"Accept on booking {booking.pk} arrived after {booking.request_expires_at}, expired")


class RejectBookingHandler(BookingHandler):
    def handle(self, command: RejectBookingCommand) -> Booking:
        booking = self.booking_repo.get_by_id(command.booking_id)
        self.authorize(booking, Actor.COMPANION, command.companion_user_id)
        with DjangoUnitOfWork() as uow:
            self.apply(uow, booking, BookingAction.REJECT, self.now())
        return booking


class RequestCompletionHandler(BookingHandler):
    """Companion marks the booking delivered; starts the client's 48h window"""

    def handle(self, command: RequestCompletionCommand) -> Booking:
        booking = self.booking_repo.get_by_id(command.booking_id)
        self.authorize(booking, Actor.COMPANION, command.companion_user_id)
        now = self.now()
        with DjangoUnitOfWork() as uow:
            self.apply(uow, booking, BookingAction.REQUEST_COMPLETION, now, completion_requested_at=now)
        return booking


class ConfirmCompletionHandler(BookingHandler):
    def handle(self, command: ConfirmCompletionCommand) -> Booking:
        booking = self.booking_repo.get_by_id(command.booking_id)
        self.authorize(booking, Actor.CLIENT, command.client_id)
        with DjangoUnitOfWork() as uow:
            self.apply(uow, booking, BookingAction.CONFIRM_COMPLETION, self.now())
        return booking


class DisputeCompletionHandler(BookingHandler):
    def handle(self, command: DisputeCompletionCommand) -> Booking:
        reason = (command.reason or '').strip()
        min_length, max_length = DISPUTE_REASON_LENGTH
        if reason and not min_length <= len(reason) <= max_length:
            raise ValidationError(
                "Dispute reason has an invalid length.",
                errors={'reason': [f"Must be between {min_length} and {max_length} characters."]},
            )

        booking = self.booking_repo.get_by_id(command.booking_id)
        self.authorize(booking, Actor.CLIENT, command.client_id)
        now = self.now()
        with DjangoUnitOfWork() as uow:
            self.apply(uow, booking, BookingAction.DISPUTE, now, disputed_at=now, dispute_reason=reason)
            booking.add_event(DisputeOpened(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                client_id=booking.client_id,
                companion_user_id=booking.companion.user_id,
                reason=reason,
            ))
            uow.collect_events(booking)
        return booking


class ResolveDisputeHandler(BookingHandler):
    """
    Handler for ResolveDispute command

    The status write, the payment outcome and the AdminLog entry share
    one transaction: if the audit write fails nothing is kept.
    """

    def handle(self, command: ResolveDisputeCommand) -> Booking:
        if command.resolution not in RESOLUTIONS:
            raise ValidationError(
                "Unknown resolution.",
                errors={'resolution': [f"Must be one of: {', '.join(RESOLUTIONS)}."]},
            )
        notes = (command.notes or '').strip()
        if len(notes) > MAX_RESOLUTION_NOTES:
            raise ValidationError(
                "Resolution notes are too long.",
                errors={'notes': [f"At most {MAX_RESOLUTION_NOTES} characters."]},
            )

        booking = self.booking_repo.get_by_id(command.booking_id)
        admin = self._get_admin(command.admin_id)
        action, log_action = RESOLUTIONS[command.resolution]

        with DjangoUnitOfWork() as uow:
            self.apply(uow, booking, action, self.now())
            AdminLog.record(
                admin,
                log_action,
                booking,
                target_type='booking',
                details={'resolution': command.resolution, 'notes': notes},
            )

        logger.info(f"Dispute on booking {booking.pk} resolved '{command.resolution}' by admin {admin.pk}")
        return booking

    def _get_admin(self, admin_id):
        User = get_user_model()
        admin = User.objects.filter(pk=admin_id).first() if admin_id is not None else None
        if admin is None or not admin.is_admin():
            raise Unauthorized("Admin role required.")
        return admin


class InitializePaymentHandler(BookingHandler):
    """
    Return the hosted checkout for a booking, opening it if the first
    attempt at creation time failed
    """

    PAYABLE_STATUSES = (Booking.Status.PENDING, Booking.Status.ACCEPTED)

    def handle(self, command: InitializePaymentCommand) -> BookingCreated:
        booking = self.booking_repo.get_by_id(command.booking_id)
        self.authorize(booking, Actor.CLIENT, command.client_id)
        if booking.status not in self.PAYABLE_STATUSES:
            raise InvalidState(booking.status, 'initialize_payment')

        payment = _payment_of(booking)
        if payment is None:
            raise NotFound("Payment information not found.")
        payment = ensure_checkout(payment)
        return BookingCreated(booking_id=booking.pk, payment_url=payment.authorization_url, reference=payment.reference)


# ===== Sweeps =====

class ExpirySweep(BookingHandler):
    """Expire every pending request whose deadline has passed"""

    def run(self, now: Optional[datetime] = None) -> int:
        now = now or self.now()
        expired = 0
        for booking in self.booking_repo.overdue_requests(now):
            try:
                with DjangoUnitOfWork() as uow:
                    self.apply(uow, booking, BookingAction.EXPIRE, now)
                expired += 1
            except InvalidState as exc:
                # Accepted, rejected or expired by someone else since the query
                logger.debug(f"Expiry sweep skipped booking {booking.pk}: {exc.message}")
        if expired:
            logger.info(f"Expiry sweep expired {expired} booking request(s)")
        return expired


class AutoCompletionSweep(BookingHandler):
    """Complete bookings whose client did not answer within the completion window"""

    def run(self, now: Optional[datetime] = None) -> int:
        now = now or self.now()
        cutoff = now - completion_window()
        completed = 0
        for booking in self.booking_repo.overdue_completions(cutoff):
            try:
                with DjangoUnitOfWork() as uow:
                    self.apply(uow, booking, BookingAction.AUTO_COMPLETE, now)
                completed += 1
            except InvalidState as exc:
                logger.debug(f"Auto-completion skipped booking {booking.pk}: {exc.message}")
        if completed:
            logger.info(f"Auto-completion sweep completed {completed} booking(s)")
        return completed


# ===== Entry points =====

def create_booking(command: CreateBookingCommand) -> BookingCreated:
    return CreateBookingHandler().handle(command)


def accept_booking(booking_id, companion_user_id) -> Booking:
    return AcceptBookingHandler().handle(AcceptBookingCommand(booking_id, companion_user_id))


def reject_booking(booking_id, companion_user_id) -> Booking:
    return RejectBookingHandler().handle(RejectBookingCommand(booking_id, companion_user_id))


def request_completion(booking_id, companion_user_id) -> Booking:
    return RequestCompletionHandler().handle(RequestCompletionCommand(booking_id, companion_user_id))


def confirm_completion(booking_id, client_id) -> Booking:
    return ConfirmCompletionHandler().handle(ConfirmCompletionCommand(booking_id, client_id))


def dispute_completion(booking_id, client_id, reason: str = '') -> Booking:
    return DisputeCompletionHandler().handle(DisputeCompletionCommand(booking_id, client_id, reason))


def resolve_dispute(booking_id, resolution: str, admin_id, notes: str = '') -> Booking:
    return ResolveDisputeHandler().handle(ResolveDisputeCommand(booking_id, resolution, admin_id, notes))


def initialize_payment(booking_id, client_id) -> BookingCreated:
    return InitializePaymentHandler().handle(InitializePaymentCommand(booking_id, client_id))


def run_expiry_sweep(now: Optional[datetime] = None) -> int:
    return ExpirySweep().run(now)


def run_auto_completion_sweep(now: Optional[datetime] = None) -> int:
    return AutoCompletionSweep().run(now)

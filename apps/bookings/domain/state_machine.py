"""
Booking State Machine

The only legal status changes of a booking, expressed as data. Every
status write in the application layer goes through ``resolve`` so a
transition that is not listed here cannot happen.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Tuple

from shared.domain.exceptions import InvalidState


class BookingStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    ACTIVE = "active"
    PENDING_COMPLETION = "pending_completion"
    COMPLETED = "completed"
    DISPUTED = "disputed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    EXPIRED = "expired"


class BookingAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    EXPIRE = "expire"
    REQUEST_COMPLETION = "request_completion"
    CONFIRM_COMPLETION = "confirm_completion"
    DISPUTE = "dispute"
    AUTO_COMPLETE = "auto_complete"
    RESOLVE_COMPLETE = "resolve_complete"
    RESOLVE_REVOKE = "resolve_revoke"


class Actor(str, Enum):
    """Who is allowed to trigger an action."""

    CLIENT = "client"
    COMPANION = "companion"
    ADMIN = "admin"
    SYSTEM = "system"


@dataclass(frozen=True)
class Transition:
    action: BookingAction
    sources: FrozenSet[BookingStatus]
    target: BookingStatus
    actor: Actor
    settles_payout: bool = False
    refunds_payment: bool = False


S = BookingStatus

TRANSITIONS: Dict[BookingAction, Transition] = {
    t.action: t
    for t in (
        Transition(BookingAction.ACCEPT, frozenset({S.PENDING}), S.ACCEPTED, Actor.COMPANION),
        Transition(BookingAction.REJECT, frozenset({S.PENDING}), S.REJECTED, Actor.COMPANION, refunds_payment=True),
        Transition(BookingAction.EXPIRE, frozenset({S.PENDING}), S.EXPIRED, Actor.SYSTEM, refunds_payment=True),
        Transition(
            BookingAction.REQUEST_COMPLETION,
            frozenset({S.ACCEPTED, S.ACTIVE}),
            S.PENDING_COMPLETION,
            Actor.COMPANION,
        ),
        Transition(
            BookingAction.CONFIRM_COMPLETION,
            frozenset({S.PENDING_COMPLETION}),
            S.COMPLETED,
            Actor.CLIENT,
            settles_payout=True,
        ),
        Transition(BookingAction.DISPUTE, frozenset({S.PENDING_COMPLETION}), S.DISPUTED, Actor.CLIENT),
        Transition(
            BookingAction.AUTO_COMPLETE,
            frozenset({S.PENDING_COMPLETION}),
            S.COMPLETED,
            Actor.SYSTEM,
            settles_payout=True,
        ),
        Transition(
            BookingAction.RESOLVE_COMPLETE,
            frozenset({S.DISPUTED}),
            S.COMPLETED,
            Actor.ADMIN,
            settles_payout=True,
        ),
        Transition(
            BookingAction.RESOLVE_REVOKE,
            frozenset({S.DISPUTED}),
            S.CANCELLED,
            Actor.ADMIN,
            refunds_payment=True,
        ),
    )
}

TERMINAL_STATUSES: FrozenSet[BookingStatus] = frozenset({S.COMPLETED, S.CANCELLED, S.REJECTED, S.EXPIRED})


def resolve(current: str, action: BookingAction) -> Tuple[Transition, BookingStatus]:
    """
    Look up ``action`` from ``current``.

    Raises InvalidState if the action is not legal from ``current``.
    """
    transition = TRANSITIONS[BookingAction(action)]
    source = BookingStatus(current)
    if source not in transition.sources:
        raise InvalidState(source.value, transition.action.value)
    return transition, transition.target


def is_terminal(status: str) -> bool:
    return BookingStatus(status) in TERMINAL_STATUSES

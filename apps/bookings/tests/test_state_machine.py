"""Transition table tests; no database needed."""

import pytest

from apps.bookings.domain.state_machine import (
    TERMINAL_STATUSES,
    TRANSITIONS,
    Actor,
    BookingAction,
    BookingStatus,
    is_terminal,
    resolve,
)
from shared.domain.exceptions import InvalidState


@pytest.mark.parametrize("status", sorted(s.value for s in TERMINAL_STATUSES))
@pytest.mark.parametrize("action", list(BookingAction))
def test_no_action_leaves_a_terminal_status(status, action):
    with pytest.raises(InvalidState) as excinfo:
        resolve(status, action)

    assert excinfo.value.current == status
    assert excinfo.value.requested == action.value
    assert excinfo.value.http_status == 409


def test_happy_path_targets():
    assert resolve("pending", BookingAction.ACCEPT)[1] is BookingStatus.ACCEPTED
    assert resolve("accepted", BookingAction.REQUEST_COMPLETION)[1] is BookingStatus.PENDING_COMPLETION
    assert resolve("active", BookingAction.REQUEST_COMPLETION)[1] is BookingStatus.PENDING_COMPLETION
    assert resolve("pending_completion", BookingAction.CONFIRM_COMPLETION)[1] is BookingStatus.COMPLETED
    assert resolve("disputed", BookingAction.RESOLVE_REVOKE)[1] is BookingStatus.CANCELLED


def test_accept_is_only_legal_from_pending():
    for status in BookingStatus:
        if status is BookingStatus.PENDING:
            continue
        with pytest.raises(InvalidState):
            resolve(status.value, BookingAction.ACCEPT)


def test_payout_and_refund_flags():
    settling = {action for action, t in TRANSITIONS.items() if t.settles_payout}
    refunding = {action for action, t in TRANSITIONS.items() if t.refunds_payment}

    assert settling == {
        BookingAction.CONFIRM_COMPLETION,
        BookingAction.AUTO_COMPLETE,
        BookingAction.RESOLVE_COMPLETE,
    }
    assert refunding == {BookingAction.REJECT, BookingAction.EXPIRE, BookingAction.RESOLVE_REVOKE}


def test_actors():
    assert TRANSITIONS[BookingAction.EXPIRE].actor is Actor.SYSTEM
    assert TRANSITIONS[BookingAction.DISPUTE].actor is Actor.CLIENT
    assert TRANSITIONS[BookingAction.RESOLVE_COMPLETE].actor is Actor.ADMIN


def test_is_terminal():
    assert is_terminal("expired")
    assert not is_terminal("disputed")

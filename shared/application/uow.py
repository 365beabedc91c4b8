"""
Transaction boundary for booking and payment writes.

A ``DjangoUnitOfWork`` opens one ``transaction.atomic()`` block. Domain
events gathered while it is open are handed to the message bus from an
``on_commit`` hook, so notifications never go out for a write that was
rolled back.
"""

import logging
from typing import List

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Atomic block plus an outbox of pending events.

        with DjangoUnitOfWork() as uow:
            repo.transition(booking, BookingAction.DISPUTE, now)
            uow.collect_events(booking)

    Raising inside the block (a domain error, a failed audit write) undoes
    every row touched in it and drops the pending events.
    """

    def __init__(self):
        self._pending: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._schedule_publication()
            elif self._pending:
                logger.warning(f"Discarding {len(self._pending)} events after {exc_type.__name__}")
        finally:
            self._pending = []
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def add_event(self, event: DomainEvent):
        self._pending.append(event)

    def collect_events(self, aggregate):
        """Move recorded events off an aggregate into this unit of work."""
        recorded = aggregate.events
        if not recorded:
            return
        self._pending.extend(recorded)
        aggregate.clear_events()
        logger.debug(f"Took {len(recorded)} events from {type(aggregate).__name__} {aggregate.pk}")

    def _schedule_publication(self):
        if not self._pending:
            return
        batch = list(self._pending)
        # Nested blocks defer to the outermost commit
        transaction.on_commit(lambda: _deliver(batch))


def _deliver(events: List[DomainEvent]):
    from shared.application.message_bus import message_bus

    logger.info(f"Delivering {len(events)} domain events")
    try:
        message_bus.publish_events(events)
    except Exception:
        # The booking rows are already committed at this point
        logger.exception("Event delivery failed")

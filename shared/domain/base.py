"""
Events and value types that the booking and payment apps build on.

Models mix in ``EventRecorder`` to note what happened during a command;
the unit of work picks those events up and delivers them after commit.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """Frozen dataclass compared field by field."""


@dataclass
class DomainEvent:
    """A fact about a booking or payment, delivered once its transaction commits."""
    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc), kw_only=True)
    aggregate_id: UUID | None = field(default=None, kw_only=True)

    def to_dict(self) -> dict:
        return {
            'event_id': str(self.event_id),
            'event_type': type(self).__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id else None,
        }


class EventRecorder:
    """
    Keeps a per-instance list of pending ``DomainEvent`` objects.

    The list lives in ``__dict__`` and is created on first use, so Django
    models can mix this in without overriding ``__init__``.
    """

    def _event_buffer(self) -> List[DomainEvent]:
        return self.__dict__.setdefault('_recorded_events', [])

    def add_event(self, event: DomainEvent):
        self._event_buffer().append(event)

    def clear_events(self):
        self._event_buffer().clear()

    @property
    def events(self) -> List[DomainEvent]:
        return list(self._event_buffer())

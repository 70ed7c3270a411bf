"""
In-process ticketing store

Backs the `memory` storage backend used for local development and tests. One store instance
lives for the whole process (DI singleton); every unit of work reads and writes it directly and
journals how to undo its writes.
"""

import copy
import itertools
from typing import Dict, Set
import uuid

from ticketing_core.platform.state.keyed_lock import KeyedLock
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.entity.event_entity import Event


class InMemoryTicketingStore:
    def __init__(self) -> None:
        self.events: Dict[int, Event] = {}
        self.bookings: Dict[uuid.UUID, Booking] = {}
        self.booking_references: Set[str] = set()
        self.event_locks = KeyedLock('event')
        self._event_ids = itertools.count(1)

    def next_event_id(self) -> int:
        return next(self._event_ids)

    @staticmethod
    def snapshot(value):
        # Callers never share mutable state with the store
        return copy.deepcopy(value)

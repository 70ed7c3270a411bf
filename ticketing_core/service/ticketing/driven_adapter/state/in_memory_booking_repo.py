from typing import List, Optional
import uuid

import attrs

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.interface.i_booking_command_repo import (
    IBookingCommandRepo,
)
from ticketing_core.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    BookingReferenceConflictError,
    ConcurrentBookingUpdateError,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_store import (
    InMemoryTicketingStore,
)
from ticketing_core.service.ticketing.driven_adapter.state.undo_journal import UndoJournal


class InMemoryBookingCommandRepo(IBookingCommandRepo):
    def __init__(self, *, store: InMemoryTicketingStore, journal: UndoJournal) -> None:
        self.store = store
        self.journal = journal

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        if booking.booking_reference in self.store.booking_references:
            raise BookingReferenceConflictError(booking.booking_reference)

        self.store.bookings[booking.id] = self.store.snapshot(booking)
        self.store.booking_references.add(booking.booking_reference)

        def _forget() -> None:
            self.store.bookings.pop(booking.id, None)
            self.store.booking_references.discard(booking.booking_reference)

        self.journal.record(f'create booking {booking.id}', _forget)
        return booking

    @Logger.io
    async def update(self, *, booking: Booking) -> Booking:
        stored = self.store.bookings.get(booking.id)
        if stored is None or stored.version != booking.version:
            raise ConcurrentBookingUpdateError(booking.id)

        saved = attrs.evolve(booking, version=booking.version + 1)
        self.store.bookings[booking.id] = self.store.snapshot(saved)

        def _restore() -> None:
            self.store.bookings[booking.id] = stored

        self.journal.record(f'update booking {booking.id} to v{saved.version}', _restore)
        return saved


class InMemoryBookingQueryRepo(IBookingQueryRepo):
    def __init__(self, *, store: InMemoryTicketingStore) -> None:
        self.store = store

    def _newest_first(self, bookings: List[Booking]) -> List[Booking]:
        # UUID7 ids are time ordered
        return [
            self.store.snapshot(b)
            for b in sorted(bookings, key=lambda b: (b.created_at, b.id), reverse=True)
        ]

    @Logger.io
    async def get_by_id(self, *, booking_id: uuid.UUID) -> Optional[Booking]:
        booking = self.store.bookings.get(booking_id)
        return self.store.snapshot(booking) if booking is not None else None

    @Logger.io
    async def list_by_user(self, *, user_id: int) -> List[Booking]:
        return self._newest_first([b for b in self.store.bookings.values() if b.user_id == user_id])

    @Logger.io
    async def list_all(self) -> List[Booking]:
        return self._newest_first(list(self.store.bookings.values()))
